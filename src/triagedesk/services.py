"""Summary: Core application services for triagedesk.

Importance: Orchestrates validation, classification, scoring, and persistence of analyses.
Alternatives: Build a full service layer with a dependency injection framework.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable

from triagedesk.ai import with_retries
from triagedesk.categories import UNKNOWN, normalize_category
from triagedesk.classifier import ClassificationProvider, RuleBasedClassifier
from triagedesk.dashboard import compute_dashboard
from triagedesk.detectors import detect_language, detect_pii, detect_profanity
from triagedesk.export import history_to_csv, history_to_json
from triagedesk.models import AnalysisRecord, Classification, DashboardData, needs_review
from triagedesk.recommendations import (
    get_recommended_action,
    get_routing_destination,
    should_escalate,
)
from triagedesk.sentiment import extract_sentiment
from triagedesk.settings import TriageSettings
from triagedesk.storage.repositories import (
    DeletedRecord,
    HistoryRepository,
    SettingsRepository,
)
from triagedesk.urgency import score_urgency
from triagedesk.validation import MessageValidationError, validate_message

logger = logging.getLogger(__name__)

DEFAULT_BULK_LIMIT = 50
EXPORT_FORMATS: tuple[str, ...] = ("csv", "json")


class BatchSizeError(ValueError):
    """Raised when a bulk batch is empty or larger than the configured limit."""


class ClassificationCache:
    """Summary: Time-limited cache of classifications keyed by normalized message.

    Importance: Repeated messages skip the model call for the TTL window.
    Alternatives: Use an external cache such as Redis.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Classification]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(message: str) -> str:
        return message.strip().lower()

    def get(self, message: str) -> Classification | None:
        key = self.key(message)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, classification = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
        return classification

    def put(self, message: str, classification: Classification) -> None:
        with self._lock:
            self._entries[self.key(message)] = (
                self._clock() + self._ttl_seconds,
                classification,
            )


@dataclass(frozen=True)
class ClassificationGateway:
    """Summary: Classifies messages through cache, retries, and the rule-based fallback.

    Importance: Always returns a complete classification so callers never see a failure.
    Alternatives: Surface classifier errors to the user.
    """

    primary: ClassificationProvider
    fallback: RuleBasedClassifier = field(default_factory=RuleBasedClassifier)
    cache: ClassificationCache | None = None
    retries: int = 2
    backoff_ms: int = 300
    sleep: Callable[[float], None] = time.sleep
    clock: Callable[[], float] = time.perf_counter

    def classify(self, message: str) -> Classification:
        """Summary: Classify a message, falling back to local rules on any failure.

        Importance: Only successful primary results are cached; fallbacks are not.
        Alternatives: Cache fallbacks too and risk pinning degraded results.
        """

        if self.cache is not None:
            hit = self.cache.get(message)
            if hit is not None:
                logger.debug("Classification cache hit.")
                return replace(hit, cached=True)

        started = self.clock()
        try:
            result = with_retries(
                lambda: self.primary.classify(message),
                self.retries,
                self.backoff_ms,
                self.sleep,
            )
        except Exception as exc:
            logger.warning("Classifier failed, using rule-based fallback: %s", exc)
            fallback = self.fallback.classify(message)
            return replace(fallback, latency_ms=self._elapsed_ms(started), cached=False)

        result = replace(result, latency_ms=self._elapsed_ms(started), cached=False)
        if self.cache is not None:
            self.cache.put(message, result)
        return result

    def _elapsed_ms(self, started: float) -> int:
        return int((self.clock() - started) * 1000)


def compose_record(
    message: str,
    classification: Classification,
    settings: TriageSettings,
    warnings: list[str] | None = None,
    now: datetime | None = None,
) -> AnalysisRecord:
    """Summary: Combine a classification with the local detectors into one record.

    Importance: The single place where urgency, routing, escalation, and review meet.
    Alternatives: Let each caller assemble records itself.
    """

    urgency = score_urgency(message)
    sentiment = extract_sentiment(message)
    pii_findings = detect_pii(message)
    categories = list(classification.categories) or [UNKNOWN]
    moment = now or datetime.now(timezone.utc)
    return AnalysisRecord(
        message=message,
        category=categories[0],
        categories=categories,
        confidence=classification.confidence,
        urgency=urgency.level,
        urgency_score=urgency.score,
        expected_response_time=urgency.expected_response_time,
        sentiment=sentiment.sentiment,
        recommended_action=get_recommended_action(categories, urgency.level, settings),
        routing_destination=get_routing_destination(categories, settings),
        escalate=should_escalate(categories[0], urgency.level, message),
        needs_review=needs_review(classification.confidence, categories, pii_findings),
        pii_findings=pii_findings,
        profanity_findings=detect_profanity(message),
        reasoning=classification.reasoning,
        timestamp=moment.isoformat(),
        model=classification.model,
        latency_ms=classification.latency_ms,
        cached=classification.cached,
        language=detect_language(message).primary_language,
        warnings=list(warnings or []),
    )


@dataclass(frozen=True)
class TriageService:
    """Summary: Runs the full single-message analysis pipeline.

    Importance: Validates, classifies, scores, and records one customer message.
    Alternatives: Run each stage from the UI layer.
    """

    history: HistoryRepository
    settings: SettingsRepository
    gateway: ClassificationGateway

    def preflight(self, message: str) -> list[str]:
        """Summary: Validate a message and collect advisory warnings.

        Importance: Errors raise; spam, character-mix, PII, and profanity only warn.
        Alternatives: Treat every warning as a blocking error.
        """

        result = validate_message(message)
        if not result.ok:
            raise MessageValidationError(result.errors)
        return [*result.warnings, *detect_pii(message), *detect_profanity(message)]

    def analyze(
        self,
        message: str,
        confirm: Callable[[list[str]], bool] | None = None,
        save: bool = True,
    ) -> AnalysisRecord | None:
        """Summary: Analyze one message and append it to history.

        Importance: Returns None when ``confirm`` declines the warnings.
        Alternatives: Always proceed and attach warnings to the result.
        """

        warnings = self.preflight(message)
        if warnings and confirm is not None and not confirm(warnings):
            logger.info("Analysis cancelled after %s warning(s).", len(warnings))
            return None
        record = self.build_record(message, self.settings.load_settings())
        if save:
            self.history.append(record)
        return record

    def build_record(self, message: str, settings: TriageSettings) -> AnalysisRecord:
        """Summary: Validate and analyze a message without persisting it.

        Importance: Shared by single and bulk analysis.
        Alternatives: Duplicate the pipeline in the bulk path.
        """

        result = validate_message(message)
        if not result.ok:
            raise MessageValidationError(result.errors)
        classification = self.gateway.classify(message.strip())
        return compose_record(message, classification, settings, warnings=result.warnings)


@dataclass(frozen=True)
class BulkItem:
    """Summary: Outcome for one message of a bulk batch.

    Importance: Carries either a result or an item-level error, never both.
    Alternatives: Abort the batch on the first failure.
    """

    index: int
    record: AnalysisRecord | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.record is None:
            return {"index": self.index, "error": self.error}
        return {"index": self.index, **self.record.to_dict()}


@dataclass(frozen=True)
class BulkTriageService:
    """Summary: Analyzes batches of messages concurrently.

    Importance: Lets agents triage a pasted backlog in one step.
    Alternatives: Analyze messages sequentially.
    """

    triage: TriageService
    limit: int = DEFAULT_BULK_LIMIT

    def check_batch(self, messages: list[Any]) -> None:
        """Reject empty or oversized batches before any message is processed."""

        if not messages:
            raise BatchSizeError("At least one message is required.")
        if len(messages) > self.limit:
            raise BatchSizeError(f"A batch may contain at most {self.limit} messages.")

    def analyze_batch(self, messages: list[Any], save: bool = True) -> list[BulkItem]:
        """Summary: Analyze every message and append the successes to history.

        Importance: Per-item failures are reported in place and never abort the batch.
        Alternatives: Require every message to be valid up front.
        """

        self.check_batch(messages)
        settings = self.triage.settings.load_settings()

        def analyze_one(index: int, message: Any) -> BulkItem:
            if not isinstance(message, str):
                return BulkItem(index=index, error="Message must be a string.")
            try:
                record = self.triage.build_record(message, settings)
            except MessageValidationError as exc:
                return BulkItem(index=index, error="; ".join(exc.errors))
            return BulkItem(index=index, record=record)

        with ThreadPoolExecutor(max_workers=len(messages)) as pool:
            items = list(pool.map(analyze_one, range(len(messages)), messages))

        records = [item.record for item in items if item.record is not None]
        if save:
            self.triage.history.extend(records)
        logger.info(
            "Bulk analysis finished: %s analyzed, %s failed.",
            len(records),
            len(items) - len(records),
        )
        return items

    def classify_batch(self, messages: list[Any]) -> list[dict[str, Any]]:
        """Summary: Classify a batch without scoring or recording it.

        Importance: Backs the bulk classification endpoint.
        Alternatives: Make clients call the single endpoint in a loop.
        """

        self.check_batch(messages)
        gateway = self.triage.gateway

        def classify_one(index: int, message: Any) -> dict[str, Any]:
            if not isinstance(message, str) or not message.strip():
                return {"index": index, "error": "Message is required."}
            return {"index": index, **gateway.classify(message).to_payload()}

        with ThreadPoolExecutor(max_workers=len(messages)) as pool:
            return list(pool.map(classify_one, range(len(messages)), messages))


@dataclass(frozen=True)
class HistoryService:
    """Summary: Lists, deletes, clears, and exports analysis history.

    Importance: Backs the history views of the CLI and API.
    Alternatives: Query the repository directly from each interface.
    """

    history: HistoryRepository

    def list_records(self, category: str | None = None, limit: int | None = None) -> list[AnalysisRecord]:
        """Summary: Return records newest first, optionally filtered by category.

        Importance: Filtering matches any of a record's categories.
        Alternatives: Filter on the primary category only.
        """

        records = list(reversed(self.history.load_history()))
        if category:
            wanted = normalize_category(category)
            records = [record for record in records if wanted in record.categories]
        if limit is not None:
            records = records[:limit]
        return records

    def delete(self, record_id: str) -> DeletedRecord:
        return self.history.delete(record_id)

    def clear(self) -> int:
        return self.history.clear()

    def export(self, fmt: str = "csv") -> str:
        """Summary: Render the history as CSV or JSON, oldest first.

        Importance: Supports spreadsheet and tooling handoff.
        Alternatives: Offer only one format.
        """

        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")
        records = self.history.load_history()
        if fmt == "csv":
            return history_to_csv(records)
        return history_to_json(records)


@dataclass(frozen=True)
class SettingsService:
    """Summary: Reads and updates recommendation and routing settings.

    Importance: Changes take effect on the next analysis.
    Alternatives: Require a restart to pick up new settings.
    """

    settings: SettingsRepository

    def get(self) -> TriageSettings:
        return self.settings.load_settings()

    def update(self, payload: Any) -> TriageSettings:
        """Replace the stored overrides with ``payload`` merged over the defaults."""

        updated = TriageSettings.from_dict(payload)
        self.settings.save_settings(updated)
        return updated

    def set_template(self, category: str, default: str, high: str | None = None) -> TriageSettings:
        updated = self.get().with_template(category, default, high)
        self.settings.save_settings(updated)
        return updated

    def set_routing(self, category: str, team: str) -> TriageSettings:
        updated = self.get().with_routing(category, team)
        self.settings.save_settings(updated)
        return updated

    def reset(self) -> TriageSettings:
        return self.settings.reset_settings()


@dataclass(frozen=True)
class DashboardService:
    """Summary: Builds the dashboard view from stored history.

    Importance: Keeps aggregation pure and storage access here.
    Alternatives: Persist precomputed aggregates.
    """

    history: HistoryRepository

    def dashboard(self, now: datetime | None = None) -> DashboardData:
        return compute_dashboard(self.history.load_history(), now=now)
