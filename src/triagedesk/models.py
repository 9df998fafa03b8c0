"""Summary: Domain model dataclasses for triagedesk.

Importance: Defines the analysis results and records shared across services and storage.
Alternatives: Use Pydantic models or plain dicts throughout.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any

from triagedesk.categories import UNKNOWN, normalize_categories

HIGH = "High"
MEDIUM = "Medium"
LOW = "Low"
URGENCY_LEVELS: tuple[str, ...] = (HIGH, MEDIUM, LOW)

SENTIMENTS: tuple[str, ...] = ("positive", "negative", "neutral", "urgent", "frustrated")

REVIEW_CONFIDENCE_THRESHOLD = 0.6


@dataclass(frozen=True)
class ValidationResult:
    """Summary: Errors and warnings produced by the message validator.

    Importance: Errors block analysis while warnings stay advisory.
    Alternatives: Raise on the first problem found.
    """

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class KeywordMatch:
    """A single urgency signal that contributed to a score."""

    keyword: str
    weight: int
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"keyword": self.keyword, "weight": self.weight, "type": self.type}


@dataclass(frozen=True)
class UrgencyResult:
    """Summary: Output of the urgency scorer.

    Importance: Carries the level together with the score and SLA it was derived from.
    Alternatives: Return only the level string.
    """

    level: str
    score: int
    expected_response_time: str
    matched_keywords: list[KeywordMatch] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "score": self.score,
            "expectedResponseTime": self.expected_response_time,
            "matchedKeywords": [match.to_dict() for match in self.matched_keywords],
        }


@dataclass(frozen=True)
class SentimentResult:
    """Sentiment verdict with the lexicon counts behind it."""

    sentiment: str
    positive_count: int
    negative_count: int
    urgent_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentiment": self.sentiment,
            "positiveCount": self.positive_count,
            "negativeCount": self.negative_count,
            "urgentCount": self.urgent_count,
        }


@dataclass(frozen=True)
class LanguageCandidate:
    """A language that reached its match threshold."""

    language: str
    confidence: float
    match_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "confidence": self.confidence,
            "matchCount": self.match_count,
        }


@dataclass(frozen=True)
class LanguageResult:
    """Summary: Heuristic language guess for a message.

    Importance: Flags messages that may need translation before an agent replies.
    Alternatives: Call a language identification model.
    """

    primary_language: str
    is_non_english: bool
    detected_languages: list[LanguageCandidate]
    ascii_ratio: float
    needs_translation: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "primaryLanguage": self.primary_language,
            "isNonEnglish": self.is_non_english,
            "detectedLanguages": [item.to_dict() for item in self.detected_languages],
            "asciiRatio": self.ascii_ratio,
            "needsTranslation": self.needs_translation,
        }


@dataclass(frozen=True)
class Classification:
    """Summary: Category verdict returned by a classifier collaborator.

    Importance: Gives the remote model and the local fallback one result shape.
    Alternatives: Pass provider-specific payloads downstream.
    """

    primary_category: str
    categories: list[str]
    confidence: float
    reasoning: str
    model: str
    latency_ms: int | None = None
    cached: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Summary: Serialize to the /api/triage response shape.

        Importance: Keeps the HTTP contract in one place.
        Alternatives: Let FastAPI serialize the dataclass directly.
        """

        return {
            "primaryCategory": self.primary_category,
            "categories": list(self.categories),
            "confidence": self.confidence,
            "reasoning": self.reasoning,
            "model": self.model,
            "latencyMs": self.latency_ms,
            "cached": self.cached,
        }

    @staticmethod
    def from_payload(payload: dict[str, Any], default_model: str = "unknown") -> "Classification":
        """Summary: Build a classification from a loosely-typed payload.

        Importance: Normalizes categories and fills defaults for missing fields.
        Alternatives: Validate with a strict schema and reject partial payloads.
        """

        categories = normalize_categories(
            payload.get("categories"), primary=payload.get("primaryCategory")
        )
        confidence = payload.get("confidence")
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            confidence = 0.5
        latency = payload.get("latencyMs")
        return Classification(
            primary_category=categories[0],
            categories=categories,
            confidence=min(max(float(confidence), 0.0), 1.0),
            reasoning=str(payload.get("reasoning") or "No reasoning provided."),
            model=str(payload.get("model") or default_model),
            latency_ms=int(latency) if isinstance(latency, (int, float)) else None,
            cached=bool(payload.get("cached", False)),
        )


@dataclass(frozen=True)
class AnalysisRecord:
    """Summary: One analyzed customer message, as stored in history.

    Importance: The unit the dashboard, exports, and history views are built from.
    Alternatives: Store only the raw message and recompute results on demand.
    """

    message: str
    category: str
    categories: list[str]
    confidence: float
    urgency: str
    urgency_score: int
    expected_response_time: str
    sentiment: str
    recommended_action: str
    routing_destination: str
    escalate: bool
    needs_review: bool
    pii_findings: list[str]
    profanity_findings: list[str]
    reasoning: str
    timestamp: str
    model: str
    latency_ms: int | None
    cached: bool
    language: str = "english"
    warnings: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        """Summary: Serialize to the persisted camelCase JSON layout.

        Importance: Matches the triageHistory storage format and API responses.
        Alternatives: Use dataclasses.asdict with snake_case keys.
        """

        return {
            "id": self.id,
            "message": self.message,
            "category": self.category,
            "categories": list(self.categories),
            "confidence": self.confidence,
            "urgency": self.urgency,
            "urgencyScore": self.urgency_score,
            "expectedResponseTime": self.expected_response_time,
            "sentiment": self.sentiment,
            "recommendedAction": self.recommended_action,
            "routingDestination": self.routing_destination,
            "escalate": self.escalate,
            "needsReview": self.needs_review,
            "piiFindings": list(self.pii_findings),
            "profanityFindings": list(self.profanity_findings),
            "reasoning": self.reasoning,
            "timestamp": self.timestamp,
            "model": self.model,
            "latencyMs": self.latency_ms,
            "cached": self.cached,
            "language": self.language,
            "warnings": list(self.warnings),
        }

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "AnalysisRecord":
        """Summary: Rebuild a record from its persisted JSON form.

        Importance: Tolerates older records that lack newer optional fields.
        Alternatives: Require a schema version on every stored record.
        """

        categories = normalize_categories(
            payload.get("categories"), primary=payload.get("category", UNKNOWN)
        )
        latency = payload.get("latencyMs")
        return AnalysisRecord(
            id=str(payload.get("id") or uuid.uuid4().hex),
            message=str(payload.get("message", "")),
            category=categories[0],
            categories=categories,
            confidence=float(payload.get("confidence") or 0.0),
            urgency=payload.get("urgency") if payload.get("urgency") in URGENCY_LEVELS else LOW,
            urgency_score=int(payload.get("urgencyScore") or 0),
            expected_response_time=str(payload.get("expectedResponseTime") or ""),
            sentiment=payload.get("sentiment") if payload.get("sentiment") in SENTIMENTS else "neutral",
            recommended_action=str(payload.get("recommendedAction") or ""),
            routing_destination=str(payload.get("routingDestination") or ""),
            escalate=bool(payload.get("escalate", False)),
            needs_review=bool(payload.get("needsReview", False)),
            pii_findings=list(payload.get("piiFindings") or []),
            profanity_findings=list(payload.get("profanityFindings") or []),
            reasoning=str(payload.get("reasoning") or ""),
            timestamp=str(payload.get("timestamp") or ""),
            model=str(payload.get("model") or "mock"),
            latency_ms=int(latency) if isinstance(latency, (int, float)) else None,
            cached=bool(payload.get("cached", False)),
            language=str(payload.get("language") or "english"),
            warnings=list(payload.get("warnings") or []),
        )


def needs_review(confidence: float, categories: list[str], pii_findings: list[str]) -> bool:
    """Summary: Decide whether a result should be checked by a human.

    Importance: Low confidence, multiple categories, or PII all warrant review.
    Alternatives: Let agents decide case by case.
    """

    return (
        confidence < REVIEW_CONFIDENCE_THRESHOLD
        or len(categories) > 1
        or bool(pii_findings)
    )


@dataclass(frozen=True)
class TrendPoint:
    """Message volume for one calendar day."""

    date: str
    label: str
    count: int
    high_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "label": self.label,
            "count": self.count,
            "highCount": self.high_count,
        }


@dataclass(frozen=True)
class DashboardStats:
    """Headline numbers shown on the dashboard."""

    total: int = 0
    today: int = 0
    high_urgency_percent: int = 0
    avg_per_day: int = 0
    needs_review_percent: int = 0
    escalation_rate: int = 0
    avg_confidence: int = 0
    pii_detected_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "today": self.today,
            "highUrgencyPercent": self.high_urgency_percent,
            "avgPerDay": self.avg_per_day,
            "needsReviewPercent": self.needs_review_percent,
            "escalationRate": self.escalation_rate,
            "avgConfidence": self.avg_confidence,
            "piiDetectedCount": self.pii_detected_count,
        }


@dataclass(frozen=True)
class DashboardData:
    """Summary: Aggregated dashboard view over the analysis history.

    Importance: Bundles every derived statistic from one pass over the records.
    Alternatives: Compute each widget's numbers separately.
    """

    stats: DashboardStats
    category_data: list[tuple[str, int]]
    urgency_data: dict[str, int]
    sentiment_data: dict[str, int]
    recent_high_urgency: list[AnalysisRecord]
    weekly_trend: list[TrendPoint]

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "categoryData": [{"name": name, "count": count} for name, count in self.category_data],
            "urgencyData": dict(self.urgency_data),
            "sentimentData": dict(self.sentiment_data),
            "recentHighUrgency": [record.to_dict() for record in self.recent_high_urgency],
            "weeklyTrend": [point.to_dict() for point in self.weekly_trend],
        }
