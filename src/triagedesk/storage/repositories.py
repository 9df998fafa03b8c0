"""Summary: History and settings repositories over a key-value store.

Importance: Gives the services an explicit load/save interface instead of ambient globals.
Alternatives: Read and write the key-value store from each service.

Every mutation reads the whole collection, changes it, and writes it back. Concurrent
writers are not coordinated; the last write wins.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from triagedesk.models import AnalysisRecord
from triagedesk.settings import TriageSettings
from triagedesk.storage.sqlite_store import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "triageHistory"
SETTINGS_KEY = "triageSettings"


class RecordNotFoundError(LookupError):
    """Raised when a history record id does not exist."""


def _load_json(store: KeyValueStore, key: str) -> Any:
    raw = store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed JSON stored under %s.", key)
        return None


@dataclass
class DeletedRecord:
    """Summary: A removed history record with a single-use undo.

    Importance: Lets the UI offer "undo" right after a delete.
    Alternatives: Soft-delete records with a tombstone flag.
    """

    record: AnalysisRecord
    index: int
    _restore: Callable[["DeletedRecord"], None] = field(repr=False)
    _undone: bool = field(default=False, repr=False)

    @property
    def undone(self) -> bool:
        return self._undone

    def undo(self) -> bool:
        """Summary: Re-insert the record at its original position.

        Importance: Only the first call has an effect.
        Alternatives: Keep a multi-level undo stack.
        """

        if self._undone:
            return False
        self._restore(self)
        self._undone = True
        return True


@dataclass(frozen=True)
class HistoryRepository:
    """Summary: Persists the analysis history as one JSON array.

    Importance: The single source of records for the dashboard, history views, and exports.
    Alternatives: Store one row per record in a relational table.
    """

    store: KeyValueStore

    def load_history(self) -> list[AnalysisRecord]:
        """Summary: Load every stored record, oldest first.

        Importance: Malformed or missing data reads as an empty history.
        Alternatives: Raise so the caller can repair the data.
        """

        payload = _load_json(self.store, HISTORY_KEY)
        if payload is None:
            return []
        if not isinstance(payload, list):
            logger.warning("Ignoring non-list history stored under %s.", HISTORY_KEY)
            return []
        records: list[AnalysisRecord] = []
        for item in payload:
            if not isinstance(item, dict):
                logger.warning("Skipping malformed history entry.")
                continue
            try:
                records.append(AnalysisRecord.from_dict(item))
            except (TypeError, ValueError):
                logger.warning("Skipping history entry with invalid fields.")
        return records

    def save_history(self, records: Iterable[AnalysisRecord]) -> None:
        self.store.set(HISTORY_KEY, json.dumps([record.to_dict() for record in records]))

    def append(self, record: AnalysisRecord) -> None:
        self.extend([record])

    def extend(self, records: Iterable[AnalysisRecord]) -> None:
        """Summary: Append several records in one read-modify-write.

        Importance: Bulk analysis writes its whole batch at once.
        Alternatives: Append records one by one.
        """

        added = list(records)
        if not added:
            return
        history = self.load_history()
        history.extend(added)
        self.save_history(history)
        logger.info("Appended %s record(s) to history.", len(added))

    def delete(self, record_id: str) -> DeletedRecord:
        """Summary: Remove a record by id and return an undo handle.

        Importance: Unknown ids raise LookupError so callers can report "not found".
        Alternatives: Ignore unknown ids silently.
        """

        history = self.load_history()
        for index, record in enumerate(history):
            if record.id == record_id:
                del history[index]
                self.save_history(history)
                logger.info("Deleted history record %s.", record_id)
                return DeletedRecord(record=record, index=index, _restore=self._restore)
        raise RecordNotFoundError(f"History record not found: {record_id}")

    def clear(self) -> int:
        """Remove all records and return how many were removed."""

        removed = len(self.load_history())
        self.store.remove(HISTORY_KEY)
        logger.info("Cleared %s history record(s).", removed)
        return removed

    def _restore(self, deleted: DeletedRecord) -> None:
        history = self.load_history()
        if any(record.id == deleted.record.id for record in history):
            return
        history.insert(min(deleted.index, len(history)), deleted.record)
        self.save_history(history)
        logger.info("Restored history record %s.", deleted.record.id)


@dataclass(frozen=True)
class SettingsRepository:
    """Summary: Persists template and routing overrides.

    Importance: Loading always yields complete settings merged over the defaults.
    Alternatives: Store each category's settings under its own key.
    """

    store: KeyValueStore

    def load_settings(self) -> TriageSettings:
        return TriageSettings.from_dict(_load_json(self.store, SETTINGS_KEY))

    def save_settings(self, settings: TriageSettings) -> None:
        self.store.set(SETTINGS_KEY, json.dumps(settings.to_dict()))
        logger.info("Saved triage settings.")

    def reset_settings(self) -> TriageSettings:
        """Drop stored overrides and return the defaults."""

        self.store.remove(SETTINGS_KEY)
        logger.info("Reset triage settings to defaults.")
        return TriageSettings()
