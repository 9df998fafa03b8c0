"""Summary: Tests for the key-value store and repositories.

Importance: Validates persistence of history and settings across reloads.
Alternatives: Use in-memory storage only.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

from triagedesk.classifier import RuleBasedClassifier
from triagedesk.models import AnalysisRecord
from triagedesk.recommendations import get_recommended_action
from triagedesk.services import compose_record
from triagedesk.settings import TriageSettings
from triagedesk.storage.repositories import (
    HISTORY_KEY,
    SETTINGS_KEY,
    HistoryRepository,
    SettingsRepository,
)
from triagedesk.storage.sqlite_store import SqliteKeyValueStore

NOW = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)


def _store(tmp_path: Path) -> SqliteKeyValueStore:
    store = SqliteKeyValueStore(str(tmp_path / "nested" / "test.db"))
    store.initialize()
    return store


def _record(message: str, record_id: str) -> AnalysisRecord:
    classification = RuleBasedClassifier().classify(message)
    return replace(compose_record(message, classification, TriageSettings(), now=NOW), id=record_id)


def test_key_value_store_round_trip(tmp_path: Path) -> None:
    """Summary: Values can be set, replaced, read back, and removed.

    Importance: Repositories rely on upsert semantics.
    Alternatives: Insert a new row for every write.
    """

    store = _store(tmp_path)
    assert store.get("missing") is None
    store.set("key", "one")
    store.set("key", "two")
    assert store.get("key") == "two"
    store.remove("key")
    store.remove("key")
    assert store.get("key") is None


def test_history_persists_across_instances(tmp_path: Path) -> None:
    store = _store(tmp_path)
    HistoryRepository(store).append(_record("I forgot my password again", "a"))
    reloaded = HistoryRepository(SqliteKeyValueStore(str(tmp_path / "nested" / "test.db")))
    records = reloaded.load_history()
    assert [record.id for record in records] == ["a"]
    assert records[0].category == "Account Access"
    assert records[0] == _record("I forgot my password again", "a")


def test_delete_and_undo_restores_position(tmp_path: Path) -> None:
    """Summary: Undo re-inserts a deleted record at its original index.

    Importance: Accidental deletes are fully reversible once.
    Alternatives: Append restored records at the end.
    """

    repository = HistoryRepository(_store(tmp_path))
    repository.extend(
        [
            _record("Where is my refund for March?", "a"),
            _record("The export button is not working", "b"),
            _record("Could you add dark mode please?", "c"),
        ]
    )
    deleted = repository.delete("b")
    assert [record.id for record in repository.load_history()] == ["a", "c"]
    assert deleted.undo() is True
    assert [record.id for record in repository.load_history()] == ["a", "b", "c"]
    assert deleted.undo() is False
    assert [record.id for record in repository.load_history()] == ["a", "b", "c"]


def test_undo_after_history_shrinks_appends_at_end(tmp_path: Path) -> None:
    repository = HistoryRepository(_store(tmp_path))
    repository.extend([_record("Where is my refund for March?", "a"), _record("Another refund question", "b")])
    deleted = repository.delete("b")
    repository.delete("a")
    deleted.undo()
    assert [record.id for record in repository.load_history()] == ["b"]


def test_delete_unknown_id_raises(tmp_path: Path) -> None:
    repository = HistoryRepository(_store(tmp_path))
    with pytest.raises(LookupError):
        repository.delete("missing")


def test_clear_reports_removed_count(tmp_path: Path) -> None:
    repository = HistoryRepository(_store(tmp_path))
    repository.extend([_record("Where is my refund for March?", "a"), _record("Another refund question", "b")])
    assert repository.clear() == 2
    assert repository.load_history() == []
    assert repository.clear() == 0


def test_malformed_history_reads_as_empty(tmp_path: Path) -> None:
    """Summary: Corrupt stored JSON never breaks loading.

    Importance: The app keeps working after a bad manual edit.
    Alternatives: Raise and force the user to repair storage.
    """

    store = _store(tmp_path)
    store.set(HISTORY_KEY, "{not json")
    assert HistoryRepository(store).load_history() == []
    store.set(HISTORY_KEY, '{"an": "object"}')
    assert HistoryRepository(store).load_history() == []
    store.set(HISTORY_KEY, '[1, "two", {"id": "x", "message": "Hello there friend", "category": "Outage"}]')
    records = HistoryRepository(store).load_history()
    assert [record.id for record in records] == ["x"]
    assert records[0].category == "Outage"


def test_history_entries_with_invalid_fields_are_skipped(tmp_path: Path) -> None:
    """Summary: A stored record with wrongly typed fields is dropped, not fatal.

    Importance: One bad entry must not block new analyses or the dashboard.
    Alternatives: Coerce every field and keep the entry.
    """

    store = _store(tmp_path)
    store.set(
        HISTORY_KEY,
        '[{"id": "a", "message": "hello there", "confidence": "high"},'
        ' {"id": "b", "message": "hello there", "urgencyScore": "x"},'
        ' {"id": "c", "message": "hello there", "piiFindings": 5},'
        ' {"id": "d", "message": "hello there", "sentiment": "ecstatic"}]',
    )
    repository = HistoryRepository(store)
    records = repository.load_history()
    assert [record.id for record in records] == ["d"]
    assert records[0].sentiment == "neutral"
    repository.append(records[0])
    assert len(repository.load_history()) == 2


def test_settings_save_load_and_reset(tmp_path: Path) -> None:
    store = _store(tmp_path)
    repository = SettingsRepository(store)
    assert repository.load_settings() == TriageSettings()
    updated = TriageSettings().with_template("Billing Issue", "Check Stripe first")
    repository.save_settings(updated)
    loaded = SettingsRepository(store).load_settings()
    assert loaded == updated
    assert get_recommended_action(["Billing Issue"], "Low", loaded) == "Check Stripe first"
    assert repository.reset_settings() == TriageSettings()
    assert store.get(SETTINGS_KEY) is None


def test_malformed_settings_fall_back_to_defaults(tmp_path: Path) -> None:
    store = _store(tmp_path)
    store.set(SETTINGS_KEY, "[[[")
    assert SettingsRepository(store).load_settings() == TriageSettings()
