"""Summary: Key-value persistence for triage history and settings.

Importance: Provides a local-first store behind the history and settings repositories.
Alternatives: Write JSON files directly or use an external database.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class KeyValueStore(ABC):
    """Summary: String key to string value storage interface.

    Importance: Repositories depend on this instead of a concrete backend.
    Alternatives: Let repositories talk to SQLite directly.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored."""


class SqliteKeyValueStore(KeyValueStore):
    """Summary: SQLite-backed key-value store.

    Importance: Enables local persistence with no extra dependencies.
    Alternatives: Use Redis or a document database.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = Path(db_path)

    def initialize(self) -> None:
        """Summary: Create the key-value table if it does not exist.

        Importance: Ensures the store is ready before the first read.
        Alternatives: Run migrations using a dedicated migration tool.
        """

        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connection() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            connection.commit()

    def get(self, key: str) -> str | None:
        with self._connection() as connection:
            row = connection.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return str(row[0]) if row else None

    def set(self, key: str, value: str) -> None:
        with self._connection() as connection:
            connection.execute(
                """
                INSERT INTO kv (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )
            connection.commit()

    def remove(self, key: str) -> None:
        with self._connection() as connection:
            connection.execute("DELETE FROM kv WHERE key = ?", (key,))
            connection.commit()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Summary: Context manager for SQLite connections.

        Importance: Ensures connections are closed cleanly after use.
        Alternatives: Keep a single long-lived connection.
        """

        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
        finally:
            connection.close()
