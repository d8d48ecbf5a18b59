"""Durable key-value storage for history records and settings."""

from __future__ import annotations

import sqlite3
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

_SCHEMA = """
CREATE TABLE IF NOT EXISTS defaults (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL NOT NULL
);
"""

_TRUE_VALUES = {"1", "true", "yes", "on"}


class StorageError(Exception):
    """A read or write against the backing store failed."""


class KeyValueStore(ABC):
    """String values addressed by string keys."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key. Removing an absent key is not an error."""

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return value.strip().lower() in _TRUE_VALUES

    def set_bool(self, key: str, value: bool) -> None:
        self.set(key, "1" if value else "0")

    def close(self) -> None:
        pass


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class SqliteStore(KeyValueStore):
    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        try:
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_schema()
        except sqlite3.Error as e:
            raise StorageError(f"cannot open {db_path}: {e}") from e

    def _init_schema(self) -> None:
        self._conn.executescript(_SCHEMA)
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            row = self._conn.execute(
                "SELECT value FROM defaults WHERE key = ?", (key,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"read {key!r}: {e}") from e
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        try:
            self._conn.execute(
                """INSERT OR REPLACE INTO defaults (key, value, updated_at)
                   VALUES (?, ?, ?)""",
                (key, value, time.time()),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"write {key!r}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self._conn.execute("DELETE FROM defaults WHERE key = ?", (key,))
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"remove {key!r}: {e}") from e

    def keys(self) -> list[str]:
        try:
            rows = self._conn.execute(
                "SELECT key FROM defaults ORDER BY key"
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"list keys: {e}") from e
        return [r["key"] for r in rows]
