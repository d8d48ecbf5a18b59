"""Tests for key-value storage backends."""

from __future__ import annotations

from pathlib import Path

import pytest

from pagekeeper.history.storage import MemoryStore, SqliteStore, StorageError


class TestMemoryStore:
    def test_get_missing(self):
        assert MemoryStore().get("nope") is None

    def test_set_and_get(self):
        store = MemoryStore()
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_remove_missing_is_noop(self):
        store = MemoryStore({"a": "1"})
        store.remove("b")
        assert store.keys() == ["a"]

    def test_bools(self):
        store = MemoryStore()
        assert store.get_bool("flag") is False
        assert store.get_bool("flag", default=True) is True
        store.set_bool("flag", True)
        assert store.get("flag") == "1"
        assert store.get_bool("flag") is True

    def test_bool_parsing(self):
        store = MemoryStore({"a": "true", "b": "YES", "c": "0", "d": "garbage"})
        assert store.get_bool("a")
        assert store.get_bool("b")
        assert not store.get_bool("c")
        assert not store.get_bool("d")


class TestSqliteStore:
    def test_set_and_get(self, sqlite_store: SqliteStore):
        sqlite_store.set("history", "[]")
        assert sqlite_store.get("history") == "[]"

    def test_overwrite(self, sqlite_store: SqliteStore):
        sqlite_store.set("latest", "a")
        sqlite_store.set("latest", "b")
        assert sqlite_store.get("latest") == "b"
        assert sqlite_store.keys() == ["latest"]

    def test_remove(self, sqlite_store: SqliteStore):
        sqlite_store.set("latest", "a")
        sqlite_store.remove("latest")
        assert sqlite_store.get("latest") is None

    def test_persists_across_connections(self, tmp_path: Path):
        path = tmp_path / "kv.db"
        first = SqliteStore(path)
        first.set("latest", "abc")
        first.close()

        second = SqliteStore(path)
        assert second.get("latest") == "abc"
        second.close()

    def test_unicode_values(self, sqlite_store: SqliteStore):
        sqlite_store.set("name", "読書メモ")
        assert sqlite_store.get("name") == "読書メモ"

    def test_closed_store_raises_storage_error(self, tmp_path: Path):
        store = SqliteStore(tmp_path / "kv.db")
        store.close()
        with pytest.raises(StorageError):
            store.set("k", "v")
        with pytest.raises(StorageError):
            store.get("k")
        with pytest.raises(StorageError):
            store.keys()

    def test_unopenable_path(self, tmp_path: Path):
        with pytest.raises(StorageError):
            SqliteStore(tmp_path / "missing-dir" / "kv.db")
