# tests/unit/store/test_unit_store_factory.py - v1
"""Tests for store/store_factory.py."""

from __future__ import annotations

import pytest

from searchcache.config.settings import Settings
from searchcache.store.json_store import JsonKeyValueStore
from searchcache.store.memory_store import MemoryKeyValueStore
from searchcache.store.sqlite_store import SqliteKeyValueStore
from searchcache.store.store_factory import create_store


class TestCreateStore:
    def test_memory_backend(self):
        s = Settings(_env_file=None, store_backend="memory")
        assert isinstance(create_store(s), MemoryKeyValueStore)

    def test_json_backend(self, tmp_path):
        s = Settings(_env_file=None, store_backend="json", store_root=tmp_path)
        assert isinstance(create_store(s), JsonKeyValueStore)

    def test_sqlite_backend(self, tmp_path):
        s = Settings(_env_file=None, store_backend="sqlite", store_root=tmp_path)
        store = create_store(s)
        assert isinstance(store, SqliteKeyValueStore)
        assert (tmp_path / "searchcache.db").exists()

    def test_redis_missing_url(self):
        s = Settings(_env_file=None, store_backend="redis", store_redis_url="")
        with pytest.raises(ValueError, match="STORE_REDIS_URL"):
            create_store(s)

    def test_unsupported_backend(self):
        """Settings validation rejects invalid backends before factory is reached."""
        with pytest.raises(ValueError):
            Settings(_env_file=None, store_backend="nonexistent")
