# tests/unit/store/test_unit_memory_store.py - v1
"""Tests for store/memory_store.py."""

from __future__ import annotations

import pytest

from searchcache.store.memory_store import MemoryKeyValueStore


class TestMemoryKeyValueStore:
    @pytest.mark.asyncio
    async def test_set_and_get(self):
        store = MemoryKeyValueStore()
        await store.set("k", "v")
        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_get_missing(self):
        assert await MemoryKeyValueStore().get("nope") is None

    @pytest.mark.asyncio
    async def test_overwrite(self):
        store = MemoryKeyValueStore()
        await store.set("k", "1")
        await store.set("k", "2")
        assert await store.get("k") == "2"
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_delete_missing_is_noop(self):
        store = MemoryKeyValueStore({"a": "1"})
        await store.delete("b")
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_list_keys_prefix(self):
        store = MemoryKeyValueStore({"@c_1": "x", "@c_2": "y", "@r": "z"})
        assert sorted(await store.list_keys("@c_")) == ["@c_1", "@c_2"]
        assert len(await store.list_keys()) == 3

    @pytest.mark.asyncio
    async def test_list_keys_sorted(self):
        store = MemoryKeyValueStore()
        for key in ("@c_b", "@c_c", "@c_a"):
            await store.set(key, "x")
        assert await store.list_keys("@c_") == ["@c_a", "@c_b", "@c_c"]
