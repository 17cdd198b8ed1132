# tests/conftest.py - v2
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory store, a store that always fails, a controllable
clock, a fake search API client and a manual (virtual-time) scheduler.
No external services: no network, no redis.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from searchcache.cache.result_cache import ResultCache
from searchcache.client.base_client import BaseSearchClient, SearchApiError
from searchcache.core.models import SearchMeta, SearchResponse, SuggestionItem
from searchcache.history.recent_searches import RecentSearchHistory
from searchcache.search.orchestrator import SearchOrchestrator
from searchcache.search.scheduler import ManualScheduler
from searchcache.store.base_store import BaseKeyValueStore, StoreError
from searchcache.store.memory_store import MemoryKeyValueStore


# === HELPERS ===


class MutableClock:
    """Clock whose time only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class FailingStore(BaseKeyValueStore):
    """Store whose every operation raises."""

    def __init__(self) -> None:
        self.calls = 0

    async def get(self, key: str) -> str | None:
        self.calls += 1
        raise StoreError("disk unavailable")

    async def set(self, key: str, value: str) -> None:
        self.calls += 1
        raise StoreError("disk full")

    async def delete(self, key: str) -> None:
        self.calls += 1
        raise StoreError("disk unavailable")

    async def list_keys(self, prefix: str = "") -> list[str]:
        self.calls += 1
        raise StoreError("disk unavailable")


class FakeSearchClient(BaseSearchClient):
    """Scriptable search API.

    By default answers immediately from ``results`` / ``suggestions``.
    With ``manual=True`` every call parks on a future that the test
    resolves explicitly via ``resolve_search`` / ``fail_search``.
    """

    def __init__(self, manual: bool = False) -> None:
        self.manual = manual
        self.results: dict[str, list[dict[str, Any]]] = {}
        self.suggestions: dict[str, list[SuggestionItem]] = {}
        self.search_error: Exception | None = None
        self.suggestion_error: Exception | None = None
        self.search_calls: list[tuple[str, dict[str, Any]]] = []
        self.suggestion_calls: list[tuple[str, int]] = []
        self._pending_search: dict[str, asyncio.Future[SearchResponse]] = {}
        self._pending_suggest: dict[str, asyncio.Future[list[SuggestionItem]]] = {}

    async def get_suggestions(self, query: str, limit: int = 10) -> list[SuggestionItem]:
        self.suggestion_calls.append((query, limit))
        if self.manual:
            fut: asyncio.Future[list[SuggestionItem]] = asyncio.get_running_loop().create_future()
            self._pending_suggest[query] = fut
            return await fut
        if self.suggestion_error is not None:
            raise self.suggestion_error
        return list(self.suggestions.get(query, []))[:limit]

    async def search(self, query: str, filters: dict[str, Any] | None = None) -> SearchResponse:
        self.search_calls.append((query, dict(filters or {})))
        if self.manual:
            fut: asyncio.Future[SearchResponse] = asyncio.get_running_loop().create_future()
            self._pending_search[query] = fut
            return await fut
        if self.search_error is not None:
            raise self.search_error
        items = self.results.get(query, [])
        return SearchResponse(
            results=list(items),
            meta=SearchMeta(query=query, total_results=len(items), search_time_ms=12),
        )

    def resolve_search(self, query: str, items: list[dict[str, Any]]) -> None:
        self._pending_search.pop(query).set_result(
            SearchResponse(results=items, meta=SearchMeta(query=query, total_results=len(items)))
        )

    def fail_search(self, query: str, message: str = "HTTP 503") -> None:
        self._pending_search.pop(query).set_exception(SearchApiError(message, status_code=503))

    def resolve_suggestions(self, query: str, items: list[SuggestionItem]) -> None:
        self._pending_suggest.pop(query).set_result(items)


async def _settle(rounds: int = 10) -> None:
    """Let scheduled tasks run until they block on something external."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# === FIXTURES ===


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def failing_store() -> FailingStore:
    return FailingStore()


@pytest.fixture
def result_cache(memory_store: MemoryKeyValueStore, clock: MutableClock) -> ResultCache:
    return ResultCache(memory_store, ttl=timedelta(minutes=30), clock=clock)


@pytest.fixture
def history(memory_store: MemoryKeyValueStore, clock: MutableClock) -> RecentSearchHistory:
    return RecentSearchHistory(memory_store, max_entries=10, ttl=timedelta(days=7), clock=clock)


@pytest.fixture
def fake_client() -> FakeSearchClient:
    return FakeSearchClient()


@pytest.fixture
def manual_client() -> FakeSearchClient:
    return FakeSearchClient(manual=True)


@pytest.fixture
def settle():
    return _settle


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def orchestrator(
    fake_client: FakeSearchClient,
    result_cache: ResultCache,
    history: RecentSearchHistory,
    scheduler: ManualScheduler,
) -> SearchOrchestrator:
    return SearchOrchestrator(
        fake_client,
        result_cache,
        history,
        scheduler,
        surface_id="test",
        filters={"city": "Douala", "sort": "popular", "page": 1, "limit": 20},
    )


@pytest.fixture
def shoe_suggestions() -> list[SuggestionItem]:
    return [
        SuggestionItem(type="product", text="Running shoes", value="p-101"),
        SuggestionItem(type="category", text="Shoes", value="c-7"),
        SuggestionItem(type="enterprise", text="Shoe Palace", value="e-3"),
    ]
