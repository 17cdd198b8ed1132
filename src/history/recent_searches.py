# src/history/recent_searches.py - v2
"""Bounded, deduplicated, TTL-pruned list of recent searches.

The whole list lives under a single store key and is rewritten on every
change. Read-modify-write sequences are serialized by an asyncio.Lock so two
overlapping record() calls cannot lose each other's update, whatever the
store adapter does between awaits.

Ordering is most-recently-used first: re-searching a query moves it to the
front with a fresh timestamp and count. There is no secondary sort.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from pydantic import ValidationError

from searchcache.cache.fingerprint import normalize_query
from searchcache.core.clock import Clock, utc_now
from searchcache.history.models import RecentSearchEntry, RecentSearchList
from searchcache.store.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_KEY = "@recent_searches"
DEFAULT_MAX_ENTRIES = 10
DEFAULT_TTL = timedelta(days=7)


class RecentSearchHistory:
    """Recent-search list persisted in a durable key-value store.

    Fail-open: on storage errors list() returns [] and the mutating
    operations do nothing. No method raises.
    """

    def __init__(
        self,
        store: BaseKeyValueStore,
        key: str = DEFAULT_KEY,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl: timedelta = DEFAULT_TTL,
        casefold: bool = False,
        clock: Clock = utc_now,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._store = store
        self._key = key
        self._max_entries = max_entries
        self._ttl = ttl
        self._casefold = casefold
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    async def record(self, query: str, result_count: int) -> None:
        """Move ``query`` to the front with the given result count."""
        term = query.strip()
        if not term:
            return
        match = self._match_key(term)
        async with self._lock:
            try:
                entries = await self._load()
                entries = [e for e in entries if self._match_key(e.query) != match]
                entries.insert(
                    0,
                    RecentSearchEntry(
                        query=term,
                        last_searched_at=self._clock(),
                        result_count=max(result_count, 0),
                    ),
                )
                await self._save(entries[: self._max_entries])
            except Exception as e:
                logger.warning("Could not record recent search %r: %s", term, e)
                return
        logger.debug("Recent search recorded: %r (%d results)", term, result_count)

    async def list(self) -> list[RecentSearchEntry]:
        """Return non-expired entries, most recent first."""
        async with self._lock:
            try:
                entries = await self._load()
                now = self._clock()
                valid = [e for e in entries if now - e.last_searched_at <= self._ttl]
            except Exception as e:
                logger.warning("Could not load recent searches: %s", e)
                return []

            if len(valid) != len(entries):
                try:
                    await self._save(valid)
                    logger.info(
                        "Pruned %d expired recent searches", len(entries) - len(valid)
                    )
                except Exception as e:
                    logger.warning("Could not persist pruned recent searches: %s", e)
            return valid

    async def remove(self, query: str) -> None:
        """Remove the entry matching ``query``; no-op if absent."""
        match = self._match_key(query.strip())
        async with self._lock:
            try:
                entries = await self._load()
                kept = [e for e in entries if self._match_key(e.query) != match]
                if len(kept) != len(entries):
                    await self._save(kept)
            except Exception as e:
                logger.warning("Could not remove recent search %r: %s", query, e)

    async def clear(self) -> None:
        """Empty the history."""
        async with self._lock:
            try:
                await self._store.delete(self._key)
            except Exception as e:
                logger.warning("Could not clear recent searches: %s", e)
                return
        logger.info("Recent search history cleared")

    def _match_key(self, query: str) -> str:
        return normalize_query(query, self._casefold)

    async def _load(self) -> list[RecentSearchEntry]:
        raw = await self._store.get(self._key)
        if not raw:
            return []
        try:
            return RecentSearchList.validate_json(raw)
        except ValidationError as e:
            logger.warning("Ignoring undecodable recent-search list: %s", e)
            return []

    async def _save(self, entries: list[RecentSearchEntry]) -> None:
        await self._store.set(self._key, RecentSearchList.dump_json(entries).decode("utf-8"))
