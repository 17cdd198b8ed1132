# src/cache/result_cache.py - v1
"""TTL-bounded result cache over a durable key-value store.

Maps a (query, filter-set) fingerprint to the last result page fetched for
it. Expiry is lazy: an entry older than the TTL is deleted when read.
clean_expired() is a storage-hygiene sweep and is never needed for
correctness.

Every public method is fail-open: store or decode errors are logged and
degrade to a miss (get) or a no-op (put, delete, sweep). Caching is an
optimization, so nothing here ever raises into the caller.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Sequence

from pydantic import ValidationError

from searchcache.cache.fingerprint import compute_fingerprint
from searchcache.cache.models import CacheEntry, CacheStats
from searchcache.core.clock import Clock, utc_now
from searchcache.core.models import FilterSet, ResultItem, SearchMeta
from searchcache.store.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(minutes=30)
DEFAULT_KEY_PREFIX = "@search_cache_"


class ResultCache:
    """Fingerprint-addressed search result cache.

    Args:
        store: Durable key-value store shared with other components.
        ttl: Maximum entry age. An entry exactly ``ttl`` old is still fresh.
        key_prefix: Store key prefix reserved for cache entries.
        casefold: Case-fold queries before fingerprinting.
        clock: Returns the current aware datetime (injectable for tests).
    """

    def __init__(
        self,
        store: BaseKeyValueStore,
        ttl: timedelta = DEFAULT_TTL,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        casefold: bool = False,
        clock: Clock = utc_now,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._prefix = key_prefix
        self._casefold = casefold
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def key_for(self, query: str, filters: FilterSet | None = None) -> str:
        """Store key addressing (query, filters)."""
        return self._prefix + compute_fingerprint(query, filters, self._casefold)

    async def put(
        self,
        query: str,
        filters: FilterSet | None,
        results: Sequence[ResultItem],
        meta: SearchMeta | None = None,
    ) -> None:
        """Store a result page, overwriting any entry for the same fingerprint."""
        key = self.key_for(query, filters)
        try:
            entry = CacheEntry(
                fingerprint=key[len(self._prefix):],
                query=query,
                filters=dict(filters or {}),
                results=list(results),
                meta=meta,
                stored_at=self._clock(),
            )
            await self._store.set(key, entry.model_dump_json())
        except Exception as e:
            logger.warning("Cache write failed for %r: %s", query, e)
            return
        logger.debug("Cached %d results for %r", len(entry.results), query)

    async def get(
        self, query: str, filters: FilterSet | None = None
    ) -> CacheEntry | None:
        """Return the fresh entry for (query, filters), or None."""
        key = self.key_for(query, filters)
        try:
            raw = await self._store.get(key)
        except Exception as e:
            logger.warning("Cache read failed for %r: %s", query, e)
            return None
        if raw is None:
            return None

        entry = await self._decode(key, raw)
        if entry is None:
            return None

        if self.is_expired(entry):
            await self._safe_delete(key)
            logger.info("Expired cache entry removed for %r", query)
            return None

        logger.info("Cache hit for %r", query)
        return entry

    def is_expired(self, entry: CacheEntry) -> bool:
        """True when the entry is strictly older than the TTL."""
        return self._clock() - entry.stored_at > self._ttl

    async def invalidate_all(self) -> int:
        """Drop every cache entry. Returns the number of keys removed."""
        try:
            keys = await self._store.list_keys(self._prefix)
        except Exception as e:
            logger.warning("Cache invalidation failed: %s", e)
            return 0
        removed = 0
        for key in keys:
            if await self._safe_delete(key):
                removed += 1
        logger.info("Cache invalidated: %d entries removed", removed)
        return removed

    async def clean_expired(self) -> int:
        """Delete expired or undecodable entries. Returns the number removed."""
        try:
            keys = await self._store.list_keys(self._prefix)
        except Exception as e:
            logger.warning("Cache sweep failed: %s", e)
            return 0

        cleaned = 0
        for key in keys:
            try:
                raw = await self._store.get(key)
            except Exception as e:
                logger.warning("Cache sweep could not read %s: %s", key, e)
                continue
            if raw is None:
                continue
            entry = await self._decode(key, raw)
            # _decode already dropped corrupt rows
            if entry is None:
                cleaned += 1
                continue
            if self.is_expired(entry) and await self._safe_delete(key):
                cleaned += 1

        if cleaned:
            logger.info("Cache sweep removed %d expired entries", cleaned)
        return cleaned

    async def get_stats(self) -> CacheStats:
        """Count entries and approximate their stored size."""
        try:
            keys = await self._store.list_keys(self._prefix)
            total_bytes = 0
            for key in keys:
                raw = await self._store.get(key)
                if raw:
                    total_bytes += len(raw.encode("utf-8"))
        except Exception as e:
            logger.warning("Cache stats unavailable: %s", e)
            return CacheStats()
        return CacheStats(total_entries=len(keys), total_bytes=total_bytes)

    async def _decode(self, key: str, raw: str) -> CacheEntry | None:
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding undecodable cache entry %s: %s", key, e)
            await self._safe_delete(key)
            return None

    async def _safe_delete(self, key: str) -> bool:
        try:
            await self._store.delete(key)
        except Exception as e:
            logger.warning("Cache delete failed for %s: %s", key, e)
            return False
        return True
