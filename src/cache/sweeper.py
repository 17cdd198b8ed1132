# src/cache/sweeper.py - v1
"""Periodic expired-entry sweep for the result cache.

Runs one sweep (plus a stats log line) on start, then one every interval.
Lazy expiry in ResultCache.get() already guarantees correctness; the sweep
only reclaims storage held by entries nobody asks for again.
"""

from __future__ import annotations

import asyncio
import logging

from searchcache.cache.result_cache import ResultCache
from searchcache.logging.context import set_operation_context

logger = logging.getLogger(__name__)


class CacheSweeper:
    """Background task calling ResultCache.clean_expired() periodically."""

    def __init__(self, cache: ResultCache, interval_s: float = 600.0) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._cache = cache
        self._interval_s = interval_s
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Sweep now and log the remaining footprint."""
        set_operation_context("sweep")
        removed = await self._cache.clean_expired()
        stats = await self._cache.get_stats()
        logger.info(
            "Cache sweep: removed=%d remaining=%d size=%s",
            removed, stats.total_entries, stats.size_label,
        )
        return removed

    def start(self) -> None:
        """Start the periodic loop on the running event loop (idempotent)."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the loop and wait for it to exit."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Cache sweep failed")
            await asyncio.sleep(self._interval_s)
