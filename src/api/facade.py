# src/api/facade.py - v2
"""Public API facade: the application-level search context.

Usage:
    from searchcache.api.facade import build_context
    ctx = build_context()
    await ctx.start()
    surface = ctx.create_surface("home")
    surface.on_query_change("sho")
    await surface.on_submit()
    await ctx.aclose()

One SearchContext owns the shared store, result cache, history, API client
and sweeper. Search surfaces are cheap and created per screen. There are no
module-level singletons: tests build isolated contexts with injected
stores, clients and clocks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import BaseModel

from searchcache.cache.result_cache import ResultCache
from searchcache.cache.sweeper import CacheSweeper
from searchcache.config.settings import Settings
from searchcache.core.clock import Clock, utc_now
from searchcache.history.recent_searches import RecentSearchHistory
from searchcache.search.orchestrator import NavigateCallback, SearchOrchestrator

if TYPE_CHECKING:
    from searchcache.client.base_client import BaseSearchClient
    from searchcache.core.models import FilterSet
    from searchcache.search.scheduler import Scheduler
    from searchcache.store.base_store import BaseKeyValueStore

logger = logging.getLogger(__name__)


class ContextStats(BaseModel):
    """Cache and history footprint, as reported by the CLI."""

    total_cached_searches: int
    recent_searches_count: int
    cache_size: str


@dataclass
class SearchContext:
    """Shared search infrastructure for one application process."""

    settings: Settings
    store: BaseKeyValueStore
    result_cache: ResultCache
    history: RecentSearchHistory
    client: BaseSearchClient | None = None
    sweeper: CacheSweeper | None = None
    surfaces: list[SearchOrchestrator] = field(default_factory=list)

    async def start(self) -> None:
        """Sweep expired entries now and start the periodic sweep if enabled."""
        if self.sweeper is None:
            return
        await self.sweeper.run_once()
        self.sweeper.start()

    def create_surface(
        self,
        surface_id: str = "search",
        scheduler: Scheduler | None = None,
        filters: FilterSet | None = None,
        on_navigate: NavigateCallback | None = None,
    ) -> SearchOrchestrator:
        """Create an orchestrator bound to the shared cache and history."""
        if self.client is None:
            raise ValueError("A search client is required to create a surface")
        surface = SearchOrchestrator.from_settings(
            self.settings,
            self.client,
            self.result_cache,
            self.history,
            scheduler=scheduler,
            surface_id=surface_id,
            filters=filters,
            on_navigate=on_navigate,
        )
        self.surfaces.append(surface)
        return surface

    async def get_stats(self) -> ContextStats:
        cache_stats = await self.result_cache.get_stats()
        recent = await self.history.list()
        return ContextStats(
            total_cached_searches=cache_stats.total_entries,
            recent_searches_count=len(recent),
            cache_size=cache_stats.size_label,
        )

    async def aclose(self) -> None:
        """Stop background work and release backend resources."""
        for surface in self.surfaces:
            await surface.aclose()
        self.surfaces.clear()
        if self.sweeper is not None:
            await self.sweeper.stop()
        if self.client is not None:
            await self.client.aclose()
        await self.store.close()


def build_context(
    settings: Settings | None = None,
    store: BaseKeyValueStore | None = None,
    client: BaseSearchClient | None = None,
    clock: Clock = utc_now,
    with_client: bool = True,
) -> SearchContext:
    """Wire a SearchContext from settings.

    Args:
        settings: Application settings. Loaded from .env if None.
        store: Key-value store. Created from settings if None.
        client: Search API client. An HttpSearchClient is created from
            settings if None and ``with_client`` is True.
        clock: Time source for TTL checks.
        with_client: Set False for maintenance-only contexts (CLI stats,
            sweep, clear) that never reach the network.
    """
    settings = settings or Settings()

    if store is None:
        from searchcache.store.store_factory import create_store
        store = create_store(settings)

    if client is None and with_client:
        from searchcache.client.http_client import HttpSearchClient
        client = HttpSearchClient(
            base_url=settings.api_base_url,
            timeout=settings.api_timeout_seconds,
            search_path=settings.api_search_path,
            suggestions_path=settings.api_suggestions_path,
        )

    result_cache = ResultCache(
        store,
        ttl=settings.cache_ttl,
        key_prefix=settings.cache_key_prefix,
        casefold=settings.query_casefold,
        clock=clock,
    )
    history = RecentSearchHistory(
        store,
        key=settings.history_key,
        max_entries=settings.history_max_entries,
        ttl=settings.history_ttl,
        casefold=settings.query_casefold,
        clock=clock,
    )
    sweeper = None
    if settings.cache_sweep_enabled:
        sweeper = CacheSweeper(result_cache, interval_s=settings.cache_sweep_interval_s)

    logger.debug(
        "Search context ready: backend=%s cache_ttl=%s history=%d/%s",
        settings.store_backend, settings.cache_ttl,
        settings.history_max_entries, settings.history_ttl,
    )
    return SearchContext(
        settings=settings,
        store=store,
        result_cache=result_cache,
        history=history,
        client=client,
        sweeper=sweeper,
    )
