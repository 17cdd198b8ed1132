# src/search/orchestrator.py - v2
"""Per-surface search orchestrator.

Turns raw keystrokes and explicit submissions into an ordered sequence of
suggestion fetches, cache lookups, live fetches and cache/history writes.

Two tracks share one surface:
  Suggestions: IDLE -> TYPING -> AWAITING_SUGGESTIONS -> SUGGESTIONS_SHOWN | IDLE
  Submission:  IDLE -> SUBMITTING -> (cache | network | failed) -> IDLE

Staleness is handled in one place. Every keystroke and every submission
bumps a generation counter; each request captures the generation it was
issued under and its response may only touch the view state if that
generation is still current. Debounce timers are cancelled for real;
network requests cannot be, so their late responses are simply dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Callable, Coroutine, Sequence

from searchcache.core.models import (
    FilterSet,
    ResultItem,
    SearchMeta,
    SuggestionItem,
)
from searchcache.history.models import RecentSearchEntry
from searchcache.logging.context import set_operation_context, set_surface_context
from searchcache.search.models import SearchOutcome, SearchViewState, SurfacePhase
from searchcache.search.scheduler import AsyncioScheduler, Scheduler, TimerHandle

if TYPE_CHECKING:
    from searchcache.cache.result_cache import ResultCache
    from searchcache.client.base_client import BaseSearchClient
    from searchcache.config.settings import Settings
    from searchcache.history.recent_searches import RecentSearchHistory

logger = logging.getLogger(__name__)

StateListener = Callable[[SearchViewState], None]
NavigateCallback = Callable[[SuggestionItem], None]


class SearchOrchestrator:
    """Debounced, cancelable controller for one search surface.

    Args:
        client: Remote suggestion/search API. The only network caller.
        cache: Shared result cache.
        history: Shared recent-search history.
        scheduler: Timer source. Defaults to the asyncio event loop.
        surface_id: Name used in log context.
        debounce_s: Idle delay before a suggestion fetch.
        min_chars: Minimum trimmed query length that triggers suggestions.
        suggest_limit: Suggestions requested per fetch.
        blur_hide_delay_s: Delay before panels hide after blur, leaving
            time for a tap on a suggestion to land.
        filters: Initial filter set sent with every submission.
        on_navigate: Called instead of searching when a product
            suggestion is selected.
    """

    def __init__(
        self,
        client: BaseSearchClient,
        cache: ResultCache,
        history: RecentSearchHistory,
        scheduler: Scheduler | None = None,
        *,
        surface_id: str = "search",
        debounce_s: float = 0.3,
        min_chars: int = 2,
        suggest_limit: int = 6,
        blur_hide_delay_s: float = 0.2,
        filters: FilterSet | None = None,
        on_navigate: NavigateCallback | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._history = history
        self._scheduler = scheduler or AsyncioScheduler()
        self._surface_id = surface_id
        self._debounce_s = debounce_s
        self._min_chars = min_chars
        self._suggest_limit = suggest_limit
        self._blur_hide_delay_s = blur_hide_delay_s
        self._filters: FilterSet = dict(filters or {})
        self._on_navigate = on_navigate

        self._state = SearchViewState()
        self._generation = 0
        self._results_query: str | None = None
        self._focused = False
        self._suggest_timer: TimerHandle | None = None
        self._blur_timer: TimerHandle | None = None
        self._listeners: list[StateListener] = []
        self._tasks: set[asyncio.Task[Any]] = set()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: BaseSearchClient,
        cache: ResultCache,
        history: RecentSearchHistory,
        scheduler: Scheduler | None = None,
        surface_id: str = "search",
        filters: FilterSet | None = None,
        on_navigate: NavigateCallback | None = None,
    ) -> SearchOrchestrator:
        """Build an orchestrator tuned by application settings."""
        return cls(
            client,
            cache,
            history,
            scheduler,
            surface_id=surface_id,
            debounce_s=settings.suggest_debounce_s,
            min_chars=settings.suggest_min_chars,
            suggest_limit=settings.suggest_limit,
            blur_hide_delay_s=settings.blur_hide_delay_s,
            filters=filters,
            on_navigate=on_navigate,
        )

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> SearchViewState:
        """Snapshot of the current view state."""
        return self._state.model_copy(deep=True)

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def filters(self) -> FilterSet:
        return dict(self._filters)

    def set_filters(self, filters: FilterSet) -> None:
        """Replace the filter set used by the next submission."""
        self._filters = dict(filters)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a render callback; returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------

    def on_query_change(self, text: str) -> None:
        """Apply a keystroke. Synchronous; schedules the suggestion fetch."""
        generation = self._next_generation()
        self._cancel_suggest_timer()

        state = self._state
        state.query_text = text
        # Any in-flight submission was superseded by this keystroke.
        state.loading = False
        if text != self._results_query:
            state.results = []
            state.result_meta = None
            state.error = None
            self._results_query = None

        if not text and self._focused:
            state.show_recent = True
            state.show_suggestions = False
        else:
            state.show_recent = False

        if len(text.strip()) >= self._min_chars:
            state.phase = SurfacePhase.TYPING
            self._suggest_timer = self._scheduler.call_later(
                self._debounce_s,
                lambda: self._on_debounce_elapsed(text, generation),
            )
        else:
            state.suggestions = []
            state.show_suggestions = False
            state.phase = SurfacePhase.IDLE

        self._notify()

    async def on_submit(self, query: str | None = None) -> None:
        """Run a search for ``query`` (or the current text).

        Cache hit: results shown, no network call. Miss: live fetch; on
        success results are shown and then written to the cache and the
        history; on failure results are cleared and an error is shown.
        """
        term = self._state.query_text if query is None else query
        if not term.strip():
            return

        generation = self._next_generation()
        self._set_log_context("submit", generation)
        self._cancel_suggest_timer()

        state = self._state
        state.query_text = term
        state.loading = True
        state.error = None
        state.show_suggestions = False
        state.show_recent = False
        state.phase = SurfacePhase.SUBMITTING
        self._notify()

        filters = dict(self._filters)

        cached = await self._cache.get(term, filters)
        if not self._is_current(generation):
            logger.debug("Dropping superseded cache lookup for %r", term)
            return
        if cached is not None:
            meta = (cached.meta or SearchMeta()).model_copy(
                update={"from_cache": True, "query": term}
            )
            self._show_results(term, cached.results, meta, SearchOutcome.RESULTS_FROM_CACHE)
            return

        try:
            response = await self._client.search(term, filters)
        except Exception as e:
            if not self._is_current(generation):
                logger.debug("Dropping superseded search failure for %r: %s", term, e)
                return
            logger.warning("Search failed for %r: %s", term, e)
            self._show_failure(e)
            return

        if not self._is_current(generation):
            # Results are still valid for their fingerprint; only the view is stale.
            logger.debug("Dropping superseded response for %r", term)
            await self._cache.put(term, filters, response.results, response.meta)
            return

        self._show_results(
            term, response.results, response.meta, SearchOutcome.RESULTS_FROM_NETWORK
        )

        await self._cache.put(term, filters, response.results, response.meta)
        await self._history.record(term, len(response.results))
        recent = await self._history.list()
        if self._is_current(generation):
            self._state.recent_searches = recent
            self._notify()

    async def on_select_suggestion(self, item: SuggestionItem) -> None:
        """Tap on a suggestion: navigate for products, otherwise search."""
        self._cancel_suggest_timer()
        state = self._state
        state.query_text = item.text
        state.show_suggestions = False
        state.show_recent = False

        if item.type == "product" and self._on_navigate is not None:
            self._next_generation()
            if item.text != self._results_query:
                state.results = []
                state.result_meta = None
                state.error = None
                self._results_query = None
            state.loading = False
            state.phase = SurfacePhase.IDLE
            self._notify()
            self._on_navigate(item)
            return

        await self.on_submit(item.text)

    async def on_select_recent(self, entry: RecentSearchEntry) -> None:
        """Tap on a recent search: re-issue it."""
        await self.on_submit(entry.query)

    async def on_clear_history(self) -> None:
        await self._history.clear()
        self._state.recent_searches = []
        self._notify()

    async def on_remove_recent(self, query: str) -> None:
        await self._history.remove(query)
        self._state.recent_searches = await self._history.list()
        self._notify()

    async def on_clear_cache(self) -> int:
        """Explicit 'clear cache' action. Returns entries removed."""
        return await self._cache.invalidate_all()

    async def on_focus(self) -> None:
        """Input focused: show recent searches when the query is empty."""
        self._focused = True
        self._cancel_blur_timer()
        if self._state.query_text:
            return
        generation = self._generation
        await self.refresh_recent()
        # A keystroke or blur during the history read wins.
        if self._is_current(generation) and self._focused and not self._state.query_text:
            self._state.show_recent = True
            self._notify()

    def on_blur(self) -> None:
        """Input blurred: hide panels after a short delay."""
        self._focused = False
        self._cancel_blur_timer()
        self._blur_timer = self._scheduler.call_later(
            self._blur_hide_delay_s, self._hide_panels
        )

    async def refresh_recent(self) -> list[RecentSearchEntry]:
        """Reload recent searches into the view state."""
        recent = await self._history.list()
        self._state.recent_searches = recent
        self._notify()
        return recent

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until every background suggestion fetch has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel timers and background work. The surface is unusable after."""
        self._next_generation()
        self._cancel_suggest_timer()
        self._cancel_blur_timer()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Suggestion track
    # ------------------------------------------------------------------

    def _on_debounce_elapsed(self, text: str, generation: int) -> None:
        self._suggest_timer = None
        if not self._is_current(generation):
            return
        self._state.phase = SurfacePhase.AWAITING_SUGGESTIONS
        self._notify()
        self._spawn(self._fetch_suggestions(text, generation))

    async def _fetch_suggestions(self, text: str, generation: int) -> None:
        self._set_log_context("suggest", generation)
        items: Sequence[SuggestionItem]
        try:
            items = await self._client.get_suggestions(text.strip(), self._suggest_limit)
        except Exception as e:
            logger.warning("Suggestion fetch failed for %r: %s", text, e)
            items = []

        if not self._is_current(generation):
            logger.debug("Dropping stale suggestions for %r", text)
            return

        state = self._state
        state.suggestions = list(items)
        state.show_suggestions = bool(items)
        state.phase = SurfacePhase.SUGGESTIONS_SHOWN if items else SurfacePhase.IDLE
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _show_results(
        self,
        term: str,
        results: Sequence[ResultItem],
        meta: SearchMeta | None,
        outcome: SearchOutcome,
    ) -> None:
        state = self._state
        state.results = list(results)
        state.result_meta = meta
        state.error = None
        state.loading = False
        state.last_outcome = outcome
        state.phase = SurfacePhase.IDLE
        self._results_query = term
        logger.info("%d results for %r (%s)", len(state.results), term, outcome.value)
        self._notify()

    def _show_failure(self, error: Exception) -> None:
        state = self._state
        state.results = []
        state.result_meta = None
        state.error = str(error) or "Search failed"
        state.loading = False
        state.last_outcome = SearchOutcome.FAILED
        state.phase = SurfacePhase.IDLE
        self._results_query = None
        self._notify()

    def _hide_panels(self) -> None:
        self._blur_timer = None
        self._state.show_recent = False
        self._state.show_suggestions = False
        self._notify()

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _cancel_suggest_timer(self) -> None:
        if self._suggest_timer is not None:
            self._suggest_timer.cancel()
            self._suggest_timer = None

    def _cancel_blur_timer(self) -> None:
        if self._blur_timer is not None:
            self._blur_timer.cancel()
            self._blur_timer = None

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _set_log_context(self, operation: str, generation: int) -> None:
        set_surface_context(self._surface_id)
        set_operation_context(operation, generation)

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener failed")
