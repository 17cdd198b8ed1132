# src/search/models.py - v1
"""Search surface state: phases, outcomes and the observable view state."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from searchcache.core.models import ResultItem, SearchMeta, SuggestionItem
from searchcache.history.models import RecentSearchEntry


class SurfacePhase(str, Enum):
    """Where a search surface currently sits in its state machine.

    Two orthogonal tracks share the enum: the suggestion track
    (TYPING, AWAITING_SUGGESTIONS, SUGGESTIONS_SHOWN) and the submission
    track (SUBMITTING then back to IDLE with an outcome recorded).
    """

    IDLE = "idle"
    TYPING = "typing"
    AWAITING_SUGGESTIONS = "awaiting_suggestions"
    SUGGESTIONS_SHOWN = "suggestions_shown"
    SUBMITTING = "submitting"


class SearchOutcome(str, Enum):
    """How the last submission ended."""

    RESULTS_FROM_CACHE = "results_from_cache"
    RESULTS_FROM_NETWORK = "results_from_network"
    FAILED = "failed"


class SearchViewState(BaseModel):
    """Everything a screen needs to render a search surface."""

    query_text: str = ""
    suggestions: list[SuggestionItem] = Field(default_factory=list)
    show_suggestions: bool = False
    recent_searches: list[RecentSearchEntry] = Field(default_factory=list)
    show_recent: bool = False
    results: list[ResultItem] = Field(default_factory=list)
    result_meta: SearchMeta | None = None
    loading: bool = False
    error: str | None = None
    phase: SurfacePhase = SurfacePhase.IDLE
    last_outcome: SearchOutcome | None = None
