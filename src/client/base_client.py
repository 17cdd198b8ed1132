# src/client/base_client.py - v1
"""Abstract remote search API interface.

The orchestrator is the only caller. Implementations may raise on any
failure; SearchApiError is the expected type for transport and HTTP errors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from searchcache.core.models import FilterSet, SearchResponse, SuggestionItem


class SearchApiError(Exception):
    """Remote search API call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class BaseSearchClient(ABC):
    """Remote suggestion + live-search API."""

    @abstractmethod
    async def get_suggestions(self, query: str, limit: int = 10) -> list[SuggestionItem]:
        """Typeahead suggestions. Idempotent."""

    @abstractmethod
    async def search(self, query: str, filters: FilterSet | None = None) -> SearchResponse:
        """Run a live search and return one result page."""

    async def aclose(self) -> None:
        """Release transport resources. Default: nothing to release."""
