# src/core/models.py - v2
"""Shared Pydantic domain models used across modules.

Result records and filter sets are opaque to this package: they are plain
JSON-compatible mappings produced by the remote API and the screen layer.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Opaque, JSON-serialisable aliases.
ResultItem = dict[str, Any]
FilterSet = dict[str, Any]


class SearchMeta(BaseModel):
    """Search information echoed back by the API (``searchInfo``)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    query: str | None = None
    total_results: int | None = Field(default=None, alias="totalResults")
    search_time_ms: float | None = Field(default=None, alias="searchTime")
    from_cache: bool = False


class SuggestionItem(BaseModel):
    """Single typeahead suggestion returned by the suggestion API."""

    model_config = ConfigDict(extra="allow")

    type: Literal["product", "category", "enterprise"]
    text: str
    value: str


class SearchResponse(BaseModel):
    """Normalized live-search response."""

    results: list[ResultItem] = Field(default_factory=list)
    meta: SearchMeta | None = None
