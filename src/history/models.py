# src/history/models.py - v2
"""Recent-search history entry."""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel, Field, TypeAdapter


class RecentSearchEntry(BaseModel):
    """A query the user actually ran, with the size of its last result set."""

    query: str
    last_searched_at: AwareDatetime
    result_count: int = Field(default=0, ge=0)


RecentSearchList = TypeAdapter(list[RecentSearchEntry])
