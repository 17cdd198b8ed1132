# src/cache/models.py - v3
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from datetime import datetime

from pydantic import AwareDatetime, BaseModel, Field

from searchcache.core.models import FilterSet, ResultItem, SearchMeta


class CacheEntry(BaseModel):
    """One cached result page, addressed by its fingerprint."""

    fingerprint: str
    query: str
    filters: FilterSet = Field(default_factory=dict)
    results: list[ResultItem] = Field(default_factory=list)
    meta: SearchMeta | None = None
    stored_at: AwareDatetime

    def age_at(self, now: datetime) -> float:
        """Age of the entry in seconds at ``now``."""
        return (now - self.stored_at).total_seconds()


class CacheStats(BaseModel):
    """Storage footprint of the result cache."""

    total_entries: int = 0
    total_bytes: int = 0

    @property
    def size_label(self) -> str:
        """Human-readable size, e.g. '12.34 KB'."""
        return f"{self.total_bytes / 1024:.2f} KB"
