# tests/unit/history/test_history_models.py - v2
"""Tests for history/models.py."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from searchcache.history.models import RecentSearchEntry, RecentSearchList


class TestRecentSearchEntry:
    def test_defaults(self):
        e = RecentSearchEntry(query="shoes", last_searched_at=datetime.now(timezone.utc))
        assert e.result_count == 0

    def test_negative_count_rejected(self):
        with pytest.raises(ValidationError):
            RecentSearchEntry(
                query="shoes", last_searched_at=datetime.now(timezone.utc), result_count=-1
            )

    def test_list_adapter_parses_json(self):
        raw = '[{"query": "shoes", "last_searched_at": "2026-03-01T12:00:00Z", "result_count": 4}]'
        entries = RecentSearchList.validate_json(raw)
        assert entries[0].query == "shoes"
        assert entries[0].last_searched_at.tzinfo is not None

    def test_naive_timestamp_rejected(self):
        with pytest.raises(ValidationError):
            RecentSearchEntry(query="shoes", last_searched_at=datetime(2026, 3, 1, 12, 0))
