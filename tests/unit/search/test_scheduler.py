# tests/unit/search/test_scheduler.py - v1
"""Tests for search/scheduler.py."""

from __future__ import annotations

import asyncio

import pytest

from searchcache.search.scheduler import AsyncioScheduler, ManualScheduler


class TestManualScheduler:
    def test_fires_only_when_due(self):
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(0.3, lambda: fired.append("a"))
        assert sched.advance(0.2) == 0
        assert fired == []
        assert sched.advance(0.1) == 1
        assert fired == ["a"]
        assert sched.pending == 0

    def test_fires_in_due_order(self):
        sched = ManualScheduler()
        fired: list[str] = []
        sched.call_later(0.5, lambda: fired.append("late"))
        sched.call_later(0.1, lambda: fired.append("early"))
        sched.call_later(0.1, lambda: fired.append("early-2"))
        sched.advance(1.0)
        assert fired == ["early", "early-2", "late"]

    def test_cancelled_timer_never_fires(self):
        sched = ManualScheduler()
        fired: list[str] = []
        handle = sched.call_later(0.1, lambda: fired.append("x"))
        handle.cancel()
        handle.cancel()
        assert handle.cancelled
        assert sched.pending == 0
        assert sched.advance(1.0) == 0
        assert fired == []

    def test_now_tracks_callback_time(self):
        sched = ManualScheduler()
        seen: list[float] = []
        sched.call_later(0.25, lambda: seen.append(sched.now))
        sched.advance(1.0)
        assert seen == [0.25]
        assert sched.now == 1.0

    def test_timer_scheduled_by_callback_fires_in_window(self):
        sched = ManualScheduler()
        fired: list[str] = []

        def _first() -> None:
            fired.append("first")
            sched.call_later(0.2, lambda: fired.append("second"))

        sched.call_later(0.1, _first)
        assert sched.advance(0.5) == 2
        assert fired == ["first", "second"]


class TestAsyncioScheduler:
    @pytest.mark.asyncio
    async def test_call_later_runs(self):
        fired = asyncio.Event()
        AsyncioScheduler().call_later(0.01, fired.set)
        await asyncio.wait_for(fired.wait(), timeout=1.0)

    @pytest.mark.asyncio
    async def test_cancel(self):
        fired: list[int] = []
        handle = AsyncioScheduler().call_later(0.01, lambda: fired.append(1))
        handle.cancel()
        await asyncio.sleep(0.03)
        assert handle.cancelled
        assert fired == []
