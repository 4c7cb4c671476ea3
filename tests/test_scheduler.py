"""Tests for stellar.core.scheduler – per-body repeating playback timers."""

from __future__ import annotations

from collections import Counter
from typing import List

import pytest

from conftest import FakeClock
from stellar.core.levels import CelestialBody, LevelCatalog
from stellar.core.scheduler import PlaybackScheduler, PlaybackState, qt_timer_factory


@pytest.fixture()
def fired() -> List[int]:
    return []


@pytest.fixture()
def scheduler(catalog: LevelCatalog, clock: FakeClock, fired: List[int]) -> PlaybackScheduler:
    def _on_fire(body: CelestialBody) -> None:
        fired.append(body.id)

    return PlaybackScheduler(catalog, 1, _on_fire, clock.factory)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------

class TestStateMachine:
    def test_initially_stopped(self, scheduler: PlaybackScheduler):
        assert scheduler.state is PlaybackState.STOPPED
        assert scheduler.armed_count == 0

    def test_start_arms_one_timer_per_body(self, scheduler: PlaybackScheduler, clock: FakeClock):
        assert scheduler.start({1, 2}) is True
        assert scheduler.state is PlaybackState.RUNNING
        assert scheduler.armed_body_ids() == [1, 2]
        assert sorted(t.interval_ms for t in clock.active_timers) == [500, 800]

    def test_start_with_no_bodies_still_running(self, scheduler: PlaybackScheduler):
        assert scheduler.start(set()) is True
        assert scheduler.is_running
        assert scheduler.armed_count == 0

    def test_start_while_running_is_ignored(self, scheduler: PlaybackScheduler, clock: FakeClock):
        scheduler.start({1})
        assert scheduler.start({1, 2}) is False
        assert scheduler.armed_body_ids() == [1]
        assert len(clock.timers) == 1

    def test_stop_cancels_everything(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        scheduler.start({1, 2})
        scheduler.stop()
        assert scheduler.state is PlaybackState.STOPPED
        assert scheduler.armed_count == 0
        assert clock.active_timers == []
        clock.advance(5000)
        assert fired == []

    def test_stop_when_stopped_is_noop(self, scheduler: PlaybackScheduler):
        scheduler.stop()
        assert scheduler.state is PlaybackState.STOPPED

    def test_restart_after_stop(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        scheduler.start({1})
        scheduler.stop()
        scheduler.start({2})
        clock.advance(800)
        assert fired == [2]

    def test_unknown_body_is_skipped(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        # body 3 belongs to level 2, not level 1
        scheduler.start({1, 3, 99})
        assert scheduler.armed_body_ids() == [1]
        clock.advance(500)
        assert fired == [1]


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class TestTiming:
    def test_nothing_fires_immediately(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        scheduler.start({1, 2})
        clock.advance(499)
        assert fired == []

    def test_two_bodies_over_1600ms(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        scheduler.start({1, 2})
        clock.advance(1600)
        # 500ms body fires at 500/1000/1500, 800ms body at 800/1600
        assert Counter(fired) == Counter({1: 3, 2: 2})

    def test_exact_multiple_boundary_is_inclusive(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        scheduler.start({1, 2})
        clock.advance(1599)
        assert Counter(fired) == Counter({1: 3, 2: 1})
        clock.advance(1)
        assert Counter(fired) == Counter({1: 3, 2: 2})

    def test_interleaved_in_time_order(self, scheduler: PlaybackScheduler, clock: FakeClock, fired: List[int]):
        scheduler.start({1, 2})
        clock.advance(1600)
        assert fired == [1, 2, 1, 1, 2]

    def test_stop_from_inside_a_firing(self, catalog: LevelCatalog, clock: FakeClock):
        fired: List[int] = []
        holder = {}

        def _on_fire(body: CelestialBody) -> None:
            fired.append(body.id)
            holder["s"].stop()

        s = PlaybackScheduler(catalog, 1, _on_fire, clock.factory)
        holder["s"] = s
        s.start({1, 2})
        clock.advance(3000)
        assert fired == [1]


# ---------------------------------------------------------------------------
# Qt timers
# ---------------------------------------------------------------------------

class TestQtTimerFactory:
    def test_creates_repeating_timer(self, qt_app):
        timer = qt_timer_factory()(750, lambda: None)
        assert timer.interval() == 750
        assert timer.isSingleShot() is False
        assert timer.isActive() is False

    def test_scheduler_with_qt_timers(self, qt_app, catalog: LevelCatalog):
        s = PlaybackScheduler(catalog, 1, lambda body: None)
        s.start({1, 2})
        assert s.armed_count == 2
        s.stop()
        assert s.armed_count == 0
