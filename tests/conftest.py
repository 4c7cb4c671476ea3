"""Shared fixtures: shipped level data, a fake clock for timers, a recording sink."""

from __future__ import annotations

from typing import Callable, List, Optional

import pytest
from PySide6.QtCore import QCoreApplication

from stellar.core.audio import AudioOutputError, AudioSink
from stellar.core.levels import LevelCatalog
from stellar.core.progress import MemoryStore, ProgressionTracker
from stellar.core.synth import ToneEvent


class FakeTimer:
    def __init__(self, clock: "FakeClock", interval_ms: int, callback: Callable[[], None]) -> None:
        self._clock = clock
        self.interval_ms = interval_ms
        self.callback = callback
        self.active = False
        self.next_due = 0
        self.fired = 0

    def start(self) -> None:
        self.active = True
        self.next_due = self._clock.now + self.interval_ms

    def stop(self) -> None:
        self.active = False


class FakeClock:
    """Simulated millisecond clock. Timers due exactly at the target time fire."""

    def __init__(self) -> None:
        self.now = 0
        self.timers: List[FakeTimer] = []

    def factory(self, interval_ms: int, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self, interval_ms, callback)
        self.timers.append(timer)
        return timer

    @property
    def active_timers(self) -> List[FakeTimer]:
        return [t for t in self.timers if t.active]

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self.timers if t.active and t.next_due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_due)
            self.now = timer.next_due
            timer.next_due += timer.interval_ms
            timer.fired += 1
            timer.callback()
        self.now = target


class RecordingSink(AudioSink):
    def __init__(self, fail: bool = False) -> None:
        self.events: List[ToneEvent] = []
        self.closed = False
        self.fail = fail

    def play(self, event: ToneEvent) -> None:
        if self.fail:
            raise AudioOutputError("no device")
        self.events.append(event)

    def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def qt_app() -> QCoreApplication:
    app: Optional[QCoreApplication] = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture()
def catalog() -> LevelCatalog:
    return LevelCatalog()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def tracker(catalog: LevelCatalog, store: MemoryStore) -> ProgressionTracker:
    return ProgressionTracker(catalog, store)
