"""Recurring playback of active bodies.

Each active body gets its own repeating timer with period ``pulse_rate``.
Timers run on the Qt event loop, so firings from different bodies interleave
in wall-clock order on one thread.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Protocol

from PySide6.QtCore import QObject, QTimer

from stellar.core.levels import CelestialBody, LevelCatalog

logger = logging.getLogger(__name__)


class Timer(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


TimerFactory = Callable[[int, Callable[[], None]], Timer]


def qt_timer_factory(parent: Optional[QObject] = None) -> TimerFactory:
    """Return a factory creating repeating ``QTimer`` objects."""

    def _create(interval_ms: int, callback: Callable[[], None]) -> QTimer:
        timer = QTimer(parent)
        timer.setInterval(interval_ms)
        timer.setSingleShot(False)
        timer.timeout.connect(callback)
        return timer

    return _create


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class PlaybackScheduler:
    """Arms one timer per body of a level on ``start`` and cancels them all on ``stop``.

    The set of bodies is a snapshot taken at ``start``; toggling bodies while
    running does not arm or disarm timers until the next ``start``.
    """

    def __init__(
        self,
        catalog: LevelCatalog,
        level_id: int,
        on_fire: Callable[[CelestialBody], None],
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self._catalog = catalog
        self._level_id = level_id
        self._on_fire = on_fire
        self._timer_factory = timer_factory or qt_timer_factory()
        self._timers: Dict[int, Timer] = {}
        self._state = PlaybackState.STOPPED

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is PlaybackState.RUNNING

    @property
    def armed_count(self) -> int:
        return len(self._timers)

    def armed_body_ids(self) -> list[int]:
        return sorted(self._timers)

    def start(self, body_ids: Iterable[int]) -> bool:
        """Arm timers for ``body_ids``. Returns False if already running."""
        if self._state is PlaybackState.RUNNING:
            logger.debug("Playback already running for level %s", self._level_id)
            return False

        for body_id in sorted(set(body_ids)):
            body = self._catalog.find_body(self._level_id, body_id)
            if body is None:
                logger.debug("Skipping unknown body %s in level %s", body_id, self._level_id)
                continue
            timer = self._timer_factory(body.sound.pulse_rate, self._make_callback(body))
            self._timers[body.id] = timer
            timer.start()

        self._state = PlaybackState.RUNNING
        logger.info("Playback started for level %s with %d bodies", self._level_id, len(self._timers))
        return True

    def stop(self) -> None:
        if self._state is PlaybackState.STOPPED and not self._timers:
            return
        for timer in self._timers.values():
            timer.stop()
        count = len(self._timers)
        self._timers.clear()
        self._state = PlaybackState.STOPPED
        logger.info("Playback stopped for level %s (%d timers cancelled)", self._level_id, count)

    def _make_callback(self, body: CelestialBody) -> Callable[[], None]:
        def _fire() -> None:
            if body.id in self._timers:
                self._on_fire(body)

        return _fire
