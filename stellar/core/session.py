from __future__ import annotations

import logging
from typing import Callable, Optional

from stellar.core.active_set import ActiveSet
from stellar.core.audio import AudioSink
from stellar.core.config import clamp_volume
from stellar.core.levels import CelestialBody, Level, LevelCatalog
from stellar.core.renderer import SoundEventRenderer
from stellar.core.scheduler import PlaybackScheduler, TimerFactory

logger = logging.getLogger(__name__)


class LevelSession:
    """State of one play session inside a level.

    Owns the active set, the volume, the playback timers and the audio sink.
    Everything is released by ``close``; nothing here is persisted.
    """

    def __init__(
        self,
        catalog: LevelCatalog,
        level: Level,
        sink: AudioSink,
        on_trigger: Optional[Callable[[], None]] = None,
        volume: int = 50,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        self._level = level
        self._sink = sink
        self._volume = clamp_volume(volume)
        self._active = ActiveSet()
        self._renderer = SoundEventRenderer(sink, on_trigger)
        self._scheduler = PlaybackScheduler(catalog, level.id, self._fire, timer_factory)
        self._description = f"Welcome to {level.name}! {level.description}"
        self._closed = False

    @property
    def level(self) -> Level:
        return self._level

    @property
    def active(self) -> ActiveSet:
        return self._active

    @property
    def scheduler(self) -> PlaybackScheduler:
        return self._scheduler

    @property
    def sink(self) -> AudioSink:
        return self._sink

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def description(self) -> str:
        return self._description

    @property
    def is_playing(self) -> bool:
        return self._scheduler.is_running

    @property
    def closed(self) -> bool:
        return self._closed

    def toggle(self, body_id: int) -> Optional[bool]:
        """Toggle a body of this level; returns the new state or None for unknown ids.

        Switching a body on sounds it once and shows its description.
        """
        if self._closed:
            return None
        body = self._level.find_body(body_id)
        if body is None:
            logger.debug("Ignoring toggle of unknown body %s in level %s", body_id, self._level.id)
            return None
        is_on = self._active.toggle(body.id)
        if is_on:
            self._description = body.description
            self._renderer.render(body.sound, self._volume)
        return is_on

    def set_volume(self, value: float) -> int:
        self._volume = clamp_volume(value)
        return self._volume

    def start_playback(self) -> bool:
        if self._closed:
            return False
        return self._scheduler.start(self._active.snapshot())

    def stop_playback(self) -> None:
        self._scheduler.stop()

    def close(self) -> None:
        if self._closed:
            return
        self._scheduler.stop()
        self._sink.close()
        self._active.clear()
        self._closed = True
        logger.info("Closed session for level %s", self._level.id)

    def _fire(self, body: CelestialBody) -> None:
        if self._closed:
            return
        # volume is read at firing time so slider changes apply to running timers
        self._renderer.render(body.sound, self._volume)
