"""Application state and the user-input entry points.

Every mutation emits the resulting state through a Qt signal so the UI only
ever reacts to explicit notifications.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from stellar.core.audio import AudioSink, NullAudioSink
from stellar.core.config import clamp_volume
from stellar.core.levels import Level, LevelCatalog
from stellar.core.progress import ProgressionTracker
from stellar.core.scheduler import TimerFactory
from stellar.core.session import LevelSession

logger = logging.getLogger(__name__)


class SoundscapeController(QObject):
    score_changed = Signal(int)
    unlocked_changed = Signal(list)
    level_changed = Signal(object)
    description_changed = Signal(str)
    active_changed = Signal(list)
    playback_changed = Signal(bool)
    volume_changed = Signal(int)

    def __init__(
        self,
        catalog: LevelCatalog,
        tracker: ProgressionTracker,
        sink_factory: Optional[Callable[[], AudioSink]] = None,
        timer_factory: Optional[TimerFactory] = None,
        unlock_all: bool = False,
        initial_volume: int = 50,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._catalog = catalog
        self._tracker = tracker
        self._sink_factory = sink_factory or NullAudioSink
        self._timer_factory = timer_factory
        self._unlock_all = unlock_all
        self._volume = clamp_volume(initial_volume)
        self._session: Optional[LevelSession] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> LevelCatalog:
        return self._catalog

    @property
    def session(self) -> Optional[LevelSession]:
        return self._session

    @property
    def current_level(self) -> Optional[Level]:
        return self._session.level if self._session is not None else None

    @property
    def score(self) -> int:
        return self._tracker.score

    @property
    def volume(self) -> int:
        return self._volume

    @property
    def is_playing(self) -> bool:
        return self._session is not None and self._session.is_playing

    def active_body_ids(self) -> List[int]:
        return list(self._session.active) if self._session is not None else []

    def is_level_selectable(self, level_id: int) -> bool:
        if self._catalog.find_level(level_id) is None:
            return False
        return self._unlock_all or self._tracker.is_unlocked(level_id)

    # ------------------------------------------------------------------
    # User input
    # ------------------------------------------------------------------

    def select_level(self, level_id: int) -> bool:
        """Enter a level. Locked or unknown levels are rejected without any change."""
        level = self._catalog.find_level(level_id)
        if level is None or not self.is_level_selectable(level_id):
            logger.info("Rejected selection of level %s", level_id)
            return False

        self._close_session()
        self._session = LevelSession(
            self._catalog,
            level,
            self._sink_factory(),
            on_trigger=self._on_trigger,
            volume=self._volume,
            timer_factory=self._timer_factory,
        )
        logger.info("Entered level %s (%s)", level.id, level.name)
        self.level_changed.emit(level)
        self.active_changed.emit([])
        self.playback_changed.emit(False)
        self.description_changed.emit(self._session.description)
        return True

    def back_to_levels(self) -> None:
        if self._session is None:
            return
        self._close_session()
        self.playback_changed.emit(False)
        self.level_changed.emit(None)

    def toggle_body(self, body_id: int) -> Optional[bool]:
        session = self._session
        if session is None:
            return None
        previous = session.description
        is_on = session.toggle(body_id)
        if is_on is None:
            return None
        self.active_changed.emit(list(session.active))
        if session.description != previous:
            self.description_changed.emit(session.description)
        return is_on

    def set_volume(self, value: float) -> int:
        self._volume = clamp_volume(value)
        if self._session is not None:
            self._session.set_volume(self._volume)
        self.volume_changed.emit(self._volume)
        return self._volume

    def start_playback(self) -> bool:
        if self._session is None or not self._session.start_playback():
            return False
        self.playback_changed.emit(True)
        return True

    def stop_playback(self) -> None:
        if self._session is None or not self._session.is_playing:
            return
        self._session.stop_playback()
        self.playback_changed.emit(False)

    def toggle_playback(self) -> bool:
        """Start or stop playback; returns whether playback is now running."""
        if self.is_playing:
            self.stop_playback()
        else:
            self.start_playback()
        return self.is_playing

    def shutdown(self) -> None:
        self._close_session()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _close_session(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.close()

    def _on_trigger(self) -> None:
        before = self._tracker.unlocked_level_ids
        score, unlocked = self._tracker.on_trigger()
        self.score_changed.emit(score)
        if unlocked != before:
            self.unlocked_changed.emit(sorted(unlocked))
