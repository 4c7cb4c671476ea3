"""Main application window: level selection and the level play screen."""

from __future__ import annotations

from typing import Callable, Dict, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSlider,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from stellar.core.controller import SoundscapeController
from stellar.core.levels import CelestialBody, Level
from stellar.ui.colors import SpaceColors, blend_hex
from stellar.ui.models import LevelState, build_level_states

DEFAULT_HINT = "Tap on celestial objects to create your cosmic symphony!"


class LevelCard(QFrame):
    """A clickable level row with name, description, lock hint and body swatches."""

    def __init__(self, state: LevelState, on_click: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._level_id = state.level.id
        self._unlocked = state.unlocked
        self._on_click = on_click
        self.setObjectName("levelCard")
        if self._unlocked:
            self.setCursor(Qt.PointingHandCursor)

        title = QLabel(state.level.name)
        title.setObjectName("levelCardTitle")
        header = QHBoxLayout()
        header.addWidget(title, 1)
        if not state.unlocked:
            lock = QLabel(f"\U0001F512 Requires {state.level.required_score} points")
            lock.setObjectName("levelCardLock")
            header.addWidget(lock, 0, Qt.AlignRight)

        description = QLabel(state.level.description)
        description.setObjectName("levelCardDescription")
        description.setWordWrap(True)

        swatches = QHBoxLayout()
        swatches.setSpacing(6)
        for body in state.level.bodies:
            dot = QLabel()
            dot.setFixedSize(12, 12)
            dot.setStyleSheet(f"background: {body.color}; border-radius: 6px;")
            swatches.addWidget(dot)
        swatches.addStretch(1)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.addLayout(header)
        layout.addWidget(description)
        layout.addLayout(swatches)

        background = SpaceColors.PANEL if state.unlocked else blend_hex(SpaceColors.PANEL, SpaceColors.BG, 0.5)
        border = SpaceColors.STAR if state.is_current else background
        self.setStyleSheet(
            f"""
            QFrame#levelCard {{
                background: {background};
                border: 1px solid {border};
                border-radius: 10px;
            }}
            QFrame#levelCard:hover {{
                background: {SpaceColors.PANEL_HOVER if state.unlocked else background};
            }}
            QLabel#levelCardTitle {{ color: {SpaceColors.TEXT_PRIMARY}; font-size: 16px; font-weight: 700; }}
            QLabel#levelCardLock {{ color: {SpaceColors.TEXT_MUTED}; font-size: 12px; }}
            QLabel#levelCardDescription {{ color: {SpaceColors.TEXT_SECONDARY}; font-size: 12px; }}
            """
        )

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.LeftButton:
            self._on_click(self._level_id)
        super().mousePressEvent(event)


class BodyButton(QPushButton):
    """Round button for one celestial body; glows while active."""

    def __init__(self, body: CelestialBody, on_click: Callable[[int], None], parent: Optional[QWidget] = None) -> None:
        super().__init__(body.name, parent)
        self._body = body
        self.setCheckable(True)
        self.setFixedSize(110, 110)
        self.setToolTip(body.name)
        self.clicked.connect(lambda _checked=False: on_click(body.id))
        self.set_active(False)

    def set_active(self, active: bool) -> None:
        self.setChecked(active)
        color = self._body.color
        glow = blend_hex(color, "#FFFFFF", 0.45) if active else color
        border = SpaceColors.TEXT_PRIMARY if active else blend_hex(color, "#000000", 0.3)
        self.setStyleSheet(
            f"""
            QPushButton {{
                background: {glow};
                color: {SpaceColors.BG};
                border: {3 if active else 1}px solid {border};
                border-radius: 55px;
                font-weight: 700;
            }}
            """
        )


class MainWindow(QMainWindow):
    """Two screens on a stack, driven entirely by controller signals."""

    def __init__(self, controller: SoundscapeController) -> None:
        super().__init__()
        self._controller = controller
        self._body_buttons: Dict[int, BodyButton] = {}

        self.setWindowTitle("Stellar Soundscapes")
        self.setStyleSheet(f"QMainWindow {{ background: {SpaceColors.BG}; }} QLabel {{ color: {SpaceColors.TEXT_PRIMARY}; }}")

        self._stack = QStackedWidget()
        self._home_screen = self._build_home_screen()
        self._level_screen = self._build_level_screen()
        self._stack.addWidget(self._home_screen)
        self._stack.addWidget(self._level_screen)
        self.setCentralWidget(self._stack)

        controller.score_changed.connect(self._on_score_changed)
        controller.unlocked_changed.connect(self._on_unlocked_changed)
        controller.level_changed.connect(self._on_level_changed)
        controller.description_changed.connect(self._description_label.setText)
        controller.active_changed.connect(self._on_active_changed)
        controller.playback_changed.connect(self._on_playback_changed)
        controller.volume_changed.connect(self._on_volume_changed)

        self._on_score_changed(controller.score)
        self._on_volume_changed(controller.volume)
        self._refresh_levels_list()
        self.resize(900, 640)

    # ------------------------------------------------------------------
    # Screens
    # ------------------------------------------------------------------

    def _build_home_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(14)

        header = QHBoxLayout()
        title = QLabel("Stellar Soundscapes")
        title.setStyleSheet("font-size: 24px; font-weight: 800;")
        self._home_score_label = QLabel("")
        header.addWidget(title, 1)
        header.addWidget(self._home_score_label, 0, Qt.AlignRight)
        layout.addLayout(header)

        self._levels_layout = QVBoxLayout()
        self._levels_layout.setSpacing(12)
        layout.addLayout(self._levels_layout)
        layout.addStretch(1)
        return screen

    def _build_level_screen(self) -> QWidget:
        screen = QWidget()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(14)

        header = QHBoxLayout()
        back = QPushButton("← Back to Levels")
        back.clicked.connect(self._controller.back_to_levels)
        self._level_title_label = QLabel("")
        self._level_title_label.setStyleSheet("font-size: 18px; font-weight: 700;")
        self._level_score_label = QLabel("")
        header.addWidget(back, 0)
        header.addWidget(self._level_title_label, 1, Qt.AlignCenter)
        header.addWidget(self._level_score_label, 0, Qt.AlignRight)
        layout.addLayout(header)

        sky = QFrame()
        sky.setObjectName("sky")
        sky.setStyleSheet(f"QFrame#sky {{ background: {SpaceColors.PANEL}; border-radius: 12px; }}")
        sky.setMinimumHeight(320)
        self._bodies_layout = QGridLayout(sky)
        self._bodies_layout.setSpacing(24)
        layout.addWidget(sky, 1)

        self._description_label = QLabel(DEFAULT_HINT)
        self._description_label.setWordWrap(True)
        self._description_label.setMinimumHeight(60)
        self._description_label.setStyleSheet(
            f"background: {SpaceColors.PANEL}; border-radius: 8px; padding: 10px; color: {SpaceColors.TEXT_SECONDARY};"
        )
        layout.addWidget(self._description_label)

        controls = QHBoxLayout()
        self._play_button = QPushButton("▶ Play")
        self._play_button.setStyleSheet(
            f"QPushButton {{ background: {SpaceColors.ACCENT}; color: white; padding: 8px 18px; border-radius: 6px; }}"
            f"QPushButton:hover {{ background: {SpaceColors.ACCENT_HOVER}; }}"
        )
        self._play_button.clicked.connect(self._controller.toggle_playback)

        self._volume_slider = QSlider(Qt.Horizontal)
        self._volume_slider.setRange(0, 100)
        self._volume_slider.setFixedWidth(160)
        self._volume_slider.valueChanged.connect(self._controller.set_volume)

        self._active_label = QLabel("Active Sounds: 0")
        controls.addWidget(self._play_button)
        controls.addWidget(QLabel("\U0001F50A"))
        controls.addWidget(self._volume_slider)
        controls.addStretch(1)
        controls.addWidget(self._active_label)
        layout.addLayout(controls)
        return screen

    def _refresh_levels_list(self) -> None:
        while self._levels_layout.count():
            item = self._levels_layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()

        states = build_level_states(
            self._controller.catalog.levels(),
            self._controller_unlocked_ids(),
            self._controller.score,
        )
        for state in states:
            self._levels_layout.addWidget(LevelCard(state, self._controller.select_level))

    def _controller_unlocked_ids(self) -> frozenset[int]:
        return frozenset(
            level.id for level in self._controller.catalog.levels() if self._controller.is_level_selectable(level.id)
        )

    def _populate_bodies(self, level: Level) -> None:
        while self._bodies_layout.count():
            item = self._bodies_layout.takeAt(0)
            w = item.widget()
            if w is not None:
                w.setParent(None)
                w.deleteLater()
        self._body_buttons.clear()
        for index, body in enumerate(level.bodies):
            button = BodyButton(body, self._on_body_clicked)
            self._body_buttons[body.id] = button
            self._bodies_layout.addWidget(button, index // 3, index % 3, Qt.AlignCenter)

    # ------------------------------------------------------------------
    # Signal handlers
    # ------------------------------------------------------------------

    def _on_body_clicked(self, body_id: int) -> None:
        self._controller.toggle_body(body_id)

    def _on_score_changed(self, score: int) -> None:
        text = f"⭐ {score} points"
        self._home_score_label.setText(text)
        self._level_score_label.setText(text)

    def _on_unlocked_changed(self, _unlocked: list) -> None:
        self._refresh_levels_list()

    def _on_level_changed(self, level: Optional[Level]) -> None:
        if level is None:
            self._refresh_levels_list()
            self._stack.setCurrentWidget(self._home_screen)
            return
        self._level_title_label.setText(level.name)
        self._populate_bodies(level)
        self._stack.setCurrentWidget(self._level_screen)

    def _on_active_changed(self, active: list) -> None:
        active_ids = set(active)
        for body_id, button in self._body_buttons.items():
            button.set_active(body_id in active_ids)
        self._active_label.setText(f"Active Sounds: {len(active_ids)}")

    def _on_playback_changed(self, playing: bool) -> None:
        self._play_button.setText("⏸ Stop" if playing else "▶ Play")

    def _on_volume_changed(self, volume: int) -> None:
        if self._volume_slider.value() != volume:
            self._volume_slider.blockSignals(True)
            self._volume_slider.setValue(volume)
            self._volume_slider.blockSignals(False)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._controller.shutdown()
        super().closeEvent(event)
