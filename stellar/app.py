"""Application entry point and setup for Stellar Soundscapes."""

import logging
import sys
from functools import partial

from PySide6.QtWidgets import QApplication

from stellar.core.audio import create_sink
from stellar.core.config import Settings
from stellar.core.controller import SoundscapeController
from stellar.core.levels import LevelCatalog
from stellar.core.progress import JsonFileStore, ProgressionTracker
from stellar.ui.main_window import MainWindow


def configure_logging(level: str = "INFO") -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def build_controller(settings: Settings) -> SoundscapeController:
    """Wire catalog, persisted progress and audio into a controller."""
    catalog = LevelCatalog()
    tracker = ProgressionTracker(catalog, JsonFileStore(settings.progress_file))
    logging.info(
        "Loaded %d levels; score %d, unlocked %s",
        len(catalog.levels()),
        tracker.score,
        sorted(tracker.unlocked_level_ids),
    )
    return SoundscapeController(
        catalog,
        tracker,
        sink_factory=partial(create_sink, settings.audio_backend, settings.sample_rate),
        unlock_all=settings.unlock_all,
        initial_volume=settings.initial_volume,
    )


def run() -> None:
    """Initialize the application, load levels and progress, and show the main window."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = QApplication(sys.argv)
    app.setApplicationName("Stellar Soundscapes")
    app.setApplicationDisplayName("Stellar Soundscapes")

    controller = build_controller(settings)
    app.aboutToQuit.connect(controller.shutdown)

    window = MainWindow(controller)
    window.show()

    sys.exit(app.exec())
