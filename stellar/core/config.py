"""Runtime settings read from ``STELLAR_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

AUDIO_BACKENDS = ("auto", "sounddevice", "null")


def clamp_volume(value: float) -> int:
    """Clamp a volume to the 0..100 range used everywhere in the app."""
    return max(0, min(100, int(round(value))))


@dataclass(frozen=True)
class Settings:
    home_dir: Path
    unlock_all: bool = False
    audio_backend: str = "auto"
    sample_rate: int = 44100
    initial_volume: int = 50
    log_level: str = "INFO"

    @property
    def progress_file(self) -> Path:
        return self.home_dir / "progress.json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        home = env.get("STELLAR_HOME")
        home_dir = Path(home).expanduser() if home else Path.home() / ".stellar"

        backend = env.get("STELLAR_AUDIO_BACKEND", "auto").strip().lower()
        if backend not in AUDIO_BACKENDS:
            logger.warning("Unknown STELLAR_AUDIO_BACKEND %r, using 'auto'", backend)
            backend = "auto"

        return cls(
            home_dir=home_dir,
            unlock_all=env.get("STELLAR_UNLOCK_ALL") == "1",
            audio_backend=backend,
            sample_rate=_int_from_env(env, "STELLAR_SAMPLE_RATE", 44100, minimum=8000),
            initial_volume=clamp_volume(_int_from_env(env, "STELLAR_VOLUME", 50)),
            log_level=env.get("STELLAR_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        )


def _int_from_env(env: Mapping[str, str], key: str, default: int, minimum: Optional[int] = None) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %d", key, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring %s=%d below %d, using %d", key, value, minimum, default)
        return default
    return value
