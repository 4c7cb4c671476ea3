from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


class Waveform(str, Enum):
    SINE = "sine"
    TRIANGLE = "triangle"
    SAWTOOTH = "sawtooth"
    SQUARE = "square"


class BodyType(str, Enum):
    """Cosmetic tag for a body; nothing branches on it."""

    STAR = "star"
    PLANET = "planet"
    RINGS = "rings"
    NEBULA = "nebula"
    BLACKHOLE = "blackhole"


@dataclass(frozen=True)
class SoundConfig:
    frequency: float
    waveform: Waveform
    pulse_rate: int
    filter_freq: float


@dataclass(frozen=True)
class CelestialBody:
    id: int
    name: str
    type: BodyType
    description: str
    sound: SoundConfig
    color: str = "#FFFFFF"


@dataclass(frozen=True)
class Level:
    id: int
    name: str
    description: str
    required_score: int
    bodies: Tuple[CelestialBody, ...]

    def find_body(self, body_id: int) -> Optional[CelestialBody]:
        for body in self.bodies:
            if body.id == body_id:
                return body
        return None


def default_levels_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "levels"


class LevelCatalog:
    """Ordered, read-only collection of levels loaded from ``data/levels/level*.yaml``.

    Lookups never raise; a miss returns ``None`` and the caller decides what to do.
    """

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or default_levels_dir()
        self._levels = self._load_levels()

    def levels(self) -> List[Level]:
        return list(self._levels.values())

    def first(self) -> Level:
        return next(iter(self._levels.values()))

    def find_level(self, level_id: int) -> Optional[Level]:
        return self._levels.get(level_id)

    def find_body(self, level_id: int, body_id: int) -> Optional[CelestialBody]:
        level = self._levels.get(level_id)
        if level is None:
            return None
        return level.find_body(body_id)

    def _load_levels(self) -> Dict[int, Level]:
        base_dir = self._base_dir
        if not base_dir.exists():
            raise FileNotFoundError(f"Levels directory not found: {base_dir}")

        levels: Dict[int, Level] = {}

        def _sort_key(p: Path) -> tuple[int, str]:
            m = re.match(r"^level(\d+)$", p.stem)
            if m:
                return (int(m.group(1)), p.stem)
            return (10**9, p.stem)

        for level_path in sorted(base_dir.glob("level*.yaml"), key=_sort_key):
            raw = yaml.safe_load(level_path.read_text(encoding="utf-8"))
            level = _parse_level(level_path.name, raw)
            if level.id in levels:
                raise ValueError(f"{level_path.name}: duplicate level id {level.id}")
            levels[level.id] = level

        if not levels:
            raise ValueError(f"No level files (level*.yaml) found in {base_dir}")
        return levels


def _parse_level(source: str, raw: Any) -> Level:
    if not raw or not isinstance(raw, dict):
        raise ValueError(f"{source}: expected YAML mapping with 'id', 'name' and 'bodies'")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ValueError(f"{source}: missing or invalid 'name'")
    level_id = _require_int(source, raw, "id")
    required_score = _require_int(source, raw, "required_score", minimum=0)
    raw_bodies = raw.get("bodies")
    if not isinstance(raw_bodies, list) or not raw_bodies:
        raise ValueError(f"{source}: 'bodies' must be a non-empty list")

    bodies: List[CelestialBody] = []
    seen: set[int] = set()
    for index, raw_body in enumerate(raw_bodies):
        body = _parse_body(f"{source} body #{index}", raw_body)
        if body.id in seen:
            raise ValueError(f"{source}: duplicate body id {body.id}")
        seen.add(body.id)
        bodies.append(body)

    return Level(
        id=level_id,
        name=name.strip(),
        description=str(raw.get("description", "")).strip(),
        required_score=required_score,
        bodies=tuple(bodies),
    )


def _parse_body(source: str, raw: Any) -> CelestialBody:
    if not isinstance(raw, dict):
        raise ValueError(f"{source}: expected a mapping")
    name = raw.get("name")
    if not name or not isinstance(name, str):
        raise ValueError(f"{source}: missing or invalid 'name'")
    try:
        body_type = BodyType(raw.get("type"))
    except ValueError:
        raise ValueError(f"{source}: unknown body type {raw.get('type')!r}") from None

    sound = raw.get("sound")
    if not isinstance(sound, dict):
        raise ValueError(f"{source}: missing 'sound'")
    try:
        waveform = Waveform(sound.get("waveform"))
    except ValueError:
        raise ValueError(f"{source}: unknown waveform {sound.get('waveform')!r}") from None

    config = SoundConfig(
        frequency=_require_positive_float(source, sound, "frequency"),
        waveform=waveform,
        pulse_rate=_require_int(source, sound, "pulse_rate", minimum=1),
        filter_freq=_require_positive_float(source, sound, "filter_freq"),
    )
    return CelestialBody(
        id=_require_int(source, raw, "id"),
        name=name.strip(),
        type=body_type,
        description=str(raw.get("description", "")).strip(),
        sound=config,
        color=str(raw.get("color", "#FFFFFF")).strip(),
    )


def _require_int(source: str, raw: dict, key: str, minimum: Optional[int] = None) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{source}: missing or invalid '{key}'")
    if minimum is not None and value < minimum:
        raise ValueError(f"{source}: '{key}' must be >= {minimum}")
    return value


def _require_positive_float(source: str, raw: dict, key: str) -> float:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{source}: '{key}' must be a positive number")
    return float(value)
