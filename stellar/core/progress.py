from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, FrozenSet, Optional, Protocol, Set, Tuple

from stellar.core.levels import LevelCatalog

logger = logging.getLogger(__name__)

SCORE_KEY = "stellarScore"
UNLOCKED_KEY = "stellarUnlockedLevels"
POINTS_PER_TRIGGER = 10


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Key-value store persisted as a flat JSON object of strings.

    Every ``set`` writes the whole file. Unreadable files start empty and
    write failures are logged, never raised.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._data = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def _load(self) -> Dict[str, str]:
        if not self._file_path.exists():
            return {}
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Could not load progress from %s: %s", self._file_path, e)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring progress file %s: expected a JSON object", self._file_path)
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, str)}

    def _save(self) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self._file_path, e)


class ProgressionTracker:
    """Cumulative score and the set of unlocked levels.

    State is loaded once from the store and written back after every trigger.
    Unlocks only ever grow.
    """

    def __init__(self, catalog: LevelCatalog, store: KeyValueStore) -> None:
        self._catalog = catalog
        self._store = store
        self._score = self._load_score()
        self._unlocked = self._load_unlocked()

    @property
    def score(self) -> int:
        return self._score

    @property
    def unlocked_level_ids(self) -> FrozenSet[int]:
        return frozenset(self._unlocked)

    def is_unlocked(self, level_id: int) -> bool:
        return level_id in self._unlocked

    def on_trigger(self) -> Tuple[int, FrozenSet[int]]:
        """Add the points for one trigger, unlock what the new score reaches and persist."""
        self._score += POINTS_PER_TRIGGER
        newly = self._unlock_reached()
        self._store.set(SCORE_KEY, str(self._score))
        self._store.set(UNLOCKED_KEY, json.dumps(sorted(self._unlocked)))
        if newly:
            logger.info("Score %d unlocked levels %s", self._score, sorted(newly))
        return self._score, self.unlocked_level_ids

    def _unlock_reached(self) -> Set[int]:
        newly: Set[int] = set()
        for level in self._catalog.levels():
            if level.required_score <= self._score and level.id not in self._unlocked:
                self._unlocked.add(level.id)
                newly.add(level.id)
        return newly

    def _load_score(self) -> int:
        raw = self._store.get(SCORE_KEY)
        if raw is None:
            return 0
        try:
            score = int(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed stored score %r", raw)
            return 0
        if score < 0:
            logger.warning("Ignoring negative stored score %d", score)
            return 0
        return score

    def _load_unlocked(self) -> Set[int]:
        default = {self._catalog.first().id}
        raw = self._store.get(UNLOCKED_KEY)
        if raw is None:
            return default
        try:
            ids = json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            logger.warning("Ignoring malformed stored unlocked levels %r", raw)
            return default
        if not isinstance(ids, list) or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            logger.warning("Ignoring malformed stored unlocked levels %r", raw)
            return default
        return set(ids) or default
