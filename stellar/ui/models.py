"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass

from stellar.core.levels import Level


@dataclass
class LevelState:
    """UI state for a single level card: unlock status and selection."""

    level: Level
    unlocked: bool
    score: int
    is_current: bool = False

    @property
    def points_needed(self) -> int:
        """Points still missing before the level can be selected."""
        if self.unlocked:
            return 0
        return max(0, self.level.required_score - self.score)


def build_level_states(levels: list[Level], unlocked_ids: set[int] | frozenset[int], score: int, unlock_all: bool = False) -> list[LevelState]:
    """Compute card state for every level and mark the highest unlocked one as current."""
    states = [
        LevelState(level=level, unlocked=bool(unlock_all or level.id in unlocked_ids), score=score)
        for level in levels
    ]
    for st in reversed(states):
        if st.unlocked:
            st.is_current = True
            break
    return states
