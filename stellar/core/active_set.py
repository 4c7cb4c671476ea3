from __future__ import annotations

from typing import FrozenSet, Iterator, Set


class ActiveSet:
    """Body ids currently toggled on. Pure set semantics, no timing."""

    def __init__(self) -> None:
        self._ids: Set[int] = set()

    def toggle(self, body_id: int) -> bool:
        """Flip membership of ``body_id`` and return the new state (True = on)."""
        if body_id in self._ids:
            self._ids.remove(body_id)
            return False
        self._ids.add(body_id)
        return True

    def contains(self, body_id: int) -> bool:
        return body_id in self._ids

    def snapshot(self) -> FrozenSet[int]:
        return frozenset(self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, body_id: object) -> bool:
        return body_id in self._ids

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)
