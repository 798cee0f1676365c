"""Snapshot history for undo/redo."""

from __future__ import annotations

import copy
from typing import Generic, TypeVar

S = TypeVar("S")


class UndoManager(Generic[S]):
    """Linear history of deep-copied snapshots with a current index.

    A new snapshot after an undo discards the redo branch. The oldest
    snapshots are dropped beyond ``max_depth``.
    """

    def __init__(self, max_depth: int = 100) -> None:
        self._states: list[S] = []
        self._index = -1
        self._max_depth = max(1, max_depth)

    def reset(self, state: S) -> None:
        """Forget all history; ``state`` becomes the only snapshot."""
        self._states = [copy.deepcopy(state)]
        self._index = 0

    def snapshot(self, state: S) -> None:
        del self._states[self._index + 1 :]
        self._states.append(copy.deepcopy(state))
        overflow = len(self._states) - self._max_depth
        if overflow > 0:
            del self._states[:overflow]
        self._index = len(self._states) - 1

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._states) - 1

    def undo(self) -> S | None:
        """Step back and return a copy of the previous snapshot."""
        if not self.can_undo():
            return None
        self._index -= 1
        return copy.deepcopy(self._states[self._index])

    def redo(self) -> S | None:
        if not self.can_redo():
            return None
        self._index += 1
        return copy.deepcopy(self._states[self._index])

    @property
    def length(self) -> int:
        return len(self._states)
