"""Snapshot ledger for stepping back and forth through a state's evolution."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import List, Optional

import torch

from ..logging import get_logger

logger = get_logger(__name__)

_serials = itertools.count(1)


@dataclass(frozen=True)
class Snapshot:
    """
    One recorded statevector.

    ``serial`` is unique per saved snapshot, so callers can tell whether the
    entry at a given ledger position is still the one they recorded.
    """

    serial: int
    state: torch.Tensor


class HistoryLedger:
    """
    Ordered snapshots plus a cursor.

    ``snapshots[0]`` is the initial state and ``snapshots[cursor]`` mirrors the
    owner's live state. Saving while the cursor is behind the end discards
    every later snapshot before appending (the old future is overwritten by
    the new branch).
    """

    def __init__(self, initial: Optional[torch.Tensor] = None) -> None:
        self._snapshots: List[Snapshot] = []
        self._cursor = 0
        if initial is not None:
            self.reset(initial)

    def reset(self, initial: torch.Tensor) -> None:
        """Forget everything and start again from ``initial``."""
        self._snapshots = [Snapshot(next(_serials), initial.detach().clone())]
        self._cursor = 0

    def save(self, state: torch.Tensor) -> int:
        """Record ``state`` after the cursor and move the cursor onto it.

        Returns the new cursor position.
        """
        if not self._snapshots:
            raise RuntimeError("HistoryLedger.save called before reset.")
        dropped = len(self._snapshots) - self._cursor - 1
        if dropped:
            logger.debug("Branching history at step %d, dropping %d later snapshots",
                         self._cursor, dropped)
            del self._snapshots[self._cursor + 1:]
        self._snapshots.append(Snapshot(next(_serials), state.detach().clone()))
        self._cursor = len(self._snapshots) - 1
        return self._cursor

    def step_backward(self) -> bool:
        """Move the cursor back one entry; False at the first entry."""
        return self.step_to(self._cursor - 1)

    def step_forward(self) -> bool:
        """Move the cursor forward one entry; False at the last entry."""
        return self.step_to(self._cursor + 1)

    def step_to(self, index: int) -> bool:
        """Jump the cursor to ``index``; False (cursor unchanged) when out of range."""
        if not 0 <= index < len(self._snapshots):
            return False
        self._cursor = index
        return True

    def current(self) -> torch.Tensor:
        """A copy of the snapshot under the cursor."""
        return self._snapshots[self._cursor].state.clone()

    def serial_at(self, index: int) -> Optional[int]:
        """Serial of the snapshot at ``index``, or ``None`` if there is none."""
        if 0 <= index < len(self._snapshots):
            return self._snapshots[index].serial
        return None

    def states(self) -> List[torch.Tensor]:
        """Copies of every recorded statevector, oldest first."""
        return [snap.state.clone() for snap in self._snapshots]

    @property
    def cursor(self) -> int:
        return self._cursor

    def __len__(self) -> int:
        return len(self._snapshots)

    def __repr__(self) -> str:
        return f"HistoryLedger(length={len(self)}, cursor={self._cursor})"


__all__ = ["HistoryLedger", "Snapshot"]
