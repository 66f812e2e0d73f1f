"""Per-peer replica of the "still playing" set.

Every peer keeps its own ``PlayingSet``; replicas converge through the
elimination broadcast rather than shared memory. Entries only ever go from
playing to eliminated, so merging two replicas is an element-wise AND.
"""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)

__all__ = [
    "PlayingSet",
    "next_player",
]


def next_player(holder: int, playing: np.ndarray) -> int:
    """Return the next playing peer after ``holder`` in ring order.

    The scan visits ``holder + 1, holder + 2, ...`` modulo N and ends on the
    holder itself, so the holder is returned only when nobody else is still
    playing. That return value is the victory signal.

    Args:
        holder: Id of the peer currently holding the token
        playing: Boolean vector, ``True`` for peers still in the game

    Returns:
        Id of the next holder, or ``holder`` when it is the last one left
    """
    n = len(playing)
    ring_order = (np.arange(1, n + 1) + holder) % n
    candidates = ring_order[playing[ring_order]]
    if candidates.size == 0:
        # Holder already out and nobody left; degenerate, keep the token
        return holder
    return int(candidates[0])


class PlayingSet:
    """Monotonic boolean vector of peers still in the game."""

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"PlayingSet needs at least one peer, got {size}")
        self._playing = np.ones(size, dtype=np.bool_)
        self._eliminated_order: list[int] = []

    def __len__(self) -> int:
        return len(self._playing)

    def __repr__(self) -> str:
        return f"PlayingSet({self.snapshot()!r})"

    def is_playing(self, peer_id: int) -> bool:
        return bool(self._playing[peer_id])

    def eliminate(self, peer_id: int) -> bool:
        """Mark ``peer_id`` as out. Returns False if it already was."""
        if not self._playing[peer_id]:
            return False
        self._playing[peer_id] = False
        self._eliminated_order.append(peer_id)
        return True

    def next_after(self, holder: int) -> int:
        return next_player(holder, self._playing)

    @property
    def remaining(self) -> int:
        return int(np.count_nonzero(self._playing))

    @property
    def playing_ids(self) -> list[int]:
        return [int(i) for i in np.flatnonzero(self._playing)]

    @property
    def eliminated_order(self) -> list[int]:
        """Peers in the order this replica learned they were out."""
        return list(self._eliminated_order)

    def snapshot(self) -> tuple[bool, ...]:
        return tuple(bool(v) for v in self._playing)
