"""Multiprocessing transport: each peer runs in its own OS process.

Same queue layout as the in-process hub, built on ``multiprocessing`` queues
so that endpoints can be handed to child processes. A queue written from a
single process keeps that process's put order, which gives per-pair FIFO.
"""

from __future__ import annotations

import logging
import multiprocessing
from typing import Any

from .local import QueueHub

logger = logging.getLogger(__name__)

__all__ = ["ProcessHub"]


class ProcessHub(QueueHub):
    """Hub whose queues can cross process boundaries.

    Args:
        size: Number of peers
        timeout: Seconds to wait on receive or acknowledgement (None = forever)
        start_method: multiprocessing start method; None uses the platform default
    """

    def __init__(
        self,
        size: int,
        timeout: float | None = None,
        start_method: str | None = None,
    ) -> None:
        self.context = multiprocessing.get_context(start_method)
        super().__init__(size, timeout)

    def _make_queue(self) -> Any:
        return self.context.Queue()

    def close(self) -> None:
        """Release queue feeder threads in this process."""
        for q in (*self.inboxes, *self.acks):
            q.close()
            q.join_thread()
