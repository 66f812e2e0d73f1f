"""In-process transport: one inbox queue per peer, peers run as threads.

Each peer owns two queues in the hub: an inbox that every other peer writes
envelopes into, and an ack queue where receivers confirm synchronous sends.
A peer has at most one synchronous send outstanding, so a single ack queue per
sender is enough to pair acknowledgements with sends.

Usage:
    hub = LocalHub(size=3)
    t0, t1 = hub.endpoint(0), hub.endpoint(1)
    t0.send(1, msg)
    assert t1.recv() == msg
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any

from ..exceptions import TransportError, TransportTimeoutError
from .base import Envelope, Transport

logger = logging.getLogger(__name__)

__all__ = [
    "LocalHub",
    "QueueHub",
    "QueueTransport",
]


class QueueHub:
    """Shared inbox and ack queues for ``size`` peers."""

    def __init__(self, size: int, timeout: float | None = None) -> None:
        if size < 1:
            raise ValueError(f"Hub needs at least one peer, got {size}")
        self.size = size
        self.timeout = timeout
        self.inboxes = [self._make_queue() for _ in range(size)]
        self.acks = [self._make_queue() for _ in range(size)]

    def _make_queue(self) -> Any:
        return queue.Queue()

    def endpoint(self, peer_id: int) -> QueueTransport:
        return QueueTransport(self, peer_id)

    def endpoints(self) -> list[QueueTransport]:
        return [self.endpoint(peer_id) for peer_id in range(self.size)]


class LocalHub(QueueHub):
    """Hub for peers that share one interpreter; counts deliveries."""

    def __init__(self, size: int, timeout: float | None = None) -> None:
        super().__init__(size, timeout)
        self._lock = threading.Lock()
        self.delivered = 0

    def record_delivery(self) -> None:
        with self._lock:
            self.delivered += 1


class QueueTransport(Transport):
    """Transport endpoint backed by the queues of a ``QueueHub``."""

    def __init__(self, hub: QueueHub, peer_id: int) -> None:
        super().__init__(peer_id, hub.size, hub.timeout)
        self._inboxes = hub.inboxes
        self._acks = hub.acks
        self._on_deliver = getattr(hub, "record_delivery", None)

    def _deliver(self, dest: int, envelope: Envelope) -> None:
        self._inboxes[dest].put(envelope)
        if self._on_deliver is not None:
            self._on_deliver()

    def _deliver_and_wait(self, dest: int, envelope: Envelope) -> None:
        self._deliver(dest, envelope)
        try:
            acked_by = self._acks[self.peer_id].get(timeout=self.timeout)
        except queue.Empty as e:
            raise TransportTimeoutError(
                f"Peer {dest} did not acknowledge a message from peer {self.peer_id} "
                f"within {self.timeout}s"
            ) from e
        if acked_by != dest:
            raise TransportError(
                f"Peer {self.peer_id} expected an ack from {dest}, got one from {acked_by}"
            )

    def _next_envelope(self) -> Envelope:
        try:
            return self._inboxes[self.peer_id].get(timeout=self.timeout)
        except queue.Empty as e:
            raise TransportTimeoutError(
                f"Peer {self.peer_id} received nothing within {self.timeout}s"
            ) from e

    def _acknowledge(self, envelope: Envelope) -> None:
        self._acks[envelope.source].put(self.peer_id)
