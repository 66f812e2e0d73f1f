"""Transport base class for point-to-point game messaging.

A transport endpoint is bound to one peer and offers three primitives:

- ``send``: buffered delivery, returns as soon as the message is queued
- ``ssend``: synchronous delivery, returns only once the destination has
  received the message (the protocol's only ordering primitive)
- ``recv``: blocking receive from any sender

Delivery between any two peers is FIFO. Messages travel as wire records and
are decoded on receipt, so every backend exercises the same codec.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..exceptions import TransportError
from ..messages import GameMessage, WireRecord

logger = logging.getLogger(__name__)

__all__ = [
    "Envelope",
    "Transport",
]


@dataclass(frozen=True)
class Envelope:
    """A wire record in flight, tagged with its source."""

    source: int
    payload: WireRecord
    needs_ack: bool = False


class Transport(ABC):
    """Point-to-point endpoint for one peer."""

    def __init__(self, peer_id: int, size: int, timeout: float | None = None) -> None:
        if not 0 <= peer_id < size:
            raise ValueError(f"peer_id {peer_id} outside [0, {size})")
        self._peer_id = peer_id
        self._size = size
        self.timeout = timeout

    @property
    def peer_id(self) -> int:
        return self._peer_id

    @property
    def size(self) -> int:
        return self._size

    def send(self, dest: int, message: GameMessage) -> None:
        """Queue ``message`` for ``dest`` and return immediately."""
        self._check_dest(dest)
        self._deliver(dest, Envelope(self._peer_id, message.to_wire()))

    def ssend(self, dest: int, message: GameMessage) -> None:
        """Deliver ``message`` and wait until ``dest`` has received it.

        Raises:
            TransportTimeoutError: no acknowledgement within ``timeout``
        """
        self._check_dest(dest)
        self._deliver_and_wait(dest, Envelope(self._peer_id, message.to_wire(), needs_ack=True))

    def recv(self) -> GameMessage:
        """Block until one message arrives from any peer.

        Raises:
            TransportTimeoutError: nothing arrived within ``timeout``
            MessageDecodeError: the record is not a valid game message
        """
        envelope = self._next_envelope()
        if envelope.needs_ack:
            self._acknowledge(envelope)
        return GameMessage.from_wire(envelope.payload)

    def _check_dest(self, dest: int) -> None:
        if not 0 <= dest < self._size:
            raise TransportError(f"Unknown destination peer {dest}")
        if dest == self._peer_id:
            raise TransportError(f"Peer {dest} cannot send to itself")

    @abstractmethod
    def _deliver(self, dest: int, envelope: Envelope) -> None:
        """Put ``envelope`` in the inbox of ``dest``."""

    @abstractmethod
    def _deliver_and_wait(self, dest: int, envelope: Envelope) -> None:
        """Put ``envelope`` in the inbox of ``dest`` and wait for its ack."""

    @abstractmethod
    def _next_envelope(self) -> Envelope:
        """Take the oldest envelope from this peer's inbox."""

    @abstractmethod
    def _acknowledge(self, envelope: Envelope) -> None:
        """Tell ``envelope.source`` that its synchronous send was received."""
