"""Point-to-point transports for the hot potato ring.

- LocalHub: peers as threads in one interpreter
- ProcessHub: peers as separate OS processes
"""

from .base import Envelope, Transport
from .local import LocalHub, QueueHub, QueueTransport
from .process import ProcessHub

__all__ = [
    "Envelope",
    "LocalHub",
    "ProcessHub",
    "QueueHub",
    "QueueTransport",
    "Transport",
]
