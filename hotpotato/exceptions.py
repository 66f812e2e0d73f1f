"""Exception types for the hot potato game.

Errors fall into three groups:

- configuration errors (bad startup parameters): raised before any peer
  starts and reported to the operator with a non-zero exit
- protocol irregularities (a handoff naming somebody else, a negative token
  arriving on a handoff): normalized by the peer and logged, never raised
- transport failures (a peer that never answers): fatal, surfaced as
  ``TransportError`` subclasses and re-raised by the runner

Usage:
    from hotpotato.exceptions import CONFIG_ERRORS, ConfigurationError

    try:
        config = GameConfig(initial_token=-1, max_decrement=5).validate()
    except CONFIG_ERRORS as e:
        logger.error(f"Invalid configuration: {e}")
"""

from __future__ import annotations

import queue

__all__ = [
    "CONFIG_ERRORS",
    "ConfigurationError",
    "GameStalledError",
    "HotPotatoError",
    "MessageDecodeError",
    "PeerFailedError",
    "TRANSPORT_ERRORS",
    "TransportError",
    "TransportTimeoutError",
]


class HotPotatoError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(HotPotatoError, ValueError):
    """Startup parameters are missing or malformed."""


class MessageDecodeError(HotPotatoError, ValueError):
    """A wire record is not a valid game message."""


class TransportError(HotPotatoError):
    """The messaging substrate could not deliver or receive a message."""


class TransportTimeoutError(TransportError, TimeoutError):
    """A receive or delivery acknowledgement did not arrive in time."""


class GameStalledError(HotPotatoError):
    """One or more peers did not finish before the join deadline."""

    def __init__(self, stalled_peers: list[int]) -> None:
        self.stalled_peers = stalled_peers
        super().__init__(f"Peers did not finish: {stalled_peers}")


class PeerFailedError(HotPotatoError):
    """A peer raised while playing; the underlying error is chained."""

    def __init__(self, peer_id: int, reason: str) -> None:
        self.peer_id = peer_id
        super().__init__(f"Peer {peer_id} failed: {reason}")


# =============================================================================
# Exception Type Tuples
# =============================================================================

# Use for: loading YAML files, reading env vars, parsing CLI values
CONFIG_ERRORS: tuple[type[BaseException], ...] = (
    ConfigurationError,
    OSError,  # Config file missing or unreadable
)

# Use for: send/ssend/recv on any transport
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (
    TransportError,
    queue.Empty,  # Raw queue timeout that escaped translation
    EOFError,     # multiprocessing pipe closed under us
)
