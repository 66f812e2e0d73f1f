"""Hot Potato: an elimination game played by peers over message passing.

N peers pass a numeric token around a ring. Each holder subtracts a random
draw; a holder whose token goes negative drops out, and the last peer left
wins. Peer 0 doubles as coordinator and prints every event in game order.

Usage:
    from hotpotato import GameConfig, run_game

    result = run_game(GameConfig(initial_token=20, max_decrement=6, num_peers=5))
    print(result.winner, result.lines)
"""

from .config import GameConfig, load_config
from .exceptions import (
    ConfigurationError,
    GameStalledError,
    HotPotatoError,
    MessageDecodeError,
    PeerFailedError,
    TransportError,
    TransportTimeoutError,
)
from .messages import GameMessage, MessageFlag
from .peer import Peer, PeerOutcome, TurnState
from .playing_set import PlayingSet, next_player
from .reporter import StatusReporter
from .runner import GameResult, run_game

__version__ = "0.1.0"

__all__ = [
    # Config
    "GameConfig",
    "load_config",
    # Errors
    "ConfigurationError",
    "GameStalledError",
    "HotPotatoError",
    "MessageDecodeError",
    "PeerFailedError",
    "TransportError",
    "TransportTimeoutError",
    # Protocol
    "GameMessage",
    "MessageFlag",
    "Peer",
    "PeerOutcome",
    "PlayingSet",
    "StatusReporter",
    "TurnState",
    "next_player",
    # Runner
    "GameResult",
    "run_game",
]
