"""Coordinator console output."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from .messages import GameMessage, MessageFlag

logger = logging.getLogger(__name__)


class StatusReporter:
    """Writes one status line per game event and remembers what it wrote.

    Only the coordinator owns a reporter. Lines are written in the order the
    coordinator processes events, which the protocol keeps equal to the
    causal order of the token's path.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self.lines: list[str] = []

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so a redirected sys.stdout (pytest capsys) is honored
        return self._stream if self._stream is not None else sys.stdout

    def holds(self, peer_id: int, token: int) -> None:
        self._emit(f"Peer {peer_id} holds token {token}")

    def drops_out(self, peer_id: int, token: int) -> None:
        self._emit(f"Peer {peer_id} holds token {token} (peer {peer_id} drops out)")

    def wins(self, peer_id: int) -> None:
        self._emit(f"Peer {peer_id} wins")

    def report(self, message: GameMessage) -> None:
        """Print the line for a message received by the coordinator."""
        if message.flag is MessageFlag.CONTINUE:
            self.holds(message.sender_id, message.token)
        elif message.flag is MessageFlag.ELIMINATED:
            self.drops_out(message.sender_id, message.token)
        elif message.flag is MessageFlag.GAME_OVER:
            self.wins(message.sender_id)
        # CONTINUE_SILENT: already reported by the elimination broadcast

    def _emit(self, line: str) -> None:
        self.lines.append(line)
        logger.debug(f"status: {line}")
        print(line, file=self.stream, flush=True)
