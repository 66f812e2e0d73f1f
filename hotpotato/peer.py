"""Peer state machine for the hot potato ring.

Each peer runs the same loop. While it holds the token it takes a turn:
pick the next playing peer, subtract a random draw, then either hand the
token on or drop out. While it waits it blocks on the transport and reacts to
whatever arrives. Peer 0 is also the coordinator: it prints the status of
every event and is told about every elimination.

States:
    WAITING -> HOLDING              handoff addressed to this peer
    HOLDING -> WAITING              token handed on (or coordinator dropped out)
    HOLDING -> ELIMINATED_TERMINAL  non-coordinator dropped out
    HOLDING -> GAME_OVER_TERMINAL   this peer is the last one playing
    WAITING -> GAME_OVER_TERMINAL   GAME_OVER received (coordinator only)

Ordering relies on two synchronous sends. A non-coordinator reports a
continuation to the coordinator before handing the token on, so the
coordinator prints in game order. An elimination is delivered to every
playing peer before the silent handoff, so the next holder never selects a
successor from a stale PlayingSet.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum

from .config import GameConfig
from .constants import COORDINATOR_ID
from .messages import GameMessage, MessageFlag
from .playing_set import PlayingSet
from .reporter import StatusReporter
from .transport.base import Transport

logger = logging.getLogger(__name__)

__all__ = [
    "Peer",
    "PeerOutcome",
    "TurnState",
    "broadcast_recipients",
]


class TurnState(str, Enum):
    """Where a peer is in the turn cycle."""

    WAITING = "waiting"
    HOLDING = "holding"
    ELIMINATED_TERMINAL = "eliminated"
    GAME_OVER_TERMINAL = "game_over"

    @property
    def is_terminal(self) -> bool:
        return self in (TurnState.ELIMINATED_TERMINAL, TurnState.GAME_OVER_TERMINAL)


@dataclass
class PeerOutcome:
    """Final record of one peer after its loop exits."""

    peer_id: int
    state: TurnState
    won: bool
    token: int
    playing: tuple[bool, ...]
    eliminated_order: list[int] = field(default_factory=list)
    turns: int = 0
    lines: list[str] = field(default_factory=list)


def broadcast_recipients(playing: PlayingSet, sender_id: int) -> list[int]:
    """Peers that must hear about ``sender_id`` dropping out.

    Everyone still playing in ``playing`` plus the coordinator, minus the
    sender itself.
    """
    recipients = [peer_id for peer_id in playing.playing_ids if peer_id != sender_id]
    if sender_id != COORDINATOR_ID and COORDINATOR_ID not in recipients:
        recipients.insert(0, COORDINATOR_ID)
    return recipients


class Peer:
    """One participant in the ring.

    Args:
        transport: Endpoint bound to this peer's id
        config: Validated game configuration
        rng: Source of draws; anything with ``randrange(stop)``
        reporter: Console reporter, used only when this peer is the coordinator
    """

    def __init__(
        self,
        transport: Transport,
        config: GameConfig,
        rng: random.Random | None = None,
        reporter: StatusReporter | None = None,
    ) -> None:
        self.transport = transport
        self.peer_id = transport.peer_id
        self.size = transport.size
        self.initial_token = config.initial_token
        self.max_decrement = config.max_decrement
        self.rng = rng if rng is not None else random.Random()

        self.playing = PlayingSet(self.size)
        self.token = self.initial_token
        self.state = TurnState.HOLDING if self.peer_id == COORDINATOR_ID else TurnState.WAITING
        self.won = False
        self.turns = 0

        self.reporter: StatusReporter | None = None
        if self.is_coordinator:
            self.reporter = reporter if reporter is not None else StatusReporter()

    def __repr__(self) -> str:
        return f"Peer(id={self.peer_id}, state={self.state.value}, token={self.token})"

    @property
    def is_coordinator(self) -> bool:
        return self.peer_id == COORDINATOR_ID

    def _log(self, msg: str) -> None:
        logger.debug(f"[peer {self.peer_id}] {msg}")

    # =========================================================================
    # Main loop
    # =========================================================================

    def run(self) -> PeerOutcome:
        """Play until this peer reaches a terminal state."""
        self._log(f"starting in {self.state.value} with token {self.token}")
        while not self.state.is_terminal:
            self.step()
        self._log(f"finished in {self.state.value}")
        return self.outcome()

    def step(self) -> None:
        """Advance one iteration: take a turn, or receive one message."""
        if self.state is TurnState.HOLDING:
            self.take_turn()
        else:
            self.handle_message(self.transport.recv())

    def outcome(self) -> PeerOutcome:
        return PeerOutcome(
            peer_id=self.peer_id,
            state=self.state,
            won=self.won,
            token=self.token,
            playing=self.playing.snapshot(),
            eliminated_order=self.playing.eliminated_order,
            turns=self.turns,
            lines=list(self.reporter.lines) if self.reporter else [],
        )

    # =========================================================================
    # Holder
    # =========================================================================

    def take_turn(self) -> None:
        nxt = self.playing.next_after(self.peer_id)
        if nxt == self.peer_id:
            self._declare_victory()
            return

        self.turns += 1
        draw = self.rng.randrange(self.max_decrement)
        self.token -= draw
        self._log(f"drew {draw}, token now {self.token}, next is {nxt}")

        message = GameMessage(self.peer_id, self.token, nxt, MessageFlag.CONTINUE)
        if self.token < 0:
            self._drop_out(message.with_flag(MessageFlag.ELIMINATED))
            return

        if self.is_coordinator:
            self.reporter.holds(self.peer_id, self.token)
        elif nxt != COORDINATOR_ID:
            # Coordinator must print this before the next holder can act
            self.transport.ssend(COORDINATOR_ID, message)
        self.transport.send(nxt, message)
        self.state = TurnState.WAITING

    def _declare_victory(self) -> None:
        self._log("last peer playing, wins")
        self.won = True
        if self.is_coordinator:
            self.reporter.wins(self.peer_id)
        else:
            self.transport.send(
                COORDINATOR_ID,
                GameMessage(self.peer_id, self.token, self.peer_id, MessageFlag.GAME_OVER),
            )
        self.state = TurnState.GAME_OVER_TERMINAL

    def _drop_out(self, message: GameMessage) -> None:
        self._log(f"token {self.token} is negative, dropping out")
        self.playing.eliminate(self.peer_id)
        if self.is_coordinator:
            self.reporter.drops_out(self.peer_id, self.token)

        self.broadcast_elimination(message)
        self.transport.send(
            message.next_player_id, message.with_flag(MessageFlag.CONTINUE_SILENT)
        )

        # The coordinator keeps routing and printing until GAME_OVER
        if self.is_coordinator:
            self.state = TurnState.WAITING
        else:
            self.state = TurnState.ELIMINATED_TERMINAL

    def broadcast_elimination(self, message: GameMessage) -> list[int]:
        """Synchronously deliver an ELIMINATED message; return the recipients."""
        recipients = broadcast_recipients(self.playing, message.sender_id)
        for peer_id in recipients:
            self.transport.ssend(peer_id, message)
        self._log(f"elimination delivered to {recipients}")
        return recipients

    # =========================================================================
    # Waiting
    # =========================================================================

    def handle_message(self, message: GameMessage) -> None:
        """React to one received message."""
        flag = message.flag
        if self.reporter is not None:
            self.reporter.report(message)

        if flag is MessageFlag.ELIMINATED:
            if self.playing.eliminate(message.sender_id):
                self._log(f"peer {message.sender_id} is out, {self.playing.remaining} left")
        elif flag is MessageFlag.GAME_OVER:
            if self.playing.is_playing(self.peer_id):
                self.state = TurnState.GAME_OVER_TERMINAL
            else:
                self.state = TurnState.ELIMINATED_TERMINAL
        elif flag.is_handoff:
            self._accept_handoff(message)
        else:
            raise ValueError(f"Unhandled message flag: {flag!r}")

    def _accept_handoff(self, message: GameMessage) -> None:
        if message.next_player_id != self.peer_id:
            # Coordinator sees status reports for other holders; anyone else
            # receiving a handoff for somebody else just keeps waiting
            if not self.is_coordinator:
                self._log(f"ignoring handoff addressed to peer {message.next_player_id}")
            return

        token = message.token
        if token < 0:
            # Negative token only arrives on the silent handoff after an
            # elimination; restart from the initial value
            self._log(f"received negative token {token}, resetting to {self.initial_token}")
            token = self.initial_token
        self.token = token
        self.state = TurnState.HOLDING
