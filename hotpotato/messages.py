"""Game message model and wire codec.

A ``GameMessage`` is the only artifact that crosses the transport. On the wire
it is a fixed record of four integers::

    (sender_id, token, next_player_id, flag)

with ``flag`` one of CONTINUE=0, IS_OUT=1, END_GAME=2, CONTINUE_SILENT=-1.
Inside the package the flag is the ``MessageFlag`` enum so that the receive
dispatch can match on it exhaustively.

Usage:
    from hotpotato.messages import GameMessage, MessageFlag

    msg = GameMessage(sender_id=1, token=6, next_player_id=2,
                      flag=MessageFlag.CONTINUE)
    wire = msg.to_wire()             # (1, 6, 2, 0)
    assert GameMessage.from_wire(wire) == msg
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import IntEnum

from .constants import WIRE_FIELDS
from .exceptions import MessageDecodeError

__all__ = [
    "GameMessage",
    "MessageFlag",
    "WireRecord",
]

WireRecord = tuple[int, int, int, int]


class MessageFlag(IntEnum):
    """What a message means to its receiver."""

    CONTINUE_SILENT = -1  # Private handoff; the event was already reported
    CONTINUE = 0          # Token handoff or status report
    ELIMINATED = 1        # Sender dropped out (wire name IS_OUT)
    GAME_OVER = 2         # Sender won (wire name END_GAME)

    @property
    def is_silent(self) -> bool:
        return self is MessageFlag.CONTINUE_SILENT

    @property
    def is_handoff(self) -> bool:
        """True for the two flags that can transfer the token."""
        return self in (MessageFlag.CONTINUE, MessageFlag.CONTINUE_SILENT)


@dataclass(frozen=True)
class GameMessage:
    """One game event: who sent it, the token, who plays next, and why."""

    sender_id: int
    token: int
    next_player_id: int
    flag: MessageFlag

    def to_wire(self) -> WireRecord:
        return (self.sender_id, self.token, self.next_player_id, int(self.flag))

    @classmethod
    def from_wire(cls, record: Sequence[int]) -> GameMessage:
        """Decode a wire record.

        Raises:
            MessageDecodeError: wrong arity, non-integer field, or unknown flag
        """
        if len(record) != WIRE_FIELDS:
            raise MessageDecodeError(
                f"Expected {WIRE_FIELDS} fields, got {len(record)}: {record!r}"
            )
        for value in record:
            # bool is an int subclass but never a valid field
            if not isinstance(value, int) or isinstance(value, bool):
                raise MessageDecodeError(f"Non-integer field in {record!r}")
        sender_id, token, next_player_id, raw_flag = record
        try:
            flag = MessageFlag(raw_flag)
        except ValueError as e:
            raise MessageDecodeError(f"Unknown flag {raw_flag} in {record!r}") from e
        return cls(sender_id, token, next_player_id, flag)

    def with_flag(self, flag: MessageFlag) -> GameMessage:
        return replace(self, flag=flag)
