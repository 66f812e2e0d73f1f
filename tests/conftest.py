"""Shared pytest fixtures for hot potato tests.

Provides scripted draw sources, config factories and mock transports.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable
from unittest.mock import MagicMock

import pytest

from hotpotato.config import GameConfig
from hotpotato.reporter import StatusReporter
from hotpotato.transport.base import Transport


class ScriptedDraws:
    """Stand-in for random.Random that returns a fixed sequence of draws.

    One instance may be shared by every peer of a threads game: only the
    holder draws, so the sequence is consumed in game order.
    """

    def __init__(self, draws: Iterable[int]):
        self._draws = list(draws)
        self.calls: list[int] = []

    def randrange(self, stop: int) -> int:
        self.calls.append(stop)
        if not self._draws:
            raise AssertionError("ran out of scripted draws")
        return self._draws.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._draws)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep HOTPOTATO_* variables from the developer's shell out of tests."""
    for suffix in ("PEERS", "BACKEND", "SEED", "TIMEOUT", "INITIAL_TOKEN", "MAX_DECREMENT"):
        monkeypatch.delenv(f"HOTPOTATO_{suffix}", raising=False)


@pytest.fixture
def scripted() -> Callable[[Iterable[int]], ScriptedDraws]:
    return ScriptedDraws


@pytest.fixture
def make_config() -> Callable[..., GameConfig]:
    """Factory for validated configs with test-friendly timeouts."""

    def _make(**overrides) -> GameConfig:
        values = {
            "initial_token": 10,
            "max_decrement": 5,
            "num_peers": 3,
            "timeout": 10.0,
            "join_timeout": 30.0,
        }
        values.update(overrides)
        return GameConfig(**values).validate()

    return _make


@pytest.fixture
def reporter() -> StatusReporter:
    return StatusReporter(io.StringIO())


@pytest.fixture
def mock_transport() -> Callable[[int, int], MagicMock]:
    """Factory for a Transport mock bound to ``peer_id`` in a ring of ``size``."""

    def _make(peer_id: int, size: int) -> MagicMock:
        transport = MagicMock(spec=Transport)
        transport.peer_id = peer_id
        transport.size = size
        return transport

    return _make
