"""Game bootstrap and teardown.

Creates one transport endpoint and one Peer per id, seeds every peer's RNG
independently, runs them to completion on the configured backend and
collects their outcomes.

Usage:
    from hotpotato.config import GameConfig
    from hotpotato.runner import run_game

    result = run_game(GameConfig(initial_token=20, max_decrement=6, num_peers=5))
    print(f"Winner: peer {result.winner}")
"""

from __future__ import annotations

import functools
import io
import logging
import queue
import random
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TextIO

from .config import GameConfig
from .constants import COORDINATOR_ID, JOIN_GRACE_SECONDS, THREAD_POLL_SECONDS
from .exceptions import (
    TRANSPORT_ERRORS,
    GameStalledError,
    HotPotatoError,
    PeerFailedError,
)
from .peer import Peer, PeerOutcome
from .reporter import StatusReporter
from .transport.base import Transport
from .transport.local import LocalHub
from .transport.process import ProcessHub

logger = logging.getLogger(__name__)

__all__ = [
    "GameResult",
    "RngFactory",
    "resolve_seed",
    "run_game",
    "seeded_rng",
]

RngFactory = Callable[[int], Any]


def seeded_rng(base_seed: int, peer_id: int) -> random.Random:
    """Per-peer generator; offsetting by id keeps peers' draws uncorrelated."""
    return random.Random(base_seed + peer_id)


def resolve_seed(config: GameConfig) -> int:
    return config.seed if config.seed is not None else time.time_ns()


@dataclass
class GameResult:
    """Outcome of a finished game."""

    winner: int
    outcomes: list[PeerOutcome]
    lines: list[str]
    seed: int | None = None
    # Only counted by the threads backend
    messages_delivered: int | None = None

    def outcome(self, peer_id: int) -> PeerOutcome:
        return self.outcomes[peer_id]

    @property
    def coordinator(self) -> PeerOutcome:
        return self.outcomes[COORDINATOR_ID]


def run_game(
    config: GameConfig,
    *,
    rng_factory: RngFactory | None = None,
    stream: TextIO | None = None,
) -> GameResult:
    """Play one full game and return its result.

    Args:
        config: Game parameters; validated here
        rng_factory: Maps a peer id to its source of draws. Defaults to
            ``seeded_rng`` with the configured (or time-based) seed. With the
            processes backend it must be picklable.
        stream: Where the coordinator writes status lines (default stdout)

    Raises:
        PeerFailedError: a peer raised while playing
        GameStalledError: peers were still running at the join deadline
    """
    config.validate()
    seed: int | None = None
    if rng_factory is None:
        seed = resolve_seed(config)
        rng_factory = functools.partial(seeded_rng, seed)

    logger.info(
        f"Starting game: {config.num_peers} peers, token {config.initial_token}, "
        f"M={config.max_decrement}, backend={config.backend}, seed={seed}"
    )
    delivered: int | None = None
    if config.backend == "processes":
        outcomes = _run_processes(config, rng_factory, stream)
    else:
        outcomes, delivered = _run_threads(config, rng_factory, stream)

    winners = [o.peer_id for o in outcomes if o.won]
    if len(winners) != 1:
        raise HotPotatoError(f"Expected exactly one winner, got {winners}")
    logger.info(f"Game over: peer {winners[0]} wins")
    return GameResult(
        winner=winners[0],
        outcomes=outcomes,
        lines=outcomes[COORDINATOR_ID].lines,
        seed=seed,
        messages_delivered=delivered,
    )


# =============================================================================
# Threads backend
# =============================================================================


def _run_threads(
    config: GameConfig, rng_factory: RngFactory, stream: TextIO | None
) -> tuple[list[PeerOutcome], int]:
    hub = LocalHub(config.num_peers, timeout=config.timeout)
    reporter = StatusReporter(stream)
    peers = [
        Peer(transport, config, rng=rng_factory(transport.peer_id), reporter=reporter)
        for transport in hub.endpoints()
    ]

    outcomes: dict[int, PeerOutcome] = {}
    errors: dict[int, BaseException] = {}
    failed = threading.Event()

    def play(peer: Peer) -> None:
        try:
            outcomes[peer.peer_id] = peer.run()
        except TRANSPORT_ERRORS as e:
            logger.error(f"[peer {peer.peer_id}] transport failure: {e}")
            errors[peer.peer_id] = e
            failed.set()
        except Exception as e:
            logger.exception(f"[peer {peer.peer_id}] crashed")
            errors[peer.peer_id] = e
            failed.set()

    threads = [
        threading.Thread(target=play, args=(peer,), name=f"peer-{peer.peer_id}", daemon=True)
        for peer in peers
    ]
    for thread in threads:
        thread.start()

    # Return on the first failure; peers left waiting on it are daemon threads
    deadline = None if config.join_timeout is None else time.monotonic() + config.join_timeout
    while not failed.is_set() and any(thread.is_alive() for thread in threads):
        wait = THREAD_POLL_SECONDS
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            wait = min(wait, remaining)
        failed.wait(wait)

    if errors:
        peer_id = min(errors)
        raise PeerFailedError(peer_id, str(errors[peer_id])) from errors[peer_id]
    stalled = [i for i, thread in enumerate(threads) if thread.is_alive()]
    if stalled:
        raise GameStalledError(stalled)
    logger.debug(f"{hub.delivered} messages delivered")
    return [outcomes[i] for i in range(config.num_peers)], hub.delivered


# =============================================================================
# Processes backend
# =============================================================================


def _peer_process_main(
    transport: Transport,
    config: GameConfig,
    rng_factory: RngFactory,
    results: Any,
    echo: bool,
) -> None:
    """Entry point of a peer process; reports its outcome on ``results``."""
    peer_id = transport.peer_id
    try:
        reporter = StatusReporter() if echo else StatusReporter(io.StringIO())
        peer = Peer(transport, config, rng=rng_factory(peer_id), reporter=reporter)
        results.put((peer_id, peer.run(), None))
    except Exception as e:
        logger.exception(f"[peer {peer_id}] crashed")
        results.put((peer_id, None, f"{type(e).__name__}: {e}"))


def _run_processes(
    config: GameConfig, rng_factory: RngFactory, stream: TextIO | None
) -> list[PeerOutcome]:
    hub = ProcessHub(config.num_peers, timeout=config.timeout)
    results = hub.context.Queue()
    # A caller-supplied stream cannot cross the process boundary; replay the
    # coordinator's lines into it once the game is over
    echo = stream is None
    processes = [
        hub.context.Process(
            target=_peer_process_main,
            args=(transport, config, rng_factory, results, echo),
            name=f"peer-{transport.peer_id}",
        )
        for transport in hub.endpoints()
    ]
    for process in processes:
        process.start()

    outcomes: dict[int, PeerOutcome] = {}
    failures: dict[int, str] = {}
    deadline = None if config.join_timeout is None else time.monotonic() + config.join_timeout
    try:
        while len(outcomes) + len(failures) < config.num_peers:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                peer_id, outcome, error = results.get(timeout=remaining)
            except queue.Empty:
                break
            if error is not None:
                failures[peer_id] = error
                break
            outcomes[peer_id] = outcome
    finally:
        for process in processes:
            process.join(JOIN_GRACE_SECONDS if failures or len(outcomes) < config.num_peers else None)
            if process.is_alive():
                logger.warning(f"Terminating {process.name}")
                process.terminate()
                process.join()
        results.close()
        hub.close()

    if failures:
        peer_id = min(failures)
        raise PeerFailedError(peer_id, failures[peer_id])
    stalled = [i for i in range(config.num_peers) if i not in outcomes]
    if stalled:
        raise GameStalledError(stalled)

    ordered = [outcomes[i] for i in range(config.num_peers)]
    if stream is not None:
        for line in ordered[COORDINATOR_ID].lines:
            print(line, file=stream)
    return ordered
