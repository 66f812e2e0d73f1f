"""Command-line front end.

Usage:
    hotpotato -t 20 -M 6                    # 4 peers as threads
    hotpotato -t 20 -M 6 -n 8 --backend processes --seed 7
    hotpotato --config config/hot_potato.yaml -v
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from .config import load_config
from .constants import BACKENDS
from .exceptions import CONFIG_ERRORS, GameStalledError, PeerFailedError
from .runner import run_game

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hotpotato",
        description="Hot Potato - distributed elimination game over message passing",
    )
    parser.add_argument(
        "-t",
        "--token",
        type=int,
        dest="initial_token",
        help="Initial token value (non-negative integer)",
    )
    parser.add_argument(
        "-M",
        "--max-decrement",
        type=int,
        dest="max_decrement",
        help="Exclusive upper bound of the per-turn random decrement",
    )
    parser.add_argument(
        "-n",
        "--peers",
        type=int,
        dest="num_peers",
        help="Number of peers in the ring (default: 4, env HOTPOTATO_PEERS)",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        help="Run peers as threads or as separate processes (default: threads)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Base RNG seed; each peer adds its own id (default: time-based)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Fail if a peer waits longer than this many seconds for a message",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="YAML file with a 'game:' section",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log every peer event",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(
            args.config,
            initial_token=args.initial_token,
            max_decrement=args.max_decrement,
            num_peers=args.num_peers,
            backend=args.backend,
            seed=args.seed,
            timeout=args.timeout,
        )
    except CONFIG_ERRORS as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 2

    try:
        run_game(config)
    except (PeerFailedError, GameStalledError) as e:
        logger.error(f"Game aborted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
