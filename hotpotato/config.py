"""Game configuration loading and validation.

Sources, lowest to highest precedence:

1. Built-in defaults (``hotpotato.constants``)
2. ``HOTPOTATO_*`` environment variables
3. A YAML file with a top-level ``game:`` mapping
4. Explicit overrides (the CLI flags)

Usage:
    from hotpotato.config import load_config

    config = load_config("config/hot_potato.yaml", initial_token=10, max_decrement=5)
    print(config.num_peers, config.backend)

Example YAML:
    game:
      initial_token: 20
      max_decrement: 6
      num_peers: 5
      backend: processes
      seed: 42
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from .constants import BACKENDS, DEFAULT_BACKEND, DEFAULT_NUM_PEERS, ENV_PREFIX
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "GameConfig",
    "config_from_env",
    "load_config",
    "load_yaml_config",
]

# Environment variable suffix -> GameConfig field
_ENV_FIELDS = {
    "PEERS": "num_peers",
    "BACKEND": "backend",
    "SEED": "seed",
    "TIMEOUT": "timeout",
    "INITIAL_TOKEN": "initial_token",
    "MAX_DECREMENT": "max_decrement",
}


@dataclass(frozen=True)
class GameConfig:
    """Startup parameters for one run.

    ``initial_token`` and ``max_decrement`` are required; the game cannot start
    without them. Each turn subtracts a draw from ``[0, max_decrement)``.
    """

    initial_token: int | None = None
    max_decrement: int | None = None
    num_peers: int = DEFAULT_NUM_PEERS
    seed: int | None = None
    backend: str = DEFAULT_BACKEND
    timeout: float | None = None
    join_timeout: float | None = None

    def validate(self) -> GameConfig:
        """Check every field; return self so calls can be chained.

        Raises:
            ConfigurationError: on the first invalid field
        """
        if self.initial_token is None:
            raise ConfigurationError("initial token is required (-t)")
        if not _is_int(self.initial_token) or self.initial_token < 0:
            raise ConfigurationError(
                f"initial token must be a non-negative integer, got {self.initial_token!r}"
            )
        if self.max_decrement is None:
            raise ConfigurationError("maximum decrement is required (-M)")
        if not _is_int(self.max_decrement) or self.max_decrement < 1:
            raise ConfigurationError(
                f"maximum decrement must be a positive integer, got {self.max_decrement!r}"
            )
        if not _is_int(self.num_peers) or self.num_peers < 1:
            raise ConfigurationError(f"need at least one peer, got {self.num_peers!r}")
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigurationError(f"seed must be an integer, got {self.seed!r}")
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"unknown backend {self.backend!r}, expected one of {', '.join(BACKENDS)}"
            )
        for name in ("timeout", "join_timeout"):
            value = getattr(self, name)
            if value is not None and (not isinstance(value, (int, float)) or value <= 0):
                raise ConfigurationError(f"{name} must be a positive number, got {value!r}")

        if self.max_decrement == 1 and self.num_peers > 1:
            logger.warning(
                "max_decrement=1 makes every draw 0: the token never changes and "
                "the game will not terminate"
            )
        return self

    def with_overrides(self, **overrides: Any) -> GameConfig:
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {sorted(unknown)}")
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _coerce(name: str, raw: str, env_var: str) -> Any:
    if name == "backend":
        return raw.strip()
    try:
        if name == "timeout":
            return float(raw)
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{env_var}: cannot parse {raw!r}") from e


def config_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect config values from ``HOTPOTATO_*`` environment variables."""
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for suffix, field_name in _ENV_FIELDS.items():
        env_var = f"{ENV_PREFIX}{suffix}"
        raw = environ.get(env_var)
        if raw is not None and raw != "":
            values[field_name] = _coerce(field_name, raw, env_var)
    return values


def load_yaml_config(path: Path | str) -> dict[str, Any]:
    """Read the ``game:`` mapping from a YAML file.

    Raises:
        ConfigurationError: the file is missing, unparsable, or misshapen
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path, "r") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    game = data.get("game", {})
    if not isinstance(game, dict):
        raise ConfigurationError(f"{path}: 'game' must be a mapping")
    return game


def load_config(
    path: Path | str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    **overrides: Any,
) -> GameConfig:
    """Build and validate a GameConfig from env, file and overrides."""
    config = GameConfig().with_overrides(**config_from_env(environ))
    if path is not None:
        config = config.with_overrides(**load_yaml_config(path))
    config = config.with_overrides(**overrides)
    logger.debug(f"Resolved config: {config.to_dict()}")
    return config.validate()
