"""Tests for hotpotato.config - validation, env vars, YAML files and precedence."""

from __future__ import annotations

import logging

import pytest

from hotpotato.config import GameConfig, config_from_env, load_config, load_yaml_config
from hotpotato.exceptions import CONFIG_ERRORS, ConfigurationError


# =============================================================================
# Validation
# =============================================================================


class TestValidate:
    """Tests for GameConfig.validate."""

    def test_valid_config_returns_self(self):
        config = GameConfig(initial_token=10, max_decrement=5)
        assert config.validate() is config

    def test_defaults(self):
        config = GameConfig(initial_token=0, max_decrement=2)
        assert config.num_peers == 4
        assert config.backend == "threads"
        assert config.seed is None
        assert config.timeout is None

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"max_decrement": 5}, "initial token is required"),
            ({"initial_token": 10}, "maximum decrement is required"),
            ({"initial_token": -1, "max_decrement": 5}, "non-negative"),
            ({"initial_token": 1.5, "max_decrement": 5}, "non-negative"),
            ({"initial_token": True, "max_decrement": 5}, "non-negative"),
            ({"initial_token": 10, "max_decrement": 0}, "positive integer"),
            ({"initial_token": 10, "max_decrement": 5, "num_peers": 0}, "at least one peer"),
            ({"initial_token": 10, "max_decrement": 5, "backend": "mpi"}, "unknown backend"),
            ({"initial_token": 10, "max_decrement": 5, "timeout": 0}, "timeout"),
            ({"initial_token": 10, "max_decrement": 5, "join_timeout": -2.0}, "join_timeout"),
            ({"initial_token": 10, "max_decrement": 5, "seed": "abc"}, "seed"),
        ],
    )
    def test_invalid_values(self, kwargs, match):
        with pytest.raises(ConfigurationError, match=match):
            GameConfig(**kwargs).validate()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            GameConfig().validate()

    def test_max_decrement_one_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="hotpotato.config"):
            GameConfig(initial_token=5, max_decrement=1, num_peers=3).validate()
        assert "will not terminate" in caplog.text

    def test_max_decrement_one_single_peer_is_quiet(self, caplog):
        with caplog.at_level(logging.WARNING, logger="hotpotato.config"):
            GameConfig(initial_token=5, max_decrement=1, num_peers=1).validate()
        assert caplog.text == ""


class TestWithOverrides:
    """Tests for GameConfig.with_overrides."""

    def test_none_values_ignored(self):
        base = GameConfig(initial_token=3, max_decrement=4)
        assert base.with_overrides(initial_token=None, num_peers=6).num_peers == 6
        assert base.with_overrides(initial_token=None).initial_token == 3

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown config keys"):
            GameConfig().with_overrides(rounds=3)


# =============================================================================
# Sources
# =============================================================================


class TestEnvironment:
    """Tests for HOTPOTATO_* variables."""

    def test_reads_known_variables(self):
        values = config_from_env({
            "HOTPOTATO_PEERS": "6",
            "HOTPOTATO_BACKEND": "processes",
            "HOTPOTATO_SEED": "42",
            "HOTPOTATO_TIMEOUT": "2.5",
            "UNRELATED": "x",
        })
        assert values == {"num_peers": 6, "backend": "processes", "seed": 42, "timeout": 2.5}

    def test_empty_values_skipped(self):
        assert config_from_env({"HOTPOTATO_PEERS": ""}) == {}

    def test_unparsable_value(self):
        with pytest.raises(ConfigurationError, match="^HOTPOTATO_PEERS: cannot parse 'many'$"):
            config_from_env({"HOTPOTATO_PEERS": "many"})

    def test_unparsable_timeout_names_variable(self):
        with pytest.raises(ConfigurationError, match="^HOTPOTATO_TIMEOUT: cannot parse"):
            config_from_env({"HOTPOTATO_TIMEOUT": "soon"})

    def test_defaults_ignore_import_time_environment(self, monkeypatch):
        import importlib

        from hotpotato import constants

        monkeypatch.setenv("HOTPOTATO_PEERS", "abc")
        monkeypatch.setenv("HOTPOTATO_BACKEND", "mpi")
        reloaded = importlib.reload(constants)
        assert reloaded.DEFAULT_NUM_PEERS == 4
        assert reloaded.DEFAULT_BACKEND == "threads"


class TestYamlFile:
    """Tests for load_yaml_config."""

    def test_reads_game_section(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("game:\n  initial_token: 12\n  max_decrement: 3\n  num_peers: 2\n")
        assert load_yaml_config(path) == {"initial_token": 12, "max_decrement": 3, "num_peers": 2}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_yaml_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("game: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml_config(path)

    def test_game_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("game:\n  - 1\n  - 2\n")
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            load_yaml_config(path)

    def test_shipped_example_config_is_valid(self):
        from pathlib import Path

        example = Path(__file__).resolve().parents[2] / "config" / "hot_potato.yaml"
        config = load_config(example, environ={})
        assert config.initial_token == 20
        assert config.max_decrement == 6


class TestLoadConfig:
    """Tests for source precedence."""

    def test_overrides_beat_file_beat_env(self, tmp_path):
        path = tmp_path / "game.yaml"
        path.write_text("game:\n  initial_token: 12\n  max_decrement: 3\n  num_peers: 2\n")
        env = {"HOTPOTATO_PEERS": "7", "HOTPOTATO_SEED": "9", "HOTPOTATO_INITIAL_TOKEN": "1"}

        config = load_config(path, environ=env, max_decrement=8)

        assert config.initial_token == 12  # file over env
        assert config.num_peers == 2       # file over env
        assert config.seed == 9            # env only
        assert config.max_decrement == 8  # override over file

    def test_missing_required_values(self):
        with pytest.raises(CONFIG_ERRORS):
            load_config(environ={})

    def test_env_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("HOTPOTATO_PEERS", "5")
        config = load_config(initial_token=4, max_decrement=2)
        assert config.num_peers == 5
