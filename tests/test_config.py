"""
Tests for interpreter configuration loading.
"""

import pytest

from minilang import ConfigError, InterpreterConfig, load_config
from minilang.config import MINILANG_CONFIG, MINILANG_MAX_STEPS, user_config_path


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """No user config and no environment overrides unless a test adds them."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv(MINILANG_CONFIG, raising=False)
    monkeypatch.delenv(MINILANG_MAX_STEPS, raising=False)


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestInterpreterConfig:
    """Test the config dataclass."""

    def test_defaults(self):
        config = InterpreterConfig()
        assert config.max_steps is None
        assert config.max_errors == 20
        assert config.recover is False
        assert config.trace is False
        assert config.log_level == "WARNING"
        assert config.show_source is True

    def test_log_level_normalised(self):
        assert InterpreterConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("kwargs", [
        {"max_steps": 0},
        {"max_steps": -5},
        {"max_steps": "100"},
        {"max_steps": True},
        {"max_errors": 0},
        {"recover": "yes"},
        {"trace": 1},
        {"log_level": "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            InterpreterConfig(**kwargs)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown config key"):
            InterpreterConfig.from_dict({"max_step": 10})

    def test_round_trip_dict(self):
        config = InterpreterConfig(max_steps=50, recover=True)
        assert InterpreterConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """Test YAML loading and the search order."""

    def test_defaults_when_nothing_found(self):
        assert load_config() == InterpreterConfig()

    def test_explicit_path(self, tmp_path):
        path = write(tmp_path / "cfg.yaml", "max_steps: 500\nrecover: true\n")
        config = load_config(path)
        assert config.max_steps == 500
        assert config.recover is True

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file_is_defaults(self, tmp_path):
        path = write(tmp_path / "empty.yaml", "")
        assert load_config(path) == InterpreterConfig()

    def test_non_mapping_root(self, tmp_path):
        path = write(tmp_path / "list.yaml", "- 1\n- 2\n")
        with pytest.raises(ConfigError, match="expected mapping"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = write(tmp_path / "bad.yaml", "max_steps: [1, 2\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_env_config_path(self, tmp_path, monkeypatch):
        path = write(tmp_path / "env.yaml", "max_errors: 3\n")
        monkeypatch.setenv(MINILANG_CONFIG, str(path))
        assert load_config().max_errors == 3

    def test_env_config_path_missing(self, tmp_path, monkeypatch):
        monkeypatch.setenv(MINILANG_CONFIG, str(tmp_path / "gone.yaml"))
        with pytest.raises(FileNotFoundError):
            load_config()

    def test_user_config(self):
        write(user_config_path(), "log_level: info\n")
        assert load_config().log_level == "INFO"

    def test_explicit_beats_env(self, tmp_path, monkeypatch):
        env_path = write(tmp_path / "env.yaml", "max_errors: 3\n")
        explicit = write(tmp_path / "explicit.yaml", "max_errors: 7\n")
        monkeypatch.setenv(MINILANG_CONFIG, str(env_path))
        assert load_config(explicit).max_errors == 7

    def test_env_beats_user_config(self, tmp_path, monkeypatch):
        write(user_config_path(), "max_errors: 4\n")
        env_path = write(tmp_path / "env.yaml", "max_errors: 9\n")
        monkeypatch.setenv(MINILANG_CONFIG, str(env_path))
        assert load_config().max_errors == 9

    def test_max_steps_env_override(self, tmp_path, monkeypatch):
        path = write(tmp_path / "cfg.yaml", "max_steps: 500\n")
        monkeypatch.setenv(MINILANG_MAX_STEPS, "42")
        assert load_config(path).max_steps == 42

    def test_max_steps_env_invalid(self, monkeypatch):
        monkeypatch.setenv(MINILANG_MAX_STEPS, "lots")
        with pytest.raises(ConfigError, match=MINILANG_MAX_STEPS):
            load_config()

    def test_max_steps_env_non_positive(self, monkeypatch):
        monkeypatch.setenv(MINILANG_MAX_STEPS, "0")
        with pytest.raises(ConfigError, match="positive"):
            load_config()

    def test_unknown_key_in_file(self, tmp_path):
        path = write(tmp_path / "cfg.yaml", "colour: blue\n")
        with pytest.raises(ConfigError, match="colour"):
            load_config(path)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
