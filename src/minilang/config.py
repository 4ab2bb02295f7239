"""Interpreter configuration loaded from YAML with environment overrides.

Settings are looked up in this order, first match wins:
    1. An explicit path passed to load_config()
    2. The file named by the MINILANG_CONFIG environment variable
    3. The user config file (~/.config/minilang/config.yaml)
    4. Built-in defaults

MINILANG_MAX_STEPS, when set, overrides max_steps from whichever source
was used.

Example config.yaml:
    max_steps: 100000
    recover: true
    max_errors: 10
    log_level: INFO
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

__all__ = [
    "MINILANG_CONFIG",
    "MINILANG_MAX_STEPS",
    "ConfigError",
    "InterpreterConfig",
    "load_config",
    "user_config_path",
]

logger = logging.getLogger(__name__)

# Environment variable names
MINILANG_CONFIG = "MINILANG_CONFIG"
MINILANG_MAX_STEPS = "MINILANG_MAX_STEPS"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Invalid configuration file or value."""


@dataclass
class InterpreterConfig:
    """Settings shared by run_source() and the command-line interface."""
    max_steps: Optional[int] = None     # None = unbounded
    max_errors: int = 20
    recover: bool = False
    trace: bool = False
    log_level: str = "WARNING"
    show_source: bool = True

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError if any field has the wrong type or range."""
        for name in ("recover", "trace", "show_source"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"{name} must be true or false, got {getattr(self, name)!r}")

        if self.max_steps is not None:
            _check_positive_int("max_steps", self.max_steps)
        _check_positive_int("max_errors", self.max_errors)

        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {self.log_level!r}"
            )
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterpreterConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"unknown config key(s): {', '.join(unknown)}; "
                f"expected one of {', '.join(sorted(known))}"
            )
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _check_positive_int(name: str, value: Any) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")


def user_config_path() -> Path:
    """Location of the per-user config file."""
    if sys.platform == "win32":
        config_base = Path(os.environ.get("APPDATA", "~")).expanduser()
    else:
        config_base = Path.home() / ".config"
    return config_base / "minilang" / "config.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file. An empty file means all defaults."""
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {path}: expected mapping at root")
    return data


def _find_config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path is not None:
        explicit = Path(path).expanduser()
        if not explicit.exists():
            raise FileNotFoundError(f"Config file not found: {explicit}")
        return explicit

    env_path = os.environ.get(MINILANG_CONFIG)
    if env_path:
        from_env = Path(env_path).expanduser()
        if not from_env.exists():
            raise FileNotFoundError(f"Config file from ${MINILANG_CONFIG} not found: {from_env}")
        return from_env

    user_config = user_config_path()
    if user_config.is_file():
        return user_config

    return None


def load_config(path: Optional[Union[str, Path]] = None) -> InterpreterConfig:
    """
    Load interpreter settings.

    Args:
        path: Optional explicit config file; must exist if given

    Returns:
        InterpreterConfig with environment overrides applied

    Raises:
        FileNotFoundError: If an explicit or $MINILANG_CONFIG file is missing
        ConfigError: On malformed YAML, unknown keys or invalid values
    """
    config_file = _find_config_file(path)
    data: Dict[str, Any] = {}
    if config_file is not None:
        logger.debug("loading config from %s", config_file)
        data = _load_yaml(config_file)

    env_steps = os.environ.get(MINILANG_MAX_STEPS)
    if env_steps:
        try:
            data["max_steps"] = int(env_steps)
        except ValueError:
            raise ConfigError(
                f"${MINILANG_MAX_STEPS} must be an integer, got {env_steps!r}"
            ) from None
        logger.debug("max_steps overridden from environment: %s", env_steps)

    return InterpreterConfig.from_dict(data)
