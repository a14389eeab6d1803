"""Configuration loading and validation."""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for 3.10
    import tomli as tomllib  # type: ignore[no-redef]

CONFIG_ENV = "PROOF_CONFIG"
CONFIG_FILENAME = "proof.toml"
PYPROJECT_FILENAME = "pyproject.toml"

DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_DIFF_CONTEXT_LINES = 3
DEFAULT_MAX_VALUE_LENGTH = 2000
DEFAULT_LOG_LEVEL = "warning"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class Config:
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    diff_context_lines: int = DEFAULT_DIFF_CONTEXT_LINES
    max_value_length: int = DEFAULT_MAX_VALUE_LENGTH
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000.0

    @staticmethod
    def from_dict(data: dict[str, Any]) -> "Config":
        if not isinstance(data, dict):
            raise ConfigError("proof: expected a table")
        unknown = sorted(set(data) - set(Config.__dataclass_fields__))
        if unknown:
            raise ConfigError(f"proof: unknown keys {unknown}")
        try:
            config = Config(
                poll_interval_ms=int(
                    data.get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)
                ),
                diff_context_lines=int(
                    data.get("diff_context_lines", DEFAULT_DIFF_CONTEXT_LINES)
                ),
                max_value_length=int(
                    data.get("max_value_length", DEFAULT_MAX_VALUE_LENGTH)
                ),
                log_level=str(data.get("log_level", DEFAULT_LOG_LEVEL)).lower(),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"proof: invalid value: {exc}") from exc
        validate_config(config)
        return config


def load_config(path: Path) -> Config:
    """Load configuration from a ``proof.toml`` or ``pyproject.toml`` file."""
    if not path.is_absolute():
        raise ConfigError(f"config path must be absolute: {path}")
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"failed to read config: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed to parse config {path}: {exc}") from exc
    table = _proof_table(path, data)
    return Config.from_dict(table if table is not None else {})


def find_config(start: Path) -> Path | None:
    """Return the nearest config file at or above ``start``."""
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        candidate = directory / PYPROJECT_FILENAME
        if candidate.is_file() and _has_proof_table(candidate):
            return candidate
    return None


def default_config() -> Config:
    """Return the configuration for the current environment.

    ``$PROOF_CONFIG`` wins, then the nearest config file above the working
    directory, then the built-in defaults.
    """
    return _discover(os.environ.get(CONFIG_ENV, ""), str(Path.cwd()))


def configure_logging(config: Config) -> None:
    logging.getLogger("proof").setLevel(_LOG_LEVELS[config.log_level])


def validate_config(config: Config) -> None:
    _validate_positive(config.poll_interval_ms, "proof.poll_interval_ms")
    if config.diff_context_lines < 0:
        raise ConfigError("proof.diff_context_lines must be >= 0")
    _validate_positive(config.max_value_length, "proof.max_value_length")
    _validate_log_level(config.log_level)


@functools.lru_cache(maxsize=32)
def _discover(env_path: str, cwd: str) -> Config:
    if env_path:
        return load_config(Path(env_path).expanduser().absolute())
    path = find_config(Path(cwd))
    if path is None:
        return Config()
    return load_config(path)


def _proof_table(path: Path, data: dict[str, Any]) -> dict[str, Any] | None:
    if path.name == PYPROJECT_FILENAME:
        return data.get("tool", {}).get("proof")
    return data.get("proof")


def _has_proof_table(path: Path) -> bool:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return _proof_table(path, data) is not None


def _validate_positive(value: int, field: str) -> None:
    if value <= 0:
        raise ConfigError(f"{field} must be > 0")


def _validate_log_level(value: str) -> None:
    if value not in _LOG_LEVELS:
        raise ConfigError(
            f"proof.log_level must be one of {sorted(_LOG_LEVELS)}; got {value}"
        )
