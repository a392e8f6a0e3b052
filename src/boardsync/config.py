"""Configuration loading for boardsync runs."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from boardsync.logging import DEFAULT_LOG_FILE, LOG_LEVELS
from boardsync.tracker.transport import DEFAULT_API_URL, DEFAULT_TIMEOUT

CONFIG_FILE_NAME = "boardsync.yaml"

BACKENDS = ("api", "gh")
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class LoggingConfig:
    """Log file settings. Unset values fall back to environment and defaults."""

    dir: str | None = None
    level: str | None = None
    file: str = DEFAULT_LOG_FILE


@dataclass
class BoardSyncConfig:
    """Settings for a sync run.

    Attributes:
        backend: "api" (httpx with a token) or "gh" (the gh CLI's login).
        api_url: GitHub REST API root for the api backend.
        gh_path: gh executable for the gh backend.
        timeout: Per-request timeout in seconds.
        max_retries: Extra attempts per tracker call on rate limits and
            connection failures.
        retry_delay: Base backoff in seconds, doubled after each retry.
        logging: Log file settings.
    """

    backend: str = "api"
    api_url: str = DEFAULT_API_URL
    gh_path: str = "gh"
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = 2
    retry_delay: float = 1.0
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BoardSyncConfig:
        """Create config from a dictionary.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        unknown = set(data) - {
            "backend",
            "api_url",
            "gh_path",
            "timeout",
            "max_retries",
            "retry_delay",
            "logging",
        }
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        logging_data = data.get("logging") or {}
        if not isinstance(logging_data, dict):
            raise ConfigError("'logging' must be a mapping")
        unknown = set(logging_data) - {"dir", "level", "file"}
        if unknown:
            raise ConfigError(f"Unknown logging keys: {', '.join(sorted(unknown))}")

        config = cls(
            backend=str(data.get("backend", "api")),
            api_url=_text(data, "api_url", "api_url") or DEFAULT_API_URL,
            gh_path=_text(data, "gh_path", "gh_path") or "gh",
            timeout=_number(data, "timeout", DEFAULT_TIMEOUT),
            max_retries=int(_number(data, "max_retries", 2)),
            retry_delay=_number(data, "retry_delay", 1.0),
            logging=LoggingConfig(
                dir=_text(logging_data, "dir", "logging.dir"),
                level=_text(logging_data, "level", "logging.level"),
                file=_text(logging_data, "file", "logging.file") or DEFAULT_LOG_FILE,
            ),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: If any value is invalid.
        """
        if self.backend not in BACKENDS:
            raise ConfigError(f"backend must be one of {', '.join(BACKENDS)}, got '{self.backend}'")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.max_retries < 0:
            raise ConfigError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ConfigError(f"retry_delay must be >= 0, got {self.retry_delay}")
        level = self.logging.level
        if level is not None and level.strip().upper() not in LOG_LEVELS:
            raise ConfigError(
                f"logging.level must be one of {', '.join(LOG_LEVELS)}, got '{level}'"
            )
        if not self.logging.file.strip():
            raise ConfigError("logging.file must not be empty")


def _number(data: dict[str, Any], key: str, default: float) -> float:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ConfigError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _text(data: dict[str, Any], key: str, label: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"'{label}' must be a string, got {value!r}")
    return value


def load_config(config_path: Path | str) -> BoardSyncConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to boardsync.yaml.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If the file doesn't exist or is invalid.
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        return BoardSyncConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a YAML mapping, got {type(data).__name__}")

    return BoardSyncConfig.from_dict(data)


def find_config(start_path: Path | str | None = None) -> Path | None:
    """Find boardsync.yaml by walking up the directory tree.

    Args:
        start_path: Starting directory. Defaults to current directory.

    Returns:
        Path to the config file, or None when there is none.
    """
    current = Path.cwd() if start_path is None else Path(start_path)
    current = current.resolve()

    for directory in (current, *current.parents):
        config_path = directory / CONFIG_FILE_NAME
        if config_path.is_file():
            return config_path
    return None


def get_token(environ: Mapping[str, str] | None = None) -> str | None:
    """Read the GitHub token from GITHUB_TOKEN or GH_TOKEN."""
    if environ is None:
        environ = os.environ
    for name in TOKEN_ENV_VARS:
        token = environ.get(name, "").strip()
        if token:
            return token
    return None
