"""Run log for boardsync.

Every run appends to one rotating log file; ``-v`` mirrors the same records
to stderr at DEBUG level. Tracker responses pass through ``sanitize_for_log``
before they reach an exception message or a log line.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from boardsync.config import LoggingConfig

LOGGER_NAME = "boardsync"
LOG_DIR_ENV = "BOARDSYNC_LOG_DIR"
LOG_LEVEL_ENV = "BOARDSYNC_LOG_LEVEL"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "boardsync.log"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ROTATE_BYTES = 10 * 1024 * 1024
ROTATE_BACKUPS = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# GitHub token shapes; API error bodies and gh stderr can echo them back
_SECRETS = (
    (re.compile(r"\bgh[pousr]_[A-Za-z0-9]{36,}"), "[GITHUB_TOKEN]"),
    (re.compile(r"\bgithub_pat_[A-Za-z0-9_]{22,}"), "[GITHUB_TOKEN]"),
    (re.compile(r"Bearer [A-Za-z0-9._-]+"), "Bearer [REDACTED]"),
    (re.compile(r"token=[A-Za-z0-9._-]+"), "token=[REDACTED]"),
)


def resolve_level(configured: str | None, environ: Mapping[str, str]) -> str:
    """Pick the log level: config file, then BOARDSYNC_LOG_LEVEL, then INFO.

    The config file value is validated by BoardSyncConfig; an unknown value in
    the environment falls back to the default.
    """
    level = (configured or environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).strip().upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL


def setup_logging(
    settings: LoggingConfig | None = None,
    verbose: bool = False,
    environ: Mapping[str, str] | None = None,
) -> logging.Logger:
    """Route the ``boardsync`` logger tree to the run log.

    Directory and level come from ``settings`` (the ``logging`` section of
    boardsync.yaml), then from BOARDSYNC_LOG_DIR / BOARDSYNC_LOG_LEVEL, then
    from the defaults. Handlers from an earlier call are closed and replaced.

    Args:
        settings: Log settings from the loaded configuration.
        verbose: Force DEBUG and also log to stderr.
        environ: Environment to read overrides from (defaults to os.environ).

    Returns:
        The ``boardsync`` logger.
    """
    if environ is None:
        environ = os.environ

    configured_dir = settings.dir if settings is not None else None
    log_dir = Path(configured_dir or environ.get(LOG_DIR_ENV) or DEFAULT_LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / (settings.file if settings is not None else DEFAULT_LOG_FILE)

    if verbose:
        level = "DEBUG"
    else:
        level = resolve_level(settings.level if settings is not None else None, environ)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_path, maxBytes=ROTATE_BYTES, backupCount=ROTATE_BACKUPS, encoding="utf-8"
        )
    ]
    if verbose:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("Logging to %s at %s", log_path, level)
    return logger


def truncate_output(output: str, max_length: int = 5000) -> str:
    """Cap a response body before it goes into an error message."""
    if len(output) <= max_length:
        return output
    return f"{output[:max_length]}... [{len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Redact GitHub tokens and bearer credentials from text."""
    for pattern, replacement in _SECRETS:
        text = pattern.sub(replacement, text)
    return text
