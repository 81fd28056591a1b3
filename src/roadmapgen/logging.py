"""Logging setup for roadmapgen.

The generator usually runs inside a CI job, so records go to stderr and a
rotating file is only written when a log directory is requested.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "roadmapgen"
LOG_LEVEL_ENV = "ROADMAPGEN_LOG_LEVEL"
LOG_DIR_ENV = "ROADMAPGEN_LOG_DIR"

DEFAULT_LOG_FILE = "roadmapgen.log"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 3

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# GitHub credential shapes that can show up in API errors or gh output
_SECRET_PATTERNS = [
    (re.compile(r"gh[pousr]_[A-Za-z0-9]{36}"), "[GITHUB_TOKEN]"),
    (re.compile(r"github_pat_[A-Za-z0-9_]{82}"), "[GITHUB_TOKEN]"),
    (re.compile(r"[Bb]earer [A-Za-z0-9._-]+"), "Bearer [REDACTED]"),
]


def _resolve_level(level: str | None) -> int:
    name = level or os.environ.get(LOG_LEVEL_ENV) or "INFO"
    return getattr(logging, name.upper(), logging.INFO)


def _file_handler(log_dir: Path, log_file: str, max_bytes: int, backup_count: int):
    log_dir.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        log_dir / log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def setup_logging(
    level: str | None = None,
    log_dir: str | Path | None = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    console: bool = True,
) -> logging.Logger:
    """Configure the ``roadmapgen`` logger tree.

    Calling it again replaces the handlers from the previous call, so the CLI
    can reconfigure freely between commands.

    Args:
        level: Level name. Falls back to $ROADMAPGEN_LOG_LEVEL, then INFO.
            Unknown names are treated as INFO.
        log_dir: Directory for the rotating log file. Falls back to
            $ROADMAPGEN_LOG_DIR; with neither set no file is written.
        log_file: File name inside ``log_dir``.
        max_bytes: Rotation threshold for the file log.
        backup_count: Rotated files kept next to the active one.
        console: Attach a stderr handler.

    Returns:
        The configured ``roadmapgen`` logger.
    """
    log_level = _resolve_level(level)
    directory = log_dir if log_dir is not None else os.environ.get(LOG_DIR_ENV) or None

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    for old in list(logger.handlers):
        old.close()
        logger.removeHandler(old)

    handlers: list[logging.Handler] = []
    if directory is not None:
        handlers.append(_file_handler(Path(directory), log_file, max_bytes, backup_count))
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug(
        "Logging configured: level=%s, file log %s",
        logging.getLevelName(log_level),
        "on" if directory is not None else "off",
    )
    return logger


def truncate_output(output: str, max_length: int = 2000) -> str:
    """Shorten external tool output (mmdc, gh) before it is logged."""
    if len(output) <= max_length:
        return output
    return output[:max_length] + f"\n... [truncated, {len(output) - max_length} more chars]"


def sanitize_for_log(text: str) -> str:
    """Redact GitHub tokens and bearer credentials from ``text``."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text
