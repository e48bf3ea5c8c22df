"""Logging configuration for the monitor.

The interactive dashboard owns the terminal, so records go to a rotating
file. Headless modes can also mirror them to the console through rich.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.logging import RichHandler

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def resolve_level(level: str) -> int:
    """Map a level name to a logging level; unknown names mean INFO."""
    return _LEVELS.get(level.strip().lower(), logging.INFO)


def configure_logging(
    level: str = "info",
    log_file: str | None = None,
    console: bool = False,
) -> logging.Logger:
    """Install handlers on the ``kubemonitor`` logger.

    Args:
        level: Level name (debug, info, warn/warning, error).
        log_file: Rotating log file path; skipped when empty.
        console: Also log to the terminal with a RichHandler.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("kubemonitor")
    logger.setLevel(resolve_level(level))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    if console:
        logger.addHandler(RichHandler(rich_tracebacks=True, show_path=False))

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger
