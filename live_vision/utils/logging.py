"""
Logging setup for Live Vision.

The console runner and the caption gateway both call ``setup_logging()``
once at startup; library modules only ever do
``logger = logging.getLogger(__name__)``.
"""

import logging
import os
import sys
from typing import Literal

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"

# Per-request chatter from the HTTP stack drowns out tick/dispatch logs
NOISY_LOGGERS = ("httpx", "httpcore")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _resolve_level(level: str | None) -> int:
    """Map a level name (or LOG_LEVEL, or INFO) to its numeric value."""
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    return getattr(logging, name, logging.INFO)


def setup_logging(
    name: str | None = None,
    level: LogLevel | None = None,
    format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """
    Configure the root handler and return a logger.

    Args:
        name: Logger to return (typically __name__). None means the root logger.
        level: Level name. Falls back to the LOG_LEVEL env var, then INFO.
        format: Record format for the stdout handler.

    Returns:
        The requested logger, set to the resolved level.

    Usage:
        from live_vision.utils import setup_logging
        logger = setup_logging(__name__, level="DEBUG")
        logger.info("Capture loop started")
    """
    log_level = _resolve_level(level)

    # basicConfig is a no-op once the root logger has a handler
    logging.basicConfig(level=log_level, format=format, datefmt=DEFAULT_DATEFMT, stream=sys.stdout)

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``; setup_logging() is expected to have run."""
    return logging.getLogger(name)


def set_log_level(level: LogLevel) -> None:
    """Change the root log level at runtime (e.g. from a --debug toggle)."""
    logging.getLogger().setLevel(_resolve_level(level))
