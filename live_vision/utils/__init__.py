"""Utility helpers for Live Vision."""

from .logging import DEFAULT_FORMAT, get_logger, set_log_level, setup_logging

__all__ = [
    "DEFAULT_FORMAT",
    "get_logger",
    "set_log_level",
    "setup_logging",
]
