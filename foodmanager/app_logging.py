"""Logger setup for the ``foodmanager`` package."""

from __future__ import annotations

import logging
from typing import Union

from .config import get_settings

LOGGER_NAME = "foodmanager"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = get_settings().log_level
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def configure_logging(level: Union[int, str, None] = None) -> logging.Logger:
    """Route package logs to stderr at ``level`` (``FOODMANAGER_LOG_LEVEL`` by default).

    Repeat calls update the level and keep a single handler.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_resolve_level(level))
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.propagate = False
    return logger

