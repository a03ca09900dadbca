"""
Logging utilities for the server process.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Union

PACKAGE_LOGGER = "deck_toolkit"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

_HANDLER_ATTR = "_deck_toolkit_handler"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Install a single stream handler on the package logger.

    Calling it again only updates the level, so the app factory and the
    launcher can both call it without duplicating output.

    Args:
        level: Level name ("DEBUG", "info", ...) or logging constant.
        stream: Output stream. None = stderr.

    Returns:
        The installed handler.

    Raises:
        ValueError: If the level name is unknown.
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(resolved)

    for handler in logger.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(resolved)
            return handler

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.setLevel(resolved)
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
    return handler


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved
