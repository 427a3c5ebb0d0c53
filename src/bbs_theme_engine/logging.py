"""
Logging for the theme engine.

Every module logs through a child of the ``bbs_theme_engine`` logger, so
hosts can tune theme loading and art lookup noise in one place.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "bbs_theme_engine"

_root_logger = logging.getLogger(ROOT_LOGGER_NAME)

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _to_level(level: str | int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    level: str | int = "INFO",
    format: str | None = None,
    stream: TextIO | None = None,
    file: str | None = None,
    console: Console | None = None,
) -> None:
    """
    Configure logging for the theme engine.

    Args:
        level: Log level name or int
        format: Log format for plain stream and file handlers
        stream: Output stream (defaults to stderr); ignored with ``console``
        file: Optional file path to also write logs to
        console: Render records through this rich console instead of a stream

    Example:
        setup_logging("DEBUG", console=Console(stderr=True))
        setup_logging("INFO", file="themes.log")
    """
    level = _to_level(level)
    formatter = logging.Formatter(format or DEFAULT_FORMAT)

    _root_logger.setLevel(level)
    _root_logger.handlers.clear()

    handler: logging.Handler
    if console is not None:
        handler = RichHandler(console=console, show_path=False, markup=False)
    else:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(formatter)
    handler.setLevel(level)
    _root_logger.addHandler(handler)

    if file:
        file_handler = logging.FileHandler(file)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        _root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger, e.g. ``get_logger("registry")`` for
    ``bbs_theme_engine.registry``.
    """
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
