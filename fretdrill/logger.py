"""Centralized logger access for fretdrill.

Modules grab a logger with ``get_logger(__name__)``; ``setup_logging`` installs
one shared console handler on the ``fretdrill`` hierarchy.
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, Optional

ROOT_LOGGER = "fretdrill"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_console_handler: Optional[logging.Handler] = None
_logger_cache: Dict[str, logging.Logger] = {}


def setup_logging(level: Optional[str] = None) -> None:
    """Attach a single stdout handler to the package logger.

    Args:
        level: Optional level name (e.g. "DEBUG"). Defaults to WARNING.
    """
    global _console_handler

    if _console_handler is None:
        _console_handler = logging.StreamHandler(sys.stdout)
        _console_handler.setFormatter(logging.Formatter(_FORMAT))

    numeric_level = logging.WARNING
    if level:
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            numeric_level = resolved
        else:
            logging.getLogger(ROOT_LOGGER).error(f"Invalid log level: {level}")

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(numeric_level)
    if _console_handler not in root.handlers:
        root.addHandler(_console_handler)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a cached logger for a module name inside the package."""
    if name not in _logger_cache:
        _logger_cache[name] = logging.getLogger(name)
    return _logger_cache[name]
