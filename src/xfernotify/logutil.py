"""Project-wide logging utilities.

All modules log through children of the ``xfernotify`` logger. The package
logger gets a stderr handler lazily; applications embedding xfernotify can
override handlers or levels as needed. We default to WARNING so a quiet
daemon only reports invalid lines and failed deliveries.
"""
from __future__ import annotations

import logging
from typing import Optional

_ROOT_NAME = "xfernotify"
_LOGGER: Optional[logging.Logger] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger(_ROOT_NAME)
        # Only add a handler if the application hasn't configured logging.
        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
        _LOGGER = logger
    if not name:
        return _LOGGER
    if name.startswith(_ROOT_NAME + "."):
        name = name[len(_ROOT_NAME) + 1:]
    return _LOGGER.getChild(name)


def configure_logging(verbosity: int = 0, quiet: bool = False) -> logging.Logger:
    """Set the package log level from CLI flags (-v INFO, -vv DEBUG, -q ERROR)."""
    logger = get_logger()
    if quiet:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logger.setLevel(level)
    return logger

__all__ = ["get_logger", "configure_logging"]
