"""
xfernotify exception hierarchy.

Hierarchy::

    XferNotifyError
    ├── ConfigError       - config file loading, parsing, validation
    ├── SinkConfigError   - one sink instance is missing or has a bad option
    └── PipeError         - the input pipe cannot be created or opened

Only ``ConfigError`` and ``PipeError`` are fatal to the daemon. A
``SinkConfigError`` is raised from inside a sink and handled by the
dispatcher for that single invocation.
"""

from __future__ import annotations


class XferNotifyError(Exception):
    """Base exception for all xfernotify errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(XferNotifyError):
    """Raised when the configuration file cannot be loaded or validated."""


class SinkConfigError(XferNotifyError):
    """Raised by a sink when its instance configuration is unusable."""


class PipeError(XferNotifyError):
    """Raised when the input pipe cannot be created or opened."""


__all__ = ["XferNotifyError", "ConfigError", "SinkConfigError", "PipeError"]
