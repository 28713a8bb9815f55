"""
Logging for the bridge.

Extends Python's standard logging with:
- A TRACE level below DEBUG
- Structured ``extra`` fields rendered as ``[key:value]``
- Optional ANSI colors and microsecond timestamps
- Hierarchical "view" loggers (``/bridge/session``) sharing the root handler

All output goes to stderr; the bridge never writes to its own stdout.
"""

from .config import LogConfig
from .factory import LoggerFactory
from .formatters import LogFormatter
from .levels import TRACE, InvalidLogLevelError, register_trace_level, resolve_level
from .logger import Logger

register_trace_level()


def derive_lg(lg: Logger, tags: str | list[str]) -> Logger:
    """Derive a view logger from ``lg``; see LoggerFactory.derive()."""
    return LoggerFactory.derive(lg, tags)


__all__ = [
    "TRACE",
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogFormatter",
    "InvalidLogLevelError",
    "resolve_level",
    "derive_lg",
]
