"""
Log level names and resolution.

Adds a TRACE level below DEBUG for per-probe liveness chatter. Levels can be
given by name ("debug"), by number, or as False to silence logging entirely.
"""

import logging

from ..exceptions import ConfigError

TRACE = 5

LEVELS: dict[str, int | bool] = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
    "false": False,
}


class InvalidLogLevelError(ConfigError):
    """Unknown log level name."""

    def __init__(self, level: object) -> None:
        super().__init__("invalid log level", level=level)
        self.level = level


def register_trace_level() -> None:
    """Make TRACE known to the logging module (idempotent)."""
    logging.addLevelName(TRACE, "TRACE")
    logging.TRACE = TRACE  # type: ignore[attr-defined]


def resolve_level(level: str | int | bool) -> int | bool:
    """
    Resolve a level name, number or False to a numeric level.

    Raises:
        InvalidLogLevelError: If a name is not a known level
    """
    if isinstance(level, bool):
        return logging.INFO if level else False
    if isinstance(level, int):
        return level

    name = str(level).lower()
    if name.isnumeric():
        return int(name)
    if name in LEVELS:
        return LEVELS[name]
    raise InvalidLogLevelError(level)
