"""
Console formatter for bridge logs.

Records are rendered as::

    [2026-01-01 12:34:56,789] [I] peer connected          [peer:127.0.0.1:5555] [1234] [/bridge/session]

Fields passed with ``extra=`` follow the message as sorted ``[key:value]``
brackets, padded to a common column, then the pid and the logger name.
"""

import logging
from typing import Any

from .colors import ColorManager
from .config import LogConfig

EXTRA_ATTR = "__bridge__extra"

BASE_FORMAT = "[%(asctime)s] [%(levelname).1s] %(message)s"
TAIL_FORMAT = "[%(process)d] [%(name)s]"

# Column at which extra fields start, with and without microseconds
FIELD_COLUMN = 70
FIELD_COLUMN_MICROS = 74


def extra_fields(record: logging.LogRecord) -> list[tuple[str, Any]]:
    fields = getattr(record, EXTRA_ATTR, None) or {}
    return sorted(fields.items())


def render_value(value: Any) -> str:
    """Exceptions show as 'Type: message', sequences comma-joined."""
    if isinstance(value, BaseException):
        name = type(value).__name__
        return f"{name}: {value}" if str(value) else name
    if isinstance(value, (list, tuple)):
        return ",".join(map(str, value))
    return str(value)


class LogFormatter(logging.Formatter):
    """Builds a per-record format string, then lets logging fill it in."""

    def __init__(self, config: LogConfig):
        super().__init__()
        self._config = config

    @property
    def config(self) -> LogConfig:
        return self._config

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record, datefmt)
        if self._config.micros:
            s += f".{int(record.created * 1_000_000) % 1000:03d}"
        return s

    def format(self, record: logging.LogRecord) -> str:
        fields = [
            (key, render_value(value).replace("%", "%%"))
            for key, value in extra_fields(record)
        ]
        padding = " " * max(1, self._field_column() - self._head_width(record))

        if self._config.colors:
            fmt = self._colored(record.levelno, padding, fields)
        else:
            fmt = self._plain(padding, fields)

        self._style._fmt = fmt
        return super().format(record)

    def _field_column(self) -> int:
        return FIELD_COLUMN_MICROS if self._config.micros else FIELD_COLUMN

    def _head_width(self, record: logging.LogRecord) -> int:
        return len(f"[{self.formatTime(record)}] [X] {record.getMessage()}")

    def _plain(self, padding: str, fields: list[tuple[str, str]]) -> str:
        parts = [BASE_FORMAT + padding]
        parts.extend(f"[{key}:{value}] " for key, value in fields)
        parts.append(TAIL_FORMAT)
        return "".join(parts)

    def _colored(self, level: int, padding: str, fields: list[tuple[str, str]]) -> str:
        color = ColorManager.for_level(level)
        bold = ColorManager.bold(color)
        reset = ColorManager.RESET
        normal = color + "m"

        fmt = (
            f"{normal}[%(asctime)s] [{bold}%(levelname).1s{reset}{normal}] "
            f"{bold}%(message)s{reset}{normal}{padding}"
        )
        for key, value in fields:
            fmt += f"{key}[{bold}{value}{reset}{normal}] "
        return fmt + ColorManager.gray(9) + "m" + TAIL_FORMAT + reset
