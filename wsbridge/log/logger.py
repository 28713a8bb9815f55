"""
Logger class for the bridge.

Records carry their ``extra=`` fields in a single mapping attached as
``__bridge__extra`` instead of as record attributes, so keys such as
"message" or "name" are allowed. Derived "view" loggers own no handlers and
write through the root logger's.
"""

import logging
from typing import Any

from .config import LogConfig
from .formatters import EXTRA_ATTR
from .levels import TRACE


class Logger(logging.Logger):
    """Standard logger plus TRACE, default extra fields and view delegation."""

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: dict[str, Any] | None = None,
    ):
        # logging.getLogger() may construct us without a config
        self._config = config or LogConfig.from_params("info")
        level = self._config.level
        super().__init__(name, logging.NOTSET if level is False else level)
        self.disabled = level is False

        self._extra = dict(extra or {})
        self._root_logger: Logger | None = None

    @property
    def config(self) -> LogConfig:
        return self._config

    def makeRecord(
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: object,
        args: Any,
        exc_info: Any,
        func: str | None = None,
        extra: dict[str, Any] | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func=func, sinfo=sinfo
        )
        fields = dict(self._extra)
        if extra:
            fields.update(extra)
        setattr(record, EXTRA_ATTR, fields)
        return record

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    def isEnabledFor(self, level: int) -> bool:
        if not super().isEnabledFor(level):
            return False
        if self._root_logger is not None:
            return self._root_logger.isEnabledFor(level)
        return True

    def callHandlers(self, record: logging.LogRecord) -> None:
        if self._root_logger is None:
            super().callHandlers(record)
            return
        for handler in self._root_logger.handlers:
            if record.levelno >= handler.level:
                handler.handle(record)
