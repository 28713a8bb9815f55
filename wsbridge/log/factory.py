"""
Factory for creating and deriving loggers.
"""

import logging
import sys
from typing import IO, Any, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(
        config: LogConfig,
        stream: IO[str] | None = None,
        logger_class: type[Logger] = Logger,
    ) -> Logger:
        """
        Create the root logger ("/") with a console handler.

        Args:
            config: Logger configuration
            stream: Output stream, stderr by default
            logger_class: Logger class to use

        Returns:
            Configured root logger

        Example:
            >>> lg = LoggerFactory.create_root(LogConfig.from_params("debug"))
            >>> lg.info("starting bridge", extra={"port": 8765})
            [12:34:56,789] [I] starting bridge      [port:8765] [1234] [/]
        """
        return LoggerFactory.create("/", config, stream, logger_class)

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        stream: IO[str] | None = None,
        logger_class: type[Logger] = Logger,
        extra: dict[str, Any] | None = None,
    ) -> Logger:
        """
        Create a logger owning its own console handler.

        An existing logger with the same name is reconfigured in place, so
        repeated bridge runs in one interpreter (tests) do not stack handlers.
        """
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            lg = existing
            lg._config = config
            for handler in list(lg.handlers):
                lg.removeHandler(handler)
        else:
            lg = logger_class(name, config, extra)
            logging.root.manager.loggerDict[name] = lg

        if config.level is False:
            lg.disabled = True
        else:
            lg.disabled = False
            lg.setLevel(config.level)

        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root
        lg._cache.clear()  # type: ignore[attr-defined]
        return lg

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that delegates to the root's handlers.

        Examples:
            >>> root = LoggerFactory.create_root(config)      # "/"
            >>> LoggerFactory.derive(root, "bridge").name
            '/bridge'
            >>> LoggerFactory.derive(root, ["bridge", "session"]).name
            '/bridge/session'

        Args:
            parent: Parent logger instance
            tags: Single tag string or list of tags forming the hierarchy

        Returns:
            Derived logger instance
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)
        root = parent._root_logger if parent._root_logger is not None else parent

        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            lg = existing
        else:
            lg = parent.__class__(name, parent.config)
            logging.root.manager.loggerDict[name] = lg

        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False
        lg.setLevel(logging.NOTSET)
        lg.disabled = root.disabled
        lg._cache.clear()  # type: ignore[attr-defined]
        return cast(Logger, lg)
