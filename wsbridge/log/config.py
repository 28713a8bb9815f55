"""
Immutable logger configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .levels import resolve_level


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable configuration for the root logger.

    Derived loggers only carry their own level and read display settings
    (colors, micros) through the root's formatter.
    """

    level: int | bool = logging.INFO  # int for normal levels, False to disable logging
    micros: bool = False
    colors: bool = True

    @classmethod
    def from_params(
        cls,
        level: str | int | bool,
        micros: bool = False,
        colors: bool = True,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            micros: Whether to show microsecond precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        return cls(level=resolve_level(level), micros=micros, colors=colors)

    @classmethod
    def from_settings(cls, settings: Any, debug: bool = False) -> LogConfig:
        """
        Create LogConfig from the bridge's logging settings.

        Args:
            settings: Object with ``level``, ``micros`` and ``colors`` attributes
                (normally ``BridgeConfig.logging``)
            debug: Force debug level regardless of ``settings.level``

        Returns:
            LogConfig instance
        """
        level = "debug" if debug else settings.level
        return cls.from_params(level, micros=settings.micros, colors=settings.colors)
