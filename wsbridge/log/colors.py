"""
ANSI colors for console log output.
"""

import logging

from .levels import TRACE


class ColorManager:
    """Color prefixes per level; callers close them with "m" or bold()."""

    RED = "\x1b[31"
    YELLOW = "\x1b[33"
    MAGENTA = "\x1b[35"
    CYAN = "\x1b[36"
    DEFAULT = "\x1b[38"
    RESET = "\x1b[0m"

    # 256-color grayscale ramp occupies codes 232..255
    GRAY_BASE = 232
    GRAY_STEPS = 24

    COLORS: dict[int, str] = {
        TRACE: "\x1b[38;5;240",
        logging.DEBUG: "\x1b[38;5;32",
        logging.INFO: CYAN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: MAGENTA,
    }

    @classmethod
    def for_level(cls, level: int) -> str:
        return cls.COLORS.get(level, cls.DEFAULT)

    @classmethod
    def gray(cls, step: int) -> str:
        """Gray prefix; ``step`` is clamped to the ramp."""
        step = max(0, min(step, cls.GRAY_STEPS - 1))
        return f"\x1b[38;5;{cls.GRAY_BASE + step}"

    @staticmethod
    def bold(color: str) -> str:
        return color + ";1m"
