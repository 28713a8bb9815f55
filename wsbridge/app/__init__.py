"""Bridge assembly and lifecycle."""

from .bridge import Bridge
from .lifecycle import Lifecycle, LifecycleState
from .shutdown import ShutdownManager

__all__ = ["Bridge", "Lifecycle", "LifecycleState", "ShutdownManager"]
