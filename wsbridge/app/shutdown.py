"""
Shutdown manager for handling termination signals.

SIGINT and SIGTERM are routed through the event loop, so the shutdown
callback runs on the loop thread like every other bridge callback.
"""

import asyncio
import signal
from collections.abc import Callable
from typing import Any

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownManager:
    """
    Manages shutdown signal handling.

    The first SIGINT/SIGTERM calls ``on_shutdown(0)``; later signals are
    ignored.

    Usage:
        manager = ShutdownManager(lg, lifecycle.shutdown)
        manager.register_signal_handlers(loop)
        ...
        manager.restore()
    """

    def __init__(self, lg: Any, on_shutdown: Callable[[int], None]) -> None:
        self._lg = lg
        self._on_shutdown = on_shutdown
        self._shutting_down = False
        self._signal_name: str | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._registered: list[signal.Signals] = []

    def register_signal_handlers(
        self, loop: asyncio.AbstractEventLoop | None = None
    ) -> None:
        """Register handlers for SIGINT and SIGTERM on ``loop``."""
        self._loop = loop if loop is not None else asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            self._loop.add_signal_handler(sig, self._handle_signal, sig)
            self._registered.append(sig)

    def _handle_signal(self, sig: signal.Signals) -> None:
        if self._shutting_down:
            return  # Ignore duplicate signals

        self._shutting_down = True
        self._signal_name = signal.Signals(sig).name
        self._lg.info(
            f"received {self._signal_name}, shutting down",
            extra={"signal": int(sig)},
        )
        self._on_shutdown(0)

    def is_shutting_down(self) -> bool:
        """Check if a signal triggered shutdown."""
        return self._shutting_down

    @property
    def signal_name(self) -> str | None:
        """Name of the signal that triggered shutdown, if any."""
        return self._signal_name

    def restore(self) -> None:
        """Remove the registered handlers."""
        if self._loop is None:
            return
        for sig in self._registered:
            self._loop.remove_signal_handler(sig)
        self._registered.clear()
