"""
Ticker for periodic tasks on the asyncio event loop.

Handlers implement the TickerHandler interface; ``ticker_tick`` may be a
plain method or a coroutine. Ticks run on the loop thread, one at a time,
so handlers need no locking.

Example Usage:
    class Heartbeat(TickerHandler):
        def __init__(self, lg):
            self._lg = lg

        def ticker_tick(self):
            self._lg.debug("still alive")

    ticker = AsyncTicker(lg, Heartbeat(lg), secs=30)
    ticker.start()
    ...
    ticker.stop()
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any


class TickerHandler:
    """
    Interface for objects that handle ticker events.

    All methods are optional and default to no-ops.
    """

    def ticker_start(self) -> None:
        """Called when the ticker starts."""
        pass

    def ticker_tick(self) -> Awaitable[None] | None:
        """
        Called on each tick execution.

        May return an awaitable; the ticker awaits it before scheduling the
        next tick.
        """
        pass

    def ticker_stop(self) -> None:
        """Called once when the ticker is stopped."""
        pass


class _CallableWrapper(TickerHandler):
    """Adapts a plain callable (sync or async) to the TickerHandler interface."""

    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn

    def ticker_tick(self) -> Any:
        return self._fn()


class AsyncTicker:
    """
    Periodic task execution on the running event loop.

    The first tick fires one interval after start() unless ``initial`` is
    True. A tick that raises is logged and the ticker keeps running. stop()
    may be called from anywhere, including from inside ``ticker_tick``; no
    tick fires after it returns.
    """

    def __init__(
        self,
        lg: Any,
        handler: TickerHandler | Callable[[], Any],
        secs: float,
        initial: bool = False,
    ) -> None:
        """
        Initialize the ticker.

        Args:
            lg: Logger instance for error logging
            handler: TickerHandler instance or callable to execute on each tick
            secs: Interval between ticks in seconds
            initial: Whether to tick immediately on start (default False)
        """
        if secs <= 0:
            raise ValueError(f"Ticker interval must be positive, got: {secs}")
        if not isinstance(handler, TickerHandler):
            handler = _CallableWrapper(handler)

        self._lg = lg
        self._handler = handler
        self._secs = secs
        self._initial = initial
        self._task: asyncio.Task | None = None
        self._running = False
        self._stop_requested = False

    def start(self) -> None:
        """
        Start ticking on the running event loop.

        Raises:
            RuntimeError: If the ticker was already started
        """
        if self._task is not None or self._stop_requested:
            raise RuntimeError("Ticker is already running")

        self._running = True
        self._handler.ticker_start()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            if not self._initial:
                await asyncio.sleep(self._secs)
            while not self._stop_requested:
                await self._tick()
                if self._stop_requested:
                    break
                await asyncio.sleep(self._secs)
        finally:
            self._running = False

    async def _tick(self) -> None:
        try:
            result = self._handler.ticker_tick()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            self._lg.exception("error in ticker_tick")

    def stop(self) -> None:
        """
        Stop the ticker.

        Cancels the pending sleep (or running tick, unless called from within
        it) and calls the handler's ticker_stop once. Further calls are no-ops.
        """
        if self._stop_requested:
            return
        self._stop_requested = True

        task = self._task
        if task is not None and not task.done():
            try:
                current = asyncio.current_task()
            except RuntimeError:
                current = None
            if task is not current:
                task.cancel()

        if self._task is not None:
            try:
                self._handler.ticker_stop()
            except Exception:
                self._lg.exception("error in ticker_stop callback")

    def is_running(self) -> bool:
        """Check if the ticker task is alive and not stopping."""
        return self._running and not self._stop_requested
