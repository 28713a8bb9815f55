"""Periodic liveness probing of a connected peer."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Any, Protocol

from ..time import AsyncTicker, TickerHandler


class PingablePeer(Protocol):
    @property
    def is_open(self) -> bool: ...

    @property
    def remote(self) -> str: ...

    def ping(self) -> Awaitable[asyncio.Future | None]: ...


class LivenessMonitor(TickerHandler):
    """
    Sends a ping to one peer every ``interval`` seconds.

    The first tick that finds the connection no longer open stops the monitor
    for good. The owner must still call stop() when the session ends, since
    the connection can close between ticks. Pongs are logged and change
    nothing.
    """

    def __init__(self, lg: Any, peer: PingablePeer, interval: float = 30.0) -> None:
        self._lg = lg
        self._peer = peer
        self._ticker = AsyncTicker(lg, self, secs=interval)
        self._probes_sent = 0

    @property
    def probes_sent(self) -> int:
        return self._probes_sent

    @property
    def running(self) -> bool:
        return self._ticker.is_running()

    def start(self) -> None:
        self._ticker.start()

    def stop(self) -> None:
        self._ticker.stop()

    def ticker_start(self) -> None:
        self._lg.trace("liveness monitor started", extra={"peer": self._peer.remote})

    def ticker_stop(self) -> None:
        self._lg.trace("liveness monitor stopped", extra={"peer": self._peer.remote})

    async def ticker_tick(self) -> None:
        if not self._peer.is_open:
            self._lg.debug(
                "peer connection not open, stopping pings",
                extra={"peer": self._peer.remote},
            )
            self.stop()
            return

        self._probes_sent += 1
        waiter = await self._peer.ping()
        self._lg.trace("sent ping", extra={"peer": self._peer.remote})
        if waiter is not None:
            waiter.add_done_callback(self._on_pong)

    def _on_pong(self, waiter: asyncio.Future) -> None:
        if waiter.cancelled() or waiter.exception() is not None:
            return
        self._lg.debug("received pong from peer", extra={"peer": self._peer.remote})
