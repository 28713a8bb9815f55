"""Periodic execution on the event loop."""

from .ticker import AsyncTicker, TickerHandler

__all__ = [
    "AsyncTicker",
    "TickerHandler",
]
