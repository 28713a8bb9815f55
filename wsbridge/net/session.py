"""
Single-peer session arbitration.

At most one session is ACTIVE at any time. A new connection evicts the
current one; a disconnect only clears the active slot if it comes from the
session that occupies it, so a late disconnect from an evicted peer never
affects its successor.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .liveness import LivenessMonitor


class Peer(Protocol):
    """Connection handle the session layer depends on."""

    @property
    def is_open(self) -> bool: ...

    @property
    def remote(self) -> str: ...

    async def send(self, data: bytes) -> bool: ...

    def close(self) -> None: ...


class SessionState(enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class Session:
    """One connected peer and its liveness monitor."""

    def __init__(self, peer: Peer) -> None:
        self.peer = peer
        self.monitor: LivenessMonitor | None = None
        self.state = SessionState.ACTIVE

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    @property
    def is_open(self) -> bool:
        """Whether the session is active and its connection can carry frames."""
        return self.active and self.peer.is_open

    def close(self) -> None:
        """Mark the session closed; the monitor is cancelled here too."""
        self.state = SessionState.CLOSED
        if self.monitor is not None:
            self.monitor.stop()

    def __repr__(self) -> str:
        return f"Session(peer={self.peer.remote}, state={self.state.value})"


class SessionManager:
    """
    Owns the active session.

    All methods are synchronous and meant to be called from the event loop
    thread, so no locking is needed.
    """

    def __init__(self, lg: Any) -> None:
        self._lg = lg
        self._current: Session | None = None

    def on_connect(self, peer: Peer) -> Session:
        """
        Install ``peer`` as the active session, evicting the previous one.

        The evicted peer's connection is closed, which runs its own
        disconnect path later; that disconnect is then a no-op here.

        Args:
            peer: Newly accepted connection

        Returns:
            Session: The new active session
        """
        self._lg.info("peer connected", extra={"peer": peer.remote})

        previous = self._current
        if previous is not None:
            self._lg.info(
                "closing existing peer connection",
                extra={"peer": previous.peer.remote},
            )
            previous.close()
            previous.peer.close()

        session = Session(peer)
        self._current = session
        return session

    def on_disconnect(self, session: Session) -> None:
        """Release ``session``; clears the active slot only if it holds it."""
        self._lg.info("peer disconnected", extra={"peer": session.peer.remote})
        session.close()
        if self._current is session:
            self._current = None
        else:
            self._lg.debug(
                "ignoring disconnect of inactive session",
                extra={"peer": session.peer.remote},
            )

    def current(self) -> Session | None:
        return self._current
