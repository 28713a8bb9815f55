"""
Forwarding engine between the peer and the child process.

Two independent pipes:

- inbound, ``on_peer_message``: peer frame -> child stdin
- outbound, ``on_child_output``: child stdout chunk -> active peer

Payloads are relayed byte for byte. Each stdout chunk becomes exactly one
frame, whatever the child's own message boundaries are. When the
destination is not writable the payload is logged and dropped, never queued
or retried. Payloads are decoded only for debug logging, and a payload that
does not decode is still forwarded.
"""

import json
import logging
from typing import Any, Protocol

from .session import SessionManager


class ChildSink(Protocol):
    def write(self, data: bytes) -> bool: ...


def describe_payload(data: bytes) -> str:
    """
    Render a payload for logging.

    JSON documents are rendered compactly; anything else is shown as text,
    with undecodable bytes replaced. JSON nested too deeply to parse is shown
    as text as well.
    """
    text = data.decode("utf-8", errors="replace")
    try:
        return json.dumps(json.loads(text), separators=(",", ":"), ensure_ascii=False)
    except (ValueError, RecursionError):
        return text


class Forwarder:
    """Relays payloads between the child process and the active session."""

    def __init__(self, lg: Any, child: ChildSink, sessions: SessionManager) -> None:
        self._lg = lg
        self._child = child
        self._sessions = sessions
        self._stats = {"inbound": 0, "outbound": 0, "dropped": 0}

    @property
    def stats(self) -> dict[str, int]:
        """Forwarded and dropped payload counts."""
        return dict(self._stats)

    def on_peer_message(self, data: bytes | str) -> bool:
        """
        Write a peer frame to the child's stdin.

        Text frames are forwarded as their UTF-8 bytes.

        Returns:
            bool: True if the payload was written, False if it was dropped
        """
        if isinstance(data, str):
            data = data.encode("utf-8")

        self._log_payload("peer -> child", data)
        if self._child.write(data):
            self._stats["inbound"] += 1
            return True

        self._stats["dropped"] += 1
        self._lg.warning(
            "child stdin is not writable, dropping message",
            extra={"size": len(data)},
        )
        return False

    async def on_child_output(self, chunk: bytes) -> bool:
        """
        Send a child stdout chunk to the active peer as one frame.

        Returns:
            bool: True if the chunk was sent, False if it was dropped
        """
        self._log_payload("child -> peer", chunk)

        session = self._sessions.current()
        if session is None or not session.is_open:
            self._stats["dropped"] += 1
            self._lg.warning(
                "no active peer to forward message to", extra={"size": len(chunk)}
            )
            return False

        if not await session.peer.send(chunk):
            self._stats["dropped"] += 1
            self._lg.warning(
                "peer closed while sending, dropping message",
                extra={"peer": session.peer.remote, "size": len(chunk)},
            )
            return False

        self._stats["outbound"] += 1
        return True

    def _log_payload(self, direction: str, data: bytes) -> None:
        if self._lg.isEnabledFor(logging.DEBUG):
            self._lg.debug(direction, extra={"payload": describe_payload(data)})
