"""
WebSocket listening endpoint.

Accepts peer connections with the ``websockets`` asyncio server and wires
each one into the session manager, the forwarding engine and a liveness
monitor. The library's own keepalive is disabled; pings come from
LivenessMonitor only.

Example Usage:
    sessions = SessionManager(lg)
    forwarder = Forwarder(lg, child, sessions)
    server = BridgeServer(lg, sessions, forwarder, host="localhost", port=8765)
    await server.start()
    ...
    server.close_all_peers()
    server.close()
    await server.wait_closed(timeout=2.0)
"""

from __future__ import annotations

import asyncio
from typing import Any

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed, ConnectionClosedError
from websockets.protocol import State

from ..exceptions import ServerError
from .forward import Forwarder
from .liveness import LivenessMonitor
from .session import SessionManager


def _format_address(address: Any) -> str:
    if isinstance(address, (tuple, list)) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


class WebSocketPeer:
    """
    Peer handle over a websockets ServerConnection.

    close() only schedules the closing handshake, so callers on the event
    loop never wait for the remote side.
    """

    def __init__(self, ws: ServerConnection) -> None:
        self._ws = ws
        self._remote = _format_address(ws.remote_address)
        self._closing = False
        self._close_task: asyncio.Task | None = None

    @property
    def remote(self) -> str:
        return self._remote

    @property
    def is_open(self) -> bool:
        return not self._closing and self._ws.state is State.OPEN

    async def send(self, data: bytes) -> bool:
        """Send ``data`` as one binary frame; False if the connection closed."""
        try:
            await self._ws.send(data)
        except ConnectionClosed:
            return False
        return True

    async def ping(self) -> asyncio.Future | None:
        """Send a ping; returns the pong waiter, or None if already closed."""
        try:
            return await self._ws.ping()
        except ConnectionClosed:
            return None

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        self._close_task = asyncio.get_running_loop().create_task(self._ws.close())

    async def wait_closed(self) -> None:
        await self._ws.wait_closed()

    def __repr__(self) -> str:
        return f"WebSocketPeer({self._remote})"


class BridgeServer:
    """Listening endpoint feeding connections into the bridge."""

    def __init__(
        self,
        lg: Any,
        sessions: SessionManager,
        forwarder: Forwarder,
        host: str = "localhost",
        port: int = 8765,
        ping_interval: float = 30.0,
        max_message_size: int | None = 2**24,
        liveness_lg: Any = None,
    ) -> None:
        """
        Initialize the server; nothing is bound until start().

        Args:
            lg: Logger instance
            sessions: Session manager arbitrating connections
            forwarder: Forwarding engine receiving peer frames
            host: Interface to bind
            port: Port to bind (0 picks a free port)
            ping_interval: Seconds between liveness pings
            max_message_size: Largest accepted inbound frame, None for no limit
            liveness_lg: Logger for liveness monitors (defaults to ``lg``)
        """
        self._lg = lg
        self._sessions = sessions
        self._forwarder = forwarder
        self._host = host
        self._port = port
        self._ping_interval = ping_interval
        self._max_message_size = max_message_size
        self._liveness_lg = liveness_lg if liveness_lg is not None else lg

        self._server: Server | None = None
        self._peers: set[WebSocketPeer] = set()
        self._closed_task: asyncio.Task | None = None

    @property
    def port(self) -> int:
        """Bound port once started, the configured port before."""
        if self._server is not None:
            for sock in self._server.sockets:
                return sock.getsockname()[1]
        return self._port

    @property
    def url(self) -> str:
        return f"ws://{self._host}:{self.port}"

    @property
    def peers(self) -> list[WebSocketPeer]:
        """Every connected peer, active or not."""
        return list(self._peers)

    async def start(self) -> None:
        """
        Bind the listening socket.

        Raises:
            ServerError: If the address cannot be bound
        """
        try:
            self._server = await serve(
                self._handle,
                self._host,
                self._port,
                ping_interval=None,
                max_size=self._max_message_size,
            )
        except OSError as e:
            self._lg.error(
                "failed to start server",
                extra={"host": self._host, "port": self._port, "exception": e},
            )
            raise ServerError(
                "failed to start server", host=self._host, port=self._port, error=str(e)
            ) from e

        self._lg.info("listening", extra={"url": self.url})

    async def _handle(self, ws: ServerConnection) -> None:
        peer = WebSocketPeer(ws)
        self._peers.add(peer)
        session = self._sessions.on_connect(peer)

        monitor = LivenessMonitor(self._liveness_lg, peer, self._ping_interval)
        session.monitor = monitor
        monitor.start()
        try:
            async for message in ws:
                self._forwarder.on_peer_message(message)
        except ConnectionClosedError as e:
            self._lg.warning(
                "peer connection error", extra={"peer": peer.remote, "exception": e}
            )
        finally:
            monitor.stop()
            self._peers.discard(peer)
            self._sessions.on_disconnect(session)

    def close_all_peers(self) -> int:
        """Start closing every connected peer; returns how many."""
        peers = self.peers
        for peer in peers:
            peer.close()
        return len(peers)

    def close(self) -> None:
        """
        Stop listening without waiting.

        "server closed" is logged once the listener has shut down.
        """
        if self._server is None or self._closed_task is not None:
            return
        self._server.close()
        self._closed_task = asyncio.get_running_loop().create_task(self._log_closed())

    async def _log_closed(self) -> None:
        assert self._server is not None
        await self._server.wait_closed()
        self._lg.info("server closed")

    async def wait_closed(self, timeout: float) -> bool:
        """
        Wait for peer connections and the listener to finish closing.

        Returns:
            bool: False if ``timeout`` expired first
        """
        waits = [peer.wait_closed() for peer in self.peers]
        if self._closed_task is not None:
            waits.append(asyncio.shield(self._closed_task))
        if not waits:
            return True

        try:
            await asyncio.wait_for(asyncio.gather(*waits), timeout)
        except TimeoutError:
            self._lg.warning(
                "timed out waiting for connections to close",
                extra={"timeout": timeout},
            )
            return False
        return True
