"""
Composition root: builds the bridge components from a BridgeConfig and runs
them until shutdown.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Mapping
from typing import Any

from ..config import BridgeConfig
from ..exceptions import ServerError
from ..log import derive_lg
from ..net import BridgeServer, Forwarder, SessionManager
from ..proc import ChildProcess
from .lifecycle import Lifecycle, LifecycleState
from .shutdown import ShutdownManager


class Bridge:
    """
    Runs one child process behind one WebSocket listener.

    Example:
        config = load_config("etc/wsbridge.yaml")
        settings = LogConfig.from_settings(config.logging, debug=config.debug)
        lg = LoggerFactory.create_root(settings)
        exit_code = asyncio.run(Bridge(config, lg).run())
    """

    def __init__(
        self,
        config: BridgeConfig,
        lg: Any,
        environ: Mapping[str, str] | None = None,
        handle_signals: bool = True,
    ) -> None:
        """
        Initialize the bridge.

        Args:
            config: Bridge configuration
            lg: Root logger; components log through views derived from it
            environ: Base environment for the child (defaults to os.environ)
            handle_signals: Install SIGINT/SIGTERM handlers while running
        """
        self._config = config
        self._lg = lg
        self._environ = dict(os.environ if environ is None else environ)
        self._handle_signals = handle_signals

        self.ready = asyncio.Event()
        self.child: ChildProcess | None = None
        self.sessions: SessionManager | None = None
        self.server: BridgeServer | None = None
        self.lifecycle: Lifecycle | None = None

    def child_env(self) -> dict[str, str]:
        """Environment for the child: ours plus the debug toggle."""
        env = dict(self._environ)
        debug_env = self._config.child.debug_env
        if debug_env:
            env[debug_env] = "true" if self._config.debug else "false"
        return env

    def _build(self) -> None:
        config = self._config
        self.child = ChildProcess(
            derive_lg(self._lg, ["bridge", "child"]),
            config.child.command,
            cwd=config.child.cwd,
            env=self.child_env(),
            read_chunk_size=config.child.read_chunk_size,
            terminate_timeout=config.child.terminate_timeout,
        )
        self.sessions = SessionManager(derive_lg(self._lg, ["bridge", "session"]))
        forwarder = Forwarder(
            derive_lg(self._lg, ["bridge", "forward"]), self.child, self.sessions
        )
        self.server = BridgeServer(
            derive_lg(self._lg, ["bridge", "server"]),
            self.sessions,
            forwarder,
            host=config.server.host,
            port=config.server.port,
            ping_interval=config.liveness.interval,
            max_message_size=config.server.max_message_size,
            liveness_lg=derive_lg(self._lg, ["bridge", "liveness"]),
        )
        self.lifecycle = Lifecycle(
            derive_lg(self._lg, ["bridge", "lifecycle"]),
            self.server,
            self.child,
            shutdown_timeout=config.shutdown_timeout,
        )

        self.child.subscribe(forwarder.on_child_output)
        self.child.on_exit(self.lifecycle.on_child_exit)
        self.child.on_error(self.lifecycle.on_child_error)

    async def run(self) -> int:
        """
        Start the child and the listener, then wait for shutdown.

        Returns:
            int: Host exit code
        """
        self._build()
        assert self.child and self.server and self.lifecycle

        self._lg.info(
            "starting bridge",
            extra={
                "url": self._config.url,
                "command": " ".join(self._config.child.command),
            },
        )

        shutdown = None
        if self._handle_signals:
            shutdown = ShutdownManager(
                derive_lg(self._lg, ["bridge", "lifecycle"]), self.lifecycle.shutdown
            )
            shutdown.register_signal_handlers(asyncio.get_running_loop())

        try:
            await self._start()
            return await self.lifecycle.wait()
        finally:
            if shutdown is not None:
                shutdown.restore()

    async def _start(self) -> None:
        assert self.child and self.server and self.lifecycle

        # A child that cannot be spawned has already triggered shutdown(1).
        if not await self.child.start():
            return
        if self.lifecycle.state is not LifecycleState.RUNNING:
            return

        try:
            await self.server.start()
        except ServerError:
            self.lifecycle.shutdown(1)
            return

        # The child may have exited while the listener was being bound.
        if self.lifecycle.state is not LifecycleState.RUNNING:
            self.server.close()
            return
        self.ready.set()
