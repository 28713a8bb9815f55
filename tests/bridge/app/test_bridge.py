"""
Tests for the bridge composition root.

Each test runs the whole bridge with a real Python child process on an
ephemeral port.
"""

import asyncio
import os
import signal
import socket
import sys

import pytest
from websockets.asyncio.client import connect

from wsbridge.app import Bridge, LifecycleState
from wsbridge.config import BridgeConfig
from wsbridge.proc import ProcessState

SLEEPER = "import time; time.sleep(30)"


def make_config(code: str, port: int = 0, **kwargs) -> BridgeConfig:
    return BridgeConfig(
        server={"host": "127.0.0.1", "port": port},
        child={"command": [sys.executable, "-c", code], "terminate_timeout": 1.0},
        **kwargs,
    )


@pytest.mark.unit
class TestChildEnvironment:
    def test_debug_toggle_mirrored(self, mock_logger):
        bridge = Bridge(BridgeConfig(debug=True), mock_logger, environ={"HOME": "/h"})
        assert bridge.child_env() == {"HOME": "/h", "ACP_DEBUG": "true"}

    def test_debug_off(self, mock_logger):
        bridge = Bridge(BridgeConfig(), mock_logger, environ={"ACP_DEBUG": "true"})
        assert bridge.child_env()["ACP_DEBUG"] == "false"

    def test_custom_variable(self, mock_logger):
        config = BridgeConfig(child={"debug_env": "AGENT_DEBUG"})
        env = Bridge(config, mock_logger, environ={}).child_env()
        assert env == {"AGENT_DEBUG": "false"}

    def test_disabled(self, mock_logger):
        config = BridgeConfig(child={"debug_env": ""})
        assert Bridge(config, mock_logger, environ={"A": "1"}).child_env() == {"A": "1"}


@pytest.mark.integration
class TestBridgeExitCodes:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [0, 3])
    async def test_child_exit_code_becomes_host_exit_code(self, root_logger, code):
        bridge = Bridge(
            make_config(f"import sys; sys.exit({code})"),
            root_logger,
            handle_signals=False,
        )
        assert await asyncio.wait_for(bridge.run(), 10) == code
        assert bridge.lifecycle.state is LifecycleState.TERMINATED

    @pytest.mark.asyncio
    async def test_spawn_failure_exits_one(self, root_logger, tmp_path):
        config = BridgeConfig(
            server={"host": "127.0.0.1", "port": 0},
            child={"command": [str(tmp_path / "missing-agent")]},
        )
        bridge = Bridge(config, root_logger, handle_signals=False)

        assert await asyncio.wait_for(bridge.run(), 10) == 1
        assert bridge.child.state is ProcessState.ERRORED
        assert not bridge.ready.is_set()

    @pytest.mark.asyncio
    async def test_bind_failure_exits_one_and_stops_child(self, root_logger):
        with socket.socket() as sock:
            sock.bind(("127.0.0.1", 0))
            sock.listen()
            port = sock.getsockname()[1]

            bridge = Bridge(make_config(SLEEPER, port=port), root_logger, handle_signals=False)
            assert await asyncio.wait_for(bridge.run(), 10) == 1

        assert bridge.child.state is ProcessState.EXITED


@pytest.mark.integration
class TestBridgeSignals:
    @pytest.mark.asyncio
    async def test_sigterm_closes_peers_and_exits_zero(self, root_logger):
        bridge = Bridge(make_config(SLEEPER), root_logger)
        run = asyncio.ensure_future(bridge.run())
        await asyncio.wait_for(bridge.ready.wait(), 10)

        async with connect(bridge.server.url) as ws:
            os.kill(os.getpid(), signal.SIGTERM)
            assert await asyncio.wait_for(run, 10) == 0
            await asyncio.wait_for(ws.wait_closed(), 2)

        assert bridge.child.state is ProcessState.EXITED
        assert bridge.server.peers == []

    @pytest.mark.asyncio
    async def test_signal_handlers_removed_after_run(self, root_logger):
        before = signal.getsignal(signal.SIGTERM)
        bridge = Bridge(make_config("pass"), root_logger)
        await asyncio.wait_for(bridge.run(), 10)
        assert signal.getsignal(signal.SIGTERM) == before
