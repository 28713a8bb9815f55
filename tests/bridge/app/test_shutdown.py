"""
Tests for signal-driven shutdown.
"""

import asyncio
import os
import signal
from unittest.mock import Mock

import pytest

from tests.helpers.waiting import eventually
from wsbridge.app import ShutdownManager


@pytest.mark.unit
class TestShutdownManager:
    def test_initial_state(self, mock_logger):
        manager = ShutdownManager(mock_logger, Mock())
        assert not manager.is_shutting_down()
        assert manager.signal_name is None

    def test_signal_triggers_graceful_shutdown(self, mock_logger):
        on_shutdown = Mock()
        manager = ShutdownManager(mock_logger, on_shutdown)

        manager._handle_signal(signal.SIGINT)

        on_shutdown.assert_called_once_with(0)
        assert manager.is_shutting_down()
        assert manager.signal_name == "SIGINT"
        mock_logger.info.assert_called_once_with(
            "received SIGINT, shutting down", extra={"signal": int(signal.SIGINT)}
        )

    def test_duplicate_signals_ignored(self, mock_logger):
        on_shutdown = Mock()
        manager = ShutdownManager(mock_logger, on_shutdown)

        manager._handle_signal(signal.SIGTERM)
        manager._handle_signal(signal.SIGINT)

        on_shutdown.assert_called_once_with(0)
        assert manager.signal_name == "SIGTERM"

    def test_restore_without_register(self, mock_logger):
        ShutdownManager(mock_logger, Mock()).restore()


@pytest.mark.integration
class TestShutdownManagerSignals:
    @pytest.mark.asyncio
    async def test_real_sigterm_delivered_on_loop(self, mock_logger):
        on_shutdown = Mock()
        manager = ShutdownManager(mock_logger, on_shutdown)
        manager.register_signal_handlers(asyncio.get_running_loop())
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            await eventually(lambda: on_shutdown.called, timeout=2.0)
        finally:
            manager.restore()

        on_shutdown.assert_called_once_with(0)
        assert manager.signal_name == "SIGTERM"
