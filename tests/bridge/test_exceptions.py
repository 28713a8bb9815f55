"""
Tests for the bridge exception hierarchy.
"""

import pytest

from wsbridge.exceptions import BridgeError, ConfigError, ProcessError, ServerError


@pytest.mark.unit
class TestBridgeError:
    def test_message_only(self):
        error = BridgeError("boom")
        assert str(error) == "boom"
        assert error.message == "boom"
        assert error.context == {}

    def test_context_rendered(self):
        error = BridgeError("failed to start server", host="localhost", port=8765)
        assert str(error) == "failed to start server (host=localhost, port=8765)"
        assert error.context == {"host": "localhost", "port": 8765}

    @pytest.mark.parametrize("cls", [ConfigError, ProcessError, ServerError])
    def test_subclasses(self, cls):
        error = cls("x", key="v")
        assert isinstance(error, BridgeError)
        assert error.context["key"] == "v"
