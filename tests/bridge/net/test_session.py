"""
Tests for single-peer session arbitration.
"""

from unittest.mock import Mock

import pytest

from tests.fixtures.fakes import FakePeer
from wsbridge.net import LivenessMonitor, Session, SessionManager, SessionState


@pytest.fixture
def sessions(mock_logger):
    return SessionManager(mock_logger)


@pytest.mark.unit
class TestSession:
    def test_new_session_active(self, fake_peer):
        session = Session(fake_peer)
        assert session.state is SessionState.ACTIVE
        assert session.is_open

    def test_close_stops_monitor(self, fake_peer):
        session = Session(fake_peer)
        session.monitor = Mock(spec=LivenessMonitor)

        session.close()

        assert session.state is SessionState.CLOSED
        session.monitor.stop.assert_called_once_with()
        assert not session.is_open

    def test_not_open_when_peer_closed(self):
        session = Session(FakePeer(open=False))
        assert session.active
        assert not session.is_open


@pytest.mark.unit
class TestSessionManager:
    def test_no_session_initially(self, sessions):
        assert sessions.current() is None

    def test_connect_installs_active_session(self, sessions, fake_peer):
        session = sessions.on_connect(fake_peer)

        assert sessions.current() is session
        assert session.peer is fake_peer
        assert fake_peer.close_calls == 0

    def test_second_connect_evicts_first(self, sessions):
        first_peer, second_peer = FakePeer("a:1"), FakePeer("b:2")
        first = sessions.on_connect(first_peer)
        first.monitor = Mock(spec=LivenessMonitor)

        second = sessions.on_connect(second_peer)

        assert first_peer.close_calls == 1
        assert first.state is SessionState.CLOSED
        first.monitor.stop.assert_called_once_with()
        assert sessions.current() is second
        assert second.active

    def test_disconnect_of_current_clears(self, sessions, fake_peer):
        session = sessions.on_connect(fake_peer)
        sessions.on_disconnect(session)

        assert sessions.current() is None
        assert session.state is SessionState.CLOSED

    def test_stale_disconnect_keeps_current(self, sessions):
        first = sessions.on_connect(FakePeer("a:1"))
        second = sessions.on_connect(FakePeer("b:2"))

        # The evicted peer's disconnect arrives after the new peer took over
        sessions.on_disconnect(first)

        assert sessions.current() is second
        assert second.active

    def test_disconnect_twice_is_harmless(self, sessions, fake_peer):
        session = sessions.on_connect(fake_peer)
        sessions.on_disconnect(session)
        sessions.on_disconnect(session)
        assert sessions.current() is None

    def test_eviction_logged(self, sessions, mock_logger):
        sessions.on_connect(FakePeer("a:1"))
        sessions.on_connect(FakePeer("b:2"))
        mock_logger.info.assert_any_call(
            "closing existing peer connection", extra={"peer": "a:1"}
        )
