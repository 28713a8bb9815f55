"""
Network side of the bridge: sessions, forwarding, liveness and the listener.
"""

from .forward import Forwarder, describe_payload
from .liveness import LivenessMonitor
from .server import BridgeServer, WebSocketPeer
from .session import Session, SessionManager, SessionState

__all__ = [
    "BridgeServer",
    "WebSocketPeer",
    "Forwarder",
    "describe_payload",
    "LivenessMonitor",
    "Session",
    "SessionManager",
    "SessionState",
]
