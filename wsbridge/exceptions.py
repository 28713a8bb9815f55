"""
Exception hierarchy for the bridge.

Only startup-level failures surface as exceptions. Peer-facing and
payload-level failures are absorbed where they happen (logged and dropped),
so nothing in the forwarding path raises these.
"""

from typing import Any


class BridgeError(Exception):
    """
    Base exception for all bridge errors.

    Example:
        try:
            config = load_config("etc/bridge.yaml")
        except BridgeError as e:
            lg.error("cannot start", extra={"exception": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(BridgeError):
    """
    Configuration errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Port out of range
        - Unparseable WS_PORT
    """

    pass


class ProcessError(BridgeError):
    """
    Child process errors.

    Raised for spawn and stream failures of the bridged child process. The
    child handle reports these through its error listeners rather than
    raising them from the event loop.
    """

    pass


class ServerError(BridgeError):
    """
    Listening endpoint errors.

    Examples:
        - Port already in use
        - Host cannot be resolved
    """

    pass
