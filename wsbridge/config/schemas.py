"""
Configuration schemas using Pydantic for validation.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8765
DEFAULT_PING_INTERVAL = 30.0


class ServerConfig(BaseModel):
    """Listening endpoint."""

    host: str = Field(default=DEFAULT_HOST, description="Interface to bind")
    port: int = Field(
        default=DEFAULT_PORT, ge=0, le=65535, description="Port to bind, 0 for any"
    )
    max_message_size: int | None = Field(
        default=16 * 1024 * 1024,
        ge=1,
        description="Largest inbound frame accepted, None for unlimited",
    )

    model_config = ConfigDict(extra="forbid")


class LivenessConfig(BaseModel):
    """Per-session ping probe."""

    interval: float = Field(
        default=DEFAULT_PING_INTERVAL, gt=0, description="Seconds between pings"
    )

    model_config = ConfigDict(extra="forbid")


class ChildConfig(BaseModel):
    """The bridged child process."""

    command: list[str] = Field(
        default_factory=lambda: ["node", "index.js"],
        description="Program and arguments to spawn",
    )
    cwd: str | None = Field(default=None, description="Working directory")
    debug_env: str = Field(
        default="ACP_DEBUG",
        description="Variable mirroring the debug toggle into the child environment",
    )
    read_chunk_size: int = Field(
        default=65536, gt=0, description="Max bytes per stdout read"
    )
    terminate_timeout: float = Field(
        default=5.0, ge=0, description="Seconds between terminate and kill"
    )

    @field_validator("command", mode="before")
    @classmethod
    def split_command(cls, v: Any) -> Any:
        """Accept a plain string as a whitespace-separated command."""
        if isinstance(v, str):
            return v.split()
        return v

    @field_validator("command")
    @classmethod
    def require_program(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("child command must not be empty")
        return v

    model_config = ConfigDict(extra="forbid")


class LoggingConfig(BaseModel):
    """Console logging."""

    level: str = Field(default="info", description="Global log level")
    colors: bool = Field(default=True, description="ANSI colored output")
    micros: bool = Field(default=False, description="Show microsecond timestamps")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: Any) -> Any:
        """Validate log level is a recognized level."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if isinstance(v, str) and v.upper() not in valid_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v

    model_config = ConfigDict(extra="forbid")


class BridgeConfig(BaseModel):
    """Root configuration of the bridge."""

    debug: bool = Field(default=False, description="Verbose logging in bridge and child")
    shutdown_timeout: float = Field(
        default=2.0,
        ge=0,
        description="Seconds to wait for peers and listener to close on shutdown",
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
    liveness: LivenessConfig = Field(default_factory=LivenessConfig)
    child: ChildConfig = Field(default_factory=ChildConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid")

    @property
    def url(self) -> str:
        return f"ws://{self.server.host}:{self.server.port}"
