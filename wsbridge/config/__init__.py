"""
Configuration package.

Provides the pydantic schema of the bridge settings and the layered loader
(YAML file, environment, command-line overrides).
"""

from .config import ENV_PREFIX, MAX_CONFIG_SIZE_BYTES, get_env_overrides, load_config
from .schemas import (
    DEFAULT_HOST,
    DEFAULT_PING_INTERVAL,
    DEFAULT_PORT,
    BridgeConfig,
    ChildConfig,
    LivenessConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    "load_config",
    "get_env_overrides",
    "ENV_PREFIX",
    "MAX_CONFIG_SIZE_BYTES",
    "BridgeConfig",
    "ServerConfig",
    "LivenessConfig",
    "ChildConfig",
    "LoggingConfig",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "DEFAULT_PING_INTERVAL",
]
