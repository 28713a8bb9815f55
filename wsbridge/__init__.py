from importlib.metadata import PackageNotFoundError, version

from .exceptions import BridgeError, ConfigError, ProcessError, ServerError

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("wsbridge")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

__all__ = [
    "__version__",
    "BridgeError",
    "ConfigError",
    "ProcessError",
    "ServerError",
]
