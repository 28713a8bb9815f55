"""
Configuration loading.

Settings are layered, lowest precedence first:

1. Schema defaults (see schemas.py)
2. An optional YAML file
3. Prefixed environment overrides, ``WSBRIDGE_<SECTION>__<KEY>=value``
4. The well-known variables ``ACP_DEBUG``, ``WS_PORT`` and ``WS_HOST``
5. Explicit overrides (command-line flags)

Environment Variable Override Format:
    WSBRIDGE_DEBUG=true
    WSBRIDGE_SERVER__PORT=9000
    WSBRIDGE_LIVENESS__INTERVAL=10
    WSBRIDGE_CHILD__COMMAND=python,agent.py
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import ValidationError

from ..exceptions import ConfigError
from .schemas import BridgeConfig

ENV_PREFIX = "WSBRIDGE_"
ENV_SEPARATOR = "__"

# Maximum config file size (1MB); the file only holds a handful of settings
MAX_CONFIG_SIZE_BYTES = 1024 * 1024


def _check_file_size(path: Path) -> None:
    """Refuse oversized config files."""
    file_size = os.path.getsize(path)
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            "configuration file too large",
            path=str(path),
            size=file_size,
            limit=MAX_CONFIG_SIZE_BYTES,
        )


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML mapping from disk."""
    fname_path = Path(path).expanduser().resolve()
    if not fname_path.is_file():
        raise ConfigError("configuration file not found", path=str(fname_path))
    _check_file_size(fname_path)

    with open(fname_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                "invalid YAML in configuration file", path=str(fname_path)
            ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            "configuration file must contain a mapping", path=str(fname_path)
        )
    return data


def _convert_env_value(value: str) -> bool | int | float | str | list | None:
    """
    Convert environment variable string to appropriate type.

    Args:
        value: Environment variable value as string

    Returns:
        Converted value with appropriate type
    """
    if value.lower() in ("null", "none", ""):
        return None

    if value.lower() in ("true", "false"):
        return value.lower() == "true"

    # Comma-separated values become lists (e.g. a child command line)
    if "," in value:
        return [_convert_env_value(v.strip()) for v in value.split(",")]

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value


def _env_key_to_path(env_key: str) -> list[str]:
    """
    Convert environment variable key to configuration path.

    ``WSBRIDGE_LIVENESS__INTERVAL`` -> ``["liveness", "interval"]``
    """
    return env_key[len(ENV_PREFIX) :].lower().split(ENV_SEPARATOR)


def _set_nested_value(data: dict[str, Any], path: list[str], value: Any) -> None:
    """Set a nested value, creating intermediate mappings as needed."""
    current = data
    for part in path[:-1]:
        if not isinstance(current.get(part), dict):
            current[part] = {}
        current = current[part]
    current[path[-1]] = value


def _deep_merge(base: dict[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``extra`` into ``base`` recursively, ``extra`` winning."""
    for key, value in extra.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Collect prefixed environment overrides as a nested mapping.

    Args:
        environ: Environment to read

    Returns:
        Nested dictionary of overrides
    """
    overrides: dict[str, Any] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX) or len(key) == len(ENV_PREFIX):
            continue
        _set_nested_value(overrides, _env_key_to_path(key), _convert_env_value(value))
    return overrides


def _apply_well_known_env(data: dict[str, Any], environ: Mapping[str, str]) -> None:
    """Apply ACP_DEBUG, WS_PORT and WS_HOST."""
    # Only the exact string "true" turns debug on; it never turns it off.
    if environ.get("ACP_DEBUG") == "true":
        data["debug"] = True

    port = environ.get("WS_PORT")
    if port:
        try:
            port_num = int(port)
        except ValueError as e:
            raise ConfigError("WS_PORT is not an integer", value=port) from e
        _set_nested_value(data, ["server", "port"], port_num)

    host = environ.get("WS_HOST")
    if host:
        _set_nested_value(data, ["server", "host"], host)


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> BridgeConfig:
    """
    Build the bridge configuration.

    Args:
        path: Optional YAML file
        environ: Environment to read, ``os.environ`` by default
        overrides: Nested mapping applied last (e.g. from CLI flags)

    Returns:
        Validated configuration

    Raises:
        ConfigError: If any layer is unreadable or the result is invalid
    """
    if environ is None:
        environ = os.environ

    data: dict[str, Any] = _load_yaml(path) if path is not None else {}
    _deep_merge(data, get_env_overrides(environ))
    _apply_well_known_env(data, environ)
    if overrides:
        _deep_merge(data, overrides)

    try:
        return BridgeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            "invalid configuration",
            source=str(path) if path is not None else "environment",
            errors=e.error_count(),
        ) from e
