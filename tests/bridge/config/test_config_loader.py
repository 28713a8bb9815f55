"""
Tests for layered configuration loading.
"""

import pytest

import wsbridge.config.config as config_module
from wsbridge.config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    get_env_overrides,
    load_config,
)
from wsbridge.exceptions import ConfigError


@pytest.fixture
def config_file(tmp_path):
    def write(content: str):
        path = tmp_path / "wsbridge.yaml"
        path.write_text(content)
        return path

    return write


@pytest.mark.unit
class TestDefaults:
    def test_defaults_without_sources(self):
        config = load_config(environ={})

        assert config.server.host == DEFAULT_HOST
        assert config.server.port == DEFAULT_PORT
        assert config.liveness.interval == 30.0
        assert config.child.command == ["node", "index.js"]
        assert config.debug is False
        assert config.logging.level == "info"
        assert config.url == "ws://localhost:8765"


@pytest.mark.unit
class TestYamlFile:
    def test_values_loaded(self, config_file):
        path = config_file(
            "server:\n"
            "  host: 0.0.0.0\n"
            "  port: 9100\n"
            "liveness:\n"
            "  interval: 5\n"
            "child:\n"
            "  command: python agent.py\n"
        )
        config = load_config(path, environ={})

        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9100
        assert config.liveness.interval == 5.0
        assert config.child.command == ["python", "agent.py"]

    def test_empty_file_uses_defaults(self, config_file):
        config = load_config(config_file(""), environ={})
        assert config.server.port == DEFAULT_PORT

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml(self, config_file):
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(config_file("server: [unclosed\n"), environ={})

    def test_non_mapping(self, config_file):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(config_file("- a\n- b\n"), environ={})

    def test_file_too_large(self, config_file, monkeypatch):
        monkeypatch.setattr(config_module, "MAX_CONFIG_SIZE_BYTES", 10)
        with pytest.raises(ConfigError, match="too large"):
            load_config(config_file("debug: false\n" * 4), environ={})

    def test_unknown_key_rejected(self, config_file):
        with pytest.raises(ConfigError) as exc_info:
            load_config(config_file("server:\n  colour: blue\n"), environ={})
        assert exc_info.value.context["errors"] == 1


@pytest.mark.unit
class TestEnvironment:
    def test_prefixed_overrides(self):
        environ = {
            "WSBRIDGE_SERVER__PORT": "9000",
            "WSBRIDGE_LIVENESS__INTERVAL": "2.5",
            "WSBRIDGE_CHILD__COMMAND": "python,agent.py",
            "WSBRIDGE_CHILD__READ_CHUNK_SIZE": "1024",
            "UNRELATED": "1",
        }
        config = load_config(environ=environ)

        assert config.server.port == 9000
        assert config.liveness.interval == 2.5
        assert config.child.command == ["python", "agent.py"]
        assert config.child.read_chunk_size == 1024

    def test_get_env_overrides_nesting(self):
        overrides = get_env_overrides(
            {"WSBRIDGE_DEBUG": "true", "WSBRIDGE_SERVER__HOST": "example"}
        )
        assert overrides == {"debug": True, "server": {"host": "example"}}

    def test_acp_debug_true(self):
        config = load_config(environ={"ACP_DEBUG": "true"})
        assert config.debug is True

    @pytest.mark.parametrize("value", ["1", "TRUE", "yes", "false"])
    def test_acp_debug_other_values(self, value):
        assert load_config(environ={"ACP_DEBUG": value}).debug is False

    def test_ws_port_and_host(self):
        config = load_config(environ={"WS_PORT": "9999", "WS_HOST": "127.0.0.1"})
        assert config.server.port == 9999
        assert config.server.host == "127.0.0.1"

    def test_ws_port_not_integer(self):
        with pytest.raises(ConfigError, match="WS_PORT"):
            load_config(environ={"WS_PORT": "http"})

    def test_ws_port_out_of_range(self):
        with pytest.raises(ConfigError):
            load_config(environ={"WS_PORT": "70000"})


@pytest.mark.unit
class TestPrecedence:
    def test_layers_in_order(self, config_file):
        path = config_file("server:\n  port: 7000\n  host: filehost\n")
        environ = {"WSBRIDGE_SERVER__PORT": "7001", "WS_PORT": "7002"}

        assert load_config(path, environ={}).server.port == 7000
        assert (
            load_config(path, environ={"WSBRIDGE_SERVER__PORT": "7001"}).server.port
            == 7001
        )
        assert load_config(path, environ=environ).server.port == 7002

        config = load_config(
            path, environ=environ, overrides={"server": {"port": 7003}}
        )
        assert config.server.port == 7003
        assert config.server.host == "filehost"
