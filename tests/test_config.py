"""Tests for configuration management."""

from unittest.mock import patch

import pytest

from portainer_mcp.core.config_loader import (
    PortainerConnection,
    PortainerMCPConfig,
    load_config,
    validate_connection,
)
from portainer_mcp.core.exceptions import ConfigurationError

CONFIG_ENV_VARS = [
    "PORTAINER_URL",
    "PORTAINER_TOKEN",
    "PORTAINER_SKIP_TLS_VERIFY",
    "PORTAINER_READ_ONLY",
    "PORTAINER_TIMEOUT",
    "PORTAINER_MCP_CONFIG",
    "FASTMCP_HOST",
    "FASTMCP_PORT",
    "FASTMCP_TRANSPORT",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate tests from the caller's environment and .env file."""
    for var in CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    with patch("portainer_mcp.core.config_loader.load_dotenv"):
        yield


def test_default_config():
    config = PortainerMCPConfig()

    assert config.server.host == "127.0.0.1"
    assert config.server.port == 8000
    assert config.server.log_level == "INFO"
    assert config.server.transport == "stdio"
    assert config.server.read_only is False
    assert config.portainer.server_url == ""
    assert config.portainer.skip_tls_verify is False


def test_load_yaml_config(tmp_path):
    config_path = tmp_path / "portainer.yml"
    config_path.write_text(
        """
portainer:
  server_url: portainer.example.com:9443
  token: ptr_from_file
  skip_tls_verify: true
  timeout: 5

server:
  port: 9000
  log_level: DEBUG
  read_only: true
"""
    )

    config = load_config(str(config_path))

    assert config.portainer.server_url == "portainer.example.com:9443"
    assert config.portainer.token == "ptr_from_file"
    assert config.portainer.skip_tls_verify is True
    assert config.portainer.timeout == 5
    assert config.server.port == 9000
    assert config.server.log_level == "DEBUG"
    assert config.server.read_only is True
    assert config.config_file == str(config_path)


def test_missing_config_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "missing.yml"))

    assert config.portainer.server_url == ""
    assert config.server.port == 8000


def test_environment_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "portainer.yml"
    config_path.write_text("portainer:\n  server_url: from-file:9443\n  token: file-token\n")
    monkeypatch.setenv("PORTAINER_URL", "from-env:9443")
    monkeypatch.setenv("PORTAINER_READ_ONLY", "true")
    monkeypatch.setenv("PORTAINER_SKIP_TLS_VERIFY", "1")
    monkeypatch.setenv("FASTMCP_TRANSPORT", "http")
    monkeypatch.setenv("FASTMCP_PORT", "9100")

    config = load_config(str(config_path))

    assert config.portainer.server_url == "from-env:9443"
    assert config.portainer.token == "file-token"
    assert config.portainer.skip_tls_verify is True
    assert config.server.read_only is True
    assert config.server.transport == "http"
    assert config.server.port == 9100


def test_invalid_transport_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("FASTMCP_TRANSPORT", "carrier-pigeon")

    config = load_config(str(tmp_path / "missing.yml"))

    assert config.server.transport == "stdio"


def test_invalid_timeout_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("PORTAINER_TIMEOUT", "soon")

    config = load_config(str(tmp_path / "missing.yml"))

    assert config.portainer.timeout == 30.0


def test_yaml_expands_allowed_variables(tmp_path, monkeypatch):
    monkeypatch.setenv("PORTAINER_TOKEN", "ptr_expanded")
    monkeypatch.setenv("UNLISTED_SECRET", "leak")
    config_path = tmp_path / "portainer.yml"
    config_path.write_text(
        "portainer:\n  server_url: ${UNLISTED_SECRET}\n  token: ${PORTAINER_TOKEN}\n"
    )

    config = load_config(str(config_path))

    assert config.portainer.token == "ptr_expanded"
    assert config.portainer.server_url == "${UNLISTED_SECRET}"


def test_invalid_config_file(tmp_path):
    config_path = tmp_path / "broken.yml"
    config_path.write_text("portainer: [unclosed\n")

    with pytest.raises(ValueError, match="Failed to load config"):
        load_config(str(config_path))


class TestValidateConnection:
    def test_complete_connection(self):
        config = PortainerMCPConfig(
            portainer=PortainerConnection(server_url="portainer:9443", token="ptr_x")
        )

        validate_connection(config)

    def test_missing_everything(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_connection(PortainerMCPConfig())

        message = str(exc_info.value)
        assert "PORTAINER_URL" in message
        assert "PORTAINER_TOKEN" in message

    def test_blank_token(self):
        config = PortainerMCPConfig(
            portainer=PortainerConnection(server_url="portainer:9443", token="   ")
        )

        with pytest.raises(ConfigurationError, match="PORTAINER_TOKEN"):
            validate_connection(config)


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        PortainerConnection(server_url="portainer:9443", token="t", timeout=0)
