"""Configuration management for Portainer MCP server."""

import os
import re
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError

logger = structlog.get_logger()

_TRUE_VALUES = ("1", "true", "yes", "on")


class PortainerConnection(BaseModel):
    """Connection settings for the Portainer API.

    Immutable after construction: every request builds its transport from
    these values, so concurrent tool calls never share mutable state.
    """

    server_url: str = ""
    token: str = ""
    skip_tls_verify: bool = False
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")

    model_config = {"frozen": True}

    @property
    def base_url(self) -> str:
        """API root, defaulting to https when no scheme is given."""
        url = self.server_url.strip().rstrip("/")
        if not re.match(r"^https?://", url):
            url = f"https://{url}"
        return f"{url}/api"


class ServerConfig(BaseModel):
    """MCP server configuration."""

    host: str = Field(default="127.0.0.1", alias="FASTMCP_HOST")
    port: int = Field(default=8000, alias="FASTMCP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    transport: Literal["stdio", "http"] = "stdio"
    read_only: bool = False

    model_config = {"populate_by_name": True}


class PortainerMCPConfig(BaseSettings):
    """Main configuration for Portainer MCP server."""

    portainer: PortainerConnection = Field(default_factory=PortainerConnection)
    server: ServerConfig = Field(default_factory=ServerConfig)
    config_file: str = Field(default="config/portainer.yml", alias="PORTAINER_MCP_CONFIG")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def load_config(config_path: str | None = None) -> PortainerMCPConfig:
    """Load configuration from .env, an optional YAML file and the environment.

    Args:
        config_path: Optional path to YAML config file

    Returns:
        Loaded configuration
    """
    load_dotenv()

    config = PortainerMCPConfig()

    default_config_file = os.getenv("PORTAINER_MCP_CONFIG", "config/portainer.yml")
    project_config_path = Path(config_path or default_config_file)
    if project_config_path.exists():
        yaml_config = _load_yaml_config(project_config_path)
        _apply_portainer_config(config, yaml_config)
        _apply_server_config(config, yaml_config)

    config.config_file = str(project_config_path)

    # Environment variables take priority over the file
    _apply_env_overrides(config)

    return config


def validate_connection(config: PortainerMCPConfig) -> None:
    """Ensure the Portainer connection is usable.

    Raises:
        ConfigurationError: If the server URL or API token is missing
    """
    missing = []
    if not config.portainer.server_url.strip():
        missing.append("server_url (PORTAINER_URL)")
    if not config.portainer.token.strip():
        missing.append("token (PORTAINER_TOKEN)")
    if missing:
        raise ConfigurationError(f"Missing Portainer configuration: {', '.join(missing)}")


def _apply_portainer_config(config: PortainerMCPConfig, yaml_config: dict[str, Any]) -> None:
    """Apply Portainer connection settings from YAML data."""
    section = yaml_config.get("portainer")
    if not section:
        return
    merged = config.portainer.model_dump()
    merged.update({k: v for k, v in section.items() if k in PortainerConnection.model_fields})
    config.portainer = PortainerConnection(**merged)


def _apply_server_config(config: PortainerMCPConfig, yaml_config: dict[str, Any]) -> None:
    """Apply server configuration from YAML data."""
    if "server" in yaml_config and yaml_config["server"]:
        for key, value in yaml_config["server"].items():
            if hasattr(config.server, key):
                setattr(config.server, key, value)


def _apply_env_overrides(config: PortainerMCPConfig) -> None:
    """Apply environment variable overrides."""
    connection_overrides: dict[str, Any] = {}
    if url := os.getenv("PORTAINER_URL"):
        connection_overrides["server_url"] = url
    if token := os.getenv("PORTAINER_TOKEN"):
        connection_overrides["token"] = token
    if (skip_tls := os.getenv("PORTAINER_SKIP_TLS_VERIFY")) is not None:
        connection_overrides["skip_tls_verify"] = skip_tls.strip().lower() in _TRUE_VALUES
    if timeout := os.getenv("PORTAINER_TIMEOUT"):
        try:
            connection_overrides["timeout"] = float(timeout)
        except ValueError:
            logger.warning("Invalid PORTAINER_TIMEOUT; using configured value", value=timeout)
    if connection_overrides:
        config.portainer = config.portainer.model_copy(update=connection_overrides)

    if (read_only := os.getenv("PORTAINER_READ_ONLY")) is not None:
        config.server.read_only = read_only.strip().lower() in _TRUE_VALUES
    if os.getenv("FASTMCP_HOST"):
        config.server.host = os.getenv("FASTMCP_HOST", config.server.host)
    if port_env := os.getenv("FASTMCP_PORT"):
        config.server.port = int(port_env)
    if transport := os.getenv("FASTMCP_TRANSPORT"):
        if transport in ("stdio", "http"):
            config.server.transport = transport
        else:
            logger.warning("Invalid FASTMCP_TRANSPORT; keeping default", value=transport)
    if os.getenv("LOG_LEVEL"):
        config.server.log_level = os.getenv("LOG_LEVEL", config.server.log_level)


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML configuration file."""
    try:
        content = config_path.read_text(encoding="utf-8")
        content = _expand_yaml_config(content)

        loaded = yaml.safe_load(content)
        if not isinstance(loaded, dict):
            return {}
        return loaded
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def _expand_yaml_config(content: str) -> str:
    """Expand ${VAR} references, restricted to an allowlist."""
    allowed_env_vars = {
        "HOME",
        "USER",
        "PORTAINER_URL",
        "PORTAINER_TOKEN",
        "PORTAINER_TIMEOUT",
        "FASTMCP_HOST",
        "FASTMCP_PORT",
        "LOG_LEVEL",
    }

    def replace_var(match: re.Match) -> str:
        var_name = match.group(1)
        if var_name in allowed_env_vars:
            return os.getenv(var_name, match.group(0))
        logger.warning(
            "Environment variable not in allowlist, skipping expansion",
            variable=var_name,
        )
        return match.group(0)

    return re.sub(r"\$\{([^}]+)\}", replace_var, content)
