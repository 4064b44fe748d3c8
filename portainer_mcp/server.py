"""
Portainer MCP Server

A FastMCP server exposing Portainer stack management as MCP tools.
"""

import argparse
import os
import sys

from fastmcp import FastMCP

from .core.config_loader import PortainerMCPConfig, load_config, validate_connection
from .core.exceptions import ConfigurationError
from .core.logging_config import get_server_logger, setup_logging
from .core.portainer_client import PortainerClient
from .core.stack_gateway import StackGateway
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware
from .services import StackService
from .tools import StackToolHandlers, ToolDefinition, available_tools


class PortainerMCPServer:
    """FastMCP server for Portainer stack management."""

    def _parse_env_int(self, var_name: str, default: int) -> int:
        """Safely parse environment variable as int with default fallback."""
        value = os.getenv(var_name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            self.logger.warning(f"Invalid {var_name}; using default", value=value, default=default)
            return default

    def _parse_env_bool(self, var_name: str, default: bool) -> bool:
        """Safely parse environment variable as bool with default fallback."""
        value = os.getenv(var_name)
        if value is None:
            return default
        return value.strip().lower() in ("1", "true", "yes", "on")

    def __init__(self, config: PortainerMCPConfig, stack_service: StackService | None = None):
        self.config = config
        self.logger = get_server_logger()

        if stack_service is None:
            client = PortainerClient(config.portainer)
            stack_service = StackService(StackGateway(client))
        self.stack_service = stack_service
        self.stack_handlers = StackToolHandlers(stack_service)

        self.read_only = config.server.read_only
        self.registered_tools: list[str] = []

        # FastMCP app is created lazily so construction never starts a transport
        self.app: FastMCP | None = None

        self.logger.info(
            "Portainer MCP Server initialized",
            portainer_url=config.portainer.base_url if config.portainer.server_url else None,
            read_only=self.read_only,
            skip_tls_verify=config.portainer.skip_tls_verify,
        )

    def _initialize_app(self) -> None:
        """Initialize FastMCP app, middleware, and register tools."""
        self.app = FastMCP("Portainer MCP")
        self._configure_middleware()
        self._register_tools()

    def _configure_middleware(self) -> None:
        """Configure FastMCP middleware stack (first added = first executed)."""
        if self.app is None:
            return
        self.app.add_middleware(
            ErrorHandlingMiddleware(
                include_traceback=self.config.server.log_level.upper() == "DEBUG",
                track_error_stats=True,
            )
        )
        self.app.add_middleware(
            LoggingMiddleware(
                include_payloads=self._parse_env_bool("LOG_INCLUDE_PAYLOADS", True),
                max_payload_length=self._parse_env_int("LOG_MAX_PAYLOAD_LENGTH", 1000),
            )
        )

    def _register_tools(self) -> None:
        """Register the tool definitions allowed in the current mode."""
        for definition in available_tools(self.read_only):
            self._add_tool(definition)

        self.logger.info(
            "MCP tools registered",
            tools=self.registered_tools,
            read_only=self.read_only,
        )

    def _add_tool(self, definition: ToolDefinition) -> None:
        if self.app is None:
            return
        self.app.tool(
            self.stack_handlers.handler_for(definition.name),
            name=definition.name,
            description=definition.description,
            annotations=definition.annotations,
        )
        self.registered_tools.append(definition.name)

    def run(self) -> None:
        """Run the FastMCP server on the configured transport."""
        self._initialize_app()
        if self.app is None:
            raise RuntimeError("FastMCP app not initialized")

        server_config = self.config.server
        self.logger.info(
            "Starting Portainer MCP Server",
            transport=server_config.transport,
            host=server_config.host,
            port=server_config.port,
        )

        if server_config.transport == "http":
            self.app.run(transport="http", host=server_config.host, port=server_config.port)
        else:
            self.app.run(transport="stdio")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Portainer MCP server")
    parser.add_argument("--server", help="Portainer server URL (overrides PORTAINER_URL)")
    parser.add_argument("--token", help="Portainer API token (overrides PORTAINER_TOKEN)")
    parser.add_argument("--config", default=None, help="Configuration file path")
    parser.add_argument(
        "--read-only",
        action="store_true",
        default=None,
        help="Only expose tools that do not modify the Portainer server",
    )
    parser.add_argument(
        "--skip-tls-verify",
        action="store_true",
        default=None,
        help="Skip TLS certificate verification (not recommended for production)",
    )
    parser.add_argument("--transport", choices=["stdio", "http"], help="MCP transport")
    parser.add_argument("--host", help="Server host for the http transport")
    parser.add_argument("--port", type=int, help="Server port for the http transport")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    parser.add_argument(
        "--validate-config", action="store_true", help="Validate configuration and exit"
    )
    return parser.parse_args(argv)


def apply_cli_overrides(config: PortainerMCPConfig, args: argparse.Namespace) -> None:
    """Apply command line flags on top of file and environment configuration."""
    connection_overrides = {}
    if args.server:
        connection_overrides["server_url"] = args.server
    if args.token:
        connection_overrides["token"] = args.token
    if args.skip_tls_verify is not None:
        connection_overrides["skip_tls_verify"] = args.skip_tls_verify
    if connection_overrides:
        config.portainer = config.portainer.model_copy(update=connection_overrides)

    if args.read_only is not None:
        config.server.read_only = args.read_only
    if args.transport:
        config.server.transport = args.transport
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.log_level:
        config.server.log_level = args.log_level


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)

    config = load_config(args.config)
    apply_cli_overrides(config, args)

    setup_logging(log_dir=os.getenv("LOG_DIR"), log_level=config.server.log_level)
    logger = get_server_logger()

    try:
        validate_connection(config)
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        sys.exit(2)

    if args.validate_config:
        logger.info("Configuration is valid", config_file=config.config_file)
        return

    server = PortainerMCPServer(config)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error("Server error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
