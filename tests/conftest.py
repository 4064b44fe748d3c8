"""Shared pytest fixtures for Portainer MCP tests."""

import json
from collections.abc import AsyncGenerator, Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastmcp import Client

from portainer_mcp.core.config_loader import PortainerConnection, PortainerMCPConfig, ServerConfig
from portainer_mcp.core.portainer_client import PortainerClient
from portainer_mcp.core.stack_gateway import StackGateway
from portainer_mcp.middleware import ErrorHandlingMiddleware, LoggingMiddleware
from portainer_mcp.server import PortainerMCPServer
from portainer_mcp.services.stack_service import StackService

TEST_SERVER_URL = "portainer.example.com:9443"
TEST_TOKEN = "ptr_test_token"

COMPOSE_FILE = "version: '3'\nservices:\n  web:\n    image: nginx"


@pytest.fixture
def connection() -> PortainerConnection:
    """Connection settings pointing at a fake Portainer server."""
    return PortainerConnection(server_url=TEST_SERVER_URL, token=TEST_TOKEN)


@pytest.fixture
def config(connection: PortainerConnection) -> PortainerMCPConfig:
    """Configuration with all tools enabled."""
    return PortainerMCPConfig(portainer=connection, server=ServerConfig())


@pytest.fixture
def read_only_config(connection: PortainerConnection) -> PortainerMCPConfig:
    """Configuration in read-only mode."""
    return PortainerMCPConfig(portainer=connection, server=ServerConfig(read_only=True))


@pytest.fixture
def mock_stack_service() -> AsyncMock:
    """StackService double; every operation is an AsyncMock."""
    return AsyncMock(spec=StackService)


@pytest.fixture
def server(config: PortainerMCPConfig, mock_stack_service: AsyncMock) -> PortainerMCPServer:
    """Server wired to the mocked stack service."""
    server = PortainerMCPServer(config, stack_service=mock_stack_service)
    server._initialize_app()
    return server


@pytest.fixture
async def client(server: PortainerMCPServer) -> AsyncGenerator[Client, None]:
    """FastMCP client connected to the server in-memory."""
    async with Client(server.app) as client:
        yield client


class RecordingBackend:
    """Fake Portainer API for httpx.MockTransport that records every request."""

    def __init__(self, routes: dict[tuple[str, str], httpx.Response | Callable] | None = None):
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found", "details": request.url.path})
        if callable(route):
            return route(request)
        return route

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @staticmethod
    def body(request: httpx.Request) -> dict:
        return json.loads(request.content)


@pytest.fixture
def make_client(connection: PortainerConnection) -> Callable[[RecordingBackend], PortainerClient]:
    """Build a PortainerClient whose transport is a RecordingBackend."""

    def _make(backend: RecordingBackend) -> PortainerClient:
        return PortainerClient(connection, transport=httpx.MockTransport(backend))

    return _make


@pytest.fixture
def make_gateway(make_client) -> Callable[[RecordingBackend], StackGateway]:
    """Build a StackGateway on top of a RecordingBackend."""

    def _make(backend: RecordingBackend) -> StackGateway:
        return StackGateway(make_client(backend))

    return _make


@pytest.fixture
def logging_middleware() -> LoggingMiddleware:
    return LoggingMiddleware(include_payloads=True, max_payload_length=1000)


@pytest.fixture
def error_handling_middleware() -> ErrorHandlingMiddleware:
    return ErrorHandlingMiddleware(include_traceback=False, track_error_stats=True)


@pytest.fixture
def mock_context():
    """Create mock MiddlewareContext for unit tests."""
    context = MagicMock()
    context.method = "tools/call"
    context.source = "client"
    context.type = "request"
    context.timestamp = 1640995200.0
    context.message = SimpleNamespace(name="getStackFile", arguments={"id": 1})
    return context


class MockCall:
    """Mock call_next function for middleware testing."""

    def __init__(self, return_value=None, exception=None):
        self.return_value = return_value or {"status": "success"}
        self.exception = exception
        self.call_count = 0

    async def __call__(self, context):
        self.call_count += 1
        if self.exception:
            raise self.exception
        return self.return_value
