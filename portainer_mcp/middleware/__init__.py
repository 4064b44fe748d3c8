"""FastMCP middleware for Portainer MCP server.

- LoggingMiddleware: Structured request/response logging with redaction
- ErrorHandlingMiddleware: Error tracking and categorization
"""

from .error_handling import ErrorHandlingMiddleware
from .logging import LoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "LoggingMiddleware",
]
