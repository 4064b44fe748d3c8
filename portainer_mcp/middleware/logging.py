"""Logging middleware for Portainer MCP server using FastMCP Middleware base class."""

import time
from typing import Any

from fastmcp.server.middleware import Middleware, MiddlewareContext

from ..core.logging_config import get_middleware_logger

SENSITIVE_KEYWORDS = (
    "password",
    "token",
    "api_key",
    "apikey",
    "x-api-key",
    "secret",
    "credential",
    "authorization",
)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name looks like it holds a credential."""
    field_lower = field_name.lower()
    return any(sensitive in field_lower for sensitive in SENSITIVE_KEYWORDS)


class LoggingMiddleware(Middleware):
    """Request/response logging for every MCP message.

    Tool arguments are logged with credentials redacted and long values
    (compose files, mostly) truncated.
    """

    def __init__(self, include_payloads: bool = True, max_payload_length: int = 1000):
        self.logger = get_middleware_logger()
        self.include_payloads = include_payloads
        self.max_payload_length = max_payload_length

    async def on_message(self, context: MiddlewareContext, call_next):
        start_time = time.perf_counter()

        log_data: dict[str, Any] = {
            "method": context.method,
            "source": context.source,
            "message_type": context.type,
        }
        if self.include_payloads and hasattr(context.message, "__dict__"):
            log_data["params"] = self._sanitize_message(context.message)

        self.logger.info("MCP request started", **log_data)

        try:
            result = await call_next(context)
        except Exception as e:
            self.logger.error(
                "MCP request failed",
                method=context.method,
                success=False,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.logger.info(
            "MCP request completed",
            method=context.method,
            success=True,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return result

    def _sanitize_message(self, message: Any) -> dict[str, Any]:
        """Redact credentials and truncate long values for safe logging."""
        return {
            key: self._sanitize_value(key, value)
            for key, value in vars(message).items()
            if not key.startswith("_")
        }

    def _sanitize_value(self, key: str, value: Any) -> Any:
        if is_sensitive_field(key):
            return "[REDACTED]"
        if isinstance(value, dict):
            return {k: self._sanitize_value(k, v) for k, v in value.items()}
        if isinstance(value, str) and len(value) > self.max_payload_length:
            return value[: self.max_payload_length] + "... [TRUNCATED]"
        if isinstance(value, list) and len(str(value)) > self.max_payload_length:
            return str(value)[: self.max_payload_length] + "... [TRUNCATED]"
        return value
