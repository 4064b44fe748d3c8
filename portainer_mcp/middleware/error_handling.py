"""Error handling middleware for Portainer MCP server."""

from collections import defaultdict
from typing import Any

from fastmcp.server.middleware import Middleware, MiddlewareContext

from ..core.exceptions import BackendError
from ..core.logging_config import get_middleware_logger


class ErrorHandlingMiddleware(Middleware):
    """Tracks and logs errors raised while handling MCP messages.

    Errors are always re-raised so FastMCP can turn them into error results.
    """

    def __init__(self, include_traceback: bool = False, track_error_stats: bool = True):
        self.logger = get_middleware_logger()
        self.include_traceback = include_traceback
        self.track_error_stats = track_error_stats

        # occurrences per "ErrorType:method", reported with each logged error
        self.error_stats: dict[str, int] = defaultdict(int)

    async def on_message(self, context: MiddlewareContext, call_next):
        try:
            return await call_next(context)
        except Exception as e:
            self._handle_error(e, context)
            raise

    def _handle_error(self, error: Exception, context: MiddlewareContext) -> None:
        error_type = type(error).__name__
        method = context.method

        if self.track_error_stats:
            self.error_stats[f"{error_type}:{method}"] += 1

        error_data: dict[str, Any] = {
            "error_type": error_type,
            "error_message": str(error),
            "method": method,
            "source": context.source,
        }
        if self.track_error_stats:
            error_data["error_occurrence_count"] = self.error_stats[f"{error_type}:{method}"]

        if self._is_critical_error(error):
            self.logger.critical(
                "Critical error in MCP request", **error_data, exc_info=self.include_traceback
            )
        elif self._is_warning_level_error(error):
            self.logger.warning("Warning-level error in MCP request", **error_data)
        else:
            self.logger.error(
                "Error in MCP request", **error_data, exc_info=self.include_traceback
            )

    def _is_critical_error(self, error: Exception) -> bool:
        return isinstance(error, (SystemError, MemoryError, RecursionError))

    def _is_warning_level_error(self, error: Exception) -> bool:
        """Backend and network trouble is expected in normal operation."""
        current: BaseException | None = error
        while current is not None:
            if isinstance(current, (BackendError, TimeoutError, ConnectionError)):
                return True
            current = current.__cause__
        return False
