"""Core exceptions for Portainer MCP operations."""


class PortainerMCPError(Exception):
    """Base exception for Portainer MCP operations."""


class ConfigurationError(PortainerMCPError):
    """Configuration validation or loading failed."""


class NotInitializedError(PortainerMCPError):
    """A backend service handle was never configured."""


class BackendError(PortainerMCPError):
    """The Portainer API call failed or returned an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class StackServiceError(PortainerMCPError):
    """A stack operation failed; the message names the operation."""
