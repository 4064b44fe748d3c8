"""
Portainer MCP Services

Service layer between the MCP tool handlers and the Portainer gateway.
"""

from .stack_service import StackService  # noqa: F401

__all__ = [
    "StackService",
]
