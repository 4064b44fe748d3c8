"""MCP tool definitions and handlers."""

from .definitions import TOOL_DEFINITIONS, ToolDefinition, available_tools  # noqa: F401
from .stacks import StackToolHandlers  # noqa: F401

__all__ = [
    "TOOL_DEFINITIONS",
    "StackToolHandlers",
    "ToolDefinition",
    "available_tools",
]
