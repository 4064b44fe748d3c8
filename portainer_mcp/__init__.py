"""Portainer MCP server: Portainer stack management exposed as MCP tools."""

__version__ = "0.1.0"
