"""Static definition table for the stack tools.

Registration filters this table by mode; nothing else decides which tools an
agent can see.
"""

from dataclasses import dataclass
from typing import Any

TOOL_LIST_STACKS = "listStacks"
TOOL_GET_STACK_FILE = "getStackFile"
TOOL_CREATE_STACK = "createStack"
TOOL_UPDATE_STACK = "updateStack"
TOOL_START_STACK = "startStack"
TOOL_STOP_STACK = "stopStack"
TOOL_DELETE_STACK = "deleteStack"


@dataclass(frozen=True)
class ToolDefinition:
    """Name, description and behaviour hints for one MCP tool."""

    name: str
    title: str
    description: str
    mutating: bool
    destructive: bool = False
    idempotent: bool = False

    @property
    def annotations(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "readOnlyHint": not self.mutating,
            "destructiveHint": self.destructive,
            "idempotentHint": self.idempotent,
            "openWorldHint": True,  # talks to a remote Portainer server
        }


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name=TOOL_LIST_STACKS,
        title="List Stacks",
        description=(
            "List all regular stacks on the Portainer server. Returns a JSON array of "
            "stacks with id, name, status, created_at and endpoint_id."
        ),
        mutating=False,
        idempotent=True,
    ),
    ToolDefinition(
        name=TOOL_GET_STACK_FILE,
        title="Get Stack File",
        description="Get the Docker Compose file content of a stack.",
        mutating=False,
        idempotent=True,
    ),
    ToolDefinition(
        name=TOOL_CREATE_STACK,
        title="Create Stack",
        description=(
            "Create a new Docker Compose stack on an environment from the given file "
            "content. Returns the ID of the created stack."
        ),
        mutating=True,
    ),
    ToolDefinition(
        name=TOOL_UPDATE_STACK,
        title="Update Stack",
        description=(
            "Update an existing stack with new Docker Compose file content. Images are "
            "re-pulled unless pullImage is 'false'."
        ),
        mutating=True,
        idempotent=True,
    ),
    ToolDefinition(
        name=TOOL_START_STACK,
        title="Start Stack",
        description="Start a stopped stack on its environment.",
        mutating=True,
    ),
    ToolDefinition(
        name=TOOL_STOP_STACK,
        title="Stop Stack",
        description="Stop a running stack on its environment.",
        mutating=True,
    ),
    ToolDefinition(
        name=TOOL_DELETE_STACK,
        title="Delete Stack",
        description="Delete a stack and remove its containers from the environment.",
        mutating=True,
        destructive=True,
    ),
)


def available_tools(read_only: bool) -> list[ToolDefinition]:
    """Return the definitions to register; read-only mode drops mutating tools."""
    return [
        definition
        for definition in TOOL_DEFINITIONS
        if not (read_only and definition.mutating)
    ]
