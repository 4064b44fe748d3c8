"""Stack MCP tool handlers.

Each handler parses its arguments, calls the stack service once and renders
the outcome. Failures are raised as ``ToolError``, which FastMCP returns to
the caller as an error-flagged result instead of a transport failure.
"""

import json
from collections.abc import Callable
from typing import Annotated, Any, TypeVar

import structlog
from fastmcp.exceptions import ToolError
from fastmcp.tools.tool import ToolResult
from mcp.types import TextContent
from pydantic import BaseModel, Field, ValidationError

from ..models.params import (
    CreateStackParams,
    StackFileParams,
    StackTargetParams,
    UpdateStackParams,
)
from ..services.stack_service import StackService
from .definitions import (
    TOOL_CREATE_STACK,
    TOOL_DELETE_STACK,
    TOOL_GET_STACK_FILE,
    TOOL_LIST_STACKS,
    TOOL_START_STACK,
    TOOL_STOP_STACK,
    TOOL_UPDATE_STACK,
)

logger = structlog.get_logger()

P = TypeVar("P", bound=BaseModel)

StackId = Annotated[int, Field(description="The ID of the stack")]
EndpointId = Annotated[int, Field(description="The ID of the environment the stack is deployed to")]
ComposeFile = Annotated[str, Field(description="The Docker Compose file content of the stack")]


def _text_result(text: str) -> ToolResult:
    return ToolResult(content=[TextContent(type="text", text=text)])


def _tool_error(prefix: str, error: Exception) -> ToolError:
    return ToolError(f"{prefix}: {error}")


def _parse(model: type[P], **arguments: Any) -> P:
    """Validate tool arguments, naming the first offending parameter on failure."""
    try:
        return model(**arguments)
    except ValidationError as e:
        first = e.errors()[0]
        field = first["loc"][0] if first["loc"] else "request"
        raise ToolError(f"invalid {field} parameter: {first['msg']}") from e


class StackToolHandlers:
    """Handlers for the stack tools, bound to one StackService."""

    def __init__(self, stack_service: StackService):
        self.stack_service = stack_service

    def handler_for(self, tool_name: str) -> Callable[..., Any]:
        """Return the handler registered under a tool name."""
        handlers: dict[str, Callable[..., Any]] = {
            TOOL_LIST_STACKS: self.list_stacks,
            TOOL_GET_STACK_FILE: self.get_stack_file,
            TOOL_CREATE_STACK: self.create_stack,
            TOOL_UPDATE_STACK: self.update_stack,
            TOOL_START_STACK: self.start_stack,
            TOOL_STOP_STACK: self.stop_stack,
            TOOL_DELETE_STACK: self.delete_stack,
        }
        return handlers[tool_name]

    async def list_stacks(self) -> ToolResult:
        try:
            stacks = await self.stack_service.get_stacks()
        except Exception as e:
            logger.error("Failed to list stacks", error=str(e))
            raise _tool_error("failed to get stacks", e) from e

        data = json.dumps([stack.model_dump(mode="json") for stack in stacks])
        return _text_result(data)

    async def get_stack_file(self, id: StackId) -> ToolResult:
        params = _parse(StackFileParams, id=id)

        try:
            stack_file = await self.stack_service.get_stack_file(params.id)
        except Exception as e:
            logger.error("Failed to get stack file", stack_id=params.id, error=str(e))
            raise _tool_error("failed to get stack file", e) from e

        return _text_result(stack_file)

    async def create_stack(
        self,
        name: Annotated[str, Field(description="The name of the stack")],
        file: ComposeFile,
        endpointId: EndpointId,  # noqa: N803
    ) -> ToolResult:
        params = _parse(CreateStackParams, name=name, file=file, endpointId=endpointId)

        try:
            stack_id = await self.stack_service.create_stack(
                params.name, params.file, params.endpoint_id
            )
        except Exception as e:
            logger.error(
                "Failed to create stack",
                name=params.name,
                endpoint_id=params.endpoint_id,
                error=str(e),
            )
            raise _tool_error("error creating stack", e) from e

        return _text_result(f"Stack created successfully with ID: {stack_id}")

    async def update_stack(
        self,
        id: StackId,
        file: ComposeFile,
        endpointId: EndpointId,  # noqa: N803
        pullImage: Annotated[  # noqa: N803
            str | bool | None,
            Field(
                default=None,
                description="Whether to re-pull images before updating ('true' or 'false', default 'true')",
            ),
        ] = None,
    ) -> ToolResult:
        params = _parse(
            UpdateStackParams, id=id, file=file, endpointId=endpointId, pullImage=pullImage
        )

        try:
            await self.stack_service.update_stack(
                params.id, params.file, params.endpoint_id, params.pull_image
            )
        except Exception as e:
            logger.error(
                "Failed to update stack",
                stack_id=params.id,
                endpoint_id=params.endpoint_id,
                pull_image=params.pull_image,
                error=str(e),
            )
            raise _tool_error("failed to update stack", e) from e

        return _text_result("Stack updated successfully")

    async def start_stack(self, id: StackId, endpointId: EndpointId) -> ToolResult:  # noqa: N803
        params = _parse(StackTargetParams, id=id, endpointId=endpointId)

        try:
            await self.stack_service.start_stack(params.id, params.endpoint_id)
        except Exception as e:
            logger.error("Failed to start stack", stack_id=params.id, error=str(e))
            raise _tool_error("failed to start stack", e) from e

        return _text_result("Stack started successfully")

    async def stop_stack(self, id: StackId, endpointId: EndpointId) -> ToolResult:  # noqa: N803
        params = _parse(StackTargetParams, id=id, endpointId=endpointId)

        try:
            await self.stack_service.stop_stack(params.id, params.endpoint_id)
        except Exception as e:
            logger.error("Failed to stop stack", stack_id=params.id, error=str(e))
            raise _tool_error("failed to stop stack", e) from e

        return _text_result("Stack stopped successfully")

    async def delete_stack(self, id: StackId, endpointId: EndpointId) -> ToolResult:  # noqa: N803
        params = _parse(StackTargetParams, id=id, endpointId=endpointId)

        try:
            await self.stack_service.delete_stack(params.id, params.endpoint_id)
        except Exception as e:
            logger.error("Failed to delete stack", stack_id=params.id, error=str(e))
            raise _tool_error("failed to delete stack", e) from e

        return _text_result("Stack deleted successfully")
