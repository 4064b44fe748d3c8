"""
Stack Management Service

Facade over the stack gateway. Hides the regular/edge split from the tool
layer and annotates every backend failure with the operation that failed.
"""

from collections.abc import Awaitable
from typing import TypeVar

from ..core.exceptions import PortainerMCPError, StackServiceError
from ..core.stack_gateway import StackGateway
from ..models.stack import Stack, convert_edge_stack_to_stack, convert_regular_stack_to_stack

T = TypeVar("T")


class StackService:
    """Domain service for stack lifecycle operations."""

    def __init__(self, gateway: StackGateway):
        self.gateway = gateway

    async def _wrap(self, context: str, operation: Awaitable[T]) -> T:
        """Await a gateway call, re-raising failures once with a fixed context."""
        try:
            return await operation
        except PortainerMCPError as e:
            raise StackServiceError(f"{context}: {e}") from e

    async def get_stacks(self) -> list[Stack]:
        """List regular stacks as normalized Stack entities."""
        raw_stacks = await self._wrap("failed to list stacks", self.gateway.list_regular_stacks())
        return [convert_regular_stack_to_stack(raw) for raw in raw_stacks]

    async def get_edge_stacks(self) -> list[Stack]:
        """List edge stacks as normalized Stack entities."""
        raw_stacks = await self._wrap(
            "failed to list edge stacks", self.gateway.list_edge_stacks()
        )
        return [convert_edge_stack_to_stack(raw) for raw in raw_stacks]

    async def get_stack_file(self, stack_id: int) -> str:
        return await self._wrap(
            "failed to get stack file", self.gateway.get_regular_stack_file(stack_id)
        )

    async def create_stack(self, name: str, file: str, endpoint_id: int) -> int:
        return await self._wrap(
            "failed to create stack",
            self.gateway.create_regular_stack(name, file, endpoint_id),
        )

    async def update_stack(
        self, stack_id: int, file: str, endpoint_id: int, pull_image: bool
    ) -> None:
        """Update a stack's compose file.

        ``pull_image`` has no default here; the tool layer resolves it.
        """
        await self._wrap(
            "failed to update stack",
            self.gateway.update_regular_stack(stack_id, endpoint_id, file, pull_image),
        )

    async def start_stack(self, stack_id: int, endpoint_id: int) -> None:
        await self._wrap(
            "failed to start stack", self.gateway.start_regular_stack(stack_id, endpoint_id)
        )

    async def stop_stack(self, stack_id: int, endpoint_id: int) -> None:
        await self._wrap(
            "failed to stop stack", self.gateway.stop_regular_stack(stack_id, endpoint_id)
        )

    async def delete_stack(self, stack_id: int, endpoint_id: int) -> None:
        await self._wrap(
            "failed to delete stack", self.gateway.delete_regular_stack(stack_id, endpoint_id)
        )
