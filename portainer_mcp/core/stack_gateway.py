"""Direct access to Portainer's regular and edge stack endpoints."""

from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from ..models.stack import RawEdgeStack, RawRegularStack
from .exceptions import BackendError, NotInitializedError
from .portainer_client import PortainerClient

logger = structlog.get_logger()

R = TypeVar("R", bound=BaseModel)


def _parse_records(model: type[R], payload: Any) -> list[R]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise BackendError(f"unexpected stack list response: {type(payload).__name__}")
    try:
        return [model.model_validate(item) for item in payload]
    except ValidationError as e:
        raise BackendError(f"invalid stack record: {e}") from e


def _require_object(payload: Any, kind: str) -> dict[str, Any]:
    if not payload:
        raise BackendError(f"empty stack {kind} response")
    if not isinstance(payload, dict):
        raise BackendError(f"unexpected stack {kind} response: {type(payload).__name__}")
    return payload


class StackGateway:
    """Unopinionated transport for the stack sub-API.

    One round trip per call, no retries and no defaults: callers resolve
    every parameter before reaching this layer. Backend errors surface as
    raised by the client, already naming the method and path.
    """

    def __init__(self, client: PortainerClient | None):
        self.client = client

    def _require_client(self) -> PortainerClient:
        if self.client is None:
            raise NotInitializedError("stacks service not initialized")
        return self.client

    async def list_regular_stacks(self) -> list[RawRegularStack]:
        payload = await self._require_client().request("GET", "/stacks")
        return _parse_records(RawRegularStack, payload)

    async def list_edge_stacks(self) -> list[RawEdgeStack]:
        payload = await self._require_client().request("GET", "/edge_stacks")
        return _parse_records(RawEdgeStack, payload)

    async def get_regular_stack_file(self, stack_id: int) -> str:
        """Return the compose file content of a regular stack.

        An empty response is a backend protocol violation and raises
        BackendError rather than returning an empty string.
        """
        payload = await self._require_client().request("GET", f"/stacks/{stack_id}/file")
        return _require_object(payload, "file").get("StackFileContent", "")

    async def create_regular_stack(self, name: str, file: str, endpoint_id: int) -> int:
        """Create a standalone compose stack from file content; returns the new ID."""
        payload = await self._require_client().request(
            "POST",
            "/stacks/create/standalone/string",
            params={"endpointId": endpoint_id},
            json={"name": name, "stackFileContent": file},
        )
        created = _require_object(payload, "create")
        if "Id" not in created:
            raise BackendError("empty stack create response")

        stack_id = int(created["Id"])
        logger.info("Stack created", stack_id=stack_id, name=name, endpoint_id=endpoint_id)
        return stack_id

    async def update_regular_stack(
        self, stack_id: int, endpoint_id: int, file: str, pull_image: bool
    ) -> None:
        await self._require_client().request(
            "PUT",
            f"/stacks/{stack_id}",
            params={"endpointId": endpoint_id},
            json={"stackFileContent": file, "pullImage": pull_image, "prune": False},
        )

    async def start_regular_stack(self, stack_id: int, endpoint_id: int) -> None:
        await self._require_client().request(
            "POST", f"/stacks/{stack_id}/start", params={"endpointId": endpoint_id}
        )

    async def stop_regular_stack(self, stack_id: int, endpoint_id: int) -> None:
        await self._require_client().request(
            "POST", f"/stacks/{stack_id}/stop", params={"endpointId": endpoint_id}
        )

    async def delete_regular_stack(self, stack_id: int, endpoint_id: int) -> None:
        await self._require_client().request(
            "DELETE", f"/stacks/{stack_id}", params={"endpointId": endpoint_id}
        )
