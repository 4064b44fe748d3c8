"""Stack data models and conversion from Portainer's two stack representations."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from .enums import StackBackendStatus, StackStatus


class MCPModel(BaseModel):
    """Base model with common MCP settings."""

    def model_dump(self, **kwargs) -> dict[str, Any]:
        """Convert to dict with exclude_none and aliases by default."""
        kwargs.setdefault("exclude_none", True)
        kwargs.setdefault("by_alias", True)
        return super().model_dump(**kwargs)


class RawRegularStack(BaseModel):
    """Regular (single endpoint) stack record as returned by ``GET /api/stacks``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(alias="Id")
    name: str = Field(alias="Name")
    endpoint_id: int = Field(default=0, alias="EndpointId")
    status: int = Field(default=0, alias="Status")
    creation_date: int = Field(default=0, alias="CreationDate")


class RawEdgeStack(BaseModel):
    """Edge stack record as returned by ``GET /api/edge_stacks``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(alias="Id")
    name: str = Field(alias="Name")
    creation_date: int = Field(default=0, alias="CreationDate")
    edge_groups: list[int] = Field(default_factory=list, alias="EdgeGroups")


class Stack(MCPModel):
    """Normalized stack.

    Exactly one of ``endpoint_id`` (regular stacks) or
    ``environment_group_ids`` (edge stacks) carries data; the other keeps its
    zero value and is left out of the serialized form.
    """

    id: int
    name: str
    status: str = ""
    created_at: str = ""
    endpoint_id: int = 0
    environment_group_ids: list[int] = Field(
        default_factory=list, serialization_alias="group_ids"
    )

    @model_serializer(mode="wrap")
    def _omit_unused_target(self, handler):
        data = handler(self)
        if not self.endpoint_id:
            data.pop("endpoint_id", None)
        if not self.environment_group_ids:
            data.pop("group_ids", None)
            data.pop("environment_group_ids", None)
        return data


def format_creation_date(epoch_seconds: int) -> str:
    """Render backend epoch seconds as an RFC 3339 UTC timestamp."""
    return datetime.fromtimestamp(epoch_seconds, tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def convert_regular_stack_to_stack(raw: RawRegularStack) -> Stack:
    status = StackStatus.INACTIVE
    if raw.status == StackBackendStatus.ACTIVE:
        status = StackStatus.ACTIVE

    return Stack(
        id=raw.id,
        name=raw.name,
        status=status.value,
        created_at=format_creation_date(raw.creation_date),
        endpoint_id=raw.endpoint_id,
    )


def convert_edge_stack_to_stack(raw: RawEdgeStack) -> Stack:
    # Edge stacks have no single endpoint or status; both stay at zero values.
    return Stack(
        id=raw.id,
        name=raw.name,
        created_at=format_creation_date(raw.creation_date),
        environment_group_ids=list(raw.edge_groups),
    )
