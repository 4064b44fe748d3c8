"""Parameter models for stack tool validation."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class StackToolParams(BaseModel):
    """Base for stack tool parameters; accepts both wire and Python names."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class StackFileParams(StackToolParams):
    """Parameters for getStackFile."""

    id: StrictInt = Field(..., description="Stack identifier")


class StackTargetParams(StackToolParams):
    """Parameters for startStack, stopStack and deleteStack."""

    id: StrictInt = Field(..., description="Stack identifier")
    endpoint_id: StrictInt = Field(..., alias="endpointId", description="Environment identifier")


class CreateStackParams(StackToolParams):
    """Parameters for createStack."""

    name: str = Field(..., min_length=1, description="Stack name")
    file: str = Field(..., description="Docker Compose file content")
    endpoint_id: StrictInt = Field(..., alias="endpointId", description="Environment identifier")


class UpdateStackParams(StackToolParams):
    """Parameters for updateStack.

    ``pullImage`` is optional and defaults to re-pulling images: only an
    explicit ``"false"`` (or boolean false) disables it.
    """

    id: StrictInt = Field(..., description="Stack identifier")
    file: str = Field(..., description="Docker Compose file content")
    endpoint_id: StrictInt = Field(..., alias="endpointId", description="Environment identifier")
    pull_image: bool = Field(default=True, alias="pullImage", description="Re-pull images")

    @field_validator("pull_image", mode="before")
    @classmethod
    def resolve_pull_image(cls, v: Any) -> bool:
        """Resolve the string flag sent by agents into a boolean."""
        if v is None:
            return True
        if isinstance(v, bool):
            return v
        return v != "false"
