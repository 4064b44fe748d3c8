"""Data models for Portainer MCP."""

from .enums import StackBackendStatus, StackStatus  # noqa: F401
from .params import (  # noqa: F401
    CreateStackParams,
    StackFileParams,
    StackTargetParams,
    UpdateStackParams,
)
from .stack import (  # noqa: F401
    RawEdgeStack,
    RawRegularStack,
    Stack,
    convert_edge_stack_to_stack,
    convert_regular_stack_to_stack,
)

__all__ = [
    # Enums
    "StackBackendStatus",
    "StackStatus",
    # Stack models
    "RawEdgeStack",
    "RawRegularStack",
    "Stack",
    "convert_edge_stack_to_stack",
    "convert_regular_stack_to_stack",
    # Parameter models
    "CreateStackParams",
    "StackFileParams",
    "StackTargetParams",
    "UpdateStackParams",
]
