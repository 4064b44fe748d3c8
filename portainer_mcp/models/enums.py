"""Enum definitions for Portainer stack models."""

from enum import Enum, IntEnum


class StackBackendStatus(IntEnum):
    """Backend numeric status of a regular stack; any other value is inactive."""

    ACTIVE = 1


class StackStatus(str, Enum):
    """Normalized status label exposed to tool callers."""

    ACTIVE = "active"
    INACTIVE = "inactive"
