"""Web Access Control rule algebra."""
from __future__ import annotations

from webacl.acl import (
    APPEND,
    CONTROL,
    READ,
    WRITE,
    AclDocument,
    AclRule,
    AgentSet,
    Permission,
    PermissionSet,
)
from webacl.utils.errors import (
    AclError,
    EmptyReductionError,
    InvalidInputError,
    MissingAccessToError,
)

__version__ = "0.1.0"

__all__ = [
    "AclDocument",
    "AclRule",
    "AgentSet",
    "Permission",
    "PermissionSet",
    "READ",
    "WRITE",
    "APPEND",
    "CONTROL",
    "AclError",
    "EmptyReductionError",
    "InvalidInputError",
    "MissingAccessToError",
]
