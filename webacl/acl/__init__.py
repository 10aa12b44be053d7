"""Permission and agent sets, rules and the rule document."""
from __future__ import annotations

from .agents import AgentSet
from .document import AclDocument
from .permissions import APPEND, CONTROL, READ, WRITE, Permission, PermissionSet
from .rule import AclRule

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
]
