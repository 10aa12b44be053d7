"""Access modes and permission sets.

The vocabulary is closed: Web Access Control defines exactly four modes.
"""
from __future__ import annotations

from collections import abc
from enum import Enum
from typing import Any, FrozenSet, Iterator, Set

from webacl.acl.base import SetAlgebra
from webacl.utils.errors import InvalidInputError

ACL_NS = "http://www.w3.org/ns/auth/acl#"


class Permission(Enum):
    READ = "Read"
    WRITE = "Write"
    APPEND = "Append"
    CONTROL = "Control"

    @property
    def iri(self) -> str:
        return ACL_NS + self.value

    @classmethod
    def parse(cls, value: Any) -> "Permission":
        """Resolve a member, member name, local mode name or full IRI."""

        if isinstance(value, Permission):
            return value
        if not isinstance(value, str):
            raise InvalidInputError(f"Not a permission: {value!r}")
        name = value[len(ACL_NS):] if value.startswith(ACL_NS) else value
        for member in cls:
            if name.lower() in (member.name.lower(), member.value.lower()):
                return member
        raise InvalidInputError(f"Unknown permission: {value!r}")


class PermissionSet(SetAlgebra):
    """A set of :class:`Permission` values.

    Algebra methods return new sets. ``add`` and ``delete`` are the only
    in-place operations.
    """

    ALL: FrozenSet[Permission] = frozenset(Permission)

    def __init__(self, *permissions: Any) -> None:
        self._permissions: Set[Permission] = {Permission.parse(p) for p in permissions}

    @classmethod
    def from_value(cls, value: Any = None) -> "PermissionSet":
        if value is None:
            return cls()
        if isinstance(value, PermissionSet):
            return cls(*value)
        if isinstance(value, (Permission, str)):
            return cls(value)
        if isinstance(value, abc.Iterable):
            return cls(*value)
        raise InvalidInputError(f"Cannot build permissions from {value!r}")

    @classmethod
    def all(cls) -> "PermissionSet":
        return cls(*cls.ALL)

    # -- builders -----------------------------------------------------------------
    def add(self, *permissions: Any) -> "PermissionSet":
        self._permissions.update(Permission.parse(p) for p in permissions)
        return self

    def delete(self, *permissions: Any) -> "PermissionSet":
        self._permissions.difference_update(Permission.parse(p) for p in permissions)
        return self

    # -- queries ------------------------------------------------------------------
    def has(self, permission: Any) -> bool:
        return Permission.parse(permission) in self._permissions

    def is_empty(self) -> bool:
        return not self._permissions

    def includes(self, other: Any) -> bool:
        """Return True when every permission of ``other`` is in this set."""

        return PermissionSet.from_value(other)._permissions <= self._permissions

    def equals(self, other: Any) -> bool:
        return self._permissions == PermissionSet.from_value(other)._permissions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PermissionSet):
            return NotImplemented
        return self._permissions == other._permissions

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[Permission]:
        order = list(Permission)
        return iter(sorted(self._permissions, key=order.index))

    def __len__(self) -> int:
        return len(self._permissions)

    def __contains__(self, permission: object) -> bool:
        try:
            return self.has(permission)
        except InvalidInputError:
            return False

    def __repr__(self) -> str:
        return f"PermissionSet({', '.join(p.name for p in self)})"

    # -- algebra ------------------------------------------------------------------
    @classmethod
    def common(cls, first: "PermissionSet", second: "PermissionSet") -> "PermissionSet":
        return cls(*(first._permissions & second._permissions))

    @classmethod
    def subtract(cls, first: "PermissionSet", second: "PermissionSet") -> "PermissionSet":
        return cls(*(first._permissions - second._permissions))

    @classmethod
    def merge(cls, first: "PermissionSet", second: "PermissionSet") -> "PermissionSet":
        return cls(*(first._permissions | second._permissions))


READ = Permission.READ
WRITE = Permission.WRITE
APPEND = Permission.APPEND
CONTROL = Permission.CONTROL

__all__ = [
    "ACL_NS",
    "Permission",
    "PermissionSet",
    "READ",
    "WRITE",
    "APPEND",
    "CONTROL",
]
