"""Agent sets.

An :class:`AgentSet` mixes two class members (``public`` for everyone and
``authenticated`` for any logged-in identity) with three families of named
members: WebIDs, groups and origins. Every member is independent; holding
``public`` says nothing about holding ``authenticated`` or any WebID.
"""
from __future__ import annotations

from collections import abc
from typing import Any, Iterator, Set, Tuple

from webacl.acl.base import SetAlgebra
from webacl.utils.errors import InvalidInputError

PUBLIC = "public"
AUTHENTICATED = "authenticated"


class AgentSet(SetAlgebra):
    """A set of agent descriptors.

    Bare strings given to the constructor or to :meth:`from_value` are WebIDs;
    groups, origins and the two classes are added through the builder methods.
    """

    def __init__(self, *web_ids: str) -> None:
        self.web_ids: Set[str] = set()
        self.groups: Set[str] = set()
        self.origins: Set[str] = set()
        self.public = False
        self.authenticated = False
        self.add_web_id(*web_ids)

    @classmethod
    def from_value(cls, value: Any = None) -> "AgentSet":
        if value is None:
            return cls()
        if isinstance(value, AgentSet):
            return value.copy()
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, abc.Iterable):
            return cls(*value)
        raise InvalidInputError(f"Cannot build agents from {value!r}")

    @classmethod
    def everyone(cls) -> "AgentSet":
        return cls().add_public()

    def copy(self) -> "AgentSet":
        clone = AgentSet()
        clone.web_ids = set(self.web_ids)
        clone.groups = set(self.groups)
        clone.origins = set(self.origins)
        clone.public = self.public
        clone.authenticated = self.authenticated
        return clone

    # -- builders -----------------------------------------------------------------
    def add_web_id(self, *web_ids: str) -> "AgentSet":
        self.web_ids.update(_checked(web_ids))
        return self

    def add_group(self, *groups: str) -> "AgentSet":
        self.groups.update(_checked(groups))
        return self

    def add_origin(self, *origins: str) -> "AgentSet":
        self.origins.update(_checked(origins))
        return self

    def add_public(self) -> "AgentSet":
        self.public = True
        return self

    def add_authenticated(self) -> "AgentSet":
        self.authenticated = True
        return self

    def delete_web_id(self, *web_ids: str) -> "AgentSet":
        self.web_ids.difference_update(web_ids)
        return self

    def delete_group(self, *groups: str) -> "AgentSet":
        self.groups.difference_update(groups)
        return self

    def delete_origin(self, *origins: str) -> "AgentSet":
        self.origins.difference_update(origins)
        return self

    def delete_public(self) -> "AgentSet":
        self.public = False
        return self

    def delete_authenticated(self) -> "AgentSet":
        self.authenticated = False
        return self

    # -- queries ------------------------------------------------------------------
    def has_web_id(self, web_id: str) -> bool:
        return web_id in self.web_ids

    def has_group(self, group: str) -> bool:
        return group in self.groups

    def has_origin(self, origin: str) -> bool:
        return origin in self.origins

    def has_public(self) -> bool:
        return self.public

    def has_authenticated(self) -> bool:
        return self.authenticated

    def is_empty(self) -> bool:
        return not (self.public or self.authenticated or self.web_ids or self.groups or self.origins)

    def members(self) -> Set[Tuple[str, str]]:
        """Flatten into ``(kind, id)`` pairs; the two classes use an empty id."""

        members = {("webId", web_id) for web_id in self.web_ids}
        members |= {("group", group) for group in self.groups}
        members |= {("origin", origin) for origin in self.origins}
        if self.public:
            members.add((PUBLIC, ""))
        if self.authenticated:
            members.add((AUTHENTICATED, ""))
        return members

    def includes(self, other: Any) -> bool:
        """Return True when every member of ``other`` is in this set."""

        return AgentSet.from_value(other).members() <= self.members()

    def equals(self, other: Any) -> bool:
        return self.members() == AgentSet.from_value(other).members()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AgentSet):
            return NotImplemented
        return self.members() == other.members()

    __hash__ = None  # type: ignore[assignment]

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(sorted(self.members()))

    def __len__(self) -> int:
        return len(self.members())

    def __repr__(self) -> str:
        parts = [f"{kind}:{ident}" if ident else kind for kind, ident in self]
        return f"AgentSet({', '.join(parts)})"

    # -- algebra ------------------------------------------------------------------
    @classmethod
    def common(cls, first: "AgentSet", second: "AgentSet") -> "AgentSet":
        result = cls()
        result.web_ids = first.web_ids & second.web_ids
        result.groups = first.groups & second.groups
        result.origins = first.origins & second.origins
        result.public = first.public and second.public
        result.authenticated = first.authenticated and second.authenticated
        return result

    @classmethod
    def subtract(cls, first: "AgentSet", second: "AgentSet") -> "AgentSet":
        result = cls()
        result.web_ids = first.web_ids - second.web_ids
        result.groups = first.groups - second.groups
        result.origins = first.origins - second.origins
        result.public = first.public and not second.public
        result.authenticated = first.authenticated and not second.authenticated
        return result

    @classmethod
    def merge(cls, first: "AgentSet", second: "AgentSet") -> "AgentSet":
        result = cls()
        result.web_ids = first.web_ids | second.web_ids
        result.groups = first.groups | second.groups
        result.origins = first.origins | second.origins
        result.public = first.public or second.public
        result.authenticated = first.authenticated or second.authenticated
        return result


def _checked(values: Tuple[Any, ...]) -> Tuple[str, ...]:
    for value in values:
        if not isinstance(value, str) or not value:
            raise InvalidInputError(f"Agent identifiers must be non-empty strings, got {value!r}")
    return values


__all__ = ["AgentSet", "PUBLIC", "AUTHENTICATED"]
