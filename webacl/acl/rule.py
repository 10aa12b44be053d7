"""A single authorization and its rectangle algebra.

An :class:`AclRule` grants every permission in ``permissions`` to every agent
in ``agents``: a rectangle in permission-space x agent-space. ``common`` is the
rectangle intersection and ``subtract`` the difference, split into at most two
disjoint rectangles.

``access_to`` is carried along but never partitioned: when two rules name
different resources the result keeps the first rule's labels.
"""
from __future__ import annotations

from collections import abc
from typing import Any, Hashable, List, Optional, Sequence, Tuple

from webacl.acl.agents import AgentSet
from webacl.acl.permissions import PermissionSet
from webacl.utils.errors import InvalidInputError


def _labels(access_to: Any) -> Tuple[str, ...]:
    if access_to is None:
        return ()
    if isinstance(access_to, str):
        access_to = (access_to,)
    if not isinstance(access_to, abc.Iterable):
        raise InvalidInputError(f"accessTo must be a string or a sequence of strings, got {access_to!r}")
    labels: List[str] = []
    for label in access_to:
        if not isinstance(label, str) or not label:
            raise InvalidInputError(f"accessTo labels must be non-empty strings, got {label!r}")
        if label not in labels:
            labels.append(label)
    return tuple(labels)


class AclRule:
    """Permissions, agents, targets and the statements we do not interpret.

    ``default`` and ``default_for_new`` hold the container a rule is inherited
    from (``acl:default`` / ``acl:defaultForNew``) or ``None`` when unset.
    ``passthrough`` holds opaque, equality-comparable items from the source
    document that must survive any edit.
    """

    def __init__(
        self,
        permissions: Any = None,
        agents: Any = None,
        access_to: Any = (),
        *,
        default: Optional[str] = None,
        default_for_new: Optional[str] = None,
        passthrough: Sequence[Hashable] = (),
    ) -> None:
        self.permissions = PermissionSet.from_value(permissions)
        self.agents = AgentSet.from_value(agents)
        self.access_to = _labels(access_to)
        self.default = default
        self.default_for_new = default_for_new
        self.passthrough: Tuple[Hashable, ...] = tuple(passthrough)

    @classmethod
    def from_value(cls, first: Any = None, agents: Any = None, access_to: Any = ()) -> "AclRule":
        if isinstance(first, AclRule):
            return first.clone()
        return cls(first, agents, access_to)

    def _options(self) -> dict:
        return {
            "default": self.default,
            "default_for_new": self.default_for_new,
            "passthrough": self.passthrough,
        }

    def clone(self) -> "AclRule":
        return AclRule(self.permissions, self.agents, self.access_to, **self._options())

    def with_access_to(self, access_to: Any) -> "AclRule":
        return AclRule(self.permissions, self.agents, access_to, **self._options())

    def has_no_effect(self) -> bool:
        """Return True when the rule grants nothing and carries no unknown data."""

        return not self.passthrough and (
            self.permissions.is_empty() or self.agents.is_empty() or not self.access_to
        )

    def equals(self, other: "AclRule") -> bool:
        return (
            self.passthrough == other.passthrough
            and self.permissions == other.permissions
            and self.agents == other.agents
            and set(self.access_to) == set(other.access_to)
            and self.default == other.default
            and self.default_for_new == other.default_for_new
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AclRule):
            return NotImplemented
        return self.equals(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"AclRule({self.permissions!r}, {self.agents!r}, access_to={list(self.access_to)!r})"

    @staticmethod
    def common(first: "AclRule", second: "AclRule") -> "AclRule":
        """Return the rule shared by both operands."""

        return AclRule(
            PermissionSet.common(first.permissions, second.permissions),
            AgentSet.common(first.agents, second.agents),
            [label for label in first.access_to if label in second.access_to],
            default=first.default if first.default == second.default else None,
            default_for_new=first.default_for_new if first.default_for_new == second.default_for_new else None,
            passthrough=[item for item in first.passthrough if item in second.passthrough],
        )

    @staticmethod
    def subtract(first: "AclRule", second: "AclRule") -> List["AclRule"]:
        """Return what remains of ``first`` once ``second`` is taken out.

        At most two rules come back, and they never share an (agent,
        permission) pair. The first covers the agents ``second`` does not
        mention, with all of ``first``'s permissions. The second covers the
        shared agents with the permissions ``second`` leaves them. Rules with no
        effect are dropped. When the two rules share no (agent, permission)
        pair, ``first`` comes back unsplit. Passthrough data stays on the first
        surviving fragment only, and is lost with the grant when nothing
        survives.

            AclRule.subtract(AclRule([READ, WRITE], ["a", "b"]), AclRule(READ, "a"))
            # [AclRule([READ, WRITE], "b"), AclRule(WRITE, "a")]
        """

        shared_agents = AgentSet.common(first.agents, second.agents)
        shared_permissions = PermissionSet.common(first.permissions, second.permissions)
        if shared_agents.is_empty() or shared_permissions.is_empty():
            return [] if first.has_no_effect() else [first.clone()]

        options = {"default": first.default, "default_for_new": first.default_for_new}
        unaffected_agents = AclRule(
            first.permissions,
            AgentSet.subtract(first.agents, second.agents),
            first.access_to,
            **options,
        )
        unaffected_permissions = AclRule(
            PermissionSet.subtract(first.permissions, second.permissions),
            shared_agents,
            first.access_to,
            **options,
        )
        fragments = [rule for rule in (unaffected_agents, unaffected_permissions) if not rule.has_no_effect()]
        if fragments:
            fragments[0].passthrough = first.passthrough
        return fragments


__all__ = ["AclRule"]
