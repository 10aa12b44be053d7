"""The rules of one ACL document, keyed by subject id.

:class:`AclDocument` is a plain mutable mapping wrapper. Edits rewrite
``rules`` in place so that a rule which is only narrowed keeps its subject id.
It is not safe for concurrent writers;
:class:`webacl.security.access_control.AccessControl` serialises access when
that is needed.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Hashable, List, Optional

from webacl.acl.agents import AgentSet
from webacl.acl.permissions import PermissionSet
from webacl.acl.rule import AclRule
from webacl.utils.errors import MissingAccessToError
from webacl.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SUBJECT_BASE = "new-acl-rule-1"
_TRAILING_DIGITS = re.compile(r"\d*$")


class AclDocument:
    """Store and query the authorizations of one resource.

    Example::

        doc = AclDocument(default_access_to="https://pod.example/file.ttl")
        doc.add_rule(PermissionSet.all(), "https://alice.example/#me", subject_id="owner")
        doc.add_rule(READ, AgentSet.everyone())
        doc.has_rule(READ, "https://bob.example/#me")  # False, public is its own member
    """

    def __init__(
        self,
        default_access_to: Optional[str] = None,
        *,
        subject_base: str = DEFAULT_SUBJECT_BASE,
    ) -> None:
        self.default_access_to = default_access_to
        self.subject_base = subject_base
        self.rules: Dict[str, AclRule] = {}
        self.other: List[Hashable] = []

    def __len__(self) -> int:
        return len(self.rules)

    # -- adding -------------------------------------------------------------------
    def add_rule(
        self,
        permissions: Any,
        agents: Any = None,
        access_to: Any = None,
        subject_id: Optional[str] = None,
    ) -> str:
        """Store a rule, replacing any rule already stored under ``subject_id``.

        ``permissions`` may also be a complete :class:`AclRule`. Returns the
        subject id the rule was stored under.
        """

        rule = self._rule_from_args(permissions, agents, access_to)
        subject_id = subject_id or self.new_subject_id()
        if subject_id in self.rules:
            logger.debug("replacing rule", extra={"subject": subject_id})
        self.rules[subject_id] = rule
        return subject_id

    def add_other(self, statement: Hashable) -> None:
        """Keep a statement that belongs to no rule."""

        self.other.append(statement)

    # -- querying -----------------------------------------------------------------
    def has_rule(self, permissions: Any, agents: Any = None, access_to: Any = None) -> bool:
        """Return True when the stored rules together grant the whole request.

        The request is whittled down by subtracting each stored rule in turn;
        it is covered once nothing is left.

            doc.add_rule([READ, WRITE], ["https://a.example", "https://b.example"])
            doc.has_rule(READ, "https://a.example")  # True
            doc.has_rule(CONTROL, "https://a.example")  # False
        """

        remaining = [self._rule_from_args(permissions, agents, access_to)]
        for stored in self.rules.values():
            remaining = [piece for rule in remaining for piece in AclRule.subtract(rule, stored)]
            if not remaining:
                return True
        return False

    def get_permissions_for(self, agents: Any) -> PermissionSet:
        """Union of the permissions of every rule whose agents include ``agents``.

        Raises :class:`EmptyReductionError` when no rule matches.
        """

        agents = AgentSet.from_value(agents)
        return PermissionSet.merge_all(
            rule.permissions for rule in self.rules.values() if rule.agents.includes(agents)
        )

    def get_agents_with(self, permissions: Any) -> AgentSet:
        """Union of the agents of every rule whose permissions include ``permissions``.

        Raises :class:`EmptyReductionError` when no rule matches.
        """

        permissions = PermissionSet.from_value(permissions)
        return AgentSet.merge_all(
            rule.agents for rule in self.rules.values() if rule.permissions.includes(permissions)
        )

    def get_minified_rules(self) -> Dict[str, AclRule]:
        """Drop every rule without effect and return the remaining mapping."""

        for subject_id in [key for key, rule in self.rules.items() if rule.has_no_effect()]:
            del self.rules[subject_id]
            logger.debug("dropped rule without effect", extra={"subject": subject_id})
        return self.rules

    # -- deleting -----------------------------------------------------------------
    def delete_rule(self, permissions: Any, agents: Any = None, access_to: Any = None) -> None:
        """Take the given grant away from every stored rule.

            doc.add_rule([READ, WRITE], ["https://a.example", "https://b.example"])
            doc.delete_rule(READ, "https://a.example")
            doc.has_rule(WRITE, "https://a.example")  # True
        """

        target = self._rule_from_args(permissions, agents, access_to, required=False)
        for subject_id in list(self.rules):
            self.delete_by_subject(subject_id, target)

    def delete_by_subject(self, subject_id: str, rule: Optional[AclRule] = None) -> None:
        """Delete a whole subject, or only ``rule``'s part of it.

        A rule that is only narrowed keeps its subject id. When it disappears or
        has to be split in two, the pieces get fresh ids derived from the old one.
        """

        if subject_id not in self.rules:
            return
        if rule is None:
            del self.rules[subject_id]
            logger.debug("deleted subject", extra={"subject": subject_id})
            return

        fragments = AclRule.subtract(self.rules[subject_id], rule)
        if len(fragments) == 1:
            self.rules[subject_id] = fragments[0]
            return
        del self.rules[subject_id]
        for fragment in fragments:
            self.rules[self.new_subject_id(subject_id)] = fragment
        logger.debug("split subject", extra={"subject": subject_id, "fragments": len(fragments)})

    def delete_agents(self, agents: Any) -> None:
        """Remove every permission of ``agents``."""

        self.delete_rule(AclRule(PermissionSet.all(), agents))

    def delete_permissions(self, permissions: Any) -> None:
        """Remove ``permissions`` from every rule.

        Each rule loses the permissions for its own agents only, so no agent
        can end up with a grant it did not have. Use with care on CONTROL.
        """

        permissions = PermissionSet.from_value(permissions)
        for subject_id, rule in list(self.rules.items()):
            self.delete_by_subject(subject_id, AclRule(permissions, rule.agents, rule.access_to))

    # -- serialisation ------------------------------------------------------------
    def to_turtle(self, base_iri: Optional[str] = None) -> str:
        from webacl.codec.turtle import DEFAULT_BASE_IRI, encode

        return encode(self, base_iri or DEFAULT_BASE_IRI)

    # -- helpers -------------------------------------------------------------------
    def _rule_from_args(
        self, permissions: Any, agents: Any = None, access_to: Any = None, *, required: bool = True
    ) -> AclRule:
        rule = AclRule.from_value(permissions, agents, access_to)
        if rule.access_to:
            return rule
        if self.default_access_to:
            return rule.with_access_to(self.default_access_to)
        if required:
            raise MissingAccessToError(
                "accessTo must be given explicitly or configured as the document default"
            )
        return rule

    def new_subject_id(self, base: Optional[str] = None) -> str:
        """Return an unused id built from ``base`` and a counter.

        Counting starts at the trailing number of ``base``, or at 1 when it has
        none: ``rule-3`` gives ``rule-3``, ``rule-4``, ... and ``owner`` gives
        ``owner1``, ``owner2``, ...
        """

        base = base or self.subject_base
        digits = _TRAILING_DIGITS.search(base).group(0)
        stem = base[: len(base) - len(digits)]
        index = int(digits) if digits else 1
        while f"{stem}{index}" in self.rules:
            index += 1
        return f"{stem}{index}"


__all__ = ["AclDocument", "DEFAULT_SUBJECT_BASE"]
