"""Serialised access to a shared :class:`AclDocument`."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from webacl.acl.agents import AgentSet
from webacl.acl.document import AclDocument
from webacl.acl.permissions import PermissionSet
from webacl.acl.rule import AclRule
from webacl.security.audit import AuditTrail
from webacl.utils.logging import get_logger

logger = get_logger(__name__)


def _describe(rule: AclRule) -> Dict[str, Any]:
    return {
        "permissions": [permission.value for permission in rule.permissions],
        "agents": [f"{kind}:{ident}" if ident else kind for kind, ident in rule.agents],
        "access_to": list(rule.access_to),
    }


class AccessControl:
    """Single-writer guard around an :class:`AclDocument`.

    The document itself is not safe for interleaved edits. Every call here
    holds one ``asyncio.Lock``, so readers never observe a half-split rule.
    Changes are recorded on ``audit`` when one is given.
    """

    def __init__(self, document: AclDocument, audit: Optional[AuditTrail] = None) -> None:
        self._document = document
        self._audit = audit
        self._lock = asyncio.Lock()

    async def grant(
        self,
        actor: str,
        permissions: Any,
        agents: Any = None,
        access_to: Any = None,
        subject_id: Optional[str] = None,
    ) -> str:
        async with self._lock:
            rule = AclRule.from_value(permissions, agents, access_to)
            subject_id = self._document.add_rule(rule, subject_id=subject_id)
            self._record(actor, "grant", {"subject": subject_id, **_describe(self._document.rules[subject_id])})
            return subject_id

    async def revoke(self, actor: str, permissions: Any, agents: Any = None, access_to: Any = None) -> None:
        async with self._lock:
            rule = AclRule.from_value(permissions, agents, access_to)
            self._document.delete_rule(rule)
            self._record(actor, "revoke", _describe(rule))

    async def revoke_subject(self, actor: str, subject_id: str) -> None:
        async with self._lock:
            self._document.delete_by_subject(subject_id)
            self._record(actor, "revoke_subject", {"subject": subject_id})

    async def is_allowed(self, permissions: Any, agents: Any = None, access_to: Any = None) -> bool:
        async with self._lock:
            return self._document.has_rule(permissions, agents, access_to)

    async def permissions_for(self, agents: Any) -> PermissionSet:
        async with self._lock:
            return self._document.get_permissions_for(agents)

    async def agents_with(self, permissions: Any) -> AgentSet:
        async with self._lock:
            return self._document.get_agents_with(permissions)

    async def minify(self) -> List[str]:
        async with self._lock:
            return list(self._document.get_minified_rules())

    async def snapshot(self) -> Dict[str, AclRule]:
        """Return copies of the stored rules."""

        async with self._lock:
            return {subject_id: rule.clone() for subject_id, rule in self._document.rules.items()}

    def _record(self, actor: str, action: str, metadata: Dict[str, Any]) -> None:
        logger.debug("acl %s", action, extra={"actor": actor})
        if self._audit is not None:
            self._audit.log(actor, action, metadata)


__all__ = ["AccessControl"]
