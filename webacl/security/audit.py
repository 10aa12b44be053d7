"""Audit trail for changes to ACL documents."""

from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List

from webacl.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class AuditEvent:
    actor: str
    action: str
    metadata: Dict[str, Any]
    timestamp: float


class AuditTrail:
    """Append grants and revocations to a JSON-lines file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def record(self, event: AuditEvent) -> None:
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event)) + "\n")
        logger.info("audit %s", event.action, extra={"actor": event.actor})

    def log(self, actor: str, action: str, metadata: Dict[str, Any]) -> None:
        self.record(AuditEvent(actor=actor, action=action, metadata=metadata, timestamp=time.time()))

    def read_recent(self, limit: int = 100) -> List[AuditEvent]:
        if not self.path.exists():
            return []
        lines = self.path.read_text(encoding="utf-8").strip().splitlines()[-limit:]
        events = []
        for line in lines:
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:  # pragma: no cover - handles manual file edits
                logger.warning("skipping malformed audit line", extra={"path": str(self.path)})
                continue
            events.append(AuditEvent(**entry))
        return events


__all__ = ["AuditTrail", "AuditEvent"]
