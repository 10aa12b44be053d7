"""Typer-based CLI over Turtle ACL files."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from webacl.acl.agents import AUTHENTICATED, PUBLIC, AgentSet
from webacl.acl.document import AclDocument
from webacl.acl.permissions import PermissionSet
from webacl.codec.turtle import decode, encode
from webacl.core.config import AclSettings, load_settings
from webacl.core.ui import RichUI
from webacl.security.access_control import AccessControl
from webacl.security.audit import AuditTrail
from webacl.utils.errors import AclError, EmptyReductionError
from webacl.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

app = typer.Typer(help="Inspect and edit Web Access Control documents")

FileArgument = typer.Argument(..., exists=True, dir_okay=False, help="Turtle ACL document")
ModeOption = typer.Option(..., "--mode", "-m", help="Read, Write, Append or Control (repeatable)")
AgentOption = typer.Option(
    ...,
    "--agent",
    "-a",
    help="WebID, 'public', 'authenticated', 'group:<iri>' or 'origin:<iri>' (repeatable)",
)
AccessToOption = typer.Option(None, "--access-to", help="Resource the grant applies to")


@dataclass
class RuntimeContext:
    settings: AclSettings
    ui: RichUI


runtime: Optional[RuntimeContext] = None
_configure_logging = False


def enable_logging() -> None:
    global _configure_logging
    _configure_logging = True


def _require_runtime() -> RuntimeContext:
    if runtime is None:  # pragma: no cover - the callback always sets it
        raise RuntimeError("Runtime not initialised")
    return runtime


def parse_agents(values: List[str]) -> AgentSet:
    agents = AgentSet()
    for value in values:
        if value == PUBLIC:
            agents.add_public()
        elif value == AUTHENTICATED:
            agents.add_authenticated()
        elif value.startswith("group:"):
            agents.add_group(value[len("group:"):])
        elif value.startswith("origin:"):
            agents.add_origin(value[len("origin:"):])
        else:
            agents.add_web_id(value)
    return agents


def _load(file: Path) -> AclDocument:
    ctx = _require_runtime()
    result = decode(
        file.read_text(encoding="utf-8"),
        ctx.settings.base_iri,
        default_access_to=ctx.settings.default_access_to,
    )
    result.document.subject_base = ctx.settings.subject_base
    return result.document


def _save(document: AclDocument, file: Path) -> None:
    file.write_text(encode(document, _require_runtime().settings.base_iri), encoding="utf-8")


def _fail(exc: AclError, code: int = 2) -> typer.Exit:
    _require_runtime().ui.error(str(exc))
    logger.debug("command failed", exc_info=exc)
    return typer.Exit(code=code)


@app.callback()
def main_callback(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML or TOML settings file"),
) -> None:
    global runtime
    try:
        settings = load_settings(config)
    except AclError as exc:
        RichUI().error(str(exc))
        raise typer.Exit(code=2) from exc
    if _configure_logging:
        configure_logging(level=settings.log_level)
    runtime = RuntimeContext(settings=settings, ui=RichUI())


@app.command()
def check(
    file: Path = FileArgument,
    modes: List[str] = ModeOption,
    agents: List[str] = AgentOption,
    access_to: Optional[str] = AccessToOption,
) -> None:
    """Exit 0 when the document grants every mode to every agent, 1 otherwise."""

    ctx = _require_runtime()
    try:
        document = _load(file)
        allowed = document.has_rule(PermissionSet.from_value(modes), parse_agents(agents), access_to)
    except AclError as exc:
        raise _fail(exc) from exc
    if allowed:
        ctx.ui.info("allowed")
        return
    ctx.ui.warn("denied")
    raise typer.Exit(code=1)


@app.command("permissions")
def permissions_command(file: Path = FileArgument, agents: List[str] = AgentOption) -> None:
    """List the modes granted to the given agents."""

    ctx = _require_runtime()
    try:
        granted = _load(file).get_permissions_for(parse_agents(agents))
    except EmptyReductionError:
        ctx.ui.warn("no matching rules")
        raise typer.Exit(code=1)
    except AclError as exc:
        raise _fail(exc) from exc
    ctx.ui.table("Permissions", ["mode"], [[permission.value] for permission in granted])


@app.command("agents")
def agents_command(file: Path = FileArgument, modes: List[str] = ModeOption) -> None:
    """List the agents holding all of the given modes."""

    ctx = _require_runtime()
    try:
        holders = _load(file).get_agents_with(PermissionSet.from_value(modes))
    except EmptyReductionError:
        ctx.ui.warn("no matching rules")
        raise typer.Exit(code=1)
    except AclError as exc:
        raise _fail(exc) from exc
    ctx.ui.table("Agents", ["kind", "id"], [[kind, ident] for kind, ident in holders])


@app.command()
def minify(
    file: Path = FileArgument,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of in place"),
) -> None:
    """Drop rules without effect."""

    ctx = _require_runtime()
    try:
        document = _load(file)
        before = len(document)
        document.get_minified_rules()
        _save(document, output or file)
    except AclError as exc:
        raise _fail(exc) from exc
    ctx.ui.info(f"removed {before - len(document)} rule(s)")


def _guard(document: AclDocument) -> AccessControl:
    audit_log = _require_runtime().settings.audit_log
    return AccessControl(document, AuditTrail(audit_log) if audit_log else None)


@app.command()
def grant(
    file: Path = FileArgument,
    modes: List[str] = ModeOption,
    agents: List[str] = AgentOption,
    access_to: Optional[str] = AccessToOption,
    subject: Optional[str] = typer.Option(None, "--subject", help="Subject id to store the rule under"),
    actor: str = typer.Option("cli", "--actor", help="Name recorded in the audit log"),
) -> None:
    """Add a rule and write the document back."""

    ctx = _require_runtime()
    try:
        document = _load(file)
        subject_id = asyncio.run(
            _guard(document).grant(
                actor, PermissionSet.from_value(modes), parse_agents(agents), access_to, subject
            )
        )
        _save(document, file)
    except AclError as exc:
        raise _fail(exc) from exc
    ctx.ui.info(f"granted as {subject_id}")


@app.command()
def revoke(
    file: Path = FileArgument,
    modes: List[str] = ModeOption,
    agents: List[str] = AgentOption,
    actor: str = typer.Option("cli", "--actor", help="Name recorded in the audit log"),
) -> None:
    """Remove the given modes from the given agents and write the document back."""

    ctx = _require_runtime()
    try:
        document = _load(file)
        asyncio.run(_guard(document).revoke(actor, PermissionSet.from_value(modes), parse_agents(agents)))
        _save(document, file)
    except AclError as exc:
        raise _fail(exc) from exc
    ctx.ui.info("revoked")


__all__ = ["app", "enable_logging", "parse_agents"]
