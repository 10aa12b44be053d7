"""Configuration for webacl.

Settings are read from YAML (or TOML) and validated with Pydantic. They supply
the document-level defaults an :class:`AclDocument` needs (the default
``accessTo`` target and the base for generated subject ids) along with the
base IRI used by the Turtle codec and the logging level.
"""
from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from webacl.acl.document import DEFAULT_SUBJECT_BASE, AclDocument
from webacl.codec.turtle import DEFAULT_BASE_IRI
from webacl.utils.errors import ConfigurationError
from webacl.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("webacl.yml")


class AclSettings(BaseModel):
    """Root configuration schema."""

    default_access_to: Optional[str] = Field(
        default=None, description="Resource granted when a rule names no accessTo"
    )
    base_iri: str = Field(default=DEFAULT_BASE_IRI, description="IRI of the ACL document itself")
    subject_base: str = Field(default=DEFAULT_SUBJECT_BASE, description="Seed for generated subject ids")
    log_level: str = "INFO"
    audit_log: Optional[Path] = None

    @field_validator("subject_base")
    @classmethod
    def validate_subject_base(cls, value: str) -> str:
        if not value or not re.fullmatch(r"[A-Za-z0-9_.\-]+", value):
            raise ValueError("subject_base must be a non-empty run of letters, digits, '.', '_' or '-'")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {value!r}")
        return level

    def new_document(self) -> AclDocument:
        return AclDocument(self.default_access_to, subject_base=self.subject_base)


def load_settings(path: Optional[Path] = None) -> AclSettings:
    """Load settings from ``path``, ``$WEBACL_CONFIG`` or ``webacl.yml``.

    An explicitly named file must exist. When falling back to the default
    location and nothing is there, the built-in defaults apply.
    """

    explicit = path is not None or "WEBACL_CONFIG" in os.environ
    path = path or Path(os.environ.get("WEBACL_CONFIG", DEFAULT_CONFIG_PATH))
    if not path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file {path} does not exist")
        return AclSettings()

    logger.debug("loading configuration", extra={"path": str(path)})
    try:
        return AclSettings(**_read_file(path))
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def _read_file(path: Path) -> Dict[str, Any]:
    try:
        if path.suffix in {".yml", ".yaml"}:
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
        elif path.suffix == ".toml":
            import tomllib  # Python 3.11+ built-in

            with path.open("rb") as handle:
                data = tomllib.load(handle)
        else:
            raise ConfigurationError(f"Unsupported configuration format: {path.suffix}")
    except (OSError, yaml.YAMLError, ValueError) as exc:
        raise ConfigurationError(f"Could not read {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return data


__all__ = ["AclSettings", "load_settings", "DEFAULT_CONFIG_PATH"]
