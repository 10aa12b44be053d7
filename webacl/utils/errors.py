"""Custom exceptions used across webacl."""
from __future__ import annotations


class AclError(Exception):
    """Base exception for all webacl errors."""


class InvalidInputError(AclError, ValueError):
    """Raised when a permission, agent or accessTo value has the wrong shape."""


class MissingAccessToError(AclError):
    """Raised when a rule has no accessTo and the document has no default."""


class EmptyReductionError(AclError, LookupError):
    """Raised when an aggregate is folded over zero contributing sets.

    Aggregate queries report "nothing matched" this way instead of returning an
    empty set, which would read as "nobody has any permission".
    """


class ConfigurationError(AclError):
    """Raised when configuration loading or validation fails."""


class CodecError(AclError):
    """Raised when an ACL document cannot be parsed or serialised."""


__all__ = [
    "AclError",
    "InvalidInputError",
    "MissingAccessToError",
    "EmptyReductionError",
    "ConfigurationError",
    "CodecError",
]
