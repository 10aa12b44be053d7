"""Serialisation of ACL documents."""
from __future__ import annotations

from .turtle import DEFAULT_BASE_IRI, DecodeResult, decode, encode

__all__ = ["DEFAULT_BASE_IRI", "DecodeResult", "decode", "encode"]
