"""Fold helpers shared by :class:`PermissionSet` and :class:`AgentSet`."""
from __future__ import annotations

from functools import reduce
from typing import Iterable, Type, TypeVar

from webacl.utils.errors import EmptyReductionError

T = TypeVar("T", bound="SetAlgebra")


class SetAlgebra:
    """Mixin turning the binary ``merge``/``common`` into folds.

    Subclasses implement ``merge(a, b)`` and ``common(a, b)`` as classmethods.
    Neither operation has an identity element here, so folding over nothing is
    an error rather than an empty set.
    """

    @classmethod
    def merge(cls: Type[T], first: T, second: T) -> T:  # pragma: no cover - abstract
        raise NotImplementedError

    @classmethod
    def common(cls: Type[T], first: T, second: T) -> T:  # pragma: no cover - abstract
        raise NotImplementedError

    @classmethod
    def merge_all(cls: Type[T], sets: Iterable[T]) -> T:
        return _fold(cls.merge, sets, f"{cls.__name__}.merge_all")

    @classmethod
    def common_all(cls: Type[T], sets: Iterable[T]) -> T:
        return _fold(cls.common, sets, f"{cls.__name__}.common_all")


def _fold(operation, sets, label: str):
    items = list(sets)
    if not items:
        raise EmptyReductionError(f"{label} called with no sets to combine")
    return reduce(operation, items)


__all__ = ["SetAlgebra"]
