"""Shared types for fuel.common: the base exception and key aliases."""

from __future__ import annotations

from typing import Any, Final

Key = str | int
"""A mapping key: string (possibly a dot-path) or integer."""


class FuelError(Exception):
    """Base exception for all fuel.common errors."""


class InvalidArgumentError(FuelError, ValueError):
    """Raised when a helper receives an argument it cannot work with."""


class _Missing:
    """Sentinel type for "no value found", distinct from ``None``."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final[Any] = _Missing()
