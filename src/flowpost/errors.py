"""
Typed Exceptions
================
Every failure raised by the engine derives from ``FlowPostError``.

Each subclass also inherits from the closest builtin (``ValueError``,
``LookupError``...) so callers catching the builtin keep working.

The optional ``context`` dict is appended to the message as a compact
``| key=value`` suffix.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

__all__ = [
    "FlowPostError",
    "DecodeError",
    "MissingFieldError",
    "InvalidArgumentError",
    "DegenerateGeometryError",
    "MissingRepresentationError",
]


def _format_context(ctx: Optional[Mapping[str, Any]]) -> str:
    if not ctx:
        return ""
    parts = []
    for key in sorted(ctx):
        value = repr(ctx[key])
        if len(value) > 120:
            value = value[:117] + "..."
        parts.append(f"{key}={value}")
    return " | " + ", ".join(parts)


class FlowPostError(Exception):
    """
    Base class for all engine errors.

    Args:
        message: Human-readable error.
        context: Extra fields shown in the string form, e.g. ``{"field": "U"}``.
    """
    def __init__(self, message: str, context: Optional[Mapping[str, Any]] = None) -> None:
        self.context = dict(context) if context else None
        super().__init__(message)

    def __str__(self) -> str:
        return super().__str__() + _format_context(self.context)


class DecodeError(FlowPostError, ValueError):
    """A grid, polygon or STL buffer could not be decoded."""


class MissingFieldError(FlowPostError, LookupError):
    """A named array is not present on the grid or representation."""


class InvalidArgumentError(FlowPostError, ValueError):
    """An enum-like argument or a numeric parameter is out of range."""


class DegenerateGeometryError(FlowPostError, ArithmeticError):
    """Zero volume/area extent, or a zero-length direction vector."""


class MissingRepresentationError(FlowPostError, RuntimeError):
    """A derived representation is required but has not been computed yet."""
