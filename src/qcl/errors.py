"""
qcl — error types

File: src/qcl/errors.py
Last updated: 2026-10-18

Purpose
- Define the single exception hierarchy raised by loaders, coercion, and flag parsing.

Functional requirements
- Every failure of a load call is a ``ConfigLoadError`` subclass.
- Errors carry structured attributes so callers can report without parsing messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from qcl.shapes import Shape


class ConfigLoadError(ValueError):
    """Raised when configuration cannot be loaded into the target object."""


class ConfigTypeError(ConfigLoadError, TypeError):
    """Raised when the load target is not a dataclass instance."""

    def __init__(self, target: object) -> None:
        self.target = target
        kind = target.__name__ if isinstance(target, type) else type(target).__name__
        super().__init__(f"config must be a dataclass instance, got {kind}")


class UnsupportedTypeError(ConfigLoadError):
    """Raised when a field's shape has no coercion rule."""

    def __init__(self, shape: Shape | str, *, name: str | None = None) -> None:
        self.shape = shape
        self.name = name
        location = f"{name}: " if name else ""
        super().__init__(f"{location}unsupported type: {shape}")


class TypeConversionError(ConfigLoadError):
    """Raised when a raw string does not parse as the field's shape."""

    def __init__(
        self,
        raw: str,
        shape: Shape | str,
        *,
        name: str | None = None,
        reason: str | None = None,
    ) -> None:
        self.raw = raw
        self.shape = shape
        self.name = name
        self.reason = reason
        location = f"{name}: " if name else ""
        detail = f" ({reason})" if reason else ""
        super().__init__(f"{location}cannot convert {raw!r} to {shape}{detail}")


class InvalidMapEntryError(ConfigLoadError):
    """Raised when a map entry lacks ``=`` or keys and values do not pair up."""

    def __init__(self, entries: tuple[str, ...], *, name: str | None = None) -> None:
        self.entries = entries
        self.name = name
        location = f"{name}: " if name else ""
        super().__init__(f"{location}invalid map value: {list(entries)}")


class FlagParseError(ConfigLoadError):
    """Raised when command-line flags cannot be registered or parsed."""


__all__ = [
    "ConfigLoadError",
    "ConfigTypeError",
    "FlagParseError",
    "InvalidMapEntryError",
    "TypeConversionError",
    "UnsupportedTypeError",
]
