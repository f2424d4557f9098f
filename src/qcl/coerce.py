"""
qcl — string to field value coercion

File: src/qcl/coerce.py
Last updated: 2026-10-18

Purpose
- Convert one raw string into the value of a field shape.
- Assemble list and dict values from separator-delimited text.

Functional requirements
- Durations are handled before integers.
- Integers parse in base 10 and fixed-width shapes are range checked.
- Collections append to (lists) or merge into (dicts) the current value; later
  duplicate dict keys win.

Non-functional requirements
- Pure functions: the caller decides where the returned value is stored.
"""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Final

from qcl.durations import DurationParseError, format_duration, parse_duration
from qcl.errors import InvalidMapEntryError, TypeConversionError, UnsupportedTypeError
from qcl.shapes import Kind, Shape

DEFAULT_SEPARATOR: Final[str] = ","

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_SIGNED_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_PATTERN: Final[re.Pattern[str]] = re.compile(r"[0-9]+")
_FLOAT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def coerce(
    shape: Shape,
    raw: str,
    *,
    current: object = None,
    separator: str = DEFAULT_SEPARATOR,
    name: str | None = None,
) -> object:
    """Return the new value for a field of ``shape`` given ``raw`` text.

    ``current`` is the field's existing value; collections are built on top of it.
    """

    if shape.kind is Kind.POINTER and shape.elem is not None:
        return coerce(shape.elem, raw, current=current, separator=separator, name=name)
    if shape.kind is Kind.SEQUENCE:
        return assemble_sequence(shape, raw, current, separator, name=name)
    if shape.kind is Kind.MAPPING:
        return assemble_mapping(shape, raw, current, separator, name=name)
    return coerce_scalar(shape, raw, name=name)


def coerce_scalar(shape: Shape, raw: str, *, name: str | None = None) -> object:
    """Parse ``raw`` as a bool, integer, float, duration or string."""

    if shape.kind is Kind.DURATION:
        try:
            return parse_duration(raw)
        except DurationParseError as exc:
            raise TypeConversionError(raw, shape, name=name, reason=str(exc)) from exc

    if shape.kind is Kind.STRING:
        return raw

    if shape.kind is Kind.BOOL:
        lowered = raw.lower()
        if lowered in _BOOLEAN_TRUE:
            return True
        if lowered in _BOOLEAN_FALSE:
            return False
        raise TypeConversionError(
            raw, shape, name=name, reason="expected true/false/1/0/yes/no/on/off"
        )

    if shape.kind is Kind.INT:
        if _SIGNED_PATTERN.fullmatch(raw) is None:
            raise TypeConversionError(raw, shape, name=name, reason="expected a base-10 integer")
        value = int(raw)
        if shape.bits is not None:
            low, high = -(2 ** (shape.bits - 1)), 2 ** (shape.bits - 1) - 1
            if not low <= value <= high:
                raise TypeConversionError(raw, shape, name=name, reason="value out of range")
        return value

    if shape.kind is Kind.UINT:
        if _UNSIGNED_PATTERN.fullmatch(raw) is None:
            raise TypeConversionError(
                raw, shape, name=name, reason="expected an unsigned base-10 integer"
            )
        value = int(raw)
        if shape.bits is not None and value > 2**shape.bits - 1:
            raise TypeConversionError(raw, shape, name=name, reason="value out of range")
        return value

    if shape.kind is Kind.FLOAT:
        if _FLOAT_PATTERN.fullmatch(raw) is None:
            raise TypeConversionError(raw, shape, name=name, reason="expected a number")
        number = float(raw)
        if shape.bits == 32 and math.isfinite(number):
            try:
                struct.pack("<f", number)
            except OverflowError as exc:
                raise TypeConversionError(
                    raw, shape, name=name, reason="value out of range"
                ) from exc
        return number

    raise UnsupportedTypeError(shape, name=name)


def assemble_sequence(
    shape: Shape,
    raw: str,
    current: object,
    separator: str = DEFAULT_SEPARATOR,
    *,
    name: str | None = None,
) -> list[object]:
    """Split ``raw`` on ``separator`` and append the coerced items to ``current``."""

    elem = _element_shape(shape, Kind.SEQUENCE, name)
    items = [
        coerce(elem, part, separator=separator, name=name) for part in raw.split(separator)
    ]
    if isinstance(current, Sequence) and not isinstance(current, str):
        return [*current, *items]
    return items


def assemble_mapping(
    shape: Shape,
    raw: str,
    current: object,
    separator: str = DEFAULT_SEPARATOR,
    *,
    name: str | None = None,
) -> dict[str, object]:
    """Split ``raw`` into ``key=value`` entries and merge them into ``current``."""

    keys: list[str] = []
    values: list[str] = []
    for entry in raw.split(separator):
        key, equals, value = entry.partition("=")
        if not equals:
            raise InvalidMapEntryError((entry,), name=name)
        keys.append(key)
        values.append(value)
    return merge_entries(shape, keys, values, current, separator=separator, name=name)


def merge_entries(
    shape: Shape,
    keys: Sequence[str],
    values: Sequence[str],
    current: object,
    *,
    separator: str = DEFAULT_SEPARATOR,
    name: str | None = None,
) -> dict[str, object]:
    """Coerce ``values`` and pair them with ``keys`` on top of ``current``."""

    if len(keys) != len(values):
        raise InvalidMapEntryError((*keys, *values), name=name)
    elem = _element_shape(shape, Kind.MAPPING, name)
    merged: dict[str, object] = dict(current) if isinstance(current, Mapping) else {}
    for key, value in zip(keys, values, strict=True):
        merged[key] = coerce(elem, value, separator=separator, name=name)
    return merged


def format_value(shape: Shape, value: object) -> str:
    """Render a scalar value in the canonical text ``coerce_scalar`` accepts."""

    if shape.kind is Kind.DURATION and isinstance(value, timedelta):
        return format_duration(value)
    if shape.kind is Kind.BOOL:
        return "true" if value else "false"
    if shape.kind is Kind.POINTER and shape.elem is not None:
        return format_value(shape.elem, value)
    return str(value)


def _element_shape(shape: Shape, kind: Kind, name: str | None) -> Shape:
    if shape.kind is not kind or shape.elem is None:
        raise UnsupportedTypeError(shape, name=name)
    return shape.elem


__all__ = [
    "DEFAULT_SEPARATOR",
    "assemble_mapping",
    "assemble_sequence",
    "coerce",
    "coerce_scalar",
    "format_value",
    "merge_entries",
]
