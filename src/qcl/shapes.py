"""
qcl — field shape descriptors

File: src/qcl/shapes.py
Last updated: 2026-10-18

Purpose
- Translate dataclass type hints into ``Shape`` descriptors the coercer understands.
- Build one cached ``FieldSpec`` tuple per dataclass type.

What should be included in this file
- Fixed-width numeric aliases (``Int8`` ... ``Uint64``, ``Float32``/``Float64``).
- ``embedded()`` for fields whose children are promoted into the parent namespace.
- Settability rules (private names, frozen dataclasses).

Non-functional requirements
- No mutation of user classes; descriptors are immutable and cached per type.
"""

from __future__ import annotations

import dataclasses
import functools
import types
import typing
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from typing import Annotated, Any, Final

EMBED_METADATA_KEY: Final[str] = "qcl.embed"
HELP_METADATA_KEY: Final[str] = "help"


class Kind(StrEnum):
    """Semantic category of a field."""

    BOOL = "bool"
    INT = "int"
    UINT = "uint"
    FLOAT = "float"
    DURATION = "duration"
    STRING = "str"
    POINTER = "optional"
    SEQUENCE = "list"
    MAPPING = "dict"
    STRUCT = "struct"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class Width:
    """``Annotated`` marker giving a numeric field its bit width."""

    bits: int
    signed: bool = True


Int8 = Annotated[int, Width(8)]
Int16 = Annotated[int, Width(16)]
Int32 = Annotated[int, Width(32)]
Int64 = Annotated[int, Width(64)]
Uint = Annotated[int, Width(64, signed=False)]
Uint8 = Annotated[int, Width(8, signed=False)]
Uint16 = Annotated[int, Width(16, signed=False)]
Uint32 = Annotated[int, Width(32, signed=False)]
Uint64 = Annotated[int, Width(64, signed=False)]
Float32 = Annotated[float, Width(32)]
Float64 = Annotated[float, Width(64)]
Duration = timedelta

_SCALAR_KINDS: Final[frozenset[Kind]] = frozenset(
    {Kind.BOOL, Kind.INT, Kind.UINT, Kind.FLOAT, Kind.DURATION, Kind.STRING}
)


@dataclass(frozen=True, slots=True)
class Shape:
    """Immutable description of a field type."""

    kind: Kind
    bits: int | None = None
    elem: Shape | None = None
    struct: type | None = None
    type_name: str = ""

    @property
    def is_scalar(self) -> bool:
        return self.kind in _SCALAR_KINDS

    @property
    def target(self) -> Shape:
        """The shape behind any number of optional wrappers."""

        shape = self
        while shape.kind is Kind.POINTER and shape.elem is not None:
            shape = shape.elem
        return shape

    def __str__(self) -> str:
        if self.kind is Kind.INT:
            return f"int{self.bits}" if self.bits else "int"
        if self.kind is Kind.UINT:
            return f"uint{self.bits}"
        if self.kind is Kind.FLOAT:
            return f"float{self.bits or 64}"
        if self.kind is Kind.POINTER:
            return f"{self.elem} | None"
        if self.kind is Kind.SEQUENCE:
            return f"list[{self.elem}]"
        if self.kind is Kind.MAPPING:
            return f"dict[str, {self.elem}]"
        if self.kind is Kind.STRUCT and self.struct is not None:
            return self.struct.__name__
        if self.kind is Kind.UNSUPPORTED:
            return self.type_name
        return self.kind.value


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One dataclass field as seen by the walker."""

    name: str
    shape: Shape
    metadata: Mapping[str, Any]
    embedded: bool
    settable: bool

    def tag(self, key: str) -> str | None:
        """Return the override text for tag ``key``: the part before the first comma."""

        if not key or key not in self.metadata:
            return None
        raw = self.metadata[key]
        if not isinstance(raw, str):
            return None
        return raw.split(",")[0].strip()

    @property
    def help(self) -> str | None:
        value = self.metadata.get(HELP_METADATA_KEY)
        return value if isinstance(value, str) else None


def embedded(factory: Callable[[], Any], **metadata: Any) -> Any:
    """Declare a nested dataclass whose fields join the parent's namespace."""

    return dataclasses.field(
        default_factory=factory, metadata={**metadata, EMBED_METADATA_KEY: True}
    )


def is_config_instance(value: object) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def shape_of(annotation: object) -> Shape:
    """Resolve a type hint into a ``Shape``."""

    origin = typing.get_origin(annotation)

    if origin is Annotated:
        base, *extras = typing.get_args(annotation)
        width = next((extra for extra in extras if isinstance(extra, Width)), None)
        shape = shape_of(base)
        if width is None:
            return shape
        if shape.kind in {Kind.INT, Kind.UINT}:
            return Shape(Kind.INT if width.signed else Kind.UINT, bits=width.bits)
        if shape.kind is Kind.FLOAT and width.bits in {32, 64}:
            return Shape(Kind.FLOAT, bits=width.bits)
        return Shape(Kind.UNSUPPORTED, type_name=_type_name(annotation))

    if origin in {typing.Union, types.UnionType}:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1 and len(typing.get_args(annotation)) == 2:
            return Shape(Kind.POINTER, elem=shape_of(members[0]))
        return Shape(Kind.UNSUPPORTED, type_name=_type_name(annotation))

    if origin is list:
        (elem,) = typing.get_args(annotation) or (Any,)
        return Shape(Kind.SEQUENCE, elem=shape_of(elem))

    if origin is dict:
        key, value = typing.get_args(annotation) or (Any, Any)
        if key is not str:
            return Shape(Kind.UNSUPPORTED, type_name=_type_name(annotation))
        return Shape(Kind.MAPPING, elem=shape_of(value))

    if annotation is bool:
        return Shape(Kind.BOOL)
    if annotation is int:
        return Shape(Kind.INT)
    if annotation is float:
        return Shape(Kind.FLOAT, bits=64)
    if annotation is str:
        return Shape(Kind.STRING)
    if annotation is timedelta:
        return Shape(Kind.DURATION)
    if isinstance(annotation, type) and dataclasses.is_dataclass(annotation):
        return Shape(Kind.STRUCT, struct=annotation)

    return Shape(Kind.UNSUPPORTED, type_name=_type_name(annotation))


@functools.cache
def describe(cls: type) -> tuple[FieldSpec, ...]:
    """Return the field descriptors of dataclass ``cls`` in declaration order."""

    hints = typing.get_type_hints(cls, include_extras=True)
    frozen = bool(cls.__dataclass_params__.frozen)  # type: ignore[attr-defined]
    specs: list[FieldSpec] = []
    for item in dataclasses.fields(cls):
        shape = shape_of(hints.get(item.name, item.type))
        is_embedded = bool(item.metadata.get(EMBED_METADATA_KEY)) and shape.kind is Kind.STRUCT
        specs.append(
            FieldSpec(
                name=item.name,
                shape=shape,
                metadata=item.metadata,
                embedded=is_embedded,
                settable=not frozen and not item.name.startswith("_"),
            )
        )
    return tuple(specs)


def _type_name(annotation: object) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


__all__ = [
    "EMBED_METADATA_KEY",
    "HELP_METADATA_KEY",
    "Duration",
    "FieldSpec",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Kind",
    "Shape",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "Width",
    "describe",
    "embedded",
    "is_config_instance",
    "shape_of",
]
