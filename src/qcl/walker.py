"""
qcl — recursive dataclass walker

File: src/qcl/walker.py
Last updated: 2026-10-18

Purpose
- Visit every settable field of a config object in declaration order.
- Compute each field's external name from tags or split identifiers.
- Hand out ``FieldRef`` handles that write values back into the object.

Functional requirements
- Embedded structures add no name segment and are visited once.
- Nested structures extend the prefix by their own segment; their children are
  yielded before the structure field itself.
- ``None``-valued nested structures are allocated only when a field below them
  is written.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from qcl.errors import ConfigTypeError, UnsupportedTypeError
from qcl.shapes import FieldSpec, Kind, Shape, describe, is_config_instance
from qcl.words import split_identifier, split_on_word_boundaries


@dataclass(frozen=True, slots=True)
class Naming:
    """How one source spells field paths."""

    tag: str
    separator: str
    transform: Callable[[str], str]
    prefix: str = ""

    def segment(self, spec: FieldSpec) -> str:
        override = self.tag and spec.tag(self.tag)
        words = split_on_word_boundaries(override) if override else split_identifier(spec.name)
        return self.separator.join(words)


class _Owner:
    """Lazy handle on the object that holds a field."""

    def resolve(self, *, create: bool) -> Any:
        raise NotImplementedError


class _RootOwner(_Owner):
    def __init__(self, obj: object) -> None:
        self._obj = obj

    def resolve(self, *, create: bool) -> Any:
        return self._obj


class _NestedOwner(_Owner):
    def __init__(self, parent: _Owner, attribute: str, struct: type) -> None:
        self._parent = parent
        self._attribute = attribute
        self._struct = struct

    def resolve(self, *, create: bool) -> Any:
        holder = self._parent.resolve(create=create)
        if holder is None:
            return None
        value = getattr(holder, self._attribute)
        if value is None:
            if not create:
                return None
            try:
                value = self._struct()
            except TypeError as exc:
                raise UnsupportedTypeError(
                    f"{self._struct.__name__} (cannot be created without arguments)",
                    name=self._attribute,
                ) from exc
            setattr(holder, self._attribute, value)
        return value


@dataclass(frozen=True, slots=True)
class FieldRef:
    """A resolved field: its external name, attribute path and shape."""

    name: str
    path: tuple[str, ...]
    spec: FieldSpec
    owner: _Owner

    @property
    def shape(self) -> Shape:
        return self.spec.shape

    @property
    def attribute_path(self) -> str:
        return ".".join(self.path)

    def current(self) -> object:
        holder = self.owner.resolve(create=False)
        if holder is None:
            return None
        return getattr(holder, self.spec.name)

    def update(self, produce: Callable[[object], object]) -> object:
        """Store ``produce(current_value)`` in the field, allocating parents first."""

        holder = self.owner.resolve(create=True)
        value = produce(getattr(holder, self.spec.name))
        setattr(holder, self.spec.name, value)
        return value


def walk(config: object, naming: Naming) -> Iterator[FieldRef]:
    """Yield a ``FieldRef`` for every settable field of ``config``."""

    if not is_config_instance(config):
        raise ConfigTypeError(config)
    yield from _walk(type(config), _RootOwner(config), naming, naming.prefix, (), frozenset())


def field_names(config: object, naming: Naming) -> list[FieldRef]:
    """List the field refs of a config instance or dataclass without touching values."""

    if isinstance(config, type):
        instance = _instantiate(config)
        return list(walk(instance, naming))
    return list(walk(config, naming))


def _walk(
    cls: type,
    owner: _Owner,
    naming: Naming,
    prefix: str,
    path: tuple[str, ...],
    active: frozenset[type],
) -> Iterator[FieldRef]:
    active = active | {cls}
    for spec in describe(cls):
        if not spec.settable:
            continue
        field_path = (*path, spec.name)

        if spec.embedded and spec.shape.struct is not None:
            child = _NestedOwner(owner, spec.name, spec.shape.struct)
            yield from _walk(spec.shape.struct, child, naming, prefix, field_path, active)
            continue

        segment = naming.segment(spec)
        target = spec.shape.target
        if target.kind is Kind.STRUCT and target.struct is not None and target.struct not in active:
            child = _NestedOwner(owner, spec.name, target.struct)
            nested_prefix = prefix + segment + naming.separator
            yield from _walk(target.struct, child, naming, nested_prefix, field_path, active)

        yield FieldRef(
            name=naming.transform(prefix + segment),
            path=field_path,
            spec=spec,
            owner=owner,
        )


def _instantiate(cls: type) -> object:
    if not dataclasses.is_dataclass(cls):
        raise ConfigTypeError(cls)
    try:
        return cls()
    except TypeError as exc:
        raise ConfigTypeError(cls) from exc


__all__ = ["FieldRef", "Naming", "field_names", "walk"]
