"""
qcl — command-line flag source

File: src/qcl/sources/flags.py
Last updated: 2026-10-18

Purpose
- Populate a config object from ``--dotted.flag value`` command-line arguments.

What should be included in this file
- One option per leaf field, registered on a parser owned by the load call.
- Actions that coerce and assign as arguments are parsed.

Functional requirements
- Flag names are lowercase words joined with ``.``; a tag replaces the field's
  own segment only.
- Boolean flags accept a bare ``--name`` as true.
- The argument after a non-boolean flag is its value, even when it starts with ``-``.
- Repeated flags re-apply: scalars keep the last value, collections accumulate.
- No arguments means nothing to parse.
- Unsupported leaf shapes fail at registration.

Non-functional requirements
- Never exits the process; parser errors surface as ``FlagParseError``.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Final, NoReturn

import structlog

from qcl.coerce import DEFAULT_SEPARATOR, coerce
from qcl.errors import ConfigTypeError, FlagParseError, UnsupportedTypeError
from qcl.redaction import redact_for_log
from qcl.shapes import Kind, is_config_instance
from qcl.walker import FieldRef, Naming, walk

DEFAULT_FLAG_TAG: Final[str] = "flag"
FLAG_WORD_SEPARATOR: Final[str] = "."

_BINDABLE_KINDS: Final[frozenset[Kind]] = frozenset(
    {
        Kind.BOOL,
        Kind.INT,
        Kind.UINT,
        Kind.FLOAT,
        Kind.DURATION,
        Kind.STRING,
        Kind.SEQUENCE,
        Kind.MAPPING,
    }
)


@dataclass(frozen=True, slots=True)
class FlagOptions:
    """Immutable options for one flag source."""

    tag: str = DEFAULT_FLAG_TAG
    separator: str = DEFAULT_SEPARATOR
    ignore_unknown: bool = False

    def naming(self) -> Naming:
        return Naming(tag=self.tag, separator=FLAG_WORD_SEPARATOR, transform=str.lower)


class _FlagParser(argparse.ArgumentParser):
    """Argument parser that raises instead of printing usage and exiting."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.value_options: set[str] = set()

    def error(self, message: str) -> NoReturn:
        raise FlagParseError(message)

    def attach_values(self, argv: Sequence[str]) -> list[str]:
        """Fold ``--name value`` into ``--name=value`` for options that take a value.

        Values such as ``-2m`` or ``-x`` would otherwise be read as options.
        """

        joined: list[str] = []
        index = 0
        while index < len(argv):
            arg = argv[index]
            if arg == "--":
                joined.extend(argv[index:])
                break
            if arg in self.value_options and index + 1 < len(argv):
                joined.append(f"{arg}={argv[index + 1]}")
                index += 2
                continue
            joined.append(arg)
            index += 1
        return joined


class _AssignAction(argparse.Action):
    """Coerce the flag value and store it straight into the bound field."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        *,
        ref: FieldRef,
        separator: str,
        on_assign: Callable[[FieldRef, object], None],
        **kwargs: Any,
    ) -> None:
        super().__init__(option_strings, dest, **kwargs)
        self.ref = ref
        self.separator = separator
        self.on_assign = on_assign

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: str | Sequence[Any] | None,
        option_string: str | None = None,
    ) -> None:
        raw = values if isinstance(values, str) else ""
        ref = self.ref
        value = ref.update(
            lambda current: coerce(
                ref.shape, raw, current=current, separator=self.separator, name=ref.name
            )
        )
        self.on_assign(ref, value)


class FlagSource:
    """Load fields from command-line flags such as ``--db.host localhost``."""

    name: ClassVar[str] = "flag"

    def __init__(
        self,
        argv: Sequence[str] | None = None,
        *,
        tag: str = DEFAULT_FLAG_TAG,
        separator: str = DEFAULT_SEPARATOR,
        ignore_unknown: bool = False,
        logger: Any | None = None,
    ) -> None:
        self.options = FlagOptions(tag=tag, separator=separator, ignore_unknown=ignore_unknown)
        self._argv = None if argv is None else list(argv)
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def build_parser(
        self,
        config: object,
        on_assign: Callable[[FieldRef, object], None] | None = None,
    ) -> _FlagParser:
        """Register one option per leaf field of ``config`` on a fresh parser."""

        if not is_config_instance(config):
            raise ConfigTypeError(config)

        parser = _FlagParser(prog=type(config).__name__, add_help=False, allow_abbrev=False)
        for ref in walk(config, self.options.naming()):
            if ref.shape.target.kind is Kind.STRUCT:
                continue
            self._bind(parser, ref, on_assign or _ignore_assignment)
        return parser

    def load(self, config: object) -> None:
        if not is_config_instance(config):
            raise ConfigTypeError(config)

        argv = self._argv if self._argv is not None else sys.argv[1:]
        if not argv:
            return

        applied: list[str] = []

        def _record(ref: FieldRef, value: object) -> None:
            applied.append(ref.name)
            self._logger.debug(
                "config_field_set",
                source=self.name,
                key=ref.name,
                field=ref.attribute_path,
                value=redact_for_log(ref.name, value),
            )

        parser = self.build_parser(config, _record)
        argv = parser.attach_values(argv)
        if self.options.ignore_unknown:
            _, extras = parser.parse_known_args(argv)
        else:
            parser.parse_args(argv)
            extras = []

        self._logger.info(
            "config_source_applied",
            source=self.name,
            fields_set=len(applied),
            ignored_arguments=len(extras),
        )

    def _bind(
        self,
        parser: _FlagParser,
        ref: FieldRef,
        on_assign: Callable[[FieldRef, object], None],
    ) -> None:
        shape = ref.shape
        target = shape.target
        if target.kind not in _BINDABLE_KINDS:
            raise UnsupportedTypeError(shape, name=ref.name)

        kwargs: dict[str, Any] = {
            "dest": ref.attribute_path,
            "default": argparse.SUPPRESS,
            "help": ref.spec.help,
            "metavar": str(target).upper() if target.is_scalar else target.kind.value.upper(),
        }
        if target.kind is Kind.BOOL:
            kwargs["nargs"] = "?"
            kwargs["const"] = "true"

        option = f"--{ref.name}"
        try:
            parser.add_argument(
                option,
                action=_AssignAction,
                ref=ref,
                separator=self.options.separator,
                on_assign=on_assign,
                **kwargs,
            )
        except argparse.ArgumentError as exc:
            raise FlagParseError(str(exc)) from exc
        if target.kind is not Kind.BOOL:
            parser.value_options.add(option)

    def __repr__(self) -> str:
        return f"FlagSource({self.options!r})"


def _ignore_assignment(ref: FieldRef, value: object) -> None:
    return None


__all__ = ["DEFAULT_FLAG_TAG", "FlagOptions", "FlagSource"]
