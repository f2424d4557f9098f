"""
qcl — load orchestration

File: src/qcl/loader.py
Last updated: 2026-10-18

Purpose
- Apply configured sources, in order, to one caller-owned config object.
- Produce redacted, deterministic views of the effective config.

What should be included in this file
- ``load`` entry point and the ``Source`` protocol.
- Default source order: environment first, then flags.

Functional requirements
- Reject targets that are not dataclass instances before any source runs.
- Source names are unique within one call; ``order`` refers to them.
- Stop at the first failing source and re-raise its error.
- Later sources overwrite scalars; lists and dicts accumulate.

Non-functional requirements
- Keep dumps deterministic and reproducible.
"""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Any, Protocol, TypeVar

import structlog

from qcl.durations import format_duration
from qcl.errors import ConfigLoadError, ConfigTypeError
from qcl.redaction import redact_structure
from qcl.shapes import is_config_instance
from qcl.sources.env import EnvSource
from qcl.sources.flags import FlagSource

T = TypeVar("T")


class Source(Protocol):
    """Anything that can populate a config object in place."""

    name: str

    def load(self, config: object) -> None: ...


def default_sources() -> tuple[Source, ...]:
    """Environment variables, then command-line flags."""

    return (EnvSource(), FlagSource())


def load(
    config: T,
    *sources: Source,
    order: Sequence[str] | None = None,
    logger: Any | None = None,
) -> T:
    """Populate ``config`` from ``sources`` (default: env then flags) and return it."""

    log = logger if logger is not None else structlog.get_logger(__name__)
    if not is_config_instance(config):
        raise ConfigTypeError(config)

    plan = _resolve_plan(sources or default_sources(), order)
    target = type(config).__name__
    log.info("config_load_started", target=target, sources=[source.name for source in plan])

    for source in plan:
        try:
            source.load(config)
        except ConfigLoadError as exc:
            log.info(
                "config_load_failed",
                target=target,
                source=source.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

    log.info("config_load_finished", target=target)
    return config


def effective_config(config: object) -> dict[str, Any]:
    """Return a redacted plain-data view of ``config`` suitable for logging."""

    if not is_config_instance(config):
        raise ConfigTypeError(config)
    return redact_structure(_plain(config))


def dump_effective_config(config: object) -> str:
    """Return deterministic JSON dump of redacted effective config."""

    return json.dumps(
        effective_config(config), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def _resolve_plan(sources: Sequence[Source], order: Sequence[str] | None) -> list[Source]:
    by_name: dict[str, Source] = {}
    for source in sources:
        if source.name in by_name:
            raise ConfigLoadError(f"duplicate config source name: {source.name}")
        by_name[source.name] = source

    if order is None:
        return list(sources)

    unknown = [name for name in order if name not in by_name]
    if unknown:
        raise ConfigLoadError(f"unknown config source(s) in order: {', '.join(unknown)}")
    return [by_name[name] for name in dict.fromkeys(order)]


def _plain(value: object) -> Any:
    if is_config_instance(value):
        return {
            item.name: _plain(getattr(value, item.name))
            for item in dataclasses.fields(value)  # type: ignore[arg-type]
            if not item.name.startswith("_")
        }
    if isinstance(value, timedelta):
        return format_duration(value)
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


__all__ = [
    "Source",
    "default_sources",
    "dump_effective_config",
    "effective_config",
    "load",
]
