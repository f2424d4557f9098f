"""
qcl — environment variable source

File: src/qcl/sources/env.py
Last updated: 2026-10-18

Purpose
- Populate a config object from process environment variables.

What should be included in this file
- Name mapping: uppercase words joined with ``_``, optional prefix.
- Lookup against an injectable environ mapping (``os.environ`` by default).
- Structured decision logs for each applied field.

Functional requirements
- A prefix without a trailing ``_`` gets one appended.
- Empty values count as absent and leave the field untouched.
- The first coercion failure stops the walk and propagates.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar, Final

import structlog

from qcl.coerce import DEFAULT_SEPARATOR, coerce
from qcl.errors import ConfigTypeError
from qcl.redaction import redact_for_log
from qcl.shapes import is_config_instance
from qcl.walker import Naming, walk

DEFAULT_ENV_TAG: Final[str] = "env"
ENV_WORD_SEPARATOR: Final[str] = "_"


@dataclass(frozen=True, slots=True)
class EnvOptions:
    """Immutable options for one environment source."""

    prefix: str = ""
    tag: str = DEFAULT_ENV_TAG
    separator: str = DEFAULT_SEPARATOR

    @property
    def normalized_prefix(self) -> str:
        if self.prefix and not self.prefix.endswith(ENV_WORD_SEPARATOR):
            return self.prefix + ENV_WORD_SEPARATOR
        return self.prefix

    def naming(self) -> Naming:
        return Naming(
            tag=self.tag,
            separator=ENV_WORD_SEPARATOR,
            transform=str.upper,
            prefix=self.normalized_prefix,
        )


class EnvSource:
    """Load fields from environment variables such as ``APP_DB_HOST``."""

    name: ClassVar[str] = "env"

    def __init__(
        self,
        *,
        prefix: str = "",
        tag: str = DEFAULT_ENV_TAG,
        separator: str = DEFAULT_SEPARATOR,
        environ: Mapping[str, str] | None = None,
        logger: Any | None = None,
    ) -> None:
        self.options = EnvOptions(prefix=prefix, tag=tag, separator=separator)
        self._environ = environ
        self._logger = logger if logger is not None else structlog.get_logger(__name__)

    def load(self, config: object) -> None:
        if not is_config_instance(config):
            raise ConfigTypeError(config)

        environ = os.environ if self._environ is None else self._environ
        separator = self.options.separator
        applied = 0
        for ref in walk(config, self.options.naming()):
            raw = environ.get(ref.name)
            if not raw:
                continue
            value = ref.update(
                lambda current, raw=raw, ref=ref: coerce(
                    ref.shape, raw, current=current, separator=separator, name=ref.name
                )
            )
            applied += 1
            self._logger.debug(
                "config_field_set",
                source=self.name,
                key=ref.name,
                field=ref.attribute_path,
                value=redact_for_log(ref.name, value),
            )

        self._logger.info(
            "config_source_applied",
            source=self.name,
            prefix=self.options.normalized_prefix,
            fields_set=applied,
        )

    def __repr__(self) -> str:
        return f"EnvSource({self.options!r})"


__all__ = ["DEFAULT_ENV_TAG", "EnvOptions", "EnvSource"]
