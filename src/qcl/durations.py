"""
qcl — duration text codec

File: src/qcl/durations.py
Last updated: 2026-10-18

Purpose
- Parse duration strings such as ``"13s"``, ``"1h30m"`` or ``"-1.5ms"`` into ``timedelta``.
- Render ``timedelta`` values back into the same canonical form.

Functional requirements
- Accepted units: ``ns``, ``us``, ``µs``, ``μs``, ``ms``, ``s``, ``m``, ``h``.
- A bare ``"0"`` is the only value allowed without a unit.
- ``parse_duration(format_duration(d)) == d`` for microsecond-resolution values.

Non-functional requirements
- Integer arithmetic only; no float rounding drift.
"""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Final

_NANOS_PER_UNIT: Final[dict[str, int]] = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_MICROS_PER_SECOND: Final[int] = 1_000_000
_MICROS_PER_MINUTE: Final[int] = 60 * _MICROS_PER_SECOND
_MICROS_PER_HOUR: Final[int] = 60 * _MICROS_PER_MINUTE
_MAX_MICROS: Final[int] = timedelta.max // timedelta(microseconds=1)
_MIN_MICROS: Final[int] = timedelta.min // timedelta(microseconds=1)

_COMPONENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?P<whole>[0-9]*)(?:\.(?P<frac>[0-9]*))?(?P<unit>ns|us|µs|μs|ms|s|m|h)"
)


class DurationParseError(ValueError):
    """Raised when text is not a valid duration."""


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of decimal numbers with unit suffixes."""

    original = text
    sign = 1
    if text[:1] in {"+", "-"}:
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise DurationParseError(f"invalid duration {original!r}")

    total_nanos = 0
    position = 0
    while position < len(text):
        match = _COMPONENT_PATTERN.match(text, position)
        if match is None:
            if text[position].isdigit() or text[position] == ".":
                raise DurationParseError(f"missing unit in duration {original!r}")
            raise DurationParseError(f"invalid duration {original!r}")
        whole = match.group("whole")
        frac = match.group("frac") or ""
        if not whole and not frac:
            raise DurationParseError(f"invalid duration {original!r}")
        unit = _NANOS_PER_UNIT[match.group("unit")]
        total_nanos += int(whole or "0") * unit
        if frac:
            total_nanos += int(frac) * unit // 10 ** len(frac)
        position = match.end()

    micros = sign * (total_nanos // 1000)
    if not _MIN_MICROS <= micros <= _MAX_MICROS:
        raise DurationParseError(f"duration out of range {original!r}")
    return timedelta(microseconds=micros)


def format_duration(value: timedelta) -> str:
    """Render ``value`` as ``"72h3m0.5s"``-style text; sub-second values use ms or µs."""

    micros = value // timedelta(microseconds=1)
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)

    if micros < _MICROS_PER_SECOND:
        if micros < 1000:
            return f"{sign}{micros}µs"
        return f"{sign}{_decimal(micros, 1000)}ms"

    hours, remainder = divmod(micros, _MICROS_PER_HOUR)
    minutes, remainder = divmod(remainder, _MICROS_PER_MINUTE)
    seconds = _decimal(remainder, _MICROS_PER_SECOND) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds


def _decimal(value: int, scale: int) -> str:
    whole, frac = divmod(value, scale)
    if not frac:
        return str(whole)
    digits = str(frac).rjust(len(str(scale)) - 1, "0").rstrip("0")
    return f"{whole}.{digits}"


__all__ = ["DurationParseError", "format_duration", "parse_duration"]
