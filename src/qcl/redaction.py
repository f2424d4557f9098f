"""
qcl — log and dump masking

File: src/qcl/redaction.py
Last updated: 2026-10-18

Purpose
- Mask values of fields whose names look like credentials before they reach logs
  or effective-config dumps.

Functional requirements
- Name matching is case-insensitive and works for env (``DB_PASSWORD``), flag
  (``db.password``) and attribute (``db_password``) spellings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Final

REDACTED_VALUE: Final[str] = "***REDACTED***"

DEFAULT_SENSITIVE_KEY_DENYLIST: Final[frozenset[str]] = frozenset(
    {
        "access_token",
        "api_key",
        "apikey",
        "auth_token",
        "authorization",
        "client_secret",
        "credential",
        "credentials",
        "passphrase",
        "password",
        "passwd",
        "private_key",
        "refresh_token",
        "secret",
        "secret_key",
        "token",
    }
)

_DEFAULT_SENSITIVE_KEY_SUFFIXES: Final[tuple[str, ...]] = (
    "_api_key",
    "_access_token",
    "_auth_token",
    "_client_secret",
    "_private_key",
    "_password",
    "_passwd",
    "_secret",
    "_token",
)

_SEPARATORS: Final[re.Pattern[str]] = re.compile(r"[.\-\s]+")


def is_sensitive_key(key: str) -> bool:
    """Return whether ``key`` (any source spelling) names a credential."""

    normalized = _normalize_key(key)
    if not normalized:
        return False
    if normalized in DEFAULT_SENSITIVE_KEY_DENYLIST:
        return True
    return normalized.endswith(_DEFAULT_SENSITIVE_KEY_SUFFIXES)


def redact_for_log(key: str, value: object) -> object:
    """Return ``value`` or the redaction marker when ``key`` is sensitive."""

    return REDACTED_VALUE if is_sensitive_key(key) else value


def redact_structure(payload: Mapping[str, object]) -> dict[str, object]:
    """Deep-copy ``payload`` replacing values under sensitive keys."""

    redacted: dict[str, object] = {}
    for key, value in payload.items():
        if is_sensitive_key(key):
            redacted[key] = REDACTED_VALUE
        elif isinstance(value, Mapping):
            redacted[key] = redact_structure(value)
        else:
            redacted[key] = value
    return redacted


def _normalize_key(key: str) -> str:
    return _SEPARATORS.sub("_", key.strip().lower())


__all__ = [
    "DEFAULT_SENSITIVE_KEY_DENYLIST",
    "REDACTED_VALUE",
    "is_sensitive_key",
    "redact_for_log",
    "redact_structure",
]
