"""Output rendering for the qcl CLI.

File: src/qcl/ui/render.py
Last updated: 2026-10-18

Purpose
- Provide a thin rendering layer for CLI output.
- Respect the NO_COLOR environment variable and the --no-color flag.

Functional requirements
- Plain-text rendering must always work without external dependencies.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    if no_color_flag:
        return False
    if os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output.
    """

    def __init__(self, *, no_color: bool = False, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._color = _color_allowed(no_color, self._stream)

    def heading(self, text: str) -> None:
        """Print a heading line."""

        self._write(f"\033[1m{text}\033[0m" if self._color else text)

    def table(
        self,
        headers: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        title: str | None = None,
    ) -> None:
        """Print a formatted ASCII table."""

        if not rows:
            return

        col_count = len(headers)
        widths = [len(h) for h in headers]
        for row in rows:
            for i in range(min(len(row), col_count)):
                widths[i] = max(widths[i], len(str(row[i])))

        def _pad(cells: Sequence[str]) -> str:
            parts: list[str] = []
            for i in range(col_count):
                cell = str(cells[i]) if i < len(cells) else ""
                parts.append(cell.ljust(widths[i]))
            return "  ".join(parts).rstrip()

        if title:
            self.heading(title)
        self._write(f"  {_pad(list(headers))}")
        self._write(f"  {'  '.join('-' * w for w in widths)}")
        for row in rows:
            self._write(f"  {_pad(list(row))}")

    def _write(self, line: str) -> None:
        self._stream.write(line + "\n")


def create_renderer(*, no_color: bool = False, stream: TextIO | None = None) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(no_color=no_color, stream=stream)


__all__ = ["CLIRenderer", "create_renderer"]
