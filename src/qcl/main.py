"""Executable CLI entrypoint for ``qcl``."""

from __future__ import annotations

import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING

from qcl.errors import ConfigLoadError
from qcl.ui.cli import run_cli

if TYPE_CHECKING:
    from collections.abc import Sequence


class ExitCode(IntEnum):
    """Process exit codes of the ``qcl`` command."""

    SUCCESS = 0
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 4


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and turn its outcome into an ``ExitCode`` value.

    Config failures print a one-line message; anything else prints a traceback.
    """

    try:
        return run_cli(argv)
    except SystemExit as exc:
        # argparse usage errors and --help
        return ExitCode.SUCCESS if exc.code in (None, 0) else ExitCode.CONFIG_ERROR
    except ConfigLoadError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return ExitCode.CONFIG_ERROR
    except Exception:  # noqa: BLE001 - process boundary
        traceback.print_exc(file=sys.stderr)
        return ExitCode.INTERNAL_ERROR


def main() -> None:
    """Console-script entrypoint."""

    raise SystemExit(cli_entrypoint())


__all__ = ["ExitCode", "cli_entrypoint", "main"]
