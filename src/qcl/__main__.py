"""Module entrypoint for ``python -m qcl``."""

from __future__ import annotations

from qcl.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
