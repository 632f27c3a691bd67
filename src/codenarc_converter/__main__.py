"""Module entrypoint for ``python -m codenarc_converter``."""

from __future__ import annotations

from codenarc_converter.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
