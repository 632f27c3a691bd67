"""Process entrypoint: run the CLI and map every outcome onto an ``ExitCode``."""

from __future__ import annotations

import sys
import traceback
from collections.abc import Sequence
from enum import IntEnum

from codenarc_converter.config import ConfigLoadError, ConfigValidationError


class ExitCode(IntEnum):
    SUCCESS = 0
    READ_FAILURE = 1
    CONFIG_ERROR = 2
    INTERNAL_ERROR = 3


def cli_entrypoint(argv: Sequence[str] | None = None) -> int:
    """Used by ``python -m codenarc_converter`` and the ``codenarc-converter`` script."""

    # ui.cli imports ExitCode from this module.
    from codenarc_converter.ui.cli import run_cli

    try:
        return _exit_code_from(run_cli(argv))
    except SystemExit as exc:
        return _exit_code_from(exc.code)
    except (ConfigLoadError, ConfigValidationError, OSError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return int(ExitCode.CONFIG_ERROR)
    except Exception:  # noqa: BLE001 - last handler before the interpreter
        traceback.print_exc(file=sys.stderr)
        return int(ExitCode.INTERNAL_ERROR)


def _exit_code_from(code: object) -> int:
    if code is None:
        return int(ExitCode.SUCCESS)
    if isinstance(code, int) and code in ExitCode._value2member_map_:
        return int(code)
    if isinstance(code, str) and code.strip():
        sys.stderr.write(code.strip() + "\n")
    return int(ExitCode.INTERNAL_ERROR)


__all__ = ["ExitCode", "cli_entrypoint"]
