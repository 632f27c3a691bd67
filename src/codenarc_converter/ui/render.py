"""Output rendering abstraction for the codenarc-converter CLI.

File: src/codenarc_converter/ui/render.py
Last updated: 2026-10-19

Purpose
- Print summaries and rule listings to stdout and diagnostics to stderr.
- Respect NO_COLOR environment variable and --no-color CLI flag.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from collections.abc import Sequence


def _color_allowed(no_color_flag: bool, stream: TextIO) -> bool:
    if no_color_flag or os.environ.get("NO_COLOR", ""):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


class CLIRenderer:
    """Plain-text renderer; warnings are yellow on a terminal unless color is disabled."""

    _YELLOW = "\033[33m"
    _RESET = "\033[0m"

    def __init__(
        self,
        *,
        no_color: bool = False,
        verbose: bool = False,
        stream: TextIO | None = None,
        error_stream: TextIO | None = None,
    ) -> None:
        self.verbose = verbose
        self._stream = stream
        self._error_stream = error_stream
        self._color = _color_allowed(no_color, self._err)

    @property
    def _out(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def _err(self) -> TextIO:
        return self._error_stream if self._error_stream is not None else sys.stderr

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}", file=self._out)

    def text(self, line: str) -> None:
        print(line, file=self._out)

    def lines(self, entries: Sequence[str]) -> None:
        for entry in entries:
            print(entry, file=self._out)

    def section(self, title: str) -> None:
        """Print ``title`` after a blank separator line."""

        print(f"\n{title}", file=self._out)

    def warning(self, text: str) -> None:
        message = f"warning: {text}"
        if self._color:
            message = f"{self._YELLOW}{message}{self._RESET}"
        print(message, file=self._err)


def create_renderer(*, no_color: bool = False, verbose: bool = False) -> CLIRenderer:
    return CLIRenderer(no_color=no_color, verbose=verbose)


__all__ = ["CLIRenderer", "create_renderer"]
