"""UI package exports for the CLI and plain-text rendering."""

from codenarc_converter.ui.cli import CLIError, build_parser, run_cli
from codenarc_converter.ui.render import CLIRenderer, create_renderer

__all__ = [
    "CLIError",
    "CLIRenderer",
    "build_parser",
    "create_renderer",
    "run_cli",
]
