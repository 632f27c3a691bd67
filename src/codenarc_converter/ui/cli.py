"""Command-line interface router for codenarc-converter."""

from __future__ import annotations

import argparse
import sys
import time
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from codenarc_converter.apt import (
    SUPPORTED_FORMATS,
    AptParser,
    ParseReport,
    discover_rule_files,
    serialize_results,
)
from codenarc_converter.config import (
    ConfigLoadError,
    ConfigValidationError,
    dump_effective_config,
    load_config,
)
from codenarc_converter.main import ExitCode
from codenarc_converter.observability import correlation_scope, setup_logging, shutdown_logging
from codenarc_converter.ui.render import CLIRenderer, create_renderer
from codenarc_converter.utils.fs import atomic_write_text


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """A user-facing failure printed as ``error: <message>``; carries its exit code."""

    message: str
    exit_code: int = int(ExitCode.CONFIG_ERROR)

    def __str__(self) -> str:
        return self.message


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codenarc-converter",
        description=(
            "codenarc-converter — extract CodeNarc rule documentation from APT sources.\n\n"
            "Common workflows:\n"
            "  codenarc-converter parse                 Parse the configured APT directory\n"
            "  codenarc-converter parse --stdout a.apt  Print the merged rules of one file\n"
            "  codenarc-converter show --rule Foo       Display one rule in human form\n"
            "  codenarc-converter config                Show the effective config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to TOML config (default: ./codenarc-converter.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Log debug events.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    sources = argparse.ArgumentParser(add_help=False)
    sources.add_argument(
        "files",
        nargs="*",
        help="APT files to parse in order (default: discover them in the APT directory).",
    )
    sources.add_argument(
        "--apt-dir",
        default=None,
        help="Directory scanned for rule catalogue files (overrides sources.apt_dir).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    parse_parser = subparsers.add_parser(
        "parse",
        parents=[common, sources],
        help="Parse APT sources and write the merged rule documentation",
        description=(
            "Parse rule catalogue files, merge them in order, and serialize the result.\n\n"
            "Examples:\n"
            "  codenarc-converter parse\n"
            "  codenarc-converter parse --format yaml --output rules.yaml\n"
            "  codenarc-converter parse --stdout docs/codenarc-rules-basic.apt\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parse_parser.add_argument(
        "--format",
        dest="output_format",
        choices=SUPPORTED_FORMATS,
        default=None,
        help="Output format (overrides output.format).",
    )
    destination = parse_parser.add_mutually_exclusive_group()
    destination.add_argument(
        "--output",
        "-o",
        default=None,
        help="Output file path (overrides output.path).",
    )
    destination.add_argument(
        "--stdout",
        action="store_true",
        default=False,
        help="Print the serialized rules instead of writing a file.",
    )
    parse_parser.set_defaults(handler=_cmd_parse)

    show_parser = subparsers.add_parser(
        "show",
        parents=[common, sources],
        help="Display parsed rules in human-readable form",
        description=(
            "Parse rule catalogue files and print each rule's description and parameters.\n\n"
            "Examples:\n"
            "  codenarc-converter show\n"
            "  codenarc-converter show --rule EmptyCatchBlock\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    show_parser.add_argument("--rule", default=None, help="Only display this rule.")
    show_parser.set_defaults(handler=_cmd_show)

    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
        description=(
            "Display the effective config after merging defaults, file, and env.\n\n"
            "Examples:\n"
            "  codenarc-converter config\n"
            "  CODENARC_OUTPUT_FORMAT=toml codenarc-converter config\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    config_parser.set_defaults(handler=_cmd_config)

    return parser


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Run one subcommand and return its exit code; usage errors raise ``SystemExit``."""

    args = build_parser().parse_args(None if argv is None else list(argv))
    try:
        return int(args.handler(args))
    except CLIError as failure:
        sys.stderr.write(f"error: {failure}\n")
        return failure.exit_code


def _cmd_parse(args: argparse.Namespace) -> int:
    overrides: dict[str, object] = {}
    if args.output_format is not None:
        overrides["output.format"] = args.output_format
    if args.output is not None:
        overrides["output.path"] = _absolute(args.output)
    config = _load_effective_config(args, overrides)
    renderer = _get_renderer(args)

    report = _run_parser(args, config)
    _report_diagnostics(renderer, report)

    output = config["output"]
    text = serialize_results(report.results, format=output["format"])
    if args.stdout:
        sys.stdout.write(text)
    else:
        target = atomic_write_text(output["path"], text, create_parents=True)
        renderer.kv("Wrote", target.as_posix())
        _render_summary(renderer, report)

    return _exit_code_for(report)


def _cmd_show(args: argparse.Namespace) -> int:
    config = _load_effective_config(args, {})
    renderer = _get_renderer(args)

    report = _run_parser(args, config)
    _report_diagnostics(renderer, report)

    selected = args.rule.strip() if isinstance(args.rule, str) and args.rule.strip() else None
    if selected is not None and selected not in report.results:
        raise CLIError(f"rule not found: {selected}", exit_code=int(ExitCode.CONFIG_ERROR))

    total_index = 0
    for position, path in enumerate(report.files):
        for file_index, name in enumerate(report.rules_introduced_by(position), start=1):
            total_index += 1
            if selected is not None and name != selected:
                continue
            renderer.lines(report.results[name].describe_lines(file_index, total_index, path.name))

    _render_summary(renderer, report)
    return _exit_code_for(report)


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args, {})
    renderer = _get_renderer(args)
    renderer.text(dump_effective_config(config))
    return int(ExitCode.SUCCESS)


def _run_parser(args: argparse.Namespace, config: Mapping[str, Any]) -> ParseReport:
    sources = config["sources"]
    paths = _resolve_source_files(args, sources)

    run_id = _new_run_id()
    handle = setup_logging(
        config["observability"],
        run_id=run_id,
        level="DEBUG" if args.verbose else None,
    )
    try:
        parser = AptParser(max_workers=sources["max_workers"], encoding=sources["encoding"])
        with correlation_scope(run_id=run_id):
            return parser.parse(paths)
    finally:
        shutdown_logging(handle)


def _resolve_source_files(args: argparse.Namespace, sources: Mapping[str, Any]) -> list[Path]:
    explicit = [Path(item) for item in args.files or ()]
    if explicit:
        return explicit

    apt_dir = Path(_absolute(args.apt_dir)) if args.apt_dir else Path(sources["apt_dir"])
    discovered = discover_rule_files(apt_dir, prefix=sources["file_prefix"])
    if not discovered:
        raise CLIError(
            f"no rule documentation files matching {sources['file_prefix']}* in {apt_dir}",
            exit_code=int(ExitCode.CONFIG_ERROR),
        )
    return discovered


def _report_diagnostics(renderer: CLIRenderer, report: ParseReport) -> None:
    for failure in report.read_failures:
        renderer.warning(f"could not read {failure.path}: {failure.reason}")
    for conflict in report.conflicts:
        origin = f" in {conflict.source_file}" if conflict.source_file else ""
        renderer.warning(
            f"conflicting description for rule {conflict.rule}{origin}; keeping the first one"
        )
        if renderer.verbose:
            renderer.warning(f"  kept: {conflict.kept_description}")
            renderer.warning(f"  ignored: {conflict.rejected_description}")


def _render_summary(renderer: CLIRenderer, report: ParseReport) -> None:
    renderer.section("Summary:")
    renderer.kv("Files", len(report.files))
    renderer.kv("Rules", report.rule_count)
    renderer.kv("Rules with parameters", report.rules_with_parameters)
    renderer.kv("Parameters", report.parameter_count)
    renderer.kv("Description conflicts", len(report.conflicts))
    renderer.kv("Read failures", len(report.read_failures))


def _exit_code_for(report: ParseReport) -> int:
    if report.has_read_failures:
        return int(ExitCode.READ_FAILURE)
    return int(ExitCode.SUCCESS)


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(
        no_color=bool(getattr(args, "no_color", False)),
        verbose=bool(getattr(args, "verbose", False)),
    )


def _load_effective_config(
    args: argparse.Namespace, overrides: Mapping[str, object]
) -> dict[str, Any]:
    config_path = getattr(args, "config_path", None)
    try:
        return load_config(config_path, cli_overrides=overrides)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=int(ExitCode.CONFIG_ERROR)) from exc


def _absolute(raw: str) -> str:
    return Path(raw).expanduser().resolve().as_posix()


def _new_run_id() -> str:
    stamp = time.strftime("%Y%m%dT%H%M%SZ", time.gmtime())
    return f"{stamp}-{uuid.uuid4().hex[:8]}"


__all__ = ["CLIError", "build_parser", "run_cli"]
