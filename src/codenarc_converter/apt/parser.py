"""
codenarc-converter — APT rule catalogue parser

File: src/codenarc_converter/apt/parser.py
Last updated: 2026-10-19

Purpose
- Recover rule names, description markup, and parameter tables from "Almost Plain Text"
  rule catalogue files.

Parsing strategy
- One pass per file, one line at a time, driven by an explicit ``ParserState``.
- Rule titles are bullets at column zero; ``* {{...}}`` list items are not titles.
- Parameter tables are sliced at the column offsets recorded from their ``*---+---+---+``
  header separator; later rows are never re-measured.

Functional requirements
- Malformed lines never raise; they are treated as prose or ignored.
- A rule title seen again in the same file resumes the entry built so far.
- An unreadable file is reported and skipped; the remaining files are still parsed.

Non-functional requirements
- Each file parse owns its buffers; cross-file merging runs in input order.
"""

from __future__ import annotations

import contextvars
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

import structlog

from codenarc_converter.apt.diagnostics import AptReadError, FileReadFailure, ParseReport
from codenarc_converter.apt.merge import merge_results
from codenarc_converter.apt.rule_entry import RuleEntry, RuleParameter
from codenarc_converter.apt.text_cleanup import (
    LIST_PREFIX,
    RULE_PREFIX,
    clean_default_value,
    clean_description,
    clean_example,
    clean_parameter,
    extract_rule_name,
    is_example_separator,
    is_header_row,
    is_parameter_content,
    is_parameter_separator,
    is_parameter_table_start,
    is_valid_description_line,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_DASH_RUN_RE: Final[re.Pattern[str]] = re.compile(r"-+")
_PRE_OPEN: Final[str] = "<pre>\n"
_PRE_CLOSE: Final[str] = "</pre>\n"
_PARAGRAPH_OPEN: Final[str] = "<p>"
_PARAGRAPH_CLOSE: Final[str] = "</p>\n"


class ParserState(StrEnum):
    OUTSIDE = "outside"
    IN_DESCRIPTION = "in_description"
    IN_EXAMPLE = "in_example"
    IN_PARAMETER_TABLE = "in_parameter_table"


@dataclass(frozen=True, slots=True)
class _ColumnSplits:
    """Offsets just past the ``*`` and the next two ``+`` of a table header separator."""

    key_start: int
    description_start: int
    default_start: int

    @classmethod
    def from_header(cls, line: str) -> _ColumnSplits:
        key_start = line.index("*") + 1
        description_start = line.index("+", key_start) + 1
        default_start = line.index("+", description_start) + 1
        return cls(key_start, description_start, default_start)

    def slice(self, line: str) -> tuple[str, str, str]:
        return (
            line[self.key_start : self.description_start - 1],
            line[self.description_start : self.default_start - 1],
            line[self.default_start : len(line) - 1],
        )


@dataclass(slots=True)
class _FileParse:
    results: dict[str, RuleEntry] = field(default_factory=dict)
    state: ParserState = ParserState.OUTSIDE
    entry: RuleEntry | None = None
    paragraph_open: bool = False
    parameter: RuleParameter = field(default_factory=RuleParameter)
    splits: _ColumnSplits | None = None


class AptParser:
    """Line-state parser for APT rule catalogue files."""

    def __init__(
        self,
        *,
        logger: Any | None = None,
        max_workers: int = 1,
        encoding: str = "utf-8",
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._logger = logger if logger is not None else structlog.get_logger(__name__)
        self._max_workers = max_workers
        self._encoding = encoding

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def encoding(self) -> str:
        return self._encoding

    def parse(self, paths: Sequence[Path]) -> ParseReport:
        """
        Parse ``paths`` and merge their rules in the given order.

        Earlier files win description conflicts. Unreadable files are recorded as
        ``FileReadFailure`` entries and contribute nothing.
        """

        ordered = [Path(path) for path in paths]
        report = ParseReport(files=list(ordered))

        outcomes: list[dict[str, RuleEntry] | AptReadError]
        if self._max_workers > 1 and len(ordered) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                # Each worker runs in a copy of the caller's context so bound
                # correlation fields reach its log records.
                futures = [
                    executor.submit(contextvars.copy_context().run, self._parse_file_outcome, path)
                    for path in ordered
                ]
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [self._parse_file_outcome(path) for path in ordered]

        for position, (path, outcome) in enumerate(zip(ordered, outcomes, strict=True)):
            if isinstance(outcome, AptReadError):
                report.read_failures.append(FileReadFailure(path=path, reason=outcome.reason))
                self._logger.warning(
                    "apt_file_read_failed",
                    source_file=path.as_posix(),
                    reason=outcome.reason,
                )
                continue
            for name in outcome:
                report.rule_sources.setdefault(name, []).append(position)
            report.conflicts.extend(
                merge_results(
                    report.results,
                    outcome,
                    source_file=path.name,
                    logger=self._logger,
                )
            )

        return report

    def parse_file(self, path: Path) -> dict[str, RuleEntry]:
        # Text-mode iteration splits on \n, \r and \r\n only; form feeds and other
        # Unicode line breaks stay inside the line.
        try:
            with Path(path).open(encoding=self._encoding) as stream:
                lines = [line.removesuffix("\n") for line in stream]
        except (OSError, UnicodeDecodeError) as exc:
            raise AptReadError(path=Path(path), reason=str(exc)) from exc

        results = self.parse_lines(lines, source_file=Path(path).name)
        self._logger.info(
            "apt_file_parsed",
            source_file=Path(path).as_posix(),
            rule_count=len(results),
        )
        return results

    def parse_lines(
        self,
        lines: Iterable[str],
        *,
        source_file: str | None = None,
    ) -> dict[str, RuleEntry]:
        """Run the state machine over one file's lines and return its rules by name."""

        session = _FileParse()
        for raw_line in lines:
            self._consume(session, raw_line.rstrip("\r\n"), source_file)
        if session.entry is not None:
            _finalize_rule(session)
        return session.results

    def _parse_file_outcome(self, path: Path) -> dict[str, RuleEntry] | AptReadError:
        try:
            return self.parse_file(path)
        except AptReadError as exc:
            return exc

    def _consume(self, session: _FileParse, full_line: str, source_file: str | None) -> None:
        line = full_line.strip()

        if (
            session.entry is not None
            and full_line.startswith(RULE_PREFIX)
            and not line.startswith(LIST_PREFIX)
        ):
            _finalize_rule(session)

        if session.entry is None:
            if line.startswith(RULE_PREFIX):
                self._open_rule(session, line, source_file)
            return

        entry = session.entry
        state = session.state

        if state is not ParserState.IN_EXAMPLE and is_example_separator(line):
            if state is ParserState.IN_PARAMETER_TABLE:
                _flush_parameter(session)
            _close_paragraph(session)
            entry.append_description(_PRE_OPEN)
            session.state = ParserState.IN_EXAMPLE
        elif state is ParserState.IN_DESCRIPTION and is_valid_description_line(line):
            _add_prose_line(session, line)
        elif state is ParserState.IN_EXAMPLE and is_example_separator(line):
            entry.append_description(_PRE_CLOSE)
            session.state = ParserState.IN_DESCRIPTION
        elif state is ParserState.IN_EXAMPLE:
            entry.append_description(clean_example(full_line) + "\n")
        elif state is ParserState.IN_DESCRIPTION and is_parameter_table_start(line):
            _close_paragraph(session)
            session.splits = _ColumnSplits.from_header(line)
            session.parameter = RuleParameter()
            session.state = ParserState.IN_PARAMETER_TABLE
        elif state is ParserState.IN_PARAMETER_TABLE and is_parameter_content(line):
            _add_table_row(session, line)
        elif state is ParserState.IN_PARAMETER_TABLE and is_parameter_separator(line):
            _flush_parameter(session)
        elif state is ParserState.IN_PARAMETER_TABLE:
            _flush_parameter(session)
            session.splits = None
            session.state = ParserState.IN_DESCRIPTION

    def _open_rule(self, session: _FileParse, line: str, source_file: str | None) -> None:
        name = extract_rule_name(line)
        if name is None:
            return

        existing = session.results.get(name)
        if existing is not None:
            session.entry = existing
            self._logger.debug("apt_rule_reopened", rule=name, source_file=source_file)
        else:
            session.entry = RuleEntry(name=name)
            self._logger.debug("apt_rule_opened", rule=name, source_file=source_file)
        session.state = ParserState.IN_DESCRIPTION


def _add_prose_line(session: _FileParse, line: str) -> None:
    assert session.entry is not None
    if not line:
        _close_paragraph(session)
        return

    text = clean_description(line)
    if session.paragraph_open:
        session.entry.append_description(f" {text}")
    else:
        session.entry.append_description(_PARAGRAPH_OPEN + text)
        session.paragraph_open = True


def _close_paragraph(session: _FileParse) -> None:
    if session.paragraph_open and session.entry is not None:
        session.entry.append_description(_PARAGRAPH_CLOSE)
    session.paragraph_open = False


def _add_table_row(session: _FileParse, line: str) -> None:
    assert session.splits is not None
    key_field, description_field, default_field = session.splits.slice(line)
    if is_header_row(key_field):
        return

    key = key_field.strip()
    description = description_field.strip()
    default_value = default_field.strip()

    parameter = session.parameter
    if key:
        parameter = parameter.with_expanded_key(_DASH_RUN_RE.sub("", key))
    if default_value and not parameter.has_default_value():
        parameter = parameter.with_default_value(clean_default_value(default_value))
    if description:
        parameter = parameter.with_expanded_description(clean_parameter(description))
    session.parameter = parameter


def _flush_parameter(session: _FileParse) -> None:
    if session.entry is not None:
        session.entry.add_parameter(session.parameter)
    session.parameter = RuleParameter()


def _finalize_rule(session: _FileParse) -> None:
    entry = session.entry
    assert entry is not None
    _close_paragraph(session)
    if session.state is ParserState.IN_PARAMETER_TABLE:
        _flush_parameter(session)
    session.results[entry.name] = entry
    session.entry = None
    session.splits = None
    session.parameter = RuleParameter()
    session.state = ParserState.OUTSIDE


__all__ = ["AptParser", "ParserState"]
