"""
codenarc-converter — APT rule documentation extraction

File: src/codenarc_converter/apt/__init__.py
Last updated: 2026-10-19

Purpose
- Turns hand-written "Almost Plain Text" rule catalogues into a mapping of rule name to
  description markup and typed parameters.

Functional requirements
- Per-file parsing never fails on malformed lines; unreadable files are reported, not fatal.
- Cross-file merging keeps the first non-blank description and reports conflicts.

Non-functional requirements
- Deterministic; the same ordered inputs yield the same merged mapping and diagnostics.
"""

from codenarc_converter.apt.diagnostics import (
    AptReadError,
    DescriptionConflict,
    FileReadFailure,
    ParseReport,
)
from codenarc_converter.apt.discovery import DEFAULT_RULE_FILE_PREFIX, discover_rule_files
from codenarc_converter.apt.merge import merge_all, merge_results
from codenarc_converter.apt.parser import AptParser, ParserState
from codenarc_converter.apt.rule_entry import RuleEntry, RuleParameter
from codenarc_converter.apt.serialization import (
    SUPPORTED_FORMATS,
    deserialize_results,
    results_to_dict,
    serialize_results,
)

__all__ = [
    "DEFAULT_RULE_FILE_PREFIX",
    "SUPPORTED_FORMATS",
    "AptParser",
    "AptReadError",
    "DescriptionConflict",
    "FileReadFailure",
    "ParseReport",
    "ParserState",
    "RuleEntry",
    "RuleParameter",
    "deserialize_results",
    "discover_rule_files",
    "merge_all",
    "merge_results",
    "results_to_dict",
    "serialize_results",
]
