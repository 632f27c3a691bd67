"""
codenarc-converter — cross-file rule merger

File: src/codenarc_converter/apt/merge.py
Last updated: 2026-10-19

Purpose
- Fold per-file rule mappings into one accumulator keyed by rule name.

Functional requirements
- Parameters are unioned by structural equality.
- The first non-blank description wins; later non-blank descriptions are reported as conflicts.

Non-functional requirements
- Source entries are never aliased into or mutated by the accumulator.
- Results depend only on the order in which source mappings are folded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from codenarc_converter.apt.diagnostics import DescriptionConflict
from codenarc_converter.apt.rule_entry import RuleEntry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, MutableMapping


def merge_results(
    accumulator: MutableMapping[str, RuleEntry],
    source: Mapping[str, RuleEntry],
    *,
    source_file: str | None = None,
    logger: Any | None = None,
) -> list[DescriptionConflict]:
    """Merge ``source`` into ``accumulator`` in place and return the conflicts found."""

    log = logger if logger is not None else structlog.get_logger(__name__)
    conflicts: list[DescriptionConflict] = []

    for name, source_entry in source.items():
        target = accumulator.get(name)
        if target is None:
            target = RuleEntry(name=name)

        for parameter in source_entry.parameters:
            target.add_parameter(parameter)

        if not target.description and source_entry.description:
            target.replace_description(source_entry)
        elif target.description and source_entry.description:
            conflict = DescriptionConflict(
                rule=name,
                kept_description=target.description,
                rejected_description=source_entry.description,
                source_file=source_file,
            )
            conflicts.append(conflict)
            log.info(
                "apt_description_conflict",
                rule=name,
                source_file=source_file,
                kept_description=conflict.kept_description,
                rejected_description=conflict.rejected_description,
            )

        accumulator[name] = target

    return conflicts


def merge_all(
    mappings: Iterable[Mapping[str, RuleEntry]],
    *,
    logger: Any | None = None,
) -> tuple[dict[str, RuleEntry], list[DescriptionConflict]]:
    merged: dict[str, RuleEntry] = {}
    conflicts: list[DescriptionConflict] = []
    for mapping in mappings:
        conflicts.extend(merge_results(merged, mapping, logger=logger))
    return merged, conflicts


__all__ = ["merge_all", "merge_results"]
