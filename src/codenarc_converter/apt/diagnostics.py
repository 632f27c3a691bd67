"""Structured parse diagnostics returned alongside extracted rule documentation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from codenarc_converter.apt.rule_entry import RuleEntry


class AptReadError(Exception):
    """A documentation source could not be read or decoded."""

    path: Path
    reason: str

    def __init__(self, *, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: failed to read documentation source ({reason})")


@dataclass(frozen=True, slots=True)
class FileReadFailure:
    path: Path
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path.as_posix(), "reason": self.reason}


@dataclass(frozen=True, slots=True)
class DescriptionConflict:
    """Two sources described the same rule; the first description was kept."""

    rule: str
    kept_description: str
    rejected_description: str
    source_file: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "rule": self.rule,
            "kept_description": self.kept_description,
            "rejected_description": self.rejected_description,
            "source_file": self.source_file,
        }


@dataclass(slots=True)
class ParseReport:
    """Outcome of parsing an ordered batch of documentation files."""

    results: dict[str, RuleEntry] = field(default_factory=dict)
    files: list[Path] = field(default_factory=list)
    read_failures: list[FileReadFailure] = field(default_factory=list)
    conflicts: list[DescriptionConflict] = field(default_factory=list)
    # Rule name -> positions in ``files`` of every file that defined it, in order.
    rule_sources: dict[str, list[int]] = field(default_factory=dict)

    @property
    def has_read_failures(self) -> bool:
        return bool(self.read_failures)

    @property
    def rule_count(self) -> int:
        return len(self.results)

    @property
    def parameter_count(self) -> int:
        return sum(len(entry.parameters) for entry in self.results.values())

    @property
    def rules_with_parameters(self) -> int:
        return sum(1 for entry in self.results.values() if entry.has_parameters())

    def first_source(self, rule: str) -> Path | None:
        positions = self.rule_sources.get(rule)
        return self.files[positions[0]] if positions else None

    def rules_introduced_by(self, position: int) -> list[str]:
        """Names of the rules first defined by ``files[position]``, sorted."""

        return sorted(
            name for name, positions in self.rule_sources.items() if positions[0] == position
        )


__all__ = ["AptReadError", "DescriptionConflict", "FileReadFailure", "ParseReport"]
