"""
codenarc-converter — rule documentation data model

File: src/codenarc_converter/apt/rule_entry.py
Last updated: 2026-10-19

Purpose
- Hold one documented rule: its name, accumulated description markup, and parameters.

Functional requirements
- Parameters are value objects; a set never holds two equal key/description/default triples.
- Empty parameters (all fields blank) are never stored on an entry.

Non-functional requirements
- Deterministic ordering helpers for rendering and serialization.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Final

_SEPARATOR_LINE: Final[str] = "=" * 42
_SUBSEPARATOR_LINE: Final[str] = "-" * 42


def _is_blank(value: str) -> bool:
    return not value.strip()


@dataclass(frozen=True, slots=True)
class RuleParameter:
    """Typed rule parameter recovered from a three-column documentation table."""

    key: str = ""
    description: str = ""
    default_value: str = ""

    def is_empty(self) -> bool:
        return _is_blank(self.key) and _is_blank(self.description) and _is_blank(self.default_value)

    def has_default_value(self) -> bool:
        return not _is_blank(self.default_value)

    def with_expanded_key(self, fragment: str) -> RuleParameter:
        return replace(self, key=self.key + fragment)

    def with_expanded_description(self, fragment: str) -> RuleParameter:
        if not self.description:
            return replace(self, description=fragment)
        return replace(self, description=f"{self.description} {fragment}")

    def with_default_value(self, value: str) -> RuleParameter:
        return replace(self, default_value=value)

    def sort_key(self) -> tuple[str, str, str]:
        return (self.key, self.description, self.default_value)

    def to_dict(self) -> dict[str, str]:
        return {
            "key": self.key,
            "description": self.description,
            "default_value": self.default_value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> RuleParameter:
        values: dict[str, str] = {}
        for name in ("key", "description", "default_value"):
            raw = data.get(name, "")
            if not isinstance(raw, str):
                raise ValueError(f"RuleParameter.{name} must be a string")
            values[name] = raw
        return cls(**values)

    def __str__(self) -> str:
        short_description = self.description
        if len(short_description) > 30:
            short_description = short_description[:30] + "..."
        return (
            f"RuleParameter [key={self.key}, defaultValue={self.default_value}, "
            f"description={short_description}]"
        )


@dataclass(slots=True)
class RuleEntry:
    """Mutable accumulator for one rule while documentation files are parsed and merged."""

    name: str
    parameters: set[RuleParameter] = field(default_factory=set)
    raw_description: str = ""

    @property
    def description(self) -> str:
        return self.raw_description.strip()

    def append_description(self, text: str) -> None:
        self.raw_description += text

    def replace_description(self, other: RuleEntry) -> None:
        self.raw_description = other.raw_description

    def add_parameter(self, parameter: RuleParameter) -> bool:
        """Store ``parameter`` unless it is empty or already present; report growth."""

        if parameter.is_empty() or parameter in self.parameters:
            return False
        self.parameters.add(parameter)
        return True

    def has_parameters(self) -> bool:
        return bool(self.parameters)

    def sorted_parameters(self) -> list[RuleParameter]:
        return sorted(self.parameters, key=lambda parameter: parameter.sort_key())

    def describe_lines(self, rule_index: int, total_index: int, filename: str) -> list[str]:
        lines = [
            _SEPARATOR_LINE,
            f"Rule #{total_index} : {self.name} ({filename} #{rule_index})",
        ]
        if self.description:
            lines.append(_SUBSEPARATOR_LINE)
            lines.extend(self.description.split("\n"))
        if self.parameters:
            lines.append(_SUBSEPARATOR_LINE)
            lines.append("Parameters: ")
            for parameter in self.sorted_parameters():
                lines.append(f'  * "{parameter.key}"')
                lines.append(f"    - defaultValue: {parameter.default_value}")
                lines.append(f"    - description: {parameter.description}")
        return lines

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": [parameter.to_dict() for parameter in self.sorted_parameters()],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> RuleEntry:
        name = data.get("name")
        description = data.get("description", "")
        parameters_raw = data.get("parameters", [])
        if not isinstance(name, str) or not name.strip():
            raise ValueError("RuleEntry.name must be a non-empty string")
        if not isinstance(description, str):
            raise ValueError("RuleEntry.description must be a string")
        if not isinstance(parameters_raw, list):
            raise ValueError("RuleEntry.parameters must be a list")

        entry = cls(name=name.strip(), raw_description=description)
        for index, item in enumerate(parameters_raw):
            if not isinstance(item, Mapping):
                raise ValueError(f"RuleEntry.parameters[{index}] must be an object")
            entry.add_parameter(RuleParameter.from_dict(item))
        return entry


__all__ = ["RuleEntry", "RuleParameter"]
