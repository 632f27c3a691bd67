"""Deterministic JSON/TOML/YAML serialization of merged rule documentation."""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from typing import Final, Literal

import yaml

from codenarc_converter.apt.rule_entry import RuleEntry
from codenarc_converter.constants import OUTPUT_FORMATS, RESULTS_SCHEMA_VERSION

OutputFormat = Literal["json", "toml", "yaml"]

SUPPORTED_FORMATS: Final[tuple[str, ...]] = OUTPUT_FORMATS


def results_to_dict(results: Mapping[str, RuleEntry]) -> dict[str, object]:
    return {
        "version": RESULTS_SCHEMA_VERSION,
        "rules": [results[name].to_dict() for name in sorted(results)],
    }


def results_from_dict(data: Mapping[str, object]) -> dict[str, RuleEntry]:
    version = data.get("version")
    if version != RESULTS_SCHEMA_VERSION:
        raise ValueError(f"Unsupported results version: {version!r}")
    rules_raw = data.get("rules", [])
    if not isinstance(rules_raw, list):
        raise ValueError("results.rules must be a list")

    results: dict[str, RuleEntry] = {}
    for index, item in enumerate(rules_raw):
        if not isinstance(item, Mapping):
            raise ValueError(f"results.rules[{index}] must be an object")
        entry = RuleEntry.from_dict(item)
        if entry.name in results:
            raise ValueError(f"Duplicate rule name in results: {entry.name!r}")
        results[entry.name] = entry
    return results


def serialize_results(
    results: Mapping[str, RuleEntry],
    *,
    format: OutputFormat = "json",  # noqa: A002
) -> str:
    """Serialize rules sorted by name, parameters sorted by key."""

    payload = results_to_dict(results)
    if format == "json":
        return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
    if format == "toml":
        return _serialize_toml(results)
    if format == "yaml":
        return yaml.safe_dump(payload, sort_keys=True, allow_unicode=True, default_flow_style=False)
    raise ValueError(f"Unsupported format: {format!r}")


def deserialize_results(
    data: str,
    *,
    format: OutputFormat = "json",  # noqa: A002
) -> dict[str, RuleEntry]:
    if format == "json":
        parsed = json.loads(data)
    elif format == "toml":
        parsed = tomllib.loads(data)
    elif format == "yaml":
        parsed = yaml.safe_load(data)
    else:
        raise ValueError(f"Unsupported format: {format!r}")

    if not isinstance(parsed, Mapping):
        raise ValueError("Serialized results root must be an object")
    return results_from_dict(parsed)


def _serialize_toml(results: Mapping[str, RuleEntry]) -> str:
    lines: list[str] = [f"version = {RESULTS_SCHEMA_VERSION}"]
    for name in sorted(results):
        entry = results[name]
        lines.append("")
        lines.append("[[rules]]")
        lines.append(f"name = {_toml_value(entry.name)}")
        lines.append(f"description = {_toml_value(entry.description)}")
        lines.append(
            "parameters = "
            + _toml_value([parameter.to_dict() for parameter in entry.sorted_parameters()])
        )
    return "\n".join(lines) + "\n"


def _toml_string(value: str) -> str:
    # JSON escapes U+0000..U+001F; TOML basic strings also forbid a raw DEL.
    return json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007F")


def _toml_key(value: str) -> str:
    return _toml_string(value)


def _toml_value(value: object) -> str:
    if isinstance(value, str):
        return _toml_string(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    if isinstance(value, Mapping):
        items = [
            f"{_toml_key(key)} = {_toml_value(item)}"
            for key, item in sorted(value.items(), key=lambda pair: pair[0])
        ]
        return "{ " + ", ".join(items) + " }"
    raise ValueError(f"Unsupported TOML value type: {type(value).__name__}")


__all__ = [
    "RESULTS_SCHEMA_VERSION",
    "SUPPORTED_FORMATS",
    "OutputFormat",
    "deserialize_results",
    "results_from_dict",
    "results_to_dict",
    "serialize_results",
]
