"""
codenarc-converter — configuration schema and validation.

File: src/codenarc_converter/config/schema.py
Last updated: 2026-10-19

Purpose
- Declare the four config sections (meta, sources, output, observability), their defaults
  and the rule each field is checked against.

Functional requirements
- Report every problem at once as ``section.key: message`` issues.
- Reject unknown sections and keys so typos in ``codenarc-converter.toml`` surface.
- A schema version other than the supported one carries upgrade guidance.
"""

from __future__ import annotations

import codecs
import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from codenarc_converter.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_APT_DIR,
    DEFAULT_LOG_DIR,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_RULE_FILE_PREFIX,
    DEFAULT_SOURCE_ENCODING,
    LOG_LEVELS,
    OUTPUT_FORMATS,
)

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

# Resolved against the config file's directory by the loader.
PATH_FIELDS: Final[tuple[tuple[str, str], ...]] = (
    ("sources", "apt_dir"),
    ("output", "path"),
    ("observability", "log_dir"),
)


class MetaConfig(TypedDict):
    schema_version: int


class SourcesConfig(TypedDict):
    apt_dir: str
    file_prefix: str
    encoding: str
    max_workers: int


class OutputConfig(TypedDict):
    format: Literal["json", "toml", "yaml"]
    path: str


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_dir: str
    log_to_console: bool


class ConverterConfig(TypedDict):
    meta: MetaConfig
    sources: SourcesConfig
    output: OutputConfig
    observability: ObservabilityConfig


DEFAULT_CONFIG: Final[ConverterConfig] = {
    "meta": {"schema_version": ConfigSchemaVersion},
    "sources": {
        "apt_dir": DEFAULT_APT_DIR,
        "file_prefix": DEFAULT_RULE_FILE_PREFIX,
        "encoding": DEFAULT_SOURCE_ENCODING,
        "max_workers": 1,
    },
    "output": {"format": "json", "path": DEFAULT_OUTPUT_PATH},
    "observability": {
        "log_level": "INFO",
        "log_dir": DEFAULT_LOG_DIR,
        "log_to_console": False,
    },
}


@dataclass(frozen=True, slots=True)
class _Field:
    kind: Literal["text", "path", "encoding", "choice", "int", "bool"]
    choices: tuple[str, ...] = ()
    minimum: int | None = None


_SECTIONS: Final[Mapping[str, Mapping[str, _Field]]] = {
    "meta": {"schema_version": _Field("int", minimum=1)},
    "sources": {
        "apt_dir": _Field("path"),
        "file_prefix": _Field("text"),
        "encoding": _Field("encoding"),
        "max_workers": _Field("int", minimum=1),
    },
    "output": {
        "format": _Field("choice", choices=OUTPUT_FORMATS),
        "path": _Field("path"),
    },
    "observability": {
        "log_level": _Field("choice", choices=LOG_LEVELS),
        "log_dir": _Field("path"),
        "log_to_console": _Field("bool"),
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Normalized config, or ``None`` with the issues that prevented it."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        listing = "\n".join(f"- {issue.path}: {issue.message}" for issue in self.issues)
        super().__init__(f"invalid config:\n{listing or '- <root>: unknown validation failure'}")


def default_config() -> ConverterConfig:
    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade codenarc-converter.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade the codenarc-converter package"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deep-merge ``overlay`` onto a copy of ``base``; neither input is modified."""

    merged: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_config(current, value)
        elif isinstance(value, Mapping):
            merged[key] = merge_config({}, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: object) -> ConfigValidationResult:
    """Check ``config`` section by section; all issues are collected before returning."""

    if not isinstance(config, Mapping):
        issue = ConfigValidationIssue("<root>", f"expected object, got {type(config).__name__}")
        return ConfigValidationResult(config=None, issues=(issue,))

    issues: list[ConfigValidationIssue] = [
        ConfigValidationIssue(str(name), "unknown field")
        for name in sorted(map(str, config))
        if name not in _SECTIONS
    ]
    normalized: dict[str, Any] = {}
    for section, fields in _SECTIONS.items():
        if section not in config:
            issues.append(ConfigValidationIssue(section, "missing required field"))
            continue
        payload = config[section]
        if not isinstance(payload, Mapping):
            issues.append(
                ConfigValidationIssue(section, f"expected object, got {type(payload).__name__}")
            )
            continue
        normalized[section] = _validate_section(section, payload, fields, issues)

    version = normalized.get("meta", {}).get("schema_version")
    if version is not None and version != ConfigSchemaVersion:
        issues.append(ConfigValidationIssue("meta.schema_version", migration_guidance(version)))

    if issues:
        return ConfigValidationResult(config=None, issues=tuple(issues))
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: object) -> dict[str, Any]:
    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_section(
    section: str,
    payload: Mapping[object, object],
    fields: Mapping[str, _Field],
    issues: list[ConfigValidationIssue],
) -> dict[str, Any]:
    for key in sorted(map(str, payload)):
        if key not in fields:
            issues.append(ConfigValidationIssue(f"{section}.{key}", "unknown field"))

    checked: dict[str, Any] = {}
    for key, rule in fields.items():
        path = f"{section}.{key}"
        if key not in payload:
            issues.append(ConfigValidationIssue(path, "missing required field"))
            continue
        try:
            checked[key] = _check_value(payload[key], rule)
        except ValueError as exc:
            issues.append(ConfigValidationIssue(path, str(exc)))
    return checked


def _check_value(value: object, rule: _Field) -> object:
    if rule.kind == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"expected boolean, got {type(value).__name__}")
        return value

    if rule.kind == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected integer, got {type(value).__name__}")
        if rule.minimum is not None and value < rule.minimum:
            raise ValueError(f"must be >= {rule.minimum}")
        return value

    if not isinstance(value, str):
        raise ValueError(f"expected string, got {type(value).__name__}")
    text = value.strip()
    if not text:
        raise ValueError("must not be empty")
    if rule.kind == "path" and "\x00" in text:
        raise ValueError("must not contain NUL bytes")
    if rule.kind == "encoding":
        try:
            codecs.lookup(text)
        except LookupError:
            raise ValueError(f"unknown text encoding {text!r}") from None
    if rule.kind == "choice" and text not in rule.choices:
        expected = ", ".join(sorted(rule.choices))
        raise ValueError(f"invalid value {text!r}; expected one of: {expected}")
    return text


__all__ = [
    "DEFAULT_CONFIG",
    "PATH_FIELDS",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ConverterConfig",
    "ObservabilityConfig",
    "OutputConfig",
    "SourcesConfig",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
