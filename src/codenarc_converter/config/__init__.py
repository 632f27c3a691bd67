"""
codenarc-converter config package public API.

File: src/codenarc_converter/config/__init__.py
Last updated: 2026-10-19

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``codenarc-converter.toml`` + ``CODENARC_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from codenarc_converter.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ENV_VARIABLES,
    ConfigLoadError,
    dump_effective_config,
    load_config,
    normalize_paths,
)
from codenarc_converter.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    ConverterConfig,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ENV_VARIABLES",
    "PATH_FIELDS",
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "ConverterConfig",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "load_config",
    "merge_config",
    "migration_guidance",
    "normalize_paths",
    "validate_config",
]
