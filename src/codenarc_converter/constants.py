"""Stable constants shared across the converter."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1
RESULTS_SCHEMA_VERSION: Final[int] = 1

# Default source and output locations (relative to the config file directory).
DEFAULT_APT_DIR: Final[str] = "src/site/apt"
DEFAULT_RULE_FILE_PREFIX: Final[str] = "codenarc-rules-"
DEFAULT_SOURCE_ENCODING: Final[str] = "utf-8"
DEFAULT_OUTPUT_PATH: Final[str] = "target/results/rules.json"
DEFAULT_LOG_DIR: Final[str] = "logs"

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("json", "toml", "yaml")
LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_APT_DIR",
    "DEFAULT_LOG_DIR",
    "DEFAULT_OUTPUT_PATH",
    "DEFAULT_RULE_FILE_PREFIX",
    "DEFAULT_SOURCE_ENCODING",
    "LOG_LEVELS",
    "OUTPUT_FORMATS",
    "RESULTS_SCHEMA_VERSION",
]
