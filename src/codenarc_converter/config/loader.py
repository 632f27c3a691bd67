"""
codenarc-converter — runtime config loader.

File: src/codenarc_converter/config/loader.py
Last updated: 2026-10-19

Purpose
- Build the effective config from four layers: CLI > env (``CODENARC_*``) > TOML file > defaults.

Functional requirements
- Every overridable setting has exactly one environment variable, listed in ``ENV_VARIABLES``.
- Env values are coerced to the type of the setting's default before validation.
- Relative paths resolve against the directory holding the config file.
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from codenarc_converter.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    assert_valid_config,
    default_config,
    merge_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "codenarc-converter.toml"
ENV_PREFIX: Final[str] = "CODENARC_"

# meta.schema_version describes the file itself and is not overridable.
ENV_VARIABLES: Final[Mapping[str, tuple[str, str]]] = {
    f"{ENV_PREFIX}{section.upper()}_{key.upper()}": (section, key)
    for section in ("sources", "output", "observability")
    for key in DEFAULT_CONFIG[section]
}

_TRUE_WORDS: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoadError(ValueError):
    """The config file or an override could not be read or coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    Without ``config_path`` the loader looks for ``codenarc-converter.toml`` in the working
    directory and silently uses defaults when it is absent. An explicit path must exist.
    ``cli_overrides`` maps dotted keys (``output.format``) to values; ``None`` values are ignored.
    """

    if config_path is None:
        path = (Path.cwd() / DEFAULT_CONFIG_FILE).resolve()
    else:
        path = Path(config_path).expanduser().resolve()

    effective: dict[str, Any] = default_config()  # type: ignore[assignment]
    for layer in (
        _read_config_file(path, required=config_path is not None),
        _env_layer(os.environ if environ is None else environ),
        _cli_layer(cli_overrides or {}),
    ):
        effective = merge_config(effective, layer)

    return assert_valid_config(normalize_paths(effective, base_dir=path.parent))


def normalize_paths(config: Mapping[str, object], *, base_dir: Path) -> dict[str, Any]:
    """Copy ``config`` with every path field made absolute against ``base_dir``."""

    normalized = merge_config({}, config)
    for section, key in PATH_FIELDS:
        payload = normalized.get(section)
        if isinstance(payload, dict) and isinstance(payload.get(key), str):
            payload[key] = _absolute_path(payload[key], base_dir)
    return normalized


def dump_effective_config(config: Mapping[str, object]) -> str:
    return json.dumps(dict(config), sort_keys=True, indent=2, ensure_ascii=False)


def _read_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        if required:
            raise ConfigLoadError(f"config file not found: {path}") from None
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_layer(environ: Mapping[str, str]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for name, (section, key) in sorted(ENV_VARIABLES.items()):
        raw = environ.get(name)
        if raw is None:
            continue
        default = DEFAULT_CONFIG[section][key]  # type: ignore[literal-required]
        layer.setdefault(section, {})[key] = _coerce(name, raw.strip(), default)
    return layer


def _coerce(name: str, raw: str, default: object) -> object:
    if isinstance(default, bool):
        word = raw.lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise ConfigLoadError(
            f"{name} must be a boolean (true/false/yes/no/on/off/1/0), got {raw!r}"
        )
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            raise ConfigLoadError(f"{name} must be an integer, got {raw!r}") from None
    return raw


def _cli_layer(overrides: Mapping[str, object]) -> dict[str, dict[str, object]]:
    layer: dict[str, dict[str, object]] = {}
    for dotted, value in sorted(overrides.items()):
        if value is None:
            continue
        section, _, key = dotted.partition(".")
        if not section or not key or "." in key:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}; expected <section>.<key>")
        layer.setdefault(section, {})[key] = value
    return layer


def _absolute_path(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "ENV_VARIABLES",
    "ConfigLoadError",
    "dump_effective_config",
    "load_config",
    "normalize_paths",
]
