"""
codenarc-converter — unit tests for config loader

File: tests/unit/config/test_loader.py
Last updated: 2026-10-19

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Deterministic env var path mapping and type coercion.
- Path normalization relative to the config file.
- Effective config dumping.

Non-functional requirements
- Deterministic output across repeated loads.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from codenarc_converter.config.loader import (
    ENV_VARIABLES,
    ConfigLoadError,
    dump_effective_config,
    load_config,
)
from codenarc_converter.config.schema import ConfigValidationError


def _write_config(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _sha256_json(data: dict[str, object]) -> str:
    payload = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@pytest.mark.unit
def test_loader_precedence_default_file_env_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    default_path = tmp_path / "default.toml"
    _write_config(default_path, "")
    _write_config(
        config_path,
        """
[sources]
max_workers = 2
""".strip(),
    )

    default_loaded = load_config(default_path, environ={})
    file_loaded = load_config(config_path, environ={})
    env_loaded = load_config(config_path, environ={"CODENARC_SOURCES_MAX_WORKERS": "3"})
    cli_loaded = load_config(
        config_path,
        environ={"CODENARC_SOURCES_MAX_WORKERS": "3"},
        cli_overrides={"sources.max_workers": 4},
    )

    assert default_loaded["sources"]["max_workers"] == 1
    assert file_loaded["sources"]["max_workers"] == 2
    assert env_loaded["sources"]["max_workers"] == 3
    assert cli_loaded["sources"]["max_workers"] == 4


@pytest.mark.unit
def test_env_mapping_covers_strings_and_booleans(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")

    loaded = load_config(
        config_path,
        environ={
            "CODENARC_OUTPUT_FORMAT": "yaml",
            "CODENARC_OBSERVABILITY_LOG_TO_CONSOLE": "yes",
            "CODENARC_META_SCHEMA_VERSION": "99",
        },
    )

    assert loaded["output"]["format"] == "yaml"
    assert loaded["observability"]["log_to_console"] is True
    assert loaded["meta"]["schema_version"] == 1


@pytest.mark.unit
@pytest.mark.parametrize(
    ("env_name", "raw"),
    [
        ("CODENARC_SOURCES_MAX_WORKERS", "many"),
        ("CODENARC_OBSERVABILITY_LOG_TO_CONSOLE", "sometimes"),
    ],
)
def test_invalid_env_coercion_raises_actionable_error(
    tmp_path: Path, env_name: str, raw: str
) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match=env_name):
        load_config(config_path, environ={env_name: raw})


@pytest.mark.unit
def test_env_values_are_validated_after_coercion(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigValidationError, match="output.format"):
        load_config(config_path, environ={"CODENARC_OUTPUT_FORMAT": "xml"})


@pytest.mark.unit
def test_loader_is_deterministic_for_same_inputs(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")

    env = {
        "CODENARC_SOURCES_MAX_WORKERS": "6",
        "CODENARC_OBSERVABILITY_LOG_TO_CONSOLE": "false",
    }
    cli = {"output.format": "toml"}

    first = load_config(config_path, environ=env, cli_overrides=cli)
    second = load_config(config_path, environ=env, cli_overrides=cli)

    assert _sha256_json(first) == _sha256_json(second)


@pytest.mark.unit
def test_path_normalization_is_relative_to_config_file(tmp_path: Path) -> None:
    config_path = tmp_path / "nested" / "codenarc-converter.toml"
    _write_config(
        config_path,
        """
[sources]
apt_dir = "docs/apt"
""".strip(),
    )

    loaded = load_config(config_path, environ={})

    base = config_path.parent.resolve()
    assert loaded["sources"]["apt_dir"] == (base / "docs/apt").as_posix()
    assert loaded["output"]["path"] == (base / "target/results/rules.json").as_posix()
    assert loaded["observability"]["log_dir"] == (base / "logs").as_posix()


@pytest.mark.unit
def test_cli_paths_are_not_rebased_when_absolute(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")
    target = (tmp_path / "elsewhere" / "out.yaml").resolve().as_posix()

    loaded = load_config(config_path, environ={}, cli_overrides={"output.path": target})

    assert loaded["output"]["path"] == target


@pytest.mark.unit
def test_default_config_file_is_optional(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    loaded = load_config(environ={})

    assert loaded["sources"]["apt_dir"] == (tmp_path.resolve() / "src/site/apt").as_posix()
    assert loaded["output"]["format"] == "json"


@pytest.mark.unit
def test_default_config_file_is_picked_up_from_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _write_config(tmp_path / "codenarc-converter.toml", '[output]\nformat = "toml"\n')
    monkeypatch.chdir(tmp_path)

    assert load_config(environ={})["output"]["format"] == "toml"


@pytest.mark.unit
def test_explicit_missing_config_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "absent.toml", environ={})


@pytest.mark.unit
def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "[sources\napt_dir = 1")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


@pytest.mark.unit
def test_unknown_file_keys_fail_validation(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, '[sources]\napt_directory = "docs"\n')

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [issue.path for issue in excinfo.value.issues] == ["sources.apt_directory"]


@pytest.mark.unit
def test_dump_effective_config_is_stable_json(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")
    loaded = load_config(config_path, environ={})

    rendered = dump_effective_config(loaded)

    assert rendered == dump_effective_config(json.loads(rendered))
    assert json.loads(rendered) == loaded
    assert rendered.index('"meta"') < rendered.index('"sources"')


@pytest.mark.unit
def test_env_variables_cover_every_overridable_setting() -> None:
    assert ENV_VARIABLES == {
        "CODENARC_SOURCES_APT_DIR": ("sources", "apt_dir"),
        "CODENARC_SOURCES_FILE_PREFIX": ("sources", "file_prefix"),
        "CODENARC_SOURCES_ENCODING": ("sources", "encoding"),
        "CODENARC_SOURCES_MAX_WORKERS": ("sources", "max_workers"),
        "CODENARC_OUTPUT_FORMAT": ("output", "format"),
        "CODENARC_OUTPUT_PATH": ("output", "path"),
        "CODENARC_OBSERVABILITY_LOG_LEVEL": ("observability", "log_level"),
        "CODENARC_OBSERVABILITY_LOG_DIR": ("observability", "log_dir"),
        "CODENARC_OBSERVABILITY_LOG_TO_CONSOLE": ("observability", "log_to_console"),
    }


@pytest.mark.unit
@pytest.mark.parametrize("key", ["format", "output.", ".format", "output.format.extra"])
def test_malformed_cli_override_keys_are_rejected(tmp_path: Path, key: str) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, "")

    with pytest.raises(ConfigLoadError, match="invalid CLI override key"):
        load_config(config_path, environ={}, cli_overrides={key: "json"})


@pytest.mark.unit
def test_non_table_section_is_reported_not_crashed(tmp_path: Path) -> None:
    config_path = tmp_path / "codenarc-converter.toml"
    _write_config(config_path, 'output = "rules.json"\n')

    with pytest.raises(ConfigValidationError) as excinfo:
        load_config(config_path, environ={})

    assert [issue.path for issue in excinfo.value.issues] == ["output"]
