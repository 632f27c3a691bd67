"""Unit tests for atomic output writes."""

from __future__ import annotations

from pathlib import Path

import pytest

from codenarc_converter.utils.fs import atomic_write_text


@pytest.mark.unit
def test_atomic_write_replaces_content_without_leftovers(tmp_path: Path) -> None:
    target = tmp_path / "rules.json"
    target.write_text("old", encoding="utf-8")

    written = atomic_write_text(target, '{"version": 1}\n')

    assert written == target
    assert target.read_text(encoding="utf-8") == '{"version": 1}\n'
    assert sorted(path.name for path in tmp_path.iterdir()) == ["rules.json"]


@pytest.mark.unit
def test_atomic_write_keeps_newlines_verbatim(tmp_path: Path) -> None:
    target = tmp_path / "rules.toml"

    atomic_write_text(target, "a\nb\r\n")

    assert target.read_bytes() == b"a\nb\r\n"


@pytest.mark.unit
def test_atomic_write_requires_existing_parent_by_default(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        atomic_write_text(tmp_path / "missing" / "rules.json", "{}")

    assert not (tmp_path / "missing").exists()


@pytest.mark.unit
def test_atomic_write_can_create_nested_parents(tmp_path: Path) -> None:
    target = tmp_path / "target" / "results" / "rules.json"

    atomic_write_text(target, "{}", create_parents=True)

    assert target.read_text(encoding="utf-8") == "{}"
    assert [path.name for path in target.parent.iterdir()] == ["rules.json"]


@pytest.mark.unit
def test_failed_write_leaves_previous_content_and_no_temp_file(tmp_path: Path) -> None:
    target = tmp_path / "rules.json"
    target.write_text("old", encoding="utf-8")

    with pytest.raises(UnicodeEncodeError):
        atomic_write_text(target, "café", encoding="ascii")

    assert target.read_text(encoding="utf-8") == "old"
    assert sorted(path.name for path in tmp_path.iterdir()) == ["rules.json"]
