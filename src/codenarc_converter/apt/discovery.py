"""Locate rule catalogue sources inside an APT documentation directory."""

from __future__ import annotations

from pathlib import Path

from codenarc_converter.constants import DEFAULT_RULE_FILE_PREFIX


def discover_rule_files(
    apt_dir: Path | str,
    *,
    prefix: str = DEFAULT_RULE_FILE_PREFIX,
) -> list[Path]:
    """Return regular files in ``apt_dir`` whose names start with ``prefix``, sorted by name."""

    directory = Path(apt_dir)
    if not directory.is_dir():
        return []
    return sorted(
        (
            candidate
            for candidate in directory.iterdir()
            if candidate.is_file() and candidate.name.startswith(prefix)
        ),
        key=lambda candidate: candidate.name,
    )


__all__ = ["DEFAULT_RULE_FILE_PREFIX", "discover_rule_files"]
