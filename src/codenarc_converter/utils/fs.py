"""
codenarc-converter — filesystem utilities

File: src/codenarc_converter/utils/fs.py
Last updated: 2026-10-19

Purpose
- Write serialized rule documentation without leaving half-written output behind.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path


def atomic_write_text(
    path: str | os.PathLike[str],
    text: str,
    *,
    encoding: str = "utf-8",
    create_parents: bool = False,
) -> Path:
    """Replace ``path`` with ``text`` in one ``os.replace`` step and return the target.

    The text is staged in a hidden sibling file and fsynced first, so readers see either the
    old content or the new one. Newlines are written as given.
    """

    target = Path(path)
    if create_parents:
        target.parent.mkdir(parents=True, exist_ok=True)
    directory = target.parent.resolve(strict=True)

    fd, staged = tempfile.mkstemp(dir=directory, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as stream:
            stream.write(text)
            stream.flush()
            os.fsync(stream.fileno())
        os.replace(staged, target)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(staged)
        raise
    return target


__all__ = ["atomic_write_text"]
