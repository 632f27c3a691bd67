"""Shared utilities."""

from codenarc_converter.utils.fs import atomic_write_text

__all__ = ["atomic_write_text"]
