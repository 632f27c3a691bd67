"""
codenarc-converter

File: src/codenarc_converter/__init__.py
Last updated: 2026-10-19

Purpose
- Package root. Extracts CodeNarc rule documentation (descriptions and parameters) from the
  project's APT rule catalogue.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
