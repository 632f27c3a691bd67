"""
codenarc-converter — integration test package

File: tests/integration/__init__.py
Last updated: 2026-10-19

Purpose
- Test package marker for subprocess CLI contracts.

Functional requirements
- Must not import the converter at import time; each test spawns its own interpreter.
"""
