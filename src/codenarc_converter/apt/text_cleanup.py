"""Text escaping, markup translation, and line classification for APT rule documentation."""

from __future__ import annotations

import re
from typing import Final

_OPEN_PLACEHOLDER: Final[str] = "\ue000"
_CLOSE_PLACEHOLDER: Final[str] = "\ue001"

# Longest operators first so that ``<=`` is never consumed as a bare ``<``.
_SPACED_OPERATORS: Final[tuple[tuple[str, str], ...]] = (
    (" <=> ", " &lt;=&gt; "),
    (" <<<= ", " &lt;&lt;&lt;= "),
    (" >>>= ", " &gt;&gt;&gt;= "),
    (" <<= ", " &lt;&lt;= "),
    (" >>= ", " &gt;&gt;= "),
    (" <= ", " &lt;= "),
    (" >= ", " &gt;= "),
    (" < ", " &lt; "),
    (" > ", " &gt; "),
)
_ESCAPED_TOKENS: Final[tuple[tuple[str, str], ...]] = (
    ("->", "-&gt;"),
    ("\\=", "="),
    ("\\<", "&lt;"),
    ("\\>", "&gt;"),
)
_PLACEHOLDER_TAGS: Final[tuple[tuple[str, str], ...]] = (
    (_OPEN_PLACEHOLDER * 3, "<code>"),
    (_OPEN_PLACEHOLDER * 2, "<b>"),
    (_OPEN_PLACEHOLDER, "<i>"),
    (_CLOSE_PLACEHOLDER * 3, "</code>"),
    (_CLOSE_PLACEHOLDER * 2, "</b>"),
    (_CLOSE_PLACEHOLDER, "</i>"),
)
_DEFAULT_VALUE_MARKUP: Final[tuple[str, ...]] = ("<<<", "<<", ">>>", ">>")
_DEFAULT_VALUE_WRAPPERS: Final[tuple[tuple[str, str], ...]] = (
    ("'", "'"),
    ("<", ">"),
    ('"', '"'),
    ("/", "/"),
)

_EXAMPLE_LESS_THAN_RE: Final[re.Pattern[str]] = re.compile(r"\\?<")
_EXAMPLE_GREATER_THAN_RE: Final[re.Pattern[str]] = re.compile(r"\\?>")

_PARAMETER_TABLE_START_RE: Final[re.Pattern[str]] = re.compile(r"\*-+\+-+\+-+\+")
_PARAMETER_SEPARATOR_RE: Final[re.Pattern[str]] = re.compile(r"\+(?:-+\+)+")
_PARAMETER_CONTENT_RE: Final[re.Pattern[str]] = re.compile(r"\|.*")
_EXAMPLE_SEPARATOR_RES: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"-+"),
    re.compile(r"\+-+"),
)

_DESCRIPTION_NOISE_PREFIXES: Final[tuple[str, ...]] = (
    "<Since",
    "~~~",
    "<New",
    "** ",
    "[]",
    "*----",
    "+----",
    "|",
)

RULE_PREFIX: Final[str] = "* "
LIST_PREFIX: Final[str] = "* {{"
_BRACED_TITLE_PREFIX: Final[str] = "* {"
_BRACED_TITLE_SUFFIX: Final[str] = "} Rule"
_RULE_SUFFIX: Final[str] = "Rule"
_HEADER_CAPTION: Final[str] = "<<Property>>"
_FALSE_POSITIVE_NAMES: Final[frozenset[str]] = frozenset({"References"})


def clean_description(text: str) -> str:
    """Escape prose and translate APT emphasis markers into ``<i>``/``<b>``/``<code>`` tags."""

    result = f" {text} "
    result = result.replace("&", "&amp;")
    for raw, escaped in _SPACED_OPERATORS:
        result = result.replace(raw, escaped)
    for raw, escaped in _ESCAPED_TOKENS:
        result = result.replace(raw, escaped)

    result = result.replace("<", _OPEN_PLACEHOLDER).replace(">", _CLOSE_PLACEHOLDER)
    for placeholder_run, tag in _PLACEHOLDER_TAGS:
        result = result.replace(placeholder_run, tag)
    return result.strip()


def clean_parameter(text: str) -> str:
    """Drop emphasis markers from table cells; parameter descriptions render no markup."""

    return text.replace("<", "").replace(">", "")


def clean_default_value(text: str) -> str:
    result = text
    for marker in _DEFAULT_VALUE_MARKUP:
        result = result.replace(marker, "")
    if len(result) >= 2:
        for prefix, suffix in _DEFAULT_VALUE_WRAPPERS:
            if result.startswith(prefix) and result.endswith(suffix):
                return result[1:-1]
    return result


def clean_example(line: str) -> str:
    result = line.replace("&", "&amp;")
    result = _EXAMPLE_LESS_THAN_RE.sub("&lt;", result)
    return _EXAMPLE_GREATER_THAN_RE.sub("&gt;", result)


def extract_rule_name(line: str) -> str | None:
    """
    Recover a rule name from a bulleted title line, or ``None`` for false positives.

    ``* {Foo} Rule`` and ``* FooRule`` both yield ``Foo``. Lower-case words,
    punctuation and the ``References`` heading are rejected.
    """

    if not line.strip():
        return None

    if line.startswith(_BRACED_TITLE_PREFIX):
        start = len(_BRACED_TITLE_PREFIX)
        end = line.find(_BRACED_TITLE_SUFFIX, start)
        if end < 0:
            return None
        result = line[start:end].strip()
    else:
        result = line[len(RULE_PREFIX) :].strip()

    if result.endswith(_RULE_SUFFIX):
        result = result[: -len(_RULE_SUFFIX)]

    if not result.strip():
        return None
    if all(char.islower() for char in result):
        return None
    if not result.isalnum():
        return None
    if result in _FALSE_POSITIVE_NAMES:
        return None
    return result


def is_example_separator(line: str) -> bool:
    return any(pattern.fullmatch(line) is not None for pattern in _EXAMPLE_SEPARATOR_RES)


def is_parameter_table_start(line: str) -> bool:
    return _PARAMETER_TABLE_START_RE.fullmatch(line) is not None


def is_parameter_separator(line: str) -> bool:
    return _PARAMETER_SEPARATOR_RE.fullmatch(line) is not None or is_parameter_table_start(line)


def is_parameter_content(line: str) -> bool:
    return _PARAMETER_CONTENT_RE.fullmatch(line) is not None


def is_valid_description_line(line: str) -> bool:
    return not line.startswith(_DESCRIPTION_NOISE_PREFIXES) and not is_parameter_separator(line)


def is_header_row(key_field: str) -> bool:
    return key_field.strip().casefold() == _HEADER_CAPTION.casefold()


__all__ = [
    "LIST_PREFIX",
    "RULE_PREFIX",
    "clean_default_value",
    "clean_description",
    "clean_example",
    "clean_parameter",
    "extract_rule_name",
    "is_example_separator",
    "is_header_row",
    "is_parameter_content",
    "is_parameter_separator",
    "is_parameter_table_start",
    "is_valid_description_line",
]
