"""Escaping and validation of caller input before it reaches query text."""

from __future__ import annotations

import re

from schemagov.errors import ValidationError

__all__ = [
    "sanitize_literal",
    "sanitize_uri",
    "unescape_literal",
]

# Order matters: the backslash must be escaped first so that the
# backslashes introduced by later rules are not doubled again.
_LITERAL_ESCAPES: tuple[tuple[str, str], ...] = (
    ("\\", "\\\\"),
    ('"', '\\"'),
    ("\n", "\\n"),
    ("\r", "\\r"),
)

_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "r": "\r"}

_URI_PATTERN = re.compile(r"https?://[^\s<>\"{}|\\^`]+")

URI_SUGGESTION = (
    "Pass absolute http(s) URIs without spaces, quotes, angle brackets "
    "or braces (copy them from a previous tool result)."
)


def sanitize_literal(value: str) -> str:
    """Escape *value* for use inside a double-quoted SPARQL string literal."""
    for raw, escaped in _LITERAL_ESCAPES:
        value = value.replace(raw, escaped)
    return value


def unescape_literal(value: str) -> str:
    """Reverse :func:`sanitize_literal`."""
    out: list[str] = []
    chars = iter(value)
    for char in chars:
        if char == "\\":
            nxt = next(chars, "")
            out.append(_UNESCAPES.get(nxt, "\\" + nxt))
        else:
            out.append(char)
    return "".join(out)


def sanitize_uri(value: str) -> str:
    """Return *value* unchanged if it is a safe absolute http(s) URI.

    Raises
    ------
    ValidationError
        If the value is not an absolute ``http``/``https`` URI or contains
        whitespace or any of ``<>"{}|\\^`` and backtick.
    """
    if not isinstance(value, str) or not _URI_PATTERN.fullmatch(value):
        raise ValidationError(f"Invalid URI: {value!r}", URI_SUGGESTION)
    return value
