"""Size-bounded tool output that always remains valid JSON."""

from __future__ import annotations

import json
from typing import Iterator, NamedTuple

CHARACTER_LIMIT = 50_000


class TruncationResult(NamedTuple):
    text: str
    truncated: bool


def _closing_boundaries(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(end, closers)`` after each bracket closed outside a string.

    ``text[:end] + closers`` is well-formed JSON whenever *text* is a
    prefix of a well-formed JSON document.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            stack.append("}")
        elif char == "[":
            stack.append("]")
        elif char in "}]":
            if stack:
                stack.pop()
            yield index + 1, "".join(reversed(stack))


def truncate(text: str, limit: int = CHARACTER_LIMIT) -> TruncationResult:
    """Bound *text* to *limit* characters.

    Text within the limit is returned unchanged.  Otherwise the result is
    ``{"_truncated": true, "_message": ..., "data": ...}`` where ``data`` is
    the longest prefix of the payload that ends at a closing bracket, with
    the still-open containers closed, or ``null`` if there is none.
    """
    if len(text) <= limit:
        return TruncationResult(text, False)

    message = f"Result exceeded {limit} characters and was truncated"
    head = '{"_truncated":true,"_message":' + json.dumps(message) + ',"data":'
    budget = limit - len(head) - 1
    if budget < len("null"):
        raise ValueError(f"Output limit {limit} is too small for the truncation envelope")

    window = text[:budget]
    for end, closers in reversed(list(_closing_boundaries(window))):
        if end + len(closers) > budget:
            continue
        data = window[:end] + closers
        try:
            json.loads(data)
        except ValueError:
            continue
        return TruncationResult(head + data + "}", True)

    return TruncationResult(head + "null}", True)
