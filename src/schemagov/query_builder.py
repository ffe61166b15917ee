"""Query assembly from trusted templates and typed, pre-sanitized fragments.

Templates use ``$name`` placeholders (:class:`string.Template`), so SPARQL
curly braces never need escaping.  The only values accepted for a
placeholder are :class:`Fragment` instances; each fragment sanitizes its
input when it is constructed, so a malformed URI fails before any network
call is made.

Example:
    >>> q = build_query(
    ...     'SELECT ?c WHERE { ?c skos:inScheme $scheme . '
    ...     'FILTER(REGEX(STR(?label), $kw, "i")) } LIMIT $limit',
    ...     scheme=Uri("https://w3id.org/italia/controlled-vocabulary/x"),
    ...     kw=Literal('say "hi"'),
    ...     limit=Integer(10),
    ... )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from string import Template
from typing import Iterable

from schemagov.errors import ValidationError
from schemagov.prefixes import PREFIX_BLOCK
from schemagov.sanitize import sanitize_literal, sanitize_uri

__all__ = [
    "Clause",
    "EMPTY",
    "Fragment",
    "Integer",
    "Keyword",
    "Literal",
    "Query",
    "Uri",
    "UriText",
    "build_query",
    "with_prefixes",
]


class Fragment(ABC):
    """A piece of query text that is safe to substitute into a template."""

    @abstractmethod
    def render(self) -> str:
        ...


class Literal(Fragment):
    """A caller string rendered as a quoted, escaped SPARQL literal."""

    def __init__(self, value: str) -> None:
        self._text = f'"{sanitize_literal(str(value))}"'

    def render(self) -> str:
        return self._text


class Uri(Fragment):
    """A caller URI rendered as an IRI reference ``<...>``."""

    def __init__(self, value: str) -> None:
        self.value = sanitize_uri(value)

    def render(self) -> str:
        return f"<{self.value}>"


class UriText(Fragment):
    """A validated URI rendered as a string literal (for ``STRSTARTS``)."""

    def __init__(self, value: str) -> None:
        self.value = sanitize_uri(value)

    def render(self) -> str:
        return f'"{sanitize_literal(self.value)}"'


class Integer(Fragment):
    """A non-negative integer (``LIMIT``/``OFFSET`` values)."""

    def __init__(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(
                f"Expected a non-negative integer, got {value!r}",
                "Use a whole number of 0 or more for limit and offset.",
            )
        self.value = value

    def render(self) -> str:
        return str(self.value)


class Keyword(Fragment):
    """One term out of a fixed allow-list, e.g. ``owl:ObjectProperty``."""

    def __init__(self, value: str, allowed: Iterable[str]) -> None:
        allowed = list(allowed)
        if value not in allowed:
            raise ValidationError(
                f"Unsupported value: {value!r}",
                f"Use one of: {', '.join(allowed)}",
            )
        self.value = value

    def render(self) -> str:
        return self.value


class Clause(Fragment):
    """A trusted sub-template with its own fragments (optional filters)."""

    def __init__(self, template: str, **fragments: Fragment) -> None:
        self._text = _substitute(template, fragments)

    def render(self) -> str:
        return self._text


@dataclass(frozen=True)
class Query:
    """Final query text, consumed only by the executor."""

    text: str

    @classmethod
    def from_text(cls, text: str) -> Query:
        """Wrap a whole query authored by the caller (raw query tools)."""
        return cls(str(text))

    def __str__(self) -> str:
        return self.text


def _substitute(template: str, fragments: dict[str, Fragment]) -> str:
    for name, fragment in fragments.items():
        if not isinstance(fragment, Fragment):
            raise TypeError(
                f"Placeholder {name!r} must be a Fragment, got {type(fragment).__name__}"
            )
    return Template(template).substitute(
        {name: fragment.render() for name, fragment in fragments.items()}
    )


EMPTY = Clause("")


def build_query(template: str, **fragments: Fragment) -> Query:
    """Substitute *fragments* into *template*.

    Raises
    ------
    TypeError
        If a value is not a :class:`Fragment`.
    KeyError
        If the template references a placeholder that was not supplied.
    """
    return Query(_substitute(template, fragments))


def with_prefixes(query: Query, block: str = PREFIX_BLOCK) -> Query:
    """Prepend the namespace-prefix block to *query*."""
    return Query(f"{block}\n{query.text}")
