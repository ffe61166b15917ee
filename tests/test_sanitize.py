"""Tests for literal escaping and URI validation."""

import pytest

from schemagov.errors import ValidationError
from schemagov.sanitize import sanitize_literal, sanitize_uri, unescape_literal


class TestSanitizeLiteral:
    """Escaping for double-quoted SPARQL literals."""

    def test_plain_text_unchanged(self):
        assert sanitize_literal("Roma") == "Roma"

    def test_quote_and_backslash(self):
        assert sanitize_literal('a"b\\c') == 'a\\"b\\\\c'

    def test_newlines(self):
        assert sanitize_literal("a\nb\rc") == "a\\nb\\rc"

    def test_backslash_escaped_before_quote(self):
        # a trailing backslash must not end up escaping the closing quote
        assert sanitize_literal('x\\"') == 'x\\\\\\"'

    @pytest.mark.parametrize(
        "value",
        ['say "hi"', "C:\\path\\", "line1\nline2", 'mix \\"\r\n end', ""],
    )
    def test_unescape_round_trip(self, value):
        assert unescape_literal(sanitize_literal(value)) == value

    def test_injection_stays_inside_literal(self):
        escaped = sanitize_literal('x" } ; DROP ALL ; { "')
        # every quote in the output is preceded by a backslash
        for index, char in enumerate(escaped):
            if char == '"':
                assert escaped[index - 1] == "\\"


class TestSanitizeUri:
    """Validation of caller-supplied URIs."""

    @pytest.mark.parametrize(
        "uri",
        [
            "https://w3id.org/italia/onto/CLV",
            "http://example.org/a#b",
            "https://schema.gov.it/sparql?x=1&y=2",
        ],
    )
    def test_valid(self, uri):
        assert sanitize_uri(uri) == uri

    @pytest.mark.parametrize(
        "uri",
        [
            "ftp://example.org/x",
            "example.org/x",
            "http://example.org/a b",
            "http://example.org/<x>",
            'http://example.org/"x"',
            "http://example.org/{x}",
            "http://example.org/a|b",
            "http://example.org/a\\b",
            "http://example.org/a^b",
            "http://example.org/a`b",
            "http://example.org/x\n",
            "http://",
            "",
        ],
    )
    def test_invalid(self, uri):
        with pytest.raises(ValidationError, match="Invalid URI"):
            sanitize_uri(uri)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            sanitize_uri("not a uri")
