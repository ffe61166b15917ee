"""Tests for JSON-preserving output truncation."""

import json

import pytest

from schemagov.truncate import CHARACTER_LIMIT, truncate


def test_short_text_unchanged():
    text = json.dumps({"a": 1})
    assert truncate(text, 100) == (text, False)


def test_text_at_limit_unchanged():
    text = "x" * 100
    assert truncate(text, 100) == (text, False)


def test_large_payload_stays_valid_json():
    payload = {"headers": ["s", "label"], "rows": [[f"http://example.org/{i}", "etichetta " * 5] for i in range(1200)]}
    text = json.dumps(payload, separators=(",", ":"))
    assert len(text) > 60_000

    out, truncated = truncate(text, CHARACTER_LIMIT)

    assert truncated
    assert len(out) <= CHARACTER_LIMIT
    decoded = json.loads(out)
    assert decoded["_truncated"] is True
    assert str(CHARACTER_LIMIT) in decoded["_message"]
    assert decoded["data"]["headers"] == ["s", "label"]
    assert 0 < len(decoded["data"]["rows"]) < 1200
    assert decoded["data"]["rows"][0] == payload["rows"][0]


def test_strings_containing_brackets():
    items = [{"text": 'tricky ] } " \\ ' + str(i)} for i in range(500)]
    text = json.dumps(items)

    out, truncated = truncate(text, 2000)

    assert truncated
    assert len(out) <= 2000
    data = json.loads(out)["data"]
    assert data == items[: len(data)]


def test_no_boundary_gives_null():
    text = json.dumps("x" * 500)
    out, truncated = truncate(text, 200)
    assert truncated
    assert json.loads(out)["data"] is None


def test_limit_too_small():
    with pytest.raises(ValueError):
        truncate("x" * 100, 10)
