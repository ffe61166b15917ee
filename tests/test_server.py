"""Tests for the MCP tool surface."""

from __future__ import annotations

import asyncio
import inspect

import pytest
from mcp.server.fastmcp.exceptions import ToolError

from schemagov import server
from schemagov.tools import REGISTRY


def test_every_registered_tool_is_exposed():
    tools = asyncio.run(server.mcp.list_tools())
    assert {t.name for t in tools} == set(REGISTRY)
    for t in tools:
        assert t.description == REGISTRY[t.name].description


@pytest.mark.parametrize("name", sorted(REGISTRY))
def test_signatures_match_handlers(name):
    exposed = inspect.signature(getattr(server, name))
    handler = inspect.signature(REGISTRY[name].handler)
    handler_params = list(handler.parameters.values())[1:]  # drop ctx
    assert [p.name for p in exposed.parameters.values()] == [p.name for p in handler_params]
    for mine, theirs in zip(exposed.parameters.values(), handler_params):
        assert mine.default == theirs.default


def test_tool_call_goes_through_toolkit(monkeypatch, toolkit, endpoint, sparql_json):
    endpoint.on("SELECT", sparql_json(["s"], [{"s": "x"}]))
    monkeypatch.setattr(server, "_toolkit", toolkit)

    text = asyncio.run(server.query_sparql("SELECT ?s {}"))

    assert text == '[{"s":"x"}]'


def test_tool_error_raises(monkeypatch, toolkit):
    monkeypatch.setattr(server, "_toolkit", toolkit)

    with pytest.raises(ToolError, match="Invalid URI"):
        asyncio.run(server.inspect_concept("nope"))
