"""Shared fixtures: a scripted SPARQL endpoint behind httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from urllib.parse import parse_qs

import httpx
import pytest

from schemagov.config import TestConfig
from schemagov.dispatch import Toolkit
from schemagov.sparql_helper import SparqlExecutor
from schemagov.usage import UsageLog


def sparql_json(variables, rows):
    """SPARQL JSON results document; values starting with http are URIs."""
    bindings = []
    for row in rows:
        binding = {}
        for name, value in row.items():
            kind = "uri" if str(value).startswith("http") else "literal"
            binding[name] = {"type": kind, "value": str(value)}
        bindings.append(binding)
    return {"head": {"vars": list(variables)}, "results": {"bindings": bindings}}


class FakeEndpoint:
    """Answers each request with the first route whose marker occurs in the query."""

    def __init__(self):
        self.routes = []
        self.queries = []
        self.requests = []

    def on(self, marker, payload=None, *, status=200, delay=0.0, text=None, headers=None):
        self.routes.append((marker, payload, status, delay, text, headers or {}))
        return self

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST":
            query = parse_qs(request.content.decode())["query"][0]
        else:
            query = str(request.url)
        self.queries.append(query)
        for marker, payload, status, delay, text, headers in self.routes:
            if marker in query:
                if delay:
                    await asyncio.sleep(delay)
                if text is not None:
                    return httpx.Response(status, text=text, headers=headers)
                return httpx.Response(
                    status,
                    text=json.dumps(payload),
                    headers={"content-type": "application/sparql-results+json", **headers},
                )
        return httpx.Response(404, text="no route")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture(name="sparql_json")
def sparql_json_fixture():
    return sparql_json


@pytest.fixture()
def endpoint():
    return FakeEndpoint()


@pytest.fixture()
def executor(endpoint):
    return SparqlExecutor(transport=endpoint.transport)


@pytest.fixture()
def usage_log(tmp_path):
    return UsageLog(tmp_path / "usage_log.jsonl")


@pytest.fixture()
def toolkit(endpoint, usage_log):
    return Toolkit(
        SparqlExecutor(transport=endpoint.transport),
        endpoint=TestConfig.SPARQL_ENDPOINT,
        internal_timeout_ms=TestConfig.INTERNAL_TIMEOUT_MS,
        external_timeout_ms=TestConfig.EXTERNAL_TIMEOUT_MS,
        character_limit=TestConfig.CHARACTER_LIMIT,
        usage_log=usage_log,
    )


@pytest.fixture()
def call(toolkit):
    """Run one tool synchronously and return ``(response, decoded_json_or_None)``."""

    def _call(name, **args):
        response = asyncio.run(toolkit.call(name, args))
        if response.is_error:
            return response, None
        return response, json.loads(response.text)

    return _call
