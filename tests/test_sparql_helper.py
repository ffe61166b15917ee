"""Tests for the async SPARQL executor."""

from __future__ import annotations

import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from schemagov.errors import DownloadError, HttpError, ParseError, QueryTimeoutError
from schemagov.prefixes import PREFIX_BLOCK
from schemagov.query_builder import Query
from schemagov.sparql_helper import MimeTypes, SparqlExecutor

URL = "http://sparql.test/sparql"
SELECT = Query.from_text("SELECT ?s WHERE { ?s ?p ?o } LIMIT 1")


def run(coro):
    return asyncio.run(coro)


def test_execute_posts_form_and_parses(endpoint, executor, sparql_json):
    endpoint.on("SELECT ?s", sparql_json(["s"], [{"s": "http://example.org/1"}]))

    rs = run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=1000))

    assert rs.values("s") == ["http://example.org/1"]
    request = endpoint.requests[0]
    assert request.method == "POST"
    assert request.headers["accept"] == MimeTypes.JSON
    assert request.headers["content-type"] == MimeTypes.FORM
    assert request.headers["user-agent"].startswith("schemagov/")
    assert parse_qs(request.content.decode())["query"] == [SELECT.text]


def test_prefix_injection(endpoint, executor, sparql_json):
    endpoint.on("SELECT ?s", sparql_json(["s"], []))

    run(executor.execute(SELECT, URL, inject_prefixes=True, timeout_ms=1000))
    run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=1000))

    injected, plain = endpoint.queries
    assert injected.startswith(PREFIX_BLOCK)
    assert plain == SELECT.text


def test_timeout(endpoint, executor, sparql_json):
    endpoint.on("SELECT", sparql_json(["s"], []), delay=1.0)

    with pytest.raises(QueryTimeoutError) as info:
        run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=50))

    assert info.value.timeout_ms == 50
    assert str(info.value) == f"Query to {URL} timed out after 50 ms"
    assert info.value.suggestion


def test_timeout_does_not_affect_sibling(endpoint, executor, sparql_json):
    endpoint.on("slow", sparql_json(["s"], []), delay=1.0)
    endpoint.on("fast", sparql_json(["s"], [{"s": "x"}]))

    async def both():
        return await asyncio.gather(
            executor.execute(Query.from_text("# slow"), URL, inject_prefixes=False, timeout_ms=50),
            executor.execute(Query.from_text("# fast"), URL, inject_prefixes=False, timeout_ms=1000),
            return_exceptions=True,
        )

    slow, fast = run(both())
    assert isinstance(slow, QueryTimeoutError)
    assert fast.values("s") == ["x"]


@pytest.mark.parametrize("status", [400, 404, 500, 503])
def test_http_error(endpoint, executor, status):
    endpoint.on("SELECT", text="boom", status=status)

    with pytest.raises(HttpError) as info:
        run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=1000))

    assert info.value.status == status
    assert str(info.value).startswith(f"SPARQL request failed: {status}")


def test_http_error_suggestions():
    assert "syntax" in HttpError(400, "Bad Request").suggestion
    assert "retry later" in HttpError(502, "Bad Gateway").suggestion
    assert HttpError(404, "Not Found").suggestion is None


def test_connection_error_has_no_status():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    executor = SparqlExecutor(transport=httpx.MockTransport(refuse))
    with pytest.raises(HttpError) as info:
        run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=1000))

    assert info.value.status is None
    assert str(info.value) == "SPARQL request failed: connection refused"


def test_html_response(endpoint, executor):
    endpoint.on("SELECT", text="<!DOCTYPE html><html>Error</html>")

    with pytest.raises(ParseError, match="HTML"):
        run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=1000))


def test_invalid_json(endpoint, executor):
    endpoint.on("SELECT", text="{not json")

    with pytest.raises(ParseError, match="Invalid JSON"):
        run(executor.execute(SELECT, URL, inject_prefixes=False, timeout_ms=1000))


def test_ask(endpoint, executor):
    endpoint.on("ASK", {"head": {}, "boolean": False})

    rs = run(executor.execute(Query.from_text("ASK {}"), URL, inject_prefixes=False, timeout_ms=1000))

    assert rs.first_value("boolean") == "false"


def test_fetch_text(endpoint, executor):
    endpoint.on("data.csv", text="a,b\n1,2", headers={"content-type": "text/csv"})

    content_type, body = run(executor.fetch_text("http://files.test/data.csv", timeout_ms=1000))

    assert content_type == "text/csv"
    assert body == "a,b\n1,2"
    assert endpoint.requests[0].method == "GET"


def test_fetch_text_failure_is_a_download_error(endpoint, executor):
    endpoint.on("data.csv", text="bad", status=400)

    with pytest.raises(DownloadError) as info:
        run(executor.fetch_text("http://files.test/data.csv", timeout_ms=1000))

    assert info.value.status == 400
    assert str(info.value) == "Failed to fetch distribution: 400 Bad Request"
    assert "syntax" not in info.value.suggestion


def test_borrowed_client_is_not_closed():
    async def scenario():
        async with httpx.AsyncClient() as client:
            async with SparqlExecutor(client) as executor:
                assert executor.client is client
            assert not client.is_closed

    run(scenario())
