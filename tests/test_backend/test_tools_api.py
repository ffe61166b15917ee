"""Tests for the /api/tools routes."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import requests


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


@patch("schemagov.backend.services.endpoint_service.requests.get")
def test_health_probe(mock_get, client):
    mock_get.return_value = MagicMock(ok=True, status_code=200)

    resp = client.get("/api/health?probe=1")

    assert resp.get_json()["sparql"] == {"endpoint": "http://sparql.test/sparql", "status": "ok"}
    assert mock_get.call_args.kwargs["params"]["query"] == "ASK {}"


@patch("schemagov.backend.services.endpoint_service.requests.get")
def test_health_probe_unreachable(mock_get, client):
    mock_get.side_effect = requests.exceptions.ConnectionError("refused")

    resp = client.get("/api/health?probe=1")

    assert resp.get_json()["sparql"]["status"] == "unreachable"


def test_list_tools(client):
    resp = client.get("/api/tools/")
    assert resp.status_code == 200
    tools = resp.get_json()
    names = [t["name"] for t in tools]
    assert names == sorted(names)
    assert "list_municipalities" in names
    assert all(t["description"] for t in tools)


def test_call_tool(client, endpoint, sparql_json):
    endpoint.on("SELECT", sparql_json(["s"], [{"s": "http://example.org/1"}]))

    resp = client.post("/api/tools/query_sparql", json={"query": "SELECT ?s WHERE { ?s ?p ?o }"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["is_error"] is False
    assert json.loads(body["text"]) == [{"s": "http://example.org/1"}]


def test_call_tool_error_is_in_body(client, endpoint):
    endpoint.on("SELECT", text="oops", status=500)

    resp = client.post("/api/tools/query_sparql", json={"query": "SELECT ?s {}"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["is_error"] is True
    assert body["text"].startswith("Error: SPARQL request failed: 500")


def test_call_tool_without_body(client):
    resp = client.post("/api/tools/analyze_usage")
    assert resp.status_code == 200
    assert resp.get_json()["is_error"] is False


def test_unknown_tool(client):
    resp = client.post("/api/tools/nope", json={})
    assert resp.status_code == 404


def test_non_object_body(client):
    resp = client.post("/api/tools/query_sparql", json=["SELECT"])
    assert resp.status_code == 400
