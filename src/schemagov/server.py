"""
schema.gov.it MCP server.

Exposes the read-only SPARQL tools of :mod:`schemagov.tools` to an MCP
host.  Each function below only declares the tool's typed signature and
description; the work happens in :meth:`schemagov.dispatch.Toolkit.call`.

Run as:  schemagov serve                  (stdio transport)
         schemagov serve --transport sse
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from schemagov.config import Config
from schemagov.dispatch import Toolkit
from schemagov.tools import REGISTRY

logger = logging.getLogger(__name__)

mcp = FastMCP("schema-gov-it", host=Config.MCP_HOST, port=Config.MCP_PORT)

_toolkit: Toolkit | None = None


def _get_toolkit() -> Toolkit:
    """Lazy-initialise the toolkit inside the server's event loop."""
    global _toolkit
    if _toolkit is None:
        _toolkit = Toolkit.from_config(Config)
    return _toolkit


async def _call(name: str, **args: Any) -> str:
    response = await _get_toolkit().call(name, args)
    if response.is_error:
        raise ToolError(response.text)
    return response.text


def _register(fn: Any) -> Any:
    spec = REGISTRY[fn.__name__]
    return mcp.tool(name=spec.name, title=spec.title, description=spec.description)(fn)


# ─── Foundation ──────────────────────────────────────────


@_register
async def query_sparql(query: str) -> str:
    return await _call("query_sparql", query=query)


@_register
async def query_external_sparql(endpoint: str, query: str) -> str:
    return await _call("query_external_sparql", endpoint=endpoint, query=query)


@_register
async def explore_classes(limit: int = 50, filter: Optional[str] = None) -> str:
    return await _call("explore_classes", limit=limit, filter=filter)


@_register
async def explore_catalog() -> str:
    return await _call("explore_catalog")


# ─── Analytics ───────────────────────────────────────────


@_register
async def check_coverage(target_uri: Optional[str] = None) -> str:
    return await _call("check_coverage", target_uri=target_uri)


@_register
async def check_quality(limit: int = 50) -> str:
    return await _call("check_quality", limit=limit)


@_register
async def check_overlaps(limit: int = 50) -> str:
    return await _call("check_overlaps", limit=limit)


# ─── Ontologies and properties ───────────────────────────


@_register
async def list_ontologies(limit: int = 50) -> str:
    return await _call("list_ontologies", limit=limit)


@_register
async def explore_ontology(ontology_uri: str) -> str:
    return await _call("explore_ontology", ontology_uri=ontology_uri)


@_register
async def list_properties(
    ontology_uri: Optional[str] = None,
    property_type: Literal["object", "datatype", "both"] = "both",
    limit: int = 50,
) -> str:
    return await _call(
        "list_properties", ontology_uri=ontology_uri, property_type=property_type, limit=limit
    )


@_register
async def get_property_details(property_uri: str) -> str:
    return await _call("get_property_details", property_uri=property_uri)


# ─── Vocabularies ────────────────────────────────────────


@_register
async def list_vocabularies(limit: int = 20) -> str:
    return await _call("list_vocabularies", limit=limit)


@_register
async def search_in_vocabulary(scheme_uri: str, keyword: str, limit: int = 20) -> str:
    return await _call("search_in_vocabulary", scheme_uri=scheme_uri, keyword=keyword, limit=limit)


@_register
async def browse_vocabulary(
    scheme_uri: str, limit: int = 50, offset: int = 0, keyword: Optional[str] = None
) -> str:
    return await _call(
        "browse_vocabulary", scheme_uri=scheme_uri, limit=limit, offset=offset, keyword=keyword
    )


# ─── Datasets ────────────────────────────────────────────


@_register
async def list_datasets(limit: int = 20, offset: int = 0) -> str:
    return await _call("list_datasets", limit=limit, offset=offset)


@_register
async def explore_dataset(dataset_uri: str) -> str:
    return await _call("explore_dataset", dataset_uri=dataset_uri)


@_register
async def preview_distribution(url: str) -> str:
    return await _call("preview_distribution", url=url)


# ─── Concepts ────────────────────────────────────────────


@_register
async def search_concepts(keyword: str, limit: int = 10) -> str:
    return await _call("search_concepts", keyword=keyword, limit=limit)


@_register
async def inspect_concept(uri: str) -> str:
    return await _call("inspect_concept", uri=uri)


@_register
async def find_relations(source_uri: str, target_uri: str) -> str:
    return await _call("find_relations", source_uri=source_uri, target_uri=target_uri)


@_register
async def suggest_improvements(limit: int = 20) -> str:
    return await _call("suggest_improvements", limit=limit)


@_register
async def describe_resource(uri: str, depth: int = 1) -> str:
    return await _call("describe_resource", uri=uri, depth=depth)


# ─── Territory ───────────────────────────────────────────


@_register
async def list_municipalities(
    limit: int = 50,
    offset: int = 0,
    keyword: Optional[str] = None,
    with_belfiore: bool = False,
) -> str:
    return await _call(
        "list_municipalities",
        limit=limit,
        offset=offset,
        keyword=keyword,
        with_belfiore=with_belfiore,
    )


@_register
async def list_provinces(keyword: Optional[str] = None) -> str:
    return await _call("list_provinces", keyword=keyword)


@_register
async def list_identifiers(identifier_type: Optional[str] = None, limit: int = 20) -> str:
    return await _call("list_identifiers", identifier_type=identifier_type, limit=limit)


# ─── Meta ────────────────────────────────────────────────


@_register
async def analyze_usage() -> str:
    return await _call("analyze_usage")


@_register
async def suggest_new_tools() -> str:
    return await _call("suggest_new_tools")


def run(transport: str = "stdio") -> None:
    """Start the server; blocks until the transport closes."""
    logger.info("schema.gov.it MCP server starting (%s transport)", transport)
    mcp.run(transport=transport)
