"""Concept search, profiling and structural analysis tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from schemagov.compress import compress
from schemagov.outcome import ToolSuccess
from schemagov.query_builder import Integer, Literal, Uri, build_query
from schemagov.reconcile import fan_out
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext

# facet name -> template; every template takes $uri
PROFILE_FACETS = {
    "definition": """
        SELECT ?p ?o WHERE { $uri ?p ?o . FILTER(ISLITERAL(?o)) }
    """,
    "hierarchy": """
        SELECT ?type ?parent ?child WHERE {
          { $uri a ?type }
          UNION
          { $uri rdfs:subClassOf|skos:broader ?parent }
          UNION
          { ?child rdfs:subClassOf|skos:broader $uri }
        } LIMIT 50
    """,
    "usage": """
        SELECT (COUNT(?s) AS ?instanceCount) WHERE { ?s a $uri }
    """,
    "incoming": """
        SELECT DISTINCT ?p ?sType WHERE {
          ?s ?p ?o .
          ?o a $uri .
          OPTIONAL { ?s a ?sType }
        } LIMIT 20
    """,
    "outgoing": """
        SELECT DISTINCT ?p ?oType WHERE {
          ?s a $uri .
          ?s ?p ?o .
          OPTIONAL { ?o a ?oType }
        } LIMIT 20
    """,
}


@tool("search_concepts", "Search Concepts")
async def search_concepts(ctx: ToolContext, keyword: str, limit: int = 10) -> ToolSuccess:
    """Find classes, properties and concepts whose label matches ``keyword``.

    Use when the exact URI of a concept is unknown.
    """
    query = build_query(
        """
        SELECT DISTINCT ?subject ?type ?label
        WHERE {
          VALUES ?type { owl:Class owl:ObjectProperty owl:DatatypeProperty skos:Concept }
          ?subject a ?type .
          ?subject rdfs:label|skos:prefLabel|dct:title ?label .
          FILTER(REGEX(STR(?label), $keyword, "i"))
        }
        LIMIT $limit
        """,
        keyword=Literal(keyword),
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("inspect_concept", "Inspect Concept")
async def inspect_concept(ctx: ToolContext, uri: str) -> ToolSuccess:
    """Profile a concept: definition, hierarchy, usage, incoming and outgoing properties.

    The five facets are queried in parallel.
    """
    target = Uri(uri)
    names = list(PROFILE_FACETS)
    results = await fan_out(
        *(ctx.select(build_query(PROFILE_FACETS[name], uri=target)) for name in names)
    )
    return ToolSuccess(
        data={name: compress(result) for name, result in zip(names, results)},
        row_count=sum(result.row_count for result in results),
    )


@tool("find_relations", "Find Relations")
async def find_relations(ctx: ToolContext, source_uri: str, target_uri: str) -> ToolSuccess:
    """Direct predicates and one-hop paths from ``source_uri`` to ``target_uri``."""
    query = build_query(
        """
        SELECT ?p1 ?mid ?p2
        WHERE {
          {
            $source ?p1 $target .
            BIND("DIRECT" AS ?mid)
            BIND("NONE" AS ?p2)
          }
          UNION
          {
            $source ?p1 ?mid .
            ?mid ?p2 $target .
          }
        }
        LIMIT 10
        """,
        source=Uri(source_uri),
        target=Uri(target_uri),
    )
    return await ctx.single(query)


@tool("suggest_improvements", "Suggest Improvements")
async def suggest_improvements(ctx: ToolContext, limit: int = 20) -> ToolSuccess:
    """Structural issues: mutual rdfs:subClassOf pairs and unused classes."""
    unused_query = build_query(
        """
        SELECT ?class
        WHERE {
          ?class a owl:Class .
          FILTER NOT EXISTS { ?s a ?class }
          FILTER NOT EXISTS { ?sub rdfs:subClassOf ?class }
        }
        LIMIT $limit
        """,
        limit=Integer(limit),
    )
    cycle_query = build_query(
        """
        SELECT ?a ?b
        WHERE {
          ?a rdfs:subClassOf ?b .
          ?b rdfs:subClassOf ?a .
          FILTER (?a != ?b)
        }
        LIMIT $limit
        """,
        limit=Integer(limit),
    )
    unused, cycles = await fan_out(ctx.select(unused_query), ctx.select(cycle_query))
    return ToolSuccess(
        data={"possible_cycles": compress(cycles), "unused_classes": compress(unused)},
        row_count=unused.row_count + cycles.row_count,
    )


@tool("describe_resource", "Describe Resource")
async def describe_resource(ctx: ToolContext, uri: str, depth: int = 1) -> ToolSuccess:
    """All triples of a resource; ``depth=2`` also follows linked resources one hop."""
    if depth == 2:
        template = """
        SELECT ?p ?o ?p2 ?o2
        WHERE {
          $uri ?p ?o .
          OPTIONAL { FILTER(ISURI(?o)) ?o ?p2 ?o2 . }
        }
        LIMIT 200
        """
    else:
        template = """
        SELECT ?p ?o
        WHERE { $uri ?p ?o . }
        LIMIT 100
        """
    return await ctx.single(build_query(template, uri=Uri(uri)))
