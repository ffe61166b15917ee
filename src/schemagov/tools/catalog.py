"""Foundation and analytics tools: raw queries, classes, catalog, coverage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagov.compress import compress
from schemagov.outcome import ToolSuccess
from schemagov.query_builder import EMPTY, Clause, Integer, Literal, Query, Uri, build_query
from schemagov.reconcile import fan_out
from schemagov.sanitize import sanitize_uri
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext


@tool("query_sparql", "Execute SPARQL Query")
async def query_sparql(ctx: ToolContext, query: str) -> ToolSuccess:
    """Execute a raw SPARQL SELECT/ASK query against schema.gov.it.

    Common prefixes (rdf, rdfs, owl, skos, dct, xsd, dcat, foaf, clv, cpv,
    l0, sm) are injected automatically.  Results are compressed: tabular
    for more than 5 rows, a list of objects otherwise.
    """
    return await ctx.single(Query.from_text(query))


@tool("query_external_sparql", "Execute SPARQL Query on Another Endpoint")
async def query_external_sparql(ctx: ToolContext, endpoint: str, query: str) -> ToolSuccess:
    """Execute a raw SPARQL query against a caller-supplied public endpoint.

    No prefixes are injected and a short deadline applies.
    """
    endpoint = sanitize_uri(endpoint)
    result = await ctx.select_external(Query.from_text(query), endpoint)
    return ToolSuccess(data=compress(result), row_count=result.row_count)


@tool("explore_classes", "Explore Classes")
async def explore_classes(
    ctx: ToolContext, limit: int = 50, filter: Optional[str] = None
) -> ToolSuccess:
    """List classes with instance counts, ordered by count descending.

    ``filter`` is a case-insensitive regex matched against the class URI.
    """
    query = build_query(
        """
        SELECT DISTINCT ?class (COUNT(?s) AS ?count)
        WHERE {
          ?s a ?class .
          $filter
        }
        GROUP BY ?class
        ORDER BY DESC(?count)
        LIMIT $limit
        """,
        filter=Clause('FILTER(REGEX(STR(?class), $f, "i"))', f=Literal(filter))
        if filter
        else EMPTY,
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("explore_catalog", "Explore Catalog")
async def explore_catalog(ctx: ToolContext) -> ToolSuccess:
    """List named graphs plus owl:Ontology and skos:ConceptScheme resources."""
    graphs_query = build_query(
        """
        SELECT DISTINCT ?g
        WHERE { GRAPH ?g { ?s ?p ?o } }
        LIMIT 100
        """
    )
    ontologies_query = build_query(
        """
        SELECT DISTINCT ?s ?type
        WHERE {
          VALUES ?type { owl:Ontology skos:ConceptScheme }
          ?s a ?type .
        }
        LIMIT 100
        """
    )
    graphs, ontologies = await fan_out(ctx.select(graphs_query), ctx.select(ontologies_query))
    return ToolSuccess(
        data={"graphs": compress(graphs), "ontologies": compress(ontologies)},
        row_count=graphs.row_count + ontologies.row_count,
    )


@tool("check_coverage", "Check Coverage")
async def check_coverage(ctx: ToolContext, target_uri: Optional[str] = None) -> ToolSuccess:
    """Usage coverage of one class or property, or the top 50 types overall."""
    if target_uri:
        query = build_query(
            """
            SELECT (COUNT(DISTINCT ?s) AS ?instances) (COUNT(DISTINCT ?p) AS ?propertiesUsed)
            WHERE {
              { ?s a $target }
              UNION
              { ?s $target ?o }
              UNION
              { ?sub $target ?obj }
            }
            """,
            target=Uri(target_uri),
        )
    else:
        query = build_query(
            """
            SELECT ?type (COUNT(?s) AS ?count)
            WHERE { ?s a ?type . }
            GROUP BY ?type
            ORDER BY DESC(?count)
            LIMIT 50
            """
        )
    return await ctx.single(query)


@tool("check_quality", "Check Quality")
async def check_quality(ctx: ToolContext, limit: int = 50) -> ToolSuccess:
    """Classes, properties and concepts that have neither rdfs:label nor skos:prefLabel."""
    query = build_query(
        """
        SELECT ?s ?type ?issue
        WHERE {
          VALUES ?type { owl:Class owl:ObjectProperty owl:DatatypeProperty skos:Concept }
          ?s a ?type .
          FILTER NOT EXISTS { ?s rdfs:label ?label }
          FILTER NOT EXISTS { ?s skos:prefLabel ?label }
          BIND("Missing Label" AS ?issue)
        }
        LIMIT $limit
        """,
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("check_overlaps", "Check Overlaps")
async def check_overlaps(ctx: ToolContext, limit: int = 50) -> ToolSuccess:
    """owl:sameAs and skos:exactMatch mappings plus same-label collisions."""
    query = build_query(
        """
        SELECT ?s1 ?s2 ?label ?relation
        WHERE {
          { ?s1 owl:sameAs ?s2 . BIND("owl:sameAs" AS ?relation) }
          UNION
          { ?s1 skos:exactMatch ?s2 . BIND("skos:exactMatch" AS ?relation) }
          UNION
          {
            ?s1 rdfs:label ?label .
            ?s2 rdfs:label ?label .
            FILTER (?s1 != ?s2)
            BIND("Same Label" AS ?relation)
          }
        }
        LIMIT $limit
        """,
        limit=Integer(limit),
    )
    return await ctx.single(query)
