"""Ontology and property tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagov.outcome import ToolSuccess
from schemagov.query_builder import EMPTY, Clause, Integer, Keyword, Uri, UriText, build_query
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext

PROPERTY_TYPES = {
    "object": "owl:ObjectProperty",
    "datatype": "owl:DatatypeProperty",
    "both": "owl:ObjectProperty owl:DatatypeProperty",
}


@tool("list_ontologies", "List Ontologies")
async def list_ontologies(ctx: ToolContext, limit: int = 50) -> ToolSuccess:
    """List owl:Ontology resources with their labels or titles, alphabetically."""
    query = build_query(
        """
        SELECT DISTINCT ?ont ?label
        WHERE {
          ?ont a owl:Ontology .
          OPTIONAL { ?ont rdfs:label|dct:title ?label }
        }
        ORDER BY ?label
        LIMIT $limit
        """,
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("explore_ontology", "Explore Ontology")
async def explore_ontology(ctx: ToolContext, ontology_uri: str) -> ToolSuccess:
    """List classes and properties whose URI starts with the ontology URI."""
    query = build_query(
        """
        SELECT DISTINCT ?type ?item ?label
        WHERE {
          VALUES ?type { owl:Class owl:ObjectProperty owl:DatatypeProperty }
          ?item a ?type .
          OPTIONAL { ?item rdfs:label ?label }
          FILTER(STRSTARTS(STR(?item), $ontology))
        }
        ORDER BY ?type ?item
        LIMIT 200
        """,
        ontology=UriText(ontology_uri),
    )
    return await ctx.single(query)


@tool("list_properties", "List Properties")
async def list_properties(
    ctx: ToolContext,
    ontology_uri: Optional[str] = None,
    property_type: str = "both",
    limit: int = 50,
) -> ToolSuccess:
    """List object/datatype properties with label, domain and range.

    ``property_type`` is one of ``object``, ``datatype`` or ``both``;
    ``ontology_uri`` restricts results to properties under that namespace.
    """
    kind = Keyword(property_type, PROPERTY_TYPES)
    query = build_query(
        """
        SELECT DISTINCT ?prop ?type ?label ?domain ?range
        WHERE {
          VALUES ?type { $types }
          ?prop a ?type .
          OPTIONAL { ?prop rdfs:label ?label . FILTER(LANG(?label) = "it" || LANG(?label) = "") }
          OPTIONAL { ?prop rdfs:domain ?domain }
          OPTIONAL { ?prop rdfs:range ?range }
          $namespace
        }
        ORDER BY ?prop
        LIMIT $limit
        """,
        types=Keyword(PROPERTY_TYPES[kind.value], PROPERTY_TYPES.values()),
        namespace=Clause("FILTER(STRSTARTS(STR(?prop), $ns))", ns=UriText(ontology_uri))
        if ontology_uri
        else EMPTY,
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("get_property_details", "Get Property Details")
async def get_property_details(ctx: ToolContext, property_uri: str) -> ToolSuccess:
    """Type, label, comment, domain, range, inverse, parents and characteristics of a property."""
    query = build_query(
        """
        SELECT ?p ?o
        WHERE {
          $prop ?p ?o .
          FILTER(
            ?p IN (rdf:type, rdfs:label, rdfs:comment, rdfs:domain, rdfs:range,
                   rdfs:subPropertyOf, owl:inverseOf, owl:equivalentProperty)
            || (?p = rdf:type && ?o IN (owl:FunctionalProperty, owl:InverseFunctionalProperty,
                                        owl:SymmetricProperty, owl:TransitiveProperty))
          )
        }
        """,
        prop=Uri(property_uri),
    )
    return await ctx.single(query)
