"""Controlled vocabulary (skos:ConceptScheme) tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagov.compress import compress
from schemagov.outcome import ToolSuccess
from schemagov.query_builder import EMPTY, Clause, Integer, Literal, Uri, build_query
from schemagov.reconcile import PaginationInfo, count_from, fan_out
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext


@tool("list_vocabularies", "List Vocabularies")
async def list_vocabularies(ctx: ToolContext, limit: int = 20) -> ToolSuccess:
    """List ConceptSchemes with labels and concept counts, largest first."""
    query = build_query(
        """
        SELECT DISTINCT ?scheme ?label (COUNT(?c) AS ?count)
        WHERE {
          ?scheme a skos:ConceptScheme .
          OPTIONAL { ?scheme rdfs:label|dct:title ?label }
          OPTIONAL { ?c skos:inScheme ?scheme }
        }
        GROUP BY ?scheme ?label
        ORDER BY DESC(?count)
        LIMIT $limit
        """,
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("search_in_vocabulary", "Search in Vocabulary")
async def search_in_vocabulary(
    ctx: ToolContext, scheme_uri: str, keyword: str, limit: int = 20
) -> ToolSuccess:
    """Concepts of one ConceptScheme whose label matches ``keyword`` (regex, case-insensitive)."""
    query = build_query(
        """
        SELECT DISTINCT ?concept ?label ?code
        WHERE {
          ?concept skos:inScheme $scheme .
          ?concept rdfs:label|skos:prefLabel ?label .
          OPTIONAL { ?concept skos:notation|dct:identifier ?code }
          FILTER(REGEX(STR(?label), $keyword, "i"))
        }
        ORDER BY ?label
        LIMIT $limit
        """,
        scheme=Uri(scheme_uri),
        keyword=Literal(keyword),
        limit=Integer(limit),
    )
    return await ctx.single(query)


@tool("browse_vocabulary", "Browse Vocabulary")
async def browse_vocabulary(
    ctx: ToolContext,
    scheme_uri: str,
    limit: int = 50,
    offset: int = 0,
    keyword: Optional[str] = None,
) -> ToolSuccess:
    """Page through the concepts of a ConceptScheme (code and label).

    Returns ``concepts`` plus ``pagination`` (total, count, offset,
    has_more, next_offset).  Suited to large vocabularies such as
    municipality or classification code lists.
    """
    scheme = Uri(scheme_uri)
    data_query = build_query(
        """
        SELECT ?concept ?code ?label
        WHERE {
          ?concept skos:inScheme $scheme .
          ?concept a skos:Concept .
          OPTIONAL { ?concept skos:notation ?code }
          OPTIONAL {
            ?concept skos:prefLabel|rdfs:label ?label .
            FILTER(LANG(?label) = "it" || LANG(?label) = "")
          }
          $filter
        }
        ORDER BY ?code ?label
        LIMIT $limit
        OFFSET $offset
        """,
        scheme=scheme,
        filter=Clause('FILTER(REGEX(STR(?label), $kw, "i"))', kw=Literal(keyword))
        if keyword
        else EMPTY,
        limit=Integer(limit),
        offset=Integer(offset),
    )
    count_query = build_query(
        """
        SELECT (COUNT(?concept) AS ?total)
        WHERE {
          ?concept skos:inScheme $scheme .
          ?concept a skos:Concept .
          $filter
        }
        """,
        scheme=scheme,
        filter=Clause(
            '?concept skos:prefLabel|rdfs:label ?label . FILTER(REGEX(STR(?label), $kw, "i"))',
            kw=Literal(keyword),
        )
        if keyword
        else EMPTY,
    )

    data, counted = await fan_out(ctx.select(data_query), ctx.select(count_query))
    pagination = PaginationInfo.from_page(count_from(counted), data.row_count, offset)
    return ToolSuccess(
        data={"concepts": compress(data), "pagination": pagination},
        row_count=data.row_count,
    )
