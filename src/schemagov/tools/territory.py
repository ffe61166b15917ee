"""OntoPiA territorial tools: municipalities, provinces, identifiers.

Names, cadastral (Belfiore) codes, car-plate codes and metropolitan-city
codes live in separate parts of the graph.  Joining them server-side makes
Virtuoso time out on ``clv:identifierType``, so they are fetched as
independent lookups and reconciled here on the ISTAT code
(``skos:notation``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from schemagov.outcome import ToolSuccess
from schemagov.query_builder import EMPTY, Clause, Integer, Keyword, Literal, build_query
from schemagov.reconcile import AuxiliaryLookup, ReconciledLookup
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext

MAX_MUNICIPALITIES = 500

# lookup field -> identifier scheme segment in the identifier URI
IDENTIFIER_SCHEMES = {
    "belfiore": "cadastral-code",
    "sigla": "vehicle-code",
    "metro": "metropolitan-city-code",
}

# identifier URIs end in ".../<scheme>/<code>"
IDENTIFIER_LOOKUP = """
    SELECT DISTINCT ?notation ?$var
    WHERE {
      $page
      ?entity skos:notation ?notation ;
              clv:hasIdentifier ?id .
      BIND(REPLACE(STR(?id), ".*$scheme/", "") AS ?$var)
      FILTER(CONTAINS(STR(?id), "$scheme/"))
    }
    ORDER BY ?notation
"""


def _identifier_lookup(field: str, page: Clause = EMPTY) -> AuxiliaryLookup:
    query = build_query(
        IDENTIFIER_LOOKUP,
        var=Keyword(field, IDENTIFIER_SCHEMES),
        scheme=Keyword(IDENTIFIER_SCHEMES[field], IDENTIFIER_SCHEMES.values()),
        page=page,
    )
    return AuxiliaryLookup(name=field, query=query, value_var=field)


def _name_filter(keyword: Optional[str]) -> Clause:
    if not keyword:
        return EMPTY
    return Clause('FILTER(REGEX(?name, $kw, "i"))', kw=Literal(keyword))


@tool("list_municipalities", "List Municipalities")
async def list_municipalities(
    ctx: ToolContext,
    limit: int = 50,
    offset: int = 0,
    keyword: Optional[str] = None,
    with_belfiore: bool = False,
) -> ToolSuccess:
    """Browse Italian municipalities (comuni) with their ISTAT codes.

    Pages over distinct ISTAT codes (``limit`` at most 500).  A code listed
    under several historical names is reported once, with the longest name.
    ``with_belfiore`` adds the cadastral code from a parallel lookup.
    """
    limit = min(limit, MAX_MUNICIPALITIES)
    name_filter = _name_filter(keyword)
    page = Clause(
        """
        {
          SELECT DISTINCT ?notation
          WHERE {
            ?city a clv:City ; skos:notation ?notation ; l0:name ?name .
            $filter
          }
          ORDER BY ?notation
          LIMIT $limit
          OFFSET $offset
        }
        """,
        filter=name_filter,
        limit=Integer(limit),
        offset=Integer(offset),
    )
    names_query = build_query(
        """
        SELECT DISTINCT ?notation ?name
        WHERE {
          $page
          ?city a clv:City ; skos:notation ?notation ; l0:name ?name .
        }
        ORDER BY ?notation
        """,
        page=page,
    )
    count_query = build_query(
        """
        SELECT (COUNT(DISTINCT ?notation) AS ?total)
        WHERE {
          ?city a clv:City ; skos:notation ?notation ; l0:name ?name .
          $filter
        }
        """,
        filter=name_filter,
    )
    auxiliaries = [_identifier_lookup("belfiore", page)] if with_belfiore else []

    result = await ctx.lookup(
        ReconciledLookup(
            primary=names_query,
            key="notation",
            value="name",
            auxiliaries=auxiliaries,
            count=count_query,
        ),
        offset=offset,
    )
    return ToolSuccess(
        data={"municipalities": result.compressed(), "pagination": result.pagination},
        row_count=result.row_count,
    )


@tool("list_provinces", "List Provinces")
async def list_provinces(ctx: ToolContext, keyword: Optional[str] = None) -> ToolSuccess:
    """List provinces with ISTAT code, name, car-plate code (sigla) and metropolitan-city code.

    Three lookups run in parallel and are joined on the ISTAT code.
    """
    names_query = build_query(
        """
        SELECT DISTINCT ?notation ?name
        WHERE {
          ?prov a clv:Province ; skos:notation ?notation ; l0:name ?name .
          $filter
        }
        ORDER BY ?notation
        """,
        filter=_name_filter(keyword),
    )
    result = await ctx.lookup(
        ReconciledLookup(
            primary=names_query,
            key="notation",
            value="name",
            auxiliaries=[
                _identifier_lookup("sigla"),
                _identifier_lookup("metro"),
            ],
        )
    )
    return ToolSuccess(data=result.compressed(), row_count=result.row_count)


@tool("list_identifiers", "List Identifiers")
async def list_identifiers(
    ctx: ToolContext, identifier_type: Optional[str] = None, limit: int = 20
) -> ToolSuccess:
    """clv:Identifier resources: counts per type, or samples of one type.

    ``identifier_type`` is the literal type label, e.g. "Codice Catastale".
    """
    if not identifier_type:
        query = build_query(
            """
            SELECT ?type (COUNT(*) AS ?count)
            WHERE { ?id a clv:Identifier ; clv:identifierType ?type . }
            GROUP BY ?type
            ORDER BY DESC(?count)
            """
        )
    else:
        query = build_query(
            """
            SELECT ?id ?value ?entity
            WHERE {
              ?id a clv:Identifier ;
                  clv:identifierType $type ;
                  l0:identifier ?value .
              OPTIONAL { ?entity clv:hasIdentifier ?id }
            }
            LIMIT $limit
            """,
            type=Literal(identifier_type),
            limit=Integer(limit),
        )
    return await ctx.single(query)
