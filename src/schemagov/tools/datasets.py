"""DCAT-AP_IT dataset tools."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from schemagov.compress import compress
from schemagov.outcome import ToolSuccess
from schemagov.prefixes import DCATAPIT
from schemagov.query_builder import Integer, Uri, build_query
from schemagov.reconcile import PaginationInfo, count_from, fan_out
from schemagov.sanitize import sanitize_uri
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext

PREVIEW_JSON_ITEMS = 10
PREVIEW_CSV_LINES = 15
PREVIEW_FALLBACK_CHARS = 2000

DATASET = Uri(str(DCATAPIT.Dataset))
DISTRIBUTION = Uri(str(DCATAPIT.Distribution))


@tool("list_datasets", "List Datasets")
async def list_datasets(ctx: ToolContext, limit: int = 20, offset: int = 0) -> ToolSuccess:
    """List dcatapit:Dataset resources with titles, paginated."""
    data_query = build_query(
        """
        SELECT DISTINCT ?dataset ?label
        WHERE {
          ?dataset a $dataset_class .
          OPTIONAL { ?dataset dct:title ?label }
        }
        ORDER BY ?label
        LIMIT $limit
        OFFSET $offset
        """,
        dataset_class=DATASET,
        limit=Integer(limit),
        offset=Integer(offset),
    )
    count_query = build_query(
        """
        SELECT (COUNT(DISTINCT ?dataset) AS ?total)
        WHERE { ?dataset a $dataset_class . }
        """,
        dataset_class=DATASET,
    )
    data, counted = await fan_out(ctx.select(data_query), ctx.select(count_query))
    pagination = PaginationInfo.from_page(count_from(counted), data.row_count, offset)
    return ToolSuccess(
        data={"items": compress(data), "pagination": pagination},
        row_count=data.row_count,
    )


@tool("explore_dataset", "Explore Dataset")
async def explore_dataset(ctx: ToolContext, dataset_uri: str) -> ToolSuccess:
    """Metadata (literals and distribution links) and distributions of a dataset."""
    dataset = Uri(dataset_uri)
    metadata_query = build_query(
        """
        SELECT ?p ?o
        WHERE {
          $dataset ?p ?o .
          FILTER (ISLITERAL(?o)
                  || (ISURI(?o) && EXISTS { ?o a $distribution_class }))
        }
        LIMIT 100
        """,
        dataset=dataset,
        distribution_class=DISTRIBUTION,
    )
    distributions_query = build_query(
        """
        SELECT ?dist ?format ?url
        WHERE {
          $dataset dcat:distribution ?dist .
          OPTIONAL { ?dist dct:format ?format }
          OPTIONAL { ?dist dcat:downloadURL ?url }
        }
        LIMIT 20
        """,
        dataset=dataset,
    )
    metadata, distributions = await fan_out(
        ctx.select(metadata_query), ctx.select(distributions_query)
    )
    return ToolSuccess(
        data={"metadata": compress(metadata), "distributions": compress(distributions)},
        row_count=metadata.row_count + distributions.row_count,
    )


def _preview(url: str, content_type: str, body: str) -> str:
    if "json" in content_type or url.endswith(".json"):
        try:
            payload: Any = json.loads(body)
        except json.JSONDecodeError:
            return body[:PREVIEW_FALLBACK_CHARS] + "\n... (truncated)"
        if isinstance(payload, dict):
            items = payload.get("results") or payload.get("data") or [payload]
        else:
            items = payload
        if not isinstance(items, list):
            items = [items]
        return json.dumps(items[:PREVIEW_JSON_ITEMS], indent=2, ensure_ascii=False)
    return "\n".join(body.split("\n")[:PREVIEW_CSV_LINES])


@tool("preview_distribution", "Preview Distribution")
async def preview_distribution(ctx: ToolContext, url: str) -> ToolSuccess:
    """Download a distribution (CSV or JSON) and show its first rows.

    JSON is detected by content type or a ``.json`` extension; anything
    else is treated as text and cut to the first 15 lines.  The download
    runs under the short external deadline.
    """
    url = sanitize_uri(url)
    content_type, body = await ctx.fetch_external(url)
    return ToolSuccess(data=f"Preview of {url}:\n\n{_preview(url, content_type, body)}")
