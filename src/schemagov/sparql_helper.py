"""
SPARQL Helper - asynchronous SPARQL query execution with per-call deadlines.

This module is a SPARQL client that handles:
- SPARQL protocol POST requests with JSON result negotiation
- A cancellable deadline on every call (no retries)
- HTML error page detection in responses
- Mapping of transport and parse failures onto :mod:`schemagov.errors`
- Plain GET downloads of caller-supplied URLs under the same policy

Endpoint URL, timeout and prefix injection are explicit arguments of every
call; the executor holds no defaults for them.

Usage:
    from schemagov.sparql_helper import SparqlExecutor

    async with SparqlExecutor() as executor:
        result = await executor.execute(
            Query.from_text("SELECT ?s WHERE { ?s ?p ?o } LIMIT 10"),
            "https://schema.gov.it/sparql",
            inject_prefixes=True,
            timeout_ms=60_000,
        )
        for row in result.rows:
            print(row["s"].value)
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

import httpx

from schemagov.errors import DownloadError, HttpError, ParseError, QueryTimeoutError
from schemagov.query import ResultSet, parse_results
from schemagov.query_builder import Query, with_prefixes
from schemagov.version import VERSION

logger = logging.getLogger(__name__)

USER_AGENT = f"schemagov/{VERSION} (SPARQL client)"


# MIME types for SPARQL responses
class MimeTypes:
    """Standard MIME types for SPARQL protocol."""

    JSON = "application/sparql-results+json"
    FORM = "application/x-www-form-urlencoded"


class SparqlExecutor:
    """
    SPARQL query executor over a shared :class:`httpx.AsyncClient`.

    Every call carries its own deadline.  When it expires the in-flight
    request is cancelled and :class:`~schemagov.errors.QueryTimeoutError`
    is raised; sibling calls running concurrently are not affected.

    Attributes:
        client: The underlying async HTTP client (owned unless passed in)

    Example:
        >>> async with SparqlExecutor() as executor:
        ...     rs = await executor.execute(q, url, inject_prefixes=False, timeout_ms=5000)
    """

    # HTML markers that indicate an error response instead of SPARQL JSON
    HTML_MARKERS = ("<!DOCTYPE", "<html", "<HTML", "<!doctype")

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            client: Existing client to use (the caller keeps ownership)
            transport: Transport for a newly created client (tests)
        """
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            transport=transport,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            timeout=None,
        )

    async def execute(
        self,
        query: Query,
        endpoint_url: str,
        *,
        inject_prefixes: bool,
        timeout_ms: int,
    ) -> ResultSet:
        """
        Execute a SELECT or ASK query and return a :class:`ResultSet`.

        Args:
            query: Query built by :mod:`schemagov.query_builder`
            endpoint_url: SPARQL endpoint URL
            inject_prefixes: Prepend the standard PREFIX block
            timeout_ms: Deadline for this call in milliseconds

        Raises:
            QueryTimeoutError: If the deadline expires
            HttpError: On a non-success status or a transport failure
            ParseError: If the body is not SPARQL JSON results
        """
        if inject_prefixes:
            query = with_prefixes(query)

        t0 = time.monotonic()
        response = await self._with_deadline(
            self.client.post(
                endpoint_url,
                data={"query": query.text},
                headers={"Accept": MimeTypes.JSON, "Content-Type": MimeTypes.FORM},
            ),
            endpoint_url,
            timeout_ms,
        )
        result = parse_results(self._decode_json(response.text))
        logger.debug(
            "SELECT on %s: %d rows in %d ms",
            endpoint_url,
            result.row_count,
            int((time.monotonic() - t0) * 1000),
        )
        return result

    async def fetch_text(self, url: str, *, timeout_ms: int) -> tuple[str, str]:
        """
        Download *url* and return ``(content_type, body)``.

        Same deadline as :meth:`execute`; failures raise
        :class:`~schemagov.errors.DownloadError`.
        """
        response = await self._with_deadline(
            self.client.get(url), url, timeout_ms, error=DownloadError
        )
        return response.headers.get("content-type", ""), response.text

    async def _with_deadline(
        self,
        request: Any,
        url: str,
        timeout_ms: int,
        error: type[HttpError] = HttpError,
    ) -> httpx.Response:
        try:
            response = await asyncio.wait_for(request, timeout=timeout_ms / 1000)
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("Request to %s exceeded %d ms", url, timeout_ms)
            raise QueryTimeoutError(url, timeout_ms) from e
        except httpx.HTTPError as e:
            raise error(None, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise error(response.status_code, response.reason_phrase or "")
        return response

    def _decode_json(self, content: str) -> Any:
        if self._is_html_response(content):
            raise ParseError("Endpoint returned an HTML page instead of SPARQL JSON")
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON in SPARQL response: {e}") from e

    def _is_html_response(self, content: str) -> bool:
        """Check if content appears to be HTML (error page) instead of JSON."""
        if not content:
            return False
        stripped = content.strip()
        return any(stripped.startswith(marker) for marker in self.HTML_MARKERS)

    async def aclose(self) -> None:
        """Close the underlying client if this executor created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> SparqlExecutor:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"SparqlExecutor(owns_client={self._owns_client})"
