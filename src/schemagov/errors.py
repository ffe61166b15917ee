"""Exception hierarchy for the query pipeline.

Every failure the pipeline can produce derives from :class:`SparqlError`
so the dispatch boundary can catch them uniformly.  None of these are
retried inside the pipeline.
"""

from __future__ import annotations


class SparqlError(Exception):
    """Base exception for query pipeline errors."""

    suggestion: str | None = None


class ValidationError(SparqlError, ValueError):
    """Raised when caller input cannot be safely interpolated into a query.

    Detected before any network call is attempted.
    """

    suggestion = "Check the tool arguments and try again."

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        if suggestion is not None:
            self.suggestion = suggestion


class QueryTimeoutError(SparqlError, TimeoutError):
    """Raised when a single endpoint call exceeds its deadline."""

    suggestion = (
        "Narrow the query: lower the LIMIT, add a more specific filter, "
        "or avoid unbounded property paths."
    )

    def __init__(self, endpoint: str, timeout_ms: int) -> None:
        self.endpoint = endpoint
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Query to {endpoint} timed out after {timeout_ms} ms"
        )


class HttpError(SparqlError):
    """Raised when the endpoint answers with a non-success status.

    ``status`` is ``None`` when no response was received at all
    (connection refused, DNS failure, ...).
    """

    prefix = "SPARQL request failed"

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"{self.prefix}: {message}")
        else:
            super().__init__(f"{self.prefix}: {status} {message}")

    @property
    def suggestion(self) -> str | None:  # type: ignore[override]
        if self.status == 400:
            return (
                "Check the query syntax. Common prefixes (rdf, rdfs, owl, "
                "skos, dct, dcat, clv, l0, ...) are injected automatically."
            )
        if self.status is not None and self.status >= 500:
            return "The endpoint is having trouble; retry later or simplify the query."
        return None


class ParseError(SparqlError):
    """Raised when a response body is not a SPARQL JSON result set."""

    suggestion = (
        "Only SELECT and ASK queries are supported; CONSTRUCT/DESCRIBE "
        "results are not tabular."
    )


class DownloadError(HttpError):
    """Raised when a plain download (e.g. a distribution file) fails."""

    prefix = "Failed to fetch distribution"

    @property
    def suggestion(self) -> str | None:  # type: ignore[override]
        return "Check that the URL is a public download link (a CSV or JSON file)."
