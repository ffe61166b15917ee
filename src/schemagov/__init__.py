"""schemagov: read-only SPARQL tools for the schema.gov.it catalogue.

Main modules:
- query_builder: injection-safe SPARQL construction
- sparql_helper: async executor for SPARQL endpoints
- compress / truncate: output size control
- reconcile: concurrent fan-out and keyed reconciliation
- dispatch: tool lookup, error mapping and usage logging
"""

from .dispatch import Toolkit
from .errors import (
    DownloadError,
    HttpError,
    ParseError,
    QueryTimeoutError,
    SparqlError,
    ValidationError,
)
from .query import Binding, ResultSet
from .query_builder import Query, build_query
from .sparql_helper import SparqlExecutor
from .version import VERSION

__all__ = [
    "VERSION",
    "Binding",
    "DownloadError",
    "HttpError",
    "ParseError",
    "Query",
    "QueryTimeoutError",
    "ResultSet",
    "SparqlError",
    "SparqlExecutor",
    "Toolkit",
    "ValidationError",
    "build_query",
]
