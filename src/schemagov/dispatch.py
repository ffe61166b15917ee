"""Dispatch boundary between transports (MCP, HTTP, CLI) and the tools.

:class:`Toolkit` looks a tool up by name, runs it, converts any exception
into a :class:`~schemagov.outcome.ToolFailure`, serializes and truncates
the result, and finally appends one usage-log line.  The usage log is
written after the response is built; a logging failure is reported and
otherwise ignored.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import Any

import httpx
from pydantic_core import to_jsonable_python

from schemagov.compress import compress
from schemagov.config import Config
from schemagov.errors import SparqlError
from schemagov.outcome import ToolFailure, ToolOutcome, ToolResponse, ToolSuccess
from schemagov.query import ResultSet
from schemagov.query_builder import Query
from schemagov.reconcile import ReconciledLookup, ReconciledPage
from schemagov.sparql_helper import SparqlExecutor
from schemagov.tools import REGISTRY
from schemagov.truncate import truncate
from schemagov.usage import UsageLog

logger = logging.getLogger(__name__)


class ToolContext:
    """What a tool handler may use: the executor plus explicit settings."""

    def __init__(
        self,
        executor: SparqlExecutor,
        *,
        endpoint: str,
        internal_timeout_ms: int,
        external_timeout_ms: int,
        usage_log: UsageLog,
    ) -> None:
        self.executor = executor
        self.endpoint = endpoint
        self.internal_timeout_ms = internal_timeout_ms
        self.external_timeout_ms = external_timeout_ms
        self.usage_log = usage_log

    async def select(self, query: Query) -> ResultSet:
        """Run *query* on the trusted endpoint with the standard prefixes."""
        return await self.executor.execute(
            query,
            self.endpoint,
            inject_prefixes=True,
            timeout_ms=self.internal_timeout_ms,
        )

    async def select_external(self, query: Query, endpoint: str) -> ResultSet:
        """Run *query* verbatim on a caller-supplied endpoint."""
        return await self.executor.execute(
            query,
            endpoint,
            inject_prefixes=False,
            timeout_ms=self.external_timeout_ms,
        )

    async def fetch_external(self, url: str) -> tuple[str, str]:
        return await self.executor.fetch_text(url, timeout_ms=self.external_timeout_ms)

    async def lookup(self, lookup: ReconciledLookup, offset: int = 0) -> ReconciledPage:
        return await lookup.run(
            self.executor,
            self.endpoint,
            inject_prefixes=True,
            timeout_ms=self.internal_timeout_ms,
            offset=offset,
        )

    async def single(self, query: Query) -> ToolSuccess:
        """The common single-query tool: select, then compress."""
        result = await self.select(query)
        return ToolSuccess(data=compress(result), row_count=result.row_count)


def serialize(data: Any) -> str:
    return json.dumps(
        data, default=to_jsonable_python, ensure_ascii=False, separators=(",", ":")
    )


def render(outcome: ToolOutcome, limit: int) -> tuple[ToolResponse, str]:
    """Turn an outcome into a response plus a one-line usage summary."""
    if isinstance(outcome, ToolFailure):
        text = f"Error: {outcome.error}"
        if outcome.suggestion:
            text += f"\nSuggestion: {outcome.suggestion}"
        return ToolResponse(text=text, is_error=True), f"Error: {outcome.error}"

    text, truncated = truncate(serialize(outcome.data), limit)
    summary = "Success"
    if outcome.row_count is not None:
        summary += f", {outcome.row_count} rows"
    if truncated:
        summary += " (truncated)"
    return ToolResponse(text=text), summary


class Toolkit:
    """Runs registered tools against one executor."""

    def __init__(
        self,
        executor: SparqlExecutor,
        *,
        endpoint: str,
        internal_timeout_ms: int,
        external_timeout_ms: int,
        character_limit: int,
        usage_log: UsageLog,
    ) -> None:
        self.executor = executor
        self.character_limit = character_limit
        self.usage_log = usage_log
        self.context = ToolContext(
            executor,
            endpoint=endpoint,
            internal_timeout_ms=internal_timeout_ms,
            external_timeout_ms=external_timeout_ms,
            usage_log=usage_log,
        )

    @classmethod
    def from_config(
        cls,
        config: type[Config] = Config,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Toolkit:
        return cls(
            SparqlExecutor(transport=transport),
            endpoint=config.SPARQL_ENDPOINT,
            internal_timeout_ms=config.INTERNAL_TIMEOUT_MS,
            external_timeout_ms=config.EXTERNAL_TIMEOUT_MS,
            character_limit=config.CHARACTER_LIMIT,
            usage_log=UsageLog(config.USAGE_LOG_PATH),
        )

    async def call(self, name: str, args: dict[str, Any] | None = None) -> ToolResponse:
        """Run tool *name* with *args*; never raises for tool-level failures."""
        args = {k: v for k, v in (args or {}).items() if v is not None}
        outcome = await self._run(name, args)
        response, summary = render(outcome, self.character_limit)
        self._record_usage(name, args, summary)
        return response

    async def _run(self, name: str, args: dict[str, Any]) -> ToolOutcome:
        spec = REGISTRY.get(name)
        if spec is None:
            return ToolFailure(
                error=f"Unknown tool: {name}",
                suggestion=f"Available tools: {', '.join(sorted(REGISTRY))}",
            )

        try:
            inspect.signature(spec.handler).bind(self.context, **args)
        except TypeError as e:
            return ToolFailure(error=f"Invalid arguments for {name}: {e}")

        try:
            return await spec.handler(self.context, **args)
        except SparqlError as e:
            logger.warning("Tool %s failed: %s", name, e)
            return ToolFailure(error=str(e), suggestion=e.suggestion)
        except Exception as e:
            logger.exception("Tool %s raised an unexpected error", name)
            return ToolFailure(error=str(e) or type(e).__name__)

    def _record_usage(self, name: str, args: dict[str, Any], summary: str) -> None:
        try:
            self.usage_log.record(name, args, summary)
        except Exception as e:
            logger.error("Failed to log usage: %s", e)

    async def aclose(self) -> None:
        await self.executor.aclose()

    async def __aenter__(self) -> Toolkit:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
