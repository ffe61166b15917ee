"""Tools that look at the server's own usage log."""

from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING

from schemagov.outcome import ToolSuccess
from schemagov.tools.registry import tool

if TYPE_CHECKING:
    from schemagov.dispatch import ToolContext

NO_LOGS = {"message": "No usage logs found yet."}

# "?x a <http://...>" in a raw query
_TYPE_PATTERN = re.compile(r"\ba\s+<([^>]+)>")

MIN_REPEATS = 2
RECENT_ERRORS = 5


def local_name(uri: str) -> str:
    """Last path or fragment segment of *uri*."""
    return re.split(r"[/#]", uri.rstrip("/#"))[-1]


@tool("analyze_usage", "Analyze Usage")
async def analyze_usage(ctx: ToolContext) -> ToolSuccess:
    """Total calls, calls per tool, the last distinct errors and the latest activity."""
    log = ctx.usage_log
    if not log.exists():
        return ToolSuccess(data=NO_LOGS)

    total = 0
    per_tool: Counter[str] = Counter()
    errors: list[str] = []
    last_activity = None
    for entry in log.entries():
        total += 1
        tool_name = entry.get("tool")
        if tool_name:
            per_tool[tool_name] += 1
        summary = entry.get("summary") or ""
        if summary.startswith("Error"):
            errors.append(f"[{tool_name}] {summary}")
        last_activity = entry.get("timestamp") or last_activity

    return ToolSuccess(
        data={
            "total_calls": total,
            "tool_breakdown": dict(per_tool),
            "recent_errors": list(dict.fromkeys(reversed(errors)))[:RECENT_ERRORS],
            "last_activity": last_activity,
        }
    )


@tool("suggest_new_tools", "Suggest New Tools")
async def suggest_new_tools(ctx: ToolContext) -> ToolSuccess:
    """Suggest specialized tools for types that raw queries keep asking for.

    A type needs to appear in at least two logged ``query_sparql`` calls.
    """
    log = ctx.usage_log
    if not log.exists():
        return ToolSuccess(data=NO_LOGS)

    counts: Counter[str] = Counter()
    for entry in log.entries():
        args = entry.get("args")
        if entry.get("tool") != "query_sparql" or not isinstance(args, dict):
            continue
        query = args.get("query")
        if isinstance(query, str):
            counts.update(_TYPE_PATTERN.findall(query))

    suggestions = [
        {
            "type": "New Tool Recommendation",
            "reason": f"You frequently query for instances of <{uri}> ({n} times).",
            "suggestion": f"Consider adding a specialized tool: list_{local_name(uri).lower()}",
        }
        for uri, n in counts.most_common()
        if n >= MIN_REPEATS
    ]
    if not suggestions:
        return ToolSuccess(
            data={"message": "No clear patterns found in RAW queries yet to suggest new tools."}
        )
    return ToolSuccess(data=suggestions)
