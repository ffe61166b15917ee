"""Registry of tool handlers keyed by tool name."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from schemagov.outcome import ToolOutcome

Handler = Callable[..., Awaitable[ToolOutcome]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    title: str
    handler: Handler

    @property
    def description(self) -> str:
        return (self.handler.__doc__ or "").strip()


REGISTRY: dict[str, ToolSpec] = {}


def tool(name: str, title: str) -> Callable[[Handler], Handler]:
    """Register an ``async def handler(ctx, **args) -> ToolOutcome``."""

    def decorator(handler: Handler) -> Handler:
        if name in REGISTRY:
            raise ValueError(f"Tool {name!r} registered twice")
        REGISTRY[name] = ToolSpec(name=name, title=title, handler=handler)
        return handler

    return decorator


def describe_tools() -> list[dict[str, Any]]:
    return [
        {"name": spec.name, "title": spec.title, "description": spec.description}
        for spec in sorted(REGISTRY.values(), key=lambda s: s.name)
    ]
