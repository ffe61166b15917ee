"""Per-invocation tool outcomes."""

from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel


class ToolSuccess(BaseModel):
    data: Any
    row_count: Optional[int] = None


class ToolFailure(BaseModel):
    error: str
    suggestion: Optional[str] = None


ToolOutcome = Union[ToolSuccess, ToolFailure]


class ToolResponse(BaseModel):
    """What the dispatch boundary hands to a transport: text plus error flag."""

    text: str
    is_error: bool = False
