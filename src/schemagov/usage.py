"""Append-only JSONL usage log of tool invocations."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

logger = logging.getLogger(__name__)


class UsageLog:
    """One JSON object per line: ``{timestamp, tool, args, summary}``."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def record(self, tool: str, args: dict[str, Any], summary: str) -> None:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tool": tool,
            "args": args,
            "summary": summary,
        }
        line = json.dumps(entry, ensure_ascii=False, default=str) + "\n"
        # a single write per line so concurrent writers never split a record
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line)

    def exists(self) -> bool:
        return self.path.is_file()

    def entries(self) -> Iterator[dict[str, Any]]:
        """Parsed log entries; blank and malformed lines are skipped."""
        if not self.exists():
            return
        with self.path.open(encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    entry = json.loads(line)
                except json.JSONDecodeError:
                    logger.debug("Skipping malformed usage log line %d", lineno)
                    continue
                if isinstance(entry, dict):
                    yield entry

    def __repr__(self) -> str:
        return f"UsageLog({str(self.path)!r})"
