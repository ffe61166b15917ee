"""Concurrent fan-out and reconciliation of keyed lookups.

Several independently queryable result sets that share a natural key
(e.g. an ISTAT code) are fetched concurrently and merged into one record
per key.  A separate count query supplies pagination metadata.

Fan-out is all-or-nothing: if any sub-query fails, the composite operation
fails with that error and no partial result is produced.  Sibling calls are
not cancelled; their outcome is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence

from pydantic import BaseModel, model_validator

from schemagov.compress import CompressedResult, compress_records
from schemagov.errors import ParseError
from schemagov.query import ResultSet
from schemagov.query_builder import Query

logger = logging.getLogger(__name__)

# (current, candidate) -> True if candidate replaces current
DuplicatePolicy = Callable[[str, str], bool]


def prefer_longest(current: str, candidate: str) -> bool:
    """Keep the longer label; on equal length the first one seen stays.

    A heuristic for entities listed under several spellings (historical or
    abbreviated names), not an authoritative canonicalization rule.
    """
    return len(candidate) > len(current)


def prefer_first(current: str, candidate: str) -> bool:
    return False


async def fan_out(*calls: Awaitable[Any]) -> list[Any]:
    """Await all *calls* concurrently and return their results in order.

    The first failure propagates; no partial results are returned.
    """
    return list(await asyncio.gather(*calls))


# ── Pagination ────────────────────────────────────────────────────


class PaginationInfo(BaseModel):
    total: int
    count: int
    offset: int
    has_more: bool
    next_offset: Optional[int] = None

    @model_validator(mode="after")
    def _consistent(self) -> PaginationInfo:
        if self.total < self.count:
            raise ValueError("total must be >= count")
        if self.has_more != (self.offset + self.count < self.total):
            raise ValueError("has_more inconsistent with offset + count < total")
        expected = self.offset + self.count if self.has_more else None
        if self.next_offset != expected:
            raise ValueError("next_offset must be offset + count when has_more")
        return self

    @classmethod
    def from_page(cls, total: int, count: int, offset: int) -> PaginationInfo:
        """Pagination for a page of *count* rows starting at *offset*.

        *total* comes from an independent count query and is reported as
        is; it is only raised to *count* when it lags the page itself.
        An *offset* past the end gives an empty page with ``has_more`` false.
        """
        total = max(total, count)
        has_more = offset + count < total
        return cls(
            total=total,
            count=count,
            offset=offset,
            has_more=has_more,
            next_offset=offset + count if has_more else None,
        )


def count_from(result: ResultSet, variable: str = "total") -> int:
    """Read an integer aggregate such as ``(COUNT(?x) AS ?total)``."""
    raw = result.first_value(variable, "0")
    try:
        return int(raw)
    except ValueError as e:
        raise ParseError(f"Count ?{variable} is not an integer: {raw!r}") from e


# ── Reconciliation ────────────────────────────────────────────────


@dataclass
class ReconciledRecord:
    key: str
    value: str
    extras: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AuxiliaryLookup:
    """An extra ``key -> value`` source attached as field *name*."""

    name: str
    query: Query
    value_var: str


def lookup_map(result: ResultSet, key: str, value: str) -> dict[str, str]:
    """Map each bound *key* to its *value* (later rows overwrite earlier)."""
    mapping: dict[str, str] = {}
    for row in result.rows:
        if key in row and value in row:
            mapping[row[key].value] = row[value].value
    return mapping


def reconcile(
    primary: ResultSet,
    auxiliaries: dict[str, dict[str, str]],
    *,
    key: str,
    value: str,
    policy: DuplicatePolicy = prefer_longest,
) -> list[ReconciledRecord]:
    """Merge *primary* rows with auxiliary lookup maps.

    One record survives per key; *policy* chooses between duplicates.
    Rows missing the key or the value are skipped.  The output is ordered
    by key.
    """
    survivors: dict[str, str] = {}
    for row in primary.rows:
        if key not in row or value not in row:
            continue
        k, v = row[key].value, row[value].value
        if k not in survivors or policy(survivors[k], v):
            survivors[k] = v

    records = []
    for k in sorted(survivors):
        extras = {name: lookup[k] for name, lookup in auxiliaries.items() if k in lookup}
        records.append(ReconciledRecord(key=k, value=survivors[k], extras=extras))
    return records


@dataclass
class ReconciledPage:
    records: list[ReconciledRecord]
    headers: list[str]
    row_count: int
    pagination: Optional[PaginationInfo] = None

    def as_dicts(self) -> list[dict[str, Optional[str]]]:
        key, value, *extras = self.headers
        return [
            {key: r.key, value: r.value, **{name: r.extras.get(name) for name in extras}}
            for r in self.records
        ]

    def compressed(self) -> CompressedResult:
        return compress_records(self.as_dicts(), self.headers)


@dataclass
class ReconciledLookup:
    """Primary query + auxiliary lookups + optional count, run together."""

    primary: Query
    key: str
    value: str
    auxiliaries: Sequence[AuxiliaryLookup] = ()
    count: Optional[Query] = None
    total_var: str = "total"
    policy: DuplicatePolicy = prefer_longest

    async def run(
        self,
        executor: Any,
        endpoint_url: str,
        *,
        inject_prefixes: bool,
        timeout_ms: int,
        offset: int = 0,
    ) -> ReconciledPage:
        def call(query: Query) -> Awaitable[ResultSet]:
            return executor.execute(
                query, endpoint_url, inject_prefixes=inject_prefixes, timeout_ms=timeout_ms
            )

        queries = [self.primary, *(aux.query for aux in self.auxiliaries)]
        if self.count is not None:
            queries.append(self.count)

        results = await fan_out(*(call(q) for q in queries))
        primary = results[0]
        aux_results = results[1 : 1 + len(self.auxiliaries)]

        lookups = {
            aux.name: lookup_map(result, self.key, aux.value_var)
            for aux, result in zip(self.auxiliaries, aux_results)
        }
        records = reconcile(
            primary, lookups, key=self.key, value=self.value, policy=self.policy
        )
        logger.debug(
            "Reconciled %d primary rows into %d records", primary.row_count, len(records)
        )

        # pages are counted in records: queries page over distinct keys
        pagination = None
        if self.count is not None:
            pagination = PaginationInfo.from_page(
                count_from(results[-1], self.total_var), len(records), offset
            )

        return ReconciledPage(
            records=records,
            headers=[self.key, self.value, *(aux.name for aux in self.auxiliaries)],
            row_count=len(records),
            pagination=pagination,
        )
