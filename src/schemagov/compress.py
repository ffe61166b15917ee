"""Token-efficient shapes for result sets.

Small results (up to :data:`TABULAR_THRESHOLD` rows) are returned as a list
of sparse ``{variable: value}`` records.  Larger results switch to a
columnar ``{"headers": [...], "rows": [[...], ...]}`` layout so that
variable names are not repeated on every row.  Datatype and language tags
are dropped in both shapes.
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

from pydantic import BaseModel, model_validator

from schemagov.query import ResultSet

TABULAR_THRESHOLD = 5

RecordList = list[dict[str, str]]


class TabularResult(BaseModel):
    """Shared header list plus positional rows (``None`` = unbound)."""

    headers: list[str]
    rows: list[list[Optional[str]]]

    @model_validator(mode="after")
    def _rows_match_headers(self) -> TabularResult:
        width = len(self.headers)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"row {index} has {len(row)} cells, expected {width}")
        return self


CompressedResult = Union[RecordList, TabularResult]


def compress(result: ResultSet) -> CompressedResult:
    """Compress *result* into a record list or a :class:`TabularResult`."""
    if not result.rows:
        return []

    if len(result.rows) > TABULAR_THRESHOLD:
        headers = list(result.variables)
        return TabularResult(
            headers=headers,
            rows=[
                [row[h].value if h in row else None for h in headers]
                for row in result.rows
            ],
        )

    return [
        {variable: binding.value for variable, binding in row.items()}
        for row in result.rows
    ]


def compress_records(
    records: Sequence[dict[str, Optional[str]]], headers: Sequence[str]
) -> CompressedResult:
    """Apply the same size threshold to already-flattened records.

    Missing or ``None`` values are omitted in the record-list shape and
    become ``None`` cells in the tabular shape.
    """
    if not records:
        return []

    if len(records) > TABULAR_THRESHOLD:
        return TabularResult(
            headers=list(headers),
            rows=[[record.get(h) for h in headers] for record in records],
        )

    return [
        {h: record[h] for h in headers if record.get(h) is not None}
        for record in records
    ]
