"""Typed SPARQL result sets.

This module provides:

* Pydantic result models (:class:`Binding`, :class:`ResultSet`) that give
  strongly-typed access to SPARQL JSON result bindings.
* :func:`parse_results`, which turns a decoded SPARQL 1.1 JSON results
  document into a :class:`ResultSet` or raises
  :class:`~schemagov.errors.ParseError`.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from schemagov.errors import ParseError

logger = logging.getLogger(__name__)

XSD_BOOLEAN = "http://www.w3.org/2001/XMLSchema#boolean"

# ── Result models ─────────────────────────────────────────────────


class Binding(BaseModel):
    """One variable's value in one result row."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["uri", "literal", "bnode"]
    value: str
    datatype: Optional[str] = None
    language: Optional[str] = None


class ResultSet(BaseModel):
    """Declared variables plus sparse rows.

    A variable missing from a row's mapping is unbound in that row.
    """

    model_config = ConfigDict(frozen=True)

    variables: tuple[str, ...] = ()
    rows: tuple[dict[str, Binding], ...] = ()

    @model_validator(mode="after")
    def _rows_use_declared_variables(self) -> ResultSet:
        declared = set(self.variables)
        for index, row in enumerate(self.rows):
            unknown = set(row) - declared
            if unknown:
                raise ValueError(
                    f"row {index} binds undeclared variables: {sorted(unknown)}"
                )
        return self

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def values(self, variable: str) -> list[str]:
        """Plain values of *variable* across rows, skipping unbound cells."""
        return [row[variable].value for row in self.rows if variable in row]

    def first_value(self, variable: str, default: str | None = None) -> str | None:
        for row in self.rows:
            if variable in row:
                return row[variable].value
        return default


# ── Parsing ───────────────────────────────────────────────────────


def _parse_binding(variable: str, cell: Any) -> Binding:
    if not isinstance(cell, dict) or not isinstance(cell.get("value"), str):
        raise ParseError(f"Malformed binding for ?{variable}: {cell!r}")
    cell_type = cell.get("type", "literal")
    if cell_type == "uri":
        kind = "uri"
    elif cell_type == "bnode":
        kind = "bnode"
    else:
        # "literal" and the legacy "typed-literal"
        kind = "literal"
    return Binding(
        kind=kind,
        value=cell["value"],
        datatype=cell.get("datatype"),
        language=cell.get("xml:lang"),
    )


def parse_results(payload: Any) -> ResultSet:
    """Build a :class:`ResultSet` from a SPARQL JSON results document.

    ASK results become a single ``boolean`` row.  Variables bound in rows
    but absent from ``head.vars`` are appended to the declared variables.

    Raises
    ------
    ParseError
        If *payload* does not have the SPARQL JSON results shape.
    """
    if not isinstance(payload, dict):
        raise ParseError("Response is not a JSON object")

    if isinstance(payload.get("boolean"), bool):
        value = "true" if payload["boolean"] else "false"
        return ResultSet(
            variables=("boolean",),
            rows=({"boolean": Binding(kind="literal", value=value, datatype=XSD_BOOLEAN)},),
        )

    results = payload.get("results")
    bindings = results.get("bindings") if isinstance(results, dict) else None
    if not isinstance(bindings, list):
        raise ParseError("Response has no results.bindings list")

    head = payload.get("head")
    declared = head.get("vars", []) if isinstance(head, dict) else []
    if not isinstance(declared, list) or not all(isinstance(v, str) for v in declared):
        raise ParseError("Response head.vars is not a list of names")

    variables = list(declared)
    seen = set(variables)
    rows: list[dict[str, Binding]] = []
    for binding in bindings:
        if not isinstance(binding, dict):
            raise ParseError(f"Malformed result row: {binding!r}")
        row: dict[str, Binding] = {}
        for variable, cell in binding.items():
            if variable not in seen:
                logger.debug("Result row binds undeclared variable ?%s", variable)
                variables.append(variable)
                seen.add(variable)
            row[variable] = _parse_binding(variable, cell)
        rows.append(row)

    return ResultSet(variables=tuple(variables), rows=tuple(rows))
