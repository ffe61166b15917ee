"""Tests for result compression."""

from schemagov.compress import TABULAR_THRESHOLD, TabularResult, compress, compress_records
from schemagov.query import Binding, ResultSet


def _result(variables, rows):
    return ResultSet(
        variables=tuple(variables),
        rows=tuple(
            {k: Binding(kind="literal", value=v, language="it") for k, v in row.items()}
            for row in rows
        ),
    )


def test_empty():
    assert compress(_result(["a"], [])) == []


def test_small_result_is_sparse_records():
    rs = _result(["a", "b"], [{"a": "1", "b": "x"}, {"a": "2"}])
    assert compress(rs) == [{"a": "1", "b": "x"}, {"a": "2"}]


def test_threshold_is_inclusive_for_records():
    rs = _result(["a"], [{"a": str(i)} for i in range(TABULAR_THRESHOLD)])
    assert isinstance(compress(rs), list)


def test_large_result_is_tabular():
    rows = [{"a": str(i), "b": "x"} for i in range(6)]
    rows[3] = {"a": "3"}
    compressed = compress(_result(["a", "b"], rows))

    assert isinstance(compressed, TabularResult)
    assert compressed.headers == ["a", "b"]
    assert len(compressed.rows) == 6
    assert compressed.rows[3] == ["3", None]
    # language tags are dropped
    assert compressed.rows[0] == ["0", "x"]


def test_compress_records():
    records = [{"k": "1", "v": "a", "x": None}, {"k": "2", "v": "b", "x": "X"}]
    assert compress_records(records, ["k", "v", "x"]) == [
        {"k": "1", "v": "a"},
        {"k": "2", "v": "b", "x": "X"},
    ]

    many = [{"k": str(i), "v": "a"} for i in range(7)]
    table = compress_records(many, ["k", "v", "x"])
    assert table.headers == ["k", "v", "x"]
    assert table.rows[0] == ["0", "a", None]
