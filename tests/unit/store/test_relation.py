"""Unit tests for pure row-set operations."""

from __future__ import annotations

import pytest

from core.errors import SchemaError
from store.relation import (
    TableScan,
    build_row,
    delete_rows,
    insert_rows,
    pad_rows,
    update_rows,
)

COLUMNS = ("name", "age")
ROWS = (("Alice", 34), ("Bob", 41))


def test_scan_is_restartable() -> None:
    """Iterating a scan twice should yield the same rows."""
    scan = TableScan(COLUMNS, ROWS)

    assert list(scan) == list(scan)
    assert list(scan.as_dicts())[1] == {"name": "Bob", "age": 41}


def test_pad_rows_fills_short_rows_and_rejects_wide_rows() -> None:
    """Bulk rows are padded with absent cells but never truncated."""
    assert pad_rows(COLUMNS, [("Carol",)]) == (("Carol", None),)
    with pytest.raises(SchemaError):
        pad_rows(COLUMNS, [("a", 1, "extra")])


def test_build_row_from_partial_mapping() -> None:
    """Missing mapping keys become absent cells."""
    assert build_row(COLUMNS, {"age": 5}) == (None, 5)


def test_build_row_rejects_unknown_column() -> None:
    """Mapping keys must name existing columns."""
    with pytest.raises(SchemaError):
        build_row(COLUMNS, {"email": "x"})


def test_insert_rows_checks_sequence_width() -> None:
    """A full-sequence insert must supply one value per column."""
    with pytest.raises(SchemaError):
        insert_rows(COLUMNS, ROWS, ("Carol",))


def test_update_rows_supports_callable_assignments() -> None:
    """Callable assignment values receive the current row mapping."""
    rows, count = update_rows(
        COLUMNS, ROWS, lambda row: row["name"] == "Bob", {"age": lambda row: row["age"] + 1}
    )

    assert count == 1
    assert rows == (("Alice", 34), ("Bob", 42))


def test_delete_rows_returns_removed_count() -> None:
    """Delete should report how many rows matched."""
    rows, count = delete_rows(COLUMNS, ROWS, lambda row: row["age"] > 40)

    assert count == 1
    assert rows == (("Alice", 34),)
