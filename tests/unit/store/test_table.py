"""Unit tests for the in-memory table."""

from __future__ import annotations

import pytest

from core.errors import NamingError, SchemaError
from store.table import Table


def test_create_validates_columns() -> None:
    """Create should reject illegal column names."""
    with pytest.raises(NamingError):
        Table.create("people", ["first-name"])


def test_every_row_matches_column_count_after_mutations() -> None:
    """The row-width invariant should hold across every mutation."""
    table = Table.create("people", "name,city,age")
    table.append_rows([("Alice", "Portland"), ("Bob", "Seattle", 41)])
    table.insert_row({"name": "Carol"})
    table.update_where(lambda row: row["city"] is None, {"city": "Boise"})
    table.delete_where(lambda row: row["name"] == "Bob")

    assert all(len(row) == len(table.columns) for row in table.scan())
    assert len(table) == 2


def test_failed_append_leaves_rows_unchanged() -> None:
    """A rejected bulk append must not commit any row."""
    table = Table.create("people", ["name"])
    table.append_rows([("Alice",)])

    with pytest.raises(SchemaError):
        table.append_rows([("Bob",), ("Carol", "extra")])

    assert list(table.scan()) == [("Alice",)]


def test_scan_snapshot_ignores_later_mutations() -> None:
    """An existing scan should keep the rows it was created with."""
    table = Table.create("people", ["name"])
    table.insert_row(["Alice"])
    scan = table.scan()

    table.insert_row(["Bob"])

    assert list(scan) == [("Alice",)]
    assert len(table.scan()) == 2
