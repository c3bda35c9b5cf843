"""In-memory table store and the table-provider capability.

``TableProvider`` is the interface an external query engine uses to read
and mutate a table without knowing its format. ``Table`` implements it in
memory for transient and batch tables.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol, Sequence

from core.types import Row
from schema.naming import parse_explicit_columns
from store.relation import (
    Assignments,
    Predicate,
    TableScan,
    check_rows,
    delete_rows,
    insert_rows,
    pad_rows,
    update_rows,
)


class TableProvider(Protocol):
    """Read/mutate capability consumed by the external query engine."""

    @property
    def name(self) -> str:
        """Table name."""
        ...

    @property
    def columns(self) -> tuple[str, ...]:
        """Ordered column names."""
        ...

    def scan(self) -> TableScan:
        """Return a restartable traversal over the current rows."""
        ...

    def insert_row(self, values: Sequence[Any] | Mapping[str, Any]) -> None:
        """Append one row."""
        ...

    def update_where(self, predicate: Predicate, assignments: Assignments) -> int:
        """Update matching rows and return how many changed."""
        ...

    def delete_where(self, predicate: Predicate) -> int:
        """Delete matching rows and return how many were removed."""
        ...


class Table:
    """Ordered in-memory relation.

    Every mutation builds and validates the new row set before swapping it
    in, so a failed mutation leaves the table unchanged.
    """

    def __init__(self, name: str, columns: tuple[str, ...], rows: Iterable[Row] = ()) -> None:
        self._name = name
        self._columns = tuple(columns)
        self._rows: tuple[Row, ...] = check_rows(self._columns, rows)

    @classmethod
    def create(cls, name: str, columns: Sequence[str] | str) -> "Table":
        """Create an empty table with validated column names.

        Raises:
            NamingError: If a column name is illegal.
            SchemaError: If column names repeat.
        """
        return cls(name, parse_explicit_columns(columns) or ())

    @property
    def name(self) -> str:
        """Table name."""
        return self._name

    @property
    def columns(self) -> tuple[str, ...]:
        """Ordered column names."""
        return self._columns

    def __len__(self) -> int:
        return len(self._rows)

    def append_rows(self, rows: Iterable[Sequence[Any]]) -> int:
        """Bulk-append rows, padding short rows with absent cells.

        Returns:
            Number of appended rows.

        Raises:
            SchemaError: If a row is wider than the table.
        """
        new_rows = pad_rows(self._columns, rows)
        self._rows = check_rows(self._columns, self._rows + new_rows)
        return len(new_rows)

    def scan(self) -> TableScan:
        """Return a restartable traversal over a snapshot of the rows."""
        return TableScan(self._columns, self._rows)

    def insert_row(self, values: Sequence[Any] | Mapping[str, Any]) -> None:
        """Append one row from a full sequence or a partial column mapping."""
        self._rows = insert_rows(self._columns, self._rows, values)

    def update_where(self, predicate: Predicate, assignments: Assignments) -> int:
        """Update rows matching ``predicate`` and return the count."""
        self._rows, count = update_rows(self._columns, self._rows, predicate, assignments)
        return count

    def delete_where(self, predicate: Predicate) -> int:
        """Delete rows matching ``predicate`` and return the count."""
        self._rows, count = delete_rows(self._columns, self._rows, predicate)
        return count
