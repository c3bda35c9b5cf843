"""Pure row-set operations shared by every table provider.

Each function takes the current columns and rows and returns a new row
tuple, so callers can validate the result before committing it. Both the
in-memory table and the continuous catalog-bound table use these.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence

from core.errors import SchemaError
from core.types import Row

RowView = Mapping[str, Any]
Predicate = Callable[[RowView], bool]
Assignments = Mapping[str, Any]


class TableScan:
    """Restartable read-only traversal over one snapshot of rows.

    Iterating twice yields the same rows; later mutations of the table do
    not affect an existing scan.
    """

    def __init__(self, columns: tuple[str, ...], rows: tuple[Row, ...]) -> None:
        self._columns = columns
        self._rows = rows

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names of the scanned rows."""
        return self._columns

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def as_dicts(self) -> Iterator[dict[str, Any]]:
        """Iterate rows as column-name mappings."""
        for row in self._rows:
            yield dict(zip(self._columns, row))


def row_view(columns: tuple[str, ...], row: Row) -> RowView:
    """Return a read-only column mapping of one row."""
    return MappingProxyType(dict(zip(columns, row)))


def check_rows(columns: tuple[str, ...], rows: Iterable[Row]) -> tuple[Row, ...]:
    """Validate that every row has one cell per column.

    Raises:
        SchemaError: If a row width differs from the column count.
    """
    checked = tuple(rows)
    for index, row in enumerate(checked, 1):
        if len(row) != len(columns):
            raise SchemaError(
                f"Row {index} has {len(row)} cells but the table has {len(columns)} columns."
            )
    return checked


def pad_rows(columns: tuple[str, ...], rows: Iterable[Sequence[Any]]) -> tuple[Row, ...]:
    """Pad short rows with absent cells for bulk append.

    Raises:
        SchemaError: If a row has more cells than there are columns.
    """
    padded: list[Row] = []
    width = len(columns)
    for index, row in enumerate(rows, 1):
        values = tuple(row)
        if len(values) > width:
            raise SchemaError(
                f"Row {index} has {len(values)} values but only {width} columns are defined. "
                "Declare more columns or fix the source record."
            )
        padded.append(values + (None,) * (width - len(values)))
    return tuple(padded)


def build_row(columns: tuple[str, ...], values: Sequence[Any] | Mapping[str, Any]) -> Row:
    """Build one row from a full value sequence or a partial column mapping.

    Columns missing from a mapping are absent.

    Raises:
        SchemaError: If the sequence width is wrong or a mapping key is unknown.
    """
    if isinstance(values, Mapping):
        _require_known_columns(columns, values.keys())
        return tuple(values.get(column) for column in columns)
    row = tuple(values)
    if len(row) != len(columns):
        raise SchemaError(
            f"Insert supplies {len(row)} values but the table has {len(columns)} columns."
        )
    return row


def insert_rows(
    columns: tuple[str, ...],
    rows: tuple[Row, ...],
    values: Sequence[Any] | Mapping[str, Any],
) -> tuple[Row, ...]:
    """Return rows with one new row appended."""
    return check_rows(columns, rows + (build_row(columns, values),))


def update_rows(
    columns: tuple[str, ...],
    rows: tuple[Row, ...],
    predicate: Predicate,
    assignments: Assignments,
) -> tuple[tuple[Row, ...], int]:
    """Apply assignments to every row matching the predicate.

    Assignment values may be callables of the row mapping.

    Returns:
        Pair of the new rows and the number of updated rows.

    Raises:
        SchemaError: If an assignment names an unknown column.
    """
    _require_known_columns(columns, assignments.keys())
    positions = {column: index for index, column in enumerate(columns)}
    updated: list[Row] = []
    count = 0
    for row in rows:
        view = row_view(columns, row)
        if not predicate(view):
            updated.append(row)
            continue
        cells = list(row)
        for column, value in assignments.items():
            cells[positions[column]] = value(view) if callable(value) else value
        updated.append(tuple(cells))
        count += 1
    return check_rows(columns, updated), count


def delete_rows(
    columns: tuple[str, ...],
    rows: tuple[Row, ...],
    predicate: Predicate,
) -> tuple[tuple[Row, ...], int]:
    """Remove every row matching the predicate.

    Returns:
        Pair of the remaining rows and the number of deleted rows.
    """
    kept = tuple(row for row in rows if not predicate(row_view(columns, row)))
    return check_rows(columns, kept), len(rows) - len(kept)


def _require_known_columns(columns: tuple[str, ...], names: Iterable[str]) -> None:
    unknown = sorted(set(names) - set(columns))
    if unknown:
        raise SchemaError(
            f"Unknown column(s): {', '.join(unknown)}. Table columns: {', '.join(columns)}."
        )
