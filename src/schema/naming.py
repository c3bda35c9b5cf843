"""Table and column name resolution.

This module validates explicit identifiers and resolves table and column
names for import and catalog directives. The default table-name counter
is session state carried by ``NamingContext``, never a process global.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Collection, Sequence

from core.constants import (
    DEFAULT_COLUMN_PREFIX,
    DEFAULT_TABLE_PREFIX,
    FIRST_LINE_SENTINEL,
    MAX_IDENTIFIER_LENGTH,
)
from core.errors import NamingError, SchemaError
from core.types import ColumnNames, Row
from schema.keywords import RESERVED_KEYWORDS

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass
class NamingContext:
    """Session-scoped counter for synthesized table names."""

    next_table_number: int = 1

    def next_table_name(self, taken: Collection[str] = ()) -> str:
        """Return the next free ``table<N>`` name without advancing the counter."""
        number = self.next_table_number
        while f"{DEFAULT_TABLE_PREFIX}{number}" in taken:
            number += 1
        return f"{DEFAULT_TABLE_PREFIX}{number}"

    def claim(self, table_name: str) -> None:
        """Advance the counter past a synthesized name once its table exists."""
        suffix = table_name[len(DEFAULT_TABLE_PREFIX) :]
        if table_name.startswith(DEFAULT_TABLE_PREFIX) and suffix.isdigit():
            self.next_table_number = max(self.next_table_number, int(suffix) + 1)


@dataclass(frozen=True)
class ResolvedColumns:
    """Column resolution outcome.

    Attributes:
        columns: Final ordered column names.
        rows: Data rows, without a consumed header record.
    """

    columns: tuple[str, ...]
    rows: tuple[Row, ...]


def validate_identifier(name: object, kind: str = "identifier") -> str:
    """Validate an explicit table or column identifier.

    Args:
        name: Candidate identifier.
        kind: Human-readable role used in error messages.

    Returns:
        The validated identifier.

    Raises:
        NamingError: If the name is illegal.
    """
    if not isinstance(name, str) or not name:
        raise NamingError(f"Invalid {kind} name {name!r}: expected a non-empty string.")
    if len(name) >= MAX_IDENTIFIER_LENGTH:
        raise NamingError(
            f"Invalid {kind} name '{name[:32]}...': names must be shorter than "
            f"{MAX_IDENTIFIER_LENGTH} characters."
        )
    if not _IDENTIFIER.match(name):
        raise NamingError(
            f"Invalid {kind} name '{name}': start with a letter and use only letters, "
            "digits, and underscores."
        )
    if name.upper() in RESERVED_KEYWORDS:
        raise NamingError(
            f"Invalid {kind} name '{name}': it is a reserved query keyword. Choose another name."
        )
    return name


def resolve_table_name(
    explicit_name: str | None,
    context: NamingContext,
    taken: Collection[str] = (),
) -> str:
    """Resolve a table name from an explicit value or the session counter.

    Raises:
        NamingError: If an explicit name is illegal.
    """
    if explicit_name is not None:
        return validate_identifier(explicit_name, "table")
    return context.next_table_name(taken)


def parse_explicit_columns(column_names: ColumnNames) -> tuple[str, ...] | None:
    """Parse an explicit column list, validating every name.

    Returns:
        Column tuple, or None for no list or the ``first_line`` sentinel.

    Raises:
        NamingError: If a name is illegal.
        SchemaError: If names repeat.
    """
    if column_names is None or column_names == FIRST_LINE_SENTINEL:
        return None
    if isinstance(column_names, str):
        names = tuple(name.strip() for name in column_names.split(","))
    else:
        names = tuple(column_names)
    for name in names:
        validate_identifier(name, "column")
    _require_unique(names)
    return names


def resolve_columns(
    column_names: ColumnNames,
    rows: Sequence[Row],
    discovered: tuple[str, ...] | None = None,
) -> ResolvedColumns:
    """Resolve final column names for decoded rows.

    Precedence: explicit list, then names discovered from the codec
    mapping, then the ``first_line`` header, then ``col1..colN``. With
    ``first_line`` the first record is always consumed as the header, even
    when discovered names win.

    Raises:
        NamingError: If an explicit name is illegal.
        SchemaError: If resolved names repeat.
    """
    explicit = parse_explicit_columns(column_names)
    data_rows = tuple(rows)
    header: tuple[str, ...] | None = None
    if column_names == FIRST_LINE_SENTINEL and data_rows:
        header = tuple("" if value is None else str(value).strip() for value in data_rows[0])
        data_rows = data_rows[1:]
    if explicit is not None:
        columns = explicit
    elif discovered:
        columns = tuple(discovered)
    elif header is not None:
        columns = header
    else:
        width = max((len(row) for row in data_rows), default=0)
        columns = synthesize_columns(width)
    _require_unique(columns)
    return ResolvedColumns(columns=columns, rows=data_rows)


def synthesize_columns(width: int) -> tuple[str, ...]:
    """Return ``col1..colN`` names for ``width`` columns."""
    return tuple(f"{DEFAULT_COLUMN_PREFIX}{index}" for index in range(1, width + 1))


def _require_unique(columns: Sequence[str]) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for column in columns:
        if column in seen and column not in duplicates:
            duplicates.append(column)
        seen.add(column)
    if duplicates:
        raise SchemaError(
            f"Duplicate column names: {', '.join(duplicates)}. Column names must be unique."
        )
