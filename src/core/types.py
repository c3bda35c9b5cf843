"""Shared typed models.

This module defines immutable data models used by the format, store,
ingest, and catalog layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence

Cell = Any
Row = tuple[Cell, ...]
RowQuery = Callable[[Any], Iterable[Sequence[Cell]]]
ColumnNames = str | Sequence[str] | None


class PersistenceMode(str, Enum):
    """Durability strategy of one table."""

    TRANSIENT = "transient"
    BATCH = "batch"
    CONTINUOUS = "continuous"


@dataclass(frozen=True)
class DecodeResult:
    """Output of one codec decode call.

    Attributes:
        rows: Decoded field-value rows in source order.
        column_names: Names discovered from the source or an explicit
            codec mapping, when the format provides them.
    """

    rows: tuple[Row, ...]
    column_names: tuple[str, ...] | None = None


@dataclass(frozen=True)
class ImportRequest:
    """Import directive payload.

    Attributes:
        format_tag: Registered format tag of the source.
        source: Local path (relative to the root dir) or remote URL.
        data: Inline data used instead of ``source``.
        table_name: Optional explicit table name.
        column_names: Explicit names, ``"first_line"``, or None.
        options: Raw format-specific option mapping.
    """

    format_tag: str
    source: str | None = None
    data: Any = None
    table_name: str | None = None
    column_names: ColumnNames = None
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExportRequest:
    """Export directive payload.

    Attributes:
        table_name: Table the row query runs over.
        format_tag: Registered format tag of the output.
        target: Destination path or URL; None returns the output only.
        query: Row-producing callable over the table provider; full scan
            when omitted.
        columns: Column names of the query result; table columns when omitted.
        options: Raw format-specific option mapping. ``column_names:
            first_line`` writes a header record first.
    """

    table_name: str
    format_tag: str
    target: str | None = None
    query: RowQuery | None = None
    columns: tuple[str, ...] | None = None
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CatalogEntry:
    """Continuous-mode binding of a table name to a storage location.

    Attributes:
        table_name: Bound table name.
        format_tag: Registered format tag of the location content.
        location: Local path (relative to the root dir) or remote URL.
        options: Raw options, format options plus optional ``column_names``.
    """

    table_name: str
    format_tag: str
    location: str
    options: Mapping[str, Any] = field(default_factory=dict)
