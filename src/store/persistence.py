"""Continuous persistence for catalog-bound tables.

``BoundTable`` implements the table-provider capability directly over a
storage location. Reads decode the location (or reuse a mirror whose file
fingerprint is unchanged). Each mutation reads, mutates, encodes and then
replaces the location in full while holding the binding's lock.
"""

from __future__ import annotations

from dataclasses import dataclass
import threading
from typing import Any, Callable, Mapping, Sequence

from core.constants import DEFAULT_ENCODING, FIRST_LINE_SENTINEL
from core.errors import (
    ConfigurationError,
    ParseError,
    SchemaError,
    StorageError,
)
from core.logging_config import get_logger
from core.types import CatalogEntry, ColumnNames, Row
from formats.registry import FormatCodec, encode_with
from schema.naming import parse_explicit_columns, resolve_columns
from store.location_io import (
    Fingerprint,
    ResolvedLocation,
    local_fingerprint,
    read_location,
    write_location,
)
from store.relation import (
    Assignments,
    Predicate,
    TableScan,
    delete_rows,
    insert_rows,
    pad_rows,
    update_rows,
)
from transport.fetch import Fetcher

_LOGGER = get_logger(__name__)

Mutation = Callable[[tuple[str, ...], tuple[Row, ...]], tuple[tuple[Row, ...], int]]


class BindingLocks:
    """One mutual-exclusion lock per bound table name.

    The registry guard is held only while a lock is looked up or created,
    so different bindings never wait on each other.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, table_name: str) -> threading.Lock:
        """Return the lock of ``table_name``, creating it on first use."""
        with self._guard:
            lock = self._locks.get(table_name)
            if lock is None:
                lock = threading.Lock()
                self._locks[table_name] = lock
            return lock


@dataclass(frozen=True)
class _Mirror:
    fingerprint: Fingerprint
    columns: tuple[str, ...]
    rows: tuple[Row, ...]


class BoundTable:
    """Table provider synchronized with a catalog-bound location."""

    def __init__(
        self,
        entry: CatalogEntry,
        resolved: ResolvedLocation,
        codec: FormatCodec,
        options: Any,
        column_names: ColumnNames,
        fetcher: Fetcher,
        lock: threading.Lock,
    ) -> None:
        self._entry = entry
        self._resolved = resolved
        self._codec = codec
        self._options = options
        self._column_names = column_names
        self._explicit_columns = parse_explicit_columns(column_names)
        self._fetcher = fetcher
        self._lock = lock
        self._created_columns: tuple[str, ...] | None = None
        self._mirror: _Mirror | None = None

    @property
    def name(self) -> str:
        """Bound table name."""
        return self._entry.table_name

    @property
    def entry(self) -> CatalogEntry:
        """Catalog binding behind this table."""
        return self._entry

    @property
    def location(self) -> ResolvedLocation:
        """Resolved storage location."""
        return self._resolved

    @property
    def columns(self) -> tuple[str, ...]:
        """Column names of the current location content."""
        return self._load()[0]

    def __len__(self) -> int:
        return len(self._load()[1])

    def scan(self) -> TableScan:
        """Return a restartable traversal over freshly read rows."""
        columns, rows = self._load()
        return TableScan(columns, rows)

    def insert_row(self, values: Sequence[Any] | Mapping[str, Any]) -> None:
        """Append one row and rewrite the location."""
        self._mutate(
            "insert",
            lambda columns, rows: (insert_rows(columns, rows, values), 1),
        )

    def update_where(self, predicate: Predicate, assignments: Assignments) -> int:
        """Update matching rows, rewrite the location, and return the count."""
        return self._mutate(
            "update",
            lambda columns, rows: update_rows(columns, rows, predicate, assignments),
        )

    def delete_where(self, predicate: Predicate) -> int:
        """Delete matching rows, rewrite the location, and return the count."""
        return self._mutate(
            "delete",
            lambda columns, rows: delete_rows(columns, rows, predicate),
        )

    def initialize(self, columns: tuple[str, ...]) -> None:
        """Write an empty table with ``columns`` to a new location.

        Raises:
            StorageError: If the local location already exists or the write fails.
            ConfigurationError: If the location cannot be written.
        """
        self._require_writable()
        with self._lock:
            if self._resolved.path is not None and self._resolved.path.exists():
                raise StorageError(
                    f"Failed to create table '{self.name}': {self._resolved.display} already "
                    "exists. Drop or import the existing content instead.",
                    location=self._resolved.display,
                )
            self._write(columns, ())
        self._created_columns = columns

    def _mutate(self, operation: str, mutation: Mutation) -> int:
        self._require_writable()
        with self._lock:
            columns, rows = self._load()
            new_rows, count = mutation(columns, rows)
            self._write(columns, new_rows)
        _LOGGER.info(
            "continuous_write_committed",
            table_name=self.name,
            operation=operation,
            location=self._resolved.display,
            affected_rows=count,
            row_count=len(new_rows),
        )
        return count

    def _require_writable(self) -> None:
        if not self._codec.can_write_file:
            raise ConfigurationError(
                f"Table '{self.name}' is bound to format '{self._codec.tag}', which cannot "
                "write files. Bind it to a writable text format to allow changes."
            )
        if self._resolved.remote and not self._fetcher.supports_write(self._resolved.location):
            raise ConfigurationError(
                f"Table '{self.name}' is bound to read-only remote location "
                f"{self._resolved.display}. Bind it to a local path or a writable scheme."
            )

    def _load(self) -> tuple[tuple[str, ...], tuple[Row, ...]]:
        fingerprint = local_fingerprint(self._resolved)
        mirror = self._mirror
        if mirror is not None and fingerprint is not None and mirror.fingerprint == fingerprint:
            return mirror.columns, mirror.rows
        if fingerprint is None and self._resolved.path is not None:
            if self._explicit_columns is not None and not self._resolved.path.exists():
                return self._explicit_columns, ()
        try:
            raw_input = read_location(
                self._resolved,
                self._fetcher,
                as_file_mapping=not self._codec.text_output,
            )
            result = self._codec.decode(raw_input, self._options)
            resolved = resolve_columns(self._column_names, result.rows, result.column_names)
            columns = resolved.columns
            if not columns and not resolved.rows and self._created_columns:
                columns = self._created_columns
            rows = pad_rows(columns, resolved.rows)
        except (ParseError, SchemaError) as error:
            raise StorageError(
                f"Failed to read table '{self.name}' from {self._resolved.display}: {error}",
                location=self._resolved.display,
                cause=error,
            ) from error
        if fingerprint is not None:
            self._mirror = _Mirror(fingerprint, columns, rows)
        return columns, rows

    def _write(self, columns: tuple[str, ...], rows: tuple[Row, ...]) -> None:
        try:
            records: list[Sequence[Any]] = list(rows)
            if self._column_names == FIRST_LINE_SENTINEL:
                records.insert(0, columns)
            content = encode_with(self._codec, self._options, records, columns)
            write_location(
                self._resolved,
                content,
                getattr(self._options, "encoding", DEFAULT_ENCODING),
                self._fetcher,
            )
        except (ParseError, SchemaError, StorageError, ValueError, TypeError) as error:
            _LOGGER.warning(
                "continuous_write_failed",
                table_name=self.name,
                location=self._resolved.display,
                error=str(error),
            )
            if isinstance(error, StorageError):
                raise
            raise StorageError(
                f"Failed to write table '{self.name}' to {self._resolved.display}: {error}",
                location=self._resolved.display,
                cause=error,
            ) from error
        fingerprint = local_fingerprint(self._resolved)
        self._mirror = None if fingerprint is None else _Mirror(fingerprint, columns, rows)
