"""Import directive source loading.

This module reads an import source (inline data, a local path, or a
remote URL), decodes it with the requested codec, and resolves the final
columns and rows for a new table.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.errors import ConfigurationError
from core.types import ImportRequest, Row
from formats.registry import CodecRegistry
from schema.naming import resolve_columns
from store.location_io import read_location, resolve_location
from store.relation import pad_rows
from transport.fetch import Fetcher


@dataclass(frozen=True)
class ImportedRows:
    """Decoded import content ready for a table.

    Attributes:
        columns: Resolved column names.
        rows: Rows padded to the column count.
        source: Display text of the source, ``<inline>`` for inline data.
    """

    columns: tuple[str, ...]
    rows: tuple[Row, ...]
    source: str


def load_import(
    request: ImportRequest,
    registry: CodecRegistry,
    fetcher: Fetcher,
    root_dir: Path,
) -> ImportedRows:
    """Decode the source of an import directive.

    Args:
        request: Import directive.
        registry: Codec registry.
        fetcher: Transport for remote sources.
        root_dir: Base directory for relative sources.

    Returns:
        Resolved columns and rows.

    Raises:
        ConfigurationError: If the format, options, or source selection is invalid.
        ParseError: If the source is malformed.
        SchemaError: If rows do not fit the resolved columns.
        StorageError: If the source cannot be read.
    """
    codec, options = registry.resolve(request.format_tag, request.options)
    raw_input, source = _read_source(request, fetcher, root_dir, not codec.text_output)
    decoded = codec.decode(raw_input, options)
    resolved = resolve_columns(request.column_names, decoded.rows, decoded.column_names)
    return ImportedRows(
        columns=resolved.columns,
        rows=pad_rows(resolved.columns, resolved.rows),
        source=source,
    )


def _read_source(
    request: ImportRequest,
    fetcher: Fetcher,
    root_dir: Path,
    as_file_mapping: bool,
) -> tuple[Any, str]:
    if request.data is not None and request.source is not None:
        raise ConfigurationError(
            "Import accepts either inline data or a source location, not both."
        )
    if request.data is not None:
        return request.data, "<inline>"
    if request.source is None:
        raise ConfigurationError(
            f"Import of format '{request.format_tag}' needs inline data or a source location."
        )
    resolved = resolve_location(request.source, root_dir)
    return read_location(resolved, fetcher, as_file_mapping=as_file_mapping), resolved.display
