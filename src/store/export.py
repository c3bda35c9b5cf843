"""Batch export and format conversion.

Export runs a row query over a table provider, encodes the result, and
overwrites the target in full. The target is never read first.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Sequence

from core.constants import DEFAULT_ENCODING, FIRST_LINE_SENTINEL
from core.errors import ConfigurationError
from core.logging_config import get_logger
from core.types import ColumnNames, ExportRequest, Row
from formats.registry import CodecRegistry, encode_with
from schema.naming import resolve_columns
from store.location_io import resolve_location, write_location
from store.relation import pad_rows
from store.table import TableProvider
from transport.fetch import Fetcher

_LOGGER = get_logger(__name__)


def export_table(
    request: ExportRequest,
    provider: TableProvider,
    registry: CodecRegistry,
    fetcher: Fetcher,
    root_dir: Path,
) -> Any:
    """Encode query results and optionally write them to a target.

    Args:
        request: Export directive.
        provider: Table the query runs over.
        registry: Codec registry.
        fetcher: Transport for remote targets.
        root_dir: Base directory for relative targets.

    Returns:
        Encoded output, also when it was written to a target.

    Raises:
        ConfigurationError: If the format cannot encode or write the target.
        ParseError: If a value or a caller callable fails during encode.
        SchemaError: If query rows do not match the result columns.
        StorageError: If the output cannot be encoded for or written to the target.
    """
    header_option, format_options = _split_header_option(request.options, request.format_tag)
    codec, options = registry.resolve(request.format_tag, format_options)
    if not codec.can_encode:
        raise ConfigurationError(
            f"Format '{codec.tag}' cannot be exported. Choose a format that supports encode."
        )
    if request.target is not None and not codec.text_output:
        raise ConfigurationError(
            f"Format '{codec.tag}' produces in-memory structures and cannot be written to "
            f"{request.target}. Omit the target to receive the output directly."
        )
    columns = tuple(request.columns) if request.columns is not None else provider.columns
    rows = request.query(provider) if request.query is not None else provider.scan()
    records: list[Sequence[Any]] = [tuple(row) for row in rows]
    if header_option == FIRST_LINE_SENTINEL:
        records.insert(0, columns)
    output = encode_with(codec, options, records, columns)
    if request.target is not None:
        resolved = resolve_location(request.target, root_dir)
        write_location(resolved, output, getattr(options, "encoding", DEFAULT_ENCODING), fetcher)
        _LOGGER.info(
            "table_exported",
            table_name=provider.name,
            format_tag=codec.tag,
            target=resolved.display,
            row_count=len(records),
        )
    return output


def convert(
    registry: CodecRegistry,
    source_format: str,
    data: Any,
    target_format: str,
    source_options: Mapping[str, Any] | None = None,
    target_options: Mapping[str, Any] | None = None,
    column_names: ColumnNames = None,
) -> Any:
    """Decode ``data`` in one format and encode it in another.

    No table is created. ``column_names`` resolves the intermediate
    columns, and ``column_names: first_line`` in ``target_options`` writes
    a header record.

    Raises:
        ConfigurationError: If a format is unknown or cannot encode.
        ParseError: If ``data`` is malformed.
        SchemaError: If rows are wider than the resolved columns.
    """
    decoded = registry.decode(source_format, data, source_options)
    resolved = resolve_columns(column_names, decoded.rows, decoded.column_names)
    rows: tuple[Row, ...] = pad_rows(resolved.columns, resolved.rows)
    header_option, format_options = _split_header_option(target_options or {}, target_format)
    codec, options = registry.resolve(target_format, format_options)
    records: list[Sequence[Any]] = list(rows)
    if header_option == FIRST_LINE_SENTINEL:
        records.insert(0, resolved.columns)
    return encode_with(codec, options, records, resolved.columns)


def _split_header_option(
    raw_options: Mapping[str, Any],
    format_tag: str,
) -> tuple[str | None, dict[str, Any]]:
    header_option = raw_options.get("column_names")
    if header_option not in (None, FIRST_LINE_SENTINEL):
        raise ConfigurationError(
            f"Option 'column_names' for exporting '{format_tag}' must be '{FIRST_LINE_SENTINEL}' "
            "or omitted. Pass result columns through ExportRequest.columns instead."
        )
    format_options = {key: value for key, value in raw_options.items() if key != "column_names"}
    return header_option, format_options
