"""Native in-memory structure codecs.

``array_of_arrays`` accepts a sequence of row sequences and
``array_of_maps`` a sequence of column mappings. No text parsing happens;
encode hands back the same kind of structure.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import NativeOptions, build_options
from formats.registry import FormatCodec
from formats.text_records import filter_row


def decode_array_of_arrays(raw_input: Any, options: NativeOptions) -> DecodeResult:
    """Accept a sequence of row sequences as rows.

    Raises:
        ParseError: If input or one of its rows is not a sequence.
    """
    _require_sequence(raw_input, "array_of_arrays input")
    rows: list[Row] = []
    for record_index, row in enumerate(raw_input, 1):
        if isinstance(row, (str, bytes)) or not isinstance(row, Sequence):
            raise ParseError(
                f"Row {record_index} of array_of_arrays input is not a sequence.",
                record_index=record_index,
            )
        rows.append(filter_row(row, options.read_filter))
    return DecodeResult(rows=tuple(rows))


def encode_array_of_arrays(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: NativeOptions,
) -> list[list[Any]]:
    """Return rows as a list of lists."""
    return [list(filter_row(row, options.write_filter)) for row in rows]


def decode_array_of_maps(raw_input: Any, options: NativeOptions) -> DecodeResult:
    """Accept a sequence of mappings; columns follow first-seen key order.

    Raises:
        ParseError: If input or one of its items is not a mapping.
    """
    _require_sequence(raw_input, "array_of_maps input")
    columns: list[str] = []
    for record_index, item in enumerate(raw_input, 1):
        if not isinstance(item, Mapping):
            raise ParseError(
                f"Item {record_index} of array_of_maps input is not a mapping.",
                record_index=record_index,
            )
        for key in item:
            if str(key) not in columns:
                columns.append(str(key))
    rows = tuple(
        filter_row([_lookup(item, column) for column in columns], options.read_filter)
        for item in raw_input
    )
    return DecodeResult(rows=rows, column_names=tuple(columns))


def encode_array_of_maps(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: NativeOptions,
) -> list[dict[str, Any]]:
    """Return rows as a list of column mappings."""
    return [dict(zip(columns, filter_row(row, options.write_filter))) for row in rows]


def _lookup(item: Mapping[Any, Any], column: str) -> Any:
    if column in item:
        return item[column]
    for key, value in item.items():
        if str(key) == column:
            return value
    return None


def _require_sequence(raw_input: Any, context: str) -> None:
    if isinstance(raw_input, (str, bytes)) or not isinstance(raw_input, Sequence):
        raise ParseError(
            f"Invalid {context}: expected a list, got {type(raw_input).__name__}. "
            "Use a text format for file content."
        )


def _parse_native_options(raw_options: Mapping[str, Any], format_tag: str) -> NativeOptions:
    return build_options(NativeOptions, raw_options, format_tag)


ARRAY_OF_ARRAYS_CODEC = FormatCodec(
    tag="array_of_arrays",
    parse_options=_parse_native_options,
    decode=decode_array_of_arrays,
    encode=encode_array_of_arrays,
    text_output=False,
)
ARRAY_OF_MAPS_CODEC = FormatCodec(
    tag="array_of_maps",
    parse_options=_parse_native_options,
    decode=decode_array_of_maps,
    encode=encode_array_of_maps,
    text_output=False,
)
