"""Caller-defined record codec.

The engine only splits records by the record separator; field extraction
is delegated to the caller's ``record_parser`` for every record.
"""

from __future__ import annotations

from typing import Any, Sequence

from core.errors import ConfigurationError, ParseError
from core.types import DecodeResult, Row
from formats.options import UserDefinedOptions, parse_user_defined_options
from formats.registry import FormatCodec
from formats.text_records import filter_row, join_records, split_records, to_text


def decode_user_defined(raw_input: Any, options: UserDefinedOptions) -> DecodeResult:
    """Decode records through the caller-supplied parser.

    Raises:
        ParseError: If the parser fails or returns a non-sequence.
    """
    parser = options.record_parser
    if parser is None:
        raise ConfigurationError("Format 'user_defined' requires a 'record_parser'.")
    text = to_text(raw_input, options.encoding)
    rows: list[Row] = []
    for record_index, record in enumerate(split_records(text, options.record_separator), 1):
        try:
            values = parser(record)
        except (ValueError, TypeError, IndexError, KeyError) as error:
            raise ParseError(
                f"record_parser failed on record {record_index}: {error}.",
                record_index=record_index,
            ) from error
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise ParseError(
                f"record_parser returned {type(values).__name__} for record {record_index}; "
                "expected a sequence of field values.",
                record_index=record_index,
            )
        rows.append(filter_row(values, options.read_filter))
    return DecodeResult(rows=tuple(rows))


def encode_user_defined(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: UserDefinedOptions,
) -> str:
    """Encode rows through the caller-supplied formatter.

    Raises:
        ConfigurationError: If no ``record_formatter`` was supplied.
        ParseError: If the formatter fails or returns something other than text.
    """
    formatter = options.record_formatter
    if formatter is None:
        raise ConfigurationError(
            "Format 'user_defined' cannot be encoded without a 'record_formatter' option."
        )
    records: list[str] = []
    for record_index, row in enumerate(rows, 1):
        values = filter_row(row, options.write_filter)
        try:
            record = formatter(values)
        except (ValueError, TypeError, IndexError, KeyError) as error:
            raise ParseError(
                f"record_formatter failed on row {record_index}: {error}.",
                record_index=record_index,
            ) from error
        if not isinstance(record, str):
            raise ParseError(
                f"record_formatter returned {type(record).__name__} for row {record_index}; "
                "expected text.",
                record_index=record_index,
            )
        records.append(record)
    return join_records(records, options.record_separator)


USER_DEFINED_CODEC = FormatCodec(
    tag="user_defined",
    parse_options=parse_user_defined_options,
    decode=decode_user_defined,
    encode=encode_user_defined,
)
