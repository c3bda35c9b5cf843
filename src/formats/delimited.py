"""Separator-delimited text codecs.

This module implements csv, pipe, tab, passwd, and caller-configured
delimited formats. Records are single-line: quoted fields may contain the
field separator and doubled quotes but never the record separator.
"""

from __future__ import annotations

import csv
from functools import partial
import io
from typing import Any, Sequence

from core.constants import PASSWD_COLUMNS
from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import DelimitedOptions, parse_delimited_options
from formats.registry import FormatCodec
from formats.text_records import cell_text, filter_row, split_records, to_text


def decode_delimited(raw_input: Any, options: DelimitedOptions) -> DecodeResult:
    """Decode delimited text into rows.

    Args:
        raw_input: Text or bytes content.
        options: Delimited options.

    Returns:
        Rows in record order; no column names are discovered.

    Raises:
        ParseError: If a record has malformed quoting.
    """
    text = to_text(raw_input, options.encoding)
    rows: list[Row] = []
    for record_index, record in enumerate(split_records(text, options.record_separator), 1):
        values = parse_delimited_record(record, options, record_index)
        rows.append(filter_row(values, options.read_filter))
    return DecodeResult(rows=tuple(rows))


def parse_delimited_record(
    record: str,
    options: DelimitedOptions,
    record_index: int,
) -> list[str]:
    """Split one record into field values with classic quoting rules.

    Raises:
        ParseError: If quoting is malformed.
    """
    reader = csv.reader(
        [record],
        delimiter=options.field_separator,
        quotechar=options.quote_char,
        doublequote=True,
        strict=True,
    )
    try:
        fields = next(reader, [])
        leftover = next(reader, None)
    except csv.Error as error:
        raise ParseError(
            f"Malformed quoting in record {record_index}: {error}. "
            "Quote fields that contain the separator and double embedded quotes.",
            record_index=record_index,
        ) from error
    if leftover is not None:
        raise ParseError(
            f"Record {record_index} spans more than one line; embedded line breaks "
            "are not supported in delimited records.",
            record_index=record_index,
        )
    return fields


def encode_delimited(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: DelimitedOptions,
) -> str:
    """Encode rows as delimited text.

    Fields containing the separator or the quote character are quoted and
    embedded quotes are doubled.

    Raises:
        ParseError: If a value contains the record separator.
    """
    buffer = io.StringIO()
    writer = csv.writer(
        buffer,
        delimiter=options.field_separator,
        quotechar=options.quote_char,
        doublequote=True,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator=options.record_separator,
    )
    for record_index, row in enumerate(rows, 1):
        values = [cell_text(value) for value in filter_row(row, options.write_filter)]
        _reject_record_separator(values, options.record_separator, record_index)
        writer.writerow(values)
    return buffer.getvalue()


def decode_passwd(raw_input: Any, options: DelimitedOptions) -> DecodeResult:
    """Decode passwd-style colon records with the classic column names."""
    result = decode_delimited(raw_input, options)
    return DecodeResult(rows=result.rows, column_names=PASSWD_COLUMNS)


def _reject_record_separator(values: list[str], record_separator: str, record_index: int) -> None:
    for value in values:
        if record_separator in value or "\n" in value or "\r" in value:
            raise ParseError(
                f"Value in row {record_index} contains a record separator; delimited "
                "records must stay on a single line.",
                record_index=record_index,
            )


CSV_CODEC = FormatCodec(
    tag="csv",
    parse_options=partial(parse_delimited_options, field_separator=","),
    decode=decode_delimited,
    encode=encode_delimited,
)
PIPE_CODEC = FormatCodec(
    tag="pipe",
    parse_options=partial(parse_delimited_options, field_separator="|"),
    decode=decode_delimited,
    encode=encode_delimited,
)
TAB_CODEC = FormatCodec(
    tag="tab",
    parse_options=partial(parse_delimited_options, field_separator="\t"),
    decode=decode_delimited,
    encode=encode_delimited,
)
PASSWD_CODEC = FormatCodec(
    tag="passwd",
    parse_options=partial(parse_delimited_options, field_separator=":"),
    decode=decode_passwd,
    encode=encode_delimited,
)
DELIMITED_CODEC = FormatCodec(
    tag="delimited",
    parse_options=parse_delimited_options,
    decode=decode_delimited,
    encode=encode_delimited,
)
