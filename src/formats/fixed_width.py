"""Fixed-width record codec.

Decode slices each line by the declared widths and tolerates short lines.
Encode truncates or space-pads every value to its exact width.
"""

from __future__ import annotations

from typing import Any, Sequence

from core.errors import ParseError, SchemaError
from core.types import DecodeResult, Row
from formats.options import FixedWidthOptions, parse_fixed_width_options
from formats.registry import FormatCodec
from formats.text_records import cell_text, filter_row, join_records, split_records, to_text


def decode_fixed_width(raw_input: Any, options: FixedWidthOptions) -> DecodeResult:
    """Decode fixed-width text into rows.

    Args:
        raw_input: Text or bytes content.
        options: Fixed-width options with the width pattern.

    Returns:
        Rows with one value per declared width.

    Raises:
        ParseError: If a line is longer than the width pattern allows.
    """
    text = to_text(raw_input, options.encoding)
    total_width = sum(options.widths)
    rows: list[Row] = []
    for record_index, line in enumerate(split_records(text, options.record_separator), 1):
        line = line.rstrip("\r")
        if len(line) > total_width:
            raise ParseError(
                f"Record {record_index} has {len(line)} characters but the width pattern "
                f"declares {total_width}. Fix the pattern or the source line.",
                record_index=record_index,
            )
        rows.append(filter_row(_slice_line(line, options.widths), options.read_filter))
    return DecodeResult(rows=tuple(rows))


def encode_fixed_width(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: FixedWidthOptions,
) -> str:
    """Encode rows as fixed-width text.

    Raises:
        SchemaError: If the column count differs from the width pattern.
    """
    if len(columns) != len(options.widths):
        raise SchemaError(
            f"Fixed-width pattern declares {len(options.widths)} fields but "
            f"{len(columns)} columns are being encoded."
        )
    lines = []
    for row in rows:
        values = filter_row(row, options.write_filter)
        lines.append(
            "".join(
                _fit(cell_text(value), width) for value, width in zip(values, options.widths)
            )
        )
    return join_records(lines, options.record_separator)


def _slice_line(line: str, widths: tuple[int, ...]) -> list[str | None]:
    values: list[str | None] = []
    offset = 0
    for width in widths:
        if offset >= len(line):
            values.append(None)
        else:
            values.append(line[offset : offset + width].rstrip(" "))
        offset += width
    return values


def _fit(value: str, width: int) -> str:
    return value[:width].ljust(width)


FIXED_WIDTH_CODEC = FormatCodec(
    tag="fixed",
    parse_options=parse_fixed_width_options,
    decode=decode_fixed_width,
    encode=encode_fixed_width,
)
