"""Key/value assignment codec.

Each assignment line decodes to a ``[key, value]`` pair. Section headers,
comments, and blank lines are skipped, so grouping is not preserved.
"""

from __future__ import annotations

from typing import Any, Sequence

from core.constants import KEY_VALUE_COLUMNS
from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import KeyValueOptions, parse_key_value_options
from formats.registry import FormatCodec
from formats.text_records import cell_text, filter_row, join_records, split_records, to_text


def decode_key_value(raw_input: Any, options: KeyValueOptions) -> DecodeResult:
    """Decode assignment lines into key/value rows.

    Raises:
        ParseError: If a non-comment line has no separator.
    """
    text = to_text(raw_input, options.encoding)
    rows: list[Row] = []
    for record_index, line in enumerate(split_records(text, options.record_separator), 1):
        stripped = line.strip()
        if _is_ignorable(stripped, options):
            continue
        key, separator, value = stripped.partition(options.separator)
        if not separator:
            raise ParseError(
                f"Record {record_index} is not an assignment: expected "
                f"'key{options.separator}value', got '{stripped}'.",
                record_index=record_index,
            )
        rows.append(filter_row((key.strip(), value.strip()), options.read_filter))
    return DecodeResult(rows=tuple(rows), column_names=KEY_VALUE_COLUMNS)


def encode_key_value(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: KeyValueOptions,
) -> str:
    """Encode rows as ``key = value`` lines from the first two columns."""
    lines = []
    for row in rows:
        values = filter_row(row, options.write_filter)
        key = cell_text(values[0]) if values else ""
        value = cell_text(values[1]) if len(values) > 1 else ""
        lines.append(f"{key} {options.separator} {value}")
    return join_records(lines, options.record_separator)


def _is_ignorable(line: str, options: KeyValueOptions) -> bool:
    if not line:
        return True
    if line.startswith("[") and line.endswith("]"):
        return True
    return any(line.startswith(prefix) for prefix in options.comment_prefixes)


KEY_VALUE_CODEC = FormatCodec(
    tag="key_value",
    parse_options=parse_key_value_options,
    decode=decode_key_value,
    encode=encode_key_value,
)
INI_CODEC = FormatCodec(
    tag="ini",
    parse_options=parse_key_value_options,
    decode=decode_key_value,
    encode=encode_key_value,
)
