"""Paragraph codec: one field per line, records separated by blank lines."""

from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import ParagraphOptions, build_options
from formats.registry import FormatCodec
from formats.text_records import cell_text, filter_row, to_text

_BLANK_LINES = re.compile(r"\n[ \t]*\n")


def decode_paragraph(raw_input: Any, options: ParagraphOptions) -> DecodeResult:
    """Decode blank-line separated records into rows."""
    text = to_text(raw_input, options.encoding).replace("\r\n", "\n")
    rows: list[Row] = []
    for block in _BLANK_LINES.split(text):
        lines = [line for line in block.split("\n") if line.strip()]
        if lines:
            rows.append(filter_row(lines, options.read_filter))
    return DecodeResult(rows=tuple(rows))


def encode_paragraph(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: ParagraphOptions,
) -> str:
    """Encode rows as paragraphs.

    Raises:
        ParseError: If a value spans lines or is blank, which cannot be
            represented in this format.
    """
    blocks = []
    for record_index, row in enumerate(rows, 1):
        values = [cell_text(value) for value in filter_row(row, options.write_filter)]
        for value in values:
            if "\n" in value or not value.strip():
                raise ParseError(
                    f"Row {record_index} has a blank or multi-line value; paragraph "
                    "records need one non-blank line per field.",
                    record_index=record_index,
                )
        blocks.append("\n".join(values))
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def _parse_paragraph_options(
    raw_options: Mapping[str, Any],
    format_tag: str,
) -> ParagraphOptions:
    return build_options(ParagraphOptions, raw_options, format_tag)


PARAGRAPH_CODEC = FormatCodec(
    tag="paragraph",
    parse_options=_parse_paragraph_options,
    decode=decode_paragraph,
    encode=encode_paragraph,
)
