"""Nested-tag markup codec.

Decode parses the document and flattens it with the fold engine. Encode
rebuilds a document along the same record path so that a continuous-mode
round trip through the file keeps folded ancestor values.
"""

from __future__ import annotations

import re
from typing import Any, Sequence
from xml.etree import ElementTree

from core.errors import ParseError
from core.types import DecodeResult, Row
from fold.engine import FoldPlan, build_fold_plan, fold_tree
from fold.unfold import unfold_rows
from formats.options import MarkupOptions, parse_markup_options
from formats.registry import FormatCodec
from formats.text_records import filter_row, to_text

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
# characters outside the XML 1.0 Char production
_ILLEGAL_XML_CHARS = re.compile(r"[^\x09\x0a\x0d\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


def decode_markup(raw_input: Any, options: MarkupOptions) -> DecodeResult:
    """Decode a markup document into folded rows.

    Raises:
        ParseError: If the document is not well formed.
        SchemaError: If the document root does not match the record path.
    """
    plan = plan_for(options)
    text = to_text(raw_input, options.encoding)
    if not text.strip():
        return DecodeResult(rows=(), column_names=plan.columns if plan.leaf_mappings else None)
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as error:
        line, column = error.position
        raise ParseError(
            f"Malformed markup at line {line}, column {column}: {error}. "
            "Fix the document and retry.",
            record_index=line,
        ) from error
    columns, rows = fold_tree(root, plan)
    filtered = tuple(filter_row(row, options.read_filter) for row in rows)
    return DecodeResult(rows=filtered, column_names=columns)


def encode_markup(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: MarkupOptions,
) -> str:
    """Encode rows as an indented markup document.

    Raises:
        ParseError: If a value holds a character XML cannot represent.
    """
    plan = plan_for(options)
    filtered = [filter_row(row, options.write_filter) for row in rows]
    for row_index, row in enumerate(filtered, 1):
        _check_markup_values(row_index, columns, row)
    root = unfold_rows(plan, columns, filtered)
    ElementTree.indent(root)
    return _XML_DECLARATION + ElementTree.tostring(root, encoding="unicode") + "\n"


def _check_markup_values(row_index: int, columns: tuple[str, ...], row: Row) -> None:
    for column, value in zip(columns, row):
        if value is None:
            continue
        match = _ILLEGAL_XML_CHARS.search(str(value))
        if match is not None:
            raise ParseError(
                f"Row {row_index} column '{column}' holds character {match.group()!r}, "
                "which XML cannot represent. Remove it before writing markup.",
                record_index=row_index,
            )


def plan_for(options: MarkupOptions) -> FoldPlan:
    """Compile the fold plan described by markup options."""
    return build_fold_plan(options.record_path, options.column_map, options.fold_map)


def _parse_options(raw_options: Any, format_tag: str) -> MarkupOptions:
    options = parse_markup_options(raw_options, format_tag)
    plan_for(options)
    return options


XML_CODEC = FormatCodec(
    tag="xml",
    parse_options=_parse_options,
    decode=decode_markup,
    encode=encode_markup,
)
