"""Shared record-level text helpers for codecs.

This module converts raw input into text, splits records, and applies
the explicit read/write value filters declared in format options.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from core.errors import ParseError
from core.types import Row
from formats.options import ValueFilter


def to_text(raw_input: Any, encoding: str) -> str:
    """Return raw input as text.

    Args:
        raw_input: ``str`` or ``bytes`` content.
        encoding: Encoding used only when input is bytes.

    Returns:
        Decoded text.

    Raises:
        ParseError: If bytes are not valid in ``encoding`` or input is not text.
    """
    if isinstance(raw_input, str):
        return raw_input
    if isinstance(raw_input, (bytes, bytearray)):
        try:
            return bytes(raw_input).decode(encoding)
        except UnicodeDecodeError as error:
            raise ParseError(
                f"Failed to decode input as {encoding}: {error.reason} at byte {error.start}. "
                "Set the 'encoding' option to match the source."
            ) from error
    raise ParseError(
        f"Expected text or bytes input, got {type(raw_input).__name__}. "
        "Use a native-structure format for in-memory data."
    )


def split_records(text: str, record_separator: str) -> list[str]:
    """Split text into non-empty records.

    A trailing separator does not produce an extra record, and empty
    records are skipped.
    """
    return [record for record in text.split(record_separator) if record != ""]


def join_records(records: Iterable[str], record_separator: str) -> str:
    """Join records, terminating the last one with the separator."""
    lines = list(records)
    if not lines:
        return ""
    return record_separator.join(lines) + record_separator


def filter_row(values: Sequence[Any], value_filter: ValueFilter | None) -> Row:
    """Apply an optional value filter to every present cell of a row.

    Raises:
        ParseError: If the filter fails on a value.
    """
    if value_filter is None:
        return tuple(values)
    try:
        return tuple(None if value is None else value_filter(value) for value in values)
    except (ValueError, TypeError, IndexError, KeyError) as error:
        raise ParseError(f"Value filter failed: {error}.") from error


def cell_text(value: Any) -> str:
    """Render one cell as text; absent cells render empty."""
    if value is None:
        return ""
    return str(value)
