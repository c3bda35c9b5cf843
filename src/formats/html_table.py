"""HTML table codec.

Decode reads the cell text of one top-level ``<table>`` of an HTML
document, one row per ``<tr>``. Encode writes a plain table; a header row
is written only when the caller prepends one, as for the other text formats.
"""

from __future__ import annotations

from html import escape
from typing import Any, Sequence

from bs4 import BeautifulSoup, Tag

from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import HtmlTableOptions, parse_html_table_options
from formats.registry import FormatCodec
from formats.text_records import cell_text, filter_row, to_text


def _top_level_tables(soup: BeautifulSoup) -> list[Tag]:
    return [table for table in soup.find_all("table") if table.find_parent("table") is None]


def _table_rows(table: Tag) -> list[list[str]]:
    rows: list[list[str]] = []
    for row in table.find_all("tr"):
        if row.find_parent("table") is not table:
            continue
        cells = [
            " ".join(cell.get_text().split())
            for cell in row.find_all(["td", "th"], recursive=False)
        ]
        if cells:
            rows.append(cells)
    return rows


def decode_html_table(raw_input: Any, options: HtmlTableOptions) -> DecodeResult:
    """Decode the selected table of an HTML document.

    Raises:
        ParseError: If the document has fewer tables than ``table_index`` needs.
    """
    soup = BeautifulSoup(to_text(raw_input, options.encoding), "html.parser")
    tables = _top_level_tables(soup)
    if options.table_index >= len(tables):
        raise ParseError(
            f"HTML document has {len(tables)} table(s); table_index "
            f"{options.table_index} is out of range."
        )
    table_rows = _table_rows(tables[options.table_index])
    rows = tuple(filter_row(row, options.read_filter) for row in table_rows)
    return DecodeResult(rows=rows)


def encode_html_table(
    rows: Sequence[Row],
    columns: tuple[str, ...],
    options: HtmlTableOptions,
) -> str:
    """Encode rows as an HTML table, one ``<tr>`` per row."""
    lines = ["<table>"]
    for row in rows:
        values = filter_row(row, options.write_filter)
        cells = "".join(f"<td>{escape(cell_text(value))}</td>" for value in values)
        lines.append(f"<tr>{cells}</tr>")
    lines.append("</table>")
    return "\n".join(lines) + "\n"


HTML_TABLE_CODEC = FormatCodec(
    tag="html_table",
    parse_options=parse_html_table_options,
    decode=decode_html_table,
    encode=encode_html_table,
)
