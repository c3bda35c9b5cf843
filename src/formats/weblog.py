"""Web server access log codec (Common and Combined Log Format).

This format is read-only: logs are decoded into rows but never re-encoded.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from core.constants import WEBLOG_COLUMNS
from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import WeblogOptions, build_options
from formats.registry import FormatCodec
from formats.text_records import filter_row, split_records, to_text

_LOG_LINE = re.compile(
    r'^(?P<remote_host>\S+) \S+ (?P<username>\S+) \[(?P<auth_time>[^\]]+)\] '
    r'"(?P<request>[^"]*)" (?P<status>\d{3}|-) (?P<bytes>\d+|-)'
    r'(?: "(?P<referer>[^"]*)" "(?P<client>[^"]*)")?\s*$'
)


def decode_weblog(raw_input: Any, options: WeblogOptions) -> DecodeResult:
    """Decode access log lines; ``-`` placeholders become absent values.

    Raises:
        ParseError: If a line does not follow the log format.
    """
    text = to_text(raw_input, options.encoding)
    rows: list[Row] = []
    for record_index, line in enumerate(split_records(text, "\n"), 1):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        match = _LOG_LINE.match(line)
        if match is None:
            raise ParseError(
                f"Record {record_index} is not a Common or Combined Log Format line.",
                record_index=record_index,
            )
        values = [_absent_dash(match.group(column)) for column in WEBLOG_COLUMNS]
        rows.append(filter_row(values, options.read_filter))
    return DecodeResult(rows=tuple(rows), column_names=WEBLOG_COLUMNS)


def _absent_dash(value: str | None) -> str | None:
    if value is None or value == "-":
        return None
    return value


def _parse_weblog_options(raw_options: Mapping[str, Any], format_tag: str) -> WeblogOptions:
    return build_options(WeblogOptions, raw_options, format_tag)


WEBLOG_CODEC = FormatCodec(
    tag="weblog",
    parse_options=_parse_weblog_options,
    decode=decode_weblog,
)
