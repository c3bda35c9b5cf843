"""Typed per-format option models.

This module turns raw option mappings into one frozen options value per
format family. Every mapping is validated here, before codec dispatch,
so codecs only ever see well-formed options.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import re
from typing import Any, Callable, Mapping, Sequence, Union

from core.constants import (
    DEFAULT_ENCODING,
    DEFAULT_KEY_VALUE_SEPARATOR,
    DEFAULT_QUOTE_CHAR,
    DEFAULT_RECORD_SEPARATOR,
)
from core.errors import ConfigurationError

ValueFilter = Callable[[Any], Any]

_WIDTH_TOKEN = re.compile(r"^[Aa]?(\d+)$")


@dataclass(frozen=True)
class DelimitedOptions:
    """Options for separator-delimited text formats."""

    field_separator: str = ","
    record_separator: str = DEFAULT_RECORD_SEPARATOR
    quote_char: str = DEFAULT_QUOTE_CHAR
    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class FixedWidthOptions:
    """Options for fixed-width records.

    Attributes:
        widths: Ordered field widths in characters.
    """

    widths: tuple[int, ...] = ()
    record_separator: str = DEFAULT_RECORD_SEPARATOR
    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class KeyValueOptions:
    """Options for one-assignment-per-line formats."""

    separator: str = DEFAULT_KEY_VALUE_SEPARATOR
    record_separator: str = DEFAULT_RECORD_SEPARATOR
    comment_prefixes: tuple[str, ...] = ("#", ";")
    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class ParagraphOptions:
    """Options for blank-line separated records with one field per line."""

    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class MarkupOptions:
    """Options for nested-tag markup.

    Attributes:
        record_path: Element names from the document root to the record element.
        column_map: Record leaf tag to one column or an ordered list of columns.
        fold_map: Ancestor marker (``office``, ``office^``, ``office/name``)
            to the column its value is broadcast into.
    """

    record_path: tuple[str, ...] = ()
    column_map: Mapping[str, str | tuple[str, ...]] = field(default_factory=dict)
    fold_map: Mapping[str, str] = field(default_factory=dict)
    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class HtmlTableOptions:
    """Options for HTML table documents.

    Attributes:
        table_index: Zero-based index of the ``<table>`` to decode.
    """

    table_index: int = 0
    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class WeblogOptions:
    """Options for Common/Combined Log Format input."""

    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None


@dataclass(frozen=True)
class BinaryMetadataOptions:
    """Options for embedded binary metadata such as ID3v1 trailers."""

    encoding: str = "latin-1"
    read_filter: ValueFilter | None = None


@dataclass(frozen=True)
class NativeOptions:
    """Options for already-structured in-memory input."""

    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


@dataclass(frozen=True)
class UserDefinedOptions:
    """Options for caller-defined record parsing.

    Attributes:
        record_parser: Pure function from one raw record to its field values.
        record_formatter: Optional function from one row to its raw record.
    """

    record_parser: Callable[[str], Sequence[Any]] | None = None
    record_formatter: Callable[[Sequence[Any]], str] | None = None
    record_separator: str = DEFAULT_RECORD_SEPARATOR
    encoding: str = DEFAULT_ENCODING
    read_filter: ValueFilter | None = None
    write_filter: ValueFilter | None = None


FormatOptions = Union[
    DelimitedOptions,
    FixedWidthOptions,
    KeyValueOptions,
    ParagraphOptions,
    MarkupOptions,
    HtmlTableOptions,
    WeblogOptions,
    BinaryMetadataOptions,
    NativeOptions,
    UserDefinedOptions,
]


def build_options(
    options_type: type,
    raw_options: Mapping[str, Any],
    format_tag: str,
    defaults: Mapping[str, Any] | None = None,
) -> Any:
    """Build a typed options value from a raw mapping.

    Args:
        options_type: Options dataclass to instantiate.
        raw_options: Caller-supplied option mapping.
        format_tag: Format tag, used in error messages.
        defaults: Tag-specific defaults applied under caller values.

    Returns:
        Instance of ``options_type``.

    Raises:
        ConfigurationError: If keys are unknown or values are invalid.
    """
    allowed_keys = {item.name for item in fields(options_type)}
    unknown_keys = sorted(set(raw_options) - allowed_keys)
    if unknown_keys:
        raise ConfigurationError(
            f"Unknown option(s) for format '{format_tag}': {', '.join(unknown_keys)}. "
            f"Supported options: {', '.join(sorted(allowed_keys))}."
        )
    values: dict[str, Any] = dict(defaults or {})
    values.update(raw_options)
    _check_common_values(values, format_tag)
    return options_type(**values)


def parse_delimited_options(
    raw_options: Mapping[str, Any],
    format_tag: str,
    field_separator: str = ",",
) -> DelimitedOptions:
    """Parse options for the delimited family of formats."""
    options = build_options(
        DelimitedOptions,
        raw_options,
        format_tag,
        defaults={"field_separator": field_separator},
    )
    _require_single_char(options.field_separator, "field_separator", format_tag)
    _require_single_char(options.quote_char, "quote_char", format_tag)
    if options.field_separator == options.quote_char:
        raise ConfigurationError(
            f"Invalid options for format '{format_tag}': field_separator and "
            "quote_char must differ."
        )
    _require_text(options.record_separator, "record_separator", format_tag)
    return options


def parse_fixed_width_options(
    raw_options: Mapping[str, Any],
    format_tag: str,
) -> FixedWidthOptions:
    """Parse fixed-width options, normalizing the width pattern."""
    values = dict(raw_options)
    if "widths" not in values:
        raise ConfigurationError(
            f"Format '{format_tag}' requires a 'widths' pattern, "
            "for example [5, 8, 3] or 'A5 A8 A3'."
        )
    values["widths"] = parse_width_pattern(values["widths"], format_tag)
    options = build_options(FixedWidthOptions, values, format_tag)
    _require_text(options.record_separator, "record_separator", format_tag)
    return options


def parse_width_pattern(raw_pattern: object, format_tag: str = "fixed") -> tuple[int, ...]:
    """Parse a width pattern into an ordered tuple of widths.

    Args:
        raw_pattern: Sequence of ints or a string such as ``"A5 A8 A3"``.
        format_tag: Format tag, used in error messages.

    Returns:
        Tuple of positive widths.

    Raises:
        ConfigurationError: If the pattern is empty or malformed.
    """
    if isinstance(raw_pattern, str):
        tokens: list[object] = [token for token in re.split(r"[\s,]+", raw_pattern) if token]
    elif isinstance(raw_pattern, Sequence):
        tokens = list(raw_pattern)
    else:
        raise ConfigurationError(
            f"Invalid width pattern for format '{format_tag}': expected list or "
            f"string, got {type(raw_pattern).__name__}."
        )
    widths: list[int] = []
    for token in tokens:
        widths.append(_parse_width_token(token, format_tag))
    if not widths:
        raise ConfigurationError(
            f"Width pattern for format '{format_tag}' is empty. Declare at least one width."
        )
    return tuple(widths)


def parse_key_value_options(raw_options: Mapping[str, Any], format_tag: str) -> KeyValueOptions:
    """Parse key/value options."""
    values = dict(raw_options)
    if "comment_prefixes" in values:
        values["comment_prefixes"] = tuple(values["comment_prefixes"])
    options = build_options(KeyValueOptions, values, format_tag)
    _require_text(options.separator, "separator", format_tag)
    _require_text(options.record_separator, "record_separator", format_tag)
    return options


def parse_markup_options(raw_options: Mapping[str, Any], format_tag: str) -> MarkupOptions:
    """Parse nested-tag options, normalizing record path and column map."""
    values = dict(raw_options)
    if "record_path" not in values:
        raise ConfigurationError(
            f"Format '{format_tag}' requires 'record_path', for example 'root group record'."
        )
    values["record_path"] = parse_record_path(values["record_path"], format_tag)
    values["column_map"] = _normalize_column_map(values.get("column_map", {}), format_tag)
    fold_map = values.get("fold_map", {})
    if not isinstance(fold_map, Mapping):
        raise ConfigurationError(
            f"Option 'fold_map' for format '{format_tag}' must be a mapping of "
            "ancestor markers to column names."
        )
    values["fold_map"] = dict(fold_map)
    return build_options(MarkupOptions, values, format_tag)


def parse_record_path(raw_path: object, format_tag: str = "xml") -> tuple[str, ...]:
    """Parse a record path from a space-separated string or a sequence."""
    if isinstance(raw_path, str):
        segments = tuple(raw_path.split())
    elif isinstance(raw_path, Sequence):
        segments = tuple(str(segment) for segment in raw_path)
    else:
        raise ConfigurationError(
            f"Invalid record_path for format '{format_tag}': expected string or list."
        )
    if not segments:
        raise ConfigurationError(f"Option 'record_path' for format '{format_tag}' is empty.")
    return segments


def parse_user_defined_options(
    raw_options: Mapping[str, Any],
    format_tag: str,
) -> UserDefinedOptions:
    """Parse user-defined options; a record parser is mandatory."""
    options = build_options(UserDefinedOptions, raw_options, format_tag)
    if options.record_parser is None or not callable(options.record_parser):
        raise ConfigurationError(
            f"Format '{format_tag}' requires a callable 'record_parser' that maps "
            "one raw record to its field values."
        )
    if options.record_formatter is not None and not callable(options.record_formatter):
        raise ConfigurationError(
            f"Option 'record_formatter' for format '{format_tag}' must be callable."
        )
    _require_text(options.record_separator, "record_separator", format_tag)
    return options


def parse_html_table_options(raw_options: Mapping[str, Any], format_tag: str) -> HtmlTableOptions:
    """Parse HTML table options."""
    options = build_options(HtmlTableOptions, raw_options, format_tag)
    if not isinstance(options.table_index, int) or options.table_index < 0:
        raise ConfigurationError(
            f"Option 'table_index' for format '{format_tag}' must be a non-negative integer."
        )
    return options


def _parse_width_token(token: object, format_tag: str) -> int:
    if isinstance(token, int) and not isinstance(token, bool):
        width = token
    else:
        match = _WIDTH_TOKEN.match(str(token).strip())
        if match is None:
            raise ConfigurationError(
                f"Invalid width '{token}' in pattern for format '{format_tag}'. "
                "Use integers such as 5 or A5."
            )
        width = int(match.group(1))
    if width <= 0:
        raise ConfigurationError(
            f"Invalid width {width} in pattern for format '{format_tag}': widths must be positive."
        )
    return width


def _normalize_column_map(
    raw_map: object,
    format_tag: str,
) -> dict[str, str | tuple[str, ...]]:
    if not isinstance(raw_map, Mapping):
        raise ConfigurationError(
            f"Option 'column_map' for format '{format_tag}' must be a mapping of tags to columns."
        )
    normalized: dict[str, str | tuple[str, ...]] = {}
    for tag, target in raw_map.items():
        if isinstance(target, str):
            normalized[str(tag)] = target
        elif isinstance(target, Sequence) and target:
            normalized[str(tag)] = tuple(str(column) for column in target)
        else:
            raise ConfigurationError(
                f"Invalid column_map target for tag '{tag}' in format '{format_tag}': "
                "expected a column name or a non-empty list of column names."
            )
    return normalized


def _check_common_values(values: Mapping[str, Any], format_tag: str) -> None:
    for filter_name in ("read_filter", "write_filter"):
        filter_value = values.get(filter_name)
        if filter_value is not None and not callable(filter_value):
            raise ConfigurationError(
                f"Option '{filter_name}' for format '{format_tag}' must be callable."
            )
    encoding = values.get("encoding")
    if encoding is not None and not isinstance(encoding, str):
        raise ConfigurationError(f"Option 'encoding' for format '{format_tag}' must be a string.")


def _require_single_char(value: object, option_name: str, format_tag: str) -> None:
    if not isinstance(value, str) or len(value) != 1:
        raise ConfigurationError(
            f"Option '{option_name}' for format '{format_tag}' must be exactly one character."
        )


def _require_text(value: object, option_name: str, format_tag: str) -> None:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f"Option '{option_name}' for format '{format_tag}' must be a non-empty string."
        )
