"""Unit tests for the nested-tag markup codec."""

from __future__ import annotations

import pytest

from core.errors import ConfigurationError, ParseError
from formats.builtin import default_registry
from tests.fixture_paths import fixture_text

OPTIONS = {
    "record_path": "company office employee",
    "fold_map": {"office": "branch", "office^": "location"},
    "column_map": {"name": "name", "year": ["Year1", "Year2", "Year3"]},
}


def test_decode_returns_fold_and_leaf_columns() -> None:
    """Decoded columns should list fold columns before leaf columns."""
    result = default_registry().decode("xml", fixture_text("markup/offices.xml"), OPTIONS)

    assert result.column_names == ("branch", "location", "name", "Year1", "Year2", "Year3")
    assert result.rows[0] == ("branch", "Portland", "Alice", "1998", "1999", None)


def test_encode_then_decode_keeps_folded_values() -> None:
    """Markup written by encode should decode to the same rows."""
    registry = default_registry()
    decoded = registry.decode("xml", fixture_text("markup/offices.xml"), OPTIONS)
    assert decoded.column_names is not None

    encoded = registry.encode("xml", decoded.rows, decoded.column_names, OPTIONS)

    assert encoded.startswith("<?xml")
    assert registry.decode("xml", encoded, OPTIONS).rows == decoded.rows


def test_malformed_document_raises_parse_error() -> None:
    """Unbalanced markup should report its position."""
    with pytest.raises(ParseError) as error_info:
        default_registry().decode("xml", "<company>\n<office>\n</company>", OPTIONS)

    assert error_info.value.record_index == 3


def test_unresolvable_fold_marker_fails_at_setup() -> None:
    """Option validation should reject markers off the record path."""
    options = dict(OPTIONS, fold_map={"division": "division"})

    with pytest.raises(ConfigurationError):
        default_registry().resolve("xml", options)


def test_record_path_is_required() -> None:
    """Markup needs a record path to know which elements are rows."""
    with pytest.raises(ConfigurationError):
        default_registry().resolve("xml", {})


def test_encode_rejects_value_outside_xml_charset() -> None:
    """Control characters XML cannot hold should fail with the row index."""
    options = {"record_path": "list item", "column_map": {"v": "value"}}

    with pytest.raises(ParseError) as error_info:
        default_registry().encode("xml", [("ok",), ("bad\x01value",)], ("value",), options)

    assert error_info.value.record_index == 2
