"""Unit tests for binary metadata, native, and user-defined codecs."""

from __future__ import annotations

import pytest

from core.errors import ConfigurationError, ParseError
from formats.binary_metadata import read_id3v1
from formats.builtin import default_registry


def _id3v1_trailer(song: str, artist: str, year: str, genre: int) -> bytes:
    trailer = bytearray(128)
    trailer[0:3] = b"TAG"
    trailer[3 : 3 + len(song)] = song.encode("latin-1")
    trailer[33 : 33 + len(artist)] = artist.encode("latin-1")
    trailer[93:97] = year.encode("latin-1")
    trailer[127] = genre
    return bytes(trailer)


def test_mp3_decode_reads_id3v1_fields() -> None:
    """ID3v1 trailers should decode into the fixed column set."""
    payload = b"\xff\xfb audio frames" + _id3v1_trailer("Song A", "Band", "1999", 17)

    result = default_registry().decode("mp3", {"a.mp3": payload})

    assert result.column_names is not None
    row = dict(zip(result.column_names, result.rows[0]))
    assert row["file_name"] == "a.mp3"
    assert row["song"] == "Song A"
    assert row["year"] == "1999"
    assert row["genre"] == "Rock"
    assert row["album"] is None


def test_mp3_without_trailer_has_absent_fields() -> None:
    """Files without a TAG trailer should not fail."""
    assert read_id3v1(b"short") == [None] * 6


def test_mp3_encode_fails_fast() -> None:
    """The binary container cannot be rebuilt from rows."""
    with pytest.raises(ConfigurationError):
        default_registry().encode("mp3", [], ("file_name",))


def test_array_of_maps_discovers_columns_in_first_seen_order() -> None:
    """Mapping keys should become columns in first-seen order."""
    result = default_registry().decode(
        "array_of_maps", [{"name": "Alice"}, {"age": 41, "name": "Bob"}]
    )

    assert result.column_names == ("name", "age")
    assert result.rows == (("Alice", None), ("Bob", 41))


def test_array_of_arrays_rejects_text_input() -> None:
    """Native formats should not parse text."""
    with pytest.raises(ParseError):
        default_registry().decode("array_of_arrays", "a,b")


def test_array_of_arrays_encode_returns_lists() -> None:
    """Encode should hand back native lists."""
    assert default_registry().encode("array_of_arrays", [(1, 2)], ("a", "b")) == [[1, 2]]


def test_user_defined_delegates_field_extraction() -> None:
    """The caller's parser should run once per record."""
    options = {"record_parser": lambda record: record.split("=", 1), "record_separator": ";"}

    result = default_registry().decode("user_defined", "a=1;b=2;", options)

    assert result.rows == (("a", "1"), ("b", "2"))


def test_user_defined_wraps_parser_failure() -> None:
    """Parser exceptions should surface as parse errors with the record index."""
    options = {"record_parser": lambda record: [int(record)]}

    with pytest.raises(ParseError) as error_info:
        default_registry().decode("user_defined", "1\nx\n", options)

    assert error_info.value.record_index == 2


def test_user_defined_requires_parser() -> None:
    """The record parser is a mandatory option."""
    with pytest.raises(ConfigurationError):
        default_registry().decode("user_defined", "a\n", {})


def test_user_defined_encode_requires_formatter() -> None:
    """Encode needs a caller-supplied formatter."""
    options = {"record_parser": lambda record: [record]}

    with pytest.raises(ConfigurationError):
        default_registry().encode("user_defined", [("a",)], ("value",), options)


def test_user_defined_wraps_formatter_failure() -> None:
    """Formatter exceptions should become parse errors naming the row."""

    def _formatter(values: object) -> str:
        raise KeyError("missing field")

    options = {"record_parser": str.split, "record_formatter": _formatter}

    with pytest.raises(ParseError) as error_info:
        default_registry().encode("user_defined", [("a",)], ("col1",), options)

    assert error_info.value.record_index == 1
