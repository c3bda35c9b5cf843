"""Embedded binary metadata codec for music files.

Decode reads the fixed-offset ID3v1 trailer (the last 128 bytes of a file)
from each input file. The container cannot be rebuilt from rows, so this
codec has no encode and export or continuous binding fails fast.
"""

from __future__ import annotations

from typing import Any, Mapping

from core.constants import ID3V1_MARKER, ID3V1_TRAILER_SIZE, MP3_COLUMNS
from core.errors import ParseError
from core.types import DecodeResult, Row
from formats.options import BinaryMetadataOptions, build_options
from formats.registry import FormatCodec
from formats.text_records import filter_row

# (column, start offset, length) inside the 128-byte trailer.
_ID3V1_FIELDS = (
    ("song", 3, 30),
    ("artist", 33, 30),
    ("album", 63, 30),
    ("year", 93, 4),
    ("comment", 97, 30),
)
_GENRE_OFFSET = 127

ID3V1_GENRES = (
    "Blues", "Classic Rock", "Country", "Dance", "Disco", "Funk", "Grunge",
    "Hip-Hop", "Jazz", "Metal", "New Age", "Oldies", "Other", "Pop", "R&B",
    "Rap", "Reggae", "Rock", "Techno", "Industrial", "Alternative", "Ska",
    "Death Metal", "Pranks", "Soundtrack", "Euro-Techno", "Ambient",
    "Trip-Hop", "Vocal", "Jazz+Funk", "Fusion", "Trance", "Classical",
    "Instrumental", "Acid", "House", "Game", "Sound Clip", "Gospel", "Noise",
    "AlternRock", "Bass", "Soul", "Punk", "Space", "Meditative",
    "Instrumental Pop", "Instrumental Rock", "Ethnic", "Gothic", "Darkwave",
    "Techno-Industrial", "Electronic", "Pop-Folk", "Eurodance", "Dream",
    "Southern Rock", "Comedy", "Cult", "Gangsta", "Top 40", "Christian Rap",
    "Pop/Funk", "Jungle", "Native American", "Cabaret", "New Wave",
    "Psychadelic", "Rave", "Showtunes", "Trailer", "Lo-Fi", "Tribal",
    "Acid Punk", "Acid Jazz", "Polka", "Retro", "Musical", "Rock & Roll",
    "Hard Rock",
)


def decode_binary_metadata(raw_input: Any, options: BinaryMetadataOptions) -> DecodeResult:
    """Decode ID3v1 trailers into one row per file.

    Args:
        raw_input: Mapping of file name to file bytes, or the bytes of one file.
        options: Binary metadata options.

    Returns:
        Rows in file-name order of the input mapping.

    Raises:
        ParseError: If input is not bytes or a mapping of names to bytes.
    """
    files = _as_file_mapping(raw_input)
    rows: list[Row] = []
    for file_name, payload in files.items():
        values = [file_name, *read_id3v1(payload, options.encoding)]
        rows.append(filter_row(values, options.read_filter))
    return DecodeResult(rows=tuple(rows), column_names=MP3_COLUMNS)


def read_id3v1(payload: bytes, encoding: str = "latin-1") -> list[str | None]:
    """Return song, artist, album, year, comment, and genre of a trailer.

    Files without a ``TAG`` trailer yield absent values for every field.
    """
    if len(payload) < ID3V1_TRAILER_SIZE:
        return [None] * (len(_ID3V1_FIELDS) + 1)
    trailer = payload[-ID3V1_TRAILER_SIZE:]
    if not trailer.startswith(ID3V1_MARKER):
        return [None] * (len(_ID3V1_FIELDS) + 1)
    values: list[str | None] = []
    for _, start, length in _ID3V1_FIELDS:
        values.append(_text_field(trailer[start : start + length], encoding))
    values.append(_genre_name(trailer[_GENRE_OFFSET]))
    return values


def _text_field(raw_field: bytes, encoding: str) -> str | None:
    text = raw_field.split(b"\x00", 1)[0].decode(encoding, errors="replace").strip()
    return text or None


def _genre_name(genre_index: int) -> str | None:
    if genre_index < len(ID3V1_GENRES):
        return ID3V1_GENRES[genre_index]
    return None


def _as_file_mapping(raw_input: Any) -> Mapping[str, bytes]:
    if isinstance(raw_input, (bytes, bytearray)):
        return {"": bytes(raw_input)}
    if isinstance(raw_input, Mapping):
        files: dict[str, bytes] = {}
        for name, payload in raw_input.items():
            if not isinstance(payload, (bytes, bytearray)):
                raise ParseError(
                    f"Binary metadata input for '{name}' must be bytes, "
                    f"got {type(payload).__name__}."
                )
            files[str(name)] = bytes(payload)
        return files
    raise ParseError(
        "Binary metadata input must be file bytes or a mapping of file names to bytes, "
        f"got {type(raw_input).__name__}."
    )


def _parse_binary_metadata_options(
    raw_options: Mapping[str, Any],
    format_tag: str,
) -> BinaryMetadataOptions:
    return build_options(BinaryMetadataOptions, raw_options, format_tag)


MP3_CODEC = FormatCodec(
    tag="mp3",
    parse_options=_parse_binary_metadata_options,
    decode=decode_binary_metadata,
    text_output=False,
)
