"""Default codec registry with every shipped format."""

from __future__ import annotations

from formats.binary_metadata import MP3_CODEC
from formats.delimited import CSV_CODEC, DELIMITED_CODEC, PASSWD_CODEC, PIPE_CODEC, TAB_CODEC
from formats.fixed_width import FIXED_WIDTH_CODEC
from formats.html_table import HTML_TABLE_CODEC
from formats.key_value import INI_CODEC, KEY_VALUE_CODEC
from formats.markup import XML_CODEC
from formats.native import ARRAY_OF_ARRAYS_CODEC, ARRAY_OF_MAPS_CODEC
from formats.paragraph import PARAGRAPH_CODEC
from formats.registry import CodecRegistry, FormatCodec
from formats.user_defined import USER_DEFINED_CODEC
from formats.weblog import WEBLOG_CODEC

BUILTIN_CODECS: tuple[FormatCodec, ...] = (
    CSV_CODEC,
    PIPE_CODEC,
    TAB_CODEC,
    PASSWD_CODEC,
    DELIMITED_CODEC,
    FIXED_WIDTH_CODEC,
    KEY_VALUE_CODEC,
    INI_CODEC,
    PARAGRAPH_CODEC,
    XML_CODEC,
    HTML_TABLE_CODEC,
    WEBLOG_CODEC,
    MP3_CODEC,
    ARRAY_OF_ARRAYS_CODEC,
    ARRAY_OF_MAPS_CODEC,
    USER_DEFINED_CODEC,
)


def default_registry() -> CodecRegistry:
    """Return a new registry holding every built-in codec."""
    return CodecRegistry(BUILTIN_CODECS)
