"""Format codec registry.

This module maps format tags to codec values. A codec is a frozen record
of plain callables (option parser, decode, optional encode), so each
format is one value in the registry rather than a subclass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

from core.errors import ConfigurationError, SchemaError
from core.types import DecodeResult, Row

OptionsParser = Callable[[Mapping[str, Any], str], Any]
DecodeFunction = Callable[[Any, Any], DecodeResult]
EncodeFunction = Callable[[Sequence[Row], tuple[str, ...], Any], Any]


@dataclass(frozen=True)
class FormatCodec:
    """Decode/encode capability for one format tag.

    Attributes:
        tag: Registry key, for example ``csv``.
        parse_options: Validates a raw option mapping into typed options.
        decode: Turns raw input into rows and optional column names.
        encode: Turns rows back into raw output; None when unsupported.
        text_output: Whether encode produces text that can be written to a file.
    """

    tag: str
    parse_options: OptionsParser
    decode: DecodeFunction
    encode: EncodeFunction | None = None
    text_output: bool = True

    @property
    def can_encode(self) -> bool:
        """Return whether this codec supports encode."""
        return self.encode is not None

    @property
    def can_write_file(self) -> bool:
        """Return whether encoded output can back a file location."""
        return self.encode is not None and self.text_output


class CodecRegistry:
    """Registry of codecs keyed by format tag."""

    def __init__(self, codecs: Iterable[FormatCodec] = ()) -> None:
        self._codecs: dict[str, FormatCodec] = {}
        for codec in codecs:
            self.register(codec)

    def register(self, codec: FormatCodec, replace: bool = False) -> None:
        """Register a codec under its tag.

        Args:
            codec: Codec to register.
            replace: Allow replacing an existing codec with the same tag.

        Raises:
            ConfigurationError: If the tag is taken and ``replace`` is false.
        """
        if codec.tag in self._codecs and not replace:
            raise ConfigurationError(
                f"Format '{codec.tag}' is already registered. Pass replace=True to override it."
            )
        self._codecs[codec.tag] = codec

    def get(self, format_tag: str) -> FormatCodec:
        """Return the codec for a format tag.

        Raises:
            ConfigurationError: If the tag is unknown.
        """
        codec = self._codecs.get(format_tag)
        if codec is None:
            raise ConfigurationError(
                f"Unsupported format '{format_tag}'. Use one of: {', '.join(self.tags())}."
            )
        return codec

    def tags(self) -> tuple[str, ...]:
        """Return registered tags in sorted order."""
        return tuple(sorted(self._codecs))

    def resolve(self, format_tag: str, raw_options: Mapping[str, Any]) -> tuple[FormatCodec, Any]:
        """Return the codec and its validated options.

        Raises:
            ConfigurationError: If the tag or options are invalid.
        """
        codec = self.get(format_tag)
        return codec, codec.parse_options(raw_options, format_tag)

    def decode(
        self,
        format_tag: str,
        raw_input: Any,
        raw_options: Mapping[str, Any] | None = None,
    ) -> DecodeResult:
        """Decode raw input with the codec registered for ``format_tag``.

        Args:
            format_tag: Registered format tag.
            raw_input: Text, bytes, or native structure, depending on format.
            raw_options: Raw format options.

        Returns:
            Decoded rows and optional discovered column names.
        """
        codec, options = self.resolve(format_tag, raw_options or {})
        return codec.decode(raw_input, options)

    def encode(
        self,
        format_tag: str,
        rows: Sequence[Sequence[Any]],
        columns: Sequence[str],
        raw_options: Mapping[str, Any] | None = None,
    ) -> Any:
        """Encode rows with the codec registered for ``format_tag``.

        Raises:
            ConfigurationError: If the format cannot be encoded.
            SchemaError: If a row width differs from the column count.
        """
        codec, options = self.resolve(format_tag, raw_options or {})
        return encode_with(codec, options, rows, columns)


def encode_with(
    codec: FormatCodec,
    options: Any,
    rows: Sequence[Sequence[Any]],
    columns: Sequence[str],
) -> Any:
    """Encode rows with an already-resolved codec.

    Raises:
        ConfigurationError: If the codec does not support encode.
        SchemaError: If a row width differs from the column count.
    """
    if codec.encode is None:
        raise ConfigurationError(
            f"Format '{codec.tag}' cannot be encoded. Export or bind to a writable "
            "format such as csv instead."
        )
    column_tuple = tuple(columns)
    checked_rows: list[Row] = []
    for index, row in enumerate(rows, 1):
        row_tuple = tuple(row)
        if len(row_tuple) != len(column_tuple):
            raise SchemaError(
                f"Row {index} has {len(row_tuple)} values but {len(column_tuple)} columns "
                f"are declared for format '{codec.tag}'."
            )
        checked_rows.append(row_tuple)
    return codec.encode(checked_rows, column_tuple, options)
