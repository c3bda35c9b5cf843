"""tablebridge exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class TableBridgeError(Exception):
    """Base exception for all tablebridge failures."""


class NamingError(TableBridgeError):
    """Raised for illegal table or column identifiers."""


class SchemaError(TableBridgeError):
    """Raised for column, width, or fold-path mismatches."""


class ParseError(TableBridgeError):
    """Raised for malformed records during decode.

    Attributes:
        record_index: One-based index of the offending record, when known.
    """

    def __init__(self, message: str, record_index: int | None = None) -> None:
        super().__init__(message)
        self.record_index = record_index


class StorageError(TableBridgeError):
    """Raised for local or remote storage failures.

    Attributes:
        location: Path or URL that failed.
        cause: Underlying exception, when one exists.
    """

    def __init__(
        self,
        message: str,
        location: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.location = location
        self.cause = cause


class TransportError(StorageError):
    """Raised when a remote fetch or store fails."""


class CatalogError(TableBridgeError):
    """Raised for unknown or conflicting catalog bindings."""


class ConfigurationError(TableBridgeError):
    """Raised for unsupported format, option, or mode combinations."""


class DependencyError(TableBridgeError):
    """Raised when an optional runtime dependency is missing."""
