"""Public SDK surface for tablebridge.

This module provides a stable import path for library users.
It re-exports the session, typed directive models, and error types.
"""

from __future__ import annotations

from core.config import BridgeConfig
from core.errors import (
    CatalogError,
    ConfigurationError,
    DependencyError,
    NamingError,
    ParseError,
    SchemaError,
    StorageError,
    TableBridgeError,
    TransportError,
)
from core.types import CatalogEntry, ExportRequest, ImportRequest, PersistenceMode
from formats.builtin import default_registry
from formats.registry import CodecRegistry, FormatCodec
from store.catalog import load_catalog_file
from store.session import Session
from store.table import Table, TableProvider

__all__ = [
    "BridgeConfig",
    "CatalogEntry",
    "CatalogError",
    "CodecRegistry",
    "ConfigurationError",
    "DependencyError",
    "ExportRequest",
    "FormatCodec",
    "ImportRequest",
    "NamingError",
    "ParseError",
    "PersistenceMode",
    "SchemaError",
    "Session",
    "StorageError",
    "Table",
    "TableBridgeError",
    "TableProvider",
    "TransportError",
    "default_registry",
    "load_catalog_file",
]
