"""Session API over tables, catalog bindings, and directives.

This module exposes the import, create, export, and catalog directives
plus table lookup for the external query engine. Each directive either
completes or leaves prior table and catalog state untouched.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from core.config import BridgeConfig
from core.errors import CatalogError, NamingError, SchemaError
from core.logging_config import get_logger
from core.types import CatalogEntry, ColumnNames, ExportRequest, ImportRequest, PersistenceMode
from formats.builtin import default_registry
from formats.registry import CodecRegistry
from ingest.importer import load_import
from schema.naming import (
    NamingContext,
    parse_explicit_columns,
    resolve_table_name,
    validate_identifier,
)
from store.catalog import (
    Catalog,
    entry_column_names,
    entry_format_options,
    load_catalog_file,
)
from store.export import convert, export_table
from store.location_io import resolve_location
from store.persistence import BindingLocks, BoundTable
from store.table import Table, TableProvider
from transport.fetch import DefaultFetcher, Fetcher

_LOGGER = get_logger(__name__)


class Session:
    """Primary entry point holding the tables and bindings of one session."""

    def __init__(
        self,
        config: BridgeConfig | None = None,
        fetcher: Fetcher | None = None,
        registry: CodecRegistry | None = None,
    ) -> None:
        """Create a session.

        Args:
            config: Optional runtime configuration; read from env when omitted.
            fetcher: Optional remote transport.
            registry: Optional codec registry; built-in codecs when omitted.
        """
        self._config = config or BridgeConfig.from_env()
        self._fetcher = fetcher or DefaultFetcher(self._config)
        self._registry = registry or default_registry()
        self._naming = NamingContext()
        self._tables: dict[str, Table] = {}
        self._exported: set[str] = set()
        self._catalog = Catalog()
        self._bound: dict[str, BoundTable] = {}
        self._locks = BindingLocks()

    @property
    def config(self) -> BridgeConfig:
        """Current runtime configuration."""
        return self._config

    @property
    def registry(self) -> CodecRegistry:
        """Codec registry used by every directive."""
        return self._registry

    def set_root_dir(self, root_dir: str | Path) -> None:
        """Change the root directory for subsequent location resolutions."""
        self._config = self._config.with_root_dir(root_dir)

    def import_table(self, request: ImportRequest) -> str:
        """Create a new in-memory table from an import source.

        Args:
            request: Import directive.

        Returns:
            Name of the created table.

        Raises:
            NamingError: If the table name is illegal or taken.
            CatalogError: If the name is catalog-bound.
            ConfigurationError: If the format or options are invalid.
            ParseError: If the source is malformed.
            SchemaError: If rows do not fit the resolved columns.
            StorageError: If the source cannot be read.
        """
        taken = set(self.table_names())
        table_name = resolve_table_name(request.table_name, self._naming, taken)
        self._require_free_name(table_name)
        imported = load_import(request, self._registry, self._fetcher, self._config.root_dir)
        self._tables[table_name] = Table(table_name, imported.columns, imported.rows)
        if request.table_name is None:
            self._naming.claim(table_name)
        _LOGGER.info(
            "table_imported",
            table_name=table_name,
            format_tag=request.format_tag,
            source=imported.source,
            column_count=len(imported.columns),
            row_count=len(imported.rows),
        )
        return table_name

    def create_table(self, table_name: str, columns: ColumnNames) -> str:
        """Create an empty table.

        For a catalog-bound name the empty table is written to its location.

        Raises:
            NamingError: If a name is illegal or the table exists.
            SchemaError: If no columns are given or they repeat.
            StorageError: If the bound location exists or cannot be written.
        """
        validate_identifier(table_name, "table")
        column_tuple = parse_explicit_columns(columns)
        if not column_tuple:
            raise SchemaError(
                f"Table '{table_name}' needs at least one column. Pass a column list."
            )
        bound = self._bound.get(table_name)
        if bound is not None:
            declared = parse_explicit_columns(entry_column_names(bound.entry))
            if declared is not None and declared != column_tuple:
                raise SchemaError(
                    f"Columns for '{table_name}' differ from its catalog binding: "
                    f"{', '.join(declared)}."
                )
            bound.initialize(column_tuple)
        else:
            self._require_free_name(table_name)
            self._tables[table_name] = Table(table_name, column_tuple)
        _LOGGER.info(
            "table_created",
            table_name=table_name,
            columns=list(column_tuple),
            persistence_mode=self.persistence_mode(table_name).value,
        )
        return table_name

    def export_table(self, request: ExportRequest) -> Any:
        """Run an export directive and return the encoded output.

        Raises:
            CatalogError: If the table does not exist.
            ConfigurationError: If the format cannot encode or write the target.
            SchemaError: If query rows do not match the result columns.
            StorageError: If the target cannot be written.
        """
        provider = self.table(request.table_name)
        output = export_table(
            request,
            provider,
            self._registry,
            self._fetcher,
            self._config.root_dir,
        )
        if request.target is not None and request.table_name in self._tables:
            self._exported.add(request.table_name)
        return output

    def convert(
        self,
        source_format: str,
        data: Any,
        target_format: str,
        source_options: Mapping[str, Any] | None = None,
        target_options: Mapping[str, Any] | None = None,
        column_names: ColumnNames = None,
    ) -> Any:
        """Convert inline data between formats without creating a table."""
        return convert(
            self._registry,
            source_format,
            data,
            target_format,
            source_options,
            target_options,
            column_names,
        )

    def catalog(self, entries: Iterable[CatalogEntry]) -> tuple[str, ...]:
        """Bind tables to storage locations for continuous persistence.

        All entries are validated before any binding is stored.

        Returns:
            Names of newly bound tables.

        Raises:
            NamingError: If a table or column name is illegal.
            CatalogError: If a binding conflicts or names an in-memory table.
            ConfigurationError: If a format or its options are invalid.
        """
        entry_list = list(entries)
        providers: dict[str, BoundTable] = {}
        for entry in entry_list:
            if entry.table_name in self._tables:
                raise CatalogError(
                    f"Table '{entry.table_name}' already exists in memory. "
                    "Drop it before binding the name to a location."
                )
            providers[entry.table_name] = self._build_bound_table(entry)
        added = self._catalog.register(entry_list)
        for entry in added:
            self._bound[entry.table_name] = providers[entry.table_name]
            _LOGGER.info(
                "catalog_bound",
                table_name=entry.table_name,
                format_tag=entry.format_tag,
                location=providers[entry.table_name].location.display,
            )
        return tuple(entry.table_name for entry in added)

    def load_catalog(self, catalog_path: str | Path) -> tuple[str, ...]:
        """Bind every table listed in a YAML catalog file."""
        return self.catalog(load_catalog_file(catalog_path))

    def unbind(self, table_name: str) -> None:
        """Remove a catalog binding; the location content is kept.

        Raises:
            CatalogError: If the table is not bound.
        """
        entry = self._catalog.unbind(table_name)
        self._bound.pop(table_name, None)
        _LOGGER.info("catalog_unbound", table_name=table_name, location=entry.location)

    def table(self, table_name: str) -> TableProvider:
        """Return the provider of a table for the external query engine.

        Raises:
            CatalogError: If no table or binding has that name.
        """
        bound = self._bound.get(table_name)
        if bound is not None:
            return bound
        table = self._tables.get(table_name)
        if table is None:
            raise CatalogError(
                f"Unknown table '{table_name}'. Import, create, or bind it first."
            )
        return table

    def table_names(self) -> tuple[str, ...]:
        """Return in-memory table names followed by bound names."""
        return tuple(self._tables) + self._catalog.names()

    def persistence_mode(self, table_name: str) -> PersistenceMode:
        """Return how a table is persisted.

        Raises:
            CatalogError: If the table does not exist.
        """
        if table_name in self._catalog:
            return PersistenceMode.CONTINUOUS
        if table_name not in self._tables:
            raise CatalogError(f"Unknown table '{table_name}'. Import, create, or bind it first.")
        if table_name in self._exported:
            return PersistenceMode.BATCH
        return PersistenceMode.TRANSIENT

    def drop_table(self, table_name: str) -> None:
        """Drop a table; a bound table is unbound and its location kept.

        Raises:
            CatalogError: If the table does not exist.
        """
        mode = self.persistence_mode(table_name)
        if mode is PersistenceMode.CONTINUOUS:
            self.unbind(table_name)
        else:
            del self._tables[table_name]
            self._exported.discard(table_name)
        _LOGGER.info("table_dropped", table_name=table_name, persistence_mode=mode.value)

    def _require_free_name(self, table_name: str) -> None:
        if table_name in self._catalog:
            raise CatalogError(
                f"Table '{table_name}' is bound to a catalog location. "
                "Unbind it before importing under that name."
            )
        if table_name in self._tables:
            raise NamingError(
                f"Table '{table_name}' already exists. Drop it or choose another name."
            )

    def _build_bound_table(self, entry: CatalogEntry) -> BoundTable:
        codec, options = self._registry.resolve(entry.format_tag, entry_format_options(entry))
        column_names = entry_column_names(entry)
        parse_explicit_columns(column_names)
        return BoundTable(
            entry=entry,
            resolved=resolve_location(entry.location, self._config.root_dir),
            codec=codec,
            options=options,
            column_names=column_names,
            fetcher=self._fetcher,
            lock=self._locks.lock_for(entry.table_name),
        )
