"""Catalog of continuous-mode bindings.

This module keeps the table name -> (format, location, options) mapping
that drives continuous persistence, and loads bindings from YAML catalog
files. Removing a binding never deletes its file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping, cast

from core.constants import CATALOG_FILE_VERSION
from core.errors import CatalogError, DependencyError
from core.types import CatalogEntry, ColumnNames
from schema.naming import validate_identifier


class Catalog:
    """Session catalog of table bindings."""

    def __init__(self) -> None:
        self._entries: dict[str, CatalogEntry] = {}

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._entries

    def names(self) -> tuple[str, ...]:
        """Return bound table names in registration order."""
        return tuple(self._entries)

    def get(self, table_name: str) -> CatalogEntry:
        """Return the binding of a table.

        Raises:
            CatalogError: If the table is not bound.
        """
        entry = self._entries.get(table_name)
        if entry is None:
            raise CatalogError(
                f"Table '{table_name}' has no catalog binding. Register it with catalog() first."
            )
        return entry

    def register(self, entries: Iterable[CatalogEntry]) -> tuple[CatalogEntry, ...]:
        """Register several bindings as one unit.

        Every entry is validated before any is stored. Re-registering an
        identical binding is a no-op.

        Returns:
            Newly added entries.

        Raises:
            NamingError: If a table name is illegal.
            CatalogError: If a binding conflicts with an existing or sibling one.
        """
        pending: dict[str, CatalogEntry] = {}
        for entry in entries:
            validate_identifier(entry.table_name, "table")
            existing = pending.get(entry.table_name) or self._entries.get(entry.table_name)
            if existing is not None and not _same_binding(existing, entry):
                raise CatalogError(
                    f"Table '{entry.table_name}' is already bound to {existing.location} "
                    f"({existing.format_tag}). Unbind it before binding it again."
                )
            pending[entry.table_name] = entry
        added = tuple(entry for name, entry in pending.items() if name not in self._entries)
        self._entries.update(pending)
        return added

    def unbind(self, table_name: str) -> CatalogEntry:
        """Remove a binding, leaving its location untouched.

        Raises:
            CatalogError: If the table is not bound.
        """
        entry = self.get(table_name)
        del self._entries[table_name]
        return entry


def entry_column_names(entry: CatalogEntry) -> ColumnNames:
    """Return the ``column_names`` option of a binding."""
    return cast(ColumnNames, entry.options.get("column_names"))


def entry_format_options(entry: CatalogEntry) -> dict[str, Any]:
    """Return the format options of a binding, without ``column_names``."""
    return {key: value for key, value in entry.options.items() if key != "column_names"}


def load_catalog_file(catalog_path: str | Path) -> tuple[CatalogEntry, ...]:
    """Load bindings from a YAML catalog file.

    The document shape is ``{version: 1, tables: [{table, format,
    location, options}]}``.

    Raises:
        DependencyError: If PyYAML is unavailable.
        CatalogError: If the file is missing or malformed.
    """
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise DependencyError(
            "YAML catalog files require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    catalog_file = Path(catalog_path).expanduser()
    if not catalog_file.exists():
        raise CatalogError(f"Catalog file does not exist at {catalog_file}.")
    try:
        payload = yaml.safe_load(catalog_file.read_text(encoding="utf-8"))
    except OSError as error:
        raise CatalogError(
            f"Failed to read catalog file at {catalog_file}: {error}."
        ) from error
    except yaml.YAMLError as error:
        raise CatalogError(
            f"Failed to parse YAML catalog at {catalog_file}: {error}. Fix YAML syntax and retry."
        ) from error
    return _parse_catalog_payload(payload, str(catalog_file))


def _parse_catalog_payload(payload: object, context: str) -> tuple[CatalogEntry, ...]:
    if not isinstance(payload, Mapping):
        raise CatalogError(f"Catalog {context} must be a mapping with 'version' and 'tables'.")
    version = payload.get("version")
    if version != CATALOG_FILE_VERSION:
        raise CatalogError(
            f"Unsupported catalog version {version!r} in {context}. "
            f"Use version: {CATALOG_FILE_VERSION}."
        )
    tables = payload.get("tables")
    if not isinstance(tables, list) or not tables:
        raise CatalogError(f"Catalog {context} must list at least one entry under 'tables'.")
    return tuple(_parse_entry(item, index, context) for index, item in enumerate(tables, 1))


def _parse_entry(item: object, index: int, context: str) -> CatalogEntry:
    entry_context = f"catalog entry #{index} in {context}"
    if not isinstance(item, Mapping):
        raise CatalogError(f"Invalid {entry_context}: expected a mapping.")
    unknown_keys = sorted(set(item) - {"table", "format", "location", "options"})
    if unknown_keys:
        raise CatalogError(f"Invalid {entry_context}: unknown fields {', '.join(unknown_keys)}.")
    for required in ("table", "format", "location"):
        if not isinstance(item.get(required), str) or not item.get(required):
            raise CatalogError(f"Invalid {entry_context}: field '{required}' must be a string.")
    options = item.get("options") or {}
    if not isinstance(options, Mapping):
        raise CatalogError(f"Invalid {entry_context}: 'options' must be a mapping.")
    return CatalogEntry(
        table_name=str(item["table"]),
        format_tag=str(item["format"]),
        location=str(item["location"]),
        options=dict(options),
    )


def _same_binding(left: CatalogEntry, right: CatalogEntry) -> bool:
    return (
        left.format_tag == right.format_tag
        and left.location == right.location
        and dict(left.options) == dict(right.options)
    )
