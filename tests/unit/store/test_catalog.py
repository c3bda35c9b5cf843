"""Unit tests for catalog bindings and catalog files."""

from __future__ import annotations

import pytest

from core.errors import CatalogError, NamingError
from core.types import CatalogEntry
from store.catalog import (
    Catalog,
    entry_column_names,
    entry_format_options,
    load_catalog_file,
)
from tests.fixture_paths import fixture_path


def test_register_is_idempotent_for_identical_bindings() -> None:
    """Binding the same table to the same location twice is a no-op."""
    catalog = Catalog()
    entry = CatalogEntry("people", "csv", "people.csv")

    assert catalog.register([entry]) == (entry,)
    assert catalog.register([CatalogEntry("people", "csv", "people.csv")]) == ()
    assert catalog.names() == ("people",)


def test_conflicting_binding_is_rejected() -> None:
    """Rebinding a name to another location requires unbinding first."""
    catalog = Catalog()
    catalog.register([CatalogEntry("people", "csv", "people.csv")])

    with pytest.raises(CatalogError):
        catalog.register([CatalogEntry("people", "csv", "other.csv")])


def test_register_is_atomic() -> None:
    """One bad entry should prevent every entry of the call from binding."""
    catalog = Catalog()

    with pytest.raises(NamingError):
        catalog.register(
            [CatalogEntry("people", "csv", "people.csv"), CatalogEntry("bad-name", "csv", "x")]
        )

    assert catalog.names() == ()


def test_unbind_unknown_table_is_catalog_error() -> None:
    """Only bound names can be unbound."""
    with pytest.raises(CatalogError):
        Catalog().unbind("people")


def test_entry_options_split_column_names() -> None:
    """Column names travel with the options but are not format options."""
    options = {"column_names": "first_line", "quote_char": "'"}
    entry = CatalogEntry("people", "csv", "p.csv", options)

    assert entry_column_names(entry) == "first_line"
    assert entry_format_options(entry) == {"quote_char": "'"}


def test_load_catalog_file_parses_entries() -> None:
    """YAML catalog files should produce ordered entries."""
    entries = load_catalog_file(fixture_path("catalog/valid_catalog.yaml"))

    assert [entry.table_name for entry in entries] == ["people", "settings"]
    assert entries[0].options == {"column_names": "first_line"}
    assert entries[1].options == {}


@pytest.mark.parametrize(
    "relative_path",
    [
        "catalog/invalid_version.yaml",
        "catalog/unknown_field.yaml",
        "catalog/malformed.yaml",
        "catalog/options_not_mapping.yaml",
        "catalog/missing.yaml",
    ],
)
def test_load_catalog_file_rejects_invalid_files(relative_path: str) -> None:
    """Invalid catalog files should fail with a catalog error."""
    with pytest.raises(CatalogError):
        load_catalog_file(fixture_path(relative_path))
