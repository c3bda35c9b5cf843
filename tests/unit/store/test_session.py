"""Unit tests for the session directives."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import BridgeConfig
from core.errors import CatalogError, NamingError, ParseError, StorageError
from core.types import CatalogEntry, ExportRequest, ImportRequest, PersistenceMode
from store.session import Session


def _session(config: BridgeConfig) -> Session:
    return Session(config=config)


def test_unnamed_imports_are_numbered_in_order(bridge_config: BridgeConfig) -> None:
    """Three unnamed imports should create table1, table2, and table3."""
    session = _session(bridge_config)

    names = [session.import_table(ImportRequest("csv", data="a,b\n")) for _ in range(3)]

    assert names == ["table1", "table2", "table3"]


def test_failed_import_does_not_consume_a_number(bridge_config: BridgeConfig) -> None:
    """The default-name counter advances only for created tables."""
    session = _session(bridge_config)

    with pytest.raises(StorageError):
        session.import_table(ImportRequest("csv", source="missing.csv"))
    with pytest.raises(ParseError):
        session.import_table(ImportRequest("csv", data='"open\n'))

    assert session.import_table(ImportRequest("csv", data="a\n")) == "table1"


def test_import_with_illegal_name_leaves_state_untouched(bridge_config: BridgeConfig) -> None:
    """A naming error should abort the directive before any table exists."""
    session = _session(bridge_config)

    with pytest.raises(NamingError):
        session.import_table(ImportRequest("csv", data="a\n", table_name="my-table"))

    assert session.table_names() == ()
    assert session.import_table(ImportRequest("csv", data="a\n", table_name="my_table2")) == (
        "my_table2"
    )


def test_import_rejects_existing_table_name(bridge_config: BridgeConfig) -> None:
    """Table names must be unique within a session."""
    session = _session(bridge_config)
    session.import_table(ImportRequest("csv", data="a\n", table_name="people"))

    with pytest.raises(NamingError):
        session.import_table(ImportRequest("csv", data="b\n", table_name="people"))


def test_import_resolves_header_columns(bridge_config: BridgeConfig) -> None:
    """first_line imports should name columns from the header record."""
    session = _session(bridge_config)
    name = session.import_table(
        ImportRequest("csv", data="name,age\nAlice,34\n", column_names="first_line")
    )

    table = session.table(name)

    assert table.columns == ("name", "age")
    assert list(table.scan()) == [("Alice", "34")]


def test_persistence_modes_follow_table_lifecycle(tmp_path: Path) -> None:
    """Tables become batch after a file export and continuous when bound."""
    session = Session(config=BridgeConfig(root_dir=tmp_path))
    session.create_table("people", "name,age")
    assert session.persistence_mode("people") is PersistenceMode.TRANSIENT

    session.export_table(ExportRequest("people", "csv", target="people.csv"))
    session.catalog([CatalogEntry("bound", "csv", "people.csv", {"column_names": "name,age"})])

    assert session.persistence_mode("people") is PersistenceMode.BATCH
    assert session.persistence_mode("bound") is PersistenceMode.CONTINUOUS


def test_catalog_rejects_in_memory_table_name(bridge_config: BridgeConfig) -> None:
    """An in-memory table cannot be bound without dropping it first."""
    session = _session(bridge_config)
    session.create_table("people", ["name"])

    with pytest.raises(CatalogError):
        session.catalog([CatalogEntry("people", "csv", "people.csv")])


def test_create_table_on_binding_writes_file(tmp_path: Path) -> None:
    """Creating a bound table should write its empty content to the location."""
    session = Session(config=BridgeConfig(root_dir=tmp_path))
    session.catalog([CatalogEntry("people", "csv", "people.csv", {"column_names": "first_line"})])

    session.create_table("people", "name,age")

    assert (tmp_path / "people.csv").read_text(encoding="utf-8") == "name,age\n"


def test_drop_bound_table_keeps_the_file(tmp_path: Path) -> None:
    """Dropping a bound table removes the binding only."""
    (tmp_path / "people.csv").write_text("name\nAlice\n", encoding="utf-8")
    session = Session(config=BridgeConfig(root_dir=tmp_path))
    session.catalog([CatalogEntry("people", "csv", "people.csv", {"column_names": "first_line"})])

    session.drop_table("people")

    assert session.table_names() == ()
    assert (tmp_path / "people.csv").exists()
    with pytest.raises(CatalogError):
        session.table("people")


def test_set_root_dir_applies_to_later_resolutions(tmp_path: Path) -> None:
    """Changing the root directory should affect subsequent directives only."""
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "people.csv").write_text("Alice\n", encoding="utf-8")
    session = Session(config=BridgeConfig(root_dir=tmp_path / "a"))

    session.set_root_dir(tmp_path / "b")

    assert session.import_table(ImportRequest("csv", source="people.csv")) == "table1"
    assert session.config.root_dir == tmp_path / "b"
