"""Integration tests for import, query, and batch export."""

from __future__ import annotations

from pathlib import Path

from core.config import BridgeConfig
from core.types import ExportRequest, ImportRequest
from store.session import Session
from tests.fixture_paths import fixture_path

MARKUP_OPTIONS = {
    "record_path": "company office employee",
    "fold_map": {"office": "branch", "office^": "location"},
    "column_map": {"name": "name", "year": ["Year1", "Year2", "Year3"]},
}


def test_markup_import_exports_to_csv_and_reimports(tmp_path: Path) -> None:
    """Folded markup rows should survive a csv export and re-import."""
    session = Session(config=BridgeConfig(root_dir=fixture_path("markup")))
    staff = session.import_table(
        ImportRequest("xml", source="offices.xml", table_name="staff", options=MARKUP_OPTIONS)
    )
    session.set_root_dir(tmp_path)

    session.export_table(
        ExportRequest(
            table_name=staff,
            format_tag="csv",
            target="staff.csv",
            query=lambda table: [
                row for row in table.scan() if row[table.columns.index("location")] == "Portland"
            ],
            options={"column_names": "first_line"},
        )
    )
    copy = session.import_table(
        ImportRequest("csv", source="staff.csv", column_names="first_line")
    )

    rows = list(session.table(copy).scan().as_dicts())
    assert copy == "table1"
    assert [row["name"] for row in rows] == ["Alice", "Bob"]
    assert rows[0]["Year2"] == "1999"
    assert rows[0]["Year3"] == ""


def test_fixed_width_export_round_trips(tmp_path: Path) -> None:
    """A fixed-width export should re-import to the same rows."""
    session = Session(config=BridgeConfig(root_dir=tmp_path))
    session.create_table("codes", "code,label")
    codes = session.table("codes")
    codes.insert_row(["A1", "alpha"])
    codes.insert_row(["B2", "beta"])
    options = {"widths": [4, 6]}

    session.export_table(ExportRequest("codes", "fixed", target="codes.txt", options=options))
    copy = session.import_table(
        ImportRequest("fixed", source="codes.txt", column_names="code,label", options=options)
    )

    assert list(session.table(copy).scan()) == [("A1", "alpha"), ("B2", "beta")]
    assert (tmp_path / "codes.txt").read_text(encoding="utf-8") == "A1  alpha \nB2  beta  \n"
