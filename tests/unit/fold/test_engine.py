"""Unit tests for the hierarchical fold engine."""

from __future__ import annotations

from xml.etree import ElementTree

import pytest

from core.errors import ConfigurationError, SchemaError
from fold.engine import build_fold_plan, fold_tree
from tests.fixture_paths import fixture_path

RECORD_PATH = ("company", "office", "employee")
FOLD_MAP = {"office": "branch", "office^": "location", "employee": "employee_id"}
COLUMN_MAP = {"name": "name", "year": ("Year1", "Year2", "Year3"), "skill": "skills"}


def _offices_root() -> ElementTree.Element:
    return ElementTree.parse(fixture_path("markup/offices.xml")).getroot()


def _folded_rows() -> list[dict[str, object]]:
    plan = build_fold_plan(RECORD_PATH, COLUMN_MAP, FOLD_MAP)
    columns, rows = fold_tree(_offices_root(), plan)
    return [dict(zip(columns, row)) for row in rows]


def test_multi_attribute_fold_broadcasts_by_occurrence() -> None:
    """Office attributes should reach every employee row by position."""
    rows = _folded_rows()

    assert [(row["branch"], row["location"]) for row in rows[:2]] == [
        ("branch", "Portland"),
        ("branch", "Portland"),
    ]
    assert (rows[2]["branch"], rows[2]["location"]) == ("headquarters", "Boise")


def test_rows_follow_document_order() -> None:
    """Flattened rows should keep the order of record elements."""
    assert [row["employee_id"] for row in _folded_rows()] == ["e1", "e2", "e3"]


def test_positional_mapping_leaves_unmatched_columns_absent() -> None:
    """Repeated tags should fill list targets positionally."""
    first = _folded_rows()[0]

    assert (first["Year1"], first["Year2"], first["Year3"]) == ("1998", "1999", None)


def test_single_target_concatenates_repeated_tags() -> None:
    """Repeated tags mapped to one column should be space-joined."""
    rows = _folded_rows()

    assert rows[0]["skills"] == "sql xml"
    assert rows[1]["skills"] is None


def test_unmapped_tags_are_dropped() -> None:
    """Tags without a mapping should not create columns."""
    plan = build_fold_plan(RECORD_PATH, COLUMN_MAP, FOLD_MAP)
    columns, _ = fold_tree(_offices_root(), plan)

    assert "badge" not in columns


def test_empty_column_map_discovers_record_tags() -> None:
    """Without a column map, record child tags become columns in first-seen order."""
    plan = build_fold_plan(RECORD_PATH, {}, {"office^": "location"})
    columns, rows = fold_tree(_offices_root(), plan)

    assert columns == ("location", "name", "year", "skill", "badge")
    assert rows[0][2] == "1998 1999"
    assert rows[2] == ("Boise", "Carol", None, None, None)


def test_root_mismatch_is_schema_error() -> None:
    """A document whose root is off the record path cannot be folded."""
    plan = build_fold_plan(("catalog", "item"), {}, {})

    with pytest.raises(SchemaError):
        fold_tree(_offices_root(), plan)


def test_namespaced_tags_match_by_local_name() -> None:
    """Namespace prefixes should not prevent matching."""
    root = ElementTree.fromstring(
        '<ns:list xmlns:ns="urn:x"><ns:item><ns:v>1</ns:v></ns:item></ns:list>'
    )
    plan = build_fold_plan(("list", "item"), {"v": "value"}, {})

    assert fold_tree(root, plan) == (("value",), (("1",),))


def test_column_targeted_twice_is_rejected() -> None:
    """Each column must come from exactly one source."""
    with pytest.raises(ConfigurationError):
        build_fold_plan(RECORD_PATH, {"name": "branch"}, {"office": "branch"})


def test_discovered_tag_colliding_with_fold_column_is_rejected() -> None:
    """A record child named like a fold column must not lose its value silently."""
    root = ElementTree.fromstring('<list><item id="a"><id>5</id></item></list>')
    plan = build_fold_plan(("list", "item"), {}, {"item": "id"})

    with pytest.raises(SchemaError):
        fold_tree(root, plan)


def test_record_child_capture_is_not_a_collision() -> None:
    """A fold rule reading a record child keeps that child as one column."""
    root = ElementTree.fromstring("<list><item><name>Ann</name><v>1</v></item></list>")
    plan = build_fold_plan(("list", "item"), {}, {"item/name": "name"})

    assert fold_tree(root, plan) == (("name", "v"), (("Ann", "1"),))
