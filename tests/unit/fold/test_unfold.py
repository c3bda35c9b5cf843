"""Unit tests for rebuilding markup from folded rows."""

from __future__ import annotations

from fold.engine import build_fold_plan, fold_tree
from fold.unfold import unfold_rows

RECORD_PATH = ("company", "office", "employee")
FOLD_MAP = {"office": "branch", "office^": "location"}
COLUMNS = ("branch", "location", "name")


def test_consecutive_rows_share_one_ancestor_element() -> None:
    """Rows with equal folded values should be grouped under one office."""
    plan = build_fold_plan(RECORD_PATH, {"name": "name"}, FOLD_MAP)
    rows = [
        ("branch", "Portland", "Alice"),
        ("branch", "Portland", "Bob"),
        ("headquarters", "Boise", "Carol"),
    ]

    root = unfold_rows(plan, COLUMNS, rows)

    offices = root.findall("office")
    assert len(offices) == 2
    assert list(offices[0].attrib.values()) == ["branch", "Portland"]
    assert [element.text for element in offices[0].iter("name")] == ["Alice", "Bob"]


def test_unfolded_tree_folds_back_to_the_same_rows() -> None:
    """Folding the rebuilt tree should yield the original rows."""
    plan = build_fold_plan(RECORD_PATH, {"name": "name"}, FOLD_MAP)
    rows = (("branch", "Portland", "Alice"), ("headquarters", None, "Carol"))

    _, folded = fold_tree(unfold_rows(plan, COLUMNS, rows), plan)

    assert folded == rows


def test_unmapped_columns_become_record_children() -> None:
    """Extra columns should be written as children named after the column."""
    plan = build_fold_plan(("people", "person"), {}, {})

    root = unfold_rows(plan, ("name", "city"), [("Alice", None)])

    person = root.find("person")
    assert person is not None
    assert person.findtext("name") == "Alice"
    assert person.find("city") is None
