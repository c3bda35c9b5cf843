"""Unit tests for fold rule compilation."""

from __future__ import annotations

import pytest

from core.errors import ConfigurationError
from fold.rules import FoldRule, compile_fold_rules, compile_leaf_mappings

RECORD_PATH = ("company", "office", "employee")


def test_caret_markers_compile_to_occurrence_indexes() -> None:
    """Each caret should select the next attribute of the same element."""
    rules = compile_fold_rules(RECORD_PATH, {"office": "branch", "office^": "location"})

    assert rules == (
        FoldRule(path=("company", "office"), column="branch", occurrence=0),
        FoldRule(path=("company", "office"), column="location", occurrence=1),
    )


def test_rules_are_ordered_by_depth() -> None:
    """Rules should be evaluated from the root down."""
    rules = compile_fold_rules(RECORD_PATH, {"employee": "employee_id", "company": "company"})

    assert [rule.depth for rule in rules] == [0, 2]


def test_child_marker_captures_nested_text() -> None:
    """A slash marker should capture the text of a child element."""
    (rule,) = compile_fold_rules(RECORD_PATH, {"office/name": "office_name"})

    assert rule.child == "name"
    assert rule.path == ("company", "office")


def test_marker_off_the_record_path_is_rejected_at_setup() -> None:
    """Fold rules must correspond to an ancestor on the record path."""
    with pytest.raises(ConfigurationError):
        compile_fold_rules(RECORD_PATH, {"department": "department"})


def test_ambiguous_marker_requires_path_prefix() -> None:
    """Element names repeated on the path need a full prefix marker."""
    record_path = ("catalog", "item", "item")

    with pytest.raises(ConfigurationError):
        compile_fold_rules(record_path, {"item": "kind"})

    (rule,) = compile_fold_rules(record_path, {"catalog item": "kind"})
    assert rule.path == ("catalog", "item")


def test_duplicate_capture_is_rejected() -> None:
    """Two markers for the same attribute occurrence are a configuration error."""
    with pytest.raises(ConfigurationError):
        compile_fold_rules(RECORD_PATH, {"office": "branch", "company office": "kind"})


def test_caret_and_child_cannot_be_mixed() -> None:
    """A marker selects either an attribute or a child, never both."""
    with pytest.raises(ConfigurationError):
        compile_fold_rules(RECORD_PATH, {"office^/name": "office_name"})


def test_leaf_mappings_distinguish_concatenate_and_positional() -> None:
    """String targets concatenate, list targets distribute positionally."""
    single, positional = compile_leaf_mappings({"skill": "skills", "year": ("Year1", "Year2")})

    assert single.concatenate is True
    assert positional.concatenate is False
    assert positional.columns == ("Year1", "Year2")
