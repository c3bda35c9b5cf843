"""Rebuild an element tree from folded rows.

This is the encode direction of the fold engine. Consecutive rows that
share the folded values of an ancestor level are grouped under one
ancestor element, and the folded values are written back as attributes
(in occurrence order) or child-text elements.
"""

from __future__ import annotations

from typing import Sequence
from xml.etree.ElementTree import Element, SubElement

from core.types import Row
from fold.engine import FoldPlan
from fold.rules import FoldRule


def unfold_rows(
    plan: FoldPlan,
    columns: tuple[str, ...],
    rows: Sequence[Row],
) -> Element:
    """Build a document tree whose fold yields ``rows`` again.

    Columns that are neither fold columns nor mapped by a leaf mapping are
    written as record children named after the column.

    Args:
        plan: Compiled fold plan used for decode.
        columns: Column names of ``rows``.
        rows: Rows to write.

    Returns:
        Document root element.
    """
    positions = {column: index for index, column in enumerate(columns)}
    leaf_columns = _leaf_columns(plan, columns)
    record_depth = len(plan.record_path) - 1
    root = Element(plan.record_path[0])
    first_row = rows[0] if rows else ()
    _apply_rules(root, plan.rules_at(0), _values(first_row, positions))
    if record_depth == 0:
        _write_leaves(root, leaf_columns, _values(first_row, positions))
        return root
    open_elements: list[tuple[Element, tuple[object, ...]]] = [(root, ())]
    for row in rows:
        values = _values(row, positions)
        _close_changed_levels(open_elements, plan, values, record_depth)
        while len(open_elements) < record_depth:
            depth = len(open_elements)
            parent = open_elements[-1][0]
            element = SubElement(parent, plan.record_path[depth])
            _apply_rules(element, plan.rules_at(depth), values)
            open_elements.append((element, _level_key(plan, depth, values)))
        record = SubElement(open_elements[-1][0], plan.record_path[record_depth])
        _apply_rules(record, plan.rules_at(record_depth), values)
        _write_leaves(record, leaf_columns, values)
    return root


def _close_changed_levels(
    open_elements: list[tuple[Element, tuple[object, ...]]],
    plan: FoldPlan,
    values: dict[str, object],
    record_depth: int,
) -> None:
    for depth in range(1, min(len(open_elements), record_depth)):
        if open_elements[depth][1] != _level_key(plan, depth, values):
            del open_elements[depth:]
            return


def _level_key(plan: FoldPlan, depth: int, values: dict[str, object]) -> tuple[object, ...]:
    return tuple(values.get(rule.column) for rule in plan.rules_at(depth))


def _apply_rules(
    element: Element,
    rules: tuple[FoldRule, ...],
    values: dict[str, object],
) -> None:
    attribute_rules = [rule for rule in rules if rule.child is None]
    last_present = max(
        (rule.occurrence for rule in attribute_rules if values.get(rule.column) is not None),
        default=-1,
    )
    for rule in sorted(attribute_rules, key=lambda item: item.occurrence):
        if rule.occurrence > last_present:
            break
        value = values.get(rule.column)
        element.set(rule.column, "" if value is None else str(value))
    for rule in rules:
        if rule.child is None:
            continue
        value = values.get(rule.column)
        if value is not None:
            SubElement(element, rule.child).text = str(value)


def _leaf_columns(plan: FoldPlan, columns: tuple[str, ...]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    mapped: set[str] = set(plan.fold_columns)
    for mapping in plan.leaf_mappings:
        for column in mapping.columns:
            pairs.append((mapping.tag, column))
            mapped.add(column)
    for column in columns:
        if column not in mapped:
            pairs.append((column, column))
    return pairs


def _write_leaves(
    record: Element,
    leaf_columns: list[tuple[str, str]],
    values: dict[str, object],
) -> None:
    for tag, column in leaf_columns:
        value = values.get(column)
        if value is not None:
            SubElement(record, tag).text = str(value)


def _values(row: Sequence[object], positions: dict[str, int]) -> dict[str, object]:
    return {column: row[index] for column, index in positions.items() if index < len(row)}
