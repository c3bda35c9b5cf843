"""Hierarchical fold engine.

This module flattens a nested element tree into rows. Every element
reached through the exact record path yields one row, in document order.
Values captured on ancestors by fold rules are broadcast to every row
below that ancestor; record child tags fill columns through leaf mappings.
Tags and attributes without a mapping are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping
from xml.etree.ElementTree import Element

from core.errors import ConfigurationError, SchemaError
from core.constants import LEAF_VALUE_JOINER
from core.types import Row
from fold.rules import FoldRule, LeafMapping, compile_fold_rules, compile_leaf_mappings


@dataclass(frozen=True)
class FoldPlan:
    """Compiled fold configuration for one document shape.

    Attributes:
        record_path: Element names from the root to the record element.
        fold_rules: Ancestor and record-element captures.
        leaf_mappings: Record child tag mappings; empty means discover tags.
        columns: Declared output columns, fold columns first.
    """

    record_path: tuple[str, ...]
    fold_rules: tuple[FoldRule, ...]
    leaf_mappings: tuple[LeafMapping, ...]
    columns: tuple[str, ...]

    def rules_at(self, depth: int) -> tuple[FoldRule, ...]:
        """Return fold rules whose source element sits at ``depth``."""
        return tuple(rule for rule in self.fold_rules if rule.depth == depth)

    @property
    def fold_columns(self) -> tuple[str, ...]:
        """Columns filled by fold rules."""
        return tuple(rule.column for rule in self.fold_rules)


def build_fold_plan(
    record_path: tuple[str, ...],
    column_map: Mapping[str, str | tuple[str, ...]],
    fold_map: Mapping[str, str],
) -> FoldPlan:
    """Compile and validate a fold plan.

    Args:
        record_path: Element names from the root to the record element.
        column_map: Record child tag to one column or a list of columns.
        fold_map: Ancestor marker to column.

    Returns:
        Validated fold plan.

    Raises:
        ConfigurationError: If a fold marker is not on the record path or a
            column is targeted twice.
    """
    if not record_path:
        raise ConfigurationError("Record path is empty. Name at least the record element.")
    fold_rules = compile_fold_rules(record_path, fold_map)
    leaf_mappings = compile_leaf_mappings(column_map)
    columns: list[str] = [rule.column for rule in fold_rules]
    for mapping in leaf_mappings:
        columns.extend(mapping.columns)
    duplicates = sorted({column for column in columns if columns.count(column) > 1})
    if duplicates:
        raise ConfigurationError(
            f"Columns targeted by more than one fold rule or tag: {', '.join(duplicates)}. "
            "Map each column from exactly one source."
        )
    return FoldPlan(
        record_path=record_path,
        fold_rules=fold_rules,
        leaf_mappings=leaf_mappings,
        columns=tuple(columns),
    )


def fold_tree(root: Element, plan: FoldPlan) -> tuple[tuple[str, ...], tuple[Row, ...]]:
    """Flatten an element tree into rows.

    Args:
        root: Document root element.
        plan: Compiled fold plan.

    Returns:
        Pair of output columns and rows in document order. When the plan has
        no leaf mappings, record child tags become columns in first-seen order.

    Raises:
        SchemaError: If the document root does not match the record path, or a
            discovered record child tag collides with a fold column.
    """
    if local_name(root.tag) != plan.record_path[0]:
        raise SchemaError(
            f"Document root '{local_name(root.tag)}' does not match record path root "
            f"'{plan.record_path[0]}'. Fix the record_path option."
        )
    records = list(_walk(root, 0, {}, plan))
    if plan.leaf_mappings:
        columns = plan.columns
        value_rows = [
            _leaf_values(record, context, plan.leaf_mappings) for record, context in records
        ]
    else:
        columns, value_rows = _discover_leaf_values(records, plan)
    rows = tuple(tuple(values.get(column) for column in columns) for values in value_rows)
    return columns, rows


def local_name(tag: object) -> str:
    """Return an element tag without its ``{namespace}`` prefix."""
    text = str(tag)
    if text.startswith("{"):
        return text.split("}", 1)[1]
    return text


def element_text(element: Element) -> str:
    """Return the stripped text content of an element and its descendants."""
    return "".join(element.itertext()).strip()


def _walk(
    element: Element,
    depth: int,
    context: dict[str, str | None],
    plan: FoldPlan,
) -> Iterator[tuple[Element, dict[str, str | None]]]:
    scoped = dict(context)
    for rule in plan.rules_at(depth):
        scoped[rule.column] = _capture(element, rule)
    if depth == len(plan.record_path) - 1:
        yield element, scoped
        return
    next_name = plan.record_path[depth + 1]
    for child in element:
        if local_name(child.tag) == next_name:
            yield from _walk(child, depth + 1, scoped, plan)


def _capture(element: Element, rule: FoldRule) -> str | None:
    if rule.child is not None:
        for child in element:
            if local_name(child.tag) == rule.child:
                return element_text(child)
        return None
    attribute_values = list(element.attrib.values())
    if rule.occurrence < len(attribute_values):
        return attribute_values[rule.occurrence]
    return None


def _leaf_values(
    record: Element,
    context: dict[str, str | None],
    leaf_mappings: tuple[LeafMapping, ...],
) -> dict[str, str | None]:
    values = dict(context)
    occurrences = _child_texts(record)
    for mapping in leaf_mappings:
        texts = occurrences.get(mapping.tag, [])
        if not texts:
            continue
        if mapping.concatenate:
            values[mapping.columns[0]] = LEAF_VALUE_JOINER.join(texts)
            continue
        for column, text in zip(mapping.columns, texts):
            values[column] = text
    return values


def _discover_leaf_values(
    records: list[tuple[Element, dict[str, str | None]]],
    plan: FoldPlan,
) -> tuple[tuple[str, ...], list[dict[str, str | None]]]:
    columns: list[str] = list(plan.fold_columns)
    record_depth = len(plan.record_path) - 1
    # a record-level child capture already holds the text of its own tag
    same_child = {
        rule.column
        for rule in plan.fold_rules
        if rule.depth == record_depth and rule.child == rule.column
    }
    value_rows = []
    for record, context in records:
        values = dict(context)
        for tag, texts in _child_texts(record).items():
            if tag in same_child:
                continue
            if tag in plan.fold_columns:
                raise SchemaError(
                    f"Record child <{tag}> collides with fold column '{tag}'. Rename the "
                    "fold column or map the child through column_map."
                )
            if tag not in columns:
                columns.append(tag)
            values[tag] = LEAF_VALUE_JOINER.join(texts)
        value_rows.append(values)
    return tuple(columns), value_rows


def _child_texts(record: Element) -> dict[str, list[str]]:
    occurrences: dict[str, list[str]] = {}
    for child in record:
        if not isinstance(child.tag, str):
            continue
        occurrences.setdefault(local_name(child.tag), []).append(element_text(child))
    return occurrences
