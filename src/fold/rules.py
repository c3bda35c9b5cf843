"""Fold rule compilation.

This module turns the marker strings of a fold map into explicit
``FoldRule`` tuples once, at setup. Traversal then evaluates rules by
depth and occurrence index without re-reading marker strings.

Marker grammar, where ``office`` must be an element on the record path:

* ``office``      first attribute of ``office`` (occurrence 0)
* ``office^``     second attribute (occurrence 1); each caret adds one
* ``office/name`` text of the ``name`` child of ``office``
* ``root office`` a space-separated prefix of the record path, when an
  element name occurs more than once on the path
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from core.constants import FOLD_CHILD_SEPARATOR, FOLD_OCCURRENCE_MARKER
from core.errors import ConfigurationError


@dataclass(frozen=True)
class FoldRule:
    """One value captured from an element on the record path.

    Attributes:
        path: Element names from the document root to the source element.
        column: Column receiving the value.
        occurrence: Attribute position on the source element, in document order.
        child: Child tag whose text is captured instead of an attribute.
    """

    path: tuple[str, ...]
    column: str
    occurrence: int = 0
    child: str | None = None

    @property
    def depth(self) -> int:
        """Zero-based depth of the source element on the record path."""
        return len(self.path) - 1


@dataclass(frozen=True)
class LeafMapping:
    """Mapping of one record child tag onto its target column(s).

    A single column concatenates repeated tags; several columns receive
    repeated tags positionally.
    """

    tag: str
    columns: tuple[str, ...]
    concatenate: bool


def compile_fold_rules(
    record_path: tuple[str, ...],
    fold_map: Mapping[str, str],
) -> tuple[FoldRule, ...]:
    """Compile fold markers into ordered fold rules.

    Args:
        record_path: Element names from the root to the record element.
        fold_map: Marker string to target column.

    Returns:
        Rules ordered by depth, then occurrence, then declaration order.

    Raises:
        ConfigurationError: If a marker names an element that is not on the
            record path, or two markers capture the same value.
    """
    rules: list[FoldRule] = []
    seen_sources: set[tuple[tuple[str, ...], int, str | None]] = set()
    for marker, column in fold_map.items():
        rule = _compile_marker(record_path, marker, str(column))
        source = (rule.path, rule.occurrence, rule.child)
        if source in seen_sources:
            raise ConfigurationError(
                f"Fold marker '{marker}' captures the same value as an earlier marker. "
                "Add a caret to capture the next attribute."
            )
        seen_sources.add(source)
        rules.append(rule)
    return tuple(
        sorted(rules, key=lambda rule: (rule.depth, rule.child is not None, rule.occurrence))
    )


def compile_leaf_mappings(
    column_map: Mapping[str, str | tuple[str, ...]],
) -> tuple[LeafMapping, ...]:
    """Compile a record column map into leaf mappings."""
    mappings = []
    for tag, target in column_map.items():
        if isinstance(target, str):
            mappings.append(LeafMapping(tag=tag, columns=(target,), concatenate=True))
        else:
            mappings.append(LeafMapping(tag=tag, columns=tuple(target), concatenate=False))
    return tuple(mappings)


def _compile_marker(record_path: tuple[str, ...], marker: str, column: str) -> FoldRule:
    element_part, _, child = marker.partition(FOLD_CHILD_SEPARATOR)
    stripped = element_part.rstrip(FOLD_OCCURRENCE_MARKER)
    occurrence = len(element_part) - len(stripped)
    if child and occurrence:
        raise ConfigurationError(
            f"Fold marker '{marker}' mixes an attribute occurrence with a child tag. "
            "Use either 'element^' or 'element/child'."
        )
    path = _resolve_marker_path(record_path, stripped.strip(), marker)
    return FoldRule(path=path, column=column, occurrence=occurrence, child=child or None)


def _resolve_marker_path(
    record_path: tuple[str, ...],
    element_spec: str,
    marker: str,
) -> tuple[str, ...]:
    segments = tuple(element_spec.split())
    if len(segments) > 1:
        if record_path[: len(segments)] != segments:
            raise _unresolved_marker(marker, record_path)
        return segments
    if not segments:
        raise _unresolved_marker(marker, record_path)
    positions = [index for index, name in enumerate(record_path) if name == segments[0]]
    if not positions:
        raise _unresolved_marker(marker, record_path)
    if len(positions) > 1:
        raise ConfigurationError(
            f"Fold marker '{marker}' is ambiguous: '{segments[0]}' occurs more than once "
            f"on record path '{' '.join(record_path)}'. Use the full path prefix."
        )
    return record_path[: positions[0] + 1]


def _unresolved_marker(marker: str, record_path: tuple[str, ...]) -> ConfigurationError:
    return ConfigurationError(
        f"Fold marker '{marker}' does not match any ancestor on record path "
        f"'{' '.join(record_path)}'. Fold rules can only capture elements on that path."
    )
