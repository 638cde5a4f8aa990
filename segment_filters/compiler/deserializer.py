"""
Wire format to tree.

The wire format carries no type tag, so shapes are told apart structurally:

- condition: an array of length >= 3 whose first element is a string that is
  not a connector keyword (the audited operator vocabulary never uses one)
- group: ``[connector, [items...]]`` with a connector keyword first
- implicit group: a bare array of arrays, read as an AND group

Anything else degrades instead of raising: an unrecognized top-level payload
yields an empty tree and an unrecognized nested item is dropped. Both are
logged at WARNING so a corrupt saved segment still opens (blank) in the editor.
Items nested deeper than ``MAX_WIRE_DEPTH`` are dropped the same way.
Every node gets a fresh id; ids are not part of the wire format.
"""

import json
import logging
import reprlib
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from segment_filters.core.errors import SerializationError
from segment_filters.core.ids import IdGenerator, default_id_generator
from segment_filters.core.observability import record_metric
from segment_filters.core.validators import MAX_WIRE_DEPTH
from segment_filters.domain.enums import WIRE_CONNECTORS, Connector
from segment_filters.domain.nodes import Condition, Group, Node, Tree

logger = logging.getLogger(__name__)

OUTCOME_OK = "ok"
OUTCOME_DEGRADED = "degraded"
OUTCOME_EMPTY = "empty"


def _is_sequence(item: Any) -> bool:
    return isinstance(item, list | tuple)


def _is_connector(item: Any) -> bool:
    return isinstance(item, str) and item.strip().lower() in WIRE_CONNECTORS


def is_condition_array(item: Any) -> bool:
    return (
        _is_sequence(item)
        and len(item) >= 3
        and isinstance(item[0], str)
        and not _is_connector(item[0])
    )


def is_group_array(item: Any) -> bool:
    return (
        _is_sequence(item)
        and len(item) == 2
        and _is_connector(item[0])
        and _is_sequence(item[1])
    )


def is_implicit_group(item: Any) -> bool:
    """A non-empty bare array of arrays (no leading connector)."""
    return _is_sequence(item) and len(item) > 0 and all(_is_sequence(child) for child in item)


def _scalar(value: Any) -> bool:
    return isinstance(value, str | int | float | bool)


class _WireParser:
    """Single-use parser; counts dropped items to report the outcome."""

    def __init__(self, ids: IdGenerator) -> None:
        self.ids = ids
        self.dropped = 0

    def parse_root(self, wire: Any) -> Group | None:
        if is_condition_array(wire):
            return Group(id=self.ids(), children=(self.parse_condition(wire),), is_root=True)
        if is_group_array(wire):
            return replace(self.parse_group(wire, "$", 0), is_root=True)
        if is_implicit_group(wire):
            return Group(id=self.ids(), children=self.parse_items(wire, "$", 0), is_root=True)
        return None

    def parse_item(self, item: Any, path: str, depth: int) -> Node | None:
        if depth > MAX_WIRE_DEPTH:
            logger.warning(
                "Dropping filter item nested deeper than %d at %s", MAX_WIRE_DEPTH, path
            )
            self.dropped += 1
            return None
        if is_condition_array(item):
            return self.parse_condition(item)
        if is_group_array(item):
            return self.parse_group(item, path, depth)
        if is_implicit_group(item):
            return Group(id=self.ids(), children=self.parse_items(item, path, depth))
        logger.warning(
            "Dropping unrecognized filter item at %s", path, extra={"item": reprlib.repr(item)}
        )
        self.dropped += 1
        return None

    def parse_items(self, items: Any, path: str, depth: int) -> tuple[Node, ...]:
        parsed = (
            self.parse_item(item, f"{path}[{index}]", depth + 1)
            for index, item in enumerate(items)
        )
        return tuple(node for node in parsed if node is not None)

    def parse_group(self, wire: Any, path: str, depth: int) -> Group:
        connector = Connector.parse(wire[0])
        children = self.parse_items(wire[1], path, depth)
        return Group(id=self.ids(), connector=connector, children=children)

    def parse_condition(self, wire: Any) -> Condition:
        operator, attribute, raw_value = wire[0], wire[1], wire[2]
        if _is_sequence(raw_value):
            value = tuple(v for v in raw_value if _scalar(v))
        elif _scalar(raw_value):
            value = (raw_value,)
        else:
            value = ()
        modifier = wire[3] if len(wire) > 3 and isinstance(wire[3], Mapping) else None
        return Condition(
            id=self.ids(),
            attribute="" if attribute is None else str(attribute),
            operator=operator,
            value=value,
            modifier=modifier,
        )


def _clean_labels(labels: Any) -> dict[str, str]:
    if not isinstance(labels, Mapping):
        return {}
    return {str(k): str(v) for k, v in labels.items() if v is not None}


def _deserialize(wire: Any, labels: Any, ids: IdGenerator | None) -> tuple[Tree, str]:
    ids = ids or default_id_generator
    parser = _WireParser(ids)
    root = parser.parse_root(wire)

    if root is None:
        if wire not in (None, [], ()):
            logger.warning(
                "Unrecognized filter payload, opening an empty tree",
                extra={"payload_type": type(wire).__name__},
            )
        root = Group(id=ids(), is_root=True)
        outcome = OUTCOME_EMPTY
    elif parser.dropped:
        outcome = OUTCOME_DEGRADED
    else:
        outcome = OUTCOME_OK

    record_metric("deserializations_total", outcome=outcome)
    return Tree(root=root, labels=_clean_labels(labels)), outcome


def deserialize(
    wire: Any, labels: Mapping[str, str] | None = None, *, ids: IdGenerator | None = None
) -> Tree:
    """
    Rebuild a tree from its wire form. Never raises for malformed input.

    Args:
        wire: Parsed JSON (lists, strings, numbers, mappings)
        labels: Display labels to attach to the tree
        ids: Id generator for the new nodes

    Returns:
        The tree; an empty tree when the payload is empty or unrecognized
    """
    tree, _ = _deserialize(wire, labels, ids)
    return tree


def deserialize_segment_data(segment_data: Any, *, ids: IdGenerator | None = None) -> Tree:
    """Rebuild a tree from a ``{"filters": ..., "labels": ...}`` payload."""
    if not isinstance(segment_data, Mapping):
        logger.warning(
            "segment_data is not a mapping, opening an empty tree",
            extra={"payload_type": type(segment_data).__name__},
        )
        return deserialize(None, ids=ids)
    return deserialize(segment_data.get("filters"), segment_data.get("labels"), ids=ids)


def loads(
    text: str | bytes,
    labels: Mapping[str, str] | None = None,
    *,
    strict: bool = False,
    ids: IdGenerator | None = None,
) -> Tree:
    """
    Parse wire JSON text into a tree.

    Args:
        text: JSON text of the wire form
        labels: Display labels to attach to the tree
        strict: Raise instead of degrading on invalid JSON or unrecognized shapes
        ids: Id generator for the new nodes

    Raises:
        SerializationError: Only when ``strict`` is true
    """
    try:
        wire = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        if strict:
            raise SerializationError(
                "Filter payload is not valid JSON", details={"error": str(e)}
            ) from e
        logger.warning("Filter payload is not valid JSON, opening an empty tree: %s", e)
        return deserialize(None, labels, ids=ids)

    tree, outcome = _deserialize(wire, labels, ids)
    if strict and outcome != OUTCOME_OK and wire not in (None, []):
        raise SerializationError(
            "Filter payload has unrecognized items", details={"outcome": outcome}
        )
    return tree
