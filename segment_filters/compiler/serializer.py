"""
Tree to wire format.

Wire shapes (JSON arrays, no type tag):
- Condition: ``[operator, attribute, [values...]]`` plus an optional 4th
  element holding the modifier mapping
- Group: ``[connector, [items...]]`` with connector ``"and"`` / ``"or"``

A group whose serialized children list has exactly one element is elided at
every level (the root included): the single child's form takes its place.
"""

import logging
from typing import Any, TypeAlias

from segment_filters.compiler.canonicalizer import to_canonical_json_string
from segment_filters.core.observability import record_metric
from segment_filters.domain.enums import Connector, NodeKind
from segment_filters.domain.nodes import Condition, Group, Node, Tree

logger = logging.getLogger(__name__)

WireNode: TypeAlias = list[Any]


def serialize(target: Tree | Node) -> WireNode:
    """
    Serialize a tree (or any node) to its JSON-ready wire form.

    Example:
        A root AND group holding ``country is US`` and an OR group of two
        device conditions serializes to::

            ["and", [["is", "country", ["US"]],
                     ["or", [["is", "device", ["Mobile"]], ["is", "device", ["Tablet"]]]]]]
    """
    node = target.root if isinstance(target, Tree) else target
    wire = _serialize_node(node)
    record_metric("serializations_total")
    return wire


def serialize_condition(condition: Condition) -> WireNode:
    # The negated flag is folded into the operator; the wire has no negation
    wire: WireNode = [condition.effective_operator, condition.attribute, list(condition.value)]
    if condition.modifier is not None:
        wire.append(dict(condition.modifier))
    return wire


def serialize_group(group: Group) -> WireNode:
    items = [_serialize_node(child) for child in group.children]
    if len(items) == 1:
        return items[0]
    return [connector_keyword(group.connector), items]


def connector_keyword(connector: Connector | str) -> str:
    if isinstance(connector, Connector):
        return connector.wire
    return str(connector).lower()


def _serialize_node(node: Node) -> WireNode:
    if node.kind is NodeKind.CONDITION:
        return serialize_condition(node)
    return serialize_group(node)


def serialize_segment_data(tree: Tree) -> dict[str, Any]:
    """The ``segment_data`` payload of a saved segment."""
    return {"filters": serialize(tree), "labels": dict(tree.labels)}


def dumps(tree: Tree | Node) -> str:
    """Canonical compact JSON text of the wire form (stable across runs)."""
    return to_canonical_json_string(serialize(tree))
