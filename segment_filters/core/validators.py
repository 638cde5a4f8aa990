"""Shared validators for wire payloads accepted by Pydantic schemas.

These are size guards on untrusted JSON, applied before a payload reaches the
deserializer. They are deliberately looser than the tree limits enforced by
``compiler.validator``: a payload over the business limits still opens in the
editor (and fails validation there), while absurd payloads are refused.
"""

from typing import Any

from segment_filters.domain.enums import WIRE_CONNECTORS

MAX_WIRE_DEPTH = 10
MAX_WIRE_NODES = 1000
MAX_ARRAY_SIZE = 100


def _is_group(node: Any) -> bool:
    return (
        isinstance(node, list)
        and len(node) == 2
        and isinstance(node[0], str)
        and node[0].lower() in WIRE_CONNECTORS
        and isinstance(node[1], list)
    )


def _children(node: Any) -> list[Any]:
    if _is_group(node):
        return node[1]
    # Bare list of lists: implicit AND group
    if isinstance(node, list) and node and all(isinstance(item, list) for item in node):
        return node
    return []


def validate_wire_depth(
    filters: Any, max_depth: int = MAX_WIRE_DEPTH, current_depth: int = 0
) -> None:
    """
    Validate that a wire payload doesn't nest groups beyond ``max_depth``.

    Raises:
        ValueError: If the payload nests too deeply
    """
    if current_depth > max_depth:
        raise ValueError(f"filters exceed maximum nesting depth of {max_depth}")

    for child in _children(filters):
        validate_wire_depth(child, max_depth, current_depth + 1)


def validate_wire_node_count(filters: Any, max_nodes: int = MAX_WIRE_NODES) -> None:
    """
    Validate that a wire payload doesn't exceed ``max_nodes`` nodes.

    Counts both group arrays and condition arrays.

    Raises:
        ValueError: If the payload has too many nodes
    """

    def count_nodes(node: Any) -> int:
        return 1 + sum(count_nodes(child) for child in _children(node))

    node_count = count_nodes(filters)
    if node_count > max_nodes:
        raise ValueError(
            f"filters exceed maximum node count of {max_nodes} (got {node_count} nodes)"
        )


def validate_array_sizes(obj: Any, path: str = "filters", max_size: int = MAX_ARRAY_SIZE) -> None:
    """
    Validate that no array in the payload exceeds ``max_size`` elements.

    Raises:
        ValueError: If an array is too large
    """
    if isinstance(obj, dict):
        for key, value in obj.items():
            validate_array_sizes(value, f"{path}.{key}", max_size)
    elif isinstance(obj, list):
        if len(obj) > max_size:
            raise ValueError(f"Array at '{path}' exceeds maximum size of {max_size}")
        for i, item in enumerate(obj):
            validate_array_sizes(item, f"{path}[{i}]", max_size)


def validate_wire_filters(v: Any) -> list[Any]:
    """
    Validate a ``filters`` value: a JSON array within the size guards.

    An empty array is accepted (it stands for an empty tree).

    Raises:
        ValueError: If the value is not an array or is too large
    """
    if not isinstance(v, list):
        raise ValueError("filters must be a JSON array")
    if not v:
        return v

    validate_wire_depth(v)
    validate_wire_node_count(v)
    validate_array_sizes(v)
    return v
