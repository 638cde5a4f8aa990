"""
Node model for filter trees.

Key Components:
- traversal: shared find / splice visitor and read-only queries
- operations: copy-on-write mutations (add, remove, update, group, ungroup)
- summary: human-readable rendering
"""

from segment_filters.tree.operations import (
    add_condition,
    add_group,
    can_add_condition,
    can_add_group,
    clear,
    create_condition,
    create_empty_condition,
    create_empty_group,
    create_empty_tree,
    group_conditions,
    remove_condition,
    remove_group,
    replace_root,
    set_connector,
    set_labels,
    toggle_connector,
    ungroup_group,
    update_condition,
)
from segment_filters.tree.summary import describe
from segment_filters.tree.traversal import (
    collect_conditions,
    count_conditions,
    find_node,
    find_parent,
    group_depth,
    has_nested_groups,
    has_or_logic,
    iter_conditions,
    iter_nodes,
    max_depth,
)

__all__ = [
    "add_condition",
    "add_group",
    "can_add_condition",
    "can_add_group",
    "clear",
    "collect_conditions",
    "count_conditions",
    "create_condition",
    "create_empty_condition",
    "create_empty_group",
    "create_empty_tree",
    "describe",
    "find_node",
    "find_parent",
    "group_conditions",
    "group_depth",
    "has_nested_groups",
    "has_or_logic",
    "iter_conditions",
    "iter_nodes",
    "max_depth",
    "remove_condition",
    "remove_group",
    "replace_root",
    "set_connector",
    "set_labels",
    "toggle_connector",
    "ungroup_group",
    "update_condition",
]
