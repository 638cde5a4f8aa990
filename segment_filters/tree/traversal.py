"""
Tree traversal shared by every node-model operation.

All rebuilding goes through ``splice_node``: it copies only the groups on the
path from the root to the target and returns the untouched subtrees (and the
input group itself, when nothing matched) by reference.
"""

import dataclasses
from collections.abc import Callable, Iterator, Sequence
from typing import NamedTuple, assert_never

from segment_filters.domain.enums import Connector, NodeKind
from segment_filters.domain.nodes import Condition, Group, Node, Tree


def iter_nodes(group: Group) -> Iterator[tuple[Node, int]]:
    """
    Yield every node below ``group`` (depth-first, document order).

    Yields:
        ``(node, depth)`` pairs where direct children of ``group`` have
        depth 1 relative to it
    """
    stack: list[tuple[Node, int]] = [(child, 1) for child in reversed(group.children)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if node.kind is NodeKind.GROUP:
            stack.extend((child, depth + 1) for child in reversed(node.children))


def iter_conditions(target: Tree | Group) -> Iterator[Condition]:
    group = target.root if isinstance(target, Tree) else target
    for node, _ in iter_nodes(group):
        if node.kind is NodeKind.CONDITION:
            yield node


def count_conditions(target: Tree | Group) -> int:
    """Total number of conditions across the whole tree."""
    return sum(1 for _ in iter_conditions(target))


def max_depth(target: Tree | Group) -> int:
    """
    Nesting depth of the deepest group; a root with no subgroups has depth 1.
    """
    group = target.root if isinstance(target, Tree) else target
    deepest = 1
    for node, depth in iter_nodes(group):
        if node.kind is NodeKind.GROUP:
            deepest = max(deepest, depth + 1)
    return deepest


def find_node(target: Tree | Group, node_id: str) -> Node | None:
    group = target.root if isinstance(target, Tree) else target
    if group.id == node_id:
        return group
    for node, _ in iter_nodes(group):
        if node.id == node_id:
            return node
    return None


def find_group(target: Tree | Group, group_id: str) -> Group | None:
    node = find_node(target, group_id)
    return node if node is not None and node.kind is NodeKind.GROUP else None


def find_parent(target: Tree | Group, node_id: str) -> Group | None:
    """Group that directly contains ``node_id``; None for the root or unknown ids."""
    group = target.root if isinstance(target, Tree) else target
    for child in group.children:
        if child.id == node_id:
            return group
    for child in group.children:
        if child.kind is NodeKind.GROUP:
            parent = find_parent(child, node_id)
            if parent is not None:
                return parent
    return None


def group_depth(target: Tree | Group, group_id: str) -> int:
    """
    Depth of a specific group (root is 1).

    Returns:
        The depth, or -1 when no group has that id
    """
    group = target.root if isinstance(target, Tree) else target
    if group.id == group_id:
        return 1
    for node, depth in iter_nodes(group):
        if node.id == group_id and node.kind is NodeKind.GROUP:
            return depth + 1
    return -1


def subtree_depth(group: Group) -> int:
    """Number of group levels from ``group`` (counted as 1) down to its deepest subgroup."""
    return max_depth(group)


def has_or_logic(target: Tree | Group) -> bool:
    group = target.root if isinstance(target, Tree) else target
    if group.connector is Connector.OR:
        return True
    return any(
        node.kind is NodeKind.GROUP and node.connector is Connector.OR
        for node, _ in iter_nodes(group)
    )


def has_nested_groups(target: Tree | Group) -> bool:
    group = target.root if isinstance(target, Tree) else target
    return any(child.kind is NodeKind.GROUP for child in group.children)


class ConditionContext(NamedTuple):
    condition: Condition
    parent_connector: Connector | str
    depth: int


def collect_conditions(target: Tree | Group) -> list[ConditionContext]:
    """Flatten the tree into conditions with their parent connector and group depth."""
    group = target.root if isinstance(target, Tree) else target
    results: list[ConditionContext] = []

    def visit(current: Group, depth: int) -> None:
        for child in current.children:
            match child.kind:
                case NodeKind.CONDITION:
                    results.append(ConditionContext(child, current.connector, depth))
                case NodeKind.GROUP:
                    visit(child, depth + 1)
                case _:
                    assert_never(child.kind)

    visit(group, 1)
    return results


def splice_node(
    group: Group, node_id: str, replace: Callable[[Node], Sequence[Node]]
) -> Group:
    """
    Replace the descendant ``node_id`` of ``group`` by ``replace(node)``.

    ``replace`` returns the nodes to put in the target's position: an empty
    sequence deletes it, one node replaces it, several nodes splice them in.
    The root itself cannot be spliced; use ``update_node`` for that.

    Returns:
        A new group with the path to the target copied, or ``group`` itself
        when no descendant has that id
    """
    for index, child in enumerate(group.children):
        if child.id == node_id:
            children = (*group.children[:index], *replace(child), *group.children[index + 1 :])
            return dataclasses.replace(group, children=children)
        if child.kind is NodeKind.GROUP:
            new_child = splice_node(child, node_id, replace)
            if new_child is not child:
                children = (*group.children[:index], new_child, *group.children[index + 1 :])
                return dataclasses.replace(group, children=children)
    return group


def update_node(group: Group, node_id: str, update: Callable[[Node], Node]) -> Group:
    """Replace ``node_id`` (the root included) by ``update(node)``."""
    if group.id == node_id:
        updated = update(group)
        if updated.kind is not NodeKind.GROUP:
            raise TypeError("The root must remain a group")
        return updated
    return splice_node(group, node_id, lambda node: (update(node),))


def remove_node(group: Group, node_id: str) -> Group:
    return splice_node(group, node_id, lambda node: ())


def with_root(tree: Tree, root: Group) -> Tree:
    """Tree with a new root; the same tree object when the root is unchanged."""
    if root is tree.root:
        return tree
    return dataclasses.replace(tree, root=root)
