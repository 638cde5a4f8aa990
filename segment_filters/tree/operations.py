"""
Node model mutations.

Every function takes a ``Tree`` and returns a new ``Tree`` (or a
``MutationResult`` wrapping one); the input is never modified. Unknown ids
make an operation a no-op that returns the input tree itself.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any

from segment_filters.core.ids import IdGenerator, default_id_generator
from segment_filters.core.observability import record_metric
from segment_filters.domain.catalog import AttributeCatalog, load_catalog
from segment_filters.domain.enums import Connector, NodeKind, ViolationKind
from segment_filters.domain.nodes import Condition, Group, Tree, TreeLimits
from segment_filters.domain.results import MutationResult, Violation
from segment_filters.tree.traversal import (
    count_conditions,
    find_group,
    find_node,
    find_parent,
    group_depth,
    remove_node,
    splice_node,
    subtree_depth,
    update_node,
    with_root,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"attribute", "operator", "value", "modifier", "negated"})


def _limits(limits: TreeLimits | None) -> TreeLimits:
    if limits is not None:
        return limits
    from segment_filters.core.config import settings

    return settings.limits


def _reject(tree: Tree, violation: Violation) -> MutationResult:
    logger.debug(
        "Mutation rejected: %s",
        violation.message,
        extra={"kind": violation.kind.value, "node_id": violation.node_id},
    )
    record_metric("mutations_rejected_total", kind=violation.kind.value)
    return MutationResult(tree, violation)


# ============================================================================
# Construction
# ============================================================================


def create_empty_condition(*, ids: IdGenerator | None = None) -> Condition:
    return Condition(id=(ids or default_id_generator)())


def create_empty_group(
    connector: Connector | str = Connector.AND,
    *,
    ids: IdGenerator | None = None,
    is_root: bool = False,
) -> Group:
    resolved = Connector.parse(connector)
    if resolved is None:
        raise ValueError(f"Unknown connector '{connector}'")
    return Group(id=(ids or default_id_generator)(), connector=resolved, is_root=is_root)


def create_empty_tree(*, ids: IdGenerator | None = None) -> Tree:
    """A root AND group with no children and no labels."""
    return Tree(root=create_empty_group(ids=ids, is_root=True))


def create_condition(
    attribute: str,
    operator: str | None = None,
    value: Any = (),
    *,
    modifier: Mapping[str, Any] | None = None,
    negated: bool = False,
    catalog: AttributeCatalog | None = None,
    ids: IdGenerator | None = None,
) -> Condition:
    """
    Build a populated condition.

    When ``operator`` is omitted the attribute's default operator from the
    catalog is used.
    """
    if operator is None:
        operator = (catalog or load_catalog()).default_operator(attribute).value
    return Condition(
        id=(ids or default_id_generator)(),
        attribute=attribute,
        operator=operator,
        value=value,
        modifier=modifier,
        negated=negated,
    )


# ============================================================================
# Capacity checks
# ============================================================================


def can_add_condition(tree: Tree, *, limits: TreeLimits | None = None) -> bool:
    return count_conditions(tree) < _limits(limits).max_conditions


def can_add_group(
    tree: Tree, parent_group_id: str | None = None, *, limits: TreeLimits | None = None
) -> bool:
    """True when a new group under ``parent_group_id`` stays within the depth limit."""
    depth = group_depth(tree, parent_group_id or tree.root.id)
    return depth != -1 and depth + 1 <= _limits(limits).max_depth


# ============================================================================
# Conditions
# ============================================================================


def add_condition(
    tree: Tree,
    parent_group_id: str | None = None,
    *,
    condition: Condition | None = None,
    limits: TreeLimits | None = None,
    ids: IdGenerator | None = None,
) -> MutationResult:
    """
    Append a condition to a group.

    Args:
        tree: Tree to mutate
        parent_group_id: Target group; defaults to the root
        condition: Condition to append; a fresh empty one when omitted
        limits: Capacity limits; defaults to the configured limits
        ids: Id generator for the fresh condition

    Returns:
        MutationResult whose ``violation`` is ``max_conditions_exceeded`` when
        the tree is already at capacity
    """
    limits = _limits(limits)
    target_id = parent_group_id or tree.root.id
    if find_group(tree, target_id) is None:
        logger.debug("add_condition: unknown group %s", target_id)
        return MutationResult(tree)

    if count_conditions(tree) >= limits.max_conditions:
        return _reject(
            tree,
            Violation(
                kind=ViolationKind.MAX_CONDITIONS_EXCEEDED,
                message=f"Maximum number of conditions ({limits.max_conditions}) reached",
                node_id=target_id,
            ),
        )

    new_condition = condition or create_empty_condition(ids=ids)
    root = update_node(
        tree.root,
        target_id,
        lambda group: replace(group, children=(*group.children, new_condition)),
    )
    return MutationResult(with_root(tree, root))


def remove_condition(
    tree: Tree,
    condition_id: str,
    parent_group_id: str | None = None,
    *,
    ids: IdGenerator | None = None,
) -> Tree:
    """
    Remove a condition and any non-root groups the removal leaves empty.

    When the root ends up with no children it receives one fresh empty
    condition so there is always an editable row.

    Args:
        tree: Tree to mutate
        condition_id: Condition to remove
        parent_group_id: When given, the condition must be a direct child of it
        ids: Id generator for the replacement condition
    """
    node = find_node(tree, condition_id)
    if node is None or node.kind is not NodeKind.CONDITION:
        logger.debug("remove_condition: unknown condition %s", condition_id)
        return tree

    parent = find_parent(tree, condition_id)
    if parent_group_id is not None and parent.id != parent_group_id:
        logger.debug("remove_condition: %s is not a child of %s", condition_id, parent_group_id)
        return tree

    root = remove_node(tree.root, condition_id)

    emptied_id = parent.id
    while emptied_id != root.id:
        group = find_group(root, emptied_id)
        if group is None or group.children:
            break
        grandparent = find_parent(root, emptied_id)
        root = remove_node(root, emptied_id)
        emptied_id = grandparent.id

    if not root.children:
        root = replace(root, children=(create_empty_condition(ids=ids),))
    return with_root(tree, root)


def update_condition(
    tree: Tree,
    condition_id: str,
    updates: Mapping[str, Any] | None = None,
    *,
    catalog: AttributeCatalog | None = None,
    **changes: Any,
) -> Tree:
    """
    Replace fields of one condition.

    Changing ``attribute`` resets ``operator`` to the attribute's default and
    clears ``value``; an ``operator`` or ``value`` passed in the same update
    is applied after the reset.

    Raises:
        ValueError: If an update key is not one of ``UPDATABLE_FIELDS``
    """
    changes = {**(updates or {}), **changes}
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported condition update keys: {sorted(unknown)}")

    node = find_node(tree, condition_id)
    if node is None or node.kind is not NodeKind.CONDITION:
        logger.debug("update_condition: unknown condition %s", condition_id)
        return tree

    fields: dict[str, Any] = {}
    if "attribute" in changes:
        attribute = changes["attribute"] or ""
        if attribute != node.attribute:
            fields["attribute"] = attribute
            fields["operator"] = (catalog or load_catalog()).default_operator(attribute).value
            fields["value"] = ()
    for key in ("operator", "value", "modifier", "negated"):
        if key in changes:
            fields[key] = changes[key]
    if not fields:
        return tree

    root = update_node(tree.root, condition_id, lambda condition: replace(condition, **fields))
    return with_root(tree, root)


# ============================================================================
# Groups
# ============================================================================


def add_group(
    tree: Tree,
    parent_group_id: str | None = None,
    connector: Connector | str = Connector.AND,
    *,
    group: Group | None = None,
    limits: TreeLimits | None = None,
    ids: IdGenerator | None = None,
) -> MutationResult:
    """
    Append a nested group to a group.

    A prepared ``group`` (with children) may be passed instead of creating an
    empty one; its own depth and conditions count against the limits.

    Returns:
        MutationResult whose ``violation`` is ``max_depth_exceeded`` or
        ``max_conditions_exceeded`` when the group does not fit
    """
    limits = _limits(limits)
    target_id = parent_group_id or tree.root.id
    parent_depth = group_depth(tree, target_id)
    if parent_depth == -1:
        logger.debug("add_group: unknown group %s", target_id)
        return MutationResult(tree)

    new_group = group or create_empty_group(connector, ids=ids)
    if new_group.is_root:
        new_group = replace(new_group, is_root=False)

    if parent_depth + subtree_depth(new_group) > limits.max_depth:
        return _reject(
            tree,
            Violation(
                kind=ViolationKind.MAX_DEPTH_EXCEEDED,
                message=f"Maximum nesting depth ({limits.max_depth}) reached",
                node_id=target_id,
            ),
        )
    added = count_conditions(new_group)
    if added and count_conditions(tree) + added > limits.max_conditions:
        return _reject(
            tree,
            Violation(
                kind=ViolationKind.MAX_CONDITIONS_EXCEEDED,
                message=f"Maximum number of conditions ({limits.max_conditions}) reached",
                node_id=target_id,
            ),
        )

    root = update_node(
        tree.root, target_id, lambda parent: replace(parent, children=(*parent.children, new_group))
    )
    return MutationResult(with_root(tree, root))


def remove_group(tree: Tree, group_id: str) -> Tree:
    """Remove a group and its whole subtree. The root cannot be removed."""
    if group_id == tree.root.id:
        logger.debug("remove_group: refusing to remove the root group")
        return tree
    if find_group(tree, group_id) is None:
        return tree
    return with_root(tree, remove_node(tree.root, group_id))


def toggle_connector(tree: Tree, group_id: str) -> Tree:
    group = find_group(tree, group_id)
    if group is None:
        return tree
    current = Connector.parse(group.connector)
    toggled = current.toggled() if current is not None else Connector.AND
    return with_root(
        tree, update_node(tree.root, group_id, lambda node: replace(node, connector=toggled))
    )


def set_connector(tree: Tree, group_id: str, connector: Connector | str) -> Tree:
    """
    Set a group's connector.

    Raises:
        ValueError: If ``connector`` is not AND/OR
    """
    resolved = Connector.parse(connector)
    if resolved is None:
        raise ValueError(f"Unknown connector '{connector}'")
    group = find_group(tree, group_id)
    if group is None or group.connector is resolved:
        return tree
    return with_root(
        tree, update_node(tree.root, group_id, lambda node: replace(node, connector=resolved))
    )


def group_conditions(
    tree: Tree,
    condition_ids: Iterable[str],
    connector: Connector | str = Connector.AND,
    *,
    limits: TreeLimits | None = None,
    ids: IdGenerator | None = None,
) -> Tree:
    """
    Wrap sibling conditions into a new nested group.

    The new group takes the position of the first selected condition and
    keeps the selected conditions in their original relative order. No-op
    when fewer than two ids are given, when they are not all direct sibling
    conditions, or when the new group would exceed the depth limit.
    """
    selected = list(dict.fromkeys(condition_ids))
    if len(selected) < 2:
        return tree

    parent = find_parent(tree, selected[0])
    if parent is None:
        return tree
    wanted = set(selected)
    positions = [
        index
        for index, child in enumerate(parent.children)
        if child.id in wanted and child.kind is NodeKind.CONDITION
    ]
    if len(positions) != len(wanted):
        logger.debug("group_conditions: %s are not sibling conditions", selected)
        return tree

    limits = _limits(limits)
    if group_depth(tree, parent.id) + 1 > limits.max_depth:
        _reject(
            tree,
            Violation(
                kind=ViolationKind.MAX_DEPTH_EXCEEDED,
                message=f"Maximum nesting depth ({limits.max_depth}) reached",
                node_id=parent.id,
            ),
        )
        return tree

    new_group = replace(
        create_empty_group(connector, ids=ids),
        children=tuple(parent.children[index] for index in positions),
    )
    children = []
    for index, child in enumerate(parent.children):
        if index == positions[0]:
            children.append(new_group)
        if index not in positions:
            children.append(child)

    root = update_node(tree.root, parent.id, lambda group: replace(group, children=tuple(children)))
    return with_root(tree, root)


def ungroup_group(tree: Tree, group_id: str) -> Tree:
    """Splice a non-root group's children into its parent at the group's position."""
    if group_id == tree.root.id:
        return tree
    if find_group(tree, group_id) is None:
        return tree
    return with_root(tree, splice_node(tree.root, group_id, lambda group: group.children))


# ============================================================================
# Whole-tree helpers
# ============================================================================


def replace_root(tree: Tree, root: Group) -> Tree:
    """Swap in a new root group, keeping the labels."""
    if not root.is_root:
        root = replace(root, is_root=True)
    return with_root(tree, root)


def set_labels(tree: Tree, labels: Mapping[str, str]) -> Tree:
    return replace(tree, labels=labels)


def clear(*, ids: IdGenerator | None = None) -> Tree:
    """A fresh empty tree; nothing from any previous tree is kept."""
    return create_empty_tree(ids=ids)
