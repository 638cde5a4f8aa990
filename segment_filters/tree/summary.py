"""Human-readable rendering of filter trees (segment name placeholders, logs)."""

from collections.abc import Mapping

from segment_filters.domain.catalog import AttributeCatalog, load_catalog
from segment_filters.domain.enums import Connector, NodeKind, Operator
from segment_filters.domain.nodes import Condition, Group, Node, Tree

OPERATOR_LABELS = {
    Operator.IS: "is",
    Operator.IS_NOT: "is not",
    Operator.CONTAINS: "contains",
    Operator.CONTAINS_NOT: "does not contain",
    Operator.MATCHES: "matches",
    Operator.MATCHES_NOT: "does not match",
    Operator.MATCHES_WILDCARD: "matches",
    Operator.MATCHES_WILDCARD_NOT: "does not match",
    Operator.GREATER_THAN: "is greater than",
    Operator.LESS_THAN: "is less than",
    Operator.GREATER_OR_EQUAL: "is at least",
    Operator.LESS_OR_EQUAL: "is at most",
    Operator.IS_SET: "is set",
    Operator.IS_NOT_SET: "is not set",
}


def operator_label(name: str) -> str:
    operator = Operator.parse(name)
    return OPERATOR_LABELS[operator] if operator is not None else name


def describe(
    target: Tree | Node,
    *,
    catalog: AttributeCatalog | None = None,
    labels: Mapping[str, str] | None = None,
) -> str:
    """
    Render a tree as text, e.g. ``Country is US and (Device is Mobile or Device is Tablet)``.

    Args:
        target: Tree, group or condition to render
        catalog: Source of attribute labels; defaults to the configured catalog
        labels: Display strings for values; defaults to the tree's labels

    Returns:
        The rendered text; an empty group renders as an empty string
    """
    catalog = catalog or load_catalog()
    if isinstance(target, Tree):
        labels = target.labels if labels is None else labels
        target = target.root
    return _describe_node(target, catalog, labels or {})


def _describe_node(node: Node, catalog: AttributeCatalog, labels: Mapping[str, str]) -> str:
    if node.kind is NodeKind.CONDITION:
        return _describe_condition(node, catalog, labels)
    return _describe_group(node, catalog, labels)


def _describe_group(group: Group, catalog: AttributeCatalog, labels: Mapping[str, str]) -> str:
    separator = " or " if group.connector is Connector.OR else " and "
    parts = []
    for child in group.children:
        text = _describe_node(child, catalog, labels)
        if not text:
            continue
        if child.kind is NodeKind.GROUP and len(child.children) > 1:
            text = f"({text})"
        parts.append(text)
    return separator.join(parts)


def _describe_condition(
    condition: Condition, catalog: AttributeCatalog, labels: Mapping[str, str]
) -> str:
    attribute = catalog.label_for(condition.attribute) if condition.attribute else "(no attribute)"
    operator_name = condition.effective_operator
    text = f"{attribute} {operator_label(operator_name)}"

    operator = Operator.parse(operator_name)
    if operator is not None and operator.is_presence:
        return text
    if not condition.value:
        return text
    values = " or ".join(labels.get(str(v), str(v)) for v in condition.value)
    return f"{text} {values}"
