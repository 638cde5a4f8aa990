"""
Structural validation of filter trees.

Validation is the gate between editing and saving/applying a tree. Every
check runs independently and every violation is collected (never
fail-fast), each located by a JSONPath-like path such as
``$.children[1].operator``:

- total condition count and nesting depth within the configured limits
- every condition has an attribute and an operator
- value-requiring operators have a non-empty value (presence operators exempt)
- every group has a recognized connector and at least one child
- node ids are unique
- with a catalog: attributes are known and operators legal for their type
"""

import logging
from typing import Any

from segment_filters.core.errors import TreeValidationError
from segment_filters.core.observability import record_metric
from segment_filters.domain.catalog import AttributeCatalog
from segment_filters.domain.enums import Connector, NodeKind, Operator, ViolationKind
from segment_filters.domain.nodes import Condition, Group, Tree, TreeLimits
from segment_filters.domain.results import ValidationResult, Violation
from segment_filters.tree.traversal import count_conditions, max_depth

logger = logging.getLogger(__name__)


def validate(
    tree: Tree, *, limits: TreeLimits | None = None, catalog: AttributeCatalog | None = None
) -> ValidationResult:
    """
    Validate a tree and report every violation.

    Args:
        tree: Tree to check
        limits: Maximum depth / condition count; defaults to the configured limits
        catalog: When given, attributes and operators are checked against it

    Returns:
        ValidationResult (``is_valid`` is true when no violation was found)

    Example:
        >>> result = validate(tree)
        >>> if not result:
        ...     print([e.kind for e in result.errors])
    """
    if limits is None:
        from segment_filters.core.config import settings

        limits = settings.limits

    errors: list[Violation] = []

    condition_count = count_conditions(tree)
    if condition_count > limits.max_conditions:
        errors.append(
            Violation(
                kind=ViolationKind.MAX_CONDITIONS_EXCEEDED,
                message=(
                    f"Too many conditions: {condition_count} "
                    f"(maximum {limits.max_conditions})"
                ),
            )
        )

    depth = max_depth(tree)
    if depth > limits.max_depth:
        errors.append(
            Violation(
                kind=ViolationKind.MAX_DEPTH_EXCEEDED,
                message=f"Groups nested {depth} deep (maximum {limits.max_depth})",
            )
        )

    _TreeChecker(errors, catalog).check_group(tree.root, "$")

    result = ValidationResult(errors=tuple(errors))
    logger.debug(
        "Validated filter tree: %d conditions, depth %d, %d violations",
        condition_count,
        depth,
        len(errors),
    )
    record_metric("validations_total", result="valid" if result.is_valid else "invalid")
    return result


def ensure_valid(
    tree: Tree, *, limits: TreeLimits | None = None, catalog: AttributeCatalog | None = None
) -> ValidationResult:
    """
    Validate a tree and raise if it may not be saved or applied.

    Raises:
        TreeValidationError: With every violation in ``details["errors"]``
    """
    result = validate(tree, limits=limits, catalog=catalog)
    if not result.is_valid:
        raise TreeValidationError(
            f"Filter tree has {len(result.errors)} validation error(s)",
            details={"errors": [error.as_dict() for error in result.errors]},
        )
    return result


def is_empty_value(value: tuple[Any, ...]) -> bool:
    return all(v is None or v == "" for v in value)


class _TreeChecker:
    def __init__(self, errors: list[Violation], catalog: AttributeCatalog | None) -> None:
        self.errors = errors
        self.catalog = catalog
        self.seen_ids: set[str] = set()

    def report(self, kind: ViolationKind, message: str, path: str, node_id: str) -> None:
        self.errors.append(Violation(kind=kind, message=message, path=path, node_id=node_id))

    def check_id(self, node_id: str, path: str) -> None:
        if node_id in self.seen_ids:
            self.report(ViolationKind.DUPLICATE_ID, f"Duplicate node id '{node_id}'", path, node_id)
        self.seen_ids.add(node_id)

    def check_group(self, group: Group, path: str) -> None:
        self.check_id(group.id, path)

        if not isinstance(group.connector, Connector):
            self.report(
                ViolationKind.OPERATOR_REQUIRED,
                f"Group connector must be AND or OR, got '{group.connector}'",
                f"{path}.connector",
                group.id,
            )
        if not group.children:
            self.report(
                ViolationKind.FIELD_REQUIRED,
                "Group must contain at least one condition or group",
                f"{path}.children",
                group.id,
            )

        for index, child in enumerate(group.children):
            child_path = f"{path}.children[{index}]"
            if child.kind is NodeKind.GROUP:
                self.check_group(child, child_path)
            else:
                self.check_condition(child, child_path)

    def check_condition(self, condition: Condition, path: str) -> None:
        self.check_id(condition.id, path)

        attribute = condition.attribute.strip()
        if not attribute:
            self.report(
                ViolationKind.FIELD_REQUIRED,
                "Condition attribute is required",
                f"{path}.attribute",
                condition.id,
            )

        if not condition.operator.strip():
            self.report(
                ViolationKind.OPERATOR_REQUIRED,
                "Condition operator is required",
                f"{path}.operator",
                condition.id,
            )
            return

        operator = Operator.parse(condition.effective_operator)
        if operator is None:
            self.report(
                ViolationKind.OPERATOR_NOT_ALLOWED,
                f"Unknown operator '{condition.operator}'",
                f"{path}.operator",
                condition.id,
            )
            return

        if operator.requires_value and is_empty_value(condition.value):
            self.report(
                ViolationKind.VALUE_REQUIRED,
                f"Operator '{operator.value}' requires a value",
                f"{path}.value",
                condition.id,
            )

        if self.catalog is None or not attribute:
            return
        if attribute not in self.catalog:
            self.report(
                ViolationKind.UNKNOWN_ATTRIBUTE,
                f"Unknown attribute '{attribute}'",
                f"{path}.attribute",
                condition.id,
            )
        elif operator not in self.catalog.operators_for(attribute):
            self.report(
                ViolationKind.OPERATOR_NOT_ALLOWED,
                f"Operator '{operator.value}' is not allowed for attribute '{attribute}'",
                f"{path}.operator",
                condition.id,
            )
