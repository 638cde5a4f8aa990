"""Result values shared by the validator and the node model."""

from dataclasses import dataclass
from typing import Any

from segment_filters.core.errors import CapacityExceededError
from segment_filters.domain.enums import ViolationKind
from segment_filters.domain.nodes import Tree


@dataclass(frozen=True, slots=True)
class Violation:
    """One structural problem, located by a JSONPath-like path."""

    kind: ViolationKind
    message: str
    path: str = "$"
    node_id: str | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "path": self.path,
            "node_id": self.node_id,
        }


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """All violations found in a tree (empty when valid)."""

    errors: tuple[Violation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.is_valid

    def kinds(self) -> set[ViolationKind]:
        return {error.kind for error in self.errors}


@dataclass(frozen=True, slots=True)
class MutationResult:
    """
    Outcome of a mutation that can hit a capacity limit.

    When ``violation`` is set the mutation was rejected and ``tree`` is the
    unchanged input tree.
    """

    tree: Tree
    violation: Violation | None = None

    @property
    def ok(self) -> bool:
        return self.violation is None

    def unwrap(self) -> Tree:
        """Return the new tree, raising ``CapacityExceededError`` if rejected."""
        if self.violation is not None:
            raise CapacityExceededError(self.violation.message, details=self.violation.as_dict())
        return self.tree
