"""
Filter expression data model.

A tree is a root ``Group`` plus a ``labels`` map. Nodes form a recursive sum
type (``Condition | Group``) discriminated by the ``kind`` tag. All nodes are
frozen; the node model in ``segment_filters.tree`` builds new values and
shares unaffected subtrees by reference.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from segment_filters.domain.enums import Connector, NodeKind, Operator

DEFAULT_MAX_NESTING_DEPTH = 3
DEFAULT_MAX_CONDITIONS = 20

Scalar: TypeAlias = str | int | float | bool


def _plain(value: Any) -> Any:
    # str-enums compare equal to their value but must not leak onto the wire
    return value.value if isinstance(value, Operator | Connector) else value


def normalize_value(value: Any) -> tuple[Scalar, ...]:
    """Coerce a condition value into the internal tuple form."""
    if value is None:
        return ()
    if isinstance(value, str | int | float | bool):
        return (value,)
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        return tuple(v for v in value if v is not None)
    raise TypeError(f"Condition value must be a scalar or a list of scalars, got {value!r}")


@dataclass(frozen=True, slots=True)
class Condition:
    """Leaf node: ``attribute <operator> value``."""

    id: str
    attribute: str = ""
    operator: str = Operator.IS.value
    value: tuple[Scalar, ...] = ()
    modifier: Mapping[str, Any] | None = None
    negated: bool = False
    kind: NodeKind = field(default=NodeKind.CONDITION, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "operator", _plain(self.operator) or "")
        object.__setattr__(self, "value", normalize_value(self.value))
        if self.modifier is not None:
            object.__setattr__(self, "modifier", dict(self.modifier))

    @property
    def effective_operator(self) -> str:
        """Operator name with the ``negated`` flag folded in."""
        if not self.negated:
            return self.operator
        operator = Operator.parse(self.operator)
        if operator is None:
            return self.operator
        return operator.negated.value


@dataclass(frozen=True, slots=True)
class Group:
    """Internal node combining its children with one connector."""

    id: str
    connector: Connector | str = Connector.AND
    children: tuple["Node", ...] = ()
    is_root: bool = False
    kind: NodeKind = field(default=NodeKind.GROUP, init=False)

    def __post_init__(self) -> None:
        # Unrecognized connectors are kept as-is so the validator can report them
        object.__setattr__(self, "connector", Connector.parse(self.connector) or self.connector)
        object.__setattr__(self, "children", tuple(self.children))


Node: TypeAlias = Condition | Group


@dataclass(frozen=True, slots=True)
class Tree:
    """Root group plus display labels (labels carry no evaluation semantics)."""

    root: Group
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", dict(self.labels))


@dataclass(frozen=True, slots=True)
class TreeLimits:
    """Configured maxima for nesting depth and total condition count."""

    max_depth: int = DEFAULT_MAX_NESTING_DEPTH
    max_conditions: int = DEFAULT_MAX_CONDITIONS

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.max_conditions < 1:
            raise ValueError(f"max_conditions must be at least 1, got {self.max_conditions}")
