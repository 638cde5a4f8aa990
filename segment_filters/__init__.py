"""
Filter expression core for analytics segments.

Build nested AND/OR filter trees over visitor attributes, convert them to and
from the compact wire format, validate them and evaluate them locally.

Example:
    >>> from segment_filters import add_condition, create_empty_tree, serialize
    >>> tree = create_empty_tree()
    >>> tree = add_condition(tree).tree
"""

from segment_filters.compiler import (
    deserialize,
    deserialize_segment_data,
    dumps,
    ensure_valid,
    loads,
    serialize,
    serialize_segment_data,
    validate,
)
from segment_filters.core.errors import (
    CapacityExceededError,
    CatalogError,
    SegmentFilterError,
    SerializationError,
    TreeValidationError,
)
from segment_filters.core.ids import CounterIdGenerator, UuidIdGenerator
from segment_filters.domain.catalog import DEFAULT_CATALOG, AttributeCatalog, AttributeDefinition
from segment_filters.domain.enums import AttributeType, Connector, Operator, ViolationKind
from segment_filters.domain.nodes import Condition, Group, Tree, TreeLimits
from segment_filters.domain.results import MutationResult, ValidationResult, Violation
from segment_filters.services.evaluation import evaluate, filter_records, simulate_segment
from segment_filters.tree import (
    add_condition,
    add_group,
    count_conditions,
    create_empty_condition,
    create_empty_group,
    create_empty_tree,
    describe,
    group_conditions,
    max_depth,
    remove_condition,
    remove_group,
    set_connector,
    toggle_connector,
    ungroup_group,
    update_condition,
)

__version__ = "0.1.0"

__all__ = [
    # Types
    "AttributeCatalog",
    "AttributeDefinition",
    "AttributeType",
    "Condition",
    "Connector",
    "CounterIdGenerator",
    "DEFAULT_CATALOG",
    "Group",
    "MutationResult",
    "Operator",
    "Tree",
    "TreeLimits",
    "UuidIdGenerator",
    "ValidationResult",
    "Violation",
    "ViolationKind",
    # Errors
    "CapacityExceededError",
    "CatalogError",
    "SegmentFilterError",
    "SerializationError",
    "TreeValidationError",
    # Node model
    "add_condition",
    "add_group",
    "count_conditions",
    "create_empty_condition",
    "create_empty_group",
    "create_empty_tree",
    "describe",
    "group_conditions",
    "max_depth",
    "remove_condition",
    "remove_group",
    "set_connector",
    "toggle_connector",
    "ungroup_group",
    "update_condition",
    # Wire format and validation
    "deserialize",
    "deserialize_segment_data",
    "dumps",
    "ensure_valid",
    "loads",
    "serialize",
    "serialize_segment_data",
    "validate",
    # Evaluation
    "evaluate",
    "filter_records",
    "simulate_segment",
]
