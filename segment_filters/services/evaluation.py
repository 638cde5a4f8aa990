"""
Local evaluation of filter trees against visitor records.

Used wherever a record has to be tested without a server round trip: unit
tests, dry-run previews and client-side filtering of already fetched rows.
A record maps attribute keys to a scalar; a missing key or ``None`` means
the attribute is absent.
"""

import functools
import logging
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from segment_filters.core.observability import record_metric
from segment_filters.domain.enums import Connector, NodeKind, Operator
from segment_filters.domain.nodes import Condition, Group, Node, Scalar, Tree

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]

# (record value, condition values, case sensitive) -> matched
OperatorFunc = Callable[[Any, Sequence[Scalar], bool], bool]


# =============================================================================
# Operator Definitions
# =============================================================================


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


_BOOLEAN_WORDS = {"true": True, "false": False}


def _equals(actual: Any, expected: Any) -> bool:
    if actual == expected:
        return True
    # Boolean attributes are written as "true"/"false" on the wire
    if isinstance(actual, bool) or isinstance(expected, bool):
        flag, other = (actual, expected) if isinstance(actual, bool) else (expected, actual)
        return isinstance(other, str) and _BOOLEAN_WORDS.get(other.strip().lower()) is flag
    # Values typed into the builder arrive as strings; compare numbers numerically
    if isinstance(actual, str) != isinstance(expected, str):
        a, b = _to_number(actual), _to_number(expected)
        return a is not None and a == b
    return False


def _is(actual: Any, values: Sequence[Scalar], _case_sensitive: bool) -> bool:
    """True when the record value equals any of the listed values."""
    return any(_equals(actual, value) for value in values)


def _contains(actual: Any, values: Sequence[Scalar], case_sensitive: bool) -> bool:
    """Substring test; case-insensitive unless the modifier says otherwise."""
    text = str(actual) if case_sensitive else str(actual).lower()
    for value in values:
        needle = str(value) if case_sensitive else str(value).lower()
        if needle in text:
            return True
    return False


@functools.lru_cache(maxsize=256)
def _compile_pattern(pattern: str, case_sensitive: bool) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
    except re.error as e:
        logger.debug("Invalid regular expression %r: %s", pattern, e)
        return None


def _matches(actual: Any, values: Sequence[Scalar], case_sensitive: bool) -> bool:
    """Regular expression search against the record value."""
    text = str(actual)
    for value in values:
        pattern = _compile_pattern(str(value), case_sensitive)
        if pattern is not None and pattern.search(text):
            return True
    return False


def wildcard_to_regex(pattern: str) -> str:
    """Translate a ``*`` glob into an anchored-by-fullmatch regular expression."""
    return ".*".join(re.escape(part) for part in pattern.split("*"))


def _matches_wildcard(actual: Any, values: Sequence[Scalar], case_sensitive: bool) -> bool:
    """Glob match where ``*`` stands for any run of characters."""
    text = str(actual)
    for value in values:
        pattern = _compile_pattern(wildcard_to_regex(str(value)), case_sensitive)
        if pattern is not None and pattern.fullmatch(text):
            return True
    return False


def _numeric(compare: Callable[[float, float], bool]) -> OperatorFunc:
    def op(actual: Any, values: Sequence[Scalar], _case_sensitive: bool) -> bool:
        if not values:
            return False
        a, b = _to_number(actual), _to_number(values[0])
        if a is None or b is None:
            return False
        return compare(a, b)

    return op


def _negate(func: OperatorFunc) -> OperatorFunc:
    def op(actual: Any, values: Sequence[Scalar], case_sensitive: bool) -> bool:
        return not func(actual, values, case_sensitive)

    return op


def _is_set(_actual: Any, _values: Sequence[Scalar], _case_sensitive: bool) -> bool:
    # Only reached for present values
    return True


# Operator registry; absence is resolved before dispatch
OPERATORS: dict[Operator, OperatorFunc] = {
    Operator.IS: _is,
    Operator.IS_NOT: _negate(_is),
    Operator.CONTAINS: _contains,
    Operator.CONTAINS_NOT: _negate(_contains),
    Operator.MATCHES: _matches,
    Operator.MATCHES_NOT: _negate(_matches),
    Operator.MATCHES_WILDCARD: _matches_wildcard,
    Operator.MATCHES_WILDCARD_NOT: _negate(_matches_wildcard),
    Operator.GREATER_THAN: _numeric(lambda a, b: a > b),
    Operator.LESS_THAN: _numeric(lambda a, b: a < b),
    Operator.GREATER_OR_EQUAL: _numeric(lambda a, b: a >= b),
    Operator.LESS_OR_EQUAL: _numeric(lambda a, b: a <= b),
    Operator.IS_SET: _is_set,
    Operator.IS_NOT_SET: _negate(_is_set),
}


# =============================================================================
# Tree Evaluation
# =============================================================================


def evaluate(target: Tree | Node, record: Record) -> bool:
    """
    Check whether a record satisfies a tree, group or condition.

    Args:
        target: What to evaluate
        record: Attribute key -> value; missing or None means absent

    Returns:
        True if the record matches

    Example:
        >>> evaluate(tree, {"country": "US", "browser": "Chrome"})
        True
    """
    node = target.root if isinstance(target, Tree) else target
    result = _evaluate_node(node, record)
    record_metric("evaluations_total")
    return result


def evaluate_condition(condition: Condition, record: Record) -> bool:
    operator = Operator.parse(condition.effective_operator)
    if operator is None:
        logger.debug("Unknown operator %r evaluates to false", condition.operator)
        return False

    actual = record.get(condition.attribute)
    if actual is None:
        return operator.satisfied_by_absence

    modifier = condition.modifier or {}
    return OPERATORS[operator](actual, condition.value, bool(modifier.get("case_sensitive")))


def evaluate_group(group: Group, record: Record) -> bool:
    """AND/OR over the children; an empty group imposes no constraint."""
    if not group.children:
        return True
    results = (_evaluate_node(child, record) for child in group.children)
    if group.connector is Connector.OR:
        return any(results)
    return all(results)


def _evaluate_node(node: Node, record: Record) -> bool:
    if node.kind is NodeKind.CONDITION:
        return evaluate_condition(node, record)
    return evaluate_group(node, record)


def filter_records(records: Iterable[Record], tree: Tree | Node) -> list[Record]:
    """Records matching the tree, in input order."""
    return [record for record in records if evaluate(tree, record)]


def simulate_segment(
    tree: Tree | Node, records: Iterable[Record], *, sample_size: int = 10
) -> dict[str, Any]:
    """
    Dry-run a segment against sample records.

    Args:
        tree: Segment filter tree
        records: Visitor records to test
        sample_size: Maximum number of matching records to return

    Returns:
        Dictionary with match_count, total_count, sample_records and match_ratio
    """
    records = list(records)
    matched = filter_records(records, tree)
    total = len(records)
    logger.debug("Simulated segment: %d of %d records matched", len(matched), total)
    return {
        "match_count": len(matched),
        "total_count": total,
        "sample_records": matched[:sample_size],
        "match_ratio": len(matched) / total if total else 0.0,
    }
