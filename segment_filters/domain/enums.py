"""
Domain enums for filter expressions.

Operator names are the wire names used by the query endpoint. The vocabulary
is closed: connectors and operators never share a name, which is what lets
the deserializer tell a condition array from a connector group.
"""

from enum import Enum


class NodeKind(str, Enum):
    """Discriminator tag of the node sum type."""

    CONDITION = "condition"
    GROUP = "group"


class Connector(str, Enum):
    """Boolean combinator of a group."""

    AND = "AND"
    OR = "OR"

    @property
    def wire(self) -> str:
        """Lower-case keyword used in the wire format."""
        return self.value.lower()

    @classmethod
    def parse(cls, value: object) -> "Connector | None":
        """Resolve ``AND``/``and``/``Connector.AND``; None when unrecognized."""
        if isinstance(value, Connector):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                return None
        return None

    def toggled(self) -> "Connector":
        return Connector.OR if self is Connector.AND else Connector.AND


WIRE_CONNECTORS = frozenset(c.wire for c in Connector)


class AttributeType(str, Enum):
    """Declared type of a catalog attribute; decides which operators are legal."""

    STRING = "string"
    ENUM = "enum"
    NUMBER = "number"
    BOOLEAN = "boolean"


class Operator(str, Enum):
    """Supported condition operators (wire names)."""

    IS = "is"
    IS_NOT = "is_not"
    CONTAINS = "contains"
    CONTAINS_NOT = "contains_not"
    MATCHES = "matches"  # Regular expression search
    MATCHES_NOT = "matches_not"
    MATCHES_WILDCARD = "matches_wildcard"  # Glob with *
    MATCHES_WILDCARD_NOT = "matches_wildcard_not"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_OR_EQUAL = "greater_or_equal"
    LESS_OR_EQUAL = "less_or_equal"
    IS_SET = "is_set"
    IS_NOT_SET = "is_not_set"

    @classmethod
    def parse(cls, value: object) -> "Operator | None":
        """
        Resolve an operator name, accepting the legacy aliases.

        Returns:
            The canonical operator, or None for unknown names
        """
        if isinstance(value, Operator):
            return value
        if not isinstance(value, str):
            return None
        name = value.strip().lower()
        name = OPERATOR_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            return None

    @property
    def is_presence(self) -> bool:
        return self in PRESENCE_OPERATORS

    @property
    def requires_value(self) -> bool:
        return self not in PRESENCE_OPERATORS

    @property
    def satisfied_by_absence(self) -> bool:
        return self in ABSENCE_SATISFYING_OPERATORS

    @property
    def negated(self) -> "Operator":
        """The operator selecting exactly the opposite records when the field is set."""
        return NEGATED_OPERATORS[self]


# Names used by older builder variants
OPERATOR_ALIASES = {
    "equals": "is",
    "not_equals": "is_not",
    "does_not_equal": "is_not",
    "not_contains": "contains_not",
    "does_not_contain": "contains_not",
    "matches_regex": "matches",
}

PRESENCE_OPERATORS = frozenset({Operator.IS_SET, Operator.IS_NOT_SET})

ABSENCE_SATISFYING_OPERATORS = frozenset({Operator.IS_NOT, Operator.IS_NOT_SET})

NUMERIC_OPERATORS = frozenset(
    {
        Operator.GREATER_THAN,
        Operator.LESS_THAN,
        Operator.GREATER_OR_EQUAL,
        Operator.LESS_OR_EQUAL,
    }
)

_NEGATION_PAIRS = (
    (Operator.IS, Operator.IS_NOT),
    (Operator.CONTAINS, Operator.CONTAINS_NOT),
    (Operator.MATCHES, Operator.MATCHES_NOT),
    (Operator.MATCHES_WILDCARD, Operator.MATCHES_WILDCARD_NOT),
    (Operator.GREATER_THAN, Operator.LESS_OR_EQUAL),
    (Operator.LESS_THAN, Operator.GREATER_OR_EQUAL),
    (Operator.IS_SET, Operator.IS_NOT_SET),
)

NEGATED_OPERATORS = {a: b for a, b in _NEGATION_PAIRS} | {b: a for a, b in _NEGATION_PAIRS}

OPERATORS_BY_TYPE: dict[AttributeType, tuple[Operator, ...]] = {
    AttributeType.STRING: (
        Operator.IS,
        Operator.IS_NOT,
        Operator.CONTAINS,
        Operator.CONTAINS_NOT,
        Operator.MATCHES,
        Operator.MATCHES_WILDCARD,
        Operator.IS_SET,
        Operator.IS_NOT_SET,
    ),
    AttributeType.ENUM: (
        Operator.IS,
        Operator.IS_NOT,
        Operator.IS_SET,
        Operator.IS_NOT_SET,
    ),
    AttributeType.NUMBER: (
        Operator.IS,
        Operator.IS_NOT,
        Operator.GREATER_THAN,
        Operator.LESS_THAN,
        Operator.GREATER_OR_EQUAL,
        Operator.LESS_OR_EQUAL,
        Operator.IS_SET,
        Operator.IS_NOT_SET,
    ),
    AttributeType.BOOLEAN: (
        Operator.IS,
        Operator.IS_NOT,
        Operator.IS_SET,
        Operator.IS_NOT_SET,
    ),
}


class ViolationKind(str, Enum):
    """Kinds of problems reported by the validator and by rejected mutations."""

    MAX_CONDITIONS_EXCEEDED = "max_conditions_exceeded"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"
    FIELD_REQUIRED = "field_required"
    OPERATOR_REQUIRED = "operator_required"
    VALUE_REQUIRED = "value_required"
    DUPLICATE_ID = "duplicate_id"
    UNKNOWN_ATTRIBUTE = "unknown_attribute"
    OPERATOR_NOT_ALLOWED = "operator_not_allowed"


class SegmentType(str, Enum):
    """Visibility of a saved segment."""

    PERSONAL = "personal"
    SITE = "site"
