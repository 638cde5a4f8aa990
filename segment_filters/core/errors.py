"""
Domain-specific exceptions for the segment filter core.

Validation problems are normally *reported* (see ``compiler.validator``) and
capacity problems are *signalled* through ``MutationResult``. These exceptions
exist for the explicit gates where a caller asks for raising behaviour, and for
configuration errors that must stop the process early.
"""

from typing import Any


class SegmentFilterError(Exception):
    """Base exception for all segment filter domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CatalogError(SegmentFilterError):
    """
    Raised when an attribute catalog definition is invalid.

    Examples:
    - Operator name collides with a connector keyword ("and"/"or")
    - Operator not part of the operator vocabulary
    - Duplicate attribute key
    """

    pass


class TreeValidationError(SegmentFilterError):
    """
    Raised by ``ensure_valid`` when a tree may not be saved or applied.

    ``details["errors"]`` holds every collected violation as a dict.
    """

    pass


class CapacityExceededError(SegmentFilterError):
    """
    Raised by ``MutationResult.unwrap`` when a mutation was rejected.

    Examples:
    - Adding a condition beyond the configured maximum
    - Adding or grouping beyond the configured nesting depth
    """

    pass


class SerializationError(SegmentFilterError):
    """
    Raised when wire text cannot be parsed and strict mode was requested.

    In the default (lenient) mode unparseable input produces an empty tree.
    """

    pass


# Whether a UI can let the user fix the problem and retry the same action
ERROR_RECOVERABLE_MAP = {
    TreeValidationError: True,
    CapacityExceededError: True,
    SerializationError: False,
    CatalogError: False,
}


def is_recoverable(error: Exception) -> bool:
    """
    Tell whether an error can be resolved by editing the tree.

    Args:
        error: The exception instance

    Returns:
        True for validation/capacity problems, False otherwise
    """
    return ERROR_RECOVERABLE_MAP.get(type(error), False)
