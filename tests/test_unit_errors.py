"""
Tests for domain exceptions.

These tests verify:
- Message and details are kept on every error
- Recoverability classification
"""

import pytest

from segment_filters.core.errors import (
    CapacityExceededError,
    CatalogError,
    SegmentFilterError,
    SerializationError,
    TreeValidationError,
    is_recoverable,
)


class TestSegmentFilterError:
    """Test the base exception."""

    @pytest.mark.anyio
    async def test_message_and_details(self):
        error = TreeValidationError("bad tree", details={"errors": []})
        assert str(error) == "bad tree"
        assert error.message == "bad tree"
        assert error.details == {"errors": []}

    @pytest.mark.anyio
    async def test_details_default_to_empty_dict(self):
        assert CatalogError("bad").details == {}

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "error_class",
        [CatalogError, TreeValidationError, CapacityExceededError, SerializationError],
    )
    async def test_hierarchy(self, error_class):
        assert issubclass(error_class, SegmentFilterError)


class TestRecoverability:
    """Test is_recoverable."""

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (TreeValidationError("x"), True),
            (CapacityExceededError("x"), True),
            (SerializationError("x"), False),
            (CatalogError("x"), False),
            (ValueError("x"), False),
        ],
    )
    async def test_is_recoverable(self, error, expected):
        assert is_recoverable(error) is expected
