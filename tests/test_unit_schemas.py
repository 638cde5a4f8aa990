"""
Tests for the segment and preview Pydantic schemas.

These tests verify:
- Name and type validation
- Wire size guards on filters
- Partial updates require at least one field
- Preview date range validation and sampling flag
"""

import datetime as dt

import pytest
from pydantic import ValidationError

from segment_filters.api.schemas import (
    PreviewRequest,
    PreviewResult,
    SegmentCreate,
    SegmentData,
    SegmentResponse,
    SegmentUpdate,
)
from segment_filters.domain.enums import SegmentType


class TestSegmentData:
    """Test SegmentData."""

    @pytest.mark.anyio
    async def test_defaults(self):
        data = SegmentData()
        assert data.filters == []
        assert data.labels == {}

    @pytest.mark.anyio
    async def test_filters_must_be_array(self):
        with pytest.raises(ValidationError, match="JSON array"):
            SegmentData(filters="is country US")

    @pytest.mark.anyio
    async def test_oversized_value_list(self):
        with pytest.raises(ValidationError, match="exceeds maximum size"):
            SegmentData(filters=["is", "page", [str(i) for i in range(101)]])


class TestSegmentCreate:
    """Test SegmentCreate."""

    @pytest.mark.anyio
    async def test_valid(self):
        segment = SegmentCreate(
            name="US visitors", segment_data={"filters": ["is", "country", ["US"]]}
        )
        assert segment.type is SegmentType.PERSONAL

    @pytest.mark.anyio
    @pytest.mark.parametrize("name", ["", "   ", "x" * 256])
    async def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            SegmentCreate(name=name, segment_data={"filters": []})

    @pytest.mark.anyio
    async def test_unknown_type(self):
        with pytest.raises(ValidationError):
            SegmentCreate(name="x", type="team", segment_data={"filters": []})


class TestSegmentUpdate:
    """Test SegmentUpdate."""

    @pytest.mark.anyio
    async def test_requires_a_field(self):
        with pytest.raises(ValidationError, match="At least one"):
            SegmentUpdate()

    @pytest.mark.anyio
    async def test_type_only(self):
        assert SegmentUpdate(type="site").type is SegmentType.SITE


class TestSegmentResponse:
    """Test SegmentResponse."""

    @pytest.mark.anyio
    async def test_parses_api_json(self):
        segment = SegmentResponse.model_validate(
            {
                "id": 1,
                "name": "Mobile",
                "type": "site",
                "segment_data": {"filters": ["is", "device", ["Mobile"]], "labels": {}},
                "owner_id": 3,
                "owner_name": "Jane",
                "inserted_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-02T00:00:00Z",
            }
        )
        assert segment.type is SegmentType.SITE
        assert segment.updated_at > segment.inserted_at


class TestPreviewSchemas:
    """Test preview request/result."""

    @pytest.mark.anyio
    async def test_date_range_must_be_ordered(self):
        with pytest.raises(ValidationError, match="date_to"):
            PreviewRequest(filters=[], date_from=dt.date(2024, 2, 1), date_to=dt.date(2024, 1, 1))

    @pytest.mark.anyio
    async def test_single_day_range(self):
        request = PreviewRequest(
            filters=["is", "country", ["US"]],
            date_from=dt.date(2024, 1, 1),
            date_to=dt.date(2024, 1, 1),
        )
        assert request.metrics == ["visitors", "pageviews"]

    @pytest.mark.anyio
    async def test_result_sampling(self):
        result = PreviewResult.model_validate(
            {
                "results": [{"date": "2024-01-01", "visitors": 10, "pageviews": 30}],
                "totals": {"visitors": 10, "pageviews": 30},
                "sample_percent": 25,
            }
        )
        assert result.is_sampled
        assert result.results[0].date == dt.date(2024, 1, 1)

    @pytest.mark.anyio
    async def test_result_unsampled_by_default(self):
        assert not PreviewResult(totals={"visitors": 0}).is_sampled

    @pytest.mark.anyio
    async def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            PreviewResult(totals={"visitors": -1})
