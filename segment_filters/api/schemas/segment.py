"""
Pydantic schemas for the saved segment resource.

A segment stores a filter tree in wire form (``segment_data.filters``) plus
the display labels of previously chosen values.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from segment_filters.core.validators import validate_wire_filters
from segment_filters.domain.enums import SegmentType

# ============================================================================
# Segment Data
# ============================================================================


class SegmentData(BaseModel):
    """Wire filters plus value labels."""

    filters: list[Any] = Field(
        default_factory=list,
        description="Filter tree in wire format",
        examples=[["and", [["is", "country", ["US"]], ["is", "device", ["Mobile"]]]]],
    )
    labels: dict[str, str] = Field(
        default_factory=dict,
        description="Display labels for chosen values",
        examples=[{"US": "United States"}],
    )

    @field_validator("filters", mode="before")
    @classmethod
    def validate_filters(cls, v: Any) -> list[Any]:
        """Validate filters shape and size."""
        return validate_wire_filters(v)


# ============================================================================
# Segment Schemas
# ============================================================================


class SegmentBase(BaseModel):
    """Base schema with fields common to all segment operations."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Human-readable segment name",
        examples=["US mobile visitors"],
    )
    type: SegmentType = Field(
        default=SegmentType.PERSONAL,
        description="personal (owner only) or site (shared with the site)",
        examples=[SegmentType.PERSONAL],
    )

    @field_validator("name")
    @classmethod
    def validate_name_not_blank(cls, v: str) -> str:
        """Strip the name and reject whitespace-only names."""
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v


class SegmentCreate(SegmentBase):
    """Schema for creating a segment."""

    segment_data: SegmentData = Field(..., description="Filters and labels")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "US mobile visitors",
                    "type": "personal",
                    "segment_data": {
                        "filters": [
                            "and",
                            [["is", "country", ["US"]], ["is", "device", ["Mobile"]]],
                        ],
                        "labels": {"US": "United States"},
                    },
                }
            ]
        }
    }


class SegmentUpdate(BaseModel):
    """Schema for updating a segment (all fields optional)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    type: SegmentType | None = None
    segment_data: SegmentData | None = None

    @model_validator(mode="after")
    def validate_not_empty(self) -> SegmentUpdate:
        if self.name is None and self.type is None and self.segment_data is None:
            raise ValueError("At least one of name, type or segment_data must be provided")
        return self


class SegmentResponse(SegmentBase):
    """Segment as returned by the segments endpoint."""

    id: int
    segment_data: SegmentData
    owner_id: int | None = None
    owner_name: str | None = None
    inserted_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
