"""Pydantic schemas for the segment preview/stats endpoint."""

from __future__ import annotations

import datetime as dt
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from segment_filters.core.validators import validate_wire_filters

DEFAULT_PREVIEW_METRICS = ("visitors", "pageviews")


class PreviewRequest(BaseModel):
    """Preview a filter tree over a date range."""

    filters: list[Any] = Field(..., description="Filter tree in wire format")
    date_from: dt.date = Field(..., description="First day of the range (inclusive)")
    date_to: dt.date = Field(..., description="Last day of the range (inclusive)")
    metrics: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PREVIEW_METRICS),
        min_length=1,
        description="Metrics to compute",
    )

    @field_validator("filters", mode="before")
    @classmethod
    def validate_filters(cls, v: Any) -> list[Any]:
        return validate_wire_filters(v)

    @model_validator(mode="after")
    def validate_date_range(self) -> PreviewRequest:
        if self.date_to < self.date_from:
            raise ValueError("date_to must not be before date_from")
        return self


class PreviewDay(BaseModel):
    date: dt.date
    visitors: int = Field(..., ge=0)
    pageviews: int | None = Field(default=None, ge=0)


class PreviewTotals(BaseModel):
    visitors: int = Field(..., ge=0)
    pageviews: int | None = Field(default=None, ge=0)


class PreviewResult(BaseModel):
    """Per-day counts, totals, sampling and warnings for a previewed segment."""

    results: list[PreviewDay] = Field(default_factory=list)
    totals: PreviewTotals
    sample_percent: float = Field(
        default=100.0,
        ge=0,
        le=100,
        description="Share of data the numbers are based on",
    )
    warnings: list[str] = Field(
        default_factory=list,
        examples=[["Results are based on a partial sample"]],
    )

    @property
    def is_sampled(self) -> bool:
        return self.sample_percent < 100
