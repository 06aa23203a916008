# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class HolidayYearResponse(BaseModel):
    """The active holiday year window (both ends inclusive)."""

    start: date
    end: date
    total_days: int


class EntitlementResponse(BaseModel):
    """Entitlement and usage of one staff member for one holiday year.

    Remaining figures are entitlement minus taken and may be negative.
    """

    id: uuid.UUID
    staff_id: uuid.UUID
    staff_name: str | None = None
    year_start: date
    year_end: date
    contracted_hours_per_week: float
    is_zero_hours: bool
    entitlement_days: float
    entitlement_hours: float
    days_taken: float
    hours_taken: float
    days_remaining: float
    hours_remaining: float
    updated_at: datetime


class EntitlementListResponse(BaseModel):
    """Entitlements for the active holiday year."""

    year: HolidayYearResponse
    items: list[EntitlementResponse]
    total: int


class RecalculateRequest(BaseModel):
    """Optional overrides for a manual recalculation."""

    employment_end_override: date | None = Field(
        default=None,
        description="Pro-rate as if employment ended on this date, without changing the staff record",
    )
