# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from rota.models.enums import ShiftType

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class ShiftCreate(BaseModel):
    """Request body for putting a shift on the rota."""

    staff_id: uuid.UUID
    start_at: datetime
    end_at: datetime
    shift_type: ShiftType
    period_label: str | None = Field(default=None, max_length=50)
    week_number: int | None = Field(default=None, ge=1, le=53)
    overtime: bool = False
    call_out: bool = False
    solo: bool = False
    training: bool = False
    short_notice: bool = False
    payment_period_end: bool = False
    year_end: bool = False
    notes: str | None = None

    @model_validator(mode="after")
    def _validate_times(self) -> Self:
        if self.end_at <= self.start_at:
            msg = "end_at must be after start_at"
            raise ValueError(msg)
        return self


class ShiftUpdate(BaseModel):
    """Partial update of a shift. Omitted fields keep their value."""

    staff_id: uuid.UUID | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None
    shift_type: ShiftType | None = None
    period_label: str | None = Field(default=None, max_length=50)
    week_number: int | None = Field(default=None, ge=1, le=53)
    overtime: bool | None = None
    call_out: bool | None = None
    solo: bool | None = None
    training: bool | None = None
    short_notice: bool | None = None
    payment_period_end: bool | None = None
    year_end: bool | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ShiftResponse(BaseModel):
    """A shift record."""

    id: uuid.UUID
    staff_id: uuid.UUID
    start_at: datetime
    end_at: datetime
    shift_type: ShiftType
    period_label: str | None
    week_number: int | None
    overtime: bool
    call_out: bool
    solo: bool
    training: bool
    short_notice: bool
    payment_period_end: bool
    year_end: bool
    notes: str | None
    duration_hours: float
