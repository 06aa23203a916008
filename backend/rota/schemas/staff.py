# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from rota.models.enums import StaffRole


class StaffCreate(BaseModel):
    """Request body for adding a staff member."""

    name: str = Field(min_length=1, max_length=255)
    role: StaffRole = StaffRole.MEMBER
    is_active: bool = True
    contracted_hours: float = Field(default=36.0, ge=0)
    pay_rate: float = Field(default=0.0, ge=0)
    employment_start: date | None = None
    employment_end: date | None = None
    color: str = Field(default="#3b82f6", pattern=r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if (
            self.employment_start is not None
            and self.employment_end is not None
            and self.employment_end < self.employment_start
        ):
            msg = "employment_end must not be before employment_start"
            raise ValueError(msg)
        return self


class StaffResponse(BaseModel):
    """A staff member."""

    id: uuid.UUID
    name: str
    role: StaffRole
    is_active: bool
    contracted_hours: float
    pay_rate: float
    employment_start: date | None
    employment_end: date | None
    color: str
    created_at: datetime
    updated_at: datetime
