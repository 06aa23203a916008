# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from rota.models.base import TimestampMixin, UUIDBase


class HolidayEntitlement(UUIDBase, TimestampMixin, table=True):
    """Derived holiday allowance and usage for one staff member in one holiday year.

    Remaining balances are properties so they can never drift from entitlement and taken.
    """

    __tablename__ = "holiday_entitlement"
    __table_args__ = (
        sa.UniqueConstraint("staff_id", "year_start", name="uq_entitlement_staff_year"),
        sa.CheckConstraint("year_end > year_start", name="ck_entitlement_year"),
        sa.CheckConstraint("entitlement_days >= 0 AND entitlement_hours >= 0", name="ck_entitlement_non_negative"),
        sa.Index("ix_entitlement_year", "year_start", "year_end"),
    )

    staff_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("staff_member.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    year_start: date
    year_end: date
    contracted_hours_per_week: float
    entitlement_days: float
    entitlement_hours: float
    days_taken: float = Field(default=0.0, sa_column_kwargs={"server_default": "0"})
    hours_taken: float = Field(default=0.0, sa_column_kwargs={"server_default": "0"})
    is_zero_hours: bool = False

    @property
    def days_remaining(self) -> float:
        return self.entitlement_days - self.days_taken

    @property
    def hours_remaining(self) -> float:
        return self.entitlement_hours - self.hours_taken
