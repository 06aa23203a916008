# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from rota.models.base import TimestampMixin, UUIDBase


class ShiftRecord(UUIDBase, TimestampMixin, table=True):
    """One staff member's assignment on the rota."""

    __tablename__ = "shift_record"
    __table_args__ = (
        sa.Index("ix_shift_staff_start", "staff_id", "start_at"),
        sa.CheckConstraint("end_at > start_at", name="ck_shift_record_times"),
    )

    staff_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("staff_member.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    period_label: str | None = Field(default=None, max_length=50)
    week_number: int | None = None
    start_at: datetime = Field(sa_type=sa.DateTime())  # ty: ignore[invalid-argument-type]
    end_at: datetime = Field(sa_type=sa.DateTime())  # ty: ignore[invalid-argument-type]
    shift_type: str = Field(max_length=50, index=True)
    overtime: bool = False
    call_out: bool = False
    solo: bool = False
    training: bool = False
    short_notice: bool = False
    payment_period_end: bool = False
    year_end: bool = Field(default=False, index=True)
    notes: str | None = None

    @property
    def duration_hours(self) -> float:
        return (self.end_at - self.start_at).total_seconds() / 3600
