# ruff: noqa: TC003
from __future__ import annotations

from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from rota.models.base import TimestampMixin, UUIDBase
from rota.models.enums import StaffRole


class StaffMember(UUIDBase, TimestampMixin, table=True):
    """A person who can be rostered. Attribute edits are recorded in the change ledger."""

    __tablename__ = "staff_member"
    __table_args__ = (
        sa.UniqueConstraint("name", name="uq_staff_member_name"),
        sa.CheckConstraint("contracted_hours >= 0", name="ck_staff_member_contracted_hours"),
        sa.Index("ix_staff_member_role_active", "role", "is_active"),
    )

    name: str = Field(max_length=255)
    role: str = Field(default=StaffRole.MEMBER, max_length=50, sa_column_kwargs={"server_default": "MEMBER"})
    is_active: bool = Field(default=True, index=True)
    contracted_hours: float = Field(default=36.0)
    pay_rate: float = Field(default=0.0)
    employment_start: date | None = None
    employment_end: date | None = None
    color: str = Field(default="#3b82f6", max_length=7)
