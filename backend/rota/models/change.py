# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from rota.models.base import UUIDBase, local_now


class ChangeLedgerEntry(UUIDBase, table=True):
    """Effective-dated record of one staff attribute edit.

    Old and new values are stored as text so one table serves every attribute.
    Only ``author`` and ``reason`` may be edited after insert.
    """

    __tablename__ = "change_ledger_entry"
    __table_args__ = (sa.Index("ix_change_staff_category_effective", "staff_id", "category", "effective_from"),)

    staff_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("staff_member.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    category: str = Field(max_length=50)
    old_value: str | None = None
    new_value: str | None = None
    effective_from: datetime = Field(index=True, sa_type=sa.DateTime())  # ty: ignore[invalid-argument-type]
    recorded_at: datetime = Field(
        default_factory=local_now,
        sa_type=sa.DateTime(),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    author: str = Field(default="system", max_length=255)
    reason: str | None = None
