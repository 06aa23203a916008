from __future__ import annotations

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from rota.config import get_settings


def local_now() -> datetime:
    """Return the current wall-clock time in the rota's timezone, without tzinfo."""
    return datetime.now(ZoneInfo(get_settings().timezone)).replace(tzinfo=None)


class UUIDBase(SQLModel):
    """Base model with UUID primary key."""

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        sa_type=sa.Uuid,
    )


class TimestampMixin(SQLModel):
    """Mixin that adds created_at / updated_at timestamps."""

    created_at: datetime = Field(
        default_factory=local_now,
        sa_type=sa.DateTime(),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime = Field(
        default_factory=local_now,
        sa_type=sa.DateTime(),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now(), "onupdate": local_now},
    )
