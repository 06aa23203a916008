# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from rota.models.enums import ChangeCategory

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class RecordChangePayload(BaseModel):
    """Request body for recording a staff attribute change.

    ``new_value`` is given as text; an empty value clears an employment date.
    Omitting ``effective_from`` applies the change immediately.
    """

    category: ChangeCategory
    new_value: str | None
    effective_from: datetime | None = None
    reason: str | None = Field(default=None, max_length=1000)

    @field_validator("category", mode="before")
    @classmethod
    def _uppercase_category(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value


class AnnotateChangePayload(BaseModel):
    """Request body for editing the author or reason of a change."""

    author: str | None = Field(default=None, min_length=1, max_length=255)
    reason: str | None = Field(default=None, max_length=1000)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ChangeResponse(BaseModel):
    """A single change ledger entry."""

    id: uuid.UUID
    staff_id: uuid.UUID
    category: ChangeCategory
    old_value: str | None
    new_value: str | None
    effective_from: datetime
    recorded_at: datetime
    author: str
    reason: str | None
    is_pending: bool


class ChangeHistoryResponse(BaseModel):
    """A staff member's changes, oldest first, split by whether they have taken effect."""

    staff_id: uuid.UUID
    applied: list[ChangeResponse]
    pending: list[ChangeResponse]


class RevertResponse(BaseModel):
    """Outcome of reverting a change."""

    entry_id: uuid.UUID
    staff_id: uuid.UUID
    category: ChangeCategory
    reverted: bool
    reverted_value: str | None
