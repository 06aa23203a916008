# ruff: noqa: TC001, TC003
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel

from rota.models.enums import RenewalAction


class RolloverResponse(BaseModel):
    """Response for a year rollover."""

    year_start: date
    year_end: date
    created: int
    skipped: int


class RenewalResponse(BaseModel):
    """Response for a year-end renewal check."""

    action: RenewalAction
    marker_date: date | None
    rollover: RolloverResponse | None


class PendingChangeRunResponse(BaseModel):
    """Response for a pending-change sweep."""

    run_at: datetime
    applied: int
    skipped: int
    errors: int


class CleanupResponse(BaseModel):
    """Response for an entitlement cleanup pass."""

    year_start: date
    year_end: date
    orphans_deleted: int
    stale_deleted: int
    created: int
    errors: int


class UsageRefreshResponse(BaseModel):
    """Response for refreshing usage across all active staff."""

    refreshed: int
    errors: int
