# ruff: noqa: B008, TC003
"""API endpoints that trigger maintenance sweeps by hand."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from rota.db import SessionDep
from rota.schemas.maintenance import CleanupResponse, PendingChangeRunResponse, UsageRefreshResponse
from rota.services.change_ledger import apply_pending_changes
from rota.services.maintenance import cleanup_entitlements, refresh_all_usage

maintenance_router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@maintenance_router.post("/cleanup", response_model=CleanupResponse)
async def trigger_cleanup(
    session: SessionDep,
    today: date | None = Query(default=None),
) -> CleanupResponse:
    """Keep only the active year's entitlements and fill in any that are missing."""
    result = await cleanup_entitlements(session, today)
    return CleanupResponse(
        year_start=result.year_start,
        year_end=result.year_end,
        orphans_deleted=result.orphans_deleted,
        stale_deleted=result.stale_deleted,
        created=result.created,
        errors=result.errors,
    )


@maintenance_router.post("/pending-changes", response_model=PendingChangeRunResponse)
async def trigger_pending_changes(session: SessionDep) -> PendingChangeRunResponse:
    """Apply future-dated changes that have become effective, as the worker does each minute."""
    result = await apply_pending_changes(session)
    return PendingChangeRunResponse(
        run_at=result.run_at,
        applied=result.applied,
        skipped=result.skipped,
        errors=result.errors,
    )


@maintenance_router.post("/refresh-usage", response_model=UsageRefreshResponse)
async def trigger_usage_refresh(session: SessionDep) -> UsageRefreshResponse:
    """Recount holiday taken for every active staff member."""
    result = await refresh_all_usage(session)
    return UsageRefreshResponse(refreshed=result.refreshed, errors=result.errors)
