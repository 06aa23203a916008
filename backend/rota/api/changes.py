# ruff: noqa: B008, TC003
"""API endpoints for the staff change ledger."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, status

from rota.api.deps import ActorDep
from rota.db import SessionDep, unit_of_work
from rota.schemas.change import (
    AnnotateChangePayload,
    ChangeHistoryResponse,
    ChangeResponse,
    RecordChangePayload,
    RevertResponse,
)
from rota.services import change_ledger, reporting

staff_changes_router = APIRouter(prefix="/staff/{staff_id}/changes", tags=["changes"])

changes_router = APIRouter(prefix="/changes", tags=["changes"])


@staff_changes_router.get("", response_model=ChangeHistoryResponse)
async def get_change_history(staff_id: uuid.UUID, session: SessionDep) -> ChangeHistoryResponse:
    """Applied and pending changes for a staff member, oldest first."""
    return await reporting.get_change_history(session, staff_id)


@staff_changes_router.post("", response_model=ChangeResponse, status_code=status.HTTP_201_CREATED)
async def record_change(
    staff_id: uuid.UUID,
    payload: RecordChangePayload,
    session: SessionDep,
    actor: ActorDep,
) -> ChangeResponse:
    """Record an attribute change; it applies now unless dated in the future."""
    async with unit_of_work(session):
        entry = await change_ledger.record_change(
            session,
            staff_id,
            payload.category,
            payload.new_value,
            effective_from=payload.effective_from,
            author=actor,
            reason=payload.reason,
        )
    return reporting.build_change_response(entry)


@changes_router.patch("/{entry_id}", response_model=ChangeResponse)
async def annotate_change(
    entry_id: uuid.UUID,
    payload: AnnotateChangePayload,
    session: SessionDep,
) -> ChangeResponse:
    """Edit the author or reason of a change."""
    async with unit_of_work(session):
        entry = await change_ledger.annotate_change(
            session, entry_id, author=payload.author, reason=payload.reason
        )
    return reporting.build_change_response(entry)


@changes_router.delete("/{entry_id}", response_model=RevertResponse)
async def revert_change(entry_id: uuid.UUID, session: SessionDep) -> RevertResponse:
    """Undo a change, restoring the previous live value if it had taken effect."""
    async with unit_of_work(session):
        result = await change_ledger.revert_change(session, entry_id)
    return RevertResponse(
        entry_id=result.entry_id,
        staff_id=result.staff_id,
        category=result.category,
        reverted=result.reverted,
        reverted_value=result.reverted_value,
    )
