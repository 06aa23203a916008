# ruff: noqa: B008, TC003
"""API endpoints for reading and recomputing holiday entitlements."""

from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query

from rota.db import SessionDep, unit_of_work
from rota.schemas.entitlement import EntitlementListResponse, EntitlementResponse, RecalculateRequest
from rota.services import reporting
from rota.services.recalculation import recalculate, update_usage

entitlements_router = APIRouter(prefix="/entitlements", tags=["entitlements"])

staff_entitlement_router = APIRouter(prefix="/staff/{staff_id}/entitlement", tags=["entitlements"])


@entitlements_router.get("", response_model=EntitlementListResponse)
async def list_entitlements(
    session: SessionDep,
    include_inactive: bool = Query(default=False),
) -> EntitlementListResponse:
    """Entitlements for the active holiday year."""
    return await reporting.list_current_entitlements(session, include_inactive=include_inactive)


@staff_entitlement_router.get("", response_model=EntitlementResponse)
async def get_entitlement(staff_id: uuid.UUID, session: SessionDep) -> EntitlementResponse:
    """A staff member's entitlement for the active holiday year."""
    return await reporting.get_current_entitlement(session, staff_id)


@staff_entitlement_router.post("/recalculate", response_model=EntitlementResponse)
async def recalculate_entitlement(
    staff_id: uuid.UUID,
    session: SessionDep,
    payload: RecalculateRequest | None = None,
) -> EntitlementResponse:
    """Recompute entitlement and usage for the active year."""
    override: date | None = payload.employment_end_override if payload is not None else None
    async with unit_of_work(session):
        entitlement = await recalculate(session, staff_id, override)
    return await reporting.get_current_entitlement(session, entitlement.staff_id)


@staff_entitlement_router.post("/usage", response_model=EntitlementResponse)
async def refresh_usage(staff_id: uuid.UUID, session: SessionDep) -> EntitlementResponse:
    """Recount holiday taken in the active year."""
    async with unit_of_work(session):
        entitlement = await update_usage(session, staff_id)
    return await reporting.get_current_entitlement(session, entitlement.staff_id)
