# ruff: noqa: TC003
"""API endpoints for the staff and shift writes that drive recalculation."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Response, status

from rota.db import SessionDep, unit_of_work
from rota.schemas.shift import ShiftCreate, ShiftResponse, ShiftUpdate
from rota.schemas.staff import StaffCreate, StaffResponse
from rota.services import reporting
from rota.services import rota as rota_service

staff_router = APIRouter(prefix="/staff", tags=["staff"])

shifts_router = APIRouter(prefix="/shifts", tags=["shifts"])


@staff_router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
async def create_staff(payload: StaffCreate, session: SessionDep) -> StaffResponse:
    """Add a staff member. Active staff get an entitlement for the active year."""
    async with unit_of_work(session):
        staff = await rota_service.create_staff(session, payload)
    return reporting.build_staff_response(staff)


@staff_router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_staff(staff_id: uuid.UUID, session: SessionDep) -> Response:
    """Remove a staff member and everything recorded against them."""
    async with unit_of_work(session):
        await rota_service.delete_staff(session, staff_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@shifts_router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
async def create_shift(payload: ShiftCreate, session: SessionDep) -> ShiftResponse:
    async with unit_of_work(session):
        write = await rota_service.create_shift(session, payload)
    return reporting.build_shift_response(write.shift)


@shifts_router.patch("/{shift_id}", response_model=ShiftResponse)
async def update_shift(shift_id: uuid.UUID, payload: ShiftUpdate, session: SessionDep) -> ShiftResponse:
    async with unit_of_work(session):
        write = await rota_service.update_shift(session, shift_id, payload)
    return reporting.build_shift_response(write.shift)


@shifts_router.delete("/{shift_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shift(shift_id: uuid.UUID, session: SessionDep) -> Response:
    async with unit_of_work(session):
        await rota_service.delete_shift(session, shift_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
