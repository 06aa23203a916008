"""Staff and shift write paths.

Each write is followed by the dispatch it implies, in the caller's unit of
work, so the record and the entitlement derived from it commit together.
Staff attribute edits are not made here: they go through the change ledger.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlmodel import col

from rota.exceptions import NotFoundError, ValidationError
from rota.models.change import ChangeLedgerEntry
from rota.models.entitlement import HolidayEntitlement
from rota.models.shift import ShiftRecord
from rota.models.staff import StaffMember
from rota.services.identity import get_identity_service
from rota.services.recalculation import DispatchResult, ShiftState, on_shift_changed, recalculate
from rota.services.staff import get_staff_or_404

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rota.schemas.shift import ShiftCreate, ShiftUpdate
    from rota.schemas.staff import StaffCreate

logger = logging.getLogger(__name__)


@dataclass
class ShiftWrite:
    """A shift insert or update and the dispatch it triggered."""

    shift: ShiftRecord
    dispatch: DispatchResult = field(default_factory=DispatchResult)


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


async def create_staff(
    session: AsyncSession,
    payload: StaffCreate,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> StaffMember:
    """Add a staff member and, if active, give them an entitlement for the active year."""
    name = payload.name.strip()
    existing = await session.execute(select(col(StaffMember.id)).where(col(StaffMember.name) == name))
    if existing.scalar_one_or_none() is not None:
        raise ValidationError(f"A staff member named {name!r} already exists")

    staff = StaffMember(
        id=get_identity_service().staff_id(name),
        name=name,
        role=payload.role.value,
        is_active=payload.is_active,
        contracted_hours=payload.contracted_hours,
        pay_rate=payload.pay_rate,
        employment_start=payload.employment_start,
        employment_end=payload.employment_end,
        color=payload.color.lower(),
    )
    session.add(staff)
    await session.flush()

    if staff.is_active:
        await recalculate(session, staff.id, today=today, now=now)
    logger.info("Created staff member %s (%s)", staff.name, staff.id)
    return staff


async def delete_staff(session: AsyncSession, staff_id: uuid.UUID) -> None:
    """Hard-delete a staff member with their shifts, changes and entitlements."""
    staff = await get_staff_or_404(session, staff_id, for_update=True)

    for model in (HolidayEntitlement, ShiftRecord, ChangeLedgerEntry):
        await session.execute(delete(model).where(col(model.staff_id) == staff_id))
    await session.delete(staff)
    await session.flush()
    logger.info("Deleted staff member %s (%s)", staff.name, staff_id)


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------


async def get_shift_or_404(session: AsyncSession, shift_id: uuid.UUID, *, for_update: bool = False) -> ShiftRecord:
    query = select(ShiftRecord).where(col(ShiftRecord.id) == shift_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    shift = result.scalar_one_or_none()
    if shift is None:
        raise NotFoundError(f"Shift {shift_id} not found")
    return shift


async def create_shift(
    session: AsyncSession,
    payload: ShiftCreate,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> ShiftWrite:
    """Put a shift on the rota and dispatch the insert."""
    await get_staff_or_404(session, payload.staff_id)

    shift_id = get_identity_service().shift_id(payload.staff_id, payload.start_at, payload.shift_type.value)
    if await session.get(ShiftRecord, shift_id) is not None:
        raise ValidationError(
            f"{payload.shift_type} shift at {payload.start_at} already exists for staff {payload.staff_id}"
        )

    shift = ShiftRecord(id=shift_id, **payload.model_dump(exclude={"shift_type"}), shift_type=payload.shift_type.value)
    session.add(shift)
    await session.flush()

    dispatch = await on_shift_changed(session, None, ShiftState.from_record(shift), today=today, now=now)
    return ShiftWrite(shift=shift, dispatch=dispatch)


async def update_shift(
    session: AsyncSession,
    shift_id: uuid.UUID,
    payload: ShiftUpdate,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> ShiftWrite:
    """Apply a partial update to a shift and dispatch the before/after pair."""
    shift = await get_shift_or_404(session, shift_id, for_update=True)
    before = ShiftState.from_record(shift)

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("staff_id") is not None:
        await get_staff_or_404(session, updates["staff_id"])
    if updates.get("shift_type") is not None:
        updates["shift_type"] = updates["shift_type"].value
    for name, value in updates.items():
        if value is None and name in {"staff_id", "start_at", "end_at", "shift_type"}:
            continue
        setattr(shift, name, value)

    if shift.end_at <= shift.start_at:
        raise ValidationError("end_at must be after start_at")
    await session.flush()

    dispatch = await on_shift_changed(session, before, ShiftState.from_record(shift), today=today, now=now)
    return ShiftWrite(shift=shift, dispatch=dispatch)


async def delete_shift(
    session: AsyncSession,
    shift_id: uuid.UUID,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> DispatchResult:
    """Remove a shift from the rota and dispatch the delete."""
    shift = await get_shift_or_404(session, shift_id, for_update=True)
    before = ShiftState.from_record(shift)
    await session.delete(shift)
    await session.flush()

    return await on_shift_changed(session, before, None, today=today, now=now)
