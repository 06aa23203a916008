"""Recalculation dispatcher.

Mutation services call into this module after writing, inside the same unit
of work, so a write and the entitlement it affects commit or roll back
together. Recalculation only touches entitlement rows, so it can never
trigger another dispatch.

| Event                                     | Action                               |
|-------------------------------------------|--------------------------------------|
| Employment dates or contracted hours edit | recalculate                          |
| Staff deactivated                         | delete the active-year row           |
| Staff reactivated                         | recalculate                          |
| Any shift write, zero-hours staff         | recalculate                          |
| Shift write touching overtime, fixed-hours| recalculate                          |
| Shift write touching a HOLIDAY shift      | refresh usage                        |
| Year-end flag set on a shift              | roll over into the following year    |
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING

from rota.exceptions import ValidationError
from rota.models.enums import ShiftType
from rota.services.entitlement import (
    apply_figures,
    build_entitlement,
    calculate_entitlement,
    count_entitlements,
    delete_entitlement,
    find_entitlement,
)
from rota.services.holiday_year import resolve_current_year
from rota.services.rollover import RolloverResult, rollover
from rota.services.staff import count_active_staff, get_staff_or_404
from rota.services.usage import aggregate_usage, apply_usage

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rota.models.entitlement import HolidayEntitlement
    from rota.models.shift import ShiftRecord
    from rota.models.staff import StaffMember

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftState:
    """The parts of a shift record the dispatcher reacts to."""

    staff_id: uuid.UUID
    shift_type: str
    start_at: datetime
    end_at: datetime
    overtime: bool = False
    year_end: bool = False

    @classmethod
    def from_record(cls, shift: ShiftRecord) -> ShiftState:
        return cls(
            staff_id=shift.staff_id,
            shift_type=shift.shift_type,
            start_at=shift.start_at,
            end_at=shift.end_at,
            overtime=shift.overtime,
            year_end=shift.year_end,
        )

    @property
    def is_holiday(self) -> bool:
        return self.shift_type == ShiftType.HOLIDAY.value


@dataclass(frozen=True)
class StaffState:
    """The parts of a staff member that feed the entitlement calculation."""

    staff_id: uuid.UUID
    is_active: bool
    contracted_hours: float
    employment_start: date | None
    employment_end: date | None

    @classmethod
    def from_record(cls, staff: StaffMember) -> StaffState:
        return cls(
            staff_id=staff.id,
            is_active=staff.is_active,
            contracted_hours=staff.contracted_hours,
            employment_start=staff.employment_start,
            employment_end=staff.employment_end,
        )


@dataclass
class DispatchResult:
    """What a single dispatch did."""

    recalculated: list[uuid.UUID] = field(default_factory=list)
    usage_updated: list[uuid.UUID] = field(default_factory=list)
    skipped: list[uuid.UUID] = field(default_factory=list)
    removed: list[uuid.UUID] = field(default_factory=list)
    rollover: RolloverResult | None = None


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def recalculate(
    session: AsyncSession,
    staff_id: uuid.UUID,
    employment_end_override: date | None = None,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> HolidayEntitlement:
    """Recompute and upsert a staff member's entitlement for the active year, then refresh usage.

    Running it twice without intervening writes leaves the row unchanged.
    Raises NotFoundError for an unknown staff member and ValidationError when
    inserting would leave more rows for the year than there are active staff.
    """
    staff = await get_staff_or_404(session, staff_id)
    year = await resolve_current_year(session, today)
    figures = await calculate_entitlement(
        session, staff, year, employment_end_override=employment_end_override, now=now
    )

    entitlement = await find_entitlement(session, staff.id, year.start, for_update=True)
    if entitlement is None:
        existing = await count_entitlements(session, year.start)
        active = await count_active_staff(session)
        if existing >= active:
            raise ValidationError(
                f"Entitlements for year starting {year.start} would exceed the {active} active staff"
            )
        entitlement = build_entitlement(staff.id, year, figures)
        session.add(entitlement)
        logger.debug("Created entitlement for staff=%s year=%s", staff.id, year.start)
    elif apply_figures(entitlement, year, figures):
        logger.debug("Updated entitlement for staff=%s year=%s", staff.id, year.start)

    apply_usage(entitlement, await aggregate_usage(session, staff.id, year))
    await session.flush()
    return entitlement


async def update_usage(
    session: AsyncSession,
    staff_id: uuid.UUID,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> HolidayEntitlement:
    """Refresh only the taken figures. Falls back to a full recalculation when no row exists yet."""
    staff = await get_staff_or_404(session, staff_id)
    year = await resolve_current_year(session, today)

    entitlement = await find_entitlement(session, staff.id, year.start, for_update=True)
    if entitlement is None:
        return await recalculate(session, staff.id, today=today, now=now)

    apply_usage(entitlement, await aggregate_usage(session, staff.id, year))
    await session.flush()
    return entitlement


# ---------------------------------------------------------------------------
# Event handlers
# ---------------------------------------------------------------------------


async def _is_tracked(session: AsyncSession, staff: StaffMember, today: date | None) -> bool:
    """Active staff are always tracked; inactive staff only while they still hold a row."""
    if staff.is_active:
        return True
    year = await resolve_current_year(session, today)
    return await find_entitlement(session, staff.id, year.start) is not None


async def on_staff_changed(
    session: AsyncSession,
    before: StaffState,
    after: StaffState,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> DispatchResult:
    """React to a staff attribute write.

    Deactivation drops the active-year row so rows never outnumber active
    staff. Reactivation recalculates.
    """
    result = DispatchResult()
    if before.is_active != after.is_active:
        if after.is_active:
            await recalculate(session, after.staff_id, today=today, now=now)
            result.recalculated.append(after.staff_id)
        else:
            year = await resolve_current_year(session, today)
            if await delete_entitlement(session, after.staff_id, year.start):
                result.removed.append(after.staff_id)
                logger.info("Removed entitlement for deactivated staff=%s year=%s", after.staff_id, year.start)
        return result

    relevant = (
        before.employment_start != after.employment_start
        or before.employment_end != after.employment_end
        or before.contracted_hours != after.contracted_hours
    )
    if not relevant:
        return result

    staff = await get_staff_or_404(session, after.staff_id)
    if not await _is_tracked(session, staff, today):
        result.skipped.append(staff.id)
        return result

    await recalculate(session, staff.id, today=today, now=now)
    result.recalculated.append(staff.id)
    return result


async def on_shift_changed(
    session: AsyncSession,
    before: ShiftState | None,
    after: ShiftState | None,
    *,
    today: date | None = None,
    now: datetime | None = None,
) -> DispatchResult:
    """React to a shift insert (``before`` is None), update, or delete (``after`` is None).

    A shift moved between staff members is handled as a delete for the old
    owner and an insert for the new one.
    """
    result = DispatchResult()
    staff_ids = list(dict.fromkeys(s.staff_id for s in (before, after) if s is not None))

    for staff_id in staff_ids:
        old = before if before is not None and before.staff_id == staff_id else None
        new = after if after is not None and after.staff_id == staff_id else None
        states = [s for s in (old, new) if s is not None]

        staff = await get_staff_or_404(session, staff_id)
        if staff.contracted_hours == 0:
            needs_recalc = True
        else:
            needs_recalc = any(s.overtime for s in states)
        needs_usage = any(s.is_holiday for s in states)

        if not (needs_recalc or needs_usage):
            continue
        if not await _is_tracked(session, staff, today):
            result.skipped.append(staff_id)
            continue

        if needs_recalc:
            await recalculate(session, staff_id, today=today, now=now)
            result.recalculated.append(staff_id)
        else:
            await update_usage(session, staff_id, today=today, now=now)
            result.usage_updated.append(staff_id)

    if after is not None and after.year_end and not (before is not None and before.year_end):
        result.rollover = await rollover(session, after.start_at.date(), now=now)

    return result
