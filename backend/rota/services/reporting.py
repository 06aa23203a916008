"""Read path: entitlement rows and change history shaped for API consumers."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from rota.exceptions import NotFoundError
from rota.models.base import local_now
from rota.models.entitlement import HolidayEntitlement
from rota.models.enums import ChangeCategory, ShiftType, StaffRole
from rota.models.staff import StaffMember
from rota.schemas.change import ChangeHistoryResponse, ChangeResponse
from rota.schemas.entitlement import EntitlementListResponse, EntitlementResponse, HolidayYearResponse
from rota.schemas.shift import ShiftResponse
from rota.schemas.staff import StaffResponse
from rota.services.change_ledger import change_history
from rota.services.entitlement import find_entitlement
from rota.services.holiday_year import resolve_current_year
from rota.services.staff import get_staff_or_404

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rota.models.change import ChangeLedgerEntry
    from rota.models.shift import ShiftRecord
    from rota.services.holiday_year import HolidayYear


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def build_year_response(year: HolidayYear) -> HolidayYearResponse:
    return HolidayYearResponse(start=year.start, end=year.end, total_days=year.total_days)


def build_entitlement_response(entitlement: HolidayEntitlement, staff_name: str | None = None) -> EntitlementResponse:
    """Map an entitlement row to its response schema, deriving the remaining figures."""
    return EntitlementResponse(
        id=entitlement.id,
        staff_id=entitlement.staff_id,
        staff_name=staff_name,
        year_start=entitlement.year_start,
        year_end=entitlement.year_end,
        contracted_hours_per_week=entitlement.contracted_hours_per_week,
        is_zero_hours=entitlement.is_zero_hours,
        entitlement_days=entitlement.entitlement_days,
        entitlement_hours=entitlement.entitlement_hours,
        days_taken=entitlement.days_taken,
        hours_taken=entitlement.hours_taken,
        days_remaining=entitlement.days_remaining,
        hours_remaining=entitlement.hours_remaining,
        updated_at=entitlement.updated_at,
    )


def build_change_response(entry: ChangeLedgerEntry, now: datetime | None = None) -> ChangeResponse:
    if now is None:
        now = local_now()
    return ChangeResponse(
        id=entry.id,
        staff_id=entry.staff_id,
        category=ChangeCategory(entry.category),
        old_value=entry.old_value,
        new_value=entry.new_value,
        effective_from=entry.effective_from,
        recorded_at=entry.recorded_at,
        author=entry.author,
        reason=entry.reason,
        is_pending=entry.effective_from > now,
    )


def build_staff_response(staff: StaffMember) -> StaffResponse:
    return StaffResponse(
        id=staff.id,
        name=staff.name,
        role=StaffRole(staff.role),
        is_active=staff.is_active,
        contracted_hours=staff.contracted_hours,
        pay_rate=staff.pay_rate,
        employment_start=staff.employment_start,
        employment_end=staff.employment_end,
        color=staff.color,
        created_at=staff.created_at,
        updated_at=staff.updated_at,
    )


def build_shift_response(shift: ShiftRecord) -> ShiftResponse:
    return ShiftResponse(
        id=shift.id,
        staff_id=shift.staff_id,
        start_at=shift.start_at,
        end_at=shift.end_at,
        shift_type=ShiftType(shift.shift_type),
        period_label=shift.period_label,
        week_number=shift.week_number,
        overtime=shift.overtime,
        call_out=shift.call_out,
        solo=shift.solo,
        training=shift.training,
        short_notice=shift.short_notice,
        payment_period_end=shift.payment_period_end,
        year_end=shift.year_end,
        notes=shift.notes,
        duration_hours=shift.duration_hours,
    )


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_current_year(session: AsyncSession, today: date | None = None) -> HolidayYearResponse:
    return build_year_response(await resolve_current_year(session, today))


async def list_current_entitlements(
    session: AsyncSession,
    today: date | None = None,
    *,
    include_inactive: bool = False,
) -> EntitlementListResponse:
    """Entitlement rows for the active holiday year, ordered by staff name."""
    year = await resolve_current_year(session, today)

    query = (
        select(HolidayEntitlement, col(StaffMember.name))
        .join(StaffMember, col(StaffMember.id) == col(HolidayEntitlement.staff_id))
        .where(col(HolidayEntitlement.year_start) == year.start)
        .order_by(col(StaffMember.name))
    )
    if not include_inactive:
        query = query.where(col(StaffMember.is_active).is_(True))

    result = await session.execute(query)
    items = [build_entitlement_response(entitlement, name) for entitlement, name in result.all()]
    return EntitlementListResponse(year=build_year_response(year), items=items, total=len(items))


async def get_current_entitlement(
    session: AsyncSession,
    staff_id: uuid.UUID,
    today: date | None = None,
) -> EntitlementResponse:
    """A staff member's entitlement for the active year. NotFoundError if none has been calculated."""
    staff = await get_staff_or_404(session, staff_id)
    year = await resolve_current_year(session, today)
    entitlement = await find_entitlement(session, staff.id, year.start)
    if entitlement is None:
        raise NotFoundError(f"No entitlement for {staff.name} in the year starting {year.start}")
    return build_entitlement_response(entitlement, staff.name)


async def get_change_history(
    session: AsyncSession,
    staff_id: uuid.UUID,
    now: datetime | None = None,
) -> ChangeHistoryResponse:
    if now is None:
        now = local_now()
    history = await change_history(session, staff_id, now=now)
    return ChangeHistoryResponse(
        staff_id=staff_id,
        applied=[build_change_response(entry, now) for entry in history.applied],
        pending=[build_change_response(entry, now) for entry in history.pending],
    )
