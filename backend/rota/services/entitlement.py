"""Statutory holiday entitlement calculator.

Fixed-hours staff earn 5.6 weeks a year where one day is 12 hours, pro-rated
by how much of the holiday year their employment covers, plus one day for
every 12 hours of overtime. Zero-hours staff accrue 12.07% of the hours they
actually work. Nothing is rounded here; rounding is a presentation concern.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from rota.config import get_settings
from rota.models.base import local_now
from rota.models.change import ChangeLedgerEntry
from rota.models.entitlement import HolidayEntitlement
from rota.models.enums import ChangeCategory, ShiftType
from rota.models.shift import ShiftRecord
from rota.services.holiday_year import HolidayYear
from rota.services.identity import get_identity_service

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rota.models.staff import StaffMember

HOURS_PER_DAY = 12.0
STATUTORY_WEEKS = 5.6
WEEKS_PER_YEAR = 52
MONTHS_PER_YEAR = 12.0
DAYS_PER_MONTH = 30.44

# 5.6 / (52 - 5.6): holiday hours accrued per hour worked.
ZERO_HOURS_ACCRUAL_RATE = round(STATUTORY_WEEKS / (WEEKS_PER_YEAR - STATUTORY_WEEKS), 4)


@dataclass(frozen=True)
class EntitlementFigures:
    """Result of one entitlement calculation."""

    contracted_hours_per_week: float
    days: float
    is_zero_hours: bool

    @property
    def hours(self) -> float:
        return self.days * HOURS_PER_DAY


# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def base_entitlement_days(contracted_hours: float) -> float:
    """Full-year statutory days for a weekly contract: ``(hours / 12) * 5.6``."""
    return (contracted_hours / HOURS_PER_DAY) * STATUTORY_WEEKS


def effective_window(
    year: HolidayYear,
    window_start: date | None,
    window_end: date | None,
) -> tuple[date, date]:
    """Intersect an optional ``[window_start, window_end]`` range with the holiday year."""
    start = max(window_start or year.start, year.start)
    end = min(window_end or year.end, year.end)
    return start, end


def months_pro_rata_factor(
    year: HolidayYear,
    window_start: date | None,
    window_end: date | None,
) -> float:
    """Fraction of the year covered, measured in 30.44-day months and clamped to [0, 1].

    A window that spans the whole holiday year earns the full entitlement.
    """
    start, end = effective_window(year, window_start, window_end)
    if end < start:
        return 0.0
    if start == year.start and end == year.end:
        return 1.0
    months = ((end - start).days + 1) / DAYS_PER_MONTH
    return max(0.0, min(1.0, months / MONTHS_PER_YEAR))


def day_count_pro_rata_factor(
    year: HolidayYear,
    window_start: date | None,
    window_end: date | None,
) -> float:
    """Fraction of the year's days covered by the window, clamped to [0, 1]."""
    start, end = effective_window(year, window_start, window_end)
    if end < start:
        return 0.0
    return max(0.0, min(1.0, ((end - start).days + 1) / year.total_days))


def fixed_hours_entitlement_days(
    contracted_hours: float,
    year: HolidayYear,
    pro_rata_start: date | None = None,
    pro_rata_end: date | None = None,
) -> float:
    """Entitlement in days for a fixed weekly contract.

    With neither bound supplied the full base entitlement is returned exactly.
    """
    days = base_entitlement_days(contracted_hours)
    if pro_rata_start is None and pro_rata_end is None:
        return days
    return days * months_pro_rata_factor(year, pro_rata_start, pro_rata_end)


def zero_hours_entitlement_days(
    hours_worked: float,
    year: HolidayYear | None = None,
    employment_start: date | None = None,
    employment_end: date | None = None,
    *,
    window_prorata: bool = False,
) -> float:
    """Entitlement in days accrued from hours worked at the statutory 12.07% rate.

    ``hours_worked`` is expected to be scoped to the employment window already.
    ``window_prorata`` additionally scales by the day-count share of the year.
    """
    days = hours_worked * ZERO_HOURS_ACCRUAL_RATE / HOURS_PER_DAY
    if window_prorata and year is not None and (employment_start is not None or employment_end is not None):
        days *= day_count_pro_rata_factor(year, employment_start, employment_end)
    return days


def overtime_entitlement_days(overtime_hours: float) -> float:
    """Extra days earned by overtime: one day per 12 hours."""
    return overtime_hours / HOURS_PER_DAY


# ---------------------------------------------------------------------------
# DB-backed helpers
# ---------------------------------------------------------------------------


async def sum_shift_hours(
    session: AsyncSession,
    staff_id: uuid.UUID,
    starts_at: datetime,
    ends_before: datetime,
    *,
    overtime_only: bool = False,
    exclude_holiday: bool = False,
) -> float:
    """Sum shift durations for a staff member whose start falls in ``[starts_at, ends_before)``."""
    filters = [
        col(ShiftRecord.staff_id) == staff_id,
        col(ShiftRecord.start_at) >= starts_at,
        col(ShiftRecord.start_at) < ends_before,
    ]
    if overtime_only:
        filters.append(col(ShiftRecord.overtime).is_(True))
    if exclude_holiday:
        filters.append(col(ShiftRecord.shift_type) != ShiftType.HOLIDAY.value)

    result = await session.execute(select(col(ShiftRecord.start_at), col(ShiftRecord.end_at)).where(*filters))
    return sum(((end_at - start_at).total_seconds() / 3600 for start_at, end_at in result.all()), 0.0)


async def latest_hours_change_date(
    session: AsyncSession,
    staff_id: uuid.UUID,
    year: HolidayYear,
    now: datetime | None = None,
) -> date | None:
    """Effective date of the most recent applied contracted-hours change inside the year."""
    if now is None:
        now = local_now()
    result = await session.execute(
        select(col(ChangeLedgerEntry.effective_from))
        .where(
            col(ChangeLedgerEntry.staff_id) == staff_id,
            col(ChangeLedgerEntry.category) == ChangeCategory.CONTRACTED_HOURS.value,
            col(ChangeLedgerEntry.effective_from) >= year.starts_at,
            col(ChangeLedgerEntry.effective_from) < year.ends_before,
            col(ChangeLedgerEntry.effective_from) <= now,
        )
        .order_by(col(ChangeLedgerEntry.effective_from).desc())
        .limit(1)
    )
    effective_from = result.scalar_one_or_none()
    return effective_from.date() if effective_from is not None else None


async def calculate_entitlement(
    session: AsyncSession,
    staff: StaffMember,
    year: HolidayYear,
    *,
    employment_end_override: date | None = None,
    now: datetime | None = None,
) -> EntitlementFigures:
    """Compute the statutory entitlement of ``staff`` for ``year``.

    Zero-hours contracts accrue from non-holiday hours worked inside the
    employment window. Fixed-hours contracts are pro-rated from the later of
    employment start and the most recent contracted-hours change in the year,
    then credited with overtime worked in the year.
    """
    employment_end = employment_end_override or staff.employment_end
    contracted_hours = staff.contracted_hours

    if contracted_hours == 0:
        start, end = effective_window(year, staff.employment_start, employment_end)
        hours_worked = 0.0
        if start <= end:
            worked = HolidayYear(start=start, end=end)
            hours_worked = await sum_shift_hours(
                session, staff.id, worked.starts_at, worked.ends_before, exclude_holiday=True
            )
        days = zero_hours_entitlement_days(
            hours_worked,
            year,
            staff.employment_start,
            employment_end,
            window_prorata=get_settings().zero_hours_window_prorata,
        )
        return EntitlementFigures(contracted_hours_per_week=contracted_hours, days=days, is_zero_hours=True)

    pro_rata_start = staff.employment_start
    hours_changed_on = await latest_hours_change_date(session, staff.id, year, now)
    if hours_changed_on is not None:
        pro_rata_start = max(hours_changed_on, staff.employment_start or hours_changed_on)

    days = fixed_hours_entitlement_days(contracted_hours, year, pro_rata_start, employment_end)
    overtime_hours = await sum_shift_hours(
        session, staff.id, year.starts_at, year.ends_before, overtime_only=True
    )
    days += overtime_entitlement_days(overtime_hours)
    return EntitlementFigures(contracted_hours_per_week=contracted_hours, days=days, is_zero_hours=False)


# ---------------------------------------------------------------------------
# Entitlement rows
# ---------------------------------------------------------------------------


async def find_entitlement(
    session: AsyncSession,
    staff_id: uuid.UUID,
    year_start: date,
    *,
    for_update: bool = False,
) -> HolidayEntitlement | None:
    """Return the entitlement row for ``(staff_id, year_start)``, optionally locked."""
    query = select(HolidayEntitlement).where(
        col(HolidayEntitlement.staff_id) == staff_id,
        col(HolidayEntitlement.year_start) == year_start,
    )
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def delete_entitlement(session: AsyncSession, staff_id: uuid.UUID, year_start: date) -> bool:
    """Delete the row for ``(staff_id, year_start)``. Returns False if there was none."""
    entitlement = await find_entitlement(session, staff_id, year_start, for_update=True)
    if entitlement is None:
        return False
    await session.delete(entitlement)
    await session.flush()
    return True


async def count_entitlements(session: AsyncSession, year_start: date) -> int:
    result = await session.execute(
        select(func.count()).select_from(HolidayEntitlement).where(col(HolidayEntitlement.year_start) == year_start)
    )
    return int(result.scalar_one())


def build_entitlement(staff_id: uuid.UUID, year: HolidayYear, figures: EntitlementFigures) -> HolidayEntitlement:
    """Create a new entitlement row with nothing taken yet."""
    return HolidayEntitlement(
        id=get_identity_service().entitlement_id(staff_id, year.start),
        staff_id=staff_id,
        year_start=year.start,
        year_end=year.end,
        contracted_hours_per_week=figures.contracted_hours_per_week,
        entitlement_days=figures.days,
        entitlement_hours=figures.hours,
        is_zero_hours=figures.is_zero_hours,
    )


def apply_figures(entitlement: HolidayEntitlement, year: HolidayYear, figures: EntitlementFigures) -> bool:
    """Write calculated figures onto an existing row. Returns True if anything changed.

    Unchanged attributes are left untouched so a repeated calculation issues no UPDATE.
    """
    values = {
        "year_end": year.end,
        "contracted_hours_per_week": figures.contracted_hours_per_week,
        "entitlement_days": figures.days,
        "entitlement_hours": figures.hours,
        "is_zero_hours": figures.is_zero_hours,
    }
    changed = False
    for name, value in values.items():
        if getattr(entitlement, name) != value:
            setattr(entitlement, name, value)
            changed = True
    return changed
