from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import pytest

from rota.models import HolidayEntitlement, ShiftType
from rota.services.holiday_year import year_starting
from rota.services.usage import HolidayUsage, aggregate_usage, apply_usage

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

YEAR = year_starting(date(2025, 4, 6))


async def test_counts_holiday_shifts_inside_year(
    db_session: AsyncSession, make_staff: Any, make_shift: Any
) -> None:
    staff = await make_staff()
    await make_shift(staff, datetime(2025, 4, 6, 8, 0), hours=12.0, shift_type=ShiftType.HOLIDAY)
    await make_shift(staff, datetime(2025, 8, 1, 8, 0), hours=8.0, shift_type=ShiftType.HOLIDAY)
    await make_shift(staff, datetime(2026, 4, 5, 8, 0), hours=12.0, shift_type=ShiftType.HOLIDAY)
    await make_shift(staff, datetime(2025, 4, 5, 8, 0), hours=12.0, shift_type=ShiftType.HOLIDAY)
    await make_shift(staff, datetime(2026, 4, 6, 8, 0), hours=12.0, shift_type=ShiftType.HOLIDAY)
    await make_shift(staff, datetime(2025, 8, 2, 8, 0), hours=12.0)
    await make_shift(staff, datetime(2025, 8, 3, 8, 0), hours=12.0, shift_type=ShiftType.SSP)

    usage = await aggregate_usage(db_session, staff.id, YEAR)

    assert usage == HolidayUsage(days_taken=3.0, hours_taken=32.0)


async def test_only_counts_the_staff_members_own_shifts(
    db_session: AsyncSession, make_staff: Any, make_shift: Any
) -> None:
    alex = await make_staff("Alex")
    sam = await make_staff("Sam")
    await make_shift(sam, datetime(2025, 8, 1, 8, 0), shift_type=ShiftType.HOLIDAY)

    usage = await aggregate_usage(db_session, alex.id, YEAR)

    assert usage == HolidayUsage(days_taken=0.0, hours_taken=0.0)


def test_apply_usage_overwrites_and_remaining_may_go_negative() -> None:
    entitlement = HolidayEntitlement(
        staff_id=uuid.uuid4(),
        year_start=YEAR.start,
        year_end=YEAR.end,
        contracted_hours_per_week=24.0,
        entitlement_days=11.2,
        entitlement_hours=134.4,
        days_taken=5.0,
        hours_taken=60.0,
    )

    apply_usage(entitlement, HolidayUsage(days_taken=12.0, hours_taken=144.0))

    assert entitlement.days_taken == 12.0
    assert entitlement.days_remaining == pytest.approx(-0.8)
    assert entitlement.hours_remaining == pytest.approx(-9.6)
