"""Tests for year-end rollover and renewal.

Covers creating next-year rows for active staff with nothing taken, the
exactly-once guard, and the renewal check outcomes.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import pytest
from sqlalchemy import select
from sqlmodel import col

from rota.models import HolidayEntitlement, RenewalAction, ShiftType
from rota.services.identity import get_identity_service
from rota.services.rollover import check_and_renew, rollover

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

MARKER = date(2026, 4, 5)
NOW = datetime(2026, 4, 6, 9, 0)


async def _rows_for(session: AsyncSession, year_start: date) -> list[HolidayEntitlement]:
    result = await session.execute(
        select(HolidayEntitlement).where(col(HolidayEntitlement.year_start) == year_start)
    )
    return list(result.scalars().all())


async def test_creates_one_row_per_active_staff(
    db_session: AsyncSession, make_staff: Any, make_shift: Any
) -> None:
    alex = await make_staff("Alex", contracted_hours=24.0)
    await make_staff("Sam", contracted_hours=36.0)
    await make_staff("Jo", is_active=False)
    await make_shift(alex, datetime(2026, 4, 10, 8, 0), shift_type=ShiftType.HOLIDAY)

    result = await rollover(db_session, MARKER, now=NOW)

    assert result.year_start == date(2026, 4, 6)
    assert result.year_end == date(2027, 4, 5)
    assert result.created == 2
    assert result.skipped == 0
    rows = await _rows_for(db_session, date(2026, 4, 6))
    assert len(rows) == 2
    assert all(row.days_taken == 0.0 and row.hours_taken == 0.0 for row in rows)
    by_staff = {row.staff_id: row for row in rows}
    assert by_staff[alex.id].entitlement_days == pytest.approx(11.2)
    assert by_staff[alex.id].id == get_identity_service().entitlement_id(alex.id, date(2026, 4, 6))


async def test_second_rollover_creates_nothing(db_session: AsyncSession, make_staff: Any) -> None:
    await make_staff("Alex")
    await make_staff("Sam")

    first = await rollover(db_session, MARKER, now=NOW)
    second = await rollover(db_session, MARKER, now=NOW)

    assert first.created == 2
    assert second.created == 0
    assert second.skipped == 2
    assert len(await _rows_for(db_session, date(2026, 4, 6))) == 2


async def test_existing_rows_are_not_overwritten(db_session: AsyncSession, make_staff: Any) -> None:
    staff = await make_staff("Alex", contracted_hours=24.0)
    await rollover(db_session, MARKER, now=NOW)
    (row,) = await _rows_for(db_session, date(2026, 4, 6))
    staff.contracted_hours = 48.0

    await rollover(db_session, MARKER, now=NOW)

    assert row.entitlement_days == pytest.approx(11.2)


async def test_renew_without_marker(db_session: AsyncSession, make_staff: Any) -> None:
    await make_staff()

    result = await check_and_renew(db_session, date(2026, 4, 6), now=NOW)

    assert result.action == RenewalAction.NO_ACTION
    assert result.rollover is None


async def test_renew_after_marker_then_already_renewed(
    db_session: AsyncSession, make_staff: Any, make_shift: Any
) -> None:
    staff = await make_staff()
    await make_shift(staff, datetime(2026, 4, 5, 8, 0), year_end=True)

    first = await check_and_renew(db_session, date(2026, 4, 6), now=NOW)
    second = await check_and_renew(db_session, date(2026, 4, 7), now=NOW)

    assert first.action == RenewalAction.RENEWED
    assert first.marker_date == MARKER
    assert first.rollover is not None
    assert first.rollover.created == 1
    assert second.action == RenewalAction.ALREADY_RENEWED


async def test_renew_ignores_marker_dated_today(
    db_session: AsyncSession, make_staff: Any, make_shift: Any
) -> None:
    staff = await make_staff()
    await make_shift(staff, datetime(2026, 4, 5, 8, 0), year_end=True)

    result = await check_and_renew(db_session, date(2026, 4, 5), now=NOW)

    assert result.action == RenewalAction.NO_ACTION
