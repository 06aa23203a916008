"""Holiday-year resolution.

The holiday year runs from a fixed anniversary (6 April by default) to the day
before the next anniversary. A shift flagged as year end overrides the calendar:
once its date has passed, the active year starts the day after the flag.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from rota.config import get_settings
from rota.models.base import local_now
from rota.models.shift import ShiftRecord

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class HolidayYear:
    """Closed date window ``[start, end]`` over which entitlement accrues."""

    start: date
    end: date

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    @property
    def starts_at(self) -> datetime:
        """First moment of the window."""
        return datetime.combine(self.start, time.min)

    @property
    def ends_before(self) -> datetime:
        """First moment after the window (exclusive bound)."""
        return datetime.combine(self.end + timedelta(days=1), time.min)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


# ---------------------------------------------------------------------------
# Pure computation helpers (no DB)
# ---------------------------------------------------------------------------


def _add_one_year(day: date) -> date:
    """Same calendar day next year; 29 February maps to 28 February."""
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        return day.replace(year=day.year + 1, day=28)


def year_starting(start: date) -> HolidayYear:
    """Return the window that starts on ``start`` and lasts one year."""
    return HolidayYear(start=start, end=_add_one_year(start) - timedelta(days=1))


def year_after_marker(marker_date: date) -> HolidayYear:
    """Return the window that follows a year-end marker dated ``marker_date``."""
    return year_starting(marker_date + timedelta(days=1))


def calendar_holiday_year(reference: date) -> HolidayYear:
    """Return the anniversary-based window containing ``reference``."""
    settings = get_settings()
    anniversary = date(reference.year, settings.holiday_year_start_month, settings.holiday_year_start_day)
    if reference < anniversary:
        anniversary = date(reference.year - 1, settings.holiday_year_start_month, settings.holiday_year_start_day)
    return year_starting(anniversary)


# ---------------------------------------------------------------------------
# DB-backed resolution
# ---------------------------------------------------------------------------


async def latest_year_end_marker(session: AsyncSession, today: date) -> date | None:
    """Return the date of the most recent year-end flagged shift dated before ``today``."""
    result = await session.execute(
        select(col(ShiftRecord.start_at))
        .where(
            col(ShiftRecord.year_end).is_(True),
            col(ShiftRecord.start_at) < datetime.combine(today, time.min),
        )
        .order_by(col(ShiftRecord.start_at).desc())
        .limit(1)
    )
    marker = result.scalar_one_or_none()
    return marker.date() if marker is not None else None


async def resolve_current_year(session: AsyncSession, today: date | None = None) -> HolidayYear:
    """Resolve the active holiday year for ``today``.

    Resolved on every call from the marker flags, never cached, so concurrent
    writers flagging different dates always see the authoritative answer.
    """
    if today is None:
        today = local_now().date()

    marker = await latest_year_end_marker(session, today)
    if marker is not None:
        return year_after_marker(marker)
    return calendar_holiday_year(today)
