"""Year-rollover engine.

A shift flagged as year end closes the holiday year on its date. Rolling over
creates the following year's entitlement row for every active staff member,
exactly once: if any row already exists for the new year nothing is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from rota.models.base import local_now
from rota.models.enums import RenewalAction
from rota.services.entitlement import build_entitlement, calculate_entitlement, count_entitlements
from rota.services.holiday_year import latest_year_end_marker, year_after_marker
from rota.services.staff import list_active_staff

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass
class RolloverResult:
    """Result of rolling entitlement into a new holiday year."""

    year_start: date
    year_end: date
    created: int = 0
    skipped: int = 0


@dataclass
class RenewalResult:
    """Result of a year-end renewal check."""

    action: RenewalAction
    marker_date: date | None = None
    rollover: RolloverResult | None = None


async def rollover(
    session: AsyncSession,
    marker_date: date,
    *,
    now: datetime | None = None,
) -> RolloverResult:
    """Create next-year entitlement rows for all active staff after a year-end marker.

    The new year starts the day after ``marker_date``. Rows are created with
    nothing taken; existing rows for the new year are never overwritten.
    """
    year = year_after_marker(marker_date)
    result = RolloverResult(year_start=year.start, year_end=year.end)
    staff = await list_active_staff(session)

    if await count_entitlements(session, year.start) > 0:
        result.skipped = len(staff)
        logger.info("Rollover for %s already done: skipped=%d", year.start, result.skipped)
        return result

    for member in staff:
        figures = await calculate_entitlement(session, member, year, now=now)
        session.add(build_entitlement(member.id, year, figures))
        result.created += 1

    await session.flush()
    logger.info(
        "Rollover to %s..%s complete: created=%d skipped=%d",
        year.start,
        year.end,
        result.created,
        result.skipped,
    )
    return result


async def check_and_renew(
    session: AsyncSession,
    today: date | None = None,
    *,
    now: datetime | None = None,
) -> RenewalResult:
    """Roll over for the most recent year-end marker dated before ``today``, if not done yet."""
    if today is None:
        today = local_now().date()

    marker = await latest_year_end_marker(session, today)
    if marker is None:
        return RenewalResult(action=RenewalAction.NO_ACTION)

    year = year_after_marker(marker)
    if await count_entitlements(session, year.start) > 0:
        return RenewalResult(action=RenewalAction.ALREADY_RENEWED, marker_date=marker)

    outcome = await rollover(session, marker, now=now)
    return RenewalResult(action=RenewalAction.RENEWED, marker_date=marker, rollover=outcome)
