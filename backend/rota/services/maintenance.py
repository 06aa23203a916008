"""Maintenance sweeps over derived entitlement rows.

Both sweeps commit as they go: each staff member is handled in its own
transaction so one failure is logged and counted without undoing the rest.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from sqlalchemy import delete, select
from sqlmodel import col

from rota.exceptions import DataIntegrityError
from rota.models.entitlement import HolidayEntitlement
from rota.models.staff import StaffMember
from rota.services.entitlement import find_entitlement
from rota.services.holiday_year import resolve_current_year
from rota.services.recalculation import recalculate, update_usage

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@dataclass
class CleanupResult:
    """Result of an entitlement cleanup pass."""

    year_start: date
    year_end: date
    orphans_deleted: int = 0
    stale_deleted: int = 0
    created: int = 0
    errors: int = 0


@dataclass
class UsageRefreshResult:
    refreshed: int = 0
    errors: int = 0


async def _active_staff_ids(session: AsyncSession) -> list[uuid.UUID]:
    result = await session.execute(
        select(col(StaffMember.id)).where(col(StaffMember.is_active).is_(True)).order_by(col(StaffMember.name))
    )
    return list(result.scalars().all())


async def cleanup_entitlements(
    session: AsyncSession,
    today: date | None = None,
    *,
    now: datetime | None = None,
) -> CleanupResult:
    """Keep exactly the active year's entitlement rows.

    1. Delete rows whose staff member no longer exists (logged as integrity issues)
    2. Delete rows for any other holiday year
    3. Create the missing active-year row for every active staff member
    """
    year = await resolve_current_year(session, today)
    result = CleanupResult(year_start=year.start, year_end=year.end)

    orphans = await session.execute(
        select(col(HolidayEntitlement.id), col(HolidayEntitlement.staff_id))
        .outerjoin(StaffMember, col(StaffMember.id) == col(HolidayEntitlement.staff_id))
        .where(col(StaffMember.id).is_(None))
    )
    orphan_ids: list[uuid.UUID] = []
    for entitlement_id, staff_id in orphans.all():
        issue = DataIntegrityError(f"Entitlement {entitlement_id} references missing staff member {staff_id}")
        logger.warning("Removing orphaned entitlement: %s", issue)
        orphan_ids.append(entitlement_id)
    if orphan_ids:
        await session.execute(delete(HolidayEntitlement).where(col(HolidayEntitlement.id).in_(orphan_ids)))
        result.orphans_deleted = len(orphan_ids)

    stale = await session.execute(
        delete(HolidayEntitlement).where(col(HolidayEntitlement.year_start) != year.start)
    )
    result.stale_deleted = stale.rowcount or 0
    await session.commit()

    for staff_id in await _active_staff_ids(session):
        try:
            if await find_entitlement(session, staff_id, year.start) is not None:
                continue
            await recalculate(session, staff_id, today=today, now=now)
            await session.commit()
            result.created += 1
        except Exception:
            await session.rollback()
            logger.exception("Creating entitlement failed for staff=%s", staff_id)
            result.errors += 1

    logger.info(
        "Entitlement cleanup for %s: orphans=%d stale=%d created=%d errors=%d",
        year.start,
        result.orphans_deleted,
        result.stale_deleted,
        result.created,
        result.errors,
    )
    return result


async def refresh_all_usage(
    session: AsyncSession,
    today: date | None = None,
    *,
    now: datetime | None = None,
) -> UsageRefreshResult:
    """Re-run the usage aggregation for every active staff member."""
    result = UsageRefreshResult()

    for staff_id in await _active_staff_ids(session):
        try:
            await update_usage(session, staff_id, today=today, now=now)
            await session.commit()
            result.refreshed += 1
        except Exception:
            await session.rollback()
            logger.exception("Usage refresh failed for staff=%s", staff_id)
            result.errors += 1

    logger.info("Usage refresh complete: refreshed=%d errors=%d", result.refreshed, result.errors)
    return result
