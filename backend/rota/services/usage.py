from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from rota.models.enums import ShiftType
from rota.models.shift import ShiftRecord

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rota.models.entitlement import HolidayEntitlement
    from rota.services.holiday_year import HolidayYear


@dataclass(frozen=True)
class HolidayUsage:
    """Holiday taken inside one holiday year."""

    days_taken: float
    hours_taken: float


async def aggregate_usage(
    session: AsyncSession,
    staff_id: uuid.UUID,
    year: HolidayYear,
) -> HolidayUsage:
    """Count HOLIDAY shifts (days) and sum their durations (hours) starting inside ``year``."""
    result = await session.execute(
        select(col(ShiftRecord.start_at), col(ShiftRecord.end_at)).where(
            col(ShiftRecord.staff_id) == staff_id,
            col(ShiftRecord.shift_type) == ShiftType.HOLIDAY.value,
            col(ShiftRecord.start_at) >= year.starts_at,
            col(ShiftRecord.start_at) < year.ends_before,
        )
    )
    rows = result.all()
    hours = sum(((end_at - start_at).total_seconds() / 3600 for start_at, end_at in rows), 0.0)
    return HolidayUsage(days_taken=float(len(rows)), hours_taken=hours)


def apply_usage(entitlement: HolidayEntitlement, usage: HolidayUsage) -> None:
    """Overwrite the taken figures on ``entitlement``. Remaining follows from them."""
    if entitlement.days_taken != usage.days_taken:
        entitlement.days_taken = usage.days_taken
    if entitlement.hours_taken != usage.hours_taken:
        entitlement.hours_taken = usage.hours_taken
