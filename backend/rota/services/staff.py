from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from rota.exceptions import NotFoundError
from rota.models.staff import StaffMember

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_staff_or_404(session: AsyncSession, staff_id: uuid.UUID, *, for_update: bool = False) -> StaffMember:
    """Fetch a staff member by id or raise NotFoundError."""
    query = select(StaffMember).where(col(StaffMember.id) == staff_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    staff = result.scalar_one_or_none()
    if staff is None:
        raise NotFoundError(f"Staff member {staff_id} not found")
    return staff


async def list_active_staff(session: AsyncSession) -> list[StaffMember]:
    """Return active staff ordered by name."""
    result = await session.execute(
        select(StaffMember).where(col(StaffMember.is_active).is_(True)).order_by(col(StaffMember.name))
    )
    return list(result.scalars().all())


async def count_active_staff(session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count()).select_from(StaffMember).where(col(StaffMember.is_active).is_(True))
    )
    return int(result.scalar_one())
