# ruff: noqa: B008, TC003
"""API endpoints for the holiday year and year-end rollover."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Query

from rota.db import SessionDep, unit_of_work
from rota.schemas.entitlement import HolidayYearResponse
from rota.schemas.maintenance import RenewalResponse, RolloverResponse
from rota.services.reporting import get_current_year
from rota.services.rollover import RolloverResult, check_and_renew, rollover

holiday_year_router = APIRouter(prefix="/holiday-year", tags=["holiday-year"])


def _build_rollover_response(result: RolloverResult) -> RolloverResponse:
    return RolloverResponse(
        year_start=result.year_start,
        year_end=result.year_end,
        created=result.created,
        skipped=result.skipped,
    )


@holiday_year_router.get("", response_model=HolidayYearResponse)
async def current_holiday_year(
    session: SessionDep,
    today: date | None = Query(default=None),
) -> HolidayYearResponse:
    """Resolve the active holiday year, honouring year-end markers."""
    return await get_current_year(session, today)


@holiday_year_router.post("/rollover", response_model=RolloverResponse)
async def trigger_rollover(
    session: SessionDep,
    marker_date: date = Query(),
) -> RolloverResponse:
    """Create next-year entitlements for the year ending on ``marker_date``. Safe to repeat."""
    async with unit_of_work(session):
        result = await rollover(session, marker_date)
    return _build_rollover_response(result)


@holiday_year_router.post("/renew", response_model=RenewalResponse)
async def trigger_renewal(
    session: SessionDep,
    today: date | None = Query(default=None),
) -> RenewalResponse:
    """Roll over for the latest year-end marker before ``today`` unless already done."""
    async with unit_of_work(session):
        result = await check_and_renew(session, today)
    return RenewalResponse(
        action=result.action,
        marker_date=result.marker_date,
        rollover=_build_rollover_response(result.rollover) if result.rollover is not None else None,
    )
