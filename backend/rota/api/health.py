import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from rota.config import get_settings
from rota.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service metadata plus the clock and holiday-year anniversary every calculation uses."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str
    timezone: str
    holiday_year_start: str


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report service metadata and whether the database answers."""
    settings = get_settings()
    status: Literal["ok", "degraded"] = "ok"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable, entitlement writes will fail")
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
        timezone=settings.timezone,
        holiday_year_start=f"{settings.holiday_year_start_month:02d}-{settings.holiday_year_start_day:02d}",
    )
