from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from rota.db import get_session
from rota.main import app
from rota.models import ShiftRecord, ShiftType, SQLModel, StaffMember
from rota.services.identity import set_identity_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

StaffFactory = Callable[..., Awaitable[StaffMember]]
ShiftFactory = Callable[..., Awaitable[ShiftRecord]]


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory database per test, with foreign keys enforced."""
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_identity_service() -> Iterator[None]:
    set_identity_service(None)
    yield
    set_identity_service(None)


# ---------------------------------------------------------------------------
# Record factories (write rows directly, no dispatch)
# ---------------------------------------------------------------------------


@pytest.fixture
def make_staff(db_session: AsyncSession) -> StaffFactory:
    async def _make(name: str = "Alex", **fields: Any) -> StaffMember:
        fields.setdefault("contracted_hours", 24.0)
        staff = StaffMember(name=name, **fields)
        db_session.add(staff)
        await db_session.flush()
        return staff

    return _make


@pytest.fixture
def make_shift(db_session: AsyncSession) -> ShiftFactory:
    async def _make(
        staff: StaffMember,
        start_at: datetime,
        hours: float = 12.0,
        shift_type: ShiftType = ShiftType.DAY,
        **fields: Any,
    ) -> ShiftRecord:
        shift = ShiftRecord(
            staff_id=staff.id,
            start_at=start_at,
            end_at=start_at + timedelta(hours=hours),
            shift_type=shift_type.value,
            **fields,
        )
        db_session.add(shift)
        await db_session.flush()
        return shift

    return _make
