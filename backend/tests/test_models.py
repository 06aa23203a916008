from __future__ import annotations

import uuid
from datetime import date, datetime

from rota.models import (
    ChangeLedgerEntry,
    HolidayEntitlement,
    ShiftRecord,
    SQLModel,
    StaffMember,
)
from rota.models.enums import StaffRole

EXPECTED_TABLES = {
    "change_ledger_entry",
    "holiday_entitlement",
    "shift_record",
    "staff_member",
}


def test_all_tables_registered() -> None:
    table_names = set(SQLModel.metadata.tables.keys())
    assert EXPECTED_TABLES.issubset(table_names)


def test_staff_member_defaults() -> None:
    staff = StaffMember(name="Alex")
    assert staff.role == StaffRole.MEMBER
    assert staff.is_active is True
    assert staff.contracted_hours == 36.0
    assert staff.employment_start is None
    assert staff.employment_end is None
    assert staff.id is not None


def test_shift_duration_hours() -> None:
    shift = ShiftRecord(
        staff_id=uuid.uuid4(),
        start_at=datetime(2025, 9, 1, 20, 0),
        end_at=datetime(2025, 9, 2, 8, 30),
        shift_type="NIGHT",
    )
    assert shift.duration_hours == 12.5
    assert shift.overtime is False
    assert shift.year_end is False


def test_entitlement_remaining_follows_taken() -> None:
    entitlement = HolidayEntitlement(
        staff_id=uuid.uuid4(),
        year_start=date(2025, 4, 6),
        year_end=date(2026, 4, 5),
        contracted_hours_per_week=36.0,
        entitlement_days=16.8,
        entitlement_hours=201.6,
    )
    assert entitlement.days_taken == 0.0
    assert entitlement.days_remaining == 16.8

    entitlement.days_taken = 2.0
    entitlement.hours_taken = 24.0
    assert entitlement.days_remaining == 16.8 - 2.0
    assert entitlement.hours_remaining == 201.6 - 24.0


def test_change_ledger_entry_defaults() -> None:
    entry = ChangeLedgerEntry(
        staff_id=uuid.uuid4(),
        category="PAY_RATE",
        old_value="10",
        new_value="11",
        effective_from=datetime(2025, 10, 1, 12, 0),
    )
    assert entry.author == "system"
    assert entry.reason is None
    assert entry.recorded_at is not None
