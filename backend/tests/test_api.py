"""API tests for staff, shift, entitlement, change and maintenance endpoints.

The endpoints run against the real clock, so shifts are placed on today's
date, which is always inside the active holiday year.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any

import pytest

from rota.models.base import local_now

if TYPE_CHECKING:
    from httpx import AsyncClient


def _today_at(hour: int) -> datetime:
    return local_now().replace(hour=hour, minute=0, second=0, microsecond=0)


async def _create_staff(client: AsyncClient, name: str = "Alex", **fields: Any) -> dict[str, Any]:
    fields.setdefault("contracted_hours", 24.0)
    response = await client.post("/staff", json={"name": name, **fields})
    assert response.status_code == 201, response.text
    return response.json()


async def _create_shift(client: AsyncClient, staff_id: str, **fields: Any) -> dict[str, Any]:
    payload = {
        "staff_id": staff_id,
        "start_at": _today_at(8).isoformat(),
        "end_at": _today_at(20).isoformat(),
        "shift_type": "DAY",
        **fields,
    }
    response = await client.post("/shifts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Staff and entitlements
# ---------------------------------------------------------------------------


async def test_create_staff_creates_entitlement(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)

    response = await async_client.get(f"/staff/{staff['id']}/entitlement")

    assert response.status_code == 200
    data = response.json()
    assert data["staff_id"] == staff["id"]
    assert data["staff_name"] == "Alex"
    assert data["entitlement_days"] == pytest.approx(11.2)
    assert data["days_taken"] == 0.0
    assert data["days_remaining"] == pytest.approx(11.2)


async def test_duplicate_staff_name_rejected(async_client: AsyncClient) -> None:
    await _create_staff(async_client)

    response = await async_client.post("/staff", json={"name": "Alex"})

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


async def test_staff_dates_validated(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/staff",
        json={"name": "Alex", "employment_start": "2025-06-01", "employment_end": "2025-05-01"},
    )

    assert response.status_code == 422
    assert response.json()["error"] == "RequestValidationError"


async def test_list_entitlements(async_client: AsyncClient) -> None:
    await _create_staff(async_client, "Alex")
    await _create_staff(async_client, "Sam", contracted_hours=36.0)
    await _create_staff(async_client, "Jo", is_active=False)

    response = await async_client.get("/entitlements")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [item["staff_name"] for item in data["items"]] == ["Alex", "Sam"]
    assert set(data["year"]) == {"start", "end", "total_days"}


async def test_entitlement_unknown_staff(async_client: AsyncClient) -> None:
    response = await async_client.get(f"/staff/{uuid.uuid4()}/entitlement")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "NotFoundError"
    assert body["status_code"] == 404


async def test_recalculate_endpoint_is_idempotent(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)

    first = await async_client.post(f"/staff/{staff['id']}/entitlement/recalculate")
    second = await async_client.post(f"/staff/{staff['id']}/entitlement/recalculate")

    assert first.status_code == 200
    assert first.json()["entitlement_days"] == second.json()["entitlement_days"]
    assert first.json()["id"] == second.json()["id"]


async def test_delete_staff(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)
    await _create_shift(async_client, staff["id"])

    response = await async_client.delete(f"/staff/{staff['id']}")

    assert response.status_code == 204
    missing = await async_client.get(f"/staff/{staff['id']}/entitlement")
    assert missing.status_code == 404
    listing = await async_client.get("/entitlements")
    assert listing.json()["total"] == 0


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------


async def test_holiday_shift_lifecycle(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)

    shift = await _create_shift(async_client, staff["id"], shift_type="HOLIDAY")
    assert shift["duration_hours"] == 12.0
    after_create = (await async_client.get(f"/staff/{staff['id']}/entitlement")).json()
    assert after_create["days_taken"] == 1.0
    assert after_create["hours_taken"] == 12.0

    moved = await async_client.patch(f"/shifts/{shift['id']}", json={"shift_type": "DAY"})
    assert moved.status_code == 200
    after_update = (await async_client.get(f"/staff/{staff['id']}/entitlement")).json()
    assert after_update["days_taken"] == 0.0

    deleted = await async_client.delete(f"/shifts/{shift['id']}")
    assert deleted.status_code == 204
    assert after_update["entitlement_days"] == after_create["entitlement_days"]


async def test_shift_times_validated(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)

    response = await async_client.post(
        "/shifts",
        json={
            "staff_id": staff["id"],
            "start_at": _today_at(20).isoformat(),
            "end_at": _today_at(8).isoformat(),
            "shift_type": "DAY",
        },
    )

    assert response.status_code == 422


async def test_update_unknown_shift(async_client: AsyncClient) -> None:
    response = await async_client.patch(f"/shifts/{uuid.uuid4()}", json={"notes": "swap"})
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Changes
# ---------------------------------------------------------------------------


async def test_record_change_uses_actor_header(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)

    response = await async_client.post(
        f"/staff/{staff['id']}/changes",
        json={"category": "CONTRACTED_HOURS", "new_value": "36", "reason": "new contract"},
        headers={"X-User-Name": "Manager"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["author"] == "Manager"
    assert data["old_value"] == "24"
    assert data["new_value"] == "36"
    assert data["is_pending"] is False
    entitlement = (await async_client.get(f"/staff/{staff['id']}/entitlement")).json()
    assert entitlement["contracted_hours_per_week"] == 36.0


async def test_duplicate_change_rejected(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)

    response = await async_client.post(
        f"/staff/{staff['id']}/changes",
        json={"category": "CONTRACTED_HOURS", "new_value": "24.0"},
    )

    assert response.status_code == 422
    history = (await async_client.get(f"/staff/{staff['id']}/changes")).json()
    assert history["applied"] == []
    assert history["pending"] == []


async def test_pending_change_history_and_revert(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)
    effective = (local_now() + timedelta(days=3)).replace(microsecond=0)

    recorded = await async_client.post(
        f"/staff/{staff['id']}/changes",
        json={"category": "ROLE", "new_value": "leader", "effective_from": effective.isoformat()},
    )
    assert recorded.status_code == 201
    entry = recorded.json()
    assert entry["is_pending"] is True
    assert entry["author"] == "system"

    history = (await async_client.get(f"/staff/{staff['id']}/changes")).json()
    assert [item["id"] for item in history["pending"]] == [entry["id"]]

    reverted = await async_client.delete(f"/changes/{entry['id']}")
    assert reverted.status_code == 200
    assert reverted.json()["reverted"] is False
    history = (await async_client.get(f"/staff/{staff['id']}/changes")).json()
    assert history["pending"] == []


async def test_annotate_change(async_client: AsyncClient) -> None:
    staff = await _create_staff(async_client)
    recorded = await async_client.post(
        f"/staff/{staff['id']}/changes",
        json={"category": "PAY_RATE", "new_value": "12.50"},
    )
    entry_id = recorded.json()["id"]

    response = await async_client.patch(f"/changes/{entry_id}", json={"reason": "pay award"})

    assert response.status_code == 200
    assert response.json()["reason"] == "pay award"
    assert response.json()["new_value"] == "12.5"
    empty = await async_client.patch(f"/changes/{entry_id}", json={})
    assert empty.status_code == 422


async def test_revert_unknown_change(async_client: AsyncClient) -> None:
    response = await async_client.delete(f"/changes/{uuid.uuid4()}")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Holiday year and maintenance
# ---------------------------------------------------------------------------


async def test_holiday_year_endpoint(async_client: AsyncClient) -> None:
    response = await async_client.get("/holiday-year", params={"today": "2025-10-01"})

    assert response.status_code == 200
    assert response.json() == {"start": "2025-04-06", "end": "2026-04-05", "total_days": 365}


async def test_rollover_endpoint_is_repeatable(async_client: AsyncClient) -> None:
    await _create_staff(async_client)

    first = await async_client.post("/holiday-year/rollover", params={"marker_date": "2030-04-05"})
    second = await async_client.post("/holiday-year/rollover", params={"marker_date": "2030-04-05"})

    assert first.json()["created"] == 1
    assert second.json()["created"] == 0
    assert second.json()["year_start"] == "2030-04-06"


async def test_maintenance_endpoints(async_client: AsyncClient) -> None:
    await _create_staff(async_client)

    cleanup = await async_client.post("/maintenance/cleanup")
    pending = await async_client.post("/maintenance/pending-changes")
    usage = await async_client.post("/maintenance/refresh-usage")

    assert cleanup.status_code == 200
    assert cleanup.json()["created"] == 0
    assert pending.json()["applied"] == 0
    assert usage.json() == {"refreshed": 1, "errors": 0}


async def test_deactivated_staff_make_room_for_new_hire(async_client: AsyncClient) -> None:
    await _create_staff(async_client, "Alex")
    leaver = await _create_staff(async_client, "Sam")

    deactivated = await async_client.post(
        f"/staff/{leaver['id']}/changes",
        json={"category": "active_status", "new_value": "false"},
    )
    assert deactivated.status_code == 201
    assert deactivated.json()["category"] == "ACTIVE_STATUS"

    hire = await async_client.post("/staff", json={"name": "Jo", "contracted_hours": 24.0})

    assert hire.status_code == 201, hire.text
    listing = (await async_client.get("/entitlements")).json()
    assert [item["staff_name"] for item in listing["items"]] == ["Alex", "Jo"]
