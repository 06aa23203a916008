from __future__ import annotations

import uuid
from datetime import date, datetime

from rota.services.identity import (
    DeterministicIdentityService,
    IdentityService,
    get_identity_service,
    set_identity_service,
)

NAMESPACE = uuid.UUID("12345678-1234-5678-1234-567812345678")


def test_same_key_same_id_across_instances() -> None:
    first = DeterministicIdentityService(NAMESPACE)
    second = DeterministicIdentityService(NAMESPACE)
    staff_id = first.staff_id("Alex")

    assert second.staff_id("Alex") == staff_id
    assert second.staff_id("  Alex ") == staff_id
    assert first.entitlement_id(staff_id, date(2025, 4, 6)) == second.entitlement_id(staff_id, date(2025, 4, 6))


def test_different_keys_differ() -> None:
    service = DeterministicIdentityService(NAMESPACE)
    staff_id = service.staff_id("Alex")
    recorded = datetime(2025, 10, 1, 12, 0)

    assert service.staff_id("Sam") != staff_id
    assert service.entitlement_id(staff_id, date(2025, 4, 6)) != service.entitlement_id(staff_id, date(2026, 4, 6))
    assert service.change_id(staff_id, "PAY_RATE", recorded) != service.change_id(staff_id, "ROLE", recorded)
    assert service.shift_id(staff_id, recorded, "DAY") != service.shift_id(staff_id, recorded, "NIGHT")


def test_namespace_changes_ids() -> None:
    assert DeterministicIdentityService(NAMESPACE).staff_id("Alex") != DeterministicIdentityService().staff_id("Alex")


def test_ids_are_uuid5() -> None:
    assert DeterministicIdentityService(NAMESPACE).staff_id("Alex").version == 5


class _FixedIdentityService:
    def __init__(self) -> None:
        self.value = uuid.uuid4()

    def staff_id(self, name: str) -> uuid.UUID:
        return self.value

    def entitlement_id(self, staff_id: uuid.UUID, year_start: date) -> uuid.UUID:
        return self.value

    def change_id(self, staff_id: uuid.UUID, category: str, recorded_at: datetime) -> uuid.UUID:
        return self.value

    def shift_id(self, staff_id: uuid.UUID, start_at: datetime, shift_type: str) -> uuid.UUID:
        return self.value


def test_override_and_restore() -> None:
    fixed = _FixedIdentityService()
    assert isinstance(fixed, IdentityService)

    set_identity_service(fixed)
    assert get_identity_service().staff_id("anyone") == fixed.value

    set_identity_service(None)
    assert isinstance(get_identity_service(), DeterministicIdentityService)
