# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Protocol, runtime_checkable

from rota.config import get_settings


@runtime_checkable
class IdentityService(Protocol):
    """Interface for assigning stable identifiers from natural keys."""

    def staff_id(self, name: str) -> uuid.UUID:
        """Identifier of the staff member with this display name."""
        ...

    def entitlement_id(self, staff_id: uuid.UUID, year_start: date) -> uuid.UUID:
        """Identifier of the entitlement row for one staff member and holiday year."""
        ...

    def change_id(self, staff_id: uuid.UUID, category: str, recorded_at: datetime) -> uuid.UUID:
        """Identifier of a change ledger entry."""
        ...

    def shift_id(self, staff_id: uuid.UUID, start_at: datetime, shift_type: str) -> uuid.UUID:
        """Identifier of a shift record."""
        ...


class DeterministicIdentityService:
    """UUIDv5 over ``<table>:<natural key>`` seeds.

    The same natural key yields the same id on every independently populated store.
    """

    def __init__(self, namespace: uuid.UUID | None = None) -> None:
        self._namespace = namespace or get_settings().identity_namespace

    def _uuid(self, seed: str) -> uuid.UUID:
        return uuid.uuid5(self._namespace, seed)

    def staff_id(self, name: str) -> uuid.UUID:
        return self._uuid(f"human_resource:{name.strip()}")

    def entitlement_id(self, staff_id: uuid.UUID, year_start: date) -> uuid.UUID:
        return self._uuid(f"holiday_entitlement:{staff_id}:{year_start.isoformat()}")

    def change_id(self, staff_id: uuid.UUID, category: str, recorded_at: datetime) -> uuid.UUID:
        return self._uuid(f"change_request:{staff_id}:{category}:{recorded_at.isoformat()}")

    def shift_id(self, staff_id: uuid.UUID, start_at: datetime, shift_type: str) -> uuid.UUID:
        return self._uuid(f"shift:{staff_id}:{start_at.isoformat()}:{shift_type}")


_identity_service: IdentityService | None = None


def get_identity_service() -> IdentityService:
    """Return the active identity service, creating the default on first call."""
    global _identity_service
    if _identity_service is None:
        _identity_service = DeterministicIdentityService()
    return _identity_service


def set_identity_service(service: IdentityService | None) -> None:
    """Override the service (for testing or production wiring). ``None`` restores the default."""
    global _identity_service
    _identity_service = service
