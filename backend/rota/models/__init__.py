from sqlmodel import SQLModel

from rota.models.base import TimestampMixin, UUIDBase
from rota.models.change import ChangeLedgerEntry
from rota.models.entitlement import HolidayEntitlement
from rota.models.enums import ChangeCategory, RenewalAction, ShiftType, StaffRole
from rota.models.shift import ShiftRecord
from rota.models.staff import StaffMember

__all__ = [
    "ChangeCategory",
    "ChangeLedgerEntry",
    "HolidayEntitlement",
    "RenewalAction",
    "SQLModel",
    "ShiftRecord",
    "ShiftType",
    "StaffMember",
    "StaffRole",
    "TimestampMixin",
    "UUIDBase",
]
