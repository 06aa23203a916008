from __future__ import annotations

import enum


class StaffRole(enum.StrEnum):
    """Position of a staff member on the rota."""

    LEADER = "LEADER"
    MEMBER = "MEMBER"


class ShiftType(enum.StrEnum):
    """Kind of assignment a shift record represents."""

    DAY = "DAY"
    NIGHT = "NIGHT"
    DOUBLE_UP = "DOUBLE_UP"
    HOLIDAY = "HOLIDAY"
    SSP = "SSP"
    CSP = "CSP"


class ChangeCategory(enum.StrEnum):
    """Staff attribute a change ledger entry applies to."""

    ROLE = "ROLE"
    PAY_RATE = "PAY_RATE"
    CONTRACTED_HOURS = "CONTRACTED_HOURS"
    EMPLOYMENT_START = "EMPLOYMENT_START"
    EMPLOYMENT_END = "EMPLOYMENT_END"
    COLOR = "COLOR"
    ACTIVE_STATUS = "ACTIVE_STATUS"


class RenewalAction(enum.StrEnum):
    """Outcome of a year-end renewal check."""

    NO_ACTION = "NO_ACTION"
    ALREADY_RENEWED = "ALREADY_RENEWED"
    RENEWED = "RENEWED"
