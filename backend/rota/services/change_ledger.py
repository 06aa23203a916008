"""Change ledger: effective-dated staff attribute edits.

Every attribute edit is written here first. Entries whose effective date has
arrived are applied to the live staff record straight away; future-dated
entries stay pending until the periodic sweep applies them. Entries are never
updated except for author/reason annotation, and may be deleted by an
explicit revert.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from rota.config import get_settings
from rota.exceptions import NotFoundError, ValidationError
from rota.models.base import local_now
from rota.models.change import ChangeLedgerEntry
from rota.models.enums import ChangeCategory, StaffRole
from rota.services.identity import get_identity_service
from rota.services.recalculation import DispatchResult, StaffState, on_staff_changed
from rota.services.staff import get_staff_or_404

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from rota.models.staff import StaffMember

logger = logging.getLogger(__name__)

CATEGORY_FIELDS: dict[ChangeCategory, str] = {
    ChangeCategory.ROLE: "role",
    ChangeCategory.PAY_RATE: "pay_rate",
    ChangeCategory.CONTRACTED_HOURS: "contracted_hours",
    ChangeCategory.EMPLOYMENT_START: "employment_start",
    ChangeCategory.EMPLOYMENT_END: "employment_end",
    ChangeCategory.COLOR: "color",
    ChangeCategory.ACTIVE_STATUS: "is_active",
}

_NUMERIC = {ChangeCategory.PAY_RATE, ChangeCategory.CONTRACTED_HOURS}
_DATES = {ChangeCategory.EMPLOYMENT_START, ChangeCategory.EMPLOYMENT_END}
_NULL_MARKERS = {"", "NULL", "null", "None"}
_TRUE = {"true", "t", "1", "yes", "y"}
_FALSE = {"false", "f", "0", "no", "n"}
_COLOR_RE = re.compile(r"^#(?:[0-9a-f]{3}|[0-9a-f]{6})$")


@dataclass
class RevertResult:
    """Outcome of reverting one ledger entry."""

    entry_id: uuid.UUID
    staff_id: uuid.UUID
    category: ChangeCategory
    reverted: bool
    reverted_value: str | None = None


@dataclass
class ChangeHistory:
    applied: list[ChangeLedgerEntry] = field(default_factory=list)
    pending: list[ChangeLedgerEntry] = field(default_factory=list)


@dataclass
class PendingChangeRunResult:
    """Result of one pending-change sweep."""

    run_at: datetime
    applied: int = 0
    skipped: int = 0
    errors: int = 0


# ---------------------------------------------------------------------------
# Value normalization
# ---------------------------------------------------------------------------


def _to_category(category: ChangeCategory | str) -> ChangeCategory:
    try:
        return ChangeCategory(str(category).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown change category: {category}") from None


def normalize_value(category: ChangeCategory | str, value: object) -> str | None:
    """Canonical text form of ``value`` for ``category``.

    Strings are trimmed, numbers lose insignificant zeros, dates become ISO
    dates and booleans become ``true``/``false``. Empty and ``NULL`` mean no
    value, which only employment dates accept.
    """
    category = _to_category(category)
    if isinstance(value, str):
        value = value.strip()
        if value in _NULL_MARKERS:
            value = None

    if value is None:
        if category in _DATES:
            return None
        raise ValidationError(f"{category} requires a value")

    if category in _NUMERIC:
        if isinstance(value, bool):
            raise ValidationError(f"Invalid number for {category}: {value}")
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"Invalid number for {category}: {value}") from None
        if not number.is_finite() or number < 0:
            raise ValidationError(f"{category} must be a non-negative number")
        return format(number.normalize(), "f")

    if category in _DATES:
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        try:
            return date.fromisoformat(str(value).split("T")[0]).isoformat()
        except ValueError:
            raise ValidationError(f"Invalid date for {category}: {value}") from None

    if category is ChangeCategory.ACTIVE_STATUS:
        if isinstance(value, bool):
            return "true" if value else "false"
        text = str(value).lower()
        if text in _TRUE:
            return "true"
        if text in _FALSE:
            return "false"
        raise ValidationError(f"Invalid boolean for {category}: {value}")

    if category is ChangeCategory.ROLE:
        try:
            return StaffRole(str(value).upper()).value
        except ValueError:
            raise ValidationError(f"Invalid role: {value}") from None

    color = str(value).lower()
    if not _COLOR_RE.match(color):
        raise ValidationError(f"Invalid color: {value}")
    return color


def parse_value(category: ChangeCategory, text: str | None) -> object:
    """Convert canonical text back into the staff attribute's Python type."""
    if text is None:
        return None
    if category in _NUMERIC:
        return float(text)
    if category in _DATES:
        return date.fromisoformat(text)
    if category is ChangeCategory.ACTIVE_STATUS:
        return text == "true"
    return text


def live_value(staff: StaffMember, category: ChangeCategory) -> str | None:
    """Canonical text of the staff member's current value for ``category``."""
    return normalize_value(category, getattr(staff, CATEGORY_FIELDS[category]))


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _get_entry_or_404(session: AsyncSession, entry_id: uuid.UUID) -> ChangeLedgerEntry:
    result = await session.execute(select(ChangeLedgerEntry).where(col(ChangeLedgerEntry.id) == entry_id))
    entry = result.scalar_one_or_none()
    if entry is None:
        raise NotFoundError(f"Change {entry_id} not found")
    return entry


async def _apply_to_staff(
    session: AsyncSession,
    staff: StaffMember,
    category: ChangeCategory,
    value: str | None,
    now: datetime,
) -> DispatchResult:
    """Write ``value`` onto the live staff record and dispatch the recalculation it implies."""
    before = StaffState.from_record(staff)
    setattr(staff, CATEGORY_FIELDS[category], parse_value(category, value))

    if (
        staff.employment_start is not None
        and staff.employment_end is not None
        and staff.employment_end < staff.employment_start
    ):
        raise ValidationError(
            f"Employment end {staff.employment_end} is before employment start {staff.employment_start}"
        )

    await session.flush()
    return await on_staff_changed(session, before, StaffState.from_record(staff), today=now.date(), now=now)


async def _superseded(session: AsyncSession, entry: ChangeLedgerEntry, now: datetime) -> bool:
    """True if a later entry of the same category has already taken effect."""
    result = await session.execute(
        select(col(ChangeLedgerEntry.id))
        .where(
            col(ChangeLedgerEntry.staff_id) == entry.staff_id,
            col(ChangeLedgerEntry.category) == entry.category,
            col(ChangeLedgerEntry.effective_from) > entry.effective_from,
            col(ChangeLedgerEntry.effective_from) <= now,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def record_change(
    session: AsyncSession,
    staff_id: uuid.UUID,
    category: ChangeCategory | str,
    new_value: object,
    *,
    effective_from: datetime | None = None,
    author: str = "system",
    reason: str | None = None,
    now: datetime | None = None,
) -> ChangeLedgerEntry:
    """Record an attribute edit, applying it now if its effective date has arrived.

    Raises ValidationError if the value normalizes to the current live value,
    so no ledger row is written for a no-op.
    """
    if now is None:
        now = local_now()
    if effective_from is None:
        effective_from = now
    category = _to_category(category)

    staff = await get_staff_or_404(session, staff_id, for_update=True)
    normalized = normalize_value(category, new_value)
    current = live_value(staff, category)
    if normalized == current:
        raise ValidationError(f"{category} for {staff.name} is already {current}")

    entry = ChangeLedgerEntry(
        id=get_identity_service().change_id(staff.id, category.value, now),
        staff_id=staff.id,
        category=category.value,
        old_value=current,
        new_value=normalized,
        effective_from=effective_from,
        recorded_at=now,
        author=author,
        reason=reason,
    )
    session.add(entry)
    await session.flush()

    if effective_from <= now:
        await _apply_to_staff(session, staff, category, normalized, now)
    else:
        logger.info("Change %s for staff=%s pending until %s", category, staff.id, effective_from)

    return entry


async def revert_change(
    session: AsyncSession,
    entry_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> RevertResult:
    """Delete a ledger entry, restoring the live value if the entry had taken effect.

    The restored value is the new value of the latest earlier entry of the same
    category that has taken effect, or the deleted entry's old value.
    """
    if now is None:
        now = local_now()

    entry = await _get_entry_or_404(session, entry_id)
    category = ChangeCategory(entry.category)
    result = RevertResult(entry_id=entry.id, staff_id=entry.staff_id, category=category, reverted=False)

    if entry.effective_from > now:
        await session.delete(entry)
        await session.flush()
        return result

    prior = await session.execute(
        select(col(ChangeLedgerEntry.new_value))
        .where(
            col(ChangeLedgerEntry.staff_id) == entry.staff_id,
            col(ChangeLedgerEntry.category) == entry.category,
            col(ChangeLedgerEntry.effective_from) < entry.effective_from,
            col(ChangeLedgerEntry.effective_from) <= now,
            col(ChangeLedgerEntry.id) != entry.id,
        )
        .order_by(col(ChangeLedgerEntry.effective_from).desc())
        .limit(1)
    )
    row = prior.first()
    value = row[0] if row is not None else entry.old_value

    await session.delete(entry)
    await session.flush()

    staff = await get_staff_or_404(session, result.staff_id, for_update=True)
    await _apply_to_staff(session, staff, category, value, now)

    result.reverted = True
    result.reverted_value = value
    logger.info("Reverted %s for staff=%s to %s", category, staff.id, value)
    return result


async def change_history(
    session: AsyncSession,
    staff_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> ChangeHistory:
    """Return a staff member's entries ordered by effective date, split into applied and pending."""
    if now is None:
        now = local_now()
    await get_staff_or_404(session, staff_id)

    result = await session.execute(
        select(ChangeLedgerEntry)
        .where(col(ChangeLedgerEntry.staff_id) == staff_id)
        .order_by(col(ChangeLedgerEntry.effective_from), col(ChangeLedgerEntry.recorded_at))
    )
    history = ChangeHistory()
    for entry in result.scalars().all():
        if entry.effective_from <= now:
            history.applied.append(entry)
        else:
            history.pending.append(entry)
    return history


async def annotate_change(
    session: AsyncSession,
    entry_id: uuid.UUID,
    *,
    author: str | None = None,
    reason: str | None = None,
) -> ChangeLedgerEntry:
    """Edit the author and/or reason of an entry, the only fields that may change after insert."""
    if author is None and reason is None:
        raise ValidationError("Nothing to annotate: supply an author or a reason")

    entry = await _get_entry_or_404(session, entry_id)
    if author is not None:
        entry.author = author
    if reason is not None:
        entry.reason = reason
    await session.flush()
    return entry


async def apply_pending_changes(
    session: AsyncSession,
    now: datetime | None = None,
) -> PendingChangeRunResult:
    """Apply future-dated entries whose effective date has now arrived.

    Only entries that were pending when recorded and became effective within
    the lookback window are considered, oldest first, up to the batch size.
    An entry is skipped when the live value already equals its new value or a
    later entry of the same category has taken effect, so the sweep may run
    any number of times. Each entry commits on its own.
    """
    if now is None:
        now = local_now()
    settings = get_settings()
    result = PendingChangeRunResult(run_at=now)

    due = await session.execute(
        select(col(ChangeLedgerEntry.id))
        .where(
            col(ChangeLedgerEntry.effective_from) <= now,
            col(ChangeLedgerEntry.effective_from) > now - timedelta(days=settings.pending_change_lookback_days),
            col(ChangeLedgerEntry.recorded_at) < col(ChangeLedgerEntry.effective_from),
        )
        .order_by(col(ChangeLedgerEntry.effective_from))
        .limit(settings.pending_change_batch_size)
    )
    entry_ids = list(due.scalars().all())

    for entry_id in entry_ids:
        try:
            entry = await _get_entry_or_404(session, entry_id)
            category = ChangeCategory(entry.category)
            staff = await get_staff_or_404(session, entry.staff_id, for_update=True)

            if live_value(staff, category) == entry.new_value or await _superseded(session, entry, now):
                result.skipped += 1
                continue

            await _apply_to_staff(session, staff, category, entry.new_value, now)
            await session.commit()
            result.applied += 1
        except Exception:
            await session.rollback()
            logger.exception("Applying pending change %s failed", entry_id)
            result.errors += 1

    if result.applied or result.errors:
        logger.info(
            "Pending change sweep at %s: applied=%d skipped=%d errors=%d",
            now,
            result.applied,
            result.skipped,
            result.errors,
        )
    return result
