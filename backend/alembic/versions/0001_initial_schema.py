"""Initial schema: staff, shifts, change ledger, holiday entitlements.

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "staff_member",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), server_default="MEMBER", nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("contracted_hours", sa.Float(), nullable=False),
        sa.Column("pay_rate", sa.Float(), nullable=False),
        sa.Column("employment_start", sa.Date(), nullable=True),
        sa.Column("employment_end", sa.Date(), nullable=True),
        sa.Column("color", sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_staff_member_name"),
        sa.CheckConstraint("contracted_hours >= 0", name="ck_staff_member_contracted_hours"),
    )
    op.create_index("ix_staff_member_is_active", "staff_member", ["is_active"])
    op.create_index("ix_staff_member_role_active", "staff_member", ["role", "is_active"])

    op.create_table(
        "shift_record",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("staff_id", sa.Uuid(), sa.ForeignKey("staff_member.id", ondelete="CASCADE"), nullable=False),
        sa.Column("period_label", sa.String(length=50), nullable=True),
        sa.Column("week_number", sa.Integer(), nullable=True),
        sa.Column("start_at", sa.DateTime(), nullable=False),
        sa.Column("end_at", sa.DateTime(), nullable=False),
        sa.Column("shift_type", sa.String(length=50), nullable=False),
        sa.Column("overtime", sa.Boolean(), nullable=False),
        sa.Column("call_out", sa.Boolean(), nullable=False),
        sa.Column("solo", sa.Boolean(), nullable=False),
        sa.Column("training", sa.Boolean(), nullable=False),
        sa.Column("short_notice", sa.Boolean(), nullable=False),
        sa.Column("payment_period_end", sa.Boolean(), nullable=False),
        sa.Column("year_end", sa.Boolean(), nullable=False),
        sa.Column("notes", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("end_at > start_at", name="ck_shift_record_times"),
    )
    op.create_index("ix_shift_record_staff_id", "shift_record", ["staff_id"])
    op.create_index("ix_shift_record_shift_type", "shift_record", ["shift_type"])
    op.create_index("ix_shift_record_year_end", "shift_record", ["year_end"])
    op.create_index("ix_shift_staff_start", "shift_record", ["staff_id", "start_at"])

    op.create_table(
        "change_ledger_entry",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("staff_id", sa.Uuid(), sa.ForeignKey("staff_member.id", ondelete="CASCADE"), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("old_value", sa.String(), nullable=True),
        sa.Column("new_value", sa.String(), nullable=True),
        sa.Column("effective_from", sa.DateTime(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("author", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
    )
    op.create_index("ix_change_ledger_entry_staff_id", "change_ledger_entry", ["staff_id"])
    op.create_index("ix_change_ledger_entry_effective_from", "change_ledger_entry", ["effective_from"])
    op.create_index(
        "ix_change_staff_category_effective", "change_ledger_entry", ["staff_id", "category", "effective_from"]
    )

    op.create_table(
        "holiday_entitlement",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("staff_id", sa.Uuid(), sa.ForeignKey("staff_member.id", ondelete="CASCADE"), nullable=False),
        sa.Column("year_start", sa.Date(), nullable=False),
        sa.Column("year_end", sa.Date(), nullable=False),
        sa.Column("contracted_hours_per_week", sa.Float(), nullable=False),
        sa.Column("entitlement_days", sa.Float(), nullable=False),
        sa.Column("entitlement_hours", sa.Float(), nullable=False),
        sa.Column("days_taken", sa.Float(), server_default="0", nullable=False),
        sa.Column("hours_taken", sa.Float(), server_default="0", nullable=False),
        sa.Column("is_zero_hours", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("staff_id", "year_start", name="uq_entitlement_staff_year"),
        sa.CheckConstraint("year_end > year_start", name="ck_entitlement_year"),
        sa.CheckConstraint(
            "entitlement_days >= 0 AND entitlement_hours >= 0", name="ck_entitlement_non_negative"
        ),
    )
    op.create_index("ix_holiday_entitlement_staff_id", "holiday_entitlement", ["staff_id"])
    op.create_index("ix_entitlement_year", "holiday_entitlement", ["year_start", "year_end"])


def downgrade() -> None:
    op.drop_table("holiday_entitlement")
    op.drop_table("change_ledger_entry")
    op.drop_table("shift_record")
    op.drop_table("staff_member")
