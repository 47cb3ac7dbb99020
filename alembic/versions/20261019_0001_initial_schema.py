"""Initial schema for dispatch scheduling.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    employee_role_enum = sa.Enum("dispatcher", "supervisor", "manager", name="employeerole")
    time_off_status_enum = sa.Enum("pending", "approved", "rejected", name="timeoffstatus")

    op.create_table(
        "employee",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("role", employee_role_enum, nullable=False),
        sa.Column("shift_pattern", sa.String(length=16), nullable=False, server_default=sa.text("'4x10'")),
        sa.Column("preferred_shift_category", sa.String(length=16), nullable=True),
        sa.Column("weekly_hours_cap", sa.Numeric(5, 2), nullable=False, server_default=sa.text("40")),
        sa.Column("max_overtime_hours", sa.Numeric(5, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("consecutive_shifts_count", sa.Integer(), nullable=True, server_default=sa.text("0")),
        sa.Column("total_hours_current_week", sa.Numeric(5, 2), nullable=True, server_default=sa.text("0")),
        sa.Column("last_shift_end", sa.DateTime(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_employee_id", "employee", ["id"])

    op.create_table(
        "timeoffrequest",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Integer(),
            sa.ForeignKey("employee.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", time_off_status_enum, nullable=False, server_default=sa.text("'pending'")),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_timeoffrequest_employee_id", "timeoffrequest", ["employee_id"])

    op.create_table(
        "shiftoption",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("category", sa.String(length=16), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("duration_hours", sa.Numeric(4, 2), nullable=False),
    )

    op.create_table(
        "staffingrequirement",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("time_block_start", sa.String(length=5), nullable=False),
        sa.Column("time_block_end", sa.String(length=5), nullable=False),
        sa.Column("min_total_staff", sa.Integer(), nullable=False),
        sa.Column("min_supervisors", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_holiday", sa.Boolean(), nullable=True),
        sa.Column("day_of_week", sa.Integer(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
    )

    op.create_table(
        "individualshift",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Integer(),
            sa.ForeignKey("employee.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("shift_option_id", sa.Integer(), sa.ForeignKey("shiftoption.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column("score", sa.Numeric(5, 4), nullable=True),
        sa.Column("is_overtime", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_regular_schedule", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("overtime_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("employee_id", "date", "shift_option_id", name="uq_individualshift_employee_date_option"),
    )
    op.create_index("ix_individualshift_id", "individualshift", ["id"])
    op.create_index("ix_individualshift_employee_id", "individualshift", ["employee_id"])
    op.create_index("ix_individualshift_date", "individualshift", ["date"])

    op.create_table(
        "holiday",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("is_observed", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_holiday_date", "holiday", ["date"], unique=True)

    op.create_table(
        "staffingalert",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column(
            "requirement_id",
            sa.Integer(),
            sa.ForeignKey("staffingrequirement.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "alert_type",
            sa.String(length=32),
            nullable=False,
            server_default=sa.text("'UNFILLED_REQUIREMENT'"),
        ),
        sa.Column("status", sa.String(length=16), nullable=False, server_default=sa.text("'OPEN'")),
        sa.Column("staff_shortfall", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("supervisor_shortfall", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_staffingalert_date", "staffingalert", ["date"])


def downgrade() -> None:
    op.drop_index("ix_staffingalert_date", table_name="staffingalert")
    op.drop_table("staffingalert")

    op.drop_index("ix_holiday_date", table_name="holiday")
    op.drop_table("holiday")

    op.drop_index("ix_individualshift_date", table_name="individualshift")
    op.drop_index("ix_individualshift_employee_id", table_name="individualshift")
    op.drop_index("ix_individualshift_id", table_name="individualshift")
    op.drop_table("individualshift")

    op.drop_table("staffingrequirement")
    op.drop_table("shiftoption")

    op.drop_index("ix_timeoffrequest_employee_id", table_name="timeoffrequest")
    op.drop_table("timeoffrequest")

    op.drop_index("ix_employee_id", table_name="employee")
    op.drop_table("employee")

    sa.Enum(name="timeoffstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="employeerole").drop(op.get_bind(), checkfirst=True)
