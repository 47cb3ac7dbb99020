from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dispatch_scheduler.db.base import Base

if TYPE_CHECKING:
    from dispatch_scheduler.db.models.employee import Employee


class ShiftOption(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    category: Mapped[str] = mapped_column(String(16), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration_hours: Mapped[float] = mapped_column(Numeric(4, 2), nullable=False)


class StaffingRequirement(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, default="Coverage block")
    time_block_start: Mapped[str] = mapped_column(String(5), nullable=False)
    time_block_end: Mapped[str] = mapped_column(String(5), nullable=False)
    min_total_staff: Mapped[int] = mapped_column(Integer, nullable=False)
    min_supervisors: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_holiday: Mapped[Optional[bool]] = mapped_column(Boolean)
    day_of_week: Mapped[Optional[int]] = mapped_column(Integer)
    start_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    end_date: Mapped[Optional[dt.date]] = mapped_column(Date)


class IndividualShift(Base):
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "date", "shift_option_id", name="uq_individualshift_employee_date_option"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employee.id", ondelete="CASCADE"), index=True)
    shift_option_id: Mapped[int] = mapped_column(ForeignKey("shiftoption.id"), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="scheduled")
    score: Mapped[Optional[float]] = mapped_column(Numeric(5, 4))
    is_overtime: Mapped[bool] = mapped_column(Boolean, default=False)
    is_regular_schedule: Mapped[bool] = mapped_column(Boolean, default=True)
    overtime_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=sa.func.now(), nullable=False)

    employee: Mapped["Employee"] = relationship(back_populates="shifts")
    shift_option: Mapped[ShiftOption] = relationship()
