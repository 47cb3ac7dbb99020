from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dispatch_scheduler.db.base import Base

if TYPE_CHECKING:
    from dispatch_scheduler.db.models.shift import IndividualShift


class EmployeeRole(str, Enum):  # type: ignore[call-arg]
    DISPATCHER = "dispatcher"
    SUPERVISOR = "supervisor"
    MANAGER = "manager"


class TimeOffStatus(str, Enum):  # type: ignore[call-arg]
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Employee(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[EmployeeRole] = mapped_column(
        SqlEnum(
            EmployeeRole,
            name="employeerole",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
    )
    shift_pattern: Mapped[str] = mapped_column(String(16), nullable=False, default="4x10")
    preferred_shift_category: Mapped[Optional[str]] = mapped_column(String(16))
    weekly_hours_cap: Mapped[float] = mapped_column(Numeric(5, 2), nullable=False, default=40)
    max_overtime_hours: Mapped[float] = mapped_column(Numeric(5, 2), nullable=False, default=0)
    consecutive_shifts_count: Mapped[int] = mapped_column(Integer, default=0)
    total_hours_current_week: Mapped[float] = mapped_column(Numeric(5, 2), default=0)
    last_shift_end: Mapped[Optional[datetime]] = mapped_column(DateTime)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    shifts: Mapped[list["IndividualShift"]] = relationship(
        back_populates="employee", cascade="all, delete-orphan"
    )
    time_off_requests: Mapped[list["TimeOffRequest"]] = relationship(
        back_populates="employee", cascade="all, delete-orphan"
    )


class TimeOffRequest(Base):
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    employee_id: Mapped[int] = mapped_column(ForeignKey("employee.id", ondelete="CASCADE"), index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[TimeOffStatus] = mapped_column(
        SqlEnum(
            TimeOffStatus,
            name="timeoffstatus",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=TimeOffStatus.PENDING,
    )
    reason: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=sa.func.now(), nullable=False)

    employee: Mapped[Employee] = relationship(back_populates="time_off_requests")
