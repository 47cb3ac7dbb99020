from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from dispatch_scheduler.db.base import Base


class Holiday(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    is_observed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class StaffingAlert(Base):
    id: Mapped[int] = mapped_column(primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    requirement_id: Mapped[int] = mapped_column(ForeignKey("staffingrequirement.id", ondelete="CASCADE"))
    alert_type: Mapped[str] = mapped_column(String(32), default="UNFILLED_REQUIREMENT", nullable=False)
    status: Mapped[str] = mapped_column(String(16), default="OPEN", nullable=False)
    staff_shortfall: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    supervisor_shortfall: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
