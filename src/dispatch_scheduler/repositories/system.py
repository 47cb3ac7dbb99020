from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.db.models import Holiday, StaffingAlert
from dispatch_scheduler.schemas.system import HolidayCreate


async def list_holidays(
    session: AsyncSession, *, start_date: date | None = None, end_date: date | None = None
) -> list[Holiday]:
    query = select(Holiday)
    if start_date:
        query = query.where(Holiday.date >= start_date)
    if end_date:
        query = query.where(Holiday.date <= end_date)
    result = await session.execute(query.order_by(Holiday.date))
    return list(result.scalars().all())


async def create_holiday(session: AsyncSession, payload: HolidayCreate) -> Holiday:
    holiday = Holiday(**payload.model_dump())
    session.add(holiday)
    await session.flush()
    await session.refresh(holiday)
    return holiday


async def list_staffing_alerts(
    session: AsyncSession, *, status: str | None = None
) -> list[StaffingAlert]:
    query = select(StaffingAlert)
    if status:
        query = query.where(StaffingAlert.status == status)
    result = await session.execute(query.order_by(StaffingAlert.date, StaffingAlert.id))
    return list(result.scalars().all())
