from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.db.models import Employee, TimeOffRequest
from dispatch_scheduler.schemas.employee import EmployeeCreate, EmployeeUpdate, TimeOffRequestCreate


async def list_employees(session: AsyncSession) -> list[Employee]:
    result = await session.execute(select(Employee).order_by(Employee.id))
    return list(result.scalars().all())


async def create_employee(session: AsyncSession, payload: EmployeeCreate) -> Employee:
    employee = Employee(**payload.model_dump())
    session.add(employee)
    await session.flush()
    await session.refresh(employee)
    return employee


async def get_employee(session: AsyncSession, employee_id: int) -> Employee | None:
    return await session.get(Employee, employee_id)


async def update_employee(session: AsyncSession, employee: Employee, payload: EmployeeUpdate) -> Employee:
    data = payload.model_dump(exclude_unset=True)
    for field, value in data.items():
        setattr(employee, field, value)
    await session.flush()
    await session.refresh(employee)
    return employee


async def list_time_off(
    session: AsyncSession, *, start_date: date | None = None, end_date: date | None = None
) -> list[TimeOffRequest]:
    query = select(TimeOffRequest)
    if start_date:
        query = query.where(TimeOffRequest.end_date >= start_date)
    if end_date:
        query = query.where(TimeOffRequest.start_date <= end_date)
    result = await session.execute(query.order_by(TimeOffRequest.id))
    return list(result.scalars().all())


async def create_time_off(session: AsyncSession, payload: TimeOffRequestCreate) -> TimeOffRequest:
    request = TimeOffRequest(**payload.model_dump())
    session.add(request)
    await session.flush()
    await session.refresh(request)
    return request
