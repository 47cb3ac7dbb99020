from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.db.session import get_db_session
from dispatch_scheduler.repositories import employee as employee_repo
from dispatch_scheduler.repositories import shift as shift_repo
from dispatch_scheduler.schemas.employee import (
    EmployeeCreate,
    EmployeeRead,
    EmployeeUpdate,
    TimeOffRequestCreate,
    TimeOffRequestRead,
)
from dispatch_scheduler.schemas.scheduling import TimeOffRequestWithConflicts
from dispatch_scheduler.schemas.shift import IndividualShiftRead
from dispatch_scheduler.services.conflicts import time_off_conflicts
from dispatch_scheduler.services.context import (
    scheduled_shift_from_record,
    shift_option_from_record,
    time_off_from_record,
)

router = APIRouter()


@router.get("/", response_model=list[EmployeeRead])
async def list_employees(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[EmployeeRead]:
    employees = await employee_repo.list_employees(session)
    return [EmployeeRead.model_validate(employee) for employee in employees]


@router.post("/", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: EmployeeCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> EmployeeRead:
    employee = await employee_repo.create_employee(session, payload)
    await session.commit()
    await session.refresh(employee)
    return EmployeeRead.model_validate(employee)


@router.put("/{employee_id}", response_model=EmployeeRead)
async def update_employee(
    employee_id: int,
    payload: EmployeeUpdate,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> EmployeeRead:
    employee = await employee_repo.get_employee(session, employee_id)
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    employee = await employee_repo.update_employee(session, employee, payload)
    await session.commit()
    await session.refresh(employee)
    return EmployeeRead.model_validate(employee)


@router.get("/time-off", response_model=list[TimeOffRequestRead])
async def list_time_off(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[TimeOffRequestRead]:
    requests = await employee_repo.list_time_off(session)
    return [TimeOffRequestRead.model_validate(item) for item in requests]


@router.post("/time-off", response_model=TimeOffRequestWithConflicts, status_code=status.HTTP_201_CREATED)
async def create_time_off(
    payload: TimeOffRequestCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> TimeOffRequestWithConflicts:
    employee = await employee_repo.get_employee(session, payload.employee_id)
    if not employee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    request = await employee_repo.create_time_off(session, payload)
    await session.commit()

    options = {option.id: shift_option_from_record(option) for option in await shift_repo.list_shift_options(session)}
    rows = await shift_repo.list_individual_shifts(
        session, start_date=request.start_date, end_date=request.end_date, employee_id=request.employee_id
    )
    booked = [scheduled_shift_from_record(row, options[row.shift_option_id]) for row in rows]
    clashing = {shift.id for shift in time_off_conflicts(time_off_from_record(request), booked)}
    return TimeOffRequestWithConflicts(
        **TimeOffRequestRead.model_validate(request).model_dump(),
        conflicting_shifts=[IndividualShiftRead.model_validate(row) for row in rows if row.id in clashing],
    )
