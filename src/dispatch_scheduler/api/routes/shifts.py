from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.db.session import get_db_session
from dispatch_scheduler.repositories import employee as employee_repo
from dispatch_scheduler.repositories import shift as shift_repo
from dispatch_scheduler.schemas.shift import (
    IndividualShiftCreate,
    IndividualShiftRead,
    ShiftOptionCreate,
    ShiftOptionRead,
    StaffingRequirementCreate,
    StaffingRequirementRead,
)

router = APIRouter()


@router.get("/options", response_model=list[ShiftOptionRead])
async def list_shift_options(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[ShiftOptionRead]:
    options = await shift_repo.list_shift_options(session)
    return [ShiftOptionRead.model_validate(option) for option in options]


@router.post("/options", response_model=ShiftOptionRead, status_code=status.HTTP_201_CREATED)
async def create_shift_option(
    payload: ShiftOptionCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> ShiftOptionRead:
    option = await shift_repo.create_shift_option(session, payload)
    await session.commit()
    return ShiftOptionRead.model_validate(option)


@router.get("/requirements", response_model=list[StaffingRequirementRead])
async def list_staffing_requirements(
    session: Annotated[AsyncSession, Depends(get_db_session)]
) -> list[StaffingRequirementRead]:
    requirements = await shift_repo.list_staffing_requirements(session)
    return [StaffingRequirementRead.model_validate(item) for item in requirements]


@router.post("/requirements", response_model=StaffingRequirementRead, status_code=status.HTTP_201_CREATED)
async def create_staffing_requirement(
    payload: StaffingRequirementCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> StaffingRequirementRead:
    requirement = await shift_repo.create_staffing_requirement(session, payload)
    await session.commit()
    return StaffingRequirementRead.model_validate(requirement)


@router.get("/", response_model=list[IndividualShiftRead])
async def list_individual_shifts(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    start_date: Annotated[date | None, Query()] = None,
    end_date: Annotated[date | None, Query()] = None,
    employee_id: Annotated[int | None, Query()] = None,
) -> list[IndividualShiftRead]:
    shifts = await shift_repo.list_individual_shifts(
        session, start_date=start_date, end_date=end_date, employee_id=employee_id
    )
    return [IndividualShiftRead.model_validate(shift) for shift in shifts]


@router.post("/", response_model=IndividualShiftRead, status_code=status.HTTP_201_CREATED)
async def create_individual_shift(
    payload: IndividualShiftCreate, session: Annotated[AsyncSession, Depends(get_db_session)]
) -> IndividualShiftRead:
    if not await employee_repo.get_employee(session, payload.employee_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    if not await shift_repo.get_shift_option(session, payload.shift_option_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift option not found")
    booked = await shift_repo.list_individual_shifts(
        session, start_date=payload.date, end_date=payload.date, employee_id=payload.employee_id
    )
    if any(row.shift_option_id == payload.shift_option_id for row in booked):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Shift already booked for this employee and date")
    shift = await shift_repo.create_individual_shift(session, payload)
    await session.commit()
    return IndividualShiftRead.model_validate(shift)
