from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.db.models import IndividualShift, ShiftOption, StaffingRequirement
from dispatch_scheduler.schemas.shift import (
    IndividualShiftCreate,
    ShiftOptionCreate,
    StaffingRequirementCreate,
)


async def list_shift_options(session: AsyncSession) -> list[ShiftOption]:
    result = await session.execute(select(ShiftOption).order_by(ShiftOption.id))
    return list(result.scalars().all())


async def create_shift_option(session: AsyncSession, payload: ShiftOptionCreate) -> ShiftOption:
    option = ShiftOption(**payload.model_dump())
    session.add(option)
    await session.flush()
    await session.refresh(option)
    return option


async def list_staffing_requirements(session: AsyncSession) -> list[StaffingRequirement]:
    result = await session.execute(select(StaffingRequirement).order_by(StaffingRequirement.id))
    return list(result.scalars().all())


async def create_staffing_requirement(
    session: AsyncSession, payload: StaffingRequirementCreate
) -> StaffingRequirement:
    requirement = StaffingRequirement(**payload.model_dump())
    session.add(requirement)
    await session.flush()
    await session.refresh(requirement)
    return requirement


async def list_individual_shifts(
    session: AsyncSession,
    *,
    start_date: date | None = None,
    end_date: date | None = None,
    employee_id: int | None = None,
) -> list[IndividualShift]:
    query = select(IndividualShift)
    if start_date:
        query = query.where(IndividualShift.date >= start_date)
    if end_date:
        query = query.where(IndividualShift.date <= end_date)
    if employee_id is not None:
        query = query.where(IndividualShift.employee_id == employee_id)
    result = await session.execute(query.order_by(IndividualShift.date, IndividualShift.id))
    return list(result.scalars().all())


async def create_individual_shift(session: AsyncSession, payload: IndividualShiftCreate) -> IndividualShift:
    shift = IndividualShift(**payload.model_dump())
    session.add(shift)
    await session.flush()
    await session.refresh(shift)
    return shift


async def get_shift_option(session: AsyncSession, option_id: int) -> ShiftOption | None:
    return await session.get(ShiftOption, option_id)
