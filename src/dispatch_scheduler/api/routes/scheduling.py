from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.core.config import Settings, get_settings
from dispatch_scheduler.db.session import get_db_session
from dispatch_scheduler.repositories import employee as employee_repo
from dispatch_scheduler.repositories import shift as shift_repo
from dispatch_scheduler.repositories.scheduling import SqlAlchemySchedulingStore
from dispatch_scheduler.schemas.scheduling import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    CoverageGapRead,
    GeneratedShiftRead,
    RunSummaryRead,
    ScheduleGenerationRequest,
    ScheduleGenerationResponse,
    ScheduleValidationRequest,
    ScheduleValidationResponse,
    ShiftConflictRead,
    UnfilledRequirementRead,
    ValidationIssueRead,
)
from dispatch_scheduler.services.conflicts import check_shift_conflicts, resolve_conflicts
from dispatch_scheduler.services.context import (
    GenerationParams,
    employee_from_record,
    scheduled_shift_from_record,
    shift_option_from_record,
)
from dispatch_scheduler.services.domain import ScheduledShift
from dispatch_scheduler.services.errors import (
    InvalidPatternError,
    InvalidPeriodError,
    MissingReferenceDataError,
    PersistenceError,
)
from dispatch_scheduler.services.generation import run_schedule_generation
from dispatch_scheduler.services.validation import check_staffing_coverage, validate_schedule

router = APIRouter()


@router.post("/generate", response_model=ScheduleGenerationResponse)
async def generate_schedule(
    payload: ScheduleGenerationRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ScheduleGenerationResponse:
    allow_overtime = payload.allow_overtime
    if allow_overtime is None:
        allow_overtime = settings.default_allow_overtime
    params = GenerationParams(
        start_date=payload.start_date,
        end_date=payload.end_date,
        allow_overtime=allow_overtime,
    )
    try:
        result = await run_schedule_generation(SqlAlchemySchedulingStore(session), params)
    except (InvalidPeriodError, InvalidPatternError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except MissingReferenceDataError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except PersistenceError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    return ScheduleGenerationResponse(
        summary=RunSummaryRead.model_validate(result.summary),
        shifts=[GeneratedShiftRead.model_validate(shift) for shift in result.shifts],
        alerts=[UnfilledRequirementRead.model_validate(alert) for alert in result.alerts],
    )


@router.post("/validate", response_model=ScheduleValidationResponse)
async def validate_stored_schedule(
    payload: ScheduleValidationRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ScheduleValidationResponse:
    reference = await SqlAlchemySchedulingStore(session).load_reference_data(payload.start_date, payload.end_date)
    shifts = [
        shift for shift in reference.existing_shifts if payload.start_date <= shift.date <= payload.end_date
    ]
    result = validate_schedule(shifts, employees=reference.employees, time_off=reference.time_off)
    gaps = check_staffing_coverage(
        shifts,
        reference.requirements,
        reference.employees,
        payload.start_date,
        payload.end_date,
        holiday_dates=[holiday.date for holiday in reference.holidays],
    )
    return ScheduleValidationResponse(
        is_valid=result.is_valid,
        errors=[ValidationIssueRead.model_validate(issue) for issue in result.errors],
        coverage_gaps=[CoverageGapRead.model_validate(gap) for gap in gaps],
    )


@router.post("/conflicts", response_model=ConflictCheckResponse)
async def check_conflicts(
    payload: ConflictCheckRequest,
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ConflictCheckResponse:
    employee_row = await employee_repo.get_employee(session, payload.employee_id)
    if not employee_row:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Employee not found")
    options = {option.id: shift_option_from_record(option) for option in await shift_repo.list_shift_options(session)}
    option = options.get(payload.shift_option_id)
    if option is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shift option not found")

    rows = await shift_repo.list_individual_shifts(
        session,
        start_date=payload.date - timedelta(days=7),
        end_date=payload.date + timedelta(days=7),
        employee_id=payload.employee_id,
    )
    existing = [
        scheduled_shift_from_record(row, options[row.shift_option_id])
        for row in rows
        if row.shift_option_id in options and row.id != payload.exclude_shift_id
    ]
    candidate = ScheduledShift(
        employee_id=payload.employee_id,
        shift_option_id=option.id,
        date=payload.date,
        start_time=option.start_time,
        end_time=option.end_time,
        duration_hours=option.duration_hours,
        category=option.category,
    )
    try:
        conflicts = check_shift_conflicts(employee_from_record(employee_row), candidate, existing)
    except InvalidPatternError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    resolution = resolve_conflicts(conflicts)
    return ConflictCheckResponse(
        conflicts=[
            ShiftConflictRead(
                type=conflict.type.value,
                message=conflict.message,
                conflicting_shift_ids=list(conflict.conflicting_shift_ids),
            )
            for conflict in conflicts
        ],
        can_proceed=resolution.can_proceed,
        requires_override=resolution.requires_override,
        message=resolution.message,
    )
