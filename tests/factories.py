from datetime import date

from dispatch_scheduler.schemas.employee import EmployeeCreate, TimeOffRequestCreate
from dispatch_scheduler.schemas.shift import ShiftOptionCreate, StaffingRequirementCreate
from dispatch_scheduler.services.context import (
    GenerationContext,
    GenerationParams,
    ReferenceData,
    build_generation_context,
)
from dispatch_scheduler.services.domain import (
    ScheduledShift,
    SchedulingEmployee,
    SchedulingRequirement,
    SchedulingShiftOption,
)

MONDAY = date(2026, 10, 19)


def build_employee_create(**overrides) -> EmployeeCreate:
    data = {
        "name": "Factory Dispatcher",
        "role": "dispatcher",
        "shift_pattern": "4x10",
        "weekly_hours_cap": 40,
        "max_overtime_hours": 0,
    }
    data.update(overrides)
    return EmployeeCreate(**data)


def build_shift_option_create(**overrides) -> ShiftOptionCreate:
    data = {
        "name": "Day 10",
        "category": "day",
        "start_time": "07:00",
        "end_time": "17:00",
        "duration_hours": 10.0,
    }
    data.update(overrides)
    return ShiftOptionCreate(**data)


def build_requirement_create(**overrides) -> StaffingRequirementCreate:
    data = {
        "name": "Day coverage",
        "time_block_start": "08:00",
        "time_block_end": "16:00",
        "min_total_staff": 2,
        "min_supervisors": 1,
    }
    data.update(overrides)
    return StaffingRequirementCreate(**data)


def build_time_off_create(**overrides) -> TimeOffRequestCreate:
    data = {
        "employee_id": 1,
        "start_date": MONDAY,
        "end_date": MONDAY,
        "status": "approved",
    }
    data.update(overrides)
    return TimeOffRequestCreate(**data)


def make_employee(employee_id: int, **overrides) -> SchedulingEmployee:
    data = {"id": employee_id, "role": "dispatcher", "name": f"Employee {employee_id}"}
    data.update(overrides)
    return SchedulingEmployee(**data)


DAY_OPTION = SchedulingShiftOption(
    id=1, category="day", start_time="07:00", end_time="17:00", duration_hours=10.0, name="Day 10"
)
SWING_OPTION = SchedulingShiftOption(
    id=2, category="swing", start_time="15:00", end_time="01:00", duration_hours=10.0, name="Swing 10"
)
GRAVEYARD_OPTION = SchedulingShiftOption(
    id=3, category="graveyard", start_time="21:00", end_time="07:00", duration_hours=10.0, name="Graveyard 10"
)
LONG_DAY_OPTION = SchedulingShiftOption(
    id=4, category="day", start_time="06:00", end_time="18:00", duration_hours=12.0, name="Day 12"
)


def make_requirement(requirement_id: int = 1, **overrides) -> SchedulingRequirement:
    data = {
        "id": requirement_id,
        "time_block_start": "08:00",
        "time_block_end": "16:00",
        "min_total_staff": 2,
        "min_supervisors": 1,
    }
    data.update(overrides)
    return SchedulingRequirement(**data)


def make_shift(employee_id: int, day: date, option: SchedulingShiftOption = DAY_OPTION, **overrides) -> ScheduledShift:
    data = {
        "employee_id": employee_id,
        "shift_option_id": option.id,
        "date": day,
        "start_time": option.start_time,
        "end_time": option.end_time,
        "duration_hours": option.duration_hours,
        "category": option.category,
    }
    data.update(overrides)
    return ScheduledShift(**data)


def make_context(
    *,
    employees=None,
    shift_options=(DAY_OPTION,),
    requirements=None,
    start_date: date = MONDAY,
    end_date: date = MONDAY,
    allow_overtime: bool = False,
    **reference_overrides,
) -> GenerationContext:
    reference = ReferenceData(
        employees=tuple(employees if employees is not None else [make_employee(1)]),
        shift_options=tuple(shift_options),
        requirements=tuple(requirements if requirements is not None else [make_requirement()]),
        **{key: tuple(value) for key, value in reference_overrides.items()},
    )
    params = GenerationParams(start_date=start_date, end_date=end_date, allow_overtime=allow_overtime)
    return build_generation_context(params, reference)
