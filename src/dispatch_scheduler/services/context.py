"""Immutable snapshot of everything a generation run reads."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Iterable, Optional, Sequence

from dispatch_scheduler.schemas.changes import (
    EmployeeChange,
    HolidayChange,
    IndividualShiftChange,
    ShiftOptionChange,
    StaffingRequirementChange,
    TableChange,
    TimeOffRequestChange,
)
from dispatch_scheduler.services.domain import (
    HolidayDate,
    ScheduledShift,
    SchedulingEmployee,
    SchedulingRequirement,
    SchedulingShiftOption,
    TimeOffWindow,
    covers_block,
    iter_days,
    parse_time_string,
)
from dispatch_scheduler.services.errors import (
    InvalidPatternError,
    InvalidPeriodError,
    MissingReferenceDataError,
)
from dispatch_scheduler.services.patterns import PatternCatalog
from dispatch_scheduler.services.rules import RuleSet, load_default_rules

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationParams:
    start_date: date
    end_date: date
    allow_overtime: bool = False


@dataclass(frozen=True)
class ReferenceData:
    """Reference rows loaded in one batch before a run starts."""

    employees: tuple[SchedulingEmployee, ...] = ()
    shift_options: tuple[SchedulingShiftOption, ...] = ()
    requirements: tuple[SchedulingRequirement, ...] = ()
    time_off: tuple[TimeOffWindow, ...] = ()
    holidays: tuple[HolidayDate, ...] = ()
    existing_shifts: tuple[ScheduledShift, ...] = ()


@dataclass(frozen=True)
class GenerationContext:
    params: GenerationParams
    reference: ReferenceData
    rule_set: RuleSet
    catalog: PatternCatalog
    holiday_dates: frozenset[date] = field(default_factory=frozenset)
    options_by_requirement: dict[int, tuple[SchedulingShiftOption, ...]] = field(default_factory=dict)

    @property
    def employees(self) -> tuple[SchedulingEmployee, ...]:
        return self.reference.employees

    @property
    def allow_overtime(self) -> bool:
        return self.params.allow_overtime

    def days(self) -> Iterable[date]:
        return iter_days(self.params.start_date, self.params.end_date)

    def is_holiday(self, day: date) -> bool:
        return day in self.holiday_dates

    def requirements_for(self, day: date) -> list[SchedulingRequirement]:
        """Requirements demanding coverage on *day*, ordered by block start then id."""

        holiday = self.is_holiday(day)
        applicable = [req for req in self.reference.requirements if req.applies_to(day, holiday)]
        return sorted(applicable, key=lambda req: (parse_time_string(req.time_block_start), req.id))

    def options_for(self, requirement: SchedulingRequirement) -> tuple[SchedulingShiftOption, ...]:
        return self.options_by_requirement.get(requirement.id, ())

    def is_on_time_off(self, employee_id: int, day: date) -> bool:
        return any(window.employee_id == employee_id and window.covers(day) for window in self.reference.time_off)


def validate_period(start_date: date, end_date: date, rule_set: Optional[RuleSet] = None) -> None:
    rule_set = rule_set or load_default_rules()
    if start_date > end_date:
        raise InvalidPeriodError(f"Start date {start_date} is after end date {end_date}")
    max_days = rule_set.rules.working_time.max_period_days
    if (end_date - start_date).days + 1 > max_days:
        raise InvalidPeriodError(f"Scheduling period cannot exceed {max_days} days")


def matching_options(
    requirement: SchedulingRequirement, shift_options: Sequence[SchedulingShiftOption]
) -> tuple[SchedulingShiftOption, ...]:
    """Options whose window fully covers the requirement's time block, ordered by id."""

    return tuple(
        option
        for option in sorted(shift_options, key=lambda item: item.id)
        if covers_block(option.start_time, option.end_time, requirement.time_block_start, requirement.time_block_end)
    )


def build_generation_context(
    params: GenerationParams,
    reference: ReferenceData,
    rule_set: Optional[RuleSet] = None,
) -> GenerationContext:
    """Validate the inputs of a run and freeze them into a context."""

    rule_set = rule_set or load_default_rules()
    validate_period(params.start_date, params.end_date, rule_set)

    missing = [
        label
        for label, rows in (
            ("employees", reference.employees),
            ("shift options", reference.shift_options),
            ("staffing requirements", reference.requirements),
        )
        if not rows
    ]
    if missing:
        raise MissingReferenceDataError(f"Missing required data: {', '.join(missing)}")

    catalog = PatternCatalog.from_rules(rule_set)
    for employee in reference.employees:
        try:
            catalog.get(employee.shift_pattern)
        except InvalidPatternError as exc:
            raise InvalidPatternError(f"Employee {employee.id}: {exc}") from exc

    options_by_requirement = {
        requirement.id: matching_options(requirement, reference.shift_options) for requirement in reference.requirements
    }
    for requirement_id, options in options_by_requirement.items():
        if not options:
            logger.warning("No shift option covers staffing requirement %s", requirement_id)

    return GenerationContext(
        params=params,
        reference=reference,
        rule_set=rule_set,
        catalog=catalog,
        holiday_dates=frozenset(holiday.date for holiday in reference.holidays),
        options_by_requirement=options_by_requirement,
    )


def _value(raw: Any) -> Any:
    return raw.value if isinstance(raw, Enum) else raw


def employee_from_record(record: Any) -> SchedulingEmployee:
    return SchedulingEmployee(
        id=record.id,
        name=record.name,
        role=_value(record.role),
        shift_pattern=record.shift_pattern,
        weekly_hours_cap=float(record.weekly_hours_cap),
        max_overtime_hours=float(record.max_overtime_hours or 0),
        preferred_shift_category=record.preferred_shift_category,
        consecutive_shifts_count=record.consecutive_shifts_count or 0,
        total_hours_current_week=float(record.total_hours_current_week or 0),
        last_shift_end=record.last_shift_end,
    )


def shift_option_from_record(record: Any) -> SchedulingShiftOption:
    return SchedulingShiftOption(
        id=record.id,
        name=record.name,
        category=record.category,
        start_time=record.start_time,
        end_time=record.end_time,
        duration_hours=float(record.duration_hours),
    )


def requirement_from_record(record: Any) -> SchedulingRequirement:
    return SchedulingRequirement(
        id=record.id,
        name=record.name,
        time_block_start=record.time_block_start,
        time_block_end=record.time_block_end,
        min_total_staff=record.min_total_staff,
        min_supervisors=record.min_supervisors or 0,
        is_holiday=record.is_holiday,
        day_of_week=record.day_of_week,
        start_date=record.start_date,
        end_date=record.end_date,
    )


def time_off_from_record(record: Any) -> TimeOffWindow:
    return TimeOffWindow(
        id=record.id,
        employee_id=record.employee_id,
        start_date=record.start_date,
        end_date=record.end_date,
        status=_value(record.status),
    )


def holiday_from_record(record: Any) -> HolidayDate:
    return HolidayDate(id=record.id, date=record.date, name=record.name, is_observed=record.is_observed)


def scheduled_shift_from_record(record: Any, option: SchedulingShiftOption) -> ScheduledShift:
    return ScheduledShift(
        id=record.id,
        employee_id=record.employee_id,
        shift_option_id=record.shift_option_id,
        date=record.date,
        start_time=option.start_time,
        end_time=option.end_time,
        duration_hours=option.duration_hours,
        category=option.category,
        status=record.status,
        score=float(record.score) if record.score is not None else None,
        is_overtime=bool(record.is_overtime),
        is_regular_schedule=bool(record.is_regular_schedule),
        overtime_approved=bool(record.overtime_approved),
    )


def _upsert(rows: tuple, record_id: int, replacement: Any = None) -> tuple:
    kept = [row for row in rows if row.id != record_id]
    if replacement is not None:
        kept.append(replacement)
    return tuple(sorted(kept, key=lambda row: (row.id is None, row.id or 0)))


def apply_change(reference: ReferenceData, change: TableChange) -> ReferenceData:
    """Return a copy of *reference* with one row-level change applied."""

    record = change.record if change.event != "delete" else None

    if isinstance(change, EmployeeChange):
        new_row = employee_from_record(record) if record else None
        return replace(reference, employees=_upsert(reference.employees, change.record_id, new_row))
    if isinstance(change, ShiftOptionChange):
        new_row = shift_option_from_record(record) if record else None
        return replace(reference, shift_options=_upsert(reference.shift_options, change.record_id, new_row))
    if isinstance(change, StaffingRequirementChange):
        new_row = requirement_from_record(record) if record else None
        return replace(reference, requirements=_upsert(reference.requirements, change.record_id, new_row))
    if isinstance(change, TimeOffRequestChange):
        new_row = time_off_from_record(record) if record else None
        return replace(reference, time_off=_upsert(reference.time_off, change.record_id, new_row))
    if isinstance(change, HolidayChange):
        new_row = holiday_from_record(record) if record else None
        return replace(reference, holidays=_upsert(reference.holidays, change.record_id, new_row))
    if isinstance(change, IndividualShiftChange):
        new_row = None
        if record:
            option = next((opt for opt in reference.shift_options if opt.id == record.shift_option_id), None)
            if option is None:
                raise MissingReferenceDataError(f"Shift option {record.shift_option_id} is not loaded")
            new_row = scheduled_shift_from_record(record, option)
        return replace(reference, existing_shifts=_upsert(reference.existing_shifts, change.record_id, new_row))
    raise TypeError(f"Unsupported change payload: {type(change).__name__}")
