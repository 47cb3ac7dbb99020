"""Greedy day-by-day assignment of employees to staffing requirements."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from dispatch_scheduler.services.context import GenerationContext
from dispatch_scheduler.services.domain import (
    ScheduledShift,
    SchedulingEmployee,
    SchedulingRequirement,
    SchedulingShiftOption,
)
from dispatch_scheduler.services.scoring import follows_pattern_step, score_assignment
from dispatch_scheduler.services.tracking import (
    TrackingState,
    can_assign,
    initialize_tracking,
    record_assignment,
)

logger = logging.getLogger(__name__)

UNFILLED_REQUIREMENT = "UNFILLED_REQUIREMENT"


@dataclass(frozen=True)
class UnfilledRequirementAlert:
    date: date
    requirement_id: int
    details: str
    staff_shortfall: int = 0
    supervisor_shortfall: int = 0
    alert_type: str = UNFILLED_REQUIREMENT
    status: str = "OPEN"


@dataclass
class RunSummary:
    success: bool = True
    shifts_generated: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SchedulingResult:
    shifts: list[ScheduledShift]
    alerts: list[UnfilledRequirementAlert]
    tracking: TrackingState
    summary: RunSummary


@dataclass(frozen=True)
class _Candidate:
    employee: SchedulingEmployee
    shift_option: SchedulingShiftOption
    score: float

    @property
    def sort_key(self) -> tuple[float, int, int]:
        return (-self.score, self.employee.id, self.shift_option.id)


def _available_employees(
    context: GenerationContext, tracking: TrackingState, day: date
) -> list[SchedulingEmployee]:
    pool = []
    for employee in context.employees:
        if context.is_on_time_off(employee.id, day):
            continue
        if day in tracking.for_employee(employee.id).worked_dates:
            continue
        pool.append(employee)
    return pool


def _ranked_candidates(
    context: GenerationContext,
    tracking: TrackingState,
    day: date,
    employees: list[SchedulingEmployee],
    options: tuple[SchedulingShiftOption, ...],
) -> list[_Candidate]:
    candidates: list[_Candidate] = []
    for employee in employees:
        for option in options:
            if not can_assign(
                employee,
                option,
                day,
                tracking,
                allow_overtime=context.allow_overtime,
                catalog=context.catalog,
                rule_set=context.rule_set,
            ):
                continue
            score = score_assignment(employee, option, day, context, tracking)
            candidates.append(_Candidate(employee=employee, shift_option=option, score=score))
    candidates.sort(key=lambda candidate: candidate.sort_key)
    return candidates


def _commit(
    context: GenerationContext,
    tracking: TrackingState,
    day: date,
    candidate: _Candidate,
) -> ScheduledShift:
    employee, option = candidate.employee, candidate.shift_option
    employee_tracking = tracking.for_employee(employee.id)
    projected = employee_tracking.hours_for_week(day) + float(option.duration_hours)
    shift = ScheduledShift(
        employee_id=employee.id,
        shift_option_id=option.id,
        date=day,
        start_time=option.start_time,
        end_time=option.end_time,
        duration_hours=float(option.duration_hours),
        category=option.category,
        status="scheduled",
        score=candidate.score,
        is_overtime=projected > float(employee.weekly_hours_cap),
        is_regular_schedule=follows_pattern_step(employee_tracking, option, day, context),
    )
    record_assignment(tracking, shift, is_holiday=context.is_holiday(day), rule_set=context.rule_set)
    return shift


def _fill_requirement(
    context: GenerationContext,
    tracking: TrackingState,
    day: date,
    requirement: SchedulingRequirement,
) -> tuple[list[ScheduledShift], Optional[UnfilledRequirementAlert]]:
    options = context.options_for(requirement)
    if not options:
        return [], UnfilledRequirementAlert(
            date=day,
            requirement_id=requirement.id,
            details=(
                f"No shift option covers {requirement.time_block_start}-{requirement.time_block_end}"
                f" for requirement {requirement.id} on {day.isoformat()}"
            ),
            staff_shortfall=requirement.min_total_staff,
            supervisor_shortfall=requirement.min_supervisors,
        )

    candidates = _ranked_candidates(context, tracking, day, _available_employees(context, tracking, day), options)
    shifts: list[ScheduledShift] = []
    used: set[int] = set()

    def _take(supervisors_only: bool, needed: int) -> int:
        filled = 0
        for candidate in candidates:
            if filled >= needed:
                break
            if candidate.employee.id in used:
                continue
            if supervisors_only and not candidate.employee.is_supervisor:
                continue
            shifts.append(_commit(context, tracking, day, candidate))
            used.add(candidate.employee.id)
            filled += 1
        return filled

    supervisors = _take(True, requirement.min_supervisors)
    others = _take(False, max(0, requirement.min_total_staff - supervisors))
    staff_shortfall = max(0, requirement.min_total_staff - supervisors - others)
    supervisor_shortfall = max(0, requirement.min_supervisors - supervisors)

    if not staff_shortfall and not supervisor_shortfall:
        return shifts, None
    return shifts, UnfilledRequirementAlert(
        date=day,
        requirement_id=requirement.id,
        details=(
            f"Requirement {requirement.id} ({requirement.time_block_start}-{requirement.time_block_end})"
            f" on {day.isoformat()} is short {staff_shortfall} staff and {supervisor_shortfall} supervisors"
        ),
        staff_shortfall=staff_shortfall,
        supervisor_shortfall=supervisor_shortfall,
    )


def generate_schedule(
    context: GenerationContext,
    tracking: Optional[TrackingState] = None,
) -> SchedulingResult:
    """
    Greedy day-by-day assignment: requirements are filled in block order,
    supervisors first, each slot going to the best-scoring eligible employee.
    """
    if tracking is None:
        tracking = initialize_tracking(
            context.employees,
            context.reference.existing_shifts,
            period_start=context.params.start_date,
            holiday_dates=context.holiday_dates,
            rule_set=context.rule_set,
        )

    logger.info(
        "Generating schedule %s..%s for %d employees",
        context.params.start_date,
        context.params.end_date,
        len(context.employees),
    )

    shifts: list[ScheduledShift] = []
    alerts: list[UnfilledRequirementAlert] = []
    summary = RunSummary()

    for day in context.days():
        for requirement in context.requirements_for(day):
            assigned, alert = _fill_requirement(context, tracking, day, requirement)
            shifts.extend(assigned)
            if alert is not None:
                logger.warning(alert.details)
                alerts.append(alert)
                summary.warnings.append(alert.details)

    summary.shifts_generated = len(shifts)
    summary.success = not summary.errors
    logger.info("Generated %d shifts with %d unfilled requirements", len(shifts), len(alerts))
    return SchedulingResult(shifts=shifts, alerts=alerts, tracking=tracking, summary=summary)
