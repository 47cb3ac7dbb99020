"""Post-hoc checks over a set of individual shifts."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from dispatch_scheduler.services.conflicts import time_off_conflicts
from dispatch_scheduler.services.domain import (
    ScheduledShift,
    SchedulingEmployee,
    SchedulingRequirement,
    TimeOffWindow,
    covers_block,
    iter_days,
    week_start,
)
from dispatch_scheduler.services.errors import SchedulingError
from dispatch_scheduler.services.patterns import PatternCatalog, ShiftPattern
from dispatch_scheduler.services.rules import RuleSet, load_default_rules


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    employee_id: Optional[int] = None
    date: Optional[date] = None


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)


def validate_schedule(
    shifts: Iterable[ScheduledShift],
    rule_set: Optional[RuleSet] = None,
    employees: Sequence[SchedulingEmployee] = (),
    time_off: Sequence[TimeOffWindow] = (),
) -> ValidationResult:
    """Check weekly hours, rest periods and overlaps per employee.

    When *employees* are given, each ISO week is also checked against the
    employee's shift pattern, and shifts booked inside approved *time_off*
    are reported. Malformed shift times and unknown patterns are reported as
    errors rather than raised.
    """

    rule_set = rule_set or load_default_rules()
    catalog = PatternCatalog.from_rules(rule_set)
    patterns = {employee.id: employee.shift_pattern for employee in employees}
    working_rules = rule_set.rules.working_time
    errors: list[ValidationIssue] = []

    by_employee: dict[int, list[ScheduledShift]] = defaultdict(list)
    for shift in shifts:
        if shift.is_active:
            by_employee[shift.employee_id].append(shift)

    for employee_id in sorted(by_employee):
        windows = []
        for shift in by_employee[employee_id]:
            try:
                windows.append((shift.start, shift.end, shift))
            except ValueError as exc:
                errors.append(
                    ValidationIssue(
                        code="invalid-shift-time",
                        message=f"Shift on {shift.date.isoformat()} has invalid times: {exc}",
                        employee_id=employee_id,
                        date=shift.date,
                    )
                )

        weekly_hours: dict[date, float] = defaultdict(float)
        overtime_weeks: set[date] = set()
        for _start, _end, shift in windows:
            bucket = week_start(shift.date)
            weekly_hours[bucket] += float(shift.duration_hours)
            if shift.overtime_approved:
                overtime_weeks.add(bucket)
        for bucket in sorted(weekly_hours):
            hours = weekly_hours[bucket]
            if hours > working_rules.max_weekly_hours and bucket not in overtime_weeks:
                errors.append(
                    ValidationIssue(
                        code="weekly-hours-exceeded",
                        message=(
                            f"Employee {employee_id} is scheduled for {hours:g} hours in the week of "
                            f"{bucket.isoformat()} (limit {working_rules.max_weekly_hours:g})"
                        ),
                        employee_id=employee_id,
                        date=bucket,
                    )
                )

        windows.sort(key=lambda item: (item[0], item[1]))
        for (_prev_start, prev_end, previous), (next_start, _next_end, current) in zip(windows, windows[1:]):
            if next_start < prev_end:
                errors.append(
                    ValidationIssue(
                        code="overlap",
                        message=(
                            f"Employee {employee_id} has overlapping shifts on "
                            f"{previous.date.isoformat()} and {current.date.isoformat()}"
                        ),
                        employee_id=employee_id,
                        date=current.date,
                    )
                )
                continue
            rest_hours = (next_start - prev_end).total_seconds() / 3600
            if rest_hours < working_rules.min_rest_hours:
                errors.append(
                    ValidationIssue(
                        code="insufficient-rest",
                        message=(
                            f"Employee {employee_id} has only {rest_hours:g} hours of rest before the shift on "
                            f"{current.date.isoformat()} (minimum {working_rules.min_rest_hours:g})"
                        ),
                        employee_id=employee_id,
                        date=current.date,
                    )
                )

        active = [shift for _s, _e, shift in windows]
        if employee_id in patterns:
            errors.extend(_pattern_issues(employee_id, patterns[employee_id], active, catalog))

        for window in time_off:
            if window.employee_id != employee_id:
                continue
            for shift in time_off_conflicts(window, active):
                errors.append(
                    ValidationIssue(
                        code="time-off-conflict",
                        message=(
                            f"Employee {employee_id} is booked on {shift.date.isoformat()} during approved time off "
                            f"({window.start_date.isoformat()} to {window.end_date.isoformat()})"
                        ),
                        employee_id=employee_id,
                        date=shift.date,
                    )
                )

    return ValidationResult(is_valid=not errors, errors=errors)


def _pattern_issues(
    employee_id: int, pattern_code: str, shifts: Sequence[ScheduledShift], catalog: PatternCatalog
) -> list[ValidationIssue]:
    try:
        pattern = catalog.get(pattern_code)
    except SchedulingError as exc:
        return [ValidationIssue(code="pattern-violation", message=str(exc), employee_id=employee_id)]

    by_week: dict[date, list[ScheduledShift]] = defaultdict(list)
    for shift in shifts:
        by_week[week_start(shift.date)].append(shift)

    issues: list[ValidationIssue] = []
    for bucket in sorted(by_week):
        week = sorted(by_week[bucket], key=lambda item: (item.date, item.start_time))
        for message in check_week_pattern(week, pattern):
            issues.append(
                ValidationIssue(
                    code="pattern-violation",
                    message=f"Employee {employee_id}, week of {bucket.isoformat()}: {message}",
                    employee_id=employee_id,
                    date=bucket,
                )
            )
    return issues


def check_week_pattern(shifts: Sequence[ScheduledShift], pattern: ShiftPattern) -> list[str]:
    """Compare one week of shifts, in date order, with the pattern's sequence.

    A week may hold fewer shifts than the pattern; extra shifts, lengths out of
    step and gaps between working days are reported.
    """

    problems: list[str] = []
    if len(shifts) > pattern.shifts_per_week:
        problems.append(f"{pattern.name} allows {pattern.shifts_per_week} shifts, found {len(shifts)}")
    for position, shift in enumerate(shifts):
        expected = pattern.expected_duration(position)
        if expected is not None and abs(float(shift.duration_hours) - expected) > 1e-6:
            problems.append(
                f"shift on {shift.date.isoformat()} is {float(shift.duration_hours):g} hours, expected {expected:g}"
            )
    for previous, current in zip(shifts, shifts[1:]):
        if (current.date - previous.date).days != 1:
            problems.append("shifts must fall on consecutive days")
            break
    return problems


@dataclass(frozen=True)
class CoverageGap:
    date: date
    requirement_id: int
    assigned_staff: int
    assigned_supervisors: int
    staff_shortfall: int
    supervisor_shortfall: int


def check_staffing_coverage(
    shifts: Iterable[ScheduledShift],
    requirements: Sequence[SchedulingRequirement],
    employees: Sequence[SchedulingEmployee],
    start_date: date,
    end_date: date,
    holiday_dates: Iterable[date] = (),
) -> list[CoverageGap]:
    """Count staff and supervisors covering each requirement block per day."""

    holidays = set(holiday_dates)
    supervisors = {employee.id for employee in employees if employee.is_supervisor}
    shifts_by_day: dict[date, list[ScheduledShift]] = defaultdict(list)
    for shift in shifts:
        if shift.is_active:
            shifts_by_day[shift.date].append(shift)

    gaps: list[CoverageGap] = []
    for day in iter_days(start_date, end_date):
        for requirement in sorted(requirements, key=lambda item: item.id):
            if not requirement.applies_to(day, day in holidays):
                continue
            covering = {
                shift.employee_id
                for shift in shifts_by_day.get(day, [])
                if covers_block(
                    shift.start_time, shift.end_time, requirement.time_block_start, requirement.time_block_end
                )
            }
            staff = len(covering)
            supervisor_count = len(covering & supervisors)
            staff_shortfall = max(0, requirement.min_total_staff - staff)
            supervisor_shortfall = max(0, requirement.min_supervisors - supervisor_count)
            if staff_shortfall or supervisor_shortfall:
                gaps.append(
                    CoverageGap(
                        date=day,
                        requirement_id=requirement.id,
                        assigned_staff=staff,
                        assigned_supervisors=supervisor_count,
                        staff_shortfall=staff_shortfall,
                        supervisor_shortfall=supervisor_shortfall,
                    )
                )
    return gaps
