"""Per-run employee accumulators and the eligibility checks built on them."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Literal, Optional, Sequence

from dispatch_scheduler.services.domain import (
    ScheduledShift,
    SchedulingEmployee,
    SchedulingShiftOption,
    week_start,
)
from dispatch_scheduler.services.patterns import PatternCatalog, default_catalog, normalize_pattern_code
from dispatch_scheduler.services.rules import RuleSet, load_default_rules

IneligibilityReason = Literal["weekly-hours-cap", "consecutive-shift-limit", "insufficient-rest"]


@dataclass(frozen=True)
class AssignmentRecord:
    date: date
    category: str
    is_holiday: bool = False


@dataclass
class EmployeeTracking:
    employee_id: int
    current_pattern: str
    weekly_hours: dict[date, float] = field(default_factory=dict)
    weekly_shifts: dict[date, int] = field(default_factory=dict)
    consecutive_shifts: int = 0
    last_shift_end: Optional[datetime] = None
    committed: list[tuple[datetime, datetime]] = field(default_factory=list)
    worked_dates: set[date] = field(default_factory=set)
    history: list[AssignmentRecord] = field(default_factory=list)

    def hours_for_week(self, day: date) -> float:
        return self.weekly_hours.get(week_start(day), 0.0)

    def shifts_for_week(self, day: date) -> int:
        return self.weekly_shifts.get(week_start(day), 0)

    def previous_end(self, start: datetime) -> Optional[datetime]:
        ends = [end for window_start, end in self.committed if window_start < start]
        if self.last_shift_end is not None:
            ends.append(self.last_shift_end)
        return max(ends, default=None)

    def next_start(self, start: datetime) -> Optional[datetime]:
        return min((window_start for window_start, _end in self.committed if window_start > start), default=None)

    def rest_hours_before(self, start: datetime) -> Optional[float]:
        previous = self.previous_end(start)
        if previous is None:
            return None
        return (start - previous).total_seconds() / 3600

    def rest_hours_after(self, start: datetime, end: datetime) -> Optional[float]:
        following = self.next_start(start)
        if following is None:
            return None
        return (following - end).total_seconds() / 3600

    def streak_before(self, start: datetime, consecutive_gap_hours: float = 24) -> int:
        """Count the shifts chained onto a shift starting at *start*.

        Committed windows are walked one by one; reaching the recorded tail adds
        its whole streak, which already includes anything chained before it.
        """

        gap = timedelta(hours=consecutive_gap_hours)
        earlier = sorted(
            (window for window in self.committed if window[0] < start), key=lambda window: window[1], reverse=True
        )
        streak = 0
        cursor = start
        for window_start, window_end in earlier:
            if self.last_shift_end is not None and self.last_shift_end >= window_end:
                break
            if cursor - window_end > gap:
                return streak
            streak += 1
            cursor = window_start
        if self.last_shift_end is not None and cursor - self.last_shift_end <= gap:
            streak += self.consecutive_shifts
        return streak

    def streak_after(self, end: datetime, consecutive_gap_hours: float = 24) -> int:
        gap = timedelta(hours=consecutive_gap_hours)
        streak = 0
        cursor = end
        for window_start, window_end in self.committed:
            if window_start < end:
                continue
            if window_start - cursor > gap:
                break
            streak += 1
            cursor = window_end
        return streak

    def projected_streak(self, start: datetime, end: datetime, consecutive_gap_hours: float = 24) -> int:
        """Length of the run of shifts a new ``[start, end)`` shift would sit in."""

        return (
            self.streak_before(start, consecutive_gap_hours)
            + 1
            + self.streak_after(end, consecutive_gap_hours)
        )

    def assignments_between(self, first_day: date, last_day: date) -> list[AssignmentRecord]:
        return [record for record in self.history if first_day <= record.date <= last_day]

@dataclass
class TrackingState:
    """Mutable accumulators for one generation run, keyed by employee id."""

    employees: dict[int, EmployeeTracking] = field(default_factory=dict)

    def for_employee(self, employee_id: int) -> EmployeeTracking:
        return self.employees[employee_id]

    def copy(self) -> "TrackingState":
        return copy.deepcopy(self)


def initialize_tracking(
    employees: Sequence[SchedulingEmployee],
    existing_shifts: Iterable[ScheduledShift] = (),
    *,
    period_start: Optional[date] = None,
    holiday_dates: Iterable[date] = (),
    rule_set: Optional[RuleSet] = None,
) -> TrackingState:
    """Build a fresh tracking state for a run.

    Employees with committed shifts are replayed from the ones dated before
    *period_start*; later ones are kept as fixed windows that every candidate
    is checked against. Employees without any start from the stats carried on
    their record.
    """

    rule_set = rule_set or load_default_rules()
    holidays = set(holiday_dates)
    shifts_by_employee: dict[int, list[ScheduledShift]] = {}
    for shift in existing_shifts:
        if shift.is_active:
            shifts_by_employee.setdefault(shift.employee_id, []).append(shift)

    state = TrackingState()
    for employee in employees:
        tracking = EmployeeTracking(
            employee_id=employee.id,
            current_pattern=normalize_pattern_code(employee.shift_pattern),
        )
        state.employees[employee.id] = tracking

        existing = sorted(shifts_by_employee.get(employee.id, []), key=lambda item: (item.start, item.shift_option_id))
        if not existing:
            tracking.consecutive_shifts = employee.consecutive_shifts_count or 0
            tracking.last_shift_end = employee.last_shift_end
            if employee.total_hours_current_week and period_start is not None:
                tracking.weekly_hours[week_start(period_start)] = float(employee.total_hours_current_week)
            continue

        for shift in existing:
            if period_start is None or shift.date < period_start:
                record_assignment(state, shift, is_holiday=shift.date in holidays, rule_set=rule_set)
            else:
                _record_committed(tracking, shift, is_holiday=shift.date in holidays)
    return state


def _record_committed(tracking: EmployeeTracking, shift: ScheduledShift, *, is_holiday: bool) -> None:
    # Booked inside the period: counted toward hours and dates, and checked as a
    # fixed window for rest and streaks instead of moving last_shift_end.
    _add_to_week(tracking, shift)
    tracking.committed.append((shift.start, shift.end))
    tracking.committed.sort()
    tracking.worked_dates.add(shift.date)
    tracking.history.append(AssignmentRecord(date=shift.date, category=shift.category, is_holiday=is_holiday))


def _add_to_week(tracking: EmployeeTracking, shift: ScheduledShift) -> None:
    bucket = week_start(shift.date)
    tracking.weekly_hours[bucket] = tracking.weekly_hours.get(bucket, 0.0) + float(shift.duration_hours)
    tracking.weekly_shifts[bucket] = tracking.weekly_shifts.get(bucket, 0) + 1


def record_assignment(
    state: TrackingState,
    shift: ScheduledShift,
    *,
    is_holiday: bool = False,
    rule_set: Optional[RuleSet] = None,
) -> EmployeeTracking:
    """Fold *shift* into the employee's accumulators and return them."""

    rule_set = rule_set or load_default_rules()
    tracking = state.for_employee(shift.employee_id)
    start, end = shift.start, shift.end

    _add_to_week(tracking, shift)
    tracking.consecutive_shifts = tracking.streak_before(start, rule_set.rules.working_time.consecutive_gap_hours) + 1
    if tracking.last_shift_end is None or end > tracking.last_shift_end:
        tracking.last_shift_end = end
    tracking.worked_dates.add(shift.date)
    tracking.history.append(AssignmentRecord(date=shift.date, category=shift.category, is_holiday=is_holiday))
    return tracking


def eligibility_failure(
    employee: SchedulingEmployee,
    shift_option: SchedulingShiftOption,
    day: date,
    state: TrackingState,
    *,
    allow_overtime: bool = False,
    catalog: Optional[PatternCatalog] = None,
    rule_set: Optional[RuleSet] = None,
) -> Optional[IneligibilityReason]:
    """Return the first rule that blocks the assignment, or ``None``."""

    rule_set = rule_set or load_default_rules()
    catalog = catalog or default_catalog()
    working_rules = rule_set.rules.working_time
    tracking = state.for_employee(employee.id)
    start, end = shift_option.window(day)

    limit = float(employee.weekly_hours_cap)
    if allow_overtime:
        limit += float(employee.max_overtime_hours or 0)
    if tracking.hours_for_week(day) + float(shift_option.duration_hours) > limit + 1e-9:
        return "weekly-hours-cap"

    max_consecutive = catalog.max_consecutive_shifts(tracking.current_pattern)
    if tracking.projected_streak(start, end, working_rules.consecutive_gap_hours) > max_consecutive:
        return "consecutive-shift-limit"

    rest = tracking.rest_hours_before(start)
    if rest is not None and rest < working_rules.min_rest_hours:
        return "insufficient-rest"
    rest_after = tracking.rest_hours_after(start, end)
    if rest_after is not None and rest_after < working_rules.min_rest_hours:
        return "insufficient-rest"

    return None


def can_assign(
    employee: SchedulingEmployee,
    shift_option: SchedulingShiftOption,
    day: date,
    state: TrackingState,
    *,
    allow_overtime: bool = False,
    catalog: Optional[PatternCatalog] = None,
    rule_set: Optional[RuleSet] = None,
) -> bool:
    return (
        eligibility_failure(
            employee,
            shift_option,
            day,
            state,
            allow_overtime=allow_overtime,
            catalog=catalog,
            rule_set=rule_set,
        )
        is None
    )
