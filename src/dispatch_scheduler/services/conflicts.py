"""Conflict checks for placing a single shift by hand."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from dispatch_scheduler.services.domain import ScheduledShift, SchedulingEmployee, TimeOffWindow, week_start
from dispatch_scheduler.services.patterns import PatternCatalog, default_catalog
from dispatch_scheduler.services.rules import RuleSet, load_default_rules


class ConflictType(str, Enum):
    OVERLAP = "OVERLAP"
    REST_PERIOD = "REST_PERIOD"
    WEEKLY_HOURS = "WEEKLY_HOURS"
    PATTERN_VIOLATION = "PATTERN_VIOLATION"


HARD_CONFLICTS = frozenset({ConflictType.OVERLAP, ConflictType.REST_PERIOD})


@dataclass(frozen=True)
class ShiftConflict:
    type: ConflictType
    message: str
    conflicting_shift_ids: tuple[int, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ConflictResolution:
    can_proceed: bool
    requires_override: bool
    message: str


def check_shift_conflicts(
    employee: SchedulingEmployee,
    candidate: ScheduledShift,
    existing_shifts: Sequence[ScheduledShift],
    *,
    catalog: Optional[PatternCatalog] = None,
    rule_set: Optional[RuleSet] = None,
) -> list[ShiftConflict]:
    rule_set = rule_set or load_default_rules()
    catalog = catalog or default_catalog()
    min_rest = rule_set.rules.working_time.min_rest_hours

    others = [
        shift
        for shift in existing_shifts
        if shift.employee_id == employee.id
        and shift.is_active
        and (candidate.id is None or shift.id != candidate.id)
    ]
    start, end = candidate.start, candidate.end
    conflicts: list[ShiftConflict] = []

    overlapping = [shift for shift in others if shift.start < end and start < shift.end]
    if overlapping:
        conflicts.append(
            ShiftConflict(
                type=ConflictType.OVERLAP,
                message="Shift overlaps with existing shift(s)",
                conflicting_shift_ids=tuple(shift.id for shift in overlapping if shift.id is not None),
            )
        )

    too_close = []
    for shift in others:
        if shift in overlapping:
            continue
        gap = (start - shift.end) if shift.end <= start else (shift.start - end)
        if gap.total_seconds() / 3600 < min_rest:
            too_close.append(shift)
    if too_close:
        conflicts.append(
            ShiftConflict(
                type=ConflictType.REST_PERIOD,
                message=f"Less than {min_rest:g} hours of rest between shifts",
                conflicting_shift_ids=tuple(shift.id for shift in too_close if shift.id is not None),
            )
        )

    bucket = week_start(candidate.date)
    same_week = [shift for shift in others if week_start(shift.date) == bucket]
    week_hours = sum(float(shift.duration_hours) for shift in same_week) + float(candidate.duration_hours)
    if week_hours > float(employee.weekly_hours_cap):
        conflicts.append(
            ShiftConflict(
                type=ConflictType.WEEKLY_HOURS,
                message=(
                    f"Weekly hours would reach {week_hours:g}, above the cap of {float(employee.weekly_hours_cap):g}"
                ),
            )
        )

    pattern = catalog.get(employee.shift_pattern)
    if not pattern.allows_duration(float(candidate.duration_hours)) or len(same_week) + 1 > pattern.shifts_per_week:
        conflicts.append(
            ShiftConflict(
                type=ConflictType.PATTERN_VIOLATION,
                message=f"Shift does not fit the {pattern.name} pattern",
            )
        )
    return conflicts


def resolve_conflicts(conflicts: Sequence[ShiftConflict]) -> ConflictResolution:
    hard = sorted({conflict.type.value for conflict in conflicts if conflict.type in HARD_CONFLICTS})
    if hard:
        return ConflictResolution(
            can_proceed=False,
            requires_override=False,
            message=f"Cannot proceed due to hard conflicts: {', '.join(hard)}",
        )
    if conflicts:
        soft = sorted({conflict.type.value for conflict in conflicts})
        return ConflictResolution(
            can_proceed=True,
            requires_override=True,
            message=f"Manager override required for: {', '.join(soft)}",
        )
    return ConflictResolution(can_proceed=True, requires_override=False, message="No conflicts found")


def time_off_conflicts(window: TimeOffWindow, shifts: Sequence[ScheduledShift]) -> list[ScheduledShift]:
    """Return the employee's active shifts that fall inside an approved time-off span."""

    return sorted(
        (
            shift
            for shift in shifts
            if shift.employee_id == window.employee_id and shift.is_active and window.covers(shift.date)
        ),
        key=lambda shift: (shift.date, shift.start_time),
    )
