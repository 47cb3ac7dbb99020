"""Desirability scoring for candidate (employee, shift option) pairs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import TYPE_CHECKING

from dispatch_scheduler.services.domain import SchedulingEmployee, SchedulingShiftOption
from dispatch_scheduler.services.rules import ScoringRules
from dispatch_scheduler.services.tracking import EmployeeTracking, TrackingState

if TYPE_CHECKING:
    from dispatch_scheduler.services.context import GenerationContext

_EPSILON = 1e-6


@dataclass(frozen=True)
class ScoreFactors:
    hours_balance: float
    preference_match: float
    rest_quality: float
    pattern_adherence: float
    historical_fairness: float


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def hours_balance_score(
    projected_hours: float, weekly_hours_cap: float, scoring: ScoringRules
) -> float:
    """Favour weeks that land in the ideal band; penalise running past the cap."""

    low, high = scoring.ideal_weekly_hours_min, scoring.ideal_weekly_hours_max
    if projected_hours < low:
        score = projected_hours / low if low > 0 else 1.0
    elif projected_hours <= high:
        score = 1.0
    else:
        score = max(0.0, 1 - (projected_hours - high) / scoring.overtime_penalty_span_hours)
    if projected_hours > weekly_hours_cap + _EPSILON:
        score *= scoring.over_cap_factor
    return _clamp(score)


def preference_score(employee: SchedulingEmployee, shift_option: SchedulingShiftOption, scoring: ScoringRules) -> float:
    if not employee.preferred_shift_category or employee.preferred_shift_category == shift_option.category:
        return 1.0
    return scoring.preference_mismatch_score


def rest_quality_score(rest_hours: float | None, min_rest_hours: float, scoring: ScoringRules) -> float:
    if rest_hours is None:
        return 1.0
    if rest_hours < min_rest_hours:
        return 0.0
    if rest_hours < scoring.ideal_rest_hours_min:
        return (rest_hours - min_rest_hours) / (scoring.ideal_rest_hours_min - min_rest_hours)
    if rest_hours <= scoring.ideal_rest_hours_max:
        return 1.0
    decay = (1 - scoring.long_rest_floor) * min(
        1.0, (rest_hours - scoring.ideal_rest_hours_max) / scoring.long_rest_decay_hours
    )
    return 1.0 - decay


def follows_pattern_step(
    tracking: EmployeeTracking, shift_option: SchedulingShiftOption, day: date, context: "GenerationContext"
) -> bool:
    pattern = context.catalog.get(tracking.current_pattern)
    expected = pattern.expected_duration(tracking.shifts_for_week(day))
    return expected is not None and abs(expected - float(shift_option.duration_hours)) < _EPSILON


def pattern_adherence_score(
    tracking: EmployeeTracking, shift_option: SchedulingShiftOption, day: date, context: "GenerationContext"
) -> float:
    scoring = context.rule_set.rules.scoring
    if follows_pattern_step(tracking, shift_option, day, context):
        return 1.0
    switches = [
        pattern
        for pattern in context.catalog.matching_patterns(
            float(shift_option.duration_hours), tracking.shifts_for_week(day)
        )
        if pattern.code != tracking.current_pattern
    ]
    if switches:
        return scoring.pattern_switch_score
    return scoring.pattern_mismatch_score


def is_undesirable(shift_option: SchedulingShiftOption, day: date, context: "GenerationContext") -> bool:
    return shift_option.category in context.rule_set.rules.scoring.undesirable_categories or context.is_holiday(day)


def fairness_score(
    employee: SchedulingEmployee,
    shift_option: SchedulingShiftOption,
    day: date,
    context: "GenerationContext",
    tracking: TrackingState,
) -> float:
    """Compare the employee's recent load with the population average."""

    scoring = context.rule_set.rules.scoring
    window_start = day - timedelta(days=scoring.fairness_window_days)
    totals: dict[int, int] = {}
    undesirable: dict[int, int] = {}
    for employee_id, employee_tracking in tracking.employees.items():
        recent = employee_tracking.assignments_between(window_start, day)
        totals[employee_id] = len(recent)
        undesirable[employee_id] = sum(
            1 for record in recent if record.is_holiday or record.category in scoring.undesirable_categories
        )
    if not totals:
        return 1.0

    average = sum(totals.values()) / len(totals)
    count = totals.get(employee.id, 0)
    if count <= average or average <= 0:
        score = 1.0
    else:
        score = max(0.0, 1 - (count - average) / average)

    if is_undesirable(shift_option, day, context):
        average_undesirable = sum(undesirable.values()) / len(undesirable)
        excess = undesirable.get(employee.id, 0) - average_undesirable
        if excess > 0:
            score *= max(scoring.undesirable_floor, 1 - scoring.undesirable_step_penalty * excess)
    return _clamp(score)


def score_factors(
    employee: SchedulingEmployee,
    shift_option: SchedulingShiftOption,
    day: date,
    context: "GenerationContext",
    tracking: TrackingState,
) -> ScoreFactors:
    rules = context.rule_set.rules
    employee_tracking = tracking.for_employee(employee.id)
    start, _end = shift_option.window(day)
    projected = employee_tracking.hours_for_week(day) + float(shift_option.duration_hours)
    return ScoreFactors(
        hours_balance=hours_balance_score(projected, float(employee.weekly_hours_cap), rules.scoring),
        preference_match=preference_score(employee, shift_option, rules.scoring),
        rest_quality=rest_quality_score(
            employee_tracking.rest_hours_before(start), rules.working_time.min_rest_hours, rules.scoring
        ),
        pattern_adherence=pattern_adherence_score(employee_tracking, shift_option, day, context),
        historical_fairness=fairness_score(employee, shift_option, day, context, tracking),
    )


def combine_factors(factors: ScoreFactors, scoring: ScoringRules) -> float:
    weights = scoring.weights
    weighted = (
        factors.hours_balance * weights.hours_balance
        + factors.preference_match * weights.preference_match
        + factors.rest_quality * weights.rest_quality
        + factors.pattern_adherence * weights.pattern_adherence
        + factors.historical_fairness * weights.historical_fairness
    )
    return round(_clamp(weighted / weights.total()), 4)


def score_assignment(
    employee: SchedulingEmployee,
    shift_option: SchedulingShiftOption,
    day: date,
    context: "GenerationContext",
    tracking: TrackingState,
) -> float:
    """Return the weighted desirability of the assignment in ``[0, 1]``."""

    factors = score_factors(employee, shift_option, day, context, tracking)
    return combine_factors(factors, context.rule_set.rules.scoring)
