from datetime import datetime, timedelta

import pytest

from dispatch_scheduler.services.errors import InvalidPatternError
from dispatch_scheduler.services.tracking import (
    can_assign,
    eligibility_failure,
    initialize_tracking,
    record_assignment,
)

from .factories import (
    DAY_OPTION,
    GRAVEYARD_OPTION,
    LONG_DAY_OPTION,
    MONDAY,
    SWING_OPTION,
    make_employee,
    make_shift,
)


def test_hours_cap_rejects_shift_without_overtime() -> None:
    employee = make_employee(1, weekly_hours_cap=35, max_overtime_hours=10, total_hours_current_week=35)
    state = initialize_tracking([employee], period_start=MONDAY)

    assert not can_assign(employee, DAY_OPTION, MONDAY, state)
    assert eligibility_failure(employee, DAY_OPTION, MONDAY, state) == "weekly-hours-cap"
    assert can_assign(employee, DAY_OPTION, MONDAY, state, allow_overtime=True)


def test_overtime_allowance_is_bounded() -> None:
    employee = make_employee(1, weekly_hours_cap=35, max_overtime_hours=5, total_hours_current_week=35)
    state = initialize_tracking([employee], period_start=MONDAY)

    assert not can_assign(employee, DAY_OPTION, MONDAY, state, allow_overtime=True)


def test_short_rest_gap_is_rejected() -> None:
    # Previous shift ended at midnight; the day option starts at 07:00.
    employee = make_employee(
        1,
        consecutive_shifts_count=1,
        last_shift_end=datetime.combine(MONDAY, datetime.min.time()),
    )
    state = initialize_tracking([employee], period_start=MONDAY)

    assert eligibility_failure(employee, DAY_OPTION, MONDAY, state) == "insufficient-rest"
    assert not can_assign(employee, DAY_OPTION, MONDAY, state)


def test_exact_minimum_rest_is_accepted() -> None:
    employee = make_employee(1, last_shift_end=datetime.combine(MONDAY, datetime.min.time()) - timedelta(hours=1))
    state = initialize_tracking([employee], period_start=MONDAY)

    assert can_assign(employee, DAY_OPTION, MONDAY, state)


def test_consecutive_limit_depends_on_pattern() -> None:
    last_end = datetime.combine(MONDAY, datetime.min.time()) - timedelta(hours=5)
    three_twelve = make_employee(1, shift_pattern="3x12+4", consecutive_shifts_count=3, last_shift_end=last_end)
    four_ten = make_employee(2, shift_pattern="4x10", consecutive_shifts_count=3, last_shift_end=last_end)
    state = initialize_tracking([three_twelve, four_ten], period_start=MONDAY)

    assert eligibility_failure(three_twelve, LONG_DAY_OPTION, MONDAY, state) == "consecutive-shift-limit"
    assert can_assign(four_ten, DAY_OPTION, MONDAY, state)


def test_streak_resets_after_a_day_off() -> None:
    employee = make_employee(1)
    state = initialize_tracking([employee], period_start=MONDAY)

    record_assignment(state, make_shift(1, MONDAY))
    record_assignment(state, make_shift(1, MONDAY + timedelta(days=1)))
    assert state.for_employee(1).consecutive_shifts == 2

    record_assignment(state, make_shift(1, MONDAY + timedelta(days=3)))
    tracking = state.for_employee(1)
    assert tracking.consecutive_shifts == 1
    assert tracking.hours_for_week(MONDAY) == 30
    assert tracking.shifts_for_week(MONDAY + timedelta(days=6)) == 3
    assert tracking.last_shift_end == datetime(2026, 10, 22, 17, 0)


def test_weekly_buckets_roll_over_on_monday() -> None:
    employee = make_employee(1)
    state = initialize_tracking([employee], period_start=MONDAY)

    record_assignment(state, make_shift(1, MONDAY + timedelta(days=6)))
    tracking = state.for_employee(1)

    assert tracking.hours_for_week(MONDAY) == 10
    assert tracking.hours_for_week(MONDAY + timedelta(days=7)) == 0


def test_existing_shifts_replace_record_stats() -> None:
    employee = make_employee(1, total_hours_current_week=30, consecutive_shifts_count=3)
    existing = [
        make_shift(1, MONDAY - timedelta(days=1), GRAVEYARD_OPTION),
        make_shift(1, MONDAY - timedelta(days=2), DAY_OPTION, status="cancelled"),
        make_shift(2, MONDAY - timedelta(days=1)),
    ]
    state = initialize_tracking(
        [employee], existing, period_start=MONDAY, holiday_dates=[MONDAY - timedelta(days=1)]
    )
    tracking = state.for_employee(1)

    assert tracking.consecutive_shifts == 1
    assert tracking.last_shift_end == datetime(2026, 10, 19, 7, 0)
    assert tracking.hours_for_week(MONDAY) == 0
    assert tracking.hours_for_week(MONDAY - timedelta(days=1)) == 10
    assert [record.is_holiday for record in tracking.history] == [True]


def test_tracking_state_copies_are_independent() -> None:
    employee = make_employee(1)
    state = initialize_tracking([employee], period_start=MONDAY)
    snapshot = state.copy()

    record_assignment(state, make_shift(1, MONDAY))

    assert snapshot.for_employee(1).hours_for_week(MONDAY) == 0
    assert state.for_employee(1).hours_for_week(MONDAY) == 10


def test_unknown_pattern_fails_tracking_setup() -> None:
    with pytest.raises(InvalidPatternError):
        initialize_tracking([make_employee(1, shift_pattern="2x20")])


def test_committed_shifts_in_period_do_not_move_the_last_shift_end() -> None:
    employee = make_employee(1)
    wednesday = MONDAY + timedelta(days=2)
    state = initialize_tracking([employee], [make_shift(1, wednesday)], period_start=MONDAY)
    tracking = state.for_employee(1)

    assert tracking.last_shift_end is None
    assert tracking.hours_for_week(MONDAY) == 10
    assert wednesday in tracking.worked_dates
    assert eligibility_failure(employee, DAY_OPTION, MONDAY, state) is None
    assert eligibility_failure(employee, DAY_OPTION, MONDAY + timedelta(days=1), state) is None


def test_rest_is_checked_on_both_sides_of_committed_shifts() -> None:
    employee = make_employee(1)
    tuesday = MONDAY + timedelta(days=1)
    state = initialize_tracking(
        [employee],
        [make_shift(1, tuesday), make_shift(1, MONDAY + timedelta(days=3), GRAVEYARD_OPTION)],
        period_start=MONDAY,
    )

    # Swing on Monday ends at 01:00 Tuesday, six hours before the booked day shift.
    assert eligibility_failure(employee, SWING_OPTION, MONDAY, state) == "insufficient-rest"
    assert can_assign(employee, DAY_OPTION, MONDAY, state)
    # Thursday's graveyard ends at 07:00 Friday, when a Friday day shift would start.
    assert eligibility_failure(employee, DAY_OPTION, MONDAY + timedelta(days=4), state) == "insufficient-rest"
    assert can_assign(employee, DAY_OPTION, MONDAY + timedelta(days=2), state)


def test_streak_counts_committed_shifts_on_either_side() -> None:
    employee = make_employee(1, shift_pattern="3x12+4")
    state = initialize_tracking(
        [employee],
        [make_shift(1, MONDAY + timedelta(days=1)), make_shift(1, MONDAY + timedelta(days=2))],
        period_start=MONDAY,
    )

    assert can_assign(employee, DAY_OPTION, MONDAY, state)
    assert can_assign(employee, DAY_OPTION, MONDAY + timedelta(days=3), state)

    record_assignment(state, make_shift(1, MONDAY))

    assert state.for_employee(1).consecutive_shifts == 1
    assert eligibility_failure(employee, DAY_OPTION, MONDAY + timedelta(days=3), state) == "consecutive-shift-limit"
