from datetime import timedelta

from dispatch_scheduler.services.conflicts import ConflictType, check_shift_conflicts, resolve_conflicts, time_off_conflicts
from dispatch_scheduler.services.domain import TimeOffWindow

from .factories import DAY_OPTION, GRAVEYARD_OPTION, LONG_DAY_OPTION, MONDAY, SWING_OPTION, make_employee, make_shift


def _types(conflicts) -> list[ConflictType]:
    return [conflict.type for conflict in conflicts]


def test_no_conflicts_for_a_clean_placement() -> None:
    employee = make_employee(1)
    existing = [make_shift(1, MONDAY, id=1)]

    conflicts = check_shift_conflicts(employee, make_shift(1, MONDAY + timedelta(days=1)), existing)
    resolution = resolve_conflicts(conflicts)

    assert conflicts == []
    assert resolution.can_proceed
    assert not resolution.requires_override


def test_overlap_is_a_hard_conflict() -> None:
    employee = make_employee(1)
    existing = [make_shift(1, MONDAY, id=7)]

    conflicts = check_shift_conflicts(employee, make_shift(1, MONDAY, SWING_OPTION), existing)
    resolution = resolve_conflicts(conflicts)

    assert _types(conflicts) == [ConflictType.OVERLAP]
    assert conflicts[0].conflicting_shift_ids == (7,)
    assert not resolution.can_proceed
    assert "OVERLAP" in resolution.message


def test_short_rest_is_a_hard_conflict() -> None:
    employee = make_employee(1)
    existing = [make_shift(1, MONDAY, GRAVEYARD_OPTION, id=3)]

    conflicts = check_shift_conflicts(employee, make_shift(1, MONDAY + timedelta(days=1), DAY_OPTION), existing)

    assert _types(conflicts) == [ConflictType.REST_PERIOD]
    assert not resolve_conflicts(conflicts).can_proceed


def test_weekly_hours_and_pattern_need_an_override() -> None:
    employee = make_employee(1, weekly_hours_cap=40)
    existing = [make_shift(1, MONDAY + timedelta(days=offset), id=offset + 1) for offset in range(4)]

    conflicts = check_shift_conflicts(employee, make_shift(1, MONDAY + timedelta(days=5)), existing)
    resolution = resolve_conflicts(conflicts)

    assert _types(conflicts) == [ConflictType.WEEKLY_HOURS, ConflictType.PATTERN_VIOLATION]
    assert resolution.can_proceed
    assert resolution.requires_override


def test_pattern_violation_for_unexpected_length() -> None:
    employee = make_employee(1, shift_pattern="4x10")

    conflicts = check_shift_conflicts(employee, make_shift(1, MONDAY, LONG_DAY_OPTION), [])

    assert _types(conflicts) == [ConflictType.PATTERN_VIOLATION]


def test_rechecking_an_existing_shift_ignores_itself() -> None:
    employee = make_employee(1)
    existing = [make_shift(1, MONDAY, id=9), make_shift(2, MONDAY, id=10)]

    conflicts = check_shift_conflicts(employee, make_shift(1, MONDAY, id=9), existing)

    assert conflicts == []


def test_time_off_conflicts_lists_active_shifts_in_the_span() -> None:
    window = TimeOffWindow(employee_id=1, start_date=MONDAY, end_date=MONDAY + timedelta(days=2), id=4)
    shifts = [
        make_shift(1, MONDAY + timedelta(days=2), id=3),
        make_shift(1, MONDAY, id=1),
        make_shift(1, MONDAY + timedelta(days=1), id=2, status="cancelled"),
        make_shift(1, MONDAY + timedelta(days=3), id=5),
        make_shift(2, MONDAY, id=6),
    ]

    assert [shift.id for shift in time_off_conflicts(window, shifts)] == [1, 3]


def test_pending_time_off_has_no_conflicts() -> None:
    window = TimeOffWindow(employee_id=1, start_date=MONDAY, end_date=MONDAY, status="pending")

    assert time_off_conflicts(window, [make_shift(1, MONDAY, id=1)]) == []
