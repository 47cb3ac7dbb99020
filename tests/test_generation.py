from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dispatch_scheduler.repositories import employee as employee_repo
from dispatch_scheduler.repositories import shift as shift_repo
from dispatch_scheduler.repositories import system as system_repo
from dispatch_scheduler.repositories.scheduling import SqlAlchemySchedulingStore
from dispatch_scheduler.schemas.shift import IndividualShiftCreate
from dispatch_scheduler.schemas.system import HolidayCreate
from dispatch_scheduler.services.context import GenerationParams, ReferenceData, build_generation_context
from dispatch_scheduler.services.errors import InvalidPeriodError, MissingReferenceDataError, PersistenceError
from dispatch_scheduler.services.generation import run_schedule_generation
from dispatch_scheduler.services.scoring import fairness_score
from dispatch_scheduler.services.tracking import initialize_tracking

from .factories import (
    DAY_OPTION,
    GRAVEYARD_OPTION,
    MONDAY,
    build_employee_create,
    build_requirement_create,
    build_shift_option_create,
    build_time_off_create,
    make_shift,
)


class RecordingStore:
    def __init__(self, reference: ReferenceData):
        self.reference = reference
        self.loaded = False
        self.saved = None

    async def load_reference_data(self, start_date, end_date) -> ReferenceData:
        self.loaded = True
        return self.reference

    async def save_generation(self, shifts, alerts) -> None:
        self.saved = (list(shifts), list(alerts))


async def _seed(session_factory: async_sessionmaker[AsyncSession]) -> dict[str, int]:
    async with session_factory() as session:
        supervisor = await employee_repo.create_employee(
            session, build_employee_create(name="Sam Supervisor", role="supervisor")
        )
        dispatcher = await employee_repo.create_employee(
            session, build_employee_create(name="Dee Dispatcher", preferred_shift_category="day")
        )
        absent = await employee_repo.create_employee(session, build_employee_create(name="Ava Away"))
        option = await shift_repo.create_shift_option(session, build_shift_option_create())
        requirement = await shift_repo.create_staffing_requirement(
            session, build_requirement_create(min_total_staff=3, min_supervisors=1)
        )
        await employee_repo.create_time_off(session, build_time_off_create(employee_id=absent.id))
        await session.commit()
        return {
            "supervisor": supervisor.id,
            "dispatcher": dispatcher.id,
            "absent": absent.id,
            "option": option.id,
            "requirement": requirement.id,
        }


@pytest.mark.anyio("asyncio")
async def test_generation_persists_shifts_and_alerts(session_factory: async_sessionmaker[AsyncSession]) -> None:
    ids = await _seed(session_factory)

    async with session_factory() as session:
        result = await run_schedule_generation(
            SqlAlchemySchedulingStore(session), GenerationParams(start_date=MONDAY, end_date=MONDAY)
        )

    assert result.summary.shifts_generated == 2
    assert len(result.summary.warnings) == 1

    async with session_factory() as session:
        rows = await shift_repo.list_individual_shifts(session, start_date=MONDAY, end_date=MONDAY)
        alerts = await system_repo.list_staffing_alerts(session, status="OPEN")

    assert sorted(row.employee_id for row in rows) == sorted([ids["supervisor"], ids["dispatcher"]])
    assert all(row.status == "scheduled" and row.score is not None for row in rows)
    assert len(alerts) == 1
    assert alerts[0].requirement_id == ids["requirement"]
    assert alerts[0].alert_type == "UNFILLED_REQUIREMENT"
    assert alerts[0].staff_shortfall == 1


@pytest.mark.anyio("asyncio")
async def test_rerun_does_not_double_book(session_factory: async_sessionmaker[AsyncSession]) -> None:
    await _seed(session_factory)
    params = GenerationParams(start_date=MONDAY, end_date=MONDAY)

    async with session_factory() as session:
        await run_schedule_generation(SqlAlchemySchedulingStore(session), params)
    async with session_factory() as session:
        second = await run_schedule_generation(SqlAlchemySchedulingStore(session), params)

    assert second.shifts == []
    assert second.alerts[0].staff_shortfall == 3

    async with session_factory() as session:
        rows = await shift_repo.list_individual_shifts(session)
    assert len(rows) == 2


@pytest.mark.anyio("asyncio")
async def test_store_loads_domain_snapshot(session_factory: async_sessionmaker[AsyncSession]) -> None:
    ids = await _seed(session_factory)
    async with session_factory() as session:
        await system_repo.create_holiday(session, HolidayCreate(date=MONDAY, name="Founders Day"))
        await system_repo.create_holiday(session, HolidayCreate(date=MONDAY + timedelta(days=90), name="Later"))
        await session.commit()

    async with session_factory() as session:
        reference = await SqlAlchemySchedulingStore(session).load_reference_data(MONDAY, MONDAY + timedelta(days=6))

    assert [employee.role for employee in reference.employees] == ["supervisor", "dispatcher", "dispatcher"]
    assert reference.employees[0].weekly_hours_cap == 40.0
    assert reference.shift_options[0].duration_hours == 10.0
    assert reference.requirements[0].id == ids["requirement"]
    assert [window.employee_id for window in reference.time_off] == [ids["absent"]]
    assert [holiday.name for holiday in reference.holidays] == ["Founders Day"]


@pytest.mark.anyio("asyncio")
async def test_failed_save_rolls_back(session_factory: async_sessionmaker[AsyncSession]) -> None:
    ids = await _seed(session_factory)
    good = make_shift(ids["dispatcher"], MONDAY, DAY_OPTION, shift_option_id=ids["option"])
    broken = make_shift(ids["supervisor"], MONDAY, DAY_OPTION, shift_option_id=None)

    async with session_factory() as session:
        with pytest.raises(PersistenceError):
            await SqlAlchemySchedulingStore(session).save_generation([good, broken], [])

    async with session_factory() as session:
        assert await shift_repo.list_individual_shifts(session) == []


@pytest.mark.anyio("asyncio")
async def test_invalid_period_aborts_before_loading() -> None:
    store = RecordingStore(ReferenceData())

    with pytest.raises(InvalidPeriodError):
        await run_schedule_generation(store, GenerationParams(start_date=MONDAY, end_date=MONDAY - timedelta(days=1)))

    assert not store.loaded
    assert store.saved is None


@pytest.mark.anyio("asyncio")
async def test_missing_data_aborts_without_writing() -> None:
    store = RecordingStore(ReferenceData(shift_options=(DAY_OPTION,)))

    with pytest.raises(MissingReferenceDataError):
        await run_schedule_generation(store, GenerationParams(start_date=MONDAY, end_date=MONDAY))

    assert store.loaded
    assert store.saved is None


@pytest.mark.anyio("asyncio")
async def test_holiday_work_before_the_period_counts_against_fairness(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    ids = await _seed(session_factory)
    holiday = MONDAY - timedelta(days=14)
    async with session_factory() as session:
        await system_repo.create_holiday(session, HolidayCreate(date=holiday, name="Harvest Day"))
        for employee_id, day in ((ids["supervisor"], holiday), (ids["dispatcher"], holiday + timedelta(days=1))):
            await shift_repo.create_individual_shift(
                session, IndividualShiftCreate(employee_id=employee_id, shift_option_id=ids["option"], date=day)
            )
        await session.commit()

    async with session_factory() as session:
        reference = await SqlAlchemySchedulingStore(session).load_reference_data(MONDAY, MONDAY)

    assert [item.date for item in reference.holidays] == [holiday]
    context = build_generation_context(GenerationParams(start_date=MONDAY, end_date=MONDAY), reference)
    tracking = initialize_tracking(
        context.employees,
        reference.existing_shifts,
        period_start=MONDAY,
        holiday_dates=context.holiday_dates,
        rule_set=context.rule_set,
    )
    supervisor, dispatcher = context.employees[0], context.employees[1]

    assert [record.is_holiday for record in tracking.for_employee(supervisor.id).history] == [True]
    assert fairness_score(supervisor, GRAVEYARD_OPTION, MONDAY, context, tracking) < fairness_score(
        dispatcher, GRAVEYARD_OPTION, MONDAY, context, tracking
    )


@pytest.mark.anyio("asyncio")
async def test_individual_shift_key_is_unique(session_factory: async_sessionmaker[AsyncSession]) -> None:
    ids = await _seed(session_factory)
    payload = IndividualShiftCreate(employee_id=ids["dispatcher"], shift_option_id=ids["option"], date=MONDAY)

    async with session_factory() as session:
        await shift_repo.create_individual_shift(session, payload)
        with pytest.raises(IntegrityError):
            await shift_repo.create_individual_shift(session, payload)


@pytest.mark.anyio("asyncio")
async def test_generation_reopens_cancelled_booking(session_factory: async_sessionmaker[AsyncSession]) -> None:
    ids = await _seed(session_factory)
    async with session_factory() as session:
        cancelled = await shift_repo.create_individual_shift(
            session,
            IndividualShiftCreate(
                employee_id=ids["supervisor"], shift_option_id=ids["option"], date=MONDAY, status="cancelled"
            ),
        )
        await session.commit()
        cancelled_id = cancelled.id

    async with session_factory() as session:
        result = await run_schedule_generation(
            SqlAlchemySchedulingStore(session), GenerationParams(start_date=MONDAY, end_date=MONDAY)
        )

    assert ids["supervisor"] in {shift.employee_id for shift in result.shifts}
    async with session_factory() as session:
        rows = await shift_repo.list_individual_shifts(session, employee_id=ids["supervisor"])
    assert [(row.id, row.status) for row in rows] == [(cancelled_id, "scheduled")]
