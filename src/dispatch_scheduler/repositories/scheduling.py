import logging
from datetime import date, timedelta
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dispatch_scheduler.db.models import IndividualShift, StaffingAlert
from dispatch_scheduler.repositories import employee as employee_repo
from dispatch_scheduler.repositories import shift as shift_repo
from dispatch_scheduler.repositories import system as system_repo
from dispatch_scheduler.services.context import (
    ReferenceData,
    employee_from_record,
    holiday_from_record,
    requirement_from_record,
    scheduled_shift_from_record,
    shift_option_from_record,
    time_off_from_record,
)
from dispatch_scheduler.services.domain import ScheduledShift
from dispatch_scheduler.services.errors import PersistenceError
from dispatch_scheduler.services.rules import RuleSet, load_default_rules
from dispatch_scheduler.services.scheduler import UnfilledRequirementAlert

logger = logging.getLogger(__name__)


class SqlAlchemySchedulingStore:
    """Batch reads and writes for a generation run on a single session."""

    def __init__(self, session: AsyncSession, rule_set: RuleSet | None = None):
        self.session = session
        self.rule_set = rule_set or load_default_rules()

    async def load_reference_data(self, start_date: date, end_date: date) -> ReferenceData:
        history_start = start_date - timedelta(days=self.rule_set.rules.scoring.fairness_window_days)

        employees = await employee_repo.list_employees(self.session)
        options = await shift_repo.list_shift_options(self.session)
        requirements = await shift_repo.list_staffing_requirements(self.session)
        time_off = await employee_repo.list_time_off(self.session, start_date=start_date, end_date=end_date)
        holidays = await system_repo.list_holidays(self.session, start_date=history_start, end_date=end_date)
        existing = await shift_repo.list_individual_shifts(self.session, start_date=history_start, end_date=end_date)

        option_lookup = {option.id: shift_option_from_record(option) for option in options}
        return ReferenceData(
            employees=tuple(employee_from_record(row) for row in employees),
            shift_options=tuple(option_lookup.values()),
            requirements=tuple(requirement_from_record(row) for row in requirements),
            time_off=tuple(time_off_from_record(row) for row in time_off),
            holidays=tuple(holiday_from_record(row) for row in holidays),
            existing_shifts=tuple(
                scheduled_shift_from_record(row, option_lookup[row.shift_option_id])
                for row in existing
                if row.shift_option_id in option_lookup
            ),
        )

    async def save_generation(
        self, shifts: Sequence[ScheduledShift], alerts: Sequence[UnfilledRequirementAlert]
    ) -> None:
        try:
            cancelled = await self._cancelled_rows(shifts)
            rows: list[IndividualShift | StaffingAlert] = []
            for shift in shifts:
                row = cancelled.get((shift.employee_id, shift.date, shift.shift_option_id))
                if row is None:
                    row = IndividualShift(
                        employee_id=shift.employee_id, shift_option_id=shift.shift_option_id, date=shift.date
                    )
                    rows.append(row)
                row.status = shift.status
                row.score = shift.score
                row.is_overtime = shift.is_overtime
                row.is_regular_schedule = shift.is_regular_schedule
                row.overtime_approved = shift.overtime_approved
            rows.extend(
                StaffingAlert(
                    date=alert.date,
                    requirement_id=alert.requirement_id,
                    alert_type=alert.alert_type,
                    status=alert.status,
                    staff_shortfall=alert.staff_shortfall,
                    supervisor_shortfall=alert.supervisor_shortfall,
                    details=alert.details,
                )
                for alert in alerts
            )
            self.session.add_all(rows)
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Failed to store %d shifts and %d alerts", len(shifts), len(alerts))
            raise PersistenceError("Failed to store generated schedule") from exc

    async def _cancelled_rows(
        self, shifts: Sequence[ScheduledShift]
    ) -> dict[tuple[int, date, int], IndividualShift]:
        # A cancelled booking keeps its (employee, date, option) key, so a new
        # assignment for the same key reopens that row.
        if not shifts:
            return {}
        rows = await shift_repo.list_individual_shifts(
            self.session,
            start_date=min(shift.date for shift in shifts),
            end_date=max(shift.date for shift in shifts),
        )
        return {
            (row.employee_id, row.date, row.shift_option_id): row for row in rows if row.status == "cancelled"
        }
