"""Row-level change notifications for the reference tables the engine reads."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, model_validator

from dispatch_scheduler.schemas.employee import EmployeeRead, TimeOffRequestRead
from dispatch_scheduler.schemas.shift import IndividualShiftRead, ShiftOptionRead, StaffingRequirementRead
from dispatch_scheduler.schemas.system import HolidayRead

ChangeEventName = Literal["insert", "update", "delete"]


class _TableChange(BaseModel):
    event: ChangeEventName
    record_id: int

    @model_validator(mode="after")
    def validate_record(self):
        record = getattr(self, "record", None)
        if self.event != "delete" and record is None:
            raise ValueError(f"{self.event} events must carry the new record")
        if record is not None and record.id != self.record_id:
            raise ValueError("record id does not match record_id")
        return self


class EmployeeChange(_TableChange):
    table: Literal["employees"] = "employees"
    record: EmployeeRead | None = None


class ShiftOptionChange(_TableChange):
    table: Literal["shift_options"] = "shift_options"
    record: ShiftOptionRead | None = None


class StaffingRequirementChange(_TableChange):
    table: Literal["staffing_requirements"] = "staffing_requirements"
    record: StaffingRequirementRead | None = None


class TimeOffRequestChange(_TableChange):
    table: Literal["time_off_requests"] = "time_off_requests"
    record: TimeOffRequestRead | None = None


class HolidayChange(_TableChange):
    table: Literal["holidays"] = "holidays"
    record: HolidayRead | None = None


class IndividualShiftChange(_TableChange):
    table: Literal["individual_shifts"] = "individual_shifts"
    record: IndividualShiftRead | None = None


TableChange = Annotated[
    Union[
        EmployeeChange,
        ShiftOptionChange,
        StaffingRequirementChange,
        TimeOffRequestChange,
        HolidayChange,
        IndividualShiftChange,
    ],
    Field(discriminator="table"),
]
