from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dispatch_scheduler.schemas.employee import ShiftCategoryName
from dispatch_scheduler.services.domain import parse_time_string

ShiftStatusName = Literal["scheduled", "in_progress", "completed", "missed", "cancelled"]


def _check_time(value: str) -> str:
    parse_time_string(value)
    return value


class ShiftOptionBase(BaseModel):
    name: str
    category: ShiftCategoryName
    start_time: str
    end_time: str
    duration_hours: float = Field(gt=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _check_time(value)


class ShiftOptionCreate(ShiftOptionBase):
    pass


class ShiftOptionRead(ShiftOptionBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class StaffingRequirementBase(BaseModel):
    name: str = "Coverage block"
    time_block_start: str
    time_block_end: str
    min_total_staff: int = Field(ge=0)
    min_supervisors: int = Field(default=0, ge=0)
    is_holiday: bool | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("time_block_start", "time_block_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        return _check_time(value)


class StaffingRequirementCreate(StaffingRequirementBase):
    pass


class StaffingRequirementRead(StaffingRequirementBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class IndividualShiftBase(BaseModel):
    employee_id: int
    shift_option_id: int
    date: date
    status: ShiftStatusName = "scheduled"
    score: float | None = None
    is_overtime: bool = False
    is_regular_schedule: bool = True
    overtime_approved: bool = False
    notes: str | None = None


class IndividualShiftCreate(IndividualShiftBase):
    pass


class IndividualShiftRead(IndividualShiftBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
