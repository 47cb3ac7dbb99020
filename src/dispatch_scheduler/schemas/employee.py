from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dispatch_scheduler.services.patterns import normalize_pattern_code

EmployeeRoleName = Literal["dispatcher", "supervisor", "manager"]
ShiftCategoryName = Literal["early", "day", "swing", "graveyard"]
TimeOffStatusName = Literal["pending", "approved", "rejected"]


class EmployeeBase(BaseModel):
    name: str
    role: EmployeeRoleName = "dispatcher"
    shift_pattern: str = "4x10"
    preferred_shift_category: ShiftCategoryName | None = None
    weekly_hours_cap: float = Field(default=40, gt=0)
    max_overtime_hours: float = Field(default=0, ge=0)
    consecutive_shifts_count: int = Field(default=0, ge=0)
    total_hours_current_week: float = Field(default=0, ge=0)
    last_shift_end: datetime | None = None
    notes: str | None = None

    @field_validator("shift_pattern")
    @classmethod
    def normalize_pattern(cls, value: str) -> str:
        return normalize_pattern_code(value)


class EmployeeCreate(EmployeeBase):
    pass


class EmployeeRead(EmployeeBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class EmployeeUpdate(BaseModel):
    name: str | None = None
    role: EmployeeRoleName | None = None
    shift_pattern: str | None = None
    preferred_shift_category: ShiftCategoryName | None = None
    weekly_hours_cap: float | None = Field(default=None, gt=0)
    max_overtime_hours: float | None = Field(default=None, ge=0)
    notes: str | None = None

    @field_validator("shift_pattern")
    @classmethod
    def normalize_pattern(cls, value: str | None) -> str | None:
        return normalize_pattern_code(value) if value is not None else None


class TimeOffRequestBase(BaseModel):
    employee_id: int
    start_date: date
    end_date: date
    status: TimeOffStatusName = "pending"
    reason: str | None = None

    @model_validator(mode="after")
    def validate_span(self) -> "TimeOffRequestBase":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TimeOffRequestCreate(TimeOffRequestBase):
    pass


class TimeOffRequestRead(TimeOffRequestBase):
    id: int

    model_config = ConfigDict(from_attributes=True)
