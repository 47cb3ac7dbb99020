import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from dispatch_scheduler.schemas.employee import TimeOffRequestRead
from dispatch_scheduler.schemas.shift import IndividualShiftRead


class ScheduleGenerationRequest(BaseModel):
    start_date: dt.date
    end_date: dt.date
    allow_overtime: bool | None = None


class GeneratedShiftRead(BaseModel):
    employee_id: int
    shift_option_id: int
    date: dt.date
    start_time: str
    end_time: str
    duration_hours: float
    category: str
    status: str
    score: float | None = None
    is_overtime: bool = False
    is_regular_schedule: bool = True

    model_config = ConfigDict(from_attributes=True)


class UnfilledRequirementRead(BaseModel):
    date: dt.date
    requirement_id: int
    alert_type: str
    status: str
    details: str
    staff_shortfall: int
    supervisor_shortfall: int

    model_config = ConfigDict(from_attributes=True)


class RunSummaryRead(BaseModel):
    success: bool
    shifts_generated: int
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ScheduleGenerationResponse(BaseModel):
    summary: RunSummaryRead
    shifts: list[GeneratedShiftRead] = Field(default_factory=list)
    alerts: list[UnfilledRequirementRead] = Field(default_factory=list)


class ScheduleValidationRequest(BaseModel):
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def validate_range(self) -> "ScheduleValidationRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ValidationIssueRead(BaseModel):
    code: str
    message: str
    employee_id: int | None = None
    date: dt.date | None = None

    model_config = ConfigDict(from_attributes=True)


class CoverageGapRead(BaseModel):
    date: dt.date
    requirement_id: int
    assigned_staff: int
    assigned_supervisors: int
    staff_shortfall: int
    supervisor_shortfall: int

    model_config = ConfigDict(from_attributes=True)


class ScheduleValidationResponse(BaseModel):
    is_valid: bool
    errors: list[ValidationIssueRead] = Field(default_factory=list)
    coverage_gaps: list[CoverageGapRead] = Field(default_factory=list)


class ConflictCheckRequest(BaseModel):
    employee_id: int
    shift_option_id: int
    date: dt.date
    exclude_shift_id: int | None = None


class ShiftConflictRead(BaseModel):
    type: Literal["OVERLAP", "REST_PERIOD", "WEEKLY_HOURS", "PATTERN_VIOLATION"]
    message: str
    conflicting_shift_ids: list[int] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ConflictCheckResponse(BaseModel):
    conflicts: list[ShiftConflictRead] = Field(default_factory=list)
    can_proceed: bool
    requires_override: bool
    message: str


class TimeOffRequestWithConflicts(TimeOffRequestRead):
    """A stored time-off request plus the booked shifts it overlaps."""

    conflicting_shifts: list[IndividualShiftRead] = Field(default_factory=list)
