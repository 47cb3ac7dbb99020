from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class HolidayBase(BaseModel):
    date: date
    name: str
    is_observed: bool = True


class HolidayCreate(HolidayBase):
    pass


class HolidayRead(HolidayBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class StaffingAlertRead(BaseModel):
    id: int
    date: date
    requirement_id: int
    alert_type: str
    status: str
    staff_shortfall: int
    supervisor_shortfall: int
    details: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
