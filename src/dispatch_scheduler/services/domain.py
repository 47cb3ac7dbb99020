"""Plain data consumed and produced by the scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class SchedulingEmployee:
    id: int
    role: str
    shift_pattern: str = "4x10"
    weekly_hours_cap: float = 40.0
    max_overtime_hours: float = 0.0
    preferred_shift_category: Optional[str] = None
    name: str = ""
    consecutive_shifts_count: int = 0
    total_hours_current_week: float = 0.0
    last_shift_end: Optional[datetime] = None

    @property
    def is_supervisor(self) -> bool:
        return self.role == "supervisor"


@dataclass(frozen=True)
class SchedulingShiftOption:
    id: int
    category: str
    start_time: str
    end_time: str
    duration_hours: float
    name: str = ""

    @property
    def crosses_midnight(self) -> bool:
        return crosses_midnight(self.start_time, self.end_time)

    def window(self, day: date) -> tuple[datetime, datetime]:
        return shift_window(day, self.start_time, self.end_time)


@dataclass(frozen=True)
class SchedulingRequirement:
    id: int
    time_block_start: str
    time_block_end: str
    min_total_staff: int
    min_supervisors: int = 0
    is_holiday: Optional[bool] = None
    day_of_week: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    name: str = ""

    def applies_to(self, day: date, is_holiday: bool) -> bool:
        """Return whether this requirement demands coverage on *day*."""

        if self.is_holiday is not None and self.is_holiday != is_holiday:
            return False
        if self.start_date is not None and day < self.start_date:
            return False
        if self.end_date is not None and day > self.end_date:
            return False
        if self.day_of_week is not None and self.day_of_week != day.weekday():
            return False
        return True


@dataclass(frozen=True)
class TimeOffWindow:
    employee_id: int
    start_date: date
    end_date: date
    status: str = "approved"
    id: Optional[int] = None

    def covers(self, day: date) -> bool:
        return self.status == "approved" and self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class HolidayDate:
    date: date
    name: str
    is_observed: bool = True
    id: Optional[int] = None


@dataclass(frozen=True)
class ScheduledShift:
    """An individual shift, either already committed or produced by a run."""

    employee_id: int
    shift_option_id: int
    date: date
    start_time: str
    end_time: str
    duration_hours: float
    category: str = ""
    status: str = "scheduled"
    score: Optional[float] = None
    is_overtime: bool = False
    is_regular_schedule: bool = True
    overtime_approved: bool = False
    id: Optional[int] = None

    @property
    def start(self) -> datetime:
        return shift_window(self.date, self.start_time, self.end_time)[0]

    @property
    def end(self) -> datetime:
        return shift_window(self.date, self.start_time, self.end_time)[1]

    @property
    def is_active(self) -> bool:
        return self.status != "cancelled"


def parse_time_string(value: str) -> int:
    """Return minutes since midnight for an ``HH:MM`` string."""

    hours_text, minutes_text = value.strip().split(":")[:2]
    hours, minutes = int(hours_text), int(minutes_text)
    if not (0 <= hours <= 24 and 0 <= minutes < 60) or (hours == 24 and minutes):
        raise ValueError(f"Invalid time of day: {value!r}")
    return hours * 60 + minutes


def crosses_midnight(start_time: str, end_time: str) -> bool:
    return parse_time_string(end_time) <= parse_time_string(start_time)


def minute_range(start_time: str, end_time: str) -> tuple[int, int]:
    """Return ``(start, end)`` in minutes, unwrapping overnight ranges past 1440."""

    start = parse_time_string(start_time)
    end = parse_time_string(end_time)
    if end <= start:
        end += MINUTES_PER_DAY
    return start, end


def shift_duration_hours(start_time: str, end_time: str) -> float:
    start, end = minute_range(start_time, end_time)
    return (end - start) / 60


def time_ranges_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    s1, e1 = minute_range(start1, end1)
    s2, e2 = minute_range(start2, end2)
    return s1 < e2 and s2 < e1


def covers_block(option_start: str, option_end: str, block_start: str, block_end: str) -> bool:
    """Return whether the option window fully contains the requirement block.

    The block is also tested one day later so that an overnight option can cover
    an early-morning block.
    """

    opt_start, opt_end = minute_range(option_start, option_end)
    req_start, req_end = minute_range(block_start, block_end)
    for offset in (0, MINUTES_PER_DAY):
        if opt_start <= req_start + offset and req_end + offset <= opt_end:
            return True
    return False


def shift_window(day: date, start_time: str, end_time: str) -> tuple[datetime, datetime]:
    start_minutes, end_minutes = minute_range(start_time, end_time)
    midnight = datetime.combine(day, time.min)
    return midnight + timedelta(minutes=start_minutes), midnight + timedelta(minutes=end_minutes)


def week_start(day: date) -> date:
    """Return the Monday opening the ISO week that contains *day*."""

    return day - timedelta(days=day.weekday())


def iter_days(start: date, end: date) -> Iterable[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
