"""
Schedule data models for the Worker Readiness Engine.

This module defines the 'Supply' side of a worker's day:
1. Dated shift assignments made by a team leader (WorkerScheduleEntry).
2. Weekly recurring templates that expand into assignments (RecurringSchedule).
"""

from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, model_validator
from datetime import date as date_type, time as time_type, datetime, timedelta


class ShiftType(str, Enum):
    """Categories of shift a worker can be assigned."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    FLEXIBLE = "flexible"


class ScheduleSource(str, Enum):
    """Where a resolved schedule came from."""
    ASSIGNED = "assigned"
    NONE = "none"


class WorkerScheduleEntry(BaseModel):
    """
    A single shift assignment for one worker on one calendar day.
    Shift bounds are wall-clock times on `date`; `ends_next_day` marks overnight shifts.
    """

    # --- Identity ---
    worker_id: str = Field(description="Worker the shift is assigned to")
    date: date_type = Field(description="Calendar day of the shift (no time component)")

    # --- Shift Bounds ---
    shift_type: ShiftType = Field(description="Shift category")
    shift_start: Optional[time_type] = Field(default=None, description="Shift start (optional for flexible)")
    shift_end: Optional[time_type] = Field(default=None, description="Shift end (optional for flexible)")
    ends_next_day: bool = Field(
        default=False,
        description="True if shift_end falls on the following calendar day (overnight shift)"
    )

    # --- Custom Check-in Window (overrides the derived policy window) ---
    check_in_window_start: Optional[time_type] = Field(default=None)
    check_in_window_end: Optional[time_type] = Field(default=None)

    source: ScheduleSource = Field(default=ScheduleSource.ASSIGNED)

    @property
    def shift_start_at(self) -> Optional[datetime]:
        if self.shift_start is None:
            return None
        return datetime.combine(self.date, self.shift_start)

    @property
    def shift_end_at(self) -> Optional[datetime]:
        if self.shift_end is None:
            return None
        end_day = self.date + timedelta(days=1) if self.ends_next_day else self.date
        return datetime.combine(end_day, self.shift_end)

    @property
    def has_custom_window(self) -> bool:
        return self.check_in_window_start is not None and self.check_in_window_end is not None

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "worker_id": "wrk_001",
            "date": "2024-01-15",
            "shift_type": "morning",
            "shift_start": "08:00:00",
            "shift_end": "16:00:00",
            "source": "assigned"
        }
    })


class RecurringSchedule(BaseModel):
    """
    Weekly template assignment (e.g. "every Monday, 08:00-16:00").
    Bounded by optional effective/expiry dates; either bound may be open.
    """

    worker_id: str
    day_of_week: int = Field(ge=0, le=6, description="0=Monday, 6=Sunday")

    shift_type: ShiftType
    shift_start: Optional[time_type] = None
    shift_end: Optional[time_type] = None
    ends_next_day: bool = False

    check_in_window_start: Optional[time_type] = None
    check_in_window_end: Optional[time_type] = None

    effective_date: Optional[date_type] = Field(default=None, description="First day the template applies")
    expiry_date: Optional[date_type] = Field(default=None, description="Last day the template applies")

    @model_validator(mode='after')
    def validate_dates(self):
        if self.effective_date and self.expiry_date and self.expiry_date < self.effective_date:
            raise ValueError("Schedule expiry date cannot be before effective date")
        return self

    def matches(self, day: date_type) -> bool:
        """True if this template produces a shift on `day`."""
        if day.weekday() != self.day_of_week:
            return False
        effective_ok = self.effective_date is None or self.effective_date <= day
        expiry_ok = self.expiry_date is None or self.expiry_date >= day
        return effective_ok and expiry_ok

    def to_entry(self, day: date_type) -> WorkerScheduleEntry:
        """Materialize the template into a dated assignment."""
        return WorkerScheduleEntry(
            worker_id=self.worker_id,
            date=day,
            shift_type=self.shift_type,
            shift_start=self.shift_start,
            shift_end=self.shift_end,
            ends_next_day=self.ends_next_day,
            check_in_window_start=self.check_in_window_start,
            check_in_window_end=self.check_in_window_end,
            source=ScheduleSource.ASSIGNED,
        )

    model_config = ConfigDict(frozen=True)
