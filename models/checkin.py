"""
Check-in data models for the Worker Readiness Engine.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from datetime import date as date_type, time as time_type, datetime

from .schedule import ShiftType


class Readiness(str, Enum):
    """Self-reported readiness traffic light."""
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


class CheckInRecord(BaseModel):
    """A worker's single daily self-report. At most one per worker per day."""
    worker_id: str
    date: date_type
    time: time_type = Field(description="Local wall-clock time the check-in was submitted")
    predicted_readiness: Readiness
    shift_type: Optional[ShiftType] = Field(default=None, description="Shift the worker checked in for")

    @property
    def checked_in_at(self) -> datetime:
        return datetime.combine(self.date, self.time)

    model_config = ConfigDict(frozen=True)
