"""
Exception (leave / injury) data models for the Worker Readiness Engine.

An exception is a date range during which the normal daily check-in obligation
is suspended. It is context that overrides standard availability.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict
from datetime import date, datetime


class ExceptionType(str, Enum):
    """Reasons a worker's obligations can be suspended."""
    INJURY = "injury"
    MEDICAL_LEAVE = "medical_leave"
    ACCIDENT = "accident"
    TRANSFER = "transfer"
    OTHER = "other"

    @property
    def label(self) -> str:
        """User-friendly name for messages."""
        return EXCEPTION_TYPE_LABELS[self]


EXCEPTION_TYPE_LABELS = {
    ExceptionType.INJURY: "Injury",
    ExceptionType.MEDICAL_LEAVE: "Medical Leave",
    ExceptionType.ACCIDENT: "Accident",
    ExceptionType.TRANSFER: "Transfer",
    ExceptionType.OTHER: "Other",
}


class ExceptionRecord(BaseModel):
    """
    A suspension of a worker's check-in obligation.
    `end_date=None` means open-ended (still active).
    """
    id: Optional[str] = Field(default=None, description="Unique identifier")
    worker_id: str
    exception_type: ExceptionType
    start_date: date
    end_date: Optional[date] = Field(default=None, description="Inclusive; None = open-ended")
    reason: str = Field(default="", description="Free-text reason")
    case_status: Optional[str] = Field(default=None, description="Status of the linked incident case")

    # Deactivation (exception closed early by a supervisor)
    is_active: bool = Field(default=True)
    deactivated_at: Optional[datetime] = Field(default=None)

    @property
    def is_open_ended(self) -> bool:
        return self.end_date is None

    @property
    def has_valid_range(self) -> bool:
        return self.end_date is None or self.end_date >= self.start_date

    def covers(self, day: date) -> bool:
        """
        True if the exception suspends obligations on `day`.
        Range is [start_date, end_date] inclusive; deactivation on/before `day` ends it.
        """
        if not self.is_active:
            return False
        if self.deactivated_at is not None and self.deactivated_at.date() <= day:
            return False
        if day < self.start_date:
            return False
        return self.end_date is None or day <= self.end_date

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": "exc_001",
            "worker_id": "wrk_001",
            "exception_type": "injury",
            "start_date": "2024-01-01",
            "end_date": "2024-01-10",
            "reason": "Sprained wrist",
            "case_status": "in_rehab"
        }
    })
