"""
Typed failure signals raised by the readiness engine.

Validation errors describe malformed input records and are never coerced into
a default state. DataUnavailableError means "could not determine", which is
distinct from "nothing to report".
"""

from datetime import date as date_type
from typing import Optional


class ReadinessError(Exception):
    """Base class for every engine failure."""


class InvalidScheduleError(ReadinessError):
    """Shift bounds are missing or end at/before they start on a non-flexible shift."""

    def __init__(self, worker_id: str, day: date_type, reason: str):
        self.worker_id = worker_id
        self.day = day
        self.reason = reason
        super().__init__(f"Invalid schedule for {worker_id} on {day.isoformat()}: {reason}")


class InvalidExceptionRangeError(ReadinessError):
    """Exception end date precedes its start date."""

    def __init__(self, worker_id: str, exception_id: Optional[str], start: date_type, end: date_type):
        self.worker_id = worker_id
        self.exception_id = exception_id
        self.start = start
        self.end = end
        super().__init__(
            f"Exception {exception_id or '<unnamed>'} for {worker_id} ends ({end.isoformat()}) "
            f"before it starts ({start.isoformat()})"
        )


class InvalidPlanRangeError(ReadinessError):
    """Plan duration is not within 1..maximum days."""

    def __init__(self, plan_id: str, duration_days: int, max_days: int):
        self.plan_id = plan_id
        self.duration_days = duration_days
        self.max_days = max_days
        super().__init__(
            f"Plan {plan_id} has duration {duration_days} days (must be between 1 and {max_days})"
        )


class InvalidPlanTransitionError(ReadinessError):
    """Attempted status change out of a terminal plan status."""

    def __init__(self, plan_id: str, current: str, requested: str):
        self.plan_id = plan_id
        self.current = current
        self.requested = requested
        super().__init__(f"Plan {plan_id} cannot move from '{current}' to '{requested}'")


class DataUnavailableError(ReadinessError):
    """A collaborator fetch failed or returned malformed data."""

    def __init__(self, operation: str, worker_id: Optional[str] = None, detail: str = ""):
        self.operation = operation
        self.worker_id = worker_id
        self.detail = detail
        target = f" for {worker_id}" if worker_id else ""
        suffix = f": {detail}" if detail else ""
        super().__init__(f"Data unavailable ({operation}){target}{suffix}")
