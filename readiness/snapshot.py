"""
Worker record snapshot.

This module acts as the 'Memory' of a single evaluation: every record the
external data layer returned for one worker, frozen at fetch time. The engine
computes only from a snapshot and never assumes it is fresh.
"""

import logging
from datetime import date as date_type, datetime
from typing import List, Optional, Dict, Any
from dataclasses import dataclass, field

from models import (
    WorkerScheduleEntry,
    RecurringSchedule,
    ExceptionRecord,
    CheckInRecord,
    RehabilitationPlan,
    ExerciseCompletionRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerSnapshot:
    """All records needed to evaluate one worker over a date range."""
    worker_id: str
    schedule_entries: List[WorkerScheduleEntry] = field(default_factory=list)
    recurring_schedules: List[RecurringSchedule] = field(default_factory=list)
    exceptions: List[ExceptionRecord] = field(default_factory=list)
    check_ins: List[CheckInRecord] = field(default_factory=list)
    rehab_plan: Optional[RehabilitationPlan] = None
    completions: List[ExerciseCompletionRecord] = field(default_factory=list)

    # Fetch metadata
    range_start: Optional[date_type] = None
    range_end: Optional[date_type] = None
    fetched_at: Optional[datetime] = None

    def __post_init__(self):
        foreign = [
            r for r in (*self.schedule_entries, *self.recurring_schedules, *self.exceptions, *self.check_ins)
            if r.worker_id != self.worker_id
        ]
        if foreign:
            logger.warning(
                f"Snapshot for {self.worker_id} contains {len(foreign)} records of other workers; "
                f"they will be ignored by worker-scoped lookups"
            )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation (used for caching to disk)."""
        return {
            "worker_id": self.worker_id,
            "schedule_entries": [r.model_dump(mode='json') for r in self.schedule_entries],
            "recurring_schedules": [r.model_dump(mode='json') for r in self.recurring_schedules],
            "exceptions": [r.model_dump(mode='json') for r in self.exceptions],
            "check_ins": [r.model_dump(mode='json') for r in self.check_ins],
            "rehab_plan": self.rehab_plan.model_dump(mode='json') if self.rehab_plan else None,
            "completions": [r.model_dump(mode='json') for r in self.completions],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkerSnapshot":
        """
        Re-hydrate pydantic models from JSON dicts.
        Raises pydantic.ValidationError on malformed records.
        """
        plan = data.get("rehab_plan")
        return cls(
            worker_id=data["worker_id"],
            schedule_entries=[WorkerScheduleEntry(**item) for item in data.get("schedule_entries", [])],
            recurring_schedules=[RecurringSchedule(**item) for item in data.get("recurring_schedules", [])],
            exceptions=[ExceptionRecord(**item) for item in data.get("exceptions", [])],
            check_ins=[CheckInRecord(**item) for item in data.get("check_ins", [])],
            rehab_plan=RehabilitationPlan(**plan) if plan else None,
            completions=[ExerciseCompletionRecord(**item) for item in data.get("completions", [])],
        )
