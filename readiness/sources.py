"""
Record sources.

The engine never talks to the backend itself. A RecordSource is the external
collaborator that hands over read-only snapshots of a worker's records. Two
implementations ship here:
1. InMemoryRecordSource - lists held in memory (tests, demos, pre-fetched data).
2. JsonSnapshotSource   - a cached snapshot file written by run_readiness.py.
"""

import json
import logging
from datetime import date as date_type
from pathlib import Path
from typing import List, Optional, Protocol, Union

from models import (
    WorkerScheduleEntry,
    RecurringSchedule,
    ExceptionRecord,
    CheckInRecord,
    RehabilitationPlan,
    PlanStatus,
    ExerciseCompletionRecord,
)
from .calendar import is_within
from .snapshot import WorkerSnapshot

logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Read-only data layer consumed by ReadinessService."""

    async def fetch_schedule(self, worker_id: str, start: date_type, end: date_type) -> List[WorkerScheduleEntry]:
        ...

    async def fetch_recurring_schedules(self, worker_id: str) -> List[RecurringSchedule]:
        ...

    async def fetch_exceptions(self, worker_id: str, start: date_type, end: date_type) -> List[ExceptionRecord]:
        ...

    async def fetch_check_ins(self, worker_id: str, start: date_type, end: date_type) -> List[CheckInRecord]:
        ...

    async def fetch_active_rehab_plan(self, worker_id: str) -> Optional[RehabilitationPlan]:
        ...

    async def fetch_exercise_completions(self, plan_id: str, day: date_type) -> List[str]:
        ...


class InMemoryRecordSource:
    """
    Serves records from lists, filtered the way the backend queries filter them.
    """

    def __init__(
        self,
        schedule_entries: Optional[List[WorkerScheduleEntry]] = None,
        recurring_schedules: Optional[List[RecurringSchedule]] = None,
        exceptions: Optional[List[ExceptionRecord]] = None,
        check_ins: Optional[List[CheckInRecord]] = None,
        rehab_plans: Optional[List[RehabilitationPlan]] = None,
        completions: Optional[List[ExerciseCompletionRecord]] = None,
        worker_id: Optional[str] = None
    ):
        # Default worker for callers that serve a single-worker snapshot
        self.worker_id = worker_id
        self.schedule_entries = list(schedule_entries or [])
        self.recurring_schedules = list(recurring_schedules or [])
        self.exceptions = list(exceptions or [])
        self.check_ins = list(check_ins or [])
        self.rehab_plans = list(rehab_plans or [])
        self.completions = list(completions or [])

    @classmethod
    def from_snapshot(cls, snapshot: WorkerSnapshot) -> "InMemoryRecordSource":
        return cls(
            schedule_entries=snapshot.schedule_entries,
            recurring_schedules=snapshot.recurring_schedules,
            exceptions=snapshot.exceptions,
            check_ins=snapshot.check_ins,
            rehab_plans=[snapshot.rehab_plan] if snapshot.rehab_plan else [],
            completions=snapshot.completions,
            worker_id=snapshot.worker_id,
        )

    async def fetch_schedule(self, worker_id, start, end):
        return [
            e for e in self.schedule_entries
            if e.worker_id == worker_id and start <= e.date <= end
        ]

    async def fetch_recurring_schedules(self, worker_id):
        return [t for t in self.recurring_schedules if t.worker_id == worker_id]

    async def fetch_exceptions(self, worker_id, start, end):
        # Any exception overlapping [start, end]; invalid ranges pass through untouched
        return [
            x for x in self.exceptions
            if x.worker_id == worker_id
            and x.start_date <= end
            and (x.end_date is None or x.end_date >= start or x.end_date < x.start_date)
        ]

    async def fetch_check_ins(self, worker_id, start, end):
        return [c for c in self.check_ins if c.worker_id == worker_id and is_within(c.date, start, end)]

    async def fetch_active_rehab_plan(self, worker_id):
        active = [p for p in self.rehab_plans if p.worker_id == worker_id and p.status is PlanStatus.ACTIVE]
        if not active:
            return None
        # Most recently started plan wins
        return max(active, key=lambda p: p.start_date)

    async def fetch_exercise_completions(self, plan_id, day):
        return [c.exercise_id for c in self.completions if c.plan_id == plan_id and c.date == day]


class JsonSnapshotSource(InMemoryRecordSource):
    """
    Serves records from a snapshot file produced by WorkerSnapshot.to_dict().
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        with open(self.path, 'r') as f:
            data = json.load(f)
        snapshot = WorkerSnapshot.from_dict(data)
        logger.info(f"📂 Loaded snapshot for {snapshot.worker_id} from {self.path}")

        super().__init__(
            schedule_entries=snapshot.schedule_entries,
            recurring_schedules=snapshot.recurring_schedules,
            exceptions=snapshot.exceptions,
            check_ins=snapshot.check_ins,
            rehab_plans=[snapshot.rehab_plan] if snapshot.rehab_plan else [],
            completions=snapshot.completions,
            worker_id=snapshot.worker_id,
        )


def save_snapshot(snapshot: WorkerSnapshot, path: Union[str, Path]) -> None:
    """Write a snapshot so later runs can skip regeneration."""
    with open(path, 'w') as f:
        json.dump(snapshot.to_dict(), f, indent=2)
    logger.info(f"💾 Saved snapshot for {snapshot.worker_id} to {path}")
