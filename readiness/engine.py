"""
The Worker Readiness Engine.

Wires the pure components over one WorkerSnapshot:
1. ScheduleResolver   - is a shift assigned, and when is check-in due?
2. ExceptionOverlay   - is the obligation suspended?
3. DailyObligationEvaluator - what was owed on a day and what was delivered?
4. StreakCalculator   - how do the days roll up into a streak and badges?
5. Plan progression   - where is the worker in their rehabilitation plan?

Every method is a deterministic function of the snapshot and its arguments.
Nothing here performs I/O or reads the clock.
"""

import logging
from datetime import date as date_type, datetime
from typing import Optional, Dict

from models import (
    ScheduleResult,
    ExceptionRecord,
    DayObligation,
    StreakState,
    PlanProgress,
)
from .calendar import date_range
from .evaluator import DailyObligationEvaluator
from .overlay import ExceptionOverlay
from .rehab import compute_plan_progress
from .resolver import ScheduleResolver
from .settings import EngineSettings, DEFAULT_SETTINGS
from .snapshot import WorkerSnapshot
from .streak import StreakCalculator

logger = logging.getLogger(__name__)


class ReadinessEngine:
    """
    Facade over the readiness components for a single worker snapshot.
    """

    def __init__(self, snapshot: WorkerSnapshot, settings: Optional[EngineSettings] = None):
        self.snapshot = snapshot
        self.settings = settings or DEFAULT_SETTINGS

        # Initialize Helpers
        self.resolver = ScheduleResolver(
            snapshot.schedule_entries,
            snapshot.recurring_schedules,
            self.settings,
        )
        self.overlay = ExceptionOverlay(snapshot.exceptions)
        self.evaluator = DailyObligationEvaluator(
            self.resolver,
            self.overlay,
            snapshot.check_ins,
            snapshot.rehab_plan,
            snapshot.completions,
        )
        self.streaks = StreakCalculator(self.evaluator, self.settings)

        logger.debug(
            f"Engine ready for {snapshot.worker_id}: {len(snapshot.schedule_entries)} entries, "
            f"{len(snapshot.recurring_schedules)} templates, {len(snapshot.exceptions)} exceptions, "
            f"{len(snapshot.check_ins)} check-ins"
        )

    @property
    def worker_id(self) -> str:
        return self.snapshot.worker_id

    def resolve_schedule(self, worker_id: str, day: date_type) -> ScheduleResult:
        return self.resolver.resolve_schedule(worker_id, day)

    def active_exception_for(self, worker_id: str, day: date_type) -> Optional[ExceptionRecord]:
        return self.overlay.active_exception_for(worker_id, day)

    def evaluate_day(self, worker_id: str, day: date_type) -> DayObligation:
        return self.evaluator.evaluate_day(worker_id, day)

    def compute_streak(self, worker_id: str, as_of: date_type, since: Optional[date_type] = None) -> StreakState:
        return self.streaks.compute_streak(worker_id, as_of, since)

    def compute_plan_progress(self, now: datetime) -> Optional[PlanProgress]:
        """Progress of the snapshot's rehabilitation plan, or None without one."""
        plan = self.snapshot.rehab_plan
        if plan is None:
            return None
        return compute_plan_progress(plan, self.snapshot.completions, now, self.settings)

    def evaluate_range(self, worker_id: str, start: date_type, end: date_type) -> Dict[date_type, DayObligation]:
        """Day-by-day verdicts for a calendar view."""
        return {day: self.evaluate_day(worker_id, day) for day in date_range(start, end)}
