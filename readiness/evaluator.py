"""
Daily Obligation Evaluator.

Combines the resolved schedule, the exception overlay and the day's evidence
(check-in, rehabilitation exercises) into a single tri-state verdict:
not required / outstanding / complete, with EXCEPTED and PARTIAL refinements.

Nothing is stored between calls: evaluating the same day twice over the same
records always yields the same DayObligation.
"""

import logging
from datetime import date as date_type
from typing import List, Optional, Dict, Tuple
from collections import defaultdict

from models import (
    CheckInRecord,
    RehabilitationPlan,
    ExerciseCompletionRecord,
    PlanStatus,
    DayObligationState,
    DayObligation,
)
from .errors import DataUnavailableError
from .overlay import ExceptionOverlay
from .rehab import group_completions, is_day_complete, validate_plan
from .resolver import ScheduleResolver

logger = logging.getLogger(__name__)


def daily_progress_percent(
    checked_in: bool,
    warm_up_complete: bool,
    has_rehab_plan: bool,
    has_active_exception: bool
) -> int:
    """
    Progress bar mapping shown to the worker:
    - Exception active: only the warm-up counts (0 / 100).
    - No rehab plan day: only the check-in counts (0 / 100).
    - Otherwise: check-in alone is half way, both is done (0 / 50 / 100).
    """
    if has_active_exception:
        return 100 if warm_up_complete else 0
    if not has_rehab_plan:
        return 100 if checked_in else 0
    if checked_in and warm_up_complete:
        return 100
    if checked_in:
        return 50
    return 0


class DailyObligationEvaluator:
    """
    Read-only evaluator over one snapshot of records.
    """

    def __init__(
        self,
        resolver: ScheduleResolver,
        overlay: ExceptionOverlay,
        check_ins: List[CheckInRecord],
        plan: Optional[RehabilitationPlan] = None,
        completions: Optional[List[ExerciseCompletionRecord]] = None
    ):
        self.resolver = resolver
        self.overlay = overlay
        self.plan = plan

        self.check_ins: Dict[Tuple[str, date_type], List[CheckInRecord]] = defaultdict(list)
        for record in check_ins:
            self.check_ins[(record.worker_id, record.date)].append(record)

        self.completions_by_date = group_completions(plan, completions or []) if plan else {}

    def check_in_for(self, worker_id: str, day: date_type) -> Optional[CheckInRecord]:
        records = self.check_ins.get((worker_id, day), [])
        if len(records) > 1:
            # One check-in per worker per day; anything else is corrupt upstream data
            raise DataUnavailableError(
                "check_ins", worker_id,
                f"{len(records)} check-ins recorded on {day.isoformat()}"
            )
        return records[0] if records else None

    def plan_day_for(self, worker_id: str, day: date_type) -> Optional[int]:
        """Plan day number if an active plan of this worker falls on `day`."""
        plan = self.plan
        if plan is None or plan.worker_id != worker_id or plan.status is not PlanStatus.ACTIVE:
            return None
        validate_plan(plan, self.resolver.settings)
        return plan.day_number_for(day)

    def warm_up_complete(self, day: date_type) -> bool:
        if self.plan is None:
            return False
        return is_day_complete(self.plan, self.completions_by_date.get(day, set()))

    def evaluate_day(self, worker_id: str, day: date_type) -> DayObligation:
        """Obligation status of `worker_id` on `day`."""
        schedule = self.resolver.resolve_schedule(worker_id, day)
        exception = self.overlay.active_exception_for(worker_id, day)
        check_in = self.check_in_for(worker_id, day)
        plan_day = self.plan_day_for(worker_id, day)

        check_in_required = schedule.requires_presence and exception is None
        check_in_done = check_in is not None
        warm_up_required = plan_day is not None
        warm_up_done = warm_up_required and self.warm_up_complete(day)

        on_time = None
        if check_in is not None:
            on_time = schedule.check_in_window.contains(check_in.checked_in_at)

        if not check_in_required and not warm_up_required:
            if exception is not None and schedule.requires_presence:
                state = DayObligationState.EXCEPTED
            else:
                state = DayObligationState.NOT_REQUIRED
        elif (check_in_done or not check_in_required) and (warm_up_done or not warm_up_required):
            state = DayObligationState.COMPLETE
        elif check_in_required and warm_up_required and (check_in_done or warm_up_done):
            state = DayObligationState.PARTIAL
        else:
            state = DayObligationState.PENDING

        logger.debug(
            f"{worker_id} {day.isoformat()}: {state.value} "
            f"(check-in {check_in_done}/{check_in_required}, warm-up {warm_up_done}/{warm_up_required})"
        )

        return DayObligation(
            worker_id=worker_id,
            date=day,
            state=state,
            schedule=schedule,
            exception=exception,
            check_in_required=check_in_required,
            check_in_done=check_in_done,
            check_in_on_time=on_time,
            warm_up_required=warm_up_required,
            warm_up_done=warm_up_done,
            plan_day=plan_day,
            progress_percent=daily_progress_percent(
                checked_in=check_in_done,
                warm_up_complete=warm_up_done,
                has_rehab_plan=warm_up_required,
                has_active_exception=exception is not None,
            ),
        )
