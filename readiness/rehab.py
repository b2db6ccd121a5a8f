"""
Rehabilitation Plan Progression.

Tracks where a worker is in a clinician-authored plan:
1. Which plan day is current (calendar driven, clamped to the plan length).
2. Which days were fully completed (every exercise id covered).
3. When the next warm-up becomes available (06:00 on the following day once today is done).

Plans never change status here. Completion and cancellation are explicit
clinician actions, applied through complete_plan / cancel_plan.
"""

import logging
from datetime import date as date_type, datetime
from typing import Dict, Iterable, List, Optional, Set
from collections import defaultdict

from models import (
    RehabilitationPlan,
    ExerciseCompletionRecord,
    PlanStatus,
    PlanDayProgress,
    PlanProgress,
)
from .calendar import days_between, local_now
from .errors import InvalidPlanRangeError, InvalidPlanTransitionError
from .settings import EngineSettings, DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


def validate_plan(plan: RehabilitationPlan, settings: Optional[EngineSettings] = None) -> None:
    max_days = (settings or DEFAULT_SETTINGS).max_plan_duration_days
    if plan.duration_days <= 0 or plan.duration_days > max_days:
        raise InvalidPlanRangeError(plan.id, plan.duration_days, max_days)


def group_completions(
    plan: RehabilitationPlan,
    completions: Iterable[ExerciseCompletionRecord]
) -> Dict[date_type, Set[str]]:
    """Completed exercise ids per date, for this plan only. Duplicates collapse."""
    by_date: Dict[date_type, Set[str]] = defaultdict(set)
    for record in completions:
        if record.plan_id != plan.id:
            continue
        by_date[record.date].add(record.exercise_id)
    return dict(by_date)


def is_day_complete(plan: RehabilitationPlan, completed_ids: Iterable[str]) -> bool:
    """
    Set coverage by id, not a count: two completions of one exercise never
    stand in for a different exercise. A plan without exercises has no complete days.
    """
    required = plan.exercise_ids
    if not required:
        return False
    return required.issubset(set(completed_ids))


def current_plan_day(plan: RehabilitationPlan, today: date_type) -> int:
    """floor(days since start) + 1, clamped to [1, duration_days]."""
    raw = days_between(plan.start_date, today) + 1
    return max(1, min(raw, plan.duration_days))


def percent(part: int, whole: int) -> int:
    """Integer percentage rounded half up (12.5 -> 13)."""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (2 * whole)


def compute_plan_progress(
    plan: RehabilitationPlan,
    completions: List[ExerciseCompletionRecord],
    now: datetime,
    settings: Optional[EngineSettings] = None
) -> PlanProgress:
    """
    Roll completions up into per-day state and percent progress.
    `now` is injected; naive values are taken as local wall-clock time.
    """
    settings = settings or DEFAULT_SETTINGS
    validate_plan(plan, settings)

    moment = local_now(now, settings.timezone)
    today = moment.date()
    current_day = current_plan_day(plan, today)
    by_date = group_completions(plan, completions)

    days: List[PlanDayProgress] = []
    days_completed = 0
    for day_number in range(1, plan.duration_days + 1):
        day_date = plan.date_for_day(day_number)
        completed_ids = by_date.get(day_date, set())
        complete = is_day_complete(plan, completed_ids)

        # Only days up to the current one count toward progress
        if complete and day_number <= current_day:
            days_completed += 1

        days.append(PlanDayProgress(
            day=day_number,
            date=day_date,
            completed_exercise_ids=sorted(completed_ids),
            is_complete=complete,
            is_current=day_number == current_day,
        ))

    current_complete = days[current_day - 1].is_complete
    progress = percent(days_completed, plan.duration_days)

    logger.debug(
        f"Plan {plan.id}: day {current_day}/{plan.duration_days}, "
        f"{days_completed} complete ({progress}%)"
    )

    return PlanProgress(
        plan_id=plan.id,
        status=plan.status,
        current_day=current_day,
        duration_days=plan.duration_days,
        days_completed=days_completed,
        progress_percent=progress,
        days=days,
        current_day_complete=current_complete,
        next_warm_up_available_at=next_warm_up_available_at(
            plan, current_day, current_complete, moment, settings
        ),
    )


def next_warm_up_available_at(
    plan: RehabilitationPlan,
    current_day: int,
    current_day_complete: bool,
    moment: datetime,
    settings: Optional[EngineSettings] = None
) -> Optional[datetime]:
    """
    Immediately actionable while today's set is outstanding; otherwise the
    unlock time on the next plan day. None once the final day is done.
    """
    settings = settings or DEFAULT_SETTINGS
    if not current_day_complete:
        return moment
    if current_day >= plan.duration_days:
        return None
    next_date = plan.date_for_day(current_day + 1)
    return datetime.combine(next_date, settings.warm_up_unlock_time, tzinfo=moment.tzinfo)


# --- Status Transitions (explicit external actions only) ---

def complete_plan(plan: RehabilitationPlan) -> RehabilitationPlan:
    """Clinician marks the plan complete. Terminal."""
    return _transition(plan, PlanStatus.COMPLETED)


def cancel_plan(plan: RehabilitationPlan) -> RehabilitationPlan:
    """Clinician cancels the plan. Terminal."""
    return _transition(plan, PlanStatus.CANCELLED)


def _transition(plan: RehabilitationPlan, target: PlanStatus) -> RehabilitationPlan:
    if plan.status.is_terminal:
        raise InvalidPlanTransitionError(plan.id, plan.status.value, target.value)
    logger.info(f"Plan {plan.id}: {plan.status.value} -> {target.value}")
    return plan.model_copy(update={"status": target})
