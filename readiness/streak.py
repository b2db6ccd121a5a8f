"""
Streak & Badge Calculator.

Walks a worker's scheduled-day history oldest to newest and rolls daily
verdicts into a check-in streak:
- Days without a working shift, and days under an exception, are skipped
  entirely (they neither break nor extend the streak).
- A COMPLETE day extends the streak.
- An outstanding day in the past breaks it and is recorded as missed.
- An outstanding `as_of` day is still in progress: not missed, not counted.

Cost is linear in the number of days walked; callers should bound the range.
"""

import logging
from datetime import date as date_type, timedelta
from typing import List, Optional

from models import Badge, StreakState, DayObligationState
from .evaluator import DailyObligationEvaluator
from .settings import EngineSettings, DEFAULT_SETTINGS

logger = logging.getLogger(__name__)

# Fixed length behind `has_seven_day_badge`; `badge_threshold` only shapes `badge`
SEVEN_DAY_BADGE = 7


def next_milestone(current_streak: int, milestones: List[int]) -> Optional[int]:
    """Smallest milestone strictly greater than the current streak."""
    for milestone in sorted(milestones):
        if milestone > current_streak:
            return milestone
    return None


def build_badge(current_streak: int, threshold: int, as_of: date_type) -> Optional[Badge]:
    if current_streak < threshold:
        return None
    return Badge(
        name=f"{threshold}-Day Streak",
        description=f"Completed {threshold} consecutive days of check-ins",
        achieved_date=as_of,
    )


class StreakCalculator:
    """
    Aggregates DailyObligationEvaluator verdicts across days.
    """

    def __init__(self, evaluator: DailyObligationEvaluator, settings: Optional[EngineSettings] = None):
        self.evaluator = evaluator
        self.resolver = evaluator.resolver
        self.settings = settings or evaluator.resolver.settings or DEFAULT_SETTINGS

    def walk_start(self, worker_id: str, as_of: date_type, since: Optional[date_type] = None) -> date_type:
        """
        First day of the walk: the earliest assignment, optionally bounded by `since`.
        Open-ended recurring templates fall back to the default lookback.
        """
        earliest = self.resolver.earliest_schedule_date(worker_id)
        if earliest is None:
            earliest = as_of - timedelta(days=self.settings.default_lookback_days)
        if since is not None:
            earliest = max(earliest, since)
        return earliest

    def compute_streak(self, worker_id: str, as_of: date_type, since: Optional[date_type] = None) -> StreakState:
        """Streak state for `worker_id` as of the end of `as_of`."""
        running = 0
        longest = 0
        completed_days = 0
        past_scheduled = 0
        missed: List[date_type] = []
        exception_dates: List[date_type] = []
        today_check_in_completed = False
        today_check_in_due = False

        if self.resolver.has_assignments(worker_id):
            start = self.walk_start(worker_id, as_of, since)
            for day in self.resolver.scheduled_dates(worker_id, start, as_of):
                past_scheduled += 1
                obligation = self.evaluator.evaluate_day(worker_id, day)

                if day == as_of:
                    today_check_in_completed = obligation.check_in_done
                    today_check_in_due = obligation.check_in_required and not obligation.check_in_done

                # Never missed, never counted
                if obligation.has_active_exception:
                    exception_dates.append(day)
                    continue

                if obligation.state is DayObligationState.COMPLETE:
                    running += 1
                    completed_days += 1
                    longest = max(longest, running)
                elif day < as_of:
                    running = 0
                    missed.append(day)

        s = self.settings
        future_scheduled = len(self.resolver.scheduled_dates(
            worker_id, as_of + timedelta(days=1), as_of + timedelta(days=s.schedule_lookahead_days)
        ))

        if today_check_in_due:
            next_check_in = as_of
        else:
            next_check_in = self.resolver.next_scheduled_date(worker_id, as_of, s.schedule_lookahead_days)

        milestone = next_milestone(running, s.streak_milestones)
        badge = build_badge(running, s.badge_threshold, as_of)

        logger.info(
            f"Streak for {worker_id} as of {as_of.isoformat()}: current={running}, "
            f"longest={longest}, missed={len(missed)}"
        )

        return StreakState(
            worker_id=worker_id,
            as_of=as_of,
            current_streak=running,
            longest_streak=longest,
            completed_days=completed_days,
            past_scheduled_days=past_scheduled,
            total_scheduled_days=past_scheduled + future_scheduled,
            missed_schedule_dates=missed,
            exception_dates=exception_dates,
            next_milestone=milestone,
            days_until_next_milestone=milestone - running if milestone is not None else None,
            has_seven_day_badge=running >= SEVEN_DAY_BADGE,
            badge=badge,
            today_check_in_completed=today_check_in_completed,
            next_check_in_date=next_check_in,
        )
