"""
Schedule Resolution Logic.

This module answers the question: "Is Worker X expected on shift on Day Y, and when
must they check in?" It enforces the leader-assigned schedule only; there is no
team-level fallback. If nothing is assigned, nothing is owed.
"""

import logging
from datetime import date as date_type, datetime, time as time_type, timedelta
from typing import List, Optional, Dict, Tuple
from collections import defaultdict

from models import (
    WorkerScheduleEntry,
    RecurringSchedule,
    ShiftType,
    ScheduleSource,
    CheckInWindow,
    ScheduleResult,
)
from .calendar import date_range
from .errors import InvalidScheduleError
from .settings import EngineSettings, DEFAULT_SETTINGS

logger = logging.getLogger(__name__)


class ScheduleResolver:
    """
    Resolves dated and recurring assignments into per-day shift information.
    """

    def __init__(
        self,
        entries: List[WorkerScheduleEntry],
        recurring: Optional[List[RecurringSchedule]] = None,
        settings: Optional[EngineSettings] = None
    ):
        self.settings = settings or DEFAULT_SETTINGS

        # Index assignments for O(1) lookup
        self.entries: Dict[Tuple[str, date_type], List[WorkerScheduleEntry]] = defaultdict(list)
        for entry in entries:
            if entry.source is ScheduleSource.NONE:
                continue
            self.entries[(entry.worker_id, entry.date)].append(entry)

        self.recurring: Dict[str, List[RecurringSchedule]] = defaultdict(list)
        for template in recurring or []:
            self.recurring[template.worker_id].append(template)

    def find_entry(self, worker_id: str, day: date_type) -> Optional[WorkerScheduleEntry]:
        """
        Priority 1: a dated assignment for that exact day.
        Priority 2: a recurring template matching the weekday and effective range.
        Ties go to the earliest shift start.
        """
        dated = self.entries.get((worker_id, day))
        if dated:
            return min(dated, key=_start_sort_key)

        matching = [t for t in self.recurring.get(worker_id, []) if t.matches(day)]
        if matching:
            return min(matching, key=_start_sort_key).to_entry(day)
        return None

    def resolve_schedule(self, worker_id: str, day: date_type) -> ScheduleResult:
        """Shift and check-in window for `worker_id` on `day`."""
        entry = self.find_entry(worker_id, day)

        if entry is None:
            return ScheduleResult(
                worker_id=worker_id,
                date=day,
                has_shift=False,
                is_working_day=False,
                shift_type=ShiftType.FLEXIBLE,
                check_in_window=self._flexible_window(day),
                schedule_source=ScheduleSource.NONE,
            )

        self._validate_bounds(entry)

        return ScheduleResult(
            worker_id=worker_id,
            date=day,
            has_shift=True,
            is_working_day=self._is_working_day(entry),
            shift_type=entry.shift_type,
            shift_start=entry.shift_start_at,
            shift_end=entry.shift_end_at,
            check_in_window=self.build_check_in_window(entry),
            schedule_source=ScheduleSource.ASSIGNED,
        )

    def build_check_in_window(self, entry: WorkerScheduleEntry) -> CheckInWindow:
        """
        Derive the window from the shift start (never the shift end):
        opens `lead` before start, closes `lag` after start.
        A custom window on the assignment takes precedence.
        """
        if entry.has_custom_window:
            start = datetime.combine(entry.date, entry.check_in_window_start)
            end = datetime.combine(entry.date, entry.check_in_window_end)
            # Custom window wrapping midnight opens the evening before
            if end < start:
                start -= timedelta(days=1)
            return CheckInWindow(
                window_start=start,
                window_end=end,
                recommended_start=start,
                recommended_end=end,
            )

        shift_start = entry.shift_start_at
        if entry.shift_type is ShiftType.FLEXIBLE or shift_start is None:
            return self._flexible_window(entry.date)

        s = self.settings
        return CheckInWindow(
            window_start=shift_start - timedelta(minutes=s.check_in_lead_minutes),
            window_end=shift_start + timedelta(minutes=s.check_in_lag_minutes),
            recommended_start=shift_start - timedelta(minutes=s.recommended_lead_minutes),
            recommended_end=shift_start,
        )

    def scheduled_dates(self, worker_id: str, start: date_type, end: date_type) -> List[date_type]:
        """Working days with an assigned shift in [start, end]."""
        return [day for day in date_range(start, end) if self._works_on(worker_id, day)]

    def next_scheduled_date(self, worker_id: str, after: date_type, max_days: int = 90) -> Optional[date_type]:
        """First working day strictly after `after`, looking at most `max_days` ahead."""
        for offset in range(1, max_days + 1):
            candidate = after + timedelta(days=offset)
            if self._works_on(worker_id, candidate):
                return candidate
        return None

    def earliest_schedule_date(self, worker_id: str) -> Optional[date_type]:
        """
        First day any assignment could apply.
        None if a recurring template has no effective date (unbounded history).
        """
        candidates = [day for (wid, day) in self.entries if wid == worker_id]
        for template in self.recurring.get(worker_id, []):
            if template.effective_date is None:
                return None
            candidates.append(template.effective_date)
        return min(candidates) if candidates else None

    def has_assignments(self, worker_id: str) -> bool:
        return bool(self.recurring.get(worker_id)) or any(wid == worker_id for (wid, _) in self.entries)

    # --- Internals ---

    def _works_on(self, worker_id: str, day: date_type) -> bool:
        entry = self.find_entry(worker_id, day)
        if entry is None:
            return False
        self._validate_bounds(entry)
        return self._is_working_day(entry)

    def _is_working_day(self, entry: WorkerScheduleEntry) -> bool:
        if entry.shift_type is not ShiftType.FLEXIBLE:
            return True
        return entry.date.weekday() in self.settings.working_weekdays

    def _flexible_window(self, day: date_type) -> CheckInWindow:
        start = datetime.combine(day, self.settings.flexible_window_start)
        end = datetime.combine(day, self.settings.flexible_window_end)
        return CheckInWindow(
            window_start=start,
            window_end=end,
            recommended_start=start,
            recommended_end=end,
        )

    def _validate_bounds(self, entry: WorkerScheduleEntry) -> None:
        """Malformed bounds are a data integrity bug, not a 'no schedule' fact."""
        if entry.shift_type is ShiftType.FLEXIBLE:
            return
        if entry.shift_start is None or entry.shift_end is None:
            raise InvalidScheduleError(
                entry.worker_id, entry.date,
                f"{entry.shift_type.value} shift is missing its start or end time"
            )
        if entry.shift_end_at <= entry.shift_start_at:
            raise InvalidScheduleError(
                entry.worker_id, entry.date,
                f"shift ends at {entry.shift_end_at.isoformat()} which is not after "
                f"its start {entry.shift_start_at.isoformat()}"
            )


def _start_sort_key(item) -> time_type:
    return item.shift_start or time_type.min
