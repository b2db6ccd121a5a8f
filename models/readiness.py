"""
Readiness output models.

This module defines the 'Output' of the readiness engine. None of these are
persisted by the engine; they are recomputed from a record snapshot on demand.
"""

from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict
from datetime import date as date_type, datetime

from .schedule import ShiftType, ScheduleSource
from .exception import ExceptionRecord
from .rehab import PlanStatus


class CheckInWindow(BaseModel):
    """
    Time range during which a check-in counts as on-time.
    Bounds are datetimes so windows crossing midnight stay exact.
    """
    window_start: datetime
    window_end: datetime
    recommended_start: datetime = Field(description="UI hint only, never used for obligations")
    recommended_end: datetime = Field(description="UI hint only, never used for obligations")

    def contains(self, moment: datetime) -> bool:
        return self.window_start <= moment <= self.window_end

    def is_recommended(self, moment: datetime) -> bool:
        return self.recommended_start <= moment <= self.recommended_end

    model_config = ConfigDict(frozen=True)


class ScheduleResult(BaseModel):
    """Resolved shift for one worker on one day."""
    worker_id: str
    date: date_type
    has_shift: bool
    is_working_day: bool = Field(default=True, description="False for flexible shifts on non-working weekdays")
    shift_type: ShiftType
    shift_start: Optional[datetime] = None
    shift_end: Optional[datetime] = None
    check_in_window: CheckInWindow
    schedule_source: ScheduleSource

    @property
    def requires_presence(self) -> bool:
        return self.has_shift and self.is_working_day

    model_config = ConfigDict(frozen=True)


class DayObligationState(str, Enum):
    """Per-day obligation status. Recomputed on every evaluation."""
    NOT_REQUIRED = "not_required"
    EXCEPTED = "excepted"
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETE = "complete"

    @property
    def is_outstanding(self) -> bool:
        return self in (DayObligationState.PENDING, DayObligationState.PARTIAL)


class DayObligation(BaseModel):
    """What a worker owed on a single day and how much of it was delivered."""
    worker_id: str
    date: date_type
    state: DayObligationState

    schedule: ScheduleResult
    exception: Optional[ExceptionRecord] = None

    # --- Check-in ---
    check_in_required: bool
    check_in_done: bool
    check_in_on_time: Optional[bool] = Field(default=None, description="None when no check-in was recorded")

    # --- Warm-up (rehabilitation plan day) ---
    warm_up_required: bool
    warm_up_done: bool
    plan_day: Optional[int] = Field(default=None, description="1-based plan day falling on this date")

    progress_percent: int = Field(ge=0, le=100)

    @property
    def is_partial(self) -> bool:
        return self.state is DayObligationState.PARTIAL

    @property
    def has_active_exception(self) -> bool:
        return self.exception is not None

    model_config = ConfigDict(frozen=True)


class Badge(BaseModel):
    """Milestone achievement derived from the current streak."""
    name: str
    description: str
    icon: str = "🔥"
    achieved: bool = True
    achieved_date: Optional[date_type] = None


class StreakState(BaseModel):
    """
    Rolled-up check-in streak for a worker as of a given day.
    Derived only; never persisted by the engine.
    """
    worker_id: str
    as_of: date_type

    current_streak: int = Field(ge=0)
    longest_streak: int = Field(ge=0)

    completed_days: int = Field(ge=0)
    past_scheduled_days: int = Field(ge=0, description="Scheduled working days up to and including as_of")
    total_scheduled_days: int = Field(ge=0, description="Past scheduled days plus the lookahead window")
    missed_schedule_dates: List[date_type] = Field(default_factory=list, description="Oldest first")
    exception_dates: List[date_type] = Field(default_factory=list)

    next_milestone: Optional[int] = None
    days_until_next_milestone: Optional[int] = None
    has_seven_day_badge: bool = Field(default=False, description="current_streak >= 7, whatever the badge threshold")
    badge: Optional[Badge] = Field(default=None, description="Earned at the configured badge threshold")

    today_check_in_completed: bool = False
    next_check_in_date: Optional[date_type] = None

    @property
    def missed_schedule_count(self) -> int:
        return len(self.missed_schedule_dates)


class PlanDayProgress(BaseModel):
    """Completion state of one plan day."""
    day: int = Field(ge=1)
    date: date_type
    completed_exercise_ids: List[str] = Field(default_factory=list)
    is_complete: bool
    is_current: bool = False


class PlanProgress(BaseModel):
    """Day-by-day progression of a rehabilitation plan."""
    plan_id: str
    status: PlanStatus
    current_day: int = Field(ge=1)
    duration_days: int = Field(ge=1)
    days_completed: int = Field(ge=0)
    progress_percent: int = Field(ge=0, le=100)
    days: List[PlanDayProgress] = Field(default_factory=list)
    current_day_complete: bool = False
    next_warm_up_available_at: Optional[datetime] = Field(
        default=None,
        description="None once the final plan day is complete"
    )

    @property
    def is_finished(self) -> bool:
        return self.current_day == self.duration_days and self.current_day_complete
