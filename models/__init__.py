"""
Data models package for the Worker Readiness Engine.

This package exports the three pillars of the data architecture:
1. Obligations (Schedules, Exceptions)
2. Evidence (Check-ins, Rehabilitation plans and completions)
3. Output (Schedule results, Day obligations, Streaks, Plan progress)
"""

from .schedule import (
    ShiftType,
    ScheduleSource,
    WorkerScheduleEntry,
    RecurringSchedule
)

from .exception import (
    ExceptionType,
    ExceptionRecord,
    EXCEPTION_TYPE_LABELS
)

from .checkin import (
    Readiness,
    CheckInRecord
)

from .rehab import (
    PlanStatus,
    Exercise,
    RehabilitationPlan,
    ExerciseCompletionRecord
)

from .readiness import (
    CheckInWindow,
    ScheduleResult,
    DayObligationState,
    DayObligation,
    Badge,
    StreakState,
    PlanDayProgress,
    PlanProgress
)

__all__ = [
    # --- Obligation Models ---
    "ShiftType",
    "ScheduleSource",
    "WorkerScheduleEntry",
    "RecurringSchedule",
    "ExceptionType",
    "ExceptionRecord",
    "EXCEPTION_TYPE_LABELS",

    # --- Evidence Models ---
    "Readiness",
    "CheckInRecord",
    "PlanStatus",
    "Exercise",
    "RehabilitationPlan",
    "ExerciseCompletionRecord",

    # --- Output Models ---
    "CheckInWindow",
    "ScheduleResult",
    "DayObligationState",
    "DayObligation",
    "Badge",
    "StreakState",
    "PlanDayProgress",
    "PlanProgress",
]
