"""
Worker Readiness Engine.

Decides, for a worker and a calendar day, whether a check-in is owed, whether
an exception suspends it, what a rehabilitation plan demands, and how the days
roll up into streaks and plan progress.
"""

from .errors import (
    ReadinessError,
    InvalidScheduleError,
    InvalidExceptionRangeError,
    InvalidPlanRangeError,
    InvalidPlanTransitionError,
    DataUnavailableError
)

from .settings import (
    EngineSettings,
    DEFAULT_SETTINGS
)

from .resolver import ScheduleResolver
from .overlay import ExceptionOverlay
from .evaluator import DailyObligationEvaluator, daily_progress_percent
from .streak import StreakCalculator, next_milestone, build_badge
from .rehab import (
    compute_plan_progress,
    next_warm_up_available_at,
    complete_plan,
    cancel_plan
)

from .snapshot import WorkerSnapshot
from .engine import ReadinessEngine
from .sources import (
    RecordSource,
    InMemoryRecordSource,
    JsonSnapshotSource,
    save_snapshot
)
from .service import ReadinessService

__all__ = [
    # --- Errors ---
    "ReadinessError",
    "InvalidScheduleError",
    "InvalidExceptionRangeError",
    "InvalidPlanRangeError",
    "InvalidPlanTransitionError",
    "DataUnavailableError",

    # --- Configuration ---
    "EngineSettings",
    "DEFAULT_SETTINGS",

    # --- Components ---
    "ScheduleResolver",
    "ExceptionOverlay",
    "DailyObligationEvaluator",
    "daily_progress_percent",
    "StreakCalculator",
    "next_milestone",
    "build_badge",
    "compute_plan_progress",
    "next_warm_up_available_at",
    "complete_plan",
    "cancel_plan",

    # --- Facade & Boundary ---
    "WorkerSnapshot",
    "ReadinessEngine",
    "RecordSource",
    "InMemoryRecordSource",
    "JsonSnapshotSource",
    "save_snapshot",
    "ReadinessService",
]
