"""Shared builders for readiness engine tests."""

from datetime import date, time
from typing import List, Optional

import pytest

from models import (
    ShiftType,
    WorkerScheduleEntry,
    RecurringSchedule,
    ExceptionType,
    ExceptionRecord,
    Readiness,
    CheckInRecord,
    Exercise,
    RehabilitationPlan,
    ExerciseCompletionRecord,
)
from readiness import EngineSettings, ReadinessEngine, WorkerSnapshot

WORKER = "wrk_001"


@pytest.fixture
def worker_id() -> str:
    return WORKER


@pytest.fixture
def make_entry():
    """Dated shift assignment, 08:00-16:00 morning by default."""

    def _make(day: date, start: Optional[time] = time(8, 0), end: Optional[time] = time(16, 0),
              shift_type: ShiftType = ShiftType.MORNING, worker_id: str = WORKER, **extra) -> WorkerScheduleEntry:
        return WorkerScheduleEntry(
            worker_id=worker_id,
            date=day,
            shift_type=shift_type,
            shift_start=start,
            shift_end=end,
            **extra,
        )

    return _make


@pytest.fixture
def make_weekday_templates():
    """Monday-Friday 08:00-16:00 recurring templates."""

    def _make(effective: Optional[date] = None, expiry: Optional[date] = None,
              worker_id: str = WORKER) -> List[RecurringSchedule]:
        return [
            RecurringSchedule(
                worker_id=worker_id,
                day_of_week=weekday,
                shift_type=ShiftType.MORNING,
                shift_start=time(8, 0),
                shift_end=time(16, 0),
                effective_date=effective,
                expiry_date=expiry,
            )
            for weekday in range(5)
        ]

    return _make


@pytest.fixture
def make_exception():
    def _make(start: date, end: Optional[date], exception_type: ExceptionType = ExceptionType.INJURY,
              exception_id: str = "exc_001", worker_id: str = WORKER, **extra) -> ExceptionRecord:
        return ExceptionRecord(
            id=exception_id,
            worker_id=worker_id,
            exception_type=exception_type,
            start_date=start,
            end_date=end,
            **extra,
        )

    return _make


@pytest.fixture
def make_check_in():
    def _make(day: date, at: time = time(7, 45), worker_id: str = WORKER,
              readiness: Readiness = Readiness.GREEN) -> CheckInRecord:
        return CheckInRecord(worker_id=worker_id, date=day, time=at, predicted_readiness=readiness)

    return _make


@pytest.fixture
def make_plan():
    """Active plan with exercises ex_1..ex_n."""

    def _make(start: date, duration_days: int, exercise_count: int = 3,
              plan_id: str = "plan_001", worker_id: str = WORKER, **extra) -> RehabilitationPlan:
        exercises = [Exercise(id=f"ex_{i}", name=f"Exercise {i}") for i in range(1, exercise_count + 1)]
        return RehabilitationPlan(
            id=plan_id,
            worker_id=worker_id,
            start_date=start,
            duration_days=duration_days,
            exercises=exercises,
            **extra,
        )

    return _make


@pytest.fixture
def make_completions():
    """Completion records for `exercise_ids` on each of `days`."""

    def _make(plan: RehabilitationPlan, days: List[date],
              exercise_ids: Optional[List[str]] = None) -> List[ExerciseCompletionRecord]:
        ids = exercise_ids if exercise_ids is not None else [ex.id for ex in plan.exercises]
        return [
            ExerciseCompletionRecord(plan_id=plan.id, date=day, exercise_id=exercise_id)
            for day in days
            for exercise_id in ids
        ]

    return _make


@pytest.fixture
def make_engine():
    def _make(settings: Optional[EngineSettings] = None, worker_id: str = WORKER, **records) -> ReadinessEngine:
        snapshot = WorkerSnapshot(worker_id=worker_id, **records)
        return ReadinessEngine(snapshot, settings)

    return _make
