"""
Synthetic data generator for the Worker Readiness Engine.
Produces a realistic, reproducible worker history from a seed:
recurring weekday shifts, check-ins with a miss rate, an injury exception and
a rehabilitation plan with partially completed days.
"""

import logging
import random
from typing import List, Optional, Tuple
from datetime import date, time, timedelta

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
from readiness.calendar import date_range
from readiness.snapshot import WorkerSnapshot

logger = logging.getLogger(__name__)

# (shift_type, start, end, ends_next_day)
SHIFT_PATTERNS: List[Tuple[ShiftType, time, time, bool]] = [
    (ShiftType.MORNING, time(8, 0), time(16, 0), False),
    (ShiftType.AFTERNOON, time(14, 0), time(22, 0), False),
    (ShiftType.NIGHT, time(22, 0), time(6, 0), True),
]

EXERCISE_LIBRARY: List[Exercise] = [
    Exercise(id="ex_wrist_flex", name="Wrist flexor stretch", repetitions="3 x 10",
             instructions="Extend the arm, pull the fingers back gently, hold 15 seconds."),
    Exercise(id="ex_grip", name="Grip squeeze", repetitions="2 x 15",
             instructions="Squeeze a soft ball for 3 seconds, release slowly."),
    Exercise(id="ex_shoulder_roll", name="Shoulder rolls", repetitions="2 x 10"),
    Exercise(id="ex_calf_raise", name="Calf raises", repetitions="3 x 12",
             instructions="Rise onto the toes, lower over 3 seconds."),
    Exercise(id="ex_hamstring", name="Seated hamstring stretch", repetitions="3 x 30s"),
    Exercise(id="ex_bridge", name="Glute bridge", repetitions="3 x 10"),
]

INJURY_REASONS = [
    "Sprained wrist while unloading pallets",
    "Lower back strain",
    "Rolled ankle on site stairs",
    "Shoulder strain from overhead lifting",
]

READINESS_WEIGHTS = [(Readiness.GREEN, 0.7), (Readiness.AMBER, 0.22), (Readiness.RED, 0.08)]


class DataGenerator:
    def __init__(self, seed: Optional[int] = None, worker_id: str = "wrk_001"):
        self.seed = seed
        self.worker_id = worker_id
        self.rng = random.Random(seed)

    def generate_snapshot(
        self,
        as_of: Optional[date] = None,
        history_days: int = 45,
        miss_rate: float = 0.1,
        completion_rate: float = 0.7
    ) -> WorkerSnapshot:
        """
        Full history for one worker over [as_of - history_days, as_of].
        """
        if as_of is None: as_of = date.today()
        start = as_of - timedelta(days=history_days)

        logger.info(f"🎲 Generating {history_days} days of history for {self.worker_id} (seed={self.seed})")

        recurring, entries = self.generate_schedule(start, as_of)
        exceptions = self.generate_exceptions(as_of)
        plan = self.generate_rehab_plan(exceptions[0], as_of)
        check_ins = self.generate_check_ins(recurring, entries, exceptions, start, as_of, miss_rate)
        completions = self.generate_completions(plan, as_of, completion_rate)

        logger.info(
            f"✅ Generated {len(recurring)} templates, {len(entries)} dated shifts, "
            f"{len(check_ins)} check-ins, {len(completions)} exercise completions."
        )

        return WorkerSnapshot(
            worker_id=self.worker_id,
            schedule_entries=entries,
            recurring_schedules=recurring,
            exceptions=exceptions,
            check_ins=check_ins,
            rehab_plan=plan,
            completions=completions,
            range_start=start,
            range_end=as_of,
        )

    # --- Obligations ---

    def generate_schedule(self, start: date, end: date) -> Tuple[List[RecurringSchedule], List[WorkerScheduleEntry]]:
        """Monday-Friday template plus the odd Saturday overtime shift."""
        shift_type, shift_start, shift_end, overnight = self.rng.choice(SHIFT_PATTERNS)

        recurring = [
            RecurringSchedule(
                worker_id=self.worker_id,
                day_of_week=weekday,
                shift_type=shift_type,
                shift_start=shift_start,
                shift_end=shift_end,
                ends_next_day=overnight,
                effective_date=start,
            )
            for weekday in range(5)
        ]

        saturdays = [d for d in date_range(start, end) if d.weekday() == 5]
        overtime = self.rng.sample(saturdays, k=min(2, len(saturdays)))
        entries = [
            WorkerScheduleEntry(
                worker_id=self.worker_id,
                date=day,
                shift_type=ShiftType.MORNING,
                shift_start=time(7, 0),
                shift_end=time(12, 0),
            )
            for day in sorted(overtime)
        ]
        return recurring, entries

    def generate_exceptions(self, as_of: date) -> List[ExceptionRecord]:
        """One closed injury exception that ended shortly before `as_of`."""
        start = as_of - timedelta(days=self.rng.randint(14, 20))
        end = start + timedelta(days=self.rng.randint(3, 6))
        return [
            ExceptionRecord(
                id=f"exc_{self.worker_id}_001",
                worker_id=self.worker_id,
                exception_type=ExceptionType.INJURY,
                start_date=start,
                end_date=end,
                reason=self.rng.choice(INJURY_REASONS),
                case_status="in_rehab",
            )
        ]

    # --- Evidence ---

    def generate_check_ins(
        self,
        recurring: List[RecurringSchedule],
        entries: List[WorkerScheduleEntry],
        exceptions: List[ExceptionRecord],
        start: date,
        end: date,
        miss_rate: float
    ) -> List[CheckInRecord]:
        dated = {e.date: e for e in entries}
        check_ins = []

        for day in date_range(start, end):
            shift = dated.get(day)
            if shift is None:
                template = next((t for t in recurring if t.matches(day)), None)
                shift = template.to_entry(day) if template else None
            if shift is None or shift.shift_start is None:
                continue
            if any(x.covers(day) for x in exceptions):
                continue
            if self.rng.random() < miss_rate:
                continue

            # Most workers check in 5-50 minutes before the shift
            submitted = shift.shift_start_at - timedelta(minutes=self.rng.randint(5, 50))
            check_ins.append(CheckInRecord(
                worker_id=self.worker_id,
                date=submitted.date(),
                time=submitted.time().replace(second=0, microsecond=0),
                predicted_readiness=self._pick_readiness(),
                shift_type=shift.shift_type,
            ))
        return check_ins

    def generate_rehab_plan(self, injury: ExceptionRecord, as_of: date) -> RehabilitationPlan:
        """A 14-day plan starting the day after the injury exception ends."""
        start = (injury.end_date or as_of) + timedelta(days=1)
        exercises = self.rng.sample(EXERCISE_LIBRARY, k=3)
        return RehabilitationPlan(
            id=f"plan_{self.worker_id}_001",
            worker_id=self.worker_id,
            name="Return-to-Work Recovery Plan",
            start_date=start,
            duration_days=14,
            exercises=exercises,
        )

    def generate_completions(
        self,
        plan: RehabilitationPlan,
        as_of: date,
        completion_rate: float
    ) -> List[ExerciseCompletionRecord]:
        completions = []
        for day in date_range(plan.start_date, min(plan.end_date, as_of)):
            if self.rng.random() < completion_rate:
                done = plan.exercises
            else:
                done = self.rng.sample(plan.exercises, k=self.rng.randint(0, len(plan.exercises) - 1))
            completions.extend(
                ExerciseCompletionRecord(plan_id=plan.id, date=day, exercise_id=ex.id)
                for ex in done
            )
        return completions

    def _pick_readiness(self) -> Readiness:
        roll = self.rng.random()
        cumulative = 0.0
        for readiness, weight in READINESS_WEIGHTS:
            cumulative += weight
            if roll < cumulative:
                return readiness
        return Readiness.GREEN
