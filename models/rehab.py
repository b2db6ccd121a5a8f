"""
Rehabilitation plan data models for the Worker Readiness Engine.

A plan is a clinician-authored, fixed-duration, day-indexed exercise program.
Day 1 is `start_date`; every day requires the full exercise set.
"""

from enum import Enum
from typing import List, Optional, FrozenSet
from pydantic import BaseModel, Field, ConfigDict
from datetime import date as date_type, timedelta


class PlanStatus(str, Enum):
    """Lifecycle of a rehabilitation plan. COMPLETED and CANCELLED are terminal."""
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not PlanStatus.ACTIVE


class Exercise(BaseModel):
    """One exercise of the daily set."""
    id: str = Field(description="Unique identifier")
    name: str = Field(min_length=1, description="e.g. 'Wrist flexor stretch'")
    repetitions: Optional[str] = Field(default=None, description="e.g. '3 x 10'")
    instructions: str = Field(default="", description="How to perform the exercise")

    model_config = ConfigDict(frozen=True)


class RehabilitationPlan(BaseModel):
    """
    Day-indexed exercise program assigned to one worker.
    `duration_days` is range-checked by the progression engine, not here,
    so malformed plans surface as InvalidPlanRangeError.
    """
    id: str
    worker_id: str
    name: str = Field(default="Recovery Plan")
    start_date: date_type = Field(description="Day 1 of the plan")
    duration_days: int = Field(description="Number of plan days (inclusive of start)")
    exercises: List[Exercise] = Field(default_factory=list, description="Ordered daily exercise set")
    status: PlanStatus = Field(default=PlanStatus.ACTIVE)

    @property
    def end_date(self) -> date_type:
        """Last plan day (inclusive)."""
        return self.start_date + timedelta(days=self.duration_days - 1)

    @property
    def exercise_ids(self) -> FrozenSet[str]:
        return frozenset(ex.id for ex in self.exercises)

    def date_for_day(self, day_number: int) -> date_type:
        """Calendar date of plan day `day_number` (1-based)."""
        return self.start_date + timedelta(days=day_number - 1)

    def day_number_for(self, day: date_type) -> Optional[int]:
        """1-based plan day that falls on `day`, or None outside the plan."""
        if day < self.start_date or day > self.end_date:
            return None
        return (day - self.start_date).days + 1

    model_config = ConfigDict(frozen=True, json_schema_extra={
        "example": {
            "id": "plan_001",
            "worker_id": "wrk_001",
            "start_date": "2024-02-01",
            "duration_days": 5,
            "exercises": [
                {"id": "ex_1", "name": "Wrist flexor stretch", "repetitions": "3 x 10"},
                {"id": "ex_2", "name": "Grip squeeze", "repetitions": "2 x 15"}
            ],
            "status": "active"
        }
    })


class ExerciseCompletionRecord(BaseModel):
    """One exercise marked done on one calendar day of a plan."""
    plan_id: str
    date: date_type
    exercise_id: str

    model_config = ConfigDict(frozen=True)
