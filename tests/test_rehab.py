"""Tests for rehabilitation plan progression."""

from datetime import date, datetime, timezone

import pytest

from models import ExerciseCompletionRecord, PlanStatus
from readiness import (
    EngineSettings,
    InvalidPlanRangeError,
    InvalidPlanTransitionError,
    cancel_plan,
    complete_plan,
    compute_plan_progress,
)
from readiness.rehab import current_plan_day, is_day_complete, percent

PLAN_START = date(2024, 2, 1)


# ============================================================================
# Progress
# ============================================================================


class TestPlanProgress:
    """Day-indexed completion roll-up."""

    def test_partial_current_day(self, make_plan, make_completions):
        plan = make_plan(PLAN_START, 5)
        completions = (
            make_completions(plan, [date(2024, 2, 1), date(2024, 2, 2)])
            + make_completions(plan, [date(2024, 2, 3)], ["ex_1", "ex_2"])
        )
        now = datetime(2024, 2, 3, 12, 0)
        progress = compute_plan_progress(plan, completions, now)

        assert progress.current_day == 3
        assert progress.days_completed == 2
        assert progress.progress_percent == 40
        assert not progress.current_day_complete
        assert progress.days[2].completed_exercise_ids == ["ex_1", "ex_2"]
        assert progress.days[2].is_current
        # Today's set is still outstanding, so it is available right now
        assert progress.next_warm_up_available_at == now

    def test_fully_covered_plan(self, make_plan, make_completions):
        plan = make_plan(PLAN_START, 7)
        completions = make_completions(plan, [date(2024, 2, d) for d in range(1, 8)])
        progress = compute_plan_progress(plan, completions, datetime(2024, 2, 20, 9, 0))

        assert progress.current_day == 7
        assert progress.days_completed == 7
        assert progress.progress_percent == 100
        assert progress.is_finished
        assert progress.next_warm_up_available_at is None

    def test_next_warm_up_unlocks_next_morning(self, make_plan, make_completions):
        plan = make_plan(PLAN_START, 5)
        now = datetime(2024, 2, 1, 10, 0, tzinfo=timezone.utc)
        progress = compute_plan_progress(plan, make_completions(plan, [PLAN_START]), now)

        assert progress.current_day_complete
        assert progress.next_warm_up_available_at == datetime(2024, 2, 2, 6, 0, tzinfo=timezone.utc)

    def test_future_days_do_not_count(self, make_plan, make_completions):
        plan = make_plan(PLAN_START, 5)
        completions = make_completions(plan, [date(2024, 2, 4)])
        progress = compute_plan_progress(plan, completions, datetime(2024, 2, 2, 12, 0))
        assert progress.days_completed == 0
        assert progress.days[3].is_complete

    def test_before_start_clamps_to_day_one(self, make_plan):
        plan = make_plan(PLAN_START, 5)
        assert current_plan_day(plan, date(2024, 1, 20)) == 1
        assert compute_plan_progress(plan, [], datetime(2024, 1, 20, 12, 0)).current_day == 1

    def test_local_zone_decides_the_day(self, make_plan):
        plan = make_plan(PLAN_START, 5)
        settings = EngineSettings(timezone="Asia/Tokyo")
        # 2024-02-01 20:00 UTC is already 2024-02-02 in Tokyo
        progress = compute_plan_progress(plan, [], datetime(2024, 2, 1, 20, 0, tzinfo=timezone.utc), settings)
        assert progress.current_day == 2


class TestDayCoverage:
    """Completion is set coverage by exercise id."""

    def test_duplicates_do_not_cover_other_exercises(self, make_plan):
        plan = make_plan(PLAN_START, 5)
        assert not is_day_complete(plan, ["ex_1", "ex_1", "ex_2"])
        assert is_day_complete(plan, ["ex_3", "ex_1", "ex_2", "ex_2"])

    def test_plan_without_exercises_never_completes(self, make_plan):
        plan = make_plan(PLAN_START, 5, exercise_count=0)
        assert not is_day_complete(plan, [])
        assert compute_plan_progress(plan, [], datetime(2024, 2, 5, 12, 0)).days_completed == 0

    def test_other_plans_are_ignored(self, make_plan):
        plan = make_plan(PLAN_START, 5, exercise_count=1)
        stray = [ExerciseCompletionRecord(plan_id="plan_other", date=PLAN_START, exercise_id="ex_1")]
        progress = compute_plan_progress(plan, stray, datetime(2024, 2, 1, 12, 0))
        assert progress.days_completed == 0

    def test_percent_rounds_half_up(self):
        assert percent(1, 8) == 13
        assert percent(2, 5) == 40
        assert percent(0, 5) == 0
        assert percent(1, 3) == 33


# ============================================================================
# Validation & Transitions
# ============================================================================


class TestPlanValidation:
    @pytest.mark.parametrize("duration", [0, -3, 366])
    def test_out_of_range_duration(self, make_plan, duration):
        plan = make_plan(PLAN_START, duration)
        with pytest.raises(InvalidPlanRangeError) as err:
            compute_plan_progress(plan, [], datetime(2024, 2, 1, 12, 0))
        assert err.value.duration_days == duration

    def test_maximum_duration_is_accepted(self, make_plan):
        progress = compute_plan_progress(make_plan(PLAN_START, 365), [], datetime(2024, 2, 1, 12, 0))
        assert progress.duration_days == 365


class TestPlanTransitions:
    """Status only changes through explicit clinician actions."""

    def test_complete_and_cancel(self, make_plan):
        plan = make_plan(PLAN_START, 5)
        assert complete_plan(plan).status is PlanStatus.COMPLETED
        assert cancel_plan(plan).status is PlanStatus.CANCELLED
        assert plan.status is PlanStatus.ACTIVE

    def test_terminal_status_cannot_change(self, make_plan):
        done = complete_plan(make_plan(PLAN_START, 5))
        with pytest.raises(InvalidPlanTransitionError):
            cancel_plan(done)
        with pytest.raises(InvalidPlanTransitionError):
            complete_plan(done)

    def test_progress_never_changes_status(self, make_plan, make_completions):
        plan = make_plan(PLAN_START, 3)
        completions = make_completions(plan, [date(2024, 2, d) for d in range(1, 4)])
        progress = compute_plan_progress(plan, completions, datetime(2024, 3, 1, 12, 0))
        assert progress.is_finished
        assert progress.status is PlanStatus.ACTIVE
