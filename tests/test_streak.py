"""Tests for the streak and badge calculator."""

from datetime import date, time, timedelta

import pytest

from readiness import EngineSettings, InvalidScheduleError, build_badge, next_milestone
from readiness.calendar import date_range

START = date(2024, 1, 1)  # Monday


def weekdays(start: date, end: date):
    return [d for d in date_range(start, end) if d.weekday() < 5]


class TestStreakWalk:
    """Rolling daily verdicts into a running streak."""

    def test_unbroken_history(self, make_engine, make_weekday_templates, make_check_in, worker_id):
        days = weekdays(START, date(2024, 1, 12))
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in days],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 12))

        assert streak.current_streak == 10
        assert streak.longest_streak == 10
        assert streak.completed_days == 10
        assert streak.past_scheduled_days == 10
        assert streak.total_scheduled_days > streak.past_scheduled_days
        assert streak.missed_schedule_dates == []
        assert streak.today_check_in_completed
        assert streak.next_check_in_date == date(2024, 1, 15)

    def test_missed_day_breaks_the_streak(self, make_engine, make_weekday_templates, make_check_in, worker_id):
        days = [d for d in weekdays(START, date(2024, 1, 12)) if d != date(2024, 1, 3)]
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in days],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 12))

        assert streak.current_streak == 7
        assert streak.longest_streak == 7
        assert streak.completed_days == 9
        assert streak.missed_schedule_dates == [date(2024, 1, 3)]
        assert streak.missed_schedule_count == 1

    def test_exception_days_are_skipped(self, make_engine, make_weekday_templates, make_check_in,
                                        make_exception, worker_id):
        excepted = [date(2024, 1, 8), date(2024, 1, 9)]
        days = [d for d in weekdays(START, date(2024, 1, 12)) if d not in excepted]
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in days],
            exceptions=[make_exception(excepted[0], excepted[-1])],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 12))

        assert streak.current_streak == 8
        assert streak.exception_dates == excepted
        assert streak.missed_schedule_dates == []

    def test_today_pending_is_not_missed(self, make_engine, make_weekday_templates, make_check_in, worker_id):
        days = weekdays(START, date(2024, 1, 11))
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in days],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 12))

        assert streak.current_streak == 9
        assert streak.missed_schedule_dates == []
        assert not streak.today_check_in_completed
        assert streak.next_check_in_date == date(2024, 1, 12)

    def test_partial_plan_day_counts_as_missed(self, make_engine, make_weekday_templates, make_check_in,
                                               make_plan, worker_id):
        days = weekdays(START, date(2024, 1, 5))
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in days],
            rehab_plan=make_plan(date(2024, 1, 4), 7),
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 8))
        assert streak.missed_schedule_dates == [date(2024, 1, 4), date(2024, 1, 5)]
        assert streak.current_streak == 0
        assert streak.longest_streak == 3

    def test_no_assignments(self, make_engine, worker_id):
        streak = make_engine().compute_streak(worker_id, date(2024, 1, 12))
        assert streak.current_streak == 0
        assert streak.total_scheduled_days == 0
        assert streak.next_check_in_date is None

    def test_since_bounds_the_walk(self, make_engine, make_weekday_templates, make_check_in, worker_id):
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in weekdays(date(2024, 1, 8), date(2024, 1, 12))],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 12), since=date(2024, 1, 8))
        assert streak.current_streak == 5
        assert streak.missed_schedule_dates == []


class TestMonotonicity:
    """Advancing as_of by one day moves the streak by at most one step."""

    def test_streak_grows_by_at_most_one(self, make_engine, make_weekday_templates, make_check_in, worker_id):
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in weekdays(START, date(2024, 1, 31))],
        )
        previous = engine.compute_streak(worker_id, START).current_streak
        for day in date_range(START + timedelta(days=1), date(2024, 1, 31)):
            current = engine.compute_streak(worker_id, day).current_streak
            expected = previous + 1 if day.weekday() < 5 else previous
            assert current == expected
            previous = current

    def test_missed_day_resets_on_the_following_call(self, make_engine, make_weekday_templates,
                                                     make_check_in, worker_id):
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in weekdays(START, date(2024, 1, 4))],
        )
        # Friday 01-05 has no check-in: still in progress on the day itself
        assert engine.compute_streak(worker_id, date(2024, 1, 5)).current_streak == 4
        assert engine.compute_streak(worker_id, date(2024, 1, 8)).current_streak == 0


class TestMilestones:
    def test_next_milestone(self):
        milestones = [7, 14, 30, 60, 90]
        assert next_milestone(0, milestones) == 7
        assert next_milestone(7, milestones) == 14
        assert next_milestone(90, milestones) is None

    def test_badge_unlocks_at_threshold(self):
        assert build_badge(6, 7, date(2024, 1, 12)) is None
        badge = build_badge(7, 7, date(2024, 1, 12))
        assert badge.name == "7-Day Streak"
        assert badge.achieved_date == date(2024, 1, 12)

    def test_streak_reports_badge(self, make_engine, make_weekday_templates, make_check_in, worker_id):
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in weekdays(START, date(2024, 1, 12))],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 12))
        assert streak.has_seven_day_badge
        assert streak.badge is not None
        assert streak.next_milestone == 14
        assert streak.days_until_next_milestone == 4

    def test_badge_threshold_only_moves_the_badge(self, make_engine, make_weekday_templates, make_check_in,
                                                   worker_id):
        engine = make_engine(
            settings=EngineSettings(badge_threshold=5),
            recurring_schedules=make_weekday_templates(effective=START),
            check_ins=[make_check_in(d) for d in weekdays(START, date(2024, 1, 8))],
        )
        streak = engine.compute_streak(worker_id, date(2024, 1, 8))
        assert streak.current_streak == 6
        assert streak.badge.name == "5-Day Streak"
        assert not streak.has_seven_day_badge


class TestMalformedSchedules:
    """Bad shift bounds surface wherever the walk meets them."""

    def test_malformed_upcoming_shift_raises(self, make_engine, make_entry, make_weekday_templates,
                                             make_check_in, worker_id):
        upcoming = date(2024, 1, 16)
        engine = make_engine(
            recurring_schedules=make_weekday_templates(effective=START),
            schedule_entries=[make_entry(upcoming, start=time(16, 0), end=time(8, 0))],
            check_ins=[make_check_in(d) for d in weekdays(START, date(2024, 1, 12))],
        )
        with pytest.raises(InvalidScheduleError) as err:
            engine.compute_streak(worker_id, date(2024, 1, 12))
        assert err.value.day == upcoming
