"""Tests for engine configuration."""

from datetime import time

import pytest
from pydantic import ValidationError

from readiness import DEFAULT_SETTINGS, EngineSettings


class TestDefaults:
    def test_policy_defaults(self):
        assert DEFAULT_SETTINGS.check_in_lead_minutes == 60
        assert DEFAULT_SETTINGS.check_in_lag_minutes == 30
        assert DEFAULT_SETTINGS.streak_milestones == [7, 14, 30, 60, 90]
        assert DEFAULT_SETTINGS.max_plan_duration_days == 365
        assert DEFAULT_SETTINGS.warm_up_unlock_time == time(6, 0)
        assert DEFAULT_SETTINGS.working_weekdays == [0, 1, 2, 3, 4]


class TestValidation:
    def test_milestones_are_sorted_and_unique(self):
        assert EngineSettings(streak_milestones=[30, 7, 7, 14]).streak_milestones == [7, 14, 30]

    def test_rejects_bad_weekday(self):
        with pytest.raises(ValidationError):
            EngineSettings(working_weekdays=[0, 7])

    def test_rejects_recommended_outside_window(self):
        with pytest.raises(ValidationError):
            EngineSettings(check_in_lead_minutes=20, recommended_lead_minutes=30)

    def test_rejects_inverted_flexible_window(self):
        with pytest.raises(ValidationError):
            EngineSettings(flexible_window_start=time(22, 0), flexible_window_end=time(6, 0))


class TestFromEnv:
    """READINESS_* variables override defaults."""

    def test_overrides(self):
        settings = EngineSettings.from_env({
            "READINESS_TIMEZONE": "Europe/London",
            "READINESS_CHECK_IN_LEAD_MINUTES": "45",
            "READINESS_STREAK_MILESTONES": "30, 7,14",
            "READINESS_WARM_UP_UNLOCK_TIME": "07:30",
            "UNRELATED": "ignored",
        })
        assert settings.timezone == "Europe/London"
        assert settings.check_in_lead_minutes == 45
        assert settings.streak_milestones == [7, 14, 30]
        assert settings.warm_up_unlock_time == time(7, 30)

    def test_empty_environment_gives_defaults(self):
        assert EngineSettings.from_env({}) == EngineSettings()

    def test_invalid_value_raises(self):
        with pytest.raises(ValidationError):
            EngineSettings.from_env({"READINESS_CHECK_IN_LAG_MINUTES": "soon"})
