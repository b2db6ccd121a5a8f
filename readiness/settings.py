"""
Engine configuration.

Every policy constant the engine applies lives here so callers can tune them
per deployment. Values can be overridden from READINESS_* environment variables.
"""

import os
import logging
from datetime import time
from typing import List, Optional, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "READINESS_"


class EngineSettings(BaseModel):
    """Policy knobs for window derivation, streaks and rehabilitation plans."""

    # --- Clock ---
    timezone: str = Field(default="UTC", description="IANA zone used to derive 'today' from an instant")

    # --- Check-in Window Policy (relative to shift start) ---
    check_in_lead_minutes: int = Field(default=60, ge=0, le=24 * 60)
    check_in_lag_minutes: int = Field(default=30, ge=0, le=24 * 60)
    recommended_lead_minutes: int = Field(default=30, ge=0, le=24 * 60)

    # --- Flexible Schedules ---
    flexible_window_start: time = Field(default=time(5, 0))
    flexible_window_end: time = Field(default=time(23, 0))
    working_weekdays: List[int] = Field(
        default_factory=lambda: [0, 1, 2, 3, 4],
        description="Weekdays (0=Monday) on which flexible shifts require a check-in"
    )

    # --- Streaks & Badges ---
    streak_milestones: List[int] = Field(default_factory=lambda: [7, 14, 30, 60, 90])
    badge_threshold: int = Field(
        default=7,
        ge=1,
        description="Streak length that earns `badge`; `has_seven_day_badge` always uses 7"
    )
    schedule_lookahead_days: int = Field(default=90, ge=0)
    default_lookback_days: int = Field(
        default=30,
        ge=1,
        description="Walk length when the earliest schedule date is unbounded"
    )

    # --- Rehabilitation ---
    max_plan_duration_days: int = Field(default=365, ge=1)
    warm_up_unlock_time: time = Field(default=time(6, 0), description="Next plan day unlocks at this local time")

    @field_validator('working_weekdays')
    @classmethod
    def validate_weekdays(cls, v):
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("working_weekdays entries must be between 0 (Monday) and 6 (Sunday)")
        return sorted(set(v))

    @field_validator('streak_milestones')
    @classmethod
    def validate_milestones(cls, v):
        if any(m <= 0 for m in v):
            raise ValueError("Streak milestones must be positive")
        return sorted(set(v))

    @model_validator(mode='after')
    def validate_window_policy(self):
        if self.recommended_lead_minutes > self.check_in_lead_minutes:
            raise ValueError("Recommended range must sit inside the check-in window")
        if self.flexible_window_end <= self.flexible_window_start:
            raise ValueError("Flexible window end must be after its start")
        return self

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "EngineSettings":
        """
        Build settings from READINESS_<FIELD> variables (e.g. READINESS_TIMEZONE).
        List fields are comma-separated; times are HH:MM.
        """
        environ = os.environ if environ is None else environ
        overrides = {}
        for name, field in cls.model_fields.items():
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            if field.annotation == List[int]:
                overrides[name] = [int(part) for part in raw.split(",") if part.strip()]
            else:
                overrides[name] = raw
        if overrides:
            logger.info(f"Applying environment overrides: {sorted(overrides)}")
        return cls(**overrides)


DEFAULT_SETTINGS = EngineSettings()
