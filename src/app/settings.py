"""Configuration helpers for the Learning Core runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.learning.srs import QUALITY_POLICIES
from src.learning.streaks import DAY_MODES, DEFAULT_TOP_STREAKS_LIMIT


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    quality_policy: str
    streak_day_mode: str
    streak_timezone: str
    top_streaks_limit: int

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", "Learning Core")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        quality_policy = os.getenv("QUALITY_POLICY", "reject").strip().lower()
        if quality_policy not in QUALITY_POLICIES:
            raise RuntimeError("QUALITY_POLICY must be either 'reject' or 'clamp'.")

        streak_day_mode = os.getenv("STREAK_DAY_MODE", "elapsed").strip().lower()
        if streak_day_mode not in DAY_MODES:
            raise RuntimeError("STREAK_DAY_MODE must be either 'elapsed' or 'calendar'.")

        streak_timezone = os.getenv("STREAK_TIMEZONE", "UTC")
        try:
            ZoneInfo(streak_timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise RuntimeError(f"STREAK_TIMEZONE {streak_timezone!r} is not a known time zone.") from exc

        try:
            top_streaks_limit = int(os.getenv("TOP_STREAKS_LIMIT", str(DEFAULT_TOP_STREAKS_LIMIT)))
        except ValueError as exc:
            raise RuntimeError("TOP_STREAKS_LIMIT must be an integer.") from exc

        if top_streaks_limit < 1:
            raise RuntimeError("TOP_STREAKS_LIMIT must be a positive integer.")

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            quality_policy=quality_policy,
            streak_day_mode=streak_day_mode,
            streak_timezone=streak_timezone,
            top_streaks_limit=top_streaks_limit,
        )
