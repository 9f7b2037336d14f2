"""Spaced-repetition scheduling helpers for item reviews."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.learning.errors import InvalidQualityError


MIN_EASE_FACTOR = 1.3
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3
GRADUATION_INTERVAL_DAYS = 3

QUALITY_POLICIES = ("reject", "clamp")


@dataclass(frozen=True, slots=True)
class ReviewSchedule:
    """Interval and ease factor calculated after a review."""

    interval_days: int
    ease_factor: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (``round`` would go to even)."""
    return int(math.floor(value + 0.5))


def calculate_next_review(
    quality: int,
    prior_ease_factor: float,
    prior_interval_days: int,
) -> ReviewSchedule:
    """Return the next interval and ease factor using an SM-2 variant.

    The function is pure: it never reads the clock and never raises. Quality is
    expected in 0..5 and is not validated here, see :func:`normalize_quality`.
    A failed recall resets the interval to one day but leaves the repetition
    count to the caller.
    """
    lapse = MAX_QUALITY - quality
    ease_factor = max(MIN_EASE_FACTOR, prior_ease_factor + 0.1 - lapse * (0.08 + lapse * 0.02))

    if quality < PASSING_QUALITY:
        interval_days = 1
    elif prior_interval_days == 1:
        interval_days = GRADUATION_INTERVAL_DAYS
    else:
        interval_days = max(1, round_half_up(prior_interval_days * ease_factor))

    return ReviewSchedule(interval_days=interval_days, ease_factor=ease_factor)


def next_review_at(reviewed_at: datetime, interval_days: int) -> datetime:
    """Return the due timestamp for a review performed at ``reviewed_at``."""
    return reviewed_at + timedelta(days=interval_days)


def normalize_quality(quality: object, policy: str = "reject") -> int:
    """Validate a quality score at the service boundary.

    ``reject`` raises for values outside 0..5, ``clamp`` pulls them into range.
    Non-integers (including bools) are rejected under both policies.
    """
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if policy == "clamp":
        return max(MIN_QUALITY, min(MAX_QUALITY, quality))
    if policy != "reject":
        raise ValueError(f"Unknown quality policy: {policy!r}.")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidQualityError(quality)
    return quality
