from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.learning.errors import InvalidQualityError
from src.learning.srs import (
    MIN_EASE_FACTOR,
    calculate_next_review,
    next_review_at,
    normalize_quality,
    round_half_up,
)


def test_first_perfect_review_graduates_to_three_days() -> None:
    schedule = calculate_next_review(quality=5, prior_ease_factor=2.5, prior_interval_days=1)

    assert schedule.interval_days == 3
    assert schedule.ease_factor == pytest.approx(2.6)


def test_failed_review_resets_interval_and_lowers_ease() -> None:
    schedule = calculate_next_review(quality=2, prior_ease_factor=2.0, prior_interval_days=10)

    assert schedule.interval_days == 1
    assert schedule.ease_factor == pytest.approx(1.68)


def test_successful_review_scales_interval_by_new_ease() -> None:
    schedule = calculate_next_review(quality=5, prior_ease_factor=2.5, prior_interval_days=10)

    assert schedule.ease_factor == pytest.approx(2.6)
    assert schedule.interval_days == 26


def test_graduation_step_ignores_ease() -> None:
    low = calculate_next_review(quality=3, prior_ease_factor=1.3, prior_interval_days=1)
    high = calculate_next_review(quality=5, prior_ease_factor=3.5, prior_interval_days=1)

    assert low.interval_days == high.interval_days == 3


@pytest.mark.parametrize("quality", range(0, 6))
@pytest.mark.parametrize("prior_ease", [1.3, 1.5, 2.5, 3.2])
@pytest.mark.parametrize("prior_interval", [1, 2, 7, 40])
def test_ease_floor_and_minimum_interval(quality: int, prior_ease: float, prior_interval: int) -> None:
    schedule = calculate_next_review(quality, prior_ease, prior_interval)

    assert schedule.ease_factor >= MIN_EASE_FACTOR
    assert schedule.interval_days >= 1


def test_blackout_at_floor_stays_at_floor() -> None:
    schedule = calculate_next_review(quality=0, prior_ease_factor=1.3, prior_interval_days=30)

    assert schedule.ease_factor == MIN_EASE_FACTOR
    assert schedule.interval_days == 1


def test_calculation_is_deterministic() -> None:
    first = calculate_next_review(4, 2.36, 15)
    second = calculate_next_review(4, 2.36, 15)

    assert first == second


def test_out_of_range_quality_is_not_validated_by_engine() -> None:
    schedule = calculate_next_review(quality=9, prior_ease_factor=2.5, prior_interval_days=4)

    assert schedule.interval_days >= 1
    assert schedule.ease_factor >= MIN_EASE_FACTOR


def test_round_half_up_rounds_halves_away_from_even() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(12.5) == 13
    assert round_half_up(12.49) == 12


def test_next_review_at_adds_whole_days() -> None:
    reviewed_at = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)

    assert next_review_at(reviewed_at, 3) == reviewed_at + timedelta(days=3)


def test_normalize_quality_rejects_out_of_range_by_default() -> None:
    assert normalize_quality(0) == 0
    assert normalize_quality(5) == 5
    with pytest.raises(InvalidQualityError):
        normalize_quality(6)
    with pytest.raises(InvalidQualityError):
        normalize_quality(-1)


def test_normalize_quality_clamps_when_configured() -> None:
    assert normalize_quality(8, "clamp") == 5
    assert normalize_quality(-2, "clamp") == 0
    assert normalize_quality(3, "clamp") == 3


def test_normalize_quality_rejects_non_integers() -> None:
    for value in (2.5, "4", None, True):
        with pytest.raises(InvalidQualityError):
            normalize_quality(value, "clamp")


def test_invalid_quality_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        normalize_quality(11)
