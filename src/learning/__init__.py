"""Spaced-repetition, difficulty, streak and mastery services."""

from .core import LearningCore
from .errors import InvalidQualityError, LearningCoreError
from .srs import ReviewSchedule, calculate_next_review

__all__ = [
    "LearningCore",
    "InvalidQualityError",
    "LearningCoreError",
    "ReviewSchedule",
    "calculate_next_review",
]
