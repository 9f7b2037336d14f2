"""Exceptions raised by the learning services."""


class LearningCoreError(Exception):
    """Base class for errors raised by the learning core itself.

    Storage failures are not wrapped: SQLAlchemy exceptions reach callers unchanged.
    """


class InvalidQualityError(LearningCoreError, ValueError):
    """Raised when a review quality score is not an integer in the 0..5 range."""

    def __init__(self, quality: object) -> None:
        super().__init__(f"Review quality must be an integer between 0 and 5, got {quality!r}.")
        self.quality = quality
