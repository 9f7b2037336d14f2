"""Service container wiring the learning services to one database."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import as_utc
from src.db.reviews import ReviewStateSnapshot
from src.learning.difficulty import DifficultyService
from src.learning.locks import KeyedLocks
from src.learning.mastery import MasteryTracker
from src.learning.reviews import ReviewService
from src.learning.srs import MAX_QUALITY, PASSING_QUALITY
from src.learning.streaks import StreakService

if TYPE_CHECKING:
    from src.app.settings import AppSettings


@dataclass(slots=True)
class LearningCore:
    """Learning services sharing one session factory and one lock registry."""

    reviews: ReviewService
    difficulty: DifficultyService
    streaks: StreakService
    mastery: MasteryTracker
    locks: KeyedLocks

    @classmethod
    def build(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Optional[AppSettings] = None,
    ) -> "LearningCore":
        """Construct the services; without settings the built-in defaults apply."""
        quality_policy = settings.quality_policy if settings else "reject"
        day_mode = settings.streak_day_mode if settings else "elapsed"
        tz = ZoneInfo(settings.streak_timezone) if settings else timezone.utc
        top_limit = settings.top_streaks_limit if settings else 10

        locks = KeyedLocks()
        return cls(
            reviews=ReviewService(session_factory, locks=locks, quality_policy=quality_policy),
            difficulty=DifficultyService(session_factory, locks=locks),
            streaks=StreakService(
                session_factory,
                locks=locks,
                day_mode=day_mode,
                tz=tz,
                top_limit=top_limit,
            ),
            mastery=MasteryTracker(),
            locks=locks,
        )

    async def record_review(
        self,
        learner_id: str,
        item_id: str,
        quality: int,
        concept_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReviewStateSnapshot:
        """Schedule a review, count it as streak activity and update concept mastery."""
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        state = await self.reviews.schedule_review(learner_id, item_id, quality, now=now)
        await self.streaks.update_streak(learner_id, now=now)
        if concept_id is not None:
            self.mastery.update_mastery(
                concept_id,
                is_correct=quality >= PASSING_QUALITY,
                confidence=max(0, min(quality, MAX_QUALITY)) / MAX_QUALITY,
            )
        return state
