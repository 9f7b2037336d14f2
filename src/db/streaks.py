"""Persistence helpers for learner activity streaks."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import LearningStreak


async def get_streak_record(session: AsyncSession, learner_id: str) -> Optional[LearningStreak]:
    """Return the streak row of a learner, if they were ever active."""
    return await session.get(LearningStreak, learner_id)


async def save_streak_record(
    session: AsyncSession,
    existing: Optional[LearningStreak],
    *,
    learner_id: str,
    current_streak: int,
    longest_streak: int,
    last_activity_at: datetime,
    streak_started_at: datetime,
) -> LearningStreak:
    """Insert or overwrite the streak row of a learner."""
    if existing is None:
        existing = LearningStreak(learner_id=learner_id)
        session.add(existing)

    existing.current_streak = current_streak
    existing.longest_streak = longest_streak
    existing.last_activity_at = last_activity_at
    existing.streak_started_at = streak_started_at
    existing.updated_at = last_activity_at
    await session.flush()
    return existing


async def list_top_streaks(session: AsyncSession, limit: int) -> Sequence[LearningStreak]:
    """Return the learners with the longest running streaks."""
    stmt = (
        select(LearningStreak)
        .order_by(
            LearningStreak.current_streak.desc(),
            LearningStreak.longest_streak.desc(),
            LearningStreak.learner_id,
        )
        .limit(limit)
    )
    result = await session.execute(stmt)
    return result.scalars().all()
