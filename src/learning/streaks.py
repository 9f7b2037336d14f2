"""Daily activity streak tracking."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import LearningStreak, as_utc
from src.db.streaks import get_streak_record, list_top_streaks, save_streak_record
from src.learning.locks import KeyedLocks


LOGGER = logging.getLogger(__name__)

DAY_MODES = ("elapsed", "calendar")
DEFAULT_TOP_STREAKS_LIMIT = 10


@dataclass(frozen=True, slots=True)
class StreakSnapshot:
    """Detached copy of a learner's streak."""

    learner_id: str
    current_streak: int
    longest_streak: int
    last_activity_at: datetime
    streak_started_at: datetime

    @classmethod
    def from_model(cls, record: LearningStreak) -> "StreakSnapshot":
        return cls(
            learner_id=record.learner_id,
            current_streak=record.current_streak,
            longest_streak=record.longest_streak,
            last_activity_at=as_utc(record.last_activity_at),
            streak_started_at=as_utc(record.streak_started_at),
        )


def days_between(
    earlier: datetime,
    later: datetime,
    mode: str = "elapsed",
    tz: tzinfo = timezone.utc,
) -> int:
    """Count days between two activities.

    ``elapsed`` floors the elapsed time in whole 24h periods, so two activities
    23h59m apart are on the "same day" even across midnight. ``calendar``
    compares local dates in ``tz``. Negative gaps count as zero.
    """
    if mode == "elapsed":
        days = (later - earlier) // timedelta(days=1)
    elif mode == "calendar":
        days = (later.astimezone(tz).date() - earlier.astimezone(tz).date()).days
    else:
        raise ValueError(f"Unknown streak day mode: {mode!r}.")
    return max(0, days)


def advance_streak(
    previous: Optional[StreakSnapshot],
    learner_id: str,
    now: datetime,
    mode: str = "elapsed",
    tz: tzinfo = timezone.utc,
) -> StreakSnapshot:
    """Apply one activity event to a streak."""
    if previous is None:
        return StreakSnapshot(
            learner_id=learner_id,
            current_streak=1,
            longest_streak=1,
            last_activity_at=now,
            streak_started_at=now,
        )

    gap = days_between(previous.last_activity_at, now, mode, tz)
    if gap == 0:
        current, started_at = previous.current_streak, previous.streak_started_at
    elif gap == 1:
        current, started_at = previous.current_streak + 1, previous.streak_started_at
    else:
        current, started_at = 1, now

    return StreakSnapshot(
        learner_id=learner_id,
        current_streak=current,
        longest_streak=max(previous.longest_streak, current),
        last_activity_at=now,
        streak_started_at=started_at,
    )


class StreakService:
    """Keeps per-learner consecutive-day activity counters."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        locks: Optional[KeyedLocks] = None,
        day_mode: str = "elapsed",
        tz: tzinfo = timezone.utc,
        top_limit: int = DEFAULT_TOP_STREAKS_LIMIT,
    ) -> None:
        if day_mode not in DAY_MODES:
            raise ValueError(f"Unknown streak day mode: {day_mode!r}.")
        self._session_factory = session_factory
        self._locks = locks if locks is not None else KeyedLocks()
        self._day_mode = day_mode
        self._tz = tz
        self._top_limit = top_limit

    async def update_streak(self, learner_id: str, now: Optional[datetime] = None) -> StreakSnapshot:
        """Register a qualifying activity for the learner."""
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        async with self._locks.hold(("streak", learner_id)):
            async with self._session_factory() as session:
                async with session.begin():
                    record = await get_streak_record(session, learner_id)
                    previous = StreakSnapshot.from_model(record) if record is not None else None
                    updated = advance_streak(previous, learner_id, now, self._day_mode, self._tz)
                    await save_streak_record(
                        session,
                        record,
                        learner_id=learner_id,
                        current_streak=updated.current_streak,
                        longest_streak=updated.longest_streak,
                        last_activity_at=updated.last_activity_at,
                        streak_started_at=updated.streak_started_at,
                    )

        if previous is not None and updated.current_streak < previous.current_streak:
            LOGGER.info(
                "Streak of learner %s reset after %s days.",
                learner_id,
                previous.current_streak,
            )
        return updated

    async def get_streak(self, learner_id: str) -> Optional[StreakSnapshot]:
        """Return the learner's streak, or ``None`` if they were never active."""
        async with self._session_factory() as session:
            record = await get_streak_record(session, learner_id)
            return StreakSnapshot.from_model(record) if record is not None else None

    async def get_top_streaks(self, limit: Optional[int] = None) -> List[StreakSnapshot]:
        """Return the longest current streaks, longest first."""
        if limit is None:
            limit = self._top_limit
        if limit < 1:
            raise ValueError("limit must be a positive integer.")

        async with self._session_factory() as session:
            records = await list_top_streaks(session, limit)
            return [StreakSnapshot.from_model(record) for record in records]
