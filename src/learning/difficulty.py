"""Item difficulty estimation from attempt history."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import as_utc
from src.db.difficulty import (
    DifficultyRecordSnapshot,
    get_difficulty_record,
    list_level_items_with_difficulty,
    upsert_difficulty_record,
)
from src.db.items import ItemDetails, add_attempt, list_attempt_outcomes
from src.learning.locks import KeyedLocks
from src.learning.srs import round_half_up


LOGGER = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = 0.5


@dataclass(frozen=True, slots=True)
class DifficultyEstimate:
    """Difficulty figures derived from a complete attempt history."""

    difficulty: float
    total_attempts: int
    success_rate: int


def estimate_difficulty(outcomes: Iterable[bool]) -> Optional[DifficultyEstimate]:
    """Turn pass/fail outcomes into a 0..1 difficulty (higher is harder).

    Returns ``None`` when there are no outcomes.
    """
    results = list(outcomes)
    if not results:
        return None

    passes = sum(1 for passed in results if passed)
    success_rate = round_half_up(100 * passes / len(results))
    return DifficultyEstimate(
        difficulty=(100 - success_rate) / 100,
        total_attempts=len(results),
        success_rate=success_rate,
    )


class DifficultyService:
    """Maintains per-item difficulty records and orders questions by them."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        locks: Optional[KeyedLocks] = None,
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks if locks is not None else KeyedLocks()

    async def record_attempt(
        self,
        item_id: str,
        passed: bool,
        learner_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Append an attempt outcome to the item's history."""
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        async with self._session_factory() as session:
            async with session.begin():
                await add_attempt(session, item_id, passed, learner_id=learner_id, now=now)

    async def update_question_difficulty(
        self,
        item_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[DifficultyRecordSnapshot]:
        """Recompute an item's difficulty from its full attempt history.

        Items without attempts are left untouched and ``None`` is returned.
        """
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        async with self._locks.hold(("difficulty", item_id)):
            async with self._session_factory() as session:
                async with session.begin():
                    estimate = estimate_difficulty(await list_attempt_outcomes(session, item_id))
                    if estimate is None:
                        LOGGER.debug("No attempts recorded for item %s; difficulty unchanged.", item_id)
                        return None

                    record = await upsert_difficulty_record(
                        session,
                        item_id,
                        difficulty=estimate.difficulty,
                        total_attempts=estimate.total_attempts,
                        success_rate=estimate.success_rate,
                        now=now,
                    )
                    snapshot = DifficultyRecordSnapshot.from_model(record)

        LOGGER.debug(
            "Item %s difficulty %.2f from %s attempts.",
            item_id,
            snapshot.difficulty,
            snapshot.total_attempts,
        )
        return snapshot

    async def get_difficulty_record(self, item_id: str) -> Optional[DifficultyRecordSnapshot]:
        """Return the stored difficulty record of an item, if any."""
        async with self._session_factory() as session:
            record = await get_difficulty_record(session, item_id)
            return DifficultyRecordSnapshot.from_model(record) if record is not None else None

    async def get_question_difficulty(self, item_id: str) -> float:
        """Return the item's difficulty, or the medium default when none was computed."""
        record = await self.get_difficulty_record(item_id)
        return record.difficulty if record is not None else DEFAULT_DIFFICULTY

    async def get_questions_ordered_by_difficulty(
        self,
        level_id: str,
        ascending: bool = True,
    ) -> List[ItemDetails]:
        """Return a level's items sorted by difficulty.

        Items without a record count as medium difficulty. Ties keep the level's
        creation order in both directions.
        """
        async with self._session_factory() as session:
            rows = await list_level_items_with_difficulty(session, level_id)
            entries = [
                (ItemDetails.from_model(item), DEFAULT_DIFFICULTY if difficulty is None else difficulty)
                for item, difficulty in rows
            ]

        if ascending:
            ordered = sorted(entries, key=lambda entry: entry[1])
        else:
            ordered = sorted(entries, key=lambda entry: -entry[1])
        return [item for item, _ in ordered]
