"""Review orchestration: load state, run the scheduler, persist the outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.db import as_utc
from src.db.items import ItemDetails, get_items_by_ids
from src.db.reviews import (
    DEFAULT_EASE_FACTOR,
    DEFAULT_INTERVAL_DAYS,
    DEFAULT_REPETITIONS,
    ReviewStateSnapshot,
    delete_review_states,
    get_review_state,
    get_review_totals,
    list_due_review_states,
    save_review_state,
)
from src.learning.locks import KeyedLocks
from src.learning.srs import calculate_next_review, next_review_at, normalize_quality


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DueReview:
    """A review state that is due, joined with the item it schedules."""

    state: ReviewStateSnapshot
    item: ItemDetails


@dataclass(frozen=True, slots=True)
class ReviewStats:
    """Aggregated review figures for a learner."""

    total_reviews: int
    items_scheduled: int
    avg_ease_factor: float
    due_for_review: int


class ReviewService:
    """Schedules reviews for learners and answers due/statistics queries."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        locks: Optional[KeyedLocks] = None,
        quality_policy: str = "reject",
    ) -> None:
        self._session_factory = session_factory
        self._locks = locks if locks is not None else KeyedLocks()
        self._quality_policy = quality_policy

    async def schedule_review(
        self,
        learner_id: str,
        item_id: str,
        quality: int,
        now: Optional[datetime] = None,
    ) -> ReviewStateSnapshot:
        """Record a review outcome and return the updated scheduling state.

        Every call counts as a repetition, including failed recalls.
        """
        quality = normalize_quality(quality, self._quality_policy)
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        async with self._locks.hold(("review", learner_id, item_id)):
            async with self._session_factory() as session:
                async with session.begin():
                    existing = await get_review_state(session, learner_id, item_id)
                    if existing is None:
                        prior_ease = DEFAULT_EASE_FACTOR
                        prior_interval = DEFAULT_INTERVAL_DAYS
                        prior_repetitions = DEFAULT_REPETITIONS
                    else:
                        prior_ease = existing.ease_factor
                        prior_interval = existing.interval_days
                        prior_repetitions = existing.repetitions

                    schedule = calculate_next_review(quality, prior_ease, prior_interval)
                    record = await save_review_state(
                        session,
                        existing,
                        learner_id=learner_id,
                        item_id=item_id,
                        interval_days=schedule.interval_days,
                        ease_factor=schedule.ease_factor,
                        repetitions=prior_repetitions + 1,
                        reviewed_at=now,
                        next_review_at=next_review_at(now, schedule.interval_days),
                    )
                    snapshot = ReviewStateSnapshot.from_model(record)

        LOGGER.debug(
            "Scheduled item %s for learner %s: quality=%s interval=%s ease=%.2f.",
            item_id,
            learner_id,
            quality,
            snapshot.interval_days,
            snapshot.ease_factor,
        )
        return snapshot

    async def get_review_state(self, learner_id: str, item_id: str) -> Optional[ReviewStateSnapshot]:
        """Return the current scheduling state of one item, if it was ever reviewed."""
        async with self._session_factory() as session:
            record = await get_review_state(session, learner_id, item_id)
            return ReviewStateSnapshot.from_model(record) if record is not None else None

    async def get_due_for_review(
        self,
        learner_id: str,
        as_of: Optional[datetime] = None,
    ) -> List[DueReview]:
        """Return reviews due strictly before ``as_of`` along with their items.

        States pointing at items that no longer exist are left out.
        """
        as_of = as_utc(as_of) if as_of is not None else datetime.now(timezone.utc)

        async with self._session_factory() as session:
            states = await list_due_review_states(session, learner_id, as_of)
            items = await get_items_by_ids(session, (state.item_id for state in states))

            due: List[DueReview] = []
            for state in states:
                item = items.get(state.item_id)
                if item is None:
                    LOGGER.debug(
                        "Skipping due review of missing item %s for learner %s.",
                        state.item_id,
                        learner_id,
                    )
                    continue
                due.append(
                    DueReview(
                        state=ReviewStateSnapshot.from_model(state),
                        item=ItemDetails.from_model(item),
                    )
                )
        return due

    async def get_stats(self, learner_id: str, now: Optional[datetime] = None) -> ReviewStats:
        """Summarize a learner's reviews; a learner without reviews gets all zeros."""
        now = as_utc(now) if now is not None else datetime.now(timezone.utc)

        async with self._session_factory() as session:
            totals = await get_review_totals(session, learner_id, now)

        avg_ease = round(totals.avg_ease_factor, 2) if totals.avg_ease_factor is not None else 0.0
        return ReviewStats(
            total_reviews=totals.total_reviews,
            items_scheduled=totals.items_scheduled,
            avg_ease_factor=avg_ease,
            due_for_review=totals.due_for_review,
        )

    async def reset_learner(self, learner_id: str) -> int:
        """Forget every review state of a learner."""
        async with self._session_factory() as session:
            async with session.begin():
                removed = await delete_review_states(session, learner_id)
        LOGGER.info("Removed %s review states for learner %s.", removed, learner_id)
        return removed
