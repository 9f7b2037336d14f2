"""Helpers for working with review state persistence."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from . import ReviewState, as_utc


DEFAULT_EASE_FACTOR = 2.5
DEFAULT_INTERVAL_DAYS = 1
DEFAULT_REPETITIONS = 0


@dataclass(frozen=True, slots=True)
class ReviewStateSnapshot:
    """Detached copy of a learner's scheduling state for one item."""

    learner_id: str
    item_id: str
    interval_days: int
    ease_factor: float
    repetitions: int
    last_reviewed_at: datetime
    next_review_at: datetime

    @classmethod
    def from_model(cls, record: ReviewState) -> "ReviewStateSnapshot":
        return cls(
            learner_id=record.learner_id,
            item_id=record.item_id,
            interval_days=record.interval_days,
            ease_factor=record.ease_factor,
            repetitions=record.repetitions,
            last_reviewed_at=as_utc(record.last_reviewed_at),
            next_review_at=as_utc(record.next_review_at),
        )


@dataclass(frozen=True, slots=True)
class ReviewTotals:
    """Raw aggregates over a learner's review states."""

    total_reviews: int
    items_scheduled: int
    avg_ease_factor: Optional[float]
    due_for_review: int


async def get_review_state(
    session: AsyncSession, learner_id: str, item_id: str
) -> Optional[ReviewState]:
    """Return the stored state for a (learner, item) pair, if any."""
    stmt = select(ReviewState).where(
        ReviewState.learner_id == learner_id,
        ReviewState.item_id == item_id,
    )
    result = await session.execute(stmt)
    return result.scalars().first()


async def save_review_state(
    session: AsyncSession,
    existing: Optional[ReviewState],
    *,
    learner_id: str,
    item_id: str,
    interval_days: int,
    ease_factor: float,
    repetitions: int,
    reviewed_at: datetime,
    next_review_at: datetime,
) -> ReviewState:
    """Insert a new state or overwrite the scheduling fields of an existing one."""
    if existing is None:
        existing = ReviewState(
            id=str(uuid.uuid4()),
            learner_id=learner_id,
            item_id=item_id,
            created_at=reviewed_at,
        )
        session.add(existing)

    existing.interval_days = interval_days
    existing.ease_factor = ease_factor
    existing.repetitions = repetitions
    existing.last_reviewed_at = reviewed_at
    existing.next_review_at = next_review_at
    existing.updated_at = reviewed_at
    await session.flush()
    return existing


async def list_review_states(session: AsyncSession, learner_id: str) -> Sequence[ReviewState]:
    """Return every review state of a learner ordered by due time."""
    stmt = (
        select(ReviewState)
        .where(ReviewState.learner_id == learner_id)
        .order_by(ReviewState.next_review_at, ReviewState.id)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def list_due_review_states(
    session: AsyncSession,
    learner_id: str,
    as_of: Optional[datetime] = None,
) -> Sequence[ReviewState]:
    """Return states whose next review is strictly before ``as_of``."""
    if as_of is None:
        as_of = datetime.now(timezone.utc)

    stmt = (
        select(ReviewState)
        .where(ReviewState.learner_id == learner_id, ReviewState.next_review_at < as_of)
        .order_by(ReviewState.next_review_at, ReviewState.id)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_review_totals(
    session: AsyncSession,
    learner_id: str,
    now: Optional[datetime] = None,
) -> ReviewTotals:
    """Aggregate repetitions, ease factors and due counts in a single query."""
    if now is None:
        now = datetime.now(timezone.utc)

    stmt = select(
        func.coalesce(func.sum(ReviewState.repetitions), 0),
        func.count(ReviewState.id),
        func.avg(ReviewState.ease_factor),
        func.coalesce(func.sum(case((ReviewState.next_review_at < now, 1), else_=0)), 0),
    ).where(ReviewState.learner_id == learner_id)
    result = await session.execute(stmt)
    total_reviews, items_scheduled, avg_ease, due = result.one()
    return ReviewTotals(
        total_reviews=int(total_reviews),
        items_scheduled=int(items_scheduled),
        avg_ease_factor=float(avg_ease) if avg_ease is not None else None,
        due_for_review=int(due),
    )


async def delete_review_states(session: AsyncSession, learner_id: str) -> int:
    """Remove all review states of a learner and return how many were deleted."""
    stmt = (
        delete(ReviewState)
        .where(ReviewState.learner_id == learner_id)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    return result.rowcount or 0
