"""Persistence helpers for per-item difficulty records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import Item, ItemDifficulty, as_utc


@dataclass(frozen=True, slots=True)
class DifficultyRecordSnapshot:
    """Detached copy of a stored difficulty record."""

    item_id: str
    difficulty: float
    total_attempts: int
    success_rate: int
    updated_at: datetime

    @classmethod
    def from_model(cls, record: ItemDifficulty) -> "DifficultyRecordSnapshot":
        return cls(
            item_id=record.item_id,
            difficulty=record.difficulty,
            total_attempts=record.total_attempts,
            success_rate=record.success_rate,
            updated_at=as_utc(record.updated_at),
        )


async def get_difficulty_record(session: AsyncSession, item_id: str) -> Optional[ItemDifficulty]:
    """Return the difficulty record of an item, if one was computed."""
    return await session.get(ItemDifficulty, item_id)


async def upsert_difficulty_record(
    session: AsyncSession,
    item_id: str,
    *,
    difficulty: float,
    total_attempts: int,
    success_rate: int,
    now: Optional[datetime] = None,
) -> ItemDifficulty:
    """Create or overwrite the difficulty record of an item."""
    if now is None:
        now = datetime.now(timezone.utc)

    record = await session.get(ItemDifficulty, item_id)
    if record is None:
        record = ItemDifficulty(item_id=item_id)
        session.add(record)

    record.difficulty = difficulty
    record.total_attempts = total_attempts
    record.success_rate = success_rate
    record.updated_at = now
    await session.flush()
    return record


async def list_level_items_with_difficulty(
    session: AsyncSession, level_id: str
) -> list[tuple[Item, Optional[float]]]:
    """Return a level's items in creation order, each with its stored difficulty or ``None``."""
    stmt = (
        select(Item, ItemDifficulty.difficulty)
        .outerjoin(ItemDifficulty, ItemDifficulty.item_id == Item.id)
        .where(Item.level_id == level_id)
        .order_by(Item.created_at, Item.id)
    )
    result = await session.execute(stmt)
    return [(item, difficulty) for item, difficulty in result.all()]
