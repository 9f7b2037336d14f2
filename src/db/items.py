"""Access to learning items and their attempt history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from . import Item, ItemAttempt


@dataclass(frozen=True, slots=True)
class ItemDetails:
    """Prompt and metadata of an item as exposed to callers."""

    id: str
    level_id: str
    prompt: str
    answer: Optional[str] = None

    @classmethod
    def from_model(cls, item: Item) -> "ItemDetails":
        return cls(id=item.id, level_id=item.level_id, prompt=item.prompt, answer=item.answer)


async def add_item(
    session: AsyncSession,
    item_id: str,
    level_id: str,
    prompt: str,
    answer: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Item:
    """Create an item, or refresh the prompt of an existing one."""
    if now is None:
        now = datetime.now(timezone.utc)

    item = await session.get(Item, item_id)
    if item is None:
        item = Item(id=item_id, level_id=level_id, prompt=prompt, answer=answer, created_at=now)
        session.add(item)
    else:
        item.level_id = level_id
        item.prompt = prompt
        item.answer = answer
    await session.flush()
    return item


async def get_items_by_ids(session: AsyncSession, item_ids: Iterable[str]) -> dict[str, Item]:
    """Return the items that still exist, keyed by id."""
    ids = list(dict.fromkeys(item_ids))
    if not ids:
        return {}
    result = await session.execute(select(Item).where(Item.id.in_(ids)))
    return {item.id: item for item in result.scalars().all()}


async def add_attempt(
    session: AsyncSession,
    item_id: str,
    passed: bool,
    learner_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> ItemAttempt:
    """Append a graded attempt to the history of an item."""
    if now is None:
        now = datetime.now(timezone.utc)

    attempt = ItemAttempt(item_id=item_id, learner_id=learner_id, passed=passed, attempted_at=now)
    session.add(attempt)
    await session.flush()
    return attempt


async def list_attempt_outcomes(session: AsyncSession, item_id: str) -> list[bool]:
    """Return the pass/fail outcome of every attempt at an item."""
    stmt = select(ItemAttempt.passed).where(ItemAttempt.item_id == item_id).order_by(ItemAttempt.id)
    result = await session.execute(stmt)
    return [bool(passed) for passed in result.scalars().all()]
