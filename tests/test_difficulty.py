from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.db.items import add_item
from src.learning.difficulty import DEFAULT_DIFFICULTY, DifficultyService, estimate_difficulty


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


async def _seed_level(session_factory, level_id: str, item_ids: list[str]) -> None:
    async with session_factory() as session:
        async with session.begin():
            for index, item_id in enumerate(item_ids):
                await add_item(
                    session,
                    item_id,
                    level_id,
                    f"Question {item_id}",
                    now=NOW + timedelta(minutes=index),
                )


async def _record(service: DifficultyService, item_id: str, passes: int, failures: int) -> None:
    for _ in range(passes):
        await service.record_attempt(item_id, True, now=NOW)
    for _ in range(failures):
        await service.record_attempt(item_id, False, now=NOW)


def test_estimate_difficulty_from_outcomes() -> None:
    estimate = estimate_difficulty([True] * 7 + [False] * 3)

    assert estimate is not None
    assert estimate.success_rate == 70
    assert estimate.total_attempts == 10
    assert estimate.difficulty == pytest.approx(0.30)


def test_estimate_difficulty_rounds_success_rate() -> None:
    assert estimate_difficulty([True, False, False]).success_rate == 33
    assert estimate_difficulty([True, True, False]).success_rate == 67
    assert estimate_difficulty([True] + [False] * 7).success_rate == 13


def test_estimate_difficulty_without_attempts_is_none() -> None:
    assert estimate_difficulty([]) is None


@pytest.mark.asyncio
async def test_update_question_difficulty_uses_full_history(session_factory) -> None:
    service = DifficultyService(session_factory)
    await _record(service, "q-1", passes=7, failures=3)

    record = await service.update_question_difficulty("q-1", now=NOW)

    assert record is not None
    assert record.total_attempts == 10
    assert record.success_rate == 70
    assert record.difficulty == pytest.approx(0.30)
    assert await service.get_question_difficulty("q-1") == pytest.approx(0.30)


@pytest.mark.asyncio
async def test_update_question_difficulty_is_idempotent(session_factory) -> None:
    service = DifficultyService(session_factory)
    await _record(service, "q-1", passes=2, failures=2)

    first = await service.update_question_difficulty("q-1", now=NOW)
    second = await service.update_question_difficulty("q-1", now=NOW)

    assert first == second
    assert await service.get_difficulty_record("q-1") == second


@pytest.mark.asyncio
async def test_update_question_difficulty_overwrites_with_new_history(session_factory) -> None:
    service = DifficultyService(session_factory)
    await _record(service, "q-1", passes=1, failures=0)
    await service.update_question_difficulty("q-1", now=NOW)

    await _record(service, "q-1", passes=0, failures=3)
    record = await service.update_question_difficulty("q-1", now=NOW + timedelta(hours=1))

    assert record is not None
    assert record.total_attempts == 4
    assert record.success_rate == 25
    assert record.difficulty == pytest.approx(0.75)


@pytest.mark.asyncio
async def test_update_without_attempts_is_a_no_op(session_factory) -> None:
    service = DifficultyService(session_factory)

    assert await service.update_question_difficulty("q-empty", now=NOW) is None
    assert await service.get_difficulty_record("q-empty") is None
    assert await service.get_question_difficulty("q-empty") == DEFAULT_DIFFICULTY


@pytest.mark.asyncio
async def test_questions_ordered_by_difficulty_default_to_medium(session_factory) -> None:
    service = DifficultyService(session_factory)
    await _seed_level(session_factory, "level-1", ["easy", "unrated", "hard", "tied"])
    await _seed_level(session_factory, "level-2", ["elsewhere"])

    await _record(service, "easy", passes=9, failures=1)
    await _record(service, "hard", passes=1, failures=9)
    await _record(service, "tied", passes=1, failures=1)
    for item_id in ("easy", "hard", "tied"):
        await service.update_question_difficulty(item_id, now=NOW)

    ascending = await service.get_questions_ordered_by_difficulty("level-1")
    descending = await service.get_questions_ordered_by_difficulty("level-1", ascending=False)

    assert [item.id for item in ascending] == ["easy", "unrated", "tied", "hard"]
    assert [item.id for item in descending] == ["hard", "unrated", "tied", "easy"]
    assert ascending[0].prompt == "Question easy"


@pytest.mark.asyncio
async def test_questions_ordered_for_unknown_level_is_empty(session_factory) -> None:
    service = DifficultyService(session_factory)

    assert await service.get_questions_ordered_by_difficulty("missing") == []


@pytest.mark.asyncio
async def test_naive_timestamps_are_stored_as_utc(session_factory) -> None:
    service = DifficultyService(session_factory)
    await service.record_attempt("q-1", True, now=datetime(2026, 6, 1, 12, 0))

    record = await service.update_question_difficulty("q-1", now=datetime(2026, 6, 1, 12, 0))

    assert record is not None
    assert record.updated_at == NOW
    assert await service.get_difficulty_record("q-1") == record
