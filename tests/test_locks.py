from __future__ import annotations

import asyncio

import pytest

from src.learning.locks import KeyedLocks


@pytest.mark.asyncio
async def test_same_key_runs_one_at_a_time() -> None:
    locks = KeyedLocks()
    active = 0
    peak = 0

    async def worker() -> None:
        nonlocal active, peak
        async with locks.hold(("review", "learner-1", "q-1")):
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0)
            active -= 1

    await asyncio.gather(*(worker() for _ in range(5)))

    assert peak == 1
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_different_keys_do_not_block_each_other() -> None:
    locks = KeyedLocks()
    entered = asyncio.Event()

    async def holder() -> None:
        async with locks.hold("a"):
            await entered.wait()

    task = asyncio.create_task(holder())
    await asyncio.sleep(0)

    async with locks.hold("b"):
        entered.set()

    await task
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_is_released_when_block_raises() -> None:
    locks = KeyedLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("a"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    async with locks.hold("a"):
        pass
