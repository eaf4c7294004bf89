"""Unit tests for the per-note lock registry."""

import asyncio

from src.notecollab.core.locks import KeyedLocks


async def test_same_key_serializes():
    locks = KeyedLocks()
    order = []

    async def worker(name):
        async with locks.hold("note"):
            order.append(f"{name}-in")
            await asyncio.sleep(0.01)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])


async def test_different_keys_run_concurrently():
    locks = KeyedLocks()
    inside = asyncio.Event()
    released = asyncio.Event()

    async def first():
        async with locks.hold("a"):
            inside.set()
            await released.wait()

    task = asyncio.create_task(first())
    await inside.wait()
    async with locks.hold("b"):
        assert locks.is_locked("a")
        assert locks.is_locked("b")
    released.set()
    await task


async def test_locks_are_dropped_when_unused():
    locks = KeyedLocks()
    async with locks.hold("x"):
        assert len(locks) == 1
    assert len(locks) == 0
    assert not locks.is_locked("x")


async def test_lock_released_on_error():
    locks = KeyedLocks()
    try:
        async with locks.hold("x"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0
