"""Keyed Lock — tests for per-key mutual exclusion.

Tests cover:
    - Holders of the same key never overlap
    - Different keys proceed concurrently
    - Lock released and entry dropped after an exception
"""

import asyncio

import pytest

from content_sync.core.keyed_lock import KeyedLock


async def test_same_key_is_serialized():
    locks = KeyedLock()
    active, peak = 0, 0

    async def worker():
        nonlocal active, peak
        async with locks.hold("doc", "en"):
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1

    await asyncio.gather(*(worker() for _ in range(5)))
    assert peak == 1
    assert len(locks) == 0


async def test_different_keys_do_not_block():
    locks = KeyedLock()
    entered = asyncio.Event()

    async def holder():
        async with locks.hold("a", "en"):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def other():
        async with locks.hold("b", "en"):
            entered.set()

    await asyncio.gather(holder(), other())


async def test_released_after_exception():
    locks = KeyedLock()

    with pytest.raises(RuntimeError):
        async with locks.hold("doc", "en"):
            assert locks.is_held("doc", "en")
            raise RuntimeError("boom")

    assert not locks.is_held("doc", "en")
    assert len(locks) == 0
