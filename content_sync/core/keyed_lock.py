"""Keyed Lock — in-process exclusive section per key.

Invariants:
    - Two holders of the same key never overlap; different keys never block each other
    - The lock is released on every exit path (normal return, exception, cancellation)
    - Entries are dropped once no holder or waiter references the key

Design Decisions:
    - Complements the row lock taken by DocumentRepository.find_or_create_locked;
      on a single-writer store (SQLite) it is the only serialization available
"""

import asyncio
from collections.abc import AsyncIterator, Hashable
from contextlib import asynccontextmanager


class KeyedLock:
    def __init__(self):
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._refs: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, *key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._refs[key] = self._refs.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._refs[key] -= 1
            if self._refs[key] == 0:
                del self._refs[key]
                del self._locks[key]

    def is_held(self, *key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
