"""
Per-key mutual exclusion.

Storage offers no transactions, so the engine serializes every
read-check-write of one inventory row behind a lock keyed by item name.
Locks exist only while someone holds or waits for them.

Scope is a single process/event loop. Several workers sharing one
spreadsheet can still interleave.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class KeyedLock:
    """A map of asyncio.Lock objects created on demand per key."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def acquire(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)
