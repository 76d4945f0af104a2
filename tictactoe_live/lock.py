from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RoomLocks:
    """Per-room mutual exclusion for a single event loop.

    Unrelated rooms never contend. Locks are created on first use and kept for
    as long as the room code exists.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, code: str) -> asyncio.Lock:
        lock = self._locks.get(code)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[code] = lock
        return lock

    @asynccontextmanager
    async def hold(self, code: str) -> AsyncIterator[None]:
        async with self.get(code):
            yield
