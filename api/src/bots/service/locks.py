import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import Hashable


class BotLockRegistry:
    """
    Per-bot mutual exclusion for the "remote call + local write" sequence.

    Operations on different bots never wait on each other. Locks are dropped
    once nobody holds or waits on them.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable):
        lock = self._lock_for(key)
        async with lock:
            yield

    def __len__(self) -> int:
        return len(self._locks)
