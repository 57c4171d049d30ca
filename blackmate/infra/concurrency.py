import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class DownloadGate:
    """
    Admission control for yt-dlp downloads.
    At most `capacity` downloads hold a slot at once; other callers
    wait in arrival order instead of being rejected.
    """

    def __init__(self, capacity: int = 1):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._active = 0
        self._waiting = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active(self) -> int:
        return self._active

    @property
    def waiting(self) -> int:
        return self._waiting

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one download slot for the duration of the block"""
        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1

        self._active += 1
        try:
            yield
        finally:
            self._active -= 1
            self._semaphore.release()

    def snapshot(self) -> dict:
        return {
            "capacity": self._capacity,
            "active": self._active,
            "waiting": self._waiting,
        }
