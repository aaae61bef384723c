import asyncio
from collections import deque
from contextlib import asynccontextmanager
from typing import AsyncIterator, Deque


class ReadWriteLock:
    """Writer-preferring reader-writer lock for coroutines on one event loop.

    Readers share the lock; a writer holds it alone. Once a writer is waiting,
    new readers queue behind it so a steady stream of statements cannot starve
    transactions. Releasing never suspends, so a holder cancelled inside its
    critical section still leaves the lock consistent.
    """

    def __init__(self):
        self._readers = 0
        self._writer = False
        self._pending_writers = 0
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def reader_count(self) -> int:
        return self._readers

    @property
    def writer_active(self) -> bool:
        return self._writer

    async def acquire_read(self) -> None:
        while self._writer or self._pending_writers:
            await self._wait()
        self._readers += 1

    def release_read(self) -> None:
        if self._readers <= 0:
            raise RuntimeError("release_read() called without a reader holding the lock")
        self._readers -= 1
        if not self._readers:
            self._wake_all()

    async def acquire_write(self) -> None:
        self._pending_writers += 1
        try:
            while self._writer or self._readers:
                await self._wait()
            self._writer = True
        finally:
            self._pending_writers -= 1
            if not self._writer:
                # Cancelled while queued: readers held back by us may go now
                self._wake_all()

    def release_write(self) -> None:
        if not self._writer:
            raise RuntimeError("release_write() called without holding the write lock")
        self._writer = False
        self._wake_all()

    @asynccontextmanager
    async def reading(self) -> AsyncIterator[None]:
        await self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @asynccontextmanager
    async def writing(self) -> AsyncIterator[None]:
        await self.acquire_write()
        try:
            yield
        finally:
            self.release_write()

    async def _wait(self) -> None:
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    def _wake_all(self) -> None:
        waiters, self._waiters = self._waiters, deque()
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
