"""In-memory cache of the job collection.

The cache holds a single snapshot, a tuple of frozen Job models. A write
replaces the snapshot wholesale and never edits it in place, so a reader
holding an older snapshot never sees it change and a rollback is just a
write of the snapshot captured earlier.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from jobtracker.schemas.job import Job

logger = logging.getLogger(__name__)

Snapshot = tuple[Job, ...]
Subscriber = Callable[[Snapshot], None]
Fetcher = Callable[[], Awaitable[Iterable[Job]]]

JOBS_KEY = ("jobs",)


class JobCache:
    def __init__(self, fetch: Fetcher | None = None, key: tuple = JOBS_KEY):
        self.key = key
        self._fetch = fetch
        self._snapshot: Snapshot = ()
        self._stale = True
        self._subscribers: list[Subscriber] = []
        self._fetch_generation = 0
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_stale(self) -> bool:
        return self._stale

    def read(self) -> Snapshot:
        return self._snapshot

    def write(self, snapshot: Iterable[Job]):
        self._snapshot = tuple(snapshot)
        self._stale = False
        for callback in list(self._subscribers):
            callback(self._snapshot)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback run on every write. Returns the unsubscribe function."""
        self._subscribers.append(callback)
        if self._stale:
            self._schedule_refetch()

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def invalidate(self):
        self._stale = True
        if self._subscribers:
            self._schedule_refetch()

    def cancel_fetches(self):
        """Make every fetch still in flight discard its result on arrival."""
        self._fetch_generation += 1

    async def refetch(self) -> bool:
        """Load the collection from the store. Returns False if the result was superseded."""
        if self._fetch is None:
            raise RuntimeError("JobCache was created without a fetcher")

        self._fetch_generation += 1
        generation = self._fetch_generation
        jobs = await self._fetch()
        if generation != self._fetch_generation:
            logger.debug("Discarding superseded fetch #%d", generation)
            return False
        self.write(jobs)
        return True

    def _schedule_refetch(self):
        if self._fetch is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop; the next activation inside one refetches.
            return
        task = loop.create_task(self.refetch())
        self._tasks.add(task)
        task.add_done_callback(self._on_refetch_done)

    def _on_refetch_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background refetch of %s failed: %s", self.key, exc)

    async def wait_idle(self):
        """Wait for background refetches scheduled so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self):
        self._subscribers.clear()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
