from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Deque, Iterable, Optional, Set

from .models import WorkItem

logger = logging.getLogger(__name__)


class Frontier:
    """
    FIFO queue of pending work items shared by all workers.
    - Deduplicated by normalized URL for the whole run.
    - At most ``max_pages`` items are ever released; checking and counting is one critical section.
    - Items that could never be released under the budget are dropped on arrival.
    """

    def __init__(self, max_pages: int) -> None:
        if max_pages <= 0:
            raise ValueError("max_pages must be > 0")
        self.max_pages = max_pages
        self._queue: Deque[WorkItem] = deque()
        self._seen: Set[str] = set()
        self._released = 0
        self._in_flight = 0
        self._closed = False
        self._cond = asyncio.Condition()

    @property
    def released(self) -> int:
        return self._released

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def budget_exhausted(self) -> bool:
        return self._released >= self.max_pages

    async def add(self, item: WorkItem) -> bool:
        """Queue ``item`` unless its URL was seen before or the budget cannot cover it."""
        async with self._cond:
            key = item.key
            if key in self._seen:
                logger.debug("Duplicate %s dropped", key)
                return False
            if self._closed or self._released + len(self._queue) >= self.max_pages:
                logger.debug("Budget of %s pages reached, %s dropped", self.max_pages, key)
                return False
            self._seen.add(key)
            self._queue.append(item)
            self._cond.notify()
            return True

    async def add_many(self, items: Iterable[WorkItem]) -> int:
        added = 0
        for item in items:
            if await self.add(item):
                added += 1
        return added

    async def acquire(self) -> Optional[WorkItem]:
        """
        Next item to process, or None once the run is over for this worker:
        the budget is spent, the frontier was closed, or nothing is queued or in flight.
        """
        async with self._cond:
            while True:
                if self._closed or self._released >= self.max_pages:
                    return None
                if self._queue:
                    self._released += 1
                    self._in_flight += 1
                    return self._queue.popleft()
                if self._in_flight == 0:
                    return None
                # An in-flight item may still discover children.
                await self._cond.wait()

    async def done(self, item: WorkItem) -> None:
        """Mark an acquired item finished, successfully or not."""
        async with self._cond:
            self._in_flight -= 1
            self._cond.notify_all()

    async def close(self) -> None:
        """Stop releasing items; in-flight items still finish."""
        async with self._cond:
            self._closed = True
            self._queue.clear()
            self._cond.notify_all()
