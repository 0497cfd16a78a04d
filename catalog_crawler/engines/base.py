from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import AsyncContextManager, List, Optional, Tuple

from ..adapters.base import Page
from ..config import ResolvedConfig
from ..errors import CrawlAbortedError, ExtractionError, PageLoadError
from ..frontier import Frontier
from ..models import WorkItem
from ..router import Router
from ..sink import DatasetSink
from ..utils.parsing import normalize_url

logger = logging.getLogger(__name__)


@dataclass
class CrawlReport:
    visited_count: int = 0
    records_written: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (url, reason)
    budget_exhausted: bool = False


class CrawlEngine(ABC):
    """
    Owns the crawl lifecycle; subclasses only decide how a page is opened.
    - Workers pull from one shared Frontier; concurrency is the worker count.
    - The Router owns page parsing and which children to enqueue.
    - A failed page never stops the run, except the start URL not loading.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        sink: Optional[DatasetSink] = None,
        router: Optional[Router] = None,
    ) -> None:
        self.config = config
        self.sink = sink or DatasetSink(config.storage_dir)
        self.router = router or Router(config)
        self._abort: Optional[PageLoadError] = None

    @abstractmethod
    async def start(self) -> None:  # pragma: no cover - interface
        ...

    @abstractmethod
    async def stop(self) -> None:  # pragma: no cover - interface
        ...

    @abstractmethod
    def open_page(self, item: WorkItem) -> AsyncContextManager[Page]:  # pragma: no cover - interface
        """Navigate to ``item.url``; raise PageLoadError when that fails."""
        ...

    async def crawl(self) -> CrawlReport:
        cfg = self.config
        report = CrawlReport()
        frontier = Frontier(cfg.max_pages_to_crawl)
        start = WorkItem(url=normalize_url(cfg.start_url), label=cfg.start_page_type)
        await frontier.add(start)
        self._abort = None
        if cfg.purge_on_start:
            self.sink.purge()

        await self.start()
        try:
            workers = [
                asyncio.create_task(self._worker(frontier, report, start)) for _ in range(cfg.max_concurrency)
            ]
            await asyncio.gather(*workers)
        finally:
            await self.stop()

        report.budget_exhausted = frontier.budget_exhausted
        if self._abort is not None:
            raise CrawlAbortedError(f"Start URL unreachable: {self._abort}") from self._abort
        if report.budget_exhausted:
            logger.info("Stopped after %s pages (max_pages_to_crawl)", frontier.released)
        return report

    async def _worker(self, frontier: Frontier, report: CrawlReport, start: WorkItem) -> None:
        while True:
            item = await frontier.acquire()
            if item is None:
                return
            try:
                await self._process(item, frontier, report, start)
            finally:
                await frontier.done(item)

    async def _process(self, item: WorkItem, frontier: Frontier, report: CrawlReport, start: WorkItem) -> None:
        report.visited_count += 1
        try:
            async with self.open_page(item) as page:
                result = await self.router.route(item, page)
        except PageLoadError as exc:
            if item.key == start.key:
                logger.error("Cannot reach start URL %s: %s", item.url, exc.reason)
                self._abort = exc
                await frontier.close()
            else:
                logger.warning("Skipping %s: %s", item.url, exc.reason)
            report.failures.append((item.url, exc.reason))
            return
        except ExtractionError as exc:
            logger.warning("Failed %s [%s]: %s", item.url, getattr(item.label, "value", item.label), exc.reason)
            report.failures.append((item.url, exc.reason))
            return
        except Exception as exc:  # broad catch to keep crawler moving
            logger.exception("Unexpected error on %s", item.url)
            report.failures.append((item.url, repr(exc)))
            return

        try:
            await self.sink.append(result.record)
        except OSError as exc:
            # Children of an unstored page are not crawled either.
            logger.error("Cannot store record for %s: %s", item.url, exc)
            report.failures.append((item.url, f"sink: {exc}"))
            return
        report.records_written += 1
        await frontier.add_many(result.next_items)
