from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from aiohttp import ClientSession

from .base import CrawlEngine
from ..models import WorkItem
from ..utils.http import create_session, fetch_text
from ..utils.soup_page import SoupPage

logger = logging.getLogger(__name__)


class SimpleCrawlEngine(CrawlEngine):
    """
    Static-HTML engine: aiohttp fetch, BeautifulSoup page.
    Works for server-rendered catalogs and saved mirrors; script-rendered
    menus and filters need the browser engine.
    """

    _session: Optional[ClientSession] = None

    async def start(self) -> None:
        cookie = self.config.cookie
        self._session = create_session({cookie.name: cookie.value} if cookie else None)

    async def stop(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def open_page(self, item: WorkItem) -> AsyncIterator[SoupPage]:
        if self._session is None:
            raise RuntimeError("SimpleCrawlEngine.open_page called before start()")
        cfg = self.config
        final_url, html = await fetch_text(
            self._session,
            item.url,
            timeout=cfg.request_timeout,
            user_agent=cfg.user_agent,
            retries=cfg.retries,
        )
        yield SoupPage(final_url, html)
