# engines/browser_engine.py
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Awaitable, List, Optional, Tuple

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Page as PwPage,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .base import CrawlEngine
from ..errors import PageLoadError, PageTimeoutError
from ..models import LinkRef, WorkItem
from ..utils.parsing import absolute_url


def app_data_dir() -> Path:
    base = os.getenv("LOCALAPPDATA") or str(Path.home() / ".catalog-crawler")
    p = Path(base) / "catalog-crawler"
    p.mkdir(parents=True, exist_ok=True)
    return p


BROWSERS_DIR = app_data_dir() / "ms-playwright"
os.environ.setdefault("PLAYWRIGHT_BROWSERS_PATH", str(BROWSERS_DIR))

logger = logging.getLogger(__name__)

# Collected in the browser in one round trip: the first anchor of every child.
_CHILD_LINKS_JS = """
(el) => {
  const out = [];
  for (const node of el.children) {
    const link = node.querySelector("a");
    if (link && link.href) {
      out.push({href: link.href, title: link.innerText.trim()});
    }
  }
  return out;
}
"""

_TABLE_ROWS_JS = """
(table) => {
  const body = table.querySelector("tbody") || table;
  const out = [];
  for (const row of body.children) {
    const first = row.firstElementChild;
    const last = row.lastElementChild;
    if (!first || !last) continue;
    const label = (first.textContent || "").trim();
    const value = (last.textContent || "").trim();
    if (label && value) out.push([label, value]);
  }
  return out;
}
"""


class PlaywrightPage:
    """Page backed by a live Playwright tab."""

    def __init__(self, page: PwPage, *, action_timeout_ms: int) -> None:
        self._page = page
        self._timeout = action_timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    def _locate(self, selector: str, has_text: Optional[str] = None) -> Locator:
        locator = self._page.locator(selector)
        if has_text:
            locator = locator.filter(has_text=has_text)
        return locator

    async def wait_for(self, selector: str, timeout_ms: int) -> None:
        try:
            await self._page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise PageTimeoutError(self.url, selector, timeout_ms) from exc

    async def _read(self, selector: str, read: Awaitable[Optional[str]]) -> Optional[str]:
        try:
            return await read
        except PlaywrightTimeoutError as exc:
            raise PageTimeoutError(self.url, selector, self._timeout) from exc

    async def text(self, selector: str, *, has_text: Optional[str] = None, last: bool = False) -> Optional[str]:
        locator = self._locate(selector, has_text)
        if not await locator.count():
            return None
        target = locator.last if last else locator.first
        return await self._read(selector, target.text_content(timeout=self._timeout))

    async def inner_text(self, selector: str) -> Optional[str]:
        locator = self._locate(selector)
        if not await locator.count():
            return None
        return await self._read(selector, locator.first.inner_text(timeout=self._timeout))

    async def attribute(self, selector: str, name: str) -> Optional[str]:
        locator = self._locate(selector)
        if not await locator.count():
            return None
        return await self._read(selector, locator.first.get_attribute(name, timeout=self._timeout))

    async def count(self, selector: str, *, has_text: Optional[str] = None) -> int:
        return await self._locate(selector, has_text).count()

    async def click(self, selector: str, *, has_text: Optional[str] = None, child: Optional[str] = None) -> None:
        locator = self._locate(selector, has_text)
        if child:
            locator = locator.locator(child)
        try:
            await locator.first.click(timeout=self._timeout)
        except PlaywrightTimeoutError as exc:
            raise PageTimeoutError(self.url, f"{selector} {child or ''}".strip(), self._timeout) from exc

    async def child_links(self, container: str) -> List[LinkRef]:
        locator = self._locate(container)
        if not await locator.count():
            return []
        raw = await locator.first.evaluate(_CHILD_LINKS_JS)
        return [LinkRef(href=absolute_url(self.url, item["href"]), title=item["title"]) for item in raw]

    async def hrefs(self, selector: str) -> List[str]:
        raw = await self._locate(selector).evaluate_all("(els) => els.map((el) => el.href).filter(Boolean)")
        return [absolute_url(self.url, href) for href in raw]

    async def table_rows(self, selector: str, *, has_text: Optional[str] = None) -> List[Tuple[str, str]]:
        locator = self._locate(selector, has_text)
        if not await locator.count():
            return []
        raw = await locator.first.evaluate(_TABLE_ROWS_JS)
        return [(label, value) for label, value in raw]


class BrowserCrawlEngine(CrawlEngine):
    """
    Headless Chromium engine.
    - One browser and one context per run; the cookie is set on the context before any navigation.
    - One tab per work item, closed once the router is done with it.
    """

    _playwright: Optional[Playwright] = None
    _browser: Optional[Browser] = None
    _context: Optional[BrowserContext] = None

    async def start(self) -> None:
        cfg = self.config
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=cfg.headless)
        self._context = await self._browser.new_context(user_agent=cfg.user_agent)
        if cfg.cookie:
            await self._context.add_cookies([{"name": cfg.cookie.name, "value": cfg.cookie.value, "url": cfg.start_url}])

    async def stop(self) -> None:
        if self._context is not None:
            await self._context.close()
        if self._browser is not None:
            await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._context = self._browser = self._playwright = None

    @asynccontextmanager
    async def open_page(self, item: WorkItem) -> AsyncIterator[PlaywrightPage]:
        if self._context is None:
            raise RuntimeError("BrowserCrawlEngine.open_page called before start()")
        tab = await self._context.new_page()
        try:
            try:
                response = await tab.goto(item.url, timeout=self.config.request_timeout * 1000)
            except PlaywrightError as exc:
                raise PageLoadError(item.url, str(exc)) from exc
            if response is not None and response.status >= 400:
                raise PageLoadError(item.url, f"HTTP {response.status}")
            yield PlaywrightPage(tab, action_timeout_ms=self.config.selector_timeout_ms)
        finally:
            await tab.close()
