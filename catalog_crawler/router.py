from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from . import context
from .adapters.base import Locale, Page, SiteSelectors, WILDBERRIES
from .adapters.category import extract_category_links
from .adapters.home import extract_menu_links, split_excluded
from .adapters.product import extract_product
from .adapters.subcategory import extract_listing
from .config import ResolvedConfig
from .errors import UnknownPageTypeError
from .models import CategoryLinkBatch, MenuRecord, PageType, Record, SubcategoryRecord, WorkItem
from .utils.parsing import matches_glob

logger = logging.getLogger(__name__)


@dataclass
class RouteResult:
    record: Record
    next_items: List[WorkItem] = field(default_factory=list)


class Router:
    """
    Page classifier and state machine.
    - Each work item label selects exactly one adapter.
    - The router owns the transitions: which children a page produces and with what context.
    - Any label outside PageType is an error, never a default page.
    """

    def __init__(
        self,
        config: ResolvedConfig,
        *,
        selectors: SiteSelectors = WILDBERRIES,
        locale: Optional[Locale] = None,
    ) -> None:
        self.config = config
        self.selectors = selectors
        self.locale = locale or config.locale

    async def route(self, item: WorkItem, page: Page) -> RouteResult:
        logger.info("Crawling %s, label is %s...", page.url, getattr(item.label, "value", item.label))
        if item.label is PageType.HOME:
            return await self._home(item, page)
        if item.label is PageType.CATEGORY:
            return await self._category(item, page)
        if item.label is PageType.SUBCATEGORY:
            return await self._subcategory(item, page)
        if item.label is PageType.PRODUCT:
            return await self._product(item, page)
        raise UnknownPageTypeError(item.url, item.label)

    # ---- Transitions ---------------------------------------------------------

    async def _home(self, item: WorkItem, page: Page) -> RouteResult:
        links = await extract_menu_links(
            page,
            self.selectors,
            ready_selector=self.config.ready_selector,
            timeout_ms=self.config.selector_timeout_ms,
        )
        # Menu links are filtered by title only; the glob applies to product links.
        kept, excluded = split_excluded(links, self.config.excluded_categories)
        record = MenuRecord(url=page.url, links=tuple(kept), excluded=tuple(link.title for link in excluded))
        return RouteResult(record=record, next_items=context.category_items(item, kept))

    async def _category(self, item: WorkItem, page: Page) -> RouteResult:
        # Fail before touching the page if navigation landed somewhere we did not enqueue.
        parent = context.parent_link(item, page.url)
        children = await extract_category_links(
            page,
            self.selectors,
            ready_selector=self.config.ready_selector,
            timeout_ms=self.config.selector_timeout_ms,
        )
        # Terminal listing: children are recorded, not crawled.
        return RouteResult(record=CategoryLinkBatch(parent=parent, children=tuple(children)))

    async def _subcategory(self, item: WorkItem, page: Page) -> RouteResult:
        listing = await extract_listing(
            page,
            self.selectors,
            self.locale,
            ready_selector=self.config.ready_selector,
            timeout_ms=self.config.selector_timeout_ms,
        )
        record = SubcategoryRecord(url=page.url, title=listing.title, trait=listing.trait, total=listing.total)
        urls = self._matching(listing.product_urls, key=lambda url: url)
        return RouteResult(record=record, next_items=context.product_items(item, listing.trait, urls))

    async def _product(self, item: WorkItem, page: Page) -> RouteResult:
        trait = context.require_trait(item)
        record = await extract_product(
            page,
            self.selectors,
            self.locale,
            trait,
            timeout_ms=self.config.selector_timeout_ms,
        )
        return RouteResult(record=record)

    # ---- Helpers -------------------------------------------------------------

    def _matching(self, values: List, *, key) -> List:
        pattern: Optional[str] = self.config.match_pattern
        out = []
        for value in values:
            if matches_glob(key(value), pattern):
                out.append(value)
            else:
                logger.debug("Skipping %s: does not match %s", key(value), pattern)
        return out
