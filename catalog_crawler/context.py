"""
Context propagation between crawl levels.

Each level adds one frame to the chain carried by the work items it enqueues:

* home -> category: the surviving menu links, keyed by absolute URL
* subcategory -> product: the page's own category trait, verbatim

Reading a frame back is strict: a category page must find its own URL in the
parent links, and a product page must receive all three trait fields.
"""
from __future__ import annotations

from typing import Iterable, List

from .errors import ContextMismatchError, MissingContextError
from .models import CategoryTrait, LinkRef, PageType, ParentLinks, WorkItem
from .utils.parsing import normalize_url


def category_items(parent: WorkItem, links: Iterable[LinkRef]) -> List[WorkItem]:
    """One CATEGORY item per link; all of them share a single parent-links frame."""
    links = list(links)
    frame = ParentLinks({normalize_url(link.href): link for link in links})
    return [parent.child(link.href, PageType.CATEGORY, frame) for link in links]


def product_items(parent: WorkItem, trait: CategoryTrait, urls: Iterable[str]) -> List[WorkItem]:
    return [parent.child(url, PageType.PRODUCT, trait) for url in urls]


def parent_link(item: WorkItem, page_url: str) -> LinkRef:
    """
    Find the menu link this category page was reached through.
    ``page_url`` is where the page actually is, which may differ from ``item.url`` after redirects.
    """
    frame = item.context.latest(ParentLinks)
    link = frame.lookup(page_url) if frame is not None else None
    if link is None:
        raise ContextMismatchError(page_url)
    return link


def require_trait(item: WorkItem) -> CategoryTrait:
    trait = item.context.latest(CategoryTrait)
    if trait is None:
        raise MissingContextError(item.url, ("category", "subcategory", "goodsCategory"))
    missing = trait.missing_fields()
    if missing:
        raise MissingContextError(item.url, missing)
    return trait
