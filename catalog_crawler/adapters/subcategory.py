from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .base import Locale, Page, SiteSelectors, clean
from ..errors import BreadcrumbsMissing, GoodsCategoryMissing
from ..models import CategoryTrait
from ..utils.parsing import letters_only, parse_int


@dataclass(frozen=True)
class ListingPage:
    title: Optional[str]
    trait: CategoryTrait
    # goods count shown next to the selected category filter
    total: Optional[int]
    product_urls: List[str]


def parse_breadcrumbs(raw: str, locale: Locale) -> List[str]:
    crumbs = (clean(line) for line in raw.split("\n"))
    return [crumb for crumb in crumbs if crumb and crumb != locale.home_crumb]


def parse_category_filter(raw: str, locale: Locale) -> Tuple[str, Optional[int]]:
    """Split the opened category filter ("Блузка-боди 1 234") into (goods category, total)."""
    text = clean(raw)
    return letters_only(text, locale.letters), parse_int(text)


async def extract_listing(
    page: Page,
    selectors: SiteSelectors,
    locale: Locale,
    *,
    ready_selector: str,
    timeout_ms: int,
) -> ListingPage:
    await page.wait_for(ready_selector, timeout_ms)
    title = clean(await page.text(selectors.listing_title)) or None

    crumbs = parse_breadcrumbs(await page.inner_text(selectors.breadcrumbs) or "", locale)
    if len(crumbs) < 2:
        raise BreadcrumbsMissing(page.url, f"got {crumbs!r}")
    category, subcategory = crumbs[0], crumbs[1]

    await page.click(selectors.category_filters, has_text=locale.category_filter_label, child="button")
    opened = await page.text(selectors.category_filter_opened, last=True) or ""
    goods_category, total = parse_category_filter(opened, locale)
    if not goods_category:
        raise GoodsCategoryMissing(page.url)

    return ListingPage(
        title=title,
        trait=CategoryTrait(category=category, subcategory=subcategory, goods_category=goods_category),
        total=total,
        product_urls=await page.hrefs(selectors.product_links),
    )
