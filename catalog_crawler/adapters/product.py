from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple
from urllib.parse import urljoin

from .base import Locale, Page, SiteSelectors, clean
from ..errors import CompanyMissing, PriceMissing, RatingCountMissing, RatingMissing, TitleMissing
from ..models import CategoryTrait, Company, CompanySource, ProductRecord, Sizes, SizeUnit, SizeValue
from ..utils.parsing import leading_number, origin_of, parse_decimal, parse_int

# Checked in this order; the first dimension whose word occurs in a row label wins.
_DIMENSIONS = ("length", "height", "width")


def parse_price(raw: str) -> Optional[float]:
    # Only digits survive, so "1 299,50 ₽" reads as 129950.0.
    value = parse_int(raw)
    return float(value) if value is not None else None


def parse_rating(raw: str) -> Optional[float]:
    """
    "4.8" -> 4.8. A "no ratings" placeholder and a literal zero both come back as None.
    """
    return parse_decimal(raw) or None


def parse_rating_count(raw: str) -> Optional[int]:
    return parse_int(raw) or None


def parse_size_value(raw: str, locale: Locale) -> SizeValue:
    """
    "12 см" -> 12 cm. Anything not ending with the centimeter marker keeps its text.
    """
    value = clean(raw)
    if value.endswith(locale.centimeter):
        number = leading_number(value)
        if number is not None:
            return SizeValue(number, SizeUnit.CM)
    return SizeValue(value, SizeUnit.UNKNOWN)


def parse_sizes(rows: Iterable[Tuple[str, str]], locale: Locale) -> Optional[Sizes]:
    """Map (label, value) rows of the dimensions table onto length/height/width."""
    rows = [(clean(label), clean(value)) for label, value in rows]
    rows = [(label, value) for label, value in rows if label and value]
    if not rows:
        return None
    found: Dict[str, SizeValue] = {}
    for label, value in rows:
        for dimension in _DIMENSIONS:
            if getattr(locale, dimension) in label:
                found[dimension] = parse_size_value(value, locale)
                break
    return Sizes(**found)


async def _company(page: Page, selectors: SiteSelectors) -> Company:
    name = clean(await page.text(selectors.company))
    if not name:
        raise CompanyMissing(page.url, "title")
    href = await page.attribute(f"{selectors.company} a", "href")
    if not href:
        raise CompanyMissing(page.url, "link")
    return Company(name=name, url=urljoin(origin_of(page.url), href), source=CompanySource.BREADCRUMBS)


async def _sizes(page: Page, selectors: SiteSelectors, locale: Locale) -> Optional[Sizes]:
    # Many products have no dimensions table at all.
    if not await page.count(selectors.product_params, has_text=locale.dimensions_caption):
        return None
    rows = await page.table_rows(selectors.product_params, has_text=locale.dimensions_caption)
    return parse_sizes(rows, locale)


async def extract_product(
    page: Page,
    selectors: SiteSelectors,
    locale: Locale,
    category: CategoryTrait,
    *,
    timeout_ms: int,
) -> ProductRecord:
    """
    Read a product page into a record. Every required field that is empty raises
    its own FieldMissingError naming the field and the page.
    """
    await page.wait_for(selectors.product_title, timeout_ms)

    title = clean(await page.text(selectors.product_title))
    if not title:
        raise TitleMissing(page.url)

    price_raw = clean(await page.text(selectors.price))
    if not price_raw:
        raise PriceMissing(page.url)
    price = parse_price(price_raw)
    if price is None:
        raise PriceMissing(page.url, f"no digits in {price_raw!r}")

    company = await _company(page, selectors)

    rating_raw = clean(await page.text(selectors.rating))
    if not rating_raw:
        raise RatingMissing(page.url)

    rating_count_raw = clean(await page.text(selectors.rating_count))
    if not rating_count_raw:
        raise RatingCountMissing(page.url)

    return ProductRecord(
        url=page.url,
        title=title,
        price=price,
        rating=parse_rating(rating_raw),
        rating_count=parse_rating_count(rating_count_raw),
        company=company,
        sizes=await _sizes(page, selectors, locale),
        category=category,
    )
