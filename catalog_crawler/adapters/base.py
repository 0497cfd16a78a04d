from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

from ..models import LinkRef


class Page(Protocol):
    """
    Interface for a rendered page as seen by the adapters.
    Keep this small: engines implement it over a real browser or static HTML,
    adapters do all parsing on the plain strings it returns.
    Every call may suspend.
    """

    @property
    def url(self) -> str:
        """Where the page actually is (after redirects)."""
        ...

    async def wait_for(self, selector: str, timeout_ms: int) -> None:
        """Wait until ``selector`` is present; raise PageTimeoutError otherwise."""
        ...

    async def text(self, selector: str, *, has_text: Optional[str] = None, last: bool = False) -> Optional[str]:
        """textContent of the first (or last) match, None when nothing matches."""
        ...

    async def inner_text(self, selector: str) -> Optional[str]:
        """Rendered text of the first match with block children on separate lines."""
        ...

    async def attribute(self, selector: str, name: str) -> Optional[str]:
        ...

    async def count(self, selector: str, *, has_text: Optional[str] = None) -> int:
        ...

    async def click(self, selector: str, *, has_text: Optional[str] = None, child: Optional[str] = None) -> None:
        """Click the first match (or ``child`` inside it); raise PageTimeoutError when absent."""
        ...

    async def child_links(self, container: str) -> List[LinkRef]:
        """For each child of ``container``, its first anchor as an absolute link."""
        ...

    async def hrefs(self, selector: str) -> List[str]:
        """Absolute targets of every anchor matching ``selector``."""
        ...

    async def table_rows(self, selector: str, *, has_text: Optional[str] = None) -> List[Tuple[str, str]]:
        """(first cell, last cell) trimmed text per body row of the first matching table."""
        ...


@dataclass(frozen=True)
class Locale:
    """Site-language tokens the adapters match against."""

    home_crumb: str
    category_filter_label: str
    dimensions_caption: str
    length: str
    height: str
    width: str
    centimeter: str
    # regex character class body of the alphabet kept in goods categories
    letters: str


RUSSIAN = Locale(
    home_crumb="главная",
    category_filter_label="Категория",
    dimensions_caption="Габариты",
    length="длина",
    height="высота",
    width="ширина",
    centimeter="см",
    letters="а-яА-ЯёЁ",
)

ENGLISH = Locale(
    home_crumb="home",
    category_filter_label="Category",
    dimensions_caption="Dimensions",
    length="length",
    height="height",
    width="width",
    centimeter="cm",
    letters="a-zA-Z",
)


@dataclass(frozen=True)
class SiteSelectors:
    # home
    menu_button: str
    menu_list: str
    # category
    category_links: str
    # subcategory
    listing_title: str
    breadcrumbs: str
    category_filters: str
    category_filter_opened: str
    product_links: str
    # product
    product_title: str
    company: str
    price: str
    rating: str
    rating_count: str
    product_params: str


WILDBERRIES = SiteSelectors(
    menu_button=".nav-element__burger",
    menu_list=".menu-burger__main-list",
    category_links=".menu-catalog__list-2",
    listing_title="h1.catalog-title",
    breadcrumbs="ul.breadcrumbs__list",
    category_filters=".dropdown-filter",
    category_filter_opened=".dropdown-filter .selected",
    product_links=".product-card__link",
    product_title=".product-page__header > h1",
    company=".breadcrumbs__list li:last-child",
    price=".product-page__aside-container .price-block__final-price",
    rating=".product-page__common-info .product-review__rating",
    rating_count=".product-page__common-info .product-review__count-review",
    product_params=".product-params__table",
)


def clean(text: Optional[str]) -> str:
    """Trimmed, lower-cased text; empty for None."""
    return (text or "").strip().lower()
