"""Shared HTML fixtures and an in-memory engine for crawl tests."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

import pytest

from catalog_crawler.config import CrawlConfig, ResolvedConfig
from catalog_crawler.engines.base import CrawlEngine
from catalog_crawler.errors import PageLoadError
from catalog_crawler.models import WorkItem
from catalog_crawler.utils.soup_page import SoupPage

BASE = "https://shop.test"

HOME_HTML = """
<html><body>
  <button class="nav-element__burger">Menu</button>
  <ul class="menu-burger__main-list">
    <li><a href="/catalog/zhenshchinam">Women</a></li>
    <li><a href="/catalog/sale">Sale</a></li>
    <li><a href="/catalog/muzhchinam">Men</a></li>
    <li><span>Not a link</span></li>
  </ul>
  <div class="product-card"></div>
</body></html>
"""


def category_html(children: List[str]) -> str:
    items = "\n".join(f'<li><a href="{href}">{title}</a></li>' for href, title in children)
    return f"""
    <html><body>
      <div class="product-card"></div>
      <ul class="menu-catalog__list-2">
        {items}
      </ul>
    </body></html>
    """


def subcategory_html(
    category: str = "Женщинам",
    subcategory: str = "Блузки и рубашки",
    selected: str = "Блузка-боди 1 234",
    product_hrefs: Optional[List[str]] = None,
) -> str:
    if product_hrefs is None:
        product_hrefs = ["/catalog/101/detail.aspx", "/catalog/102/detail.aspx"]
    cards = "\n".join(
        f'<div class="product-card"><a class="product-card__link" href="{href}">card</a></div>' for href in product_hrefs
    )
    return f"""
    <html><body>
      <h1 class="catalog-title"> {subcategory} </h1>
      <ul class="breadcrumbs__list">
        <li><a href="/">Главная</a></li>
        <li><a href="/catalog/x">{category}</a></li>
        <li><span>{subcategory}</span></li>
      </ul>
      <div class="dropdown-filter"><span>Цена</span><button>open</button></div>
      <div class="dropdown-filter"><span>Категория</span><button>open</button>
        <ul><li class="selected">{selected}</li></ul>
      </div>
      {cards}
    </body></html>
    """


DIMENSIONS_TABLE = """
  <table class="product-params__table">
    <caption>Габариты</caption>
    <tbody>
      <tr><th>Длина упаковки</th><td>12 см</td></tr>
      <tr><th>Ширина предмета</th><td>30,5 см</td></tr>
      <tr><th>Высота</th><td>Один размер</td></tr>
      <tr><th>Вес товара</th><td>200 г</td></tr>
    </tbody>
  </table>
"""


def product_html(
    title: str = "Блузка шелковая",
    price: str = "1 299 ₽",
    rating: str = "4.8",
    rating_count: str = "1 024 оценки",
    company: str = "ACME Brand",
    company_href: str = "/brands/acme",
    tables: str = DIMENSIONS_TABLE,
) -> str:
    return f"""
    <html><body>
      <ul class="breadcrumbs__list">
        <li><a href="/">Главная</a></li>
        <li><a href="{company_href}">{company}</a></li>
      </ul>
      <div class="product-page__header"><h1>{title}</h1></div>
      <div class="product-page__aside-container">
        <span class="price-block__final-price">{price}</span>
      </div>
      <div class="product-page__common-info">
        <span class="product-review__rating">{rating}</span>
        <span class="product-review__count-review">{rating_count}</span>
      </div>
      {tables}
    </body></html>
    """


class FakeEngine(CrawlEngine):
    """Serves pages from a dict; unknown URLs fail to load."""

    pages: Dict[str, str] = {}

    def __init__(self, config: ResolvedConfig, pages: Optional[Dict[str, str]] = None, **kwargs) -> None:
        super().__init__(config, **kwargs)
        if pages is not None:
            self.pages = pages
        self.opened: List[str] = []
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    @asynccontextmanager
    async def open_page(self, item: WorkItem):
        self.opened.append(item.url)
        html = self.pages.get(item.url)
        # let other workers interleave
        await asyncio.sleep(0)
        if html is None:
            raise PageLoadError(item.url, "HTTP 404")
        yield SoupPage(item.url, html)


@pytest.fixture
def make_config(tmp_path) -> Callable[..., ResolvedConfig]:
    def _make(**overrides) -> ResolvedConfig:
        values = dict(
            start_url=f"{BASE}/",
            match_pattern=f"{BASE}/catalog/**",
            excluded_categories_pattern="sale",
            max_pages_to_crawl=50,
            max_concurrency=4,
            storage_dir=str(tmp_path / "storage"),
            output_file_name=str(tmp_path / "out" / "output.json"),
        )
        values.update(overrides)
        return CrawlConfig(**values).resolve()

    return _make


@pytest.fixture
def config(make_config) -> ResolvedConfig:
    return make_config()
