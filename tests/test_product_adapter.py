import pytest

from catalog_crawler.adapters.base import RUSSIAN, WILDBERRIES
from catalog_crawler.adapters.product import extract_product
from catalog_crawler.errors import (
    CompanyMissing,
    PageTimeoutError,
    PriceMissing,
    RatingCountMissing,
    RatingMissing,
    TitleMissing,
)
from catalog_crawler.models import CategoryTrait, CompanySource, SizeUnit, SizeValue
from catalog_crawler.utils.soup_page import SoupPage

from conftest import BASE, product_html

URL = f"{BASE}/catalog/101/detail.aspx"
TRAIT = CategoryTrait("женщинам", "блузки и рубашки", "блузка-боди")


async def _extract(html):
    return await extract_product(SoupPage(URL, html), WILDBERRIES, RUSSIAN, TRAIT, timeout_ms=1000)


@pytest.mark.asyncio
async def test_full_product_page():
    record = await _extract(product_html())

    assert record.title == "блузка шелковая"
    assert record.price == 1299.0
    assert record.rating == 4.8
    assert record.rating_count == 1024
    assert record.company.name == "acme brand"
    assert record.company.url == f"{BASE}/brands/acme"
    assert record.company.source is CompanySource.BREADCRUMBS
    assert record.company.type is None
    assert record.sizes.length == SizeValue(12, SizeUnit.CM)
    assert record.sizes.width == SizeValue(30.5, SizeUnit.CM)
    assert record.sizes.height == SizeValue("один размер", SizeUnit.UNKNOWN)
    assert record.category == TRAIT


@pytest.mark.asyncio
async def test_record_envelope():
    data = (await _extract(product_html())).to_dict()

    assert data["title"] == "блузка шелковая"
    assert data["url"] == URL
    assert data["category"] == {
        "category": "женщинам",
        "subcategory": "блузки и рубашки",
        "goodsCategory": "блузка-боди",
    }
    assert data["data"]["ratingCount"] == 1024
    assert data["data"]["company"] == {
        "name": "acme brand",
        "type": None,
        "source": "fromBreadcrumbs",
        "url": f"{BASE}/brands/acme",
    }
    assert data["data"]["sizes"]["length"] == {"value": 12, "unit": "cm"}


@pytest.mark.asyncio
async def test_no_ratings_yet():
    record = await _extract(product_html(rating="Нет оценок", rating_count="0 оценок"))
    assert record.rating is None
    assert record.rating_count is None


@pytest.mark.asyncio
async def test_missing_dimensions_table_is_not_an_error():
    record = await _extract(product_html(tables=""))
    assert record.sizes is None
    assert record.to_dict()["data"]["sizes"] is None


@pytest.mark.asyncio
async def test_other_tables_are_ignored():
    other = '<table class="product-params__table"><caption>Состав</caption><tbody><tr><th>Длина</th><td>5 см</td></tr></tbody></table>'
    record = await _extract(product_html(tables=other))
    assert record.sizes is None


@pytest.mark.asyncio
async def test_absolute_company_link_is_kept():
    record = await _extract(product_html(company_href="https://other.test/seller/9"))
    assert record.company.url == "https://other.test/seller/9"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides,error,field",
    [
        ({"title": "  "}, TitleMissing, "title"),
        ({"price": ""}, PriceMissing, "price"),
        ({"price": "по запросу"}, PriceMissing, "price"),
        ({"company": " "}, CompanyMissing, "company"),
        ({"company_href": ""}, CompanyMissing, "company"),
        ({"rating": ""}, RatingMissing, "rating"),
        ({"rating_count": ""}, RatingCountMissing, "rating count"),
    ],
)
async def test_missing_fields_are_named(overrides, error, field):
    with pytest.raises(error) as info:
        await _extract(product_html(**overrides))
    assert info.value.field == field
    assert info.value.url == URL
    assert URL in str(info.value)


@pytest.mark.asyncio
async def test_page_without_product_header_times_out():
    with pytest.raises(PageTimeoutError):
        await _extract("<html><body><p>Not found</p></body></html>")
