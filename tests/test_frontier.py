import asyncio

import pytest

from catalog_crawler.frontier import Frontier
from catalog_crawler.models import PageType, WorkItem


def _item(n, label=PageType.PRODUCT):
    return WorkItem(f"https://shop.test/catalog/{n}/detail.aspx", label)


@pytest.mark.asyncio
async def test_fifo_order():
    frontier = Frontier(10)
    await frontier.add_many(_item(n) for n in range(3))

    urls = []
    for _ in range(3):
        item = await frontier.acquire()
        urls.append(item.url)
        await frontier.done(item)
    assert urls == [_item(n).url for n in range(3)]
    assert await frontier.acquire() is None


@pytest.mark.asyncio
async def test_same_url_is_processed_once():
    frontier = Frontier(10)
    assert await frontier.add(_item(1)) is True
    assert await frontier.add(WorkItem(_item(1).url + "#reviews", PageType.SUBCATEGORY)) is False

    item = await frontier.acquire()
    await frontier.done(item)
    assert await frontier.add(_item(1)) is False
    assert await frontier.acquire() is None
    assert frontier.released == 1


@pytest.mark.asyncio
async def test_url_case_is_significant():
    frontier = Frontier(10)
    assert await frontier.add(WorkItem("https://shop.test/Catalog/1", PageType.PRODUCT))
    assert await frontier.add(WorkItem("https://shop.test/catalog/1", PageType.PRODUCT))


@pytest.mark.asyncio
async def test_items_beyond_budget_are_dropped():
    frontier = Frontier(2)
    added = await frontier.add_many(_item(n) for n in range(5))
    assert added == 2
    assert frontier.pending == 2


@pytest.mark.asyncio
async def test_dropped_url_is_not_marked_seen():
    frontier = Frontier(1)
    await frontier.add(_item(1))
    assert await frontier.add(_item(2)) is False
    assert frontier.pending == 1


@pytest.mark.asyncio
async def test_budget_holds_under_concurrency():
    frontier = Frontier(7)
    await frontier.add(_item(0))
    processed = []
    counter = iter(range(1, 1000))

    async def worker():
        while True:
            item = await frontier.acquire()
            if item is None:
                return
            await asyncio.sleep(0)
            processed.append(item.url)
            # every page discovers three more
            await frontier.add_many(_item(next(counter)) for _ in range(3))
            await frontier.done(item)

    await asyncio.gather(*(worker() for _ in range(5)))

    assert len(processed) == 7
    assert len(set(processed)) == 7
    assert frontier.budget_exhausted


@pytest.mark.asyncio
async def test_waiting_worker_gets_children_of_in_flight_item():
    frontier = Frontier(5)
    await frontier.add(_item(0))
    first = await frontier.acquire()

    waiter = asyncio.create_task(frontier.acquire())
    await asyncio.sleep(0)
    assert not waiter.done()

    await frontier.add(_item(1))
    await frontier.done(first)
    second = await asyncio.wait_for(waiter, timeout=1)
    assert second.url == _item(1).url


@pytest.mark.asyncio
async def test_close_releases_waiters():
    frontier = Frontier(5)
    await frontier.add(_item(0))
    first = await frontier.acquire()
    waiter = asyncio.create_task(frontier.acquire())
    await asyncio.sleep(0)

    await frontier.close()
    assert await asyncio.wait_for(waiter, timeout=1) is None
    await frontier.done(first)
    assert await frontier.add(_item(1)) is False


def test_budget_must_be_positive():
    with pytest.raises(ValueError):
        Frontier(0)
