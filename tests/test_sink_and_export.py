import json

import pytest

from catalog_crawler.export.json_exporter import JSONExporter, aggregate
from catalog_crawler.models import CategoryLinkBatch, LinkRef
from catalog_crawler.sink import DatasetSink


@pytest.mark.asyncio
async def test_records_are_read_back_in_write_order(tmp_path):
    sink = DatasetSink(tmp_path / "ds")
    for n in range(12):
        await sink.append({"n": n})

    assert [r["n"] for r in sink.read_all()] == list(range(12))
    assert sorted(p.name for p in (tmp_path / "ds").iterdir())[:2] == ["000000001.json", "000000002.json"]
    assert len(sink) == 12


@pytest.mark.asyncio
async def test_records_are_serialized_with_to_dict(tmp_path):
    sink = DatasetSink(tmp_path)
    batch = CategoryLinkBatch(parent=LinkRef("https://shop.test/a", "Дом"), children=())
    path = await sink.append(batch)

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "parent": {"href": "https://shop.test/a", "title": "Дом"},
        "children": [],
    }


@pytest.mark.asyncio
async def test_reopened_sink_continues_sequence(tmp_path):
    first = DatasetSink(tmp_path)
    await first.append({"n": 1})
    await first.append({"n": 2})

    second = DatasetSink(tmp_path)
    await second.append({"n": 3})
    assert [r["n"] for r in second.read_all()] == [1, 2, 3]


@pytest.mark.asyncio
async def test_purge(tmp_path):
    sink = DatasetSink(tmp_path)
    await sink.append({"n": 1})
    (tmp_path / "notes.txt").write_text("keep me")

    assert sink.purge() == 1
    assert sink.read_all() == []
    assert (tmp_path / "notes.txt").exists()
    await sink.append({"n": 2})
    assert (tmp_path / "000000001.json").exists()


@pytest.mark.asyncio
async def test_aggregate_keeps_duplicates_and_order(tmp_path):
    sink = DatasetSink(tmp_path / "ds")
    batch = {"parent": {"href": "https://shop.test/a", "title": "A"}, "children": []}
    await sink.append(batch)
    await sink.append({"title": "x"})
    await sink.append(batch)

    out = tmp_path / "out" / "output.json"
    assert aggregate(sink, str(out)) == 3
    assert json.loads(out.read_text(encoding="utf-8")) == [batch, {"title": "x"}, batch]


@pytest.mark.asyncio
async def test_aggregate_is_idempotent(tmp_path):
    sink = DatasetSink(tmp_path / "ds")
    await sink.append({"title": "блузка", "price": 1299.0})
    await sink.append({"title": "платье", "price": None})
    out = tmp_path / "output.json"

    aggregate(sink, str(out))
    first = out.read_bytes()
    aggregate(sink, str(out))
    assert out.read_bytes() == first
    assert "блузка" in first.decode("utf-8")


def test_exporter_overwrites_previous_file(tmp_path):
    out = tmp_path / "output.json"
    out.write_text("[1, 2, 3]")
    JSONExporter().export([], str(out))
    assert json.loads(out.read_text()) == []
