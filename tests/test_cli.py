import asyncio
import json

import pytest

from catalog_crawler.adapters.base import ENGLISH
from catalog_crawler.export.json_exporter import JSONExporter
from catalog_crawler.router import Router
from catalog_crawler.sink import DatasetSink
from catalog_crawler.ui import cli

from conftest import BASE, FakeEngine, product_html, subcategory_html

LISTING = f"{BASE}/catalog/zhenshchinam/bluzki"


class ListingEngine(FakeEngine):
    pages = {
        LISTING: subcategory_html(product_hrefs=["/catalog/1/detail.aspx"]),
        f"{BASE}/catalog/1/detail.aspx": product_html(),
    }


class DeadEngine(FakeEngine):
    pages = {}


@pytest.fixture
def use_engine(monkeypatch):
    def _use(engine_cls):
        def fake_load_symbol(dotted):
            return engine_cls if "engines" in dotted else JSONExporter

        monkeypatch.setattr(cli, "load_symbol", fake_load_symbol)

    return _use


def _args(tmp_path, *extra):
    return [
        "--storage-dir", str(tmp_path / "ds"),
        "--output", str(tmp_path / "output.json"),
        "--match", f"{BASE}/catalog/**",
        *extra,
    ]


def test_crawl_then_aggregate(tmp_path, use_engine):
    use_engine(ListingEngine)

    code = cli.run_cli(_args(tmp_path, LISTING, "--start-page-type", "subCategoryPage", "--cookie", "consent=1"))

    assert code == 0
    output = json.loads((tmp_path / "output.json").read_text(encoding="utf-8"))
    assert [r["url"] for r in output] == [LISTING, f"{BASE}/catalog/1/detail.aspx"]


def test_no_crawl_only_aggregates(tmp_path, use_engine):
    use_engine(DeadEngine)
    sink = DatasetSink(tmp_path / "ds")
    asyncio.run(sink.append({"title": "from an earlier run"}))

    code = cli.run_cli(_args(tmp_path, "--no-crawl"))

    assert code == 0
    output = json.loads((tmp_path / "output.json").read_text(encoding="utf-8"))
    assert output == [{"title": "from an earlier run"}]


def test_unreachable_start_still_writes_output(tmp_path, use_engine):
    use_engine(DeadEngine)

    code = cli.run_cli(_args(tmp_path, f"{BASE}/"))

    assert code == 1
    assert json.loads((tmp_path / "output.json").read_text(encoding="utf-8")) == []


def test_invalid_config_exit_code(tmp_path, use_engine):
    use_engine(DeadEngine)
    assert cli.run_cli(_args(tmp_path, "--max-pages", "0")) == 2
    assert cli.run_cli(_args(tmp_path, "--cookie", "novalue")) == 2


def test_locale_flag_reaches_the_router(tmp_path):
    args = cli.build_arg_parser().parse_args(_args(tmp_path, "--locale", "en"))
    cfg = cli._load_config(args)
    assert cfg.locale is ENGLISH
    assert Router(cfg).locale is ENGLISH
