from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List

from ..config import Cookie, CrawlConfig, ResolvedConfig
from ..errors import ConfigError, CrawlAbortedError
from ..export.json_exporter import aggregate
from ..sink import DatasetSink
from ..utils.logging import setup_logging
from ..utils.loader import load_symbol
from ..engines.base import CrawlReport

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Catalog crawler: home menu -> category -> subcategory -> product")
    p.add_argument("url", nargs="?", help="Start URL (default from config)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--start-page-type", type=str, default=None,
                   help="Label of the start URL: home, categoryPage, subCategoryPage or product")
    p.add_argument("--match", type=str, default=None, help="Glob discovered links must match to be crawled")
    p.add_argument("--max-pages", type=int, default=None, help="Max pages to crawl (default from config)")
    p.add_argument("--max-concurrency", type=int, default=None, help="Max concurrency (default from config)")
    p.add_argument("--selector-timeout", type=int, default=None, help="Selector wait timeout in ms")
    p.add_argument("--exclude", type=str, default=None,
                   help="Regex of menu category titles to skip (case-insensitive)")
    p.add_argument("--locale", type=str, default=None, help="Site vocabulary: ru or en")
    p.add_argument("--cookie", type=str, default=None, help="Cookie to set before crawling, as NAME=VALUE")
    p.add_argument("--engine", type=str, default=None, help="Engine dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--storage-dir", type=str, default=None, help="Dataset directory for crawled records")
    p.add_argument("--output", type=str, default=None, help="Output file path")
    p.add_argument("--headful", action="store_true", help="Show the browser window")
    p.add_argument("--keep-storage", action="store_true", help="Do not purge the dataset before crawling")
    p.add_argument("--no-crawl", action="store_true", help="Only aggregate records already in the dataset")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    return p


def _load_config(args: argparse.Namespace) -> ResolvedConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.url:
        cfg.start_url = args.url
    if args.start_page_type:
        cfg.start_page_type = args.start_page_type
    if args.match is not None:
        cfg.match_pattern = args.match
    if args.max_pages is not None:
        cfg.max_pages_to_crawl = args.max_pages
    if args.max_concurrency is not None:
        cfg.max_concurrency = args.max_concurrency
    if args.selector_timeout is not None:
        cfg.selector_timeout_ms = args.selector_timeout
    if args.exclude is not None:
        cfg.excluded_categories_pattern = args.exclude or None
    if args.locale:
        cfg.locale = args.locale
    if args.cookie:
        name, sep, value = args.cookie.partition("=")
        if not sep:
            raise ConfigError("--cookie expects NAME=VALUE")
        cfg.cookie = Cookie(name=name.strip(), value=value)
    if args.engine:
        cfg.engine = args.engine
    if args.exporter:
        cfg.exporter = args.exporter
    if args.storage_dir:
        cfg.storage_dir = args.storage_dir
    if args.output:
        cfg.output_file_name = args.output
    if args.headful:
        cfg.headless = False
    if args.keep_storage:
        cfg.purge_on_start = False
    if args.no_crawl:
        cfg.no_crawl = True

    return cfg.resolve()


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        cfg = _load_config(args)
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2

    # Dynamic engine + exporter loading so upgrades don't require code edits.
    exporter_cls = load_symbol(cfg.exporter)
    sink = DatasetSink(cfg.storage_dir)
    exit_code = 0

    if cfg.no_crawl:
        logger.info("Crawl disabled; aggregating existing records in %s", sink.path)
    else:
        engine_cls = load_symbol(cfg.engine)
        engine = engine_cls(cfg, sink=sink)
        try:
            report: CrawlReport = asyncio.run(engine.crawl())
        except CrawlAbortedError as exc:
            logger.error("%s", exc)
            exit_code = 1
        else:
            logger.info("Visited: %s | Records: %s | Failures: %s",
                        report.visited_count, report.records_written, len(report.failures))
            for url, reason in report.failures:
                logger.info("  failed %s: %s", url, reason)

    # Whatever was collected still gets aggregated.
    count = aggregate(sink, cfg.output_file_name, exporter_cls())
    logger.info("Records: %s | Output: %s", count, cfg.output_file_name)
    return exit_code


def main() -> int:
    return run_cli(sys.argv[1:])
