from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Pattern
import json
import os
import re

from .adapters.base import ENGLISH, Locale, RUSSIAN
from .errors import ConfigError
from .models import PageType
from .version import CONFIG_SCHEMA_VERSION, __version__

DEFAULT_SELECTOR_TIMEOUT_MS = 1000

LOCALES: Dict[str, Locale] = {"ru": RUSSIAN, "en": ENGLISH}

DEFAULT_EXCLUDED_CATEGORIES = (
    "(пятница|новый.год|акции|цифровые.товары|путешествия|сделано.в.москве|premium|премиум|спорт)"
)


@dataclass
class Cookie:
    """Optional cookie set before navigation, e.g. for cookie consent."""

    name: str
    value: str


@dataclass
class CrawlConfig:
    """
    Raw configuration as loaded from defaults, a JSON file or the environment.
    Call ``resolve()`` to get the effective configuration the crawl runs with.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    start_url: str = "https://www.wildberries.ru"
    # Label of the start URL; "subCategoryPage" starts directly at a product listing.
    start_page_type: str = PageType.HOME.value
    # Glob that product links on listing pages must match to be enqueued ("" disables).
    match_pattern: str = "https://www.wildberries.ru/catalog/**"
    # Listing pages are read only once this selector is present.
    ready_selector: str = ".product-card"
    max_pages_to_crawl: int = 50
    output_file_name: str = "output.json"
    cookie: Optional[Cookie] = None
    selector_timeout_ms: Optional[int] = None
    excluded_categories_pattern: Optional[str] = DEFAULT_EXCLUDED_CATEGORIES
    # Site vocabulary: breadcrumbs, filter label, dimension table, goods-category alphabet.
    locale: str = "ru"
    max_concurrency: int = 4
    request_timeout: float = 30.0
    retries: int = 2
    user_agent: str = f"catalog_crawler/{__version__}"
    headless: bool = True
    # Dotted paths for engine/exporter to allow runtime swapping without code changes.
    engine: str = "catalog_crawler.engines.browser_engine:BrowserCrawlEngine"
    exporter: str = "catalog_crawler.export.json_exporter:JSONExporter"
    storage_dir: str = "storage/datasets/default"
    purge_on_start: bool = True
    # Skip the crawl and only aggregate what the dataset already holds.
    no_crawl: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        """
        defaults = cls()

        def _get(name: str, default: Any) -> str:
            return os.getenv(name, str(default))

        cookie = None
        cookie_name = os.getenv("CRAWLER_COOKIE_NAME")
        if cookie_name:
            cookie = Cookie(name=cookie_name, value=os.getenv("CRAWLER_COOKIE_VALUE", ""))

        timeout = os.getenv("CRAWLER_SELECTOR_TIMEOUT_MS")
        excluded = os.getenv("CRAWLER_EXCLUDED_CATEGORIES", defaults.excluded_categories_pattern)

        return cls(
            start_url=_get("CRAWLER_START_URL", defaults.start_url),
            start_page_type=_get("CRAWLER_START_PAGE_TYPE", defaults.start_page_type),
            match_pattern=_get("CRAWLER_MATCH_PATTERN", defaults.match_pattern),
            ready_selector=_get("CRAWLER_READY_SELECTOR", defaults.ready_selector),
            max_pages_to_crawl=int(_get("CRAWLER_MAX_PAGES", defaults.max_pages_to_crawl)),
            output_file_name=_get("CRAWLER_OUTPUT_PATH", defaults.output_file_name),
            cookie=cookie,
            selector_timeout_ms=int(timeout) if timeout else None,
            excluded_categories_pattern=excluded or None,
            locale=_get("CRAWLER_LOCALE", defaults.locale),
            max_concurrency=int(_get("CRAWLER_MAX_CONCURRENCY", defaults.max_concurrency)),
            request_timeout=float(_get("CRAWLER_REQUEST_TIMEOUT", defaults.request_timeout)),
            retries=int(_get("CRAWLER_RETRIES", defaults.retries)),
            user_agent=_get("CRAWLER_USER_AGENT", defaults.user_agent),
            headless=_flag(_get("CRAWLER_HEADLESS", "true")),
            engine=_get("CRAWLER_ENGINE", defaults.engine),
            exporter=_get("CRAWLER_EXPORTER", defaults.exporter),
            storage_dir=_get("CRAWLER_STORAGE_DIR", defaults.storage_dir),
            purge_on_start=_flag(_get("CRAWLER_PURGE_ON_START", "true")),
            no_crawl=_flag(os.getenv("NO_CRAWL", "false")),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration for future versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        cookie = data.pop("cookie", None)
        try:
            return cls(cookie=Cookie(**cookie) if cookie else None, **data)
        except TypeError as exc:
            raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    # ---------- Resolution ----------

    def resolve(self) -> "ResolvedConfig":
        """
        Validate and fill every optional with its effective value.
        """
        if not self.start_url:
            raise ConfigError("start_url cannot be empty")
        if self.max_pages_to_crawl <= 0:
            raise ConfigError("max_pages_to_crawl must be > 0")
        if self.max_concurrency <= 0:
            raise ConfigError("max_concurrency must be > 0")
        if not self.output_file_name:
            raise ConfigError("output_file_name cannot be empty")
        if self.selector_timeout_ms is not None and self.selector_timeout_ms <= 0:
            raise ConfigError("selector_timeout_ms must be > 0")
        if self.cookie is not None and not self.cookie.name:
            raise ConfigError("cookie.name cannot be empty")

        try:
            start_page_type = PageType.parse(self.start_page_type)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        locale = LOCALES.get(self.locale.strip().lower())
        if locale is None:
            raise ConfigError(f"Unknown locale {self.locale!r}; expected one of {', '.join(LOCALES)}")

        excluded = None
        if self.excluded_categories_pattern:
            try:
                excluded = re.compile(self.excluded_categories_pattern, re.IGNORECASE)
            except re.error as exc:
                raise ConfigError(f"Invalid excluded_categories_pattern: {exc}") from exc

        # Validate output path parent exists or is creatable
        Path(self.output_file_name).parent.mkdir(parents=True, exist_ok=True)

        return ResolvedConfig(
            start_url=self.start_url,
            start_page_type=start_page_type,
            match_pattern=self.match_pattern,
            ready_selector=self.ready_selector,
            max_pages_to_crawl=self.max_pages_to_crawl,
            output_file_name=self.output_file_name,
            cookie=self.cookie,
            selector_timeout_ms=self.selector_timeout_ms or DEFAULT_SELECTOR_TIMEOUT_MS,
            excluded_categories=excluded,
            locale=locale,
            max_concurrency=self.max_concurrency,
            request_timeout=self.request_timeout,
            retries=self.retries,
            user_agent=self.user_agent,
            headless=self.headless,
            engine=self.engine,
            exporter=self.exporter,
            storage_dir=self.storage_dir,
            purge_on_start=self.purge_on_start,
            no_crawl=self.no_crawl,
        )


@dataclass(frozen=True)
class ResolvedConfig:
    """Effective configuration: nothing optional is left to fall back on at crawl time."""

    start_url: str
    start_page_type: PageType
    match_pattern: str
    ready_selector: str
    max_pages_to_crawl: int
    output_file_name: str
    cookie: Optional[Cookie]
    selector_timeout_ms: int
    excluded_categories: Optional[Pattern[str]]
    locale: Locale
    max_concurrency: int
    request_timeout: float
    retries: int
    user_agent: str
    headless: bool
    engine: str
    exporter: str
    storage_dir: str
    purge_on_start: bool
    no_crawl: bool


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    schema = raw.get("schema_version", 1)

    if schema < 2:
        # v1 took a list of start URLs and crawled by depth.
        urls = raw.pop("start_urls", None) or []
        if urls and "start_url" not in raw:
            raw["start_url"] = urls[0]
        if "output_path" in raw:
            raw.setdefault("output_file_name", raw.pop("output_path"))
        for dropped in ("allowed_domains", "max_depth", "extra_adapters"):
            raw.pop(dropped, None)
        for dotted in ("engine", "exporter"):
            value = raw.get(dotted)
            if value and value.startswith(("engines.", "export.")):
                raw[dotted] = f"catalog_crawler.{value}"

    raw["schema_version"] = CONFIG_SCHEMA_VERSION
    return raw
