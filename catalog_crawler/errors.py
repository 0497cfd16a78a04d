from __future__ import annotations

from typing import Iterable, Optional


class CrawlerError(Exception):
    """Root of all errors raised by the crawler."""


class ConfigError(CrawlerError, ValueError):
    """Raised when a configuration cannot be resolved into an effective one."""


class PageLoadError(CrawlerError):
    """A work item's page could not be fetched or navigated to."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class CrawlAbortedError(CrawlerError):
    """The start URL could not be reached; nothing else can be crawled."""


class ExtractionError(CrawlerError):
    """
    The page does not have the shape implied by its work item label.
    Fatal to that work item's branch only.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{reason} on {url}")
        self.url = url
        self.reason = reason


class FieldMissingError(ExtractionError):
    field = "field"

    def __init__(self, url: str, detail: Optional[str] = None) -> None:
        reason = f"{self.field.capitalize()} not found"
        if detail:
            reason = f"{reason} ({detail})"
        super().__init__(url, reason)


class TitleMissing(FieldMissingError):
    field = "title"


class PriceMissing(FieldMissingError):
    field = "price"


class CompanyMissing(FieldMissingError):
    field = "company"


class RatingMissing(FieldMissingError):
    field = "rating"


class RatingCountMissing(FieldMissingError):
    field = "rating count"


class BreadcrumbsMissing(FieldMissingError):
    field = "breadcrumbs"


class GoodsCategoryMissing(FieldMissingError):
    field = "goods category"


class MissingContextError(ExtractionError):
    """A product work item arrived without a fully populated category trait."""

    def __init__(self, url: str, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(url, f"Category context incomplete, missing {', '.join(self.missing)}")


class ContextMismatchError(ExtractionError):
    """The page's own URL is absent from the parent links it was enqueued with."""

    def __init__(self, url: str) -> None:
        super().__init__(url, "Current link not found in parent links")


class PageTimeoutError(ExtractionError):
    def __init__(self, url: str, selector: str, timeout_ms: int) -> None:
        super().__init__(url, f"Selector {selector!r} did not appear within {timeout_ms} ms")
        self.selector = selector
        self.timeout_ms = timeout_ms


class UnknownPageTypeError(ExtractionError):
    def __init__(self, url: str, label: object) -> None:
        super().__init__(url, f"Unclassified page label {label!r}")
        self.label = label
