from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure crawler logging once per process.
    Falls back to CRAWLER_LOG_LEVEL, then INFO.
    """
    if level is None:
        level = os.getenv("CRAWLER_LOG_LEVEL", "INFO")

    if isinstance(level, str):
        level = _LEVELS.get(level.upper(), logging.INFO)

    logging.basicConfig(level=level, format=_FORMAT)
    # Playwright and aiohttp are chatty at DEBUG; keep them at WARNING unless asked.
    if level > logging.DEBUG:
        for noisy in ("asyncio", "aiohttp.access"):
            logging.getLogger(noisy).setLevel(logging.WARNING)
