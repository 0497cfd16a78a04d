from __future__ import annotations

import asyncio
from typing import Optional, Tuple
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

from ..errors import PageLoadError

logger = logging.getLogger(__name__)


async def fetch_text(
    session: ClientSession,
    url: str,
    *,
    timeout: float = 30.0,
    user_agent: Optional[str] = None,
    retries: int = 2,
) -> Tuple[str, str]:
    """
    Fetch a URL and return (final URL after redirects, body text).
    Raises PageLoadError once every attempt has failed.
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    last_exc: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            async with session.get(url, headers=headers, timeout=ClientTimeout(total=timeout)) as resp:
                resp.raise_for_status()
                return str(resp.url), await resp.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            last_exc = exc
            logger.debug("fetch_text attempt %s failed for %s: %r", attempt + 1, url, exc)
            if attempt < retries:
                await asyncio.sleep(_backoff_delay(attempt))
    raise PageLoadError(url, f"{retries + 1} attempts failed: {last_exc!r}")


def create_session(cookies: Optional[dict] = None) -> ClientSession:
    """
    Create a shared aiohttp ClientSession, optionally pre-loaded with cookies.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=0)  # unlimited; concurrency capped by the worker count
    return aiohttp.ClientSession(connector=connector, cookies=cookies)


def _backoff_delay(attempt: int) -> float:
    return min(2 ** attempt, 5)
