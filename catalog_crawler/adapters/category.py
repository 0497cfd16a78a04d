from __future__ import annotations

from typing import List

from .base import Page, SiteSelectors
from ..models import LinkRef


async def extract_category_links(page: Page, selectors: SiteSelectors, *, ready_selector: str, timeout_ms: int) -> List[LinkRef]:
    """Second-level catalog listing of a top category page, in page order."""
    await page.wait_for(ready_selector, timeout_ms)
    await page.wait_for(selectors.category_links, timeout_ms)
    return await page.child_links(selectors.category_links)
