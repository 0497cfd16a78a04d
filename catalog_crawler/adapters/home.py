from __future__ import annotations

import logging
from typing import List, Optional, Pattern, Tuple

from .base import Page, SiteSelectors
from ..models import LinkRef

logger = logging.getLogger(__name__)


async def extract_menu_links(page: Page, selectors: SiteSelectors, *, ready_selector: str, timeout_ms: int) -> List[LinkRef]:
    """
    Open the collapsed top navigation and read its first-level links.
    The menu is rendered only after the burger button is clicked.
    """
    await page.wait_for(ready_selector, timeout_ms)
    await page.click(selectors.menu_button)
    await page.wait_for(selectors.menu_list, timeout_ms)
    return await page.child_links(selectors.menu_list)


def split_excluded(links: List[LinkRef], pattern: Optional[Pattern[str]]) -> Tuple[List[LinkRef], List[LinkRef]]:
    """Partition links into (kept, excluded) by searching ``pattern`` in each title."""
    if pattern is None:
        return list(links), []
    kept: List[LinkRef] = []
    excluded: List[LinkRef] = []
    for link in links:
        if pattern.search(link.title):
            logger.debug("Excluding menu category %r (%s)", link.title, link.href)
            excluded.append(link)
        else:
            kept.append(link)
    return kept, excluded
