from __future__ import annotations

from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from ..errors import PageTimeoutError
from ..models import LinkRef
from .parsing import absolute_url


def _squash(text: str) -> str:
    return " ".join(text.split())


class SoupPage:
    """
    Page over already-rendered static HTML.
    Nothing changes after load, so waits and clicks only check that their target exists.
    """

    def __init__(self, url: str, html: str) -> None:
        self._url = url
        self.soup = BeautifulSoup(html, "html.parser")

    @property
    def url(self) -> str:
        return self._url

    # ---- Matching -----------------------------------------------------------

    def _select(self, selector: str, has_text: Optional[str] = None) -> List[Tag]:
        nodes = self.soup.select(selector)
        if has_text:
            needle = _squash(has_text).lower()
            nodes = [n for n in nodes if needle in _squash(n.get_text(" ")).lower()]
        return nodes

    def _first(self, selector: str, has_text: Optional[str] = None) -> Optional[Tag]:
        nodes = self._select(selector, has_text)
        return nodes[0] if nodes else None

    # ---- Page interface -----------------------------------------------------

    async def wait_for(self, selector: str, timeout_ms: int) -> None:
        if self._first(selector) is None:
            raise PageTimeoutError(self.url, selector, timeout_ms)

    async def text(self, selector: str, *, has_text: Optional[str] = None, last: bool = False) -> Optional[str]:
        nodes = self._select(selector, has_text)
        if not nodes:
            return None
        return (nodes[-1] if last else nodes[0]).get_text()

    async def inner_text(self, selector: str) -> Optional[str]:
        node = self._first(selector)
        return node.get_text("\n") if node is not None else None

    async def attribute(self, selector: str, name: str) -> Optional[str]:
        node = self._first(selector)
        if node is None:
            return None
        value = node.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    async def count(self, selector: str, *, has_text: Optional[str] = None) -> int:
        return len(self._select(selector, has_text))

    async def click(self, selector: str, *, has_text: Optional[str] = None, child: Optional[str] = None) -> None:
        node = self._first(selector, has_text)
        if node is not None and child:
            node = node.select_one(child)
        if node is None:
            raise PageTimeoutError(self.url, f"{selector} {child or ''}".strip(), 0)

    async def child_links(self, container: str) -> List[LinkRef]:
        root = self._first(container)
        if root is None:
            return []
        links: List[LinkRef] = []
        for node in root.find_all(recursive=False):
            anchor = node.find("a", href=True)
            if anchor is None or not anchor["href"]:
                continue
            links.append(LinkRef(href=absolute_url(self.url, anchor["href"]), title=_squash(anchor.get_text(" "))))
        return links

    async def hrefs(self, selector: str) -> List[str]:
        return [absolute_url(self.url, node["href"]) for node in self._select(selector) if node.get("href")]

    async def table_rows(self, selector: str, *, has_text: Optional[str] = None) -> List[Tuple[str, str]]:
        table = self._first(selector, has_text)
        if table is None:
            return []
        body = table.find("tbody") or table
        rows: List[Tuple[str, str]] = []
        for row in body.find_all("tr", recursive=False):
            cells = row.find_all(recursive=False)
            if not cells:
                continue
            label = _squash(cells[0].get_text(" "))
            value = _squash(cells[-1].get_text(" "))
            if label and value:
                rows.append((label, value))
        return rows
