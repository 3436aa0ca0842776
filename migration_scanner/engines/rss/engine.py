"""
RSS Engine - recent post titles and categories from the WordPress feed.

Only used on the fallback path, where it supplies sample titles and a
synthetic "Categories" taxonomy for the blog and page groups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import httpx
import structlog
from bs4 import BeautifulSoup

from migration_scanner.core.config import get_settings
from migration_scanner.core.http import fetch_xml
from migration_scanner.engines.base import ScanEngine

logger = structlog.get_logger(__name__)

RSS_PATHS: tuple[str, ...] = ("/feed/", "/feed", "/rss/", "/rss")


@dataclass(frozen=True)
class RssItem:
    title: str
    link: str | None = None
    categories: list[str] = field(default_factory=list)


def _child_text(node, name: str) -> str | None:
    child = node.find(name, recursive=False)
    if child is None:
        return None
    return child.get_text(strip=True)


def parse_rss_xml(xml: str) -> list[RssItem]:
    """Parse RSS 2.0 (rss > channel > item). Non-RSS documents yield no items."""
    soup = BeautifulSoup(xml, "xml")
    rss = soup.find("rss")
    if rss is None:
        return []
    channel = rss.find("channel")
    if channel is None:
        return []

    items = []
    for node in channel.find_all("item", recursive=False):
        categories = [
            text
            for text in (c.get_text(strip=True) for c in node.find_all("category", recursive=False))
            if text
        ]
        items.append(RssItem(
            title=_child_text(node, "title") or "",
            link=_child_text(node, "link") or None,
            categories=categories,
        ))
    return items


class RssEngine(ScanEngine[list[RssItem]]):

    ENGINE_NAME = "rss"
    ERROR_LABEL = "RSS parse error"

    def __init__(self, client: httpx.AsyncClient, paths: Sequence[str] = RSS_PATHS):
        super().__init__(client)
        self.paths = paths
        self.timeout = get_settings().SCANNER_REQUEST_TIMEOUT

    def fallback(self) -> list[RssItem]:
        return []

    async def run(self, base_url: str) -> list[RssItem]:
        for path in self.paths:
            xml = await fetch_xml(self.client, f"{base_url}{path}", self.timeout)
            if not xml:
                continue

            try:
                items = parse_rss_xml(xml)
            except Exception as e:
                self.logger.debug("Feed parse failed", path=path, error=str(e))
                continue

            if items:
                self.logger.info("Feed parsed", path=path, items=len(items))
                return items

        return []
