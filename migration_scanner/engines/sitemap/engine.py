"""
Sitemap Engine - discovers every indexed URL of a WordPress site.

Flow:
- Try the well-known sitemap locations in order, stop at the first one
  that yields URLs
- A sitemap index resolves exactly one level of child sitemaps, fetched
  concurrently; a failing child only drops its own URLs
- Flattened URLs are grouped by first path segment for the fallback
  content-type builder
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Sequence

import httpx
import structlog
from bs4 import BeautifulSoup

from migration_scanner.core.config import get_settings
from migration_scanner.core.http import fetch_xml, origin_of, path_segments
from migration_scanner.engines.base import ScanEngine

logger = structlog.get_logger(__name__)

SITEMAP_PATHS: tuple[str, ...] = (
    "/wp-sitemap.xml",
    "/sitemap.xml",
    "/sitemap_index.xml",
)

PAGES_GROUP = "(pages)"


# ─────────────────────────────────────────────
# Data Structures
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class SitemapDocument:
    """A parsed sitemap: either an index of child sitemaps or a urlset of pages."""
    kind: str  # index | urlset
    sitemap_urls: list[str] = field(default_factory=list)
    page_urls: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SitemapGroup:
    pattern: str
    urls: list[str]


@dataclass(frozen=True)
class SitemapResult:
    groups: list[SitemapGroup] = field(default_factory=list)
    all_urls: list[str] = field(default_factory=list)


# ─────────────────────────────────────────────
# Pure parsers
# ─────────────────────────────────────────────

def _locations(soup: BeautifulSoup, root: str, entry: str) -> list[str]:
    container = soup.find(root)
    if container is None:
        return []
    urls = []
    for node in container.find_all(entry):
        loc = node.find("loc", recursive=False)
        if loc is None:
            continue
        text = loc.get_text(strip=True)
        if text:
            urls.append(text)
    return urls


def parse_sitemap_xml(xml: str) -> SitemapDocument:
    """Parse sitemap XML. Anything that is not a sitemap index reads as a (possibly empty) urlset."""
    soup = BeautifulSoup(xml, "xml")
    if soup.find("sitemapindex") is not None:
        return SitemapDocument(kind="index", sitemap_urls=_locations(soup, "sitemapindex", "sitemap"))
    return SitemapDocument(kind="urlset", page_urls=_locations(soup, "urlset", "url"))


def group_sitemap_urls(base_url: str, urls: Sequence[str]) -> list[SitemapGroup]:
    """
    Group same-origin URLs by first path segment.

    /blog/my-post  → "blog"
    /about         → "(pages)"
    /              → skipped
    """
    base_origin = origin_of(base_url)
    groups: dict[str, list[str]] = {}

    for url in urls:
        if origin_of(url) != base_origin:
            continue
        parts = path_segments(url)
        if not parts:
            continue
        key = PAGES_GROUP if len(parts) == 1 else parts[0]
        groups.setdefault(key, []).append(url)

    result = [SitemapGroup(pattern=key, urls=members) for key, members in groups.items()]
    return sorted(result, key=lambda g: len(g.urls), reverse=True)


# ─────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────

class SitemapEngine(ScanEngine[SitemapResult]):

    ENGINE_NAME = "sitemap"
    ERROR_LABEL = "Sitemap parse error"

    def __init__(self, client: httpx.AsyncClient, paths: Sequence[str] = SITEMAP_PATHS):
        super().__init__(client)
        self.paths = paths
        self.timeout = get_settings().SCANNER_REQUEST_TIMEOUT

    def fallback(self) -> SitemapResult:
        return SitemapResult()

    async def run(self, base_url: str) -> SitemapResult:
        all_urls: list[str] = []

        for path in self.paths:
            xml = await fetch_xml(self.client, f"{base_url}{path}", self.timeout)
            if not xml:
                continue

            document = parse_sitemap_xml(xml)

            if document.kind == "index" and document.sitemap_urls:
                all_urls.extend(await self._fetch_children(document.sitemap_urls))
                self.logger.info(
                    "Sitemap index resolved",
                    path=path,
                    children=len(document.sitemap_urls),
                    urls=len(all_urls),
                )
                break

            if document.page_urls:
                all_urls.extend(document.page_urls)
                self.logger.info("Sitemap urlset parsed", path=path, urls=len(all_urls))
                break

        if not all_urls:
            return SitemapResult()

        return SitemapResult(groups=group_sitemap_urls(base_url, all_urls), all_urls=all_urls)

    async def _fetch_children(self, sitemap_urls: Sequence[str]) -> list[str]:
        """Fetch child sitemaps concurrently; failed children are dropped."""

        async def fetch_child(url: str) -> list[str]:
            xml = await fetch_xml(self.client, url, self.timeout)
            if not xml:
                return []
            return parse_sitemap_xml(xml).page_urls

        results = await asyncio.gather(*[fetch_child(u) for u in sitemap_urls], return_exceptions=True)

        urls: list[str] = []
        for child_url, result in zip(sitemap_urls, results):
            if isinstance(result, BaseException):
                self.logger.debug("Child sitemap dropped", url=child_url, error=str(result))
                continue
            urls.extend(result)
        return urls
