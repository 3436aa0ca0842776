"""
Scan orchestrator.

Pipeline:
    normalize → resolve redirects → [probe | sitemap | homepage] in parallel
    → URL structure → REST API scan, or sitemap + RSS fallback → ScanResult

Only URL normalization can raise out of scan(); every network or parse
failure ends up as a prefixed string in ScanResult.errors.
"""

from __future__ import annotations

import asyncio
import re
import time
from datetime import datetime, timezone

import httpx
import structlog

from migration_scanner.core.config import get_settings
from migration_scanner.core.exceptions import InvalidTargetError
from migration_scanner.core.http import FETCH_ERRORS, create_client, head, is_url_allowed, origin_of
from migration_scanner.engines.base import ScanResult, UrlStructure
from migration_scanner.engines.homepage.engine import HomepageEngine
from migration_scanner.engines.rss.engine import RssEngine
from migration_scanner.engines.sitemap.engine import SITEMAP_PATHS, SitemapEngine
from migration_scanner.engines.urls.engine import analyze_urls
from migration_scanner.engines.wp_api.engine import (
    WordPressApiEngine,
    build_fallback_content_types,
    probe_api,
)

logger = structlog.get_logger(__name__)

_SCHEME = re.compile(r"^https?://", re.IGNORECASE)


def normalize_input_url(raw: str) -> str:
    """Trim, drop trailing slashes and default to https:// when no scheme is given."""
    url = raw.strip().rstrip("/")
    if not _SCHEME.match(url):
        url = f"https://{url}"
    return url


def prepare_target(raw: str | None) -> str:
    """
    Entry-point validation shared by the CLI and the HTTP route.

    Raises InvalidTargetError for empty input or hosts the SSRF filter rejects.
    """
    if not raw or not raw.strip():
        raise InvalidTargetError("URL is required")
    url = normalize_input_url(raw)
    if not is_url_allowed(url):
        raise InvalidTargetError(f"URL not allowed: {url}")
    return url


async def resolve_redirects(client: httpx.AsyncClient, url: str, timeout: float | None = None) -> str:
    """Best effort: the origin of the final redirect hop, or ``url`` unchanged."""
    timeout = timeout or get_settings().SCANNER_REQUEST_TIMEOUT
    try:
        response = await head(client, url, timeout=timeout, follow_redirects=True)
    except FETCH_ERRORS as e:
        logger.debug("Redirect resolution failed", url=url, error=str(e))
        return url
    return origin_of(str(response.url)) or url


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


async def scan(input_url: str, client: httpx.AsyncClient | None = None) -> ScanResult:
    if client is None:
        async with create_client() as owned:
            return await _scan(input_url, owned)
    return await _scan(input_url, client)


async def _scan(input_url: str, client: httpx.AsyncClient) -> ScanResult:
    start = time.perf_counter()
    base_url = await resolve_redirects(client, normalize_input_url(input_url))
    log = logger.bind(base_url=base_url)
    log.info("Scan started", input_url=input_url)

    errors: list[str] = []

    # Phase 1: independent branches
    api_available, sitemap, homepage = await asyncio.gather(
        probe_api(client, base_url),
        SitemapEngine(client).execute(base_url),
        HomepageEngine(client).execute(base_url),
    )
    for outcome in (sitemap, homepage):
        if outcome.error:
            errors.append(outcome.error)

    url_structure: UrlStructure | None = None
    if sitemap.value.all_urls:
        url_structure = analyze_urls(base_url, sitemap.value.all_urls)
    elif sitemap.ok:
        errors.append(f"No sitemap found at {', '.join(SITEMAP_PATHS)}")

    plugins = homepage.value.plugins
    integrations = homepage.value.integrations

    # Phase 2a: REST API content types
    if api_available:
        api = await WordPressApiEngine(client).execute(base_url)
        if api.ok and api.value is not None:
            result = ScanResult(
                url=base_url,
                scanned_at=_now_iso(),
                api_available=True,
                content_types=api.value.content_types,
                url_structure=url_structure,
                detected_plugins=plugins,
                detected_integrations=integrations,
                errors=errors + api.value.errors,
            )
            _log_finished(log, result, start)
            return result
        if api.error:
            errors.append(api.error)

    # Phase 2b: sitemap groups + RSS
    rss = await RssEngine(client).execute(base_url)
    if rss.error:
        errors.append(rss.error)

    result = ScanResult(
        url=base_url,
        scanned_at=_now_iso(),
        api_available=False,
        content_types=build_fallback_content_types(sitemap.value.groups, rss.value, base_url),
        url_structure=url_structure,
        detected_plugins=plugins,
        detected_integrations=integrations,
        errors=errors,
    )
    _log_finished(log, result, start)
    return result


def _log_finished(log, result: ScanResult, start: float) -> None:
    log.info(
        "Scan finished",
        api_available=result.api_available,
        content_types=len(result.content_types),
        errors=len(result.errors),
        elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
    )
