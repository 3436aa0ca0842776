"""
WordPress REST API Engine

Flow:
1. probe_api():    HEAD /wp-json/ (short timeout, never raises)
2. scan_via_api(): /wp/v2/types + /wp/v2/taxonomies in parallel; either one
                   failing is fatal to this path so the orchestrator can fall back
3. Term counts per taxonomy and samples per type, fetched concurrently with
   isolated failures (settle all, then filter)

Also home to the fallback content-type builder used when the API path is
unavailable: sitemap groups + RSS items → estimated content types.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Any, Sequence
import httpx
import structlog

from migration_scanner.core.config import get_settings
from migration_scanner.core.exceptions import WordPressApiError
from migration_scanner.core.http import FETCH_ERRORS, fetch_json, head, path_segments, request_timeout
from migration_scanner.core.text import decode_html_entities, title_case, to_error_message
from migration_scanner.engines.base import (
    ContentSample,
    ContentType,
    ScanEngine,
    TaxonomyRef,
)
from migration_scanner.engines.complexity.engine import ContentSampleInput, analyze_content_complexity
from migration_scanner.engines.rss.engine import RssItem
from migration_scanner.engines.sitemap.engine import PAGES_GROUP, SitemapGroup

logger = structlog.get_logger(__name__)

TOTAL_HEADER = "X-WP-Total"
_LEADING_DIGITS = re.compile(r"\s*(\d+)")

SKIP_TYPES: frozenset[str] = frozenset({
    "attachment",
    "nav_menu_item",
    "wp_block",
    "wp_template",
    "wp_template_part",
    "wp_navigation",
    "wp_font_family",
    "wp_font_face",
    "wp_global_styles",
    "elementor_library",
    "e-landing-page",
})

SKIP_TAXONOMIES: frozenset[str] = frozenset({
    "nav_menu",
    "wp_pattern_category",
    "link_category",
    "post_format",
    "wp_theme",
    "elementor_library_type",
    "elementor_library_category",
})

# Sitemap groups whose samples and categories come from the RSS feed
RSS_BACKED_GROUPS: frozenset[str] = frozenset({"blog", PAGES_GROUP})


# ─────────────────────────────────────────────
# Data Structures
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class WpType:
    name: str
    slug: str
    rest_base: str
    taxonomies: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class WpTaxonomy:
    name: str
    slug: str
    rest_base: str
    types: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ContentItems:
    count: int
    samples: list[ContentSample]
    complexity_inputs: list[ContentSampleInput]


@dataclass(frozen=True)
class ApiScanResult:
    content_types: list[ContentType] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class _TaxonomyCount:
    taxonomy: WpTaxonomy
    count: int
    terms: list[str]


@dataclass(frozen=True)
class _TypeFetch:
    content_type: ContentType | None = None
    error: str | None = None


# ─────────────────────────────────────────────
# Pure parsers
# ─────────────────────────────────────────────

def parse_types_response(
    data: dict[str, Any],
    skip: frozenset[str] = SKIP_TYPES,
) -> list[WpType]:
    """Pure parser - filters out internal WordPress types."""
    types = []
    for key, entry in data.items():
        if not isinstance(entry, dict):
            continue
        slug = entry.get("slug") or key
        if slug in skip:
            continue
        types.append(WpType(
            name=entry.get("name") or title_case(slug),
            slug=slug,
            rest_base=entry.get("rest_base") or slug,
            taxonomies=list(entry.get("taxonomies") or []),
        ))
    return types


def parse_taxonomies_response(
    data: dict[str, Any],
    skip: frozenset[str] = SKIP_TAXONOMIES,
) -> list[WpTaxonomy]:
    """Pure parser - filters out internal WordPress taxonomies."""
    taxonomies = []
    for key, entry in data.items():
        if not isinstance(entry, dict):
            continue
        slug = entry.get("slug") or key
        if slug in skip:
            continue
        taxonomies.append(WpTaxonomy(
            name=entry.get("name") or title_case(slug),
            slug=slug,
            rest_base=entry.get("rest_base") or slug,
            types=list(entry.get("types") or []),
        ))
    return taxonomies


def parse_total_header(value: str | None) -> int:
    """X-WP-Total's leading digits as an int; missing or non-numeric headers count as 0."""
    match = _LEADING_DIGITS.match(value or "")
    return int(match.group(1)) if match else 0


def _rendered(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if isinstance(value, dict):
        value = value.get("rendered")
    return value if isinstance(value, str) else ""


def has_custom_fields(item: dict[str, Any]) -> bool:
    """ACF exposes its fields under ``acf``; registered post meta under ``meta``."""
    acf = item.get("acf")
    if acf:
        return True
    meta = item.get("meta")
    if isinstance(meta, dict):
        return any(bool(v) for v in meta.values())
    return bool(meta)


def parse_content_items(
    items: Sequence[dict[str, Any]],
    total_header: str | None,
    sample_size: int = 5,
) -> ContentItems:
    """Pure parser - extracts count, sample titles and complexity inputs from a content listing."""
    samples = []
    for item in items:
        title = decode_html_entities(_rendered(item, "title")).strip()
        if title:
            link = item.get("link")
            samples.append(ContentSample(title=title, url=link if isinstance(link, str) and link else None))

    complexity_inputs = [
        ContentSampleInput(
            content_html=_rendered(item, "content"),
            has_custom_fields=has_custom_fields(item),
        )
        for item in items
    ]

    return ContentItems(
        count=parse_total_header(total_header),
        samples=samples[:sample_size],
        complexity_inputs=complexity_inputs,
    )


# ─────────────────────────────────────────────
# Network operations
# ─────────────────────────────────────────────

async def probe_api(client: httpx.AsyncClient, base_url: str, timeout: float | None = None) -> bool:
    """HEAD /wp-json/ - True only for a 2xx answer. Never raises."""
    timeout = timeout or get_settings().SCANNER_PROBE_TIMEOUT
    try:
        response = await head(client, f"{base_url}/wp-json/", timeout=timeout)
    except FETCH_ERRORS as e:
        logger.debug("REST API probe failed", base_url=base_url, error=str(e))
        return False
    return response.is_success


def _decode_index(response: httpx.Response, endpoint: str) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError as e:
        raise WordPressApiError(f"Invalid JSON from {endpoint}: {e}") from e
    if not isinstance(data, dict):
        raise WordPressApiError(f"Unexpected payload from {endpoint}")
    return data


async def _count_terms(client: httpx.AsyncClient, api: str, taxonomy: WpTaxonomy, timeout: float) -> _TaxonomyCount:
    response = await client.get(
        f"{api}/{taxonomy.rest_base}", params={"per_page": 1}, timeout=request_timeout(timeout),
    )
    if not response.is_success:
        return _TaxonomyCount(taxonomy=taxonomy, count=0, terms=[])

    terms: list[str] = []
    try:
        payload = response.json()
    except ValueError:
        payload = []
    if isinstance(payload, list):
        terms = [
            decode_html_entities(t["name"])
            for t in payload
            if isinstance(t, dict) and isinstance(t.get("name"), str) and t["name"]
        ]
    return _TaxonomyCount(
        taxonomy=taxonomy,
        count=parse_total_header(response.headers.get(TOTAL_HEADER)),
        terms=terms,
    )


async def _fetch_type(
    client: httpx.AsyncClient,
    api: str,
    wp_type: WpType,
    term_counts: dict[str, _TaxonomyCount],
    sample_size: int,
    timeout: float,
) -> _TypeFetch:
    try:
        response = await client.get(
            f"{api}/{wp_type.rest_base}", params={"per_page": sample_size}, timeout=request_timeout(timeout),
        )
        if not response.is_success:
            return _TypeFetch(error=f"Could not fetch {wp_type.name}: HTTP {response.status_code}")
        payload = response.json()
    except (*FETCH_ERRORS, ValueError) as e:
        return _TypeFetch(error=f"Error fetching {wp_type.name}: {to_error_message(e)}")

    items = [item for item in payload if isinstance(item, dict)] if isinstance(payload, list) else []
    parsed = parse_content_items(items, response.headers.get(TOTAL_HEADER), sample_size)

    taxonomies = [
        TaxonomyRef(name=tc.taxonomy.name, slug=tc.taxonomy.slug, count=tc.count, terms=tc.terms)
        for tc in (term_counts.get(slug) for slug in wp_type.taxonomies)
        if tc is not None and tc.count > 0
    ]

    return _TypeFetch(content_type=ContentType(
        name=wp_type.name,
        slug=wp_type.slug,
        count=parsed.count,
        is_estimate=False,
        samples=parsed.samples,
        taxonomies=taxonomies,
        complexity=analyze_content_complexity(parsed.complexity_inputs),
    ))


async def scan_via_api(
    client: httpx.AsyncClient,
    base_url: str,
    skip_types: frozenset[str] = SKIP_TYPES,
    skip_taxonomies: frozenset[str] = SKIP_TAXONOMIES,
) -> ApiScanResult:
    """
    Build content types from the REST API.

    Raises WordPressApiError when types or taxonomies cannot be read; every
    other failure is isolated to the type or taxonomy it belongs to.
    """
    settings = get_settings()
    timeout = settings.SCANNER_REQUEST_TIMEOUT
    sample_size = settings.SCANNER_SAMPLE_SIZE
    api = f"{base_url}/wp-json/wp/v2"

    types_res, tax_res = await asyncio.gather(
        fetch_json(client, f"{api}/types", timeout),
        fetch_json(client, f"{api}/taxonomies", timeout),
    )
    if types_res is None or tax_res is None:
        raise WordPressApiError("Failed to fetch types or taxonomies from REST API")

    wp_types = parse_types_response(_decode_index(types_res, "types"), skip_types)
    wp_taxonomies = parse_taxonomies_response(_decode_index(tax_res, "taxonomies"), skip_taxonomies)

    # Term counts: a failed taxonomy simply never gets attached
    count_results = await asyncio.gather(
        *[_count_terms(client, api, tax, timeout) for tax in wp_taxonomies],
        return_exceptions=True,
    )
    term_counts: dict[str, _TaxonomyCount] = {}
    for tax, result in zip(wp_taxonomies, count_results):
        if isinstance(result, BaseException):
            logger.debug("Term count failed", taxonomy=tax.slug, error=to_error_message(result))
            continue
        term_counts[tax.slug] = result

    type_results = await asyncio.gather(
        *[_fetch_type(client, api, t, term_counts, sample_size, timeout) for t in wp_types],
        return_exceptions=True,
    )

    content_types: list[ContentType] = []
    errors: list[str] = []
    for wp_type, result in zip(wp_types, type_results):
        if isinstance(result, BaseException):
            errors.append(f"Error fetching {wp_type.name}: {to_error_message(result)}")
            continue
        if result.error:
            errors.append(result.error)
        if result.content_type is not None and result.content_type.count > 0:
            content_types.append(result.content_type)

    logger.info(
        "REST API scan complete",
        base_url=base_url,
        types=len(wp_types),
        taxonomies=len(wp_taxonomies),
        kept=len(content_types),
        errors=len(errors),
    )
    return ApiScanResult(content_types=content_types, errors=errors)


class WordPressApiEngine(ScanEngine[ApiScanResult | None]):

    ENGINE_NAME = "wp_api"
    ERROR_LABEL = "REST API probe succeeded but scan failed"

    def fallback(self) -> ApiScanResult | None:
        return None

    async def run(self, base_url: str) -> ApiScanResult | None:
        return await scan_via_api(self.client, base_url)


# ─────────────────────────────────────────────
# Fallback content types (no REST API)
# ─────────────────────────────────────────────

def _last_segment_title(url: str) -> str:
    try:
        parts = path_segments(url)
    except ValueError:
        return ""
    return title_case(parts[-1]) if parts else ""


def build_fallback_content_types(
    groups: Sequence[SitemapGroup],
    rss_items: Sequence[RssItem],
    base_url: str,
    sample_size: int = 5,
) -> list[ContentType]:
    """
    Merge sitemap groups with RSS items into estimated content types.

    The blog and (pages) groups take their samples and a synthetic
    "Categories" taxonomy from the feed; every other group derives samples
    from its URL slugs. Counts are URL counts, never exact.
    """
    categories: list[str] = []
    for item in rss_items:
        for category in item.categories:
            if category not in categories:
                categories.append(category)

    content_types = []
    for group in groups:
        samples: list[ContentSample] = []
        taxonomies: list[TaxonomyRef] = []

        if group.pattern in RSS_BACKED_GROUPS:
            samples = [
                ContentSample(title=item.title, url=item.link)
                for item in rss_items[:sample_size]
                if item.title
            ]
            if categories:
                taxonomies.append(TaxonomyRef(
                    name="Categories",
                    slug="category",
                    count=len(categories),
                    terms=list(categories),
                ))

        if not samples:
            for url in group.urls[:sample_size]:
                title = _last_segment_title(url)
                if title:
                    samples.append(ContentSample(title=title, url=url))

        content_types.append(ContentType(
            name=title_case(group.pattern),
            slug=group.pattern,
            count=len(group.urls),
            is_estimate=True,
            samples=samples,
            taxonomies=taxonomies,
            complexity=None,
        ))

    logger.debug("Fallback content types built", base_url=base_url, groups=len(groups))
    return content_types
