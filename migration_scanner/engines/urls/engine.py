"""
URL Structure Engine

Generalizes the flattened sitemap URL list into path patterns and looks for
language prefixes (subdirectories first, then subdomains).

  /about/                 → /{page}/
  /blog/my-post/          → /blog/{slug}/
  /blog/2024/01/my-post/  → /blog/{...}/
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Sequence
from urllib.parse import urlparse

import structlog

from migration_scanner.core.http import origin_of
from migration_scanner.engines.base import MultilingualInfo, MultilingualType, UrlPattern, UrlStructure

logger = structlog.get_logger(__name__)

LANGUAGE_CODES: frozenset[str] = frozenset({
    "en", "de", "fr", "es", "it", "pt", "nl", "pl", "sv", "da", "no", "fi",
    "cs", "sk", "hu", "ro", "bg", "hr", "sl", "sr", "uk", "ru", "ja", "zh",
    "ko", "ar", "he", "th", "vi", "id", "ms", "tr", "el", "ca", "eu", "gl",
    "pt-br", "zh-hans", "zh-hant", "en-us", "en-gb", "fr-ca", "es-mx",
})

# A single prefix is usually just the default locale
MIN_LANGUAGES = 2


@dataclass
class _PatternTally:
    example: str
    count: int = 0


def _generalize(parts: list[str]) -> str:
    if len(parts) == 1:
        return "/{page}/"
    if len(parts) == 2:
        return f"/{parts[0]}/{{slug}}/"
    return f"/{parts[0]}/{{...}}/"


def derive_patterns(base_origin: str, urls: Sequence[str]) -> tuple[list[UrlPattern], int]:
    """Return (patterns sorted by count desc, number of same-origin URLs)."""
    tallies: dict[str, _PatternTally] = {}
    same_origin = 0

    for url in urls:
        if origin_of(url) != base_origin:
            continue
        same_origin += 1

        path = urlparse(url).path
        parts = [p for p in path.split("/") if p]
        if not parts:
            continue

        key = _generalize(parts)
        tally = tallies.setdefault(key, _PatternTally(example=path))
        tally.count += 1

    patterns = [
        UrlPattern(pattern=key, example=tally.example, count=tally.count)
        for key, tally in tallies.items()
    ]
    patterns.sort(key=lambda p: p.count, reverse=True)
    return patterns, same_origin


def detect_multilingual(
    base_origin: str,
    urls: Sequence[str],
    language_codes: frozenset[str] = LANGUAGE_CODES,
) -> MultilingualInfo | None:
    # Strategy 1: /en/..., /de/...
    prefixes: Counter[str] = Counter()
    for url in urls:
        if origin_of(url) != base_origin:
            continue
        parts = [p for p in urlparse(url).path.split("/") if p]
        if parts and parts[0].lower() in language_codes:
            prefixes[parts[0].lower()] += 1

    if len(prefixes) >= MIN_LANGUAGES:
        return MultilingualInfo(type=MultilingualType.SUBDIRECTORY, languages=sorted(prefixes))

    # Strategy 2: en.example.com, de.example.com
    base_host = urlparse(base_origin).hostname or ""
    if base_host.startswith("www."):
        base_host = base_host[len("www."):]

    subdomains: set[str] = set()
    for url in urls:
        try:
            host = urlparse(url).hostname or ""
        except ValueError:
            continue
        if not base_host or host == base_host or not host.endswith(f".{base_host}"):
            continue
        sub = host[: -len(base_host) - 1].lower()
        if sub in language_codes:
            subdomains.add(sub)

    if len(subdomains) >= MIN_LANGUAGES:
        return MultilingualInfo(type=MultilingualType.SUBDOMAIN, languages=sorted(subdomains))

    return None


def analyze_urls(
    base_url: str,
    urls: Sequence[str],
    language_codes: frozenset[str] = LANGUAGE_CODES,
) -> UrlStructure:
    """Pure analyzer - cross-origin URLs are skipped for patterns and the total."""
    base_origin = origin_of(base_url) or base_url
    patterns, total = derive_patterns(base_origin, urls)
    multilingual = detect_multilingual(base_origin, urls, language_codes)

    logger.debug(
        "URL structure analyzed",
        base_url=base_url,
        total=total,
        patterns=len(patterns),
        multilingual=multilingual.type.value if multilingual else None,
    )
    return UrlStructure(total_indexed_urls=total, patterns=patterns, multilingual=multilingual)
