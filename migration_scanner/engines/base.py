"""
Base class and type contracts for all scan engines.

Design principles:
- Engines are stateless: all inputs come from the base URL and the client
- Engines are independent: no engine imports another engine's run()
- Engines handle their own errors: execute() turns any failure into an
  EngineOutcome carrying a fallback value and a prefixed error string
- Every model is an immutable snapshot created once per scan
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from migration_scanner.core.text import to_error_message

logger = structlog.get_logger(__name__)

T = TypeVar("T")


# ─────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────

class ComplexityLevel(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class MultilingualType(str, Enum):
    SUBDIRECTORY = "subdirectory"
    SUBDOMAIN = "subdomain"
    HREFLANG = "hreflang"


class PluginCategory(str, Enum):
    PAGE_BUILDER = "page-builder"
    SEO = "seo"
    FORMS = "forms"
    ECOMMERCE = "ecommerce"
    MULTILINGUAL = "multilingual"
    CACHE = "cache"
    ANALYTICS = "analytics"
    SECURITY = "security"
    OTHER = "other"


class IntegrationCategory(str, Enum):
    ANALYTICS = "analytics"
    TAG_MANAGER = "tag-manager"
    CHAT = "chat"
    HEATMAP = "heatmap"
    MARKETING = "marketing"
    FORM_EMBED = "form-embed"
    SCHEDULING = "scheduling"
    COOKIE_CONSENT = "cookie-consent"
    OTHER = "other"


class AnnotationSeverity(str, Enum):
    INFO = "info"           # Worth knowing while planning
    WARNING = "warning"     # Adds scope or needs a decision
    CRITICAL = "critical"   # Blocks a straightforward migration


class AnnotationSection(str, Enum):
    CONTENT_TYPES = "content-types"
    PLUGINS = "plugins"
    URL_STRUCTURE = "url-structure"
    WARNINGS = "warnings"
    MULTILINGUAL = "multilingual"
    INTEGRATIONS = "integrations"


# ─────────────────────────────────────────────
# Core data types
# ─────────────────────────────────────────────

class ScanModel(BaseModel):
    """Frozen model serialised with the camelCase field names renderers expect."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ContentSample(ScanModel):
    title: str
    url: str | None = None


class TaxonomyRef(ScanModel):
    name: str
    slug: str
    count: int = Field(ge=0, default=0)
    terms: list[str] = Field(default_factory=list)


class ContentComplexity(ScanModel):
    level: ComplexityLevel
    signals: list[str] = Field(default_factory=list)
    builder: str | None = None


class ContentType(ScanModel):
    """One WordPress post type, or a sitemap-derived pseudo-type on the fallback path."""
    name: str
    slug: str
    count: int = Field(ge=0, default=0)
    is_estimate: bool = False
    samples: list[ContentSample] = Field(default_factory=list)
    taxonomies: list[TaxonomyRef] = Field(default_factory=list)
    complexity: ContentComplexity | None = None


class UrlPattern(ScanModel):
    pattern: str    # e.g. "/blog/{slug}/"
    example: str    # e.g. "/blog/my-first-post/"
    count: int = 0


class MultilingualInfo(ScanModel):
    type: MultilingualType
    languages: list[str] = Field(default_factory=list)


class UrlStructure(ScanModel):
    total_indexed_urls: int = 0
    patterns: list[UrlPattern] = Field(default_factory=list)
    multilingual: MultilingualInfo | None = None


class DetectedPlugin(ScanModel):
    slug: str
    name: str
    category: PluginCategory


class PluginScanResult(ScanModel):
    plugins: list[DetectedPlugin] = Field(default_factory=list)
    total_detected: int = 0


class DetectedIntegration(ScanModel):
    slug: str
    name: str
    category: IntegrationCategory


class IntegrationScanResult(ScanModel):
    integrations: list[DetectedIntegration] = Field(default_factory=list)
    total_detected: int = 0


class ScanResult(ScanModel):
    """Root aggregate handed to renderers, the annotation engine and the scope summary."""
    url: str
    scanned_at: str
    api_available: bool = False
    content_types: list[ContentType] = Field(default_factory=list)
    url_structure: UrlStructure | None = None
    detected_plugins: PluginScanResult | None = None
    detected_integrations: IntegrationScanResult | None = None
    errors: list[str] = Field(default_factory=list)


class Annotation(ScanModel):
    title: str
    body: str
    severity: AnnotationSeverity
    section: AnnotationSection


class MigrationConsideration(ScanModel):
    icon: str
    color: str   # red | purple | orange | yellow | green | blue
    title: str
    body: str


class MigrationScope(ScanModel):
    headline: str
    considerations: list[MigrationConsideration] = Field(default_factory=list)


# ─────────────────────────────────────────────
# Base Engine
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class EngineOutcome(Generic[T]):
    """Result of one scan branch: a value plus the error that replaced it, if any."""
    value: T
    error: str | None = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class ScanEngine(ABC, Generic[T]):
    """
    Abstract base class for the network-facing scan branches.

    All engines MUST:
    1. Implement run(base_url) -> T (may raise)
    2. Implement fallback() -> T, the value used when run() fails
    3. Be stateless - store nothing on self between calls
    """

    ENGINE_NAME: str = "base"
    ERROR_LABEL: str = "Scan error"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client
        self.logger = structlog.get_logger(self.__class__.__name__)

    @abstractmethod
    async def run(self, base_url: str) -> T:
        ...

    @abstractmethod
    def fallback(self) -> T:
        ...

    async def execute(self, base_url: str) -> EngineOutcome[T]:
        """
        Wrapper around run() that adds timing, logging, and error handling.
        Call this instead of run() directly.
        """
        start = time.perf_counter()
        self.logger.debug("Engine starting", engine=self.ENGINE_NAME, base_url=base_url)

        try:
            value = await self.run(base_url)
            elapsed = (time.perf_counter() - start) * 1000
            self.logger.info(
                "Engine complete",
                engine=self.ENGINE_NAME,
                base_url=base_url,
                elapsed_ms=round(elapsed, 2),
            )
            return EngineOutcome(value=value, elapsed_ms=elapsed)

        except Exception as exc:
            elapsed = (time.perf_counter() - start) * 1000
            self.logger.warning(
                "Engine failed",
                engine=self.ENGINE_NAME,
                base_url=base_url,
                error=to_error_message(exc),
                elapsed_ms=round(elapsed, 2),
                exc_info=True,
            )
            return EngineOutcome(
                value=self.fallback(),
                error=f"{self.ERROR_LABEL}: {to_error_message(exc)}",
                elapsed_ms=elapsed,
            )
