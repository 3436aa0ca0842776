"""
Migration scope summary: one headline plus a short list of considerations.

Coarser than the annotation rules and meant for an executive summary card.
"""

from __future__ import annotations

from migration_scanner.core.text import pluralize
from migration_scanner.engines.base import (
    ComplexityLevel,
    MigrationConsideration,
    MigrationScope,
    MultilingualType,
    ScanResult,
)

SMALL_LIMIT = 100
MEDIUM_LIMIT = 500
STRUCTURAL_COMPLEXITY_TAXONOMIES = 10
CROSS_TYPE_TAXONOMIES = 5
COMPLEX_TAXONOMY_TYPES = 5
MEDIA_HEAVY_ITEMS = 50
SCALE_ITEMS = 1000

_MULTILINGUAL_NOUN = {
    MultilingualType.SUBDIRECTORY: "subdirectories",
    MultilingualType.SUBDOMAIN: "subdomains",
    MultilingualType.HREFLANG: "variants",
}


def size_label(total_items: int) -> str:
    if total_items < SMALL_LIMIT:
        return "Small"
    if total_items < MEDIUM_LIMIT:
        return "Medium"
    return "Large"


def build_headline(data: ScanResult) -> str:
    total_items = sum(ct.count for ct in data.content_types)
    type_count = len(data.content_types)
    taxonomy_count = sum(len(ct.taxonomies) for ct in data.content_types)
    multilingual = data.url_structure.multilingual if data.url_structure else None

    size = size_label(total_items)
    multi = ", multilingual" if multilingual else ""
    complexity = " with significant structural complexity" if taxonomy_count > STRUCTURAL_COMPLEXITY_TAXONOMIES else ""
    languages = f" across {len(multilingual.languages)} languages" if multilingual else ""
    cross = " with cross-type relationships" if taxonomy_count > CROSS_TYPE_TAXONOMIES else ""

    return (
        f"{size}{multi} content platform{complexity}. "
        f"{type_count} content types spanning {total_items:,} items{languages}, "
        f"organized through {taxonomy_count}+ taxonomy systems{cross}."
    )


def _page_builder(data: ScanResult) -> MigrationConsideration | None:
    with_builder = next((ct for ct in data.content_types if ct.complexity and ct.complexity.builder), None)
    if with_builder is None:
        return None

    pages = sum(
        ct.count for ct in data.content_types
        if ct.complexity and ct.complexity.level == ComplexityLevel.COMPLEX
    )
    return MigrationConsideration(
        icon="⚠",
        color="red",
        title="Page builder dependency",
        body=(
            f"{with_builder.complexity.builder} detected. Pages likely mix layout with content and will need "
            f"content extraction, not 1:1 copy. Expect higher effort on the {pages} pages vs standard post types."
        ),
    )


def _uneven_multilingual(data: ScanResult) -> MigrationConsideration | None:
    multilingual = data.url_structure.multilingual if data.url_structure else None
    if multilingual is None or len(multilingual.languages) < 2:
        return None

    others = [lang for lang in multilingual.languages if lang != "en"]
    noun = _MULTILINGUAL_NOUN.get(multilingual.type, "variants")
    return MigrationConsideration(
        icon="⟠",
        color="purple",
        title="Multilingual with uneven coverage",
        body=(
            f"{len(others)} language {noun} ({', '.join(others)}) but content depth varies significantly. "
            "Some content areas appear English-only. Translation workflow will require redesign."
        ),
    )


def _media_heavy(data: ScanResult) -> MigrationConsideration | None:
    videos = sum(
        ct.count for ct in data.content_types
        if "video" in ct.name.lower() or "video" in ct.slug.lower()
    )
    if videos <= MEDIA_HEAVY_ITEMS:
        return None

    return MigrationConsideration(
        icon="▶",
        color="orange",
        title="Media-heavy content",
        body=(
            f"{videos} video entries detected. Clarify whether these are embedded (YouTube/Vimeo) or "
            "self-hosted before scoping media migration."
        ),
    )


def _complex_taxonomies(data: ScanResult) -> MigrationConsideration | None:
    candidates = [ct for ct in data.content_types if len(ct.taxonomies) >= COMPLEX_TAXONOMY_TYPES]
    if not candidates:
        return None

    most = max(candidates, key=lambda ct: len(ct.taxonomies))
    verb = "reference" if most.name.endswith("s") else "references"
    names = ", ".join(t.name for t in most.taxonomies)
    return MigrationConsideration(
        icon="◈",
        color="yellow",
        title="Complex taxonomy relationships",
        body=(
            f"{most.name} {verb} {len(most.taxonomies)} taxonomy dimensions ({names}). "
            "This cross-referencing needs careful schema modeling."
        ),
    )


def _dead_weight(data: ScanResult) -> MigrationConsideration | None:
    missing = sum(1 for error in data.errors if "404" in error)
    if not missing:
        return None

    return MigrationConsideration(
        icon="✓",
        color="green",
        title="Dead weight identified",
        body=(
            f"{missing} plugin {pluralize(missing, 'content type')} returned 404. "
            "Likely safe to exclude from migration scope."
        ),
    )


def _scale(data: ScanResult) -> MigrationConsideration | None:
    total_items = sum(ct.count for ct in data.content_types)
    if total_items <= SCALE_ITEMS:
        return None

    return MigrationConsideration(
        icon="◉",
        color="blue",
        title="Scale considerations",
        body=(
            f"{total_items:,} total items across {len(data.content_types)} content types. Batch migration "
            "scripts and progress tracking will be important for a project of this scale."
        ),
    )


CONSIDERATIONS = (
    _page_builder,
    _uneven_multilingual,
    _media_heavy,
    _complex_taxonomies,
    _dead_weight,
    _scale,
)


def generate_migration_scope(data: ScanResult) -> MigrationScope:
    considerations = [c for c in (check(data) for check in CONSIDERATIONS) if c is not None]
    return MigrationScope(headline=build_headline(data), considerations=considerations)
