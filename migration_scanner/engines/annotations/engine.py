"""
Annotation rules: short advisory notes attached to report sections.

Each rule inspects the finished ScanResult and returns one Annotation or
None. Rules run in registration order and never see each other's output.
"""

from __future__ import annotations

import re

from migration_scanner.core.rule_engine import RuleEvaluator, RuleRegistry
from migration_scanner.engines.base import (
    Annotation,
    AnnotationSection,
    AnnotationSeverity,
    ComplexityLevel,
    IntegrationCategory,
    ScanResult,
)

TAXONOMY_DIMENSIONS_THRESHOLD = 5
PLUGIN_COUNT_THRESHOLD = 20
HIDDEN_PLUGIN_ALLOWANCE = 10
REDIRECT_URL_THRESHOLD = 100
INTEGRATION_COUNT_THRESHOLD = 5
ANALYTICS_TOOLS_THRESHOLD = 2
UNTRANSLATED_PATTERN_MIN_URLS = 20
UNTRANSLATED_PATTERNS_THRESHOLD = 2

TEST_TITLE = re.compile(r"\btest\b", re.IGNORECASE)
CROCOBLOCK = re.compile(r"^jet(engine|menu|search)", re.IGNORECASE)
PLACEHOLDER_PATTERN = re.compile(r"^/\{[^/]+\}/$")

annotation_rules: RuleRegistry[ScanResult, Annotation] = RuleRegistry("annotations")

Severity = AnnotationSeverity
Section = AnnotationSection


# ─────────────────────────────────────────────
# Content types
# ─────────────────────────────────────────────

@annotation_rules.rule("builder-content-extraction")
def builder_content_extraction(data: ScanResult) -> Annotation | None:
    """Page builder markup means layout and content are mixed."""
    with_builder = next((ct for ct in data.content_types if ct.complexity and ct.complexity.builder), None)
    if with_builder is None:
        return None

    complex_types = [
        ct for ct in data.content_types
        if ct.complexity and ct.complexity.level == ComplexityLevel.COMPLEX
    ]
    if not complex_types:
        return None

    names = ", ".join(f"{ct.name} ({ct.count})" for ct in complex_types)
    return Annotation(
        title=f"{names} flagged as Complex",
        body=(
            f"{with_builder.complexity.builder} detected. These pages store layout structure mixed with "
            "content. Migration requires content extraction and rebuild as modular sections, not 1:1 copy."
        ),
        severity=Severity.WARNING,
        section=Section.CONTENT_TYPES,
    )


@annotation_rules.rule("complex-taxonomy-schema")
def complex_taxonomy_schema(data: ScanResult) -> Annotation | None:
    candidates = [ct for ct in data.content_types if len(ct.taxonomies) >= TAXONOMY_DIMENSIONS_THRESHOLD]
    if not candidates:
        return None

    # max() keeps the first of equally heavy types
    most = max(candidates, key=lambda ct: len(ct.taxonomies))
    verb = "use" if most.name.endswith("s") else "uses"
    return Annotation(
        title=f"{most.name} {verb} {len(most.taxonomies)} taxonomy dimensions",
        body=(
            "This is the most relationship-heavy content type. The target schema needs careful "
            "reference modeling to preserve all filtering capabilities."
        ),
        severity=Severity.WARNING,
        section=Section.CONTENT_TYPES,
    )


@annotation_rules.rule("test-content")
def test_content_warning(data: ScanResult) -> Annotation | None:
    with_test = [ct for ct in data.content_types if any(TEST_TITLE.search(s.title) for s in ct.samples)]
    if not with_test:
        return None

    names = ", ".join(f'"{ct.name}"' for ct in with_test)
    return Annotation(
        title=f"{names} with test posts detected",
        body="Appears to be a work-in-progress replacement. Clarify with team which version to migrate.",
        severity=Severity.INFO,
        section=Section.CONTENT_TYPES,
    )


# ─────────────────────────────────────────────
# Multilingual
# ─────────────────────────────────────────────

@annotation_rules.rule("multilingual-gaps")
def multilingual_gaps(data: ScanResult) -> Annotation | None:
    """Large URL groups that have no language-prefixed variant."""
    structure = data.url_structure
    if structure is None or structure.multilingual is None:
        return None
    if len(structure.multilingual.languages) < 2:
        return None

    prefixes = [lang for lang in structure.multilingual.languages if lang != "en"]
    untranslated = [
        p for p in structure.patterns
        if not any(p.pattern.startswith(f"/{lang}/") for lang in prefixes)
        and p.count > UNTRANSLATED_PATTERN_MIN_URLS
    ]
    if len(untranslated) < UNTRANSLATED_PATTERNS_THRESHOLD:
        return None

    return Annotation(
        title="Significant translation gaps",
        body=(
            "Several content areas exist only in English. Decide during planning: migrate English-only "
            "and add translations later, or scope translation as part of the project?"
        ),
        severity=Severity.WARNING,
        section=Section.MULTILINGUAL,
    )


@annotation_rules.rule("wpml-workflow")
def wpml_workflow(data: ScanResult) -> Annotation | None:
    if data.detected_plugins is None:
        return None
    if not any(p.slug == "wpml" or "wpml" in p.name.lower() for p in data.detected_plugins.plugins):
        return None

    return Annotation(
        title="WPML → localization redesign",
        body=(
            "The target CMS uses document-level or field-level localization instead of WPML's URL-based "
            "approach. Your translation workflows and editorial process will need to be redesigned. "
            "This is typically an improvement but requires planning."
        ),
        severity=Severity.WARNING,
        section=Section.MULTILINGUAL,
    )


# ─────────────────────────────────────────────
# Plugins
# ─────────────────────────────────────────────

@annotation_rules.rule("crocoblock-rebuild")
def crocoblock_rebuild(data: ScanResult) -> Annotation | None:
    if data.detected_plugins is None:
        return None

    jet = [
        p for p in data.detected_plugins.plugins
        if CROCOBLOCK.match(p.slug) or CROCOBLOCK.match(re.sub(r"\s+", "", p.name))
    ]
    if not jet:
        return None

    return Annotation(
        title=f"{' + '.join(p.name for p in jet)} detected",
        body=(
            "These Crocoblock plugins handle custom post type queries, mega menus, and search. Their "
            "functionality will need to be rebuilt as custom frontend components and CMS queries."
        ),
        severity=Severity.WARNING,
        section=Section.PLUGINS,
    )


@annotation_rules.rule("high-plugin-count")
def high_plugin_count(data: ScanResult) -> Annotation | None:
    """Backend-only plugins never show up in public HTML."""
    if data.detected_plugins is None:
        return None
    count = data.detected_plugins.total_detected
    if count < PLUGIN_COUNT_THRESHOLD:
        return None

    return Annotation(
        title=f"{count} detected, likely {count + HIDDEN_PLUGIN_ALLOWANCE}+ actual",
        body=(
            "Backend-only plugins (caching, security, backups, ACF) aren't visible from public scan. "
            "Request wp-admin access or plugin export for complete picture."
        ),
        severity=Severity.WARNING,
        section=Section.PLUGINS,
    )


# ─────────────────────────────────────────────
# Warnings
# ─────────────────────────────────────────────

@annotation_rules.rule("dead-content")
def dead_content(data: ScanResult) -> Annotation | None:
    if not any("404" in error for error in data.errors):
        return None

    return Annotation(
        title="Dead content types detected",
        body=(
            "These content types are registered in WordPress but return 404, likely from deactivated "
            "or partially removed plugins. Safe to exclude from migration scope."
        ),
        severity=Severity.INFO,
        section=Section.WARNINGS,
    )


# ─────────────────────────────────────────────
# URL structure
# ─────────────────────────────────────────────

@annotation_rules.rule("redirect-mapping")
def redirect_mapping(data: ScanResult) -> Annotation | None:
    structure = data.url_structure
    if structure is None or structure.total_indexed_urls <= REDIRECT_URL_THRESHOLD:
        return None

    language_note = (
        "Language subdirectories add complexity: decide if new URL structure keeps language prefixes "
        "or switches to a different pattern. "
        if structure.multilingual else ""
    )
    return Annotation(
        title=f"{structure.total_indexed_urls:,} URLs need redirect mapping",
        body=(
            f"All {len(structure.patterns)} URL patterns require 301 redirect rules. "
            f"{language_note}This decision must be made before migration starts."
        ),
        severity=Severity.WARNING,
        section=Section.URL_STRUCTURE,
    )


@annotation_rules.rule("flat-structure-review")
def flat_structure_review(data: ScanResult) -> Annotation | None:
    """The root-level /{page}/ bucket is strictly the largest pattern."""
    structure = data.url_structure
    if structure is None or not structure.patterns:
        return None

    ranked = sorted(structure.patterns, key=lambda p: p.count, reverse=True)
    largest = ranked[0]
    if not PLACEHOLDER_PATTERN.match(largest.pattern):
        return None
    if len(ranked) > 1 and largest.count <= ranked[1].count:
        return None

    return Annotation(
        title=f"{largest.count} root-level pages",
        body=(
            f"The {largest.pattern} pattern is the largest group but likely includes both real pages and "
            "flattened custom post type slugs. Review this list for proper content type assignment "
            "during modeling."
        ),
        severity=Severity.INFO,
        section=Section.URL_STRUCTURE,
    )


# ─────────────────────────────────────────────
# Integrations
# ─────────────────────────────────────────────

@annotation_rules.rule("gtm-dynamic-loading")
def gtm_dynamic_loading(data: ScanResult) -> Annotation | None:
    if data.detected_integrations is None:
        return None
    if not any(i.slug == "google-tag-manager" for i in data.detected_integrations.integrations):
        return None

    return Annotation(
        title="Google Tag Manager detected",
        body=(
            "Additional analytics and tracking services may be loaded dynamically via GTM and are not "
            "visible in static HTML analysis. Request GTM container export for complete integration inventory."
        ),
        severity=Severity.INFO,
        section=Section.INTEGRATIONS,
    )


@annotation_rules.rule("high-integration-count")
def high_integration_count(data: ScanResult) -> Annotation | None:
    if data.detected_integrations is None:
        return None
    count = data.detected_integrations.total_detected
    if count < INTEGRATION_COUNT_THRESHOLD:
        return None

    return Annotation(
        title=f"{count} third-party integrations detected",
        body=(
            "Each integration requires equivalent implementation or replacement in the target platform. "
            "Plan integration setup as a distinct migration workstream."
        ),
        severity=Severity.WARNING,
        section=Section.INTEGRATIONS,
    )


@annotation_rules.rule("multiple-analytics")
def multiple_analytics(data: ScanResult) -> Annotation | None:
    if data.detected_integrations is None:
        return None
    tools = [i for i in data.detected_integrations.integrations if i.category == IntegrationCategory.ANALYTICS]
    if len(tools) < ANALYTICS_TOOLS_THRESHOLD:
        return None

    return Annotation(
        title="Multiple analytics tools detected",
        body=(
            f"{', '.join(i.name for i in tools)}: consider consolidation during migration to reduce "
            "page weight and simplify tracking."
        ),
        severity=Severity.INFO,
        section=Section.INTEGRATIONS,
    )


@annotation_rules.rule("cookie-consent-compliance")
def cookie_consent_compliance(data: ScanResult) -> Annotation | None:
    if data.detected_integrations is None:
        return None
    tool = next(
        (i for i in data.detected_integrations.integrations if i.category == IntegrationCategory.COOKIE_CONSENT),
        None,
    )
    if tool is None:
        return None

    return Annotation(
        title=f"{tool.name} cookie consent detected",
        body=(
            "GDPR/CCPA compliance configuration will need reimplementation. Export current consent "
            "categories and banner settings before migration."
        ),
        severity=Severity.WARNING,
        section=Section.INTEGRATIONS,
    )


def generate_annotations(data: ScanResult, registry: RuleRegistry[ScanResult, Annotation] = annotation_rules) -> list[Annotation]:
    return RuleEvaluator(registry).evaluate(data)
