"""
Plugin Detection Engine

Two layers over the homepage HTML:
1. Asset paths: every /wp-content/plugins/<slug>/ reference, resolved against
   KNOWN_PLUGINS (unknown slugs are title-cased into the "other" category)
2. Signatures: CSS classes, HTML comments and meta tags left by plugins that
   may not expose an asset path; a signature never overrides layer 1
"""

from __future__ import annotations

import re
from typing import Mapping, Sequence

from migration_scanner.core.signatures import CategoryOrder, Signature, signature
from migration_scanner.core.text import title_case
from migration_scanner.engines.base import DetectedPlugin, PluginCategory, PluginScanResult

ASSET_PATH = re.compile(r"/wp-content/plugins/([a-z0-9_-]+)/", re.IGNORECASE)

PAGE_BUILDER = PluginCategory.PAGE_BUILDER
SEO = PluginCategory.SEO
FORMS = PluginCategory.FORMS
ECOMMERCE = PluginCategory.ECOMMERCE
MULTILINGUAL = PluginCategory.MULTILINGUAL
CACHE = PluginCategory.CACHE
ANALYTICS = PluginCategory.ANALYTICS
SECURITY = PluginCategory.SECURITY

KNOWN_PLUGINS: Mapping[str, tuple[str, PluginCategory]] = {
    # Page builders
    "elementor": ("Elementor", PAGE_BUILDER),
    "elementor-pro": ("Elementor Pro", PAGE_BUILDER),
    "js_composer": ("WPBakery Page Builder", PAGE_BUILDER),
    "beaver-builder-lite-version": ("Beaver Builder", PAGE_BUILDER),
    "bb-plugin": ("Beaver Builder Pro", PAGE_BUILDER),
    "divi-builder": ("Divi Builder", PAGE_BUILDER),
    "oxygen": ("Oxygen Builder", PAGE_BUILDER),
    "brizy": ("Brizy", PAGE_BUILDER),
    "generateblocks": ("GenerateBlocks", PAGE_BUILDER),
    "spectra": ("Spectra", PAGE_BUILDER),
    # SEO
    "wordpress-seo": ("Yoast SEO", SEO),
    "wordpress-seo-premium": ("Yoast SEO Premium", SEO),
    "all-in-one-seo-pack": ("All in One SEO", SEO),
    "seo-by-rank-math": ("Rank Math", SEO),
    "the-seo-framework": ("The SEO Framework", SEO),
    # Forms
    "contact-form-7": ("Contact Form 7", FORMS),
    "wpforms-lite": ("WPForms", FORMS),
    "wpforms": ("WPForms Pro", FORMS),
    "gravityforms": ("Gravity Forms", FORMS),
    "formidable": ("Formidable Forms", FORMS),
    "ninja-forms": ("Ninja Forms", FORMS),
    "fluentform": ("Fluent Forms", FORMS),
    # E-commerce
    "woocommerce": ("WooCommerce", ECOMMERCE),
    "easy-digital-downloads": ("Easy Digital Downloads", ECOMMERCE),
    "surecart": ("SureCart", ECOMMERCE),
    # Multilingual
    "sitepress-multilingual-cms": ("WPML", MULTILINGUAL),
    "polylang": ("Polylang", MULTILINGUAL),
    "translatepress-multilingual": ("TranslatePress", MULTILINGUAL),
    # Cache / performance
    "wp-super-cache": ("WP Super Cache", CACHE),
    "w3-total-cache": ("W3 Total Cache", CACHE),
    "litespeed-cache": ("LiteSpeed Cache", CACHE),
    "wp-fastest-cache": ("WP Fastest Cache", CACHE),
    "autoptimize": ("Autoptimize", CACHE),
    "wp-rocket": ("WP Rocket", CACHE),
    # Analytics
    "google-site-kit": ("Google Site Kit", ANALYTICS),
    "google-analytics-for-wordpress": ("MonsterInsights", ANALYTICS),
    # Security
    "wordfence": ("Wordfence", SECURITY),
    "better-wp-security": ("iThemes Security", SECURITY),
    "sucuri-scanner": ("Sucuri Security", SECURITY),
    "all-in-one-wp-security-and-firewall": ("All-In-One Security", SECURITY),
}

PLUGIN_SIGNATURES: tuple[Signature, ...] = (
    # Page builders: CSS classes
    signature("Elementor", slug="elementor", category=PAGE_BUILDER,
              regex=[r'class="[^"]*elementor[-\s]'], contains=["elementor-kit-"]),
    signature("Divi Builder", slug="divi-builder", category=PAGE_BUILDER,
              regex=[r'class="[^"]*et_pb_', r'id="et-boc"']),
    signature("WPBakery Page Builder", slug="js_composer", category=PAGE_BUILDER,
              regex=[r'class="[^"]*vc_row', r'class="[^"]*wpb_']),
    # SEO: comments and meta tags
    signature("Yoast SEO", slug="wordpress-seo", category=SEO,
              contains=["<!-- This site is optimized with the Yoast"]),
    signature("Rank Math", slug="seo-by-rank-math", category=SEO,
              regex=[r'name="rank-math"'], contains=["<!-- Rank Math"]),
    signature("All in One SEO", slug="all-in-one-seo-pack", category=SEO,
              contains=["<!-- All in One SEO"]),
    # Forms
    signature("Contact Form 7", slug="contact-form-7", category=FORMS,
              regex=[r'class="[^"]*wpcf7[-\s"]']),
    # E-commerce
    signature("WooCommerce", slug="woocommerce", category=ECOMMERCE,
              regex=[r'class="[^"]*woocommerce[-\s"]']),
    # Cache: footer comments
    signature("WP Rocket", slug="wp-rocket", category=CACHE,
              contains=["<!-- This website is like a Rocket"]),
    signature("LiteSpeed Cache", slug="litespeed-cache", category=CACHE,
              contains=["<!-- Page generated by LiteSpeed"]),
    signature("WP Super Cache", slug="wp-super-cache", category=CACHE,
              contains=["<!-- super cache"]),
    signature("W3 Total Cache", slug="w3-total-cache", category=CACHE,
              contains=["<!-- Performance optimized by W3 Total Cache"]),
    signature("WP Fastest Cache", slug="wp-fastest-cache", category=CACHE,
              contains=["<!-- WP Fastest Cache"]),
    # Multilingual
    signature("WPML", slug="sitepress-multilingual-cms", category=MULTILINGUAL,
              contains=["wpml-ls-statics-css", "sitepress-multilingual"]),
    signature("TranslatePress", slug="translatepress-multilingual", category=MULTILINGUAL,
              contains=["trp-language-switcher"]),
)

PLUGIN_CATEGORY_ORDER = CategoryOrder([
    "page-builder", "seo", "forms", "ecommerce",
    "multilingual", "cache", "analytics", "security", "other",
])


def resolve_plugin(slug: str, known: Mapping[str, tuple[str, PluginCategory]] = KNOWN_PLUGINS) -> DetectedPlugin:
    if slug in known:
        name, category = known[slug]
        return DetectedPlugin(slug=slug, name=name, category=category)
    return DetectedPlugin(slug=slug, name=title_case(slug), category=PluginCategory.OTHER)


def parse_plugin_signatures(
    html: str,
    signatures: Sequence[Signature] = PLUGIN_SIGNATURES,
    known: Mapping[str, tuple[str, PluginCategory]] = KNOWN_PLUGINS,
) -> PluginScanResult:
    """Pure parser - every plugin slug is reported once, however many patterns hit it."""
    found: dict[str, DetectedPlugin] = {}

    # Layer 1: asset paths
    for match in ASSET_PATH.finditer(html):
        slug = match.group(1).lower()
        if slug not in found:
            found[slug] = resolve_plugin(slug, known)

    # Layer 2: signatures only add new findings
    for sig in signatures:
        if sig.slug not in found and sig.matches(html):
            found[sig.slug] = DetectedPlugin(slug=sig.slug, name=sig.name, category=sig.category)

    plugins = PLUGIN_CATEGORY_ORDER.sort(found.values())
    return PluginScanResult(plugins=plugins, total_detected=len(plugins))
