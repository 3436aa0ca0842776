"""CLI entry point: wp-migration-scan.

    wp-migration-scan example.com            # plain-text report
    wp-migration-scan example.com --json     # ScanResult JSON (camelCase keys)
"""

from __future__ import annotations

import asyncio
import json
import sys

import click
import structlog

from migration_scanner.core.exceptions import InvalidTargetError
from migration_scanner.core.logging import configure_logging
from migration_scanner.core.text import pluralize, to_error_message
from migration_scanner.engines.annotations.engine import generate_annotations
from migration_scanner.engines.base import Annotation, MigrationScope, ScanResult
from migration_scanner.engines.scanner.engine import prepare_target, scan
from migration_scanner.engines.scope.engine import generate_migration_scope

logger = structlog.get_logger(__name__)

RULE_WIDTH = 45

PLUGIN_CATEGORY_LABELS = {
    "page-builder": "Page Builders ★",
    "seo": "SEO",
    "forms": "Forms",
    "ecommerce": "E-Commerce",
    "multilingual": "Multilingual",
    "cache": "Cache / Performance",
    "analytics": "Analytics",
    "security": "Security",
    "other": "Other",
}

INTEGRATION_CATEGORY_LABELS = {
    "analytics": "Analytics",
    "tag-manager": "Tag Management",
    "heatmap": "Heatmaps / Testing",
    "chat": "Chat / Support",
    "marketing": "Marketing",
    "form-embed": "Form Embeds",
    "scheduling": "Scheduling",
    "cookie-consent": "Cookie Consent",
    "other": "Other",
}

SEVERITY_MARKERS = {"info": "ℹ", "warning": "⚠", "critical": "✖"}


def pad_dots(label: str, count: str, width: int = 40) -> str:
    """``Posts ........ 12 items`` with at least two dots."""
    dots = "." * max(2, width - len(label) - len(count))
    return f"{label} {dots} {count}"


def _heading(lines: list[str], title: str) -> None:
    lines.append("")
    lines.append(title)
    lines.append("═" * RULE_WIDTH)
    lines.append("")


def _grouped(items, labels: dict[str, str]) -> list[str]:
    groups: dict[str, list[str]] = {}
    for item in items:
        groups.setdefault(item.category.value, []).append(item.name)
    return [f"  {labels.get(cat, cat)}: {', '.join(names)}" for cat, names in groups.items()]


def format_report(
    result: ScanResult,
    annotations: list[Annotation] | None = None,
    scope: MigrationScope | None = None,
) -> str:
    lines: list[str] = []

    if result.api_available:
        lines.append("✓ WordPress REST API available")
    else:
        lines.append("✗ REST API not available, using sitemap/RSS fallback")

    _heading(lines, "Content Structure Map")

    total_items = 0
    taxonomy_slugs: set[str] = set()
    for ct in result.content_types:
        count = f"~{ct.count} items (estimated)" if ct.is_estimate else f"{ct.count} items"
        lines.append(pad_dots(ct.name, count))

        if ct.complexity is not None:
            builder = f", {ct.complexity.builder}" if ct.complexity.builder else ""
            lines.append(f"  Complexity: {ct.complexity.level.value}{builder}")

        if ct.taxonomies:
            taxonomy_slugs.update(t.slug for t in ct.taxonomies)
            lines.append("  → " + " | ".join(f"{t.name} ({t.count})" for t in ct.taxonomies))

        if ct.samples:
            lines.append("  Samples: " + ", ".join(f'"{s.title}"' for s in ct.samples))

        lines.append("")
        total_items += ct.count

    lines.append("─" * RULE_WIDTH)
    type_count = len(result.content_types)
    lines.append(
        f"{type_count} content {pluralize(type_count, 'type')} | "
        f"{len(taxonomy_slugs)} {pluralize(len(taxonomy_slugs), 'taxonomy', 'taxonomies')} | "
        f"{total_items} total items"
    )

    structure = result.url_structure
    if structure is not None:
        _heading(lines, "URL Structure")
        lines.append(f"Total indexed URLs: {structure.total_indexed_urls}")
        lines.append("")
        if structure.patterns:
            lines.append("Patterns:")
            for p in structure.patterns:
                lines.append(f"  {pad_dots(p.pattern, f'{p.count} URLs')}")
                lines.append(f"    e.g. {p.example}")
        if structure.multilingual is not None:
            lines.append("")
            lines.append(
                f"Multilingual: {structure.multilingual.type.value} "
                f"({', '.join(structure.multilingual.languages)})"
            )
        lines.append("")
        lines.append("─" * RULE_WIDTH)

    plugins = result.detected_plugins
    if plugins is not None and plugins.plugins:
        _heading(lines, "Detected Plugins")
        lines.extend(_grouped(plugins.plugins, PLUGIN_CATEGORY_LABELS))
        lines.append("")
        lines.append("─" * RULE_WIDTH)
        lines.append(f"{plugins.total_detected} {pluralize(plugins.total_detected, 'plugin')} detected")

    integrations = result.detected_integrations
    if integrations is not None and integrations.integrations:
        _heading(lines, "Detected Integrations")
        lines.extend(_grouped(integrations.integrations, INTEGRATION_CATEGORY_LABELS))
        lines.append("")
        lines.append("─" * RULE_WIDTH)
        lines.append(
            f"{integrations.total_detected} {pluralize(integrations.total_detected, 'integration')} detected"
        )

    if annotations:
        _heading(lines, "Notes")
        for a in annotations:
            lines.append(f"{SEVERITY_MARKERS.get(a.severity.value, '•')} [{a.section.value}] {a.title}")
            lines.append(f"    {a.body}")

    if scope is not None:
        _heading(lines, "Migration Scope")
        lines.append(scope.headline)
        for c in scope.considerations:
            lines.append("")
            lines.append(f"{c.icon} {c.title}")
            lines.append(f"    {c.body}")

    if result.errors:
        lines.append("")
        lines.append("Warnings:")
        for error in result.errors:
            lines.append(f"  ⚠ {error}")

    return "\n".join(lines)


@click.command()
@click.argument("url")
@click.option("--json", "as_json", is_flag=True, help="Print the raw scan result as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr")
def main(url: str, as_json: bool, verbose: bool) -> None:
    """Scan a WordPress site and report what a migration involves."""
    configure_logging(stream=sys.stderr, level="DEBUG" if verbose else "ERROR")

    try:
        target = prepare_target(url)
    except InvalidTargetError as e:
        click.echo(f"Invalid URL: {e}", err=True)
        sys.exit(2)

    if not as_json:
        click.echo(f"\nScanning {target} ...\n")

    try:
        result = asyncio.run(scan(target))
    except Exception as e:
        logger.error("Scan failed", url=target, error=to_error_message(e), exc_info=True)
        click.echo(f"Scan failed: {to_error_message(e)}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_json_dict(), indent=2, ensure_ascii=False))
        return

    click.echo(format_report(result, generate_annotations(result), generate_migration_scope(result)))


if __name__ == "__main__":
    main()
