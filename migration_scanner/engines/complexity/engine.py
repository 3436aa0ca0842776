"""
Content Complexity Classifier

Scores one content type from its sampled items:
- complex:  a page builder left its markup in the content
- moderate: ACF blocks, layout-heavy Gutenberg blocks, shortcodes or custom fields
- simple:   none of the above
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from migration_scanner.core.signatures import Signature, all_matches, first_match, signature
from migration_scanner.engines.base import ComplexityLevel, ContentComplexity

STANDARD_CONTENT_SIGNAL = "Standard content"
CUSTOM_FIELDS_SIGNAL = "Custom fields"

# Order matters: the first builder that matches is the one reported
BUILDER_SIGNATURES: tuple[Signature, ...] = (
    signature("Elementor", contains=["elementor-kit-"], regex=[r'class="[^"]*elementor[-\s]']),
    signature("WPBakery", regex=[r'class="[^"]*vc_row', r'class="[^"]*wpb_']),
    signature("Divi Builder", regex=[r'class="[^"]*et_pb_', r'id="et-boc"']),
    signature("Beaver Builder", regex=[r'class="[^"]*fl-row', r'class="[^"]*fl-builder']),
    signature("Oxygen", regex=[r'class="[^"]*ct-section', r'class="[^"]*oxy-']),
    signature("Brizy", regex=[r'class="[^"]*brz-']),
)

MODERATE_SIGNATURES: tuple[Signature, ...] = (
    signature("ACF Blocks", contains=["<!-- wp:acf/"]),
    signature("Advanced Gutenberg layout", regex=[r"<!-- wp:(columns|group|cover|media-text|table)[ />]"]),
    signature("Shortcodes", regex=[r"\[[a-z_-]+[^\]]*\]"]),
)


@dataclass(frozen=True)
class ContentSampleInput:
    """Rendered HTML of one sampled item plus whether it exposes custom fields."""
    content_html: str
    has_custom_fields: bool = False


def analyze_content_complexity(
    items: Sequence[ContentSampleInput],
    builders: Sequence[Signature] = BUILDER_SIGNATURES,
    moderate: Sequence[Signature] = MODERATE_SIGNATURES,
) -> ContentComplexity:
    """Pure function - classifies content complexity from sample post data."""
    # No samples: nothing to classify, and no placeholder signal either
    if not items:
        return ContentComplexity(level=ComplexityLevel.SIMPLE, signals=[], builder=None)

    documents = [item.content_html for item in items]
    signals: list[str] = []

    builder_sig = first_match(builders, documents)
    builder = builder_sig.name if builder_sig else None
    if builder:
        signals.append(builder)

    signals.extend(sig.name for sig in all_matches(moderate, documents))

    if any(item.has_custom_fields for item in items):
        signals.append(CUSTOM_FIELDS_SIGNAL)

    if builder:
        return ContentComplexity(level=ComplexityLevel.COMPLEX, signals=signals, builder=builder)
    if signals:
        return ContentComplexity(level=ComplexityLevel.MODERATE, signals=signals, builder=None)
    return ContentComplexity(level=ComplexityLevel.SIMPLE, signals=[STANDARD_CONTENT_SIGNAL], builder=None)
