"""CLI tests using click's CliRunner; the scanner itself is replaced."""

import json

import pytest
import structlog
from click.testing import CliRunner

from migration_scanner import cli
from migration_scanner.engines.base import (
    ContentSample,
    ContentType,
    DetectedPlugin,
    PluginCategory,
    PluginScanResult,
    ScanResult,
    TaxonomyRef,
    UrlPattern,
    UrlStructure,
)

RESULT = ScanResult(
    url="https://example.com",
    scanned_at="2024-01-01T00:00:00Z",
    api_available=True,
    content_types=[
        ContentType(
            name="Posts",
            slug="post",
            count=12,
            samples=[ContentSample(title="Hello World")],
            taxonomies=[TaxonomyRef(name="Categories", slug="category", count=4)],
        ),
    ],
    url_structure=UrlStructure(
        total_indexed_urls=12,
        patterns=[UrlPattern(pattern="/blog/{slug}/", example="/blog/hello-world/", count=12)],
    ),
    detected_plugins=PluginScanResult(plugins=[
        DetectedPlugin(slug="wordpress-seo", name="Yoast SEO", category=PluginCategory.SEO),
    ], total_detected=1),
    errors=["Could not fetch Legacy: HTTP 404"],
)


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_scan(monkeypatch):
    seen = []

    async def scan(url, client=None):
        seen.append(url)
        return RESULT

    monkeypatch.setattr(cli, "scan", scan)
    return seen


class TestFormatting:

    def test_pad_dots(self):
        assert cli.pad_dots("Posts", "12 items", width=20) == "Posts ....... 12 items"
        assert cli.pad_dots("A very long content type name", "1 items", width=10) == "A very long content type name .. 1 items"

    def test_report_sections(self):
        report = cli.format_report(RESULT)
        assert report.startswith("✓ WordPress REST API available")
        assert "Posts" in report and "12 items" in report
        assert "  → Categories (4)" in report
        assert '  Samples: "Hello World"' in report
        assert "1 content type | 1 taxonomy | 12 total items" in report
        assert "Total indexed URLs: 12" in report
        assert "  SEO: Yoast SEO" in report
        assert "1 plugin detected" in report
        assert "  ⚠ Could not fetch Legacy: HTTP 404" in report

    def test_fallback_banner_and_estimates(self):
        fallback = RESULT.model_copy(update={
            "api_available": False,
            "content_types": [ContentType(name="Blog", slug="blog", count=3, is_estimate=True)],
        })
        report = cli.format_report(fallback)
        assert report.startswith("✗ REST API not available")
        assert "~3 items (estimated)" in report


class TestCommand:

    def test_prints_report_with_annotations_and_scope(self, fake_scan):
        result = CliRunner().invoke(cli.main, ["example.com/"])

        assert result.exit_code == 0
        assert fake_scan == ["https://example.com"]
        assert "Content Structure Map" in result.output
        assert "Dead content types detected" in result.output
        assert "Migration Scope" in result.output

    def test_json_output(self, fake_scan):
        result = CliRunner().invoke(cli.main, ["example.com", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["apiAvailable"] is True
        assert payload["contentTypes"][0]["isEstimate"] is False

    def test_rejected_url_exits_2(self, fake_scan):
        result = CliRunner().invoke(cli.main, ["http://10.0.0.5"])
        assert result.exit_code == 2
        assert fake_scan == []

    def test_scan_defect_exits_1(self, monkeypatch):
        async def broken(url, client=None):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli, "scan", broken)
        result = CliRunner().invoke(cli.main, ["example.com"])
        assert result.exit_code == 1
