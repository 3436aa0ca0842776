"""
Tests for the WordPress REST API Engine and the fallback content-type builder.
Uses httpx MockTransport to avoid real network calls.
"""

import httpx
import pytest

from migration_scanner.core.exceptions import WordPressApiError
from migration_scanner.engines.base import ComplexityLevel, ContentSample
from migration_scanner.engines.rss.engine import RssItem
from migration_scanner.engines.sitemap.engine import SitemapGroup
from migration_scanner.engines.wp_api.engine import (
    WordPressApiEngine,
    build_fallback_content_types,
    has_custom_fields,
    parse_content_items,
    parse_taxonomies_response,
    parse_total_header,
    parse_types_response,
    probe_api,
    scan_via_api,
)

BASE = "https://example.com"
API = "https://example.com/wp-json/wp/v2"

TYPES = {
    "post": {"name": "Posts", "slug": "post", "rest_base": "posts", "taxonomies": ["category", "post_tag"]},
    "page": {"name": "Pages", "slug": "page", "rest_base": "pages", "taxonomies": []},
    "attachment": {"name": "Media", "slug": "attachment", "rest_base": "media", "taxonomies": []},
    "wp_block": {"name": "Patterns", "slug": "wp_block", "rest_base": "blocks", "taxonomies": []},
    "product": {"name": "Products", "slug": "product", "rest_base": "products", "taxonomies": ["product_cat"]},
}

TAXONOMIES = {
    "category": {"name": "Categories", "slug": "category", "rest_base": "categories", "types": ["post"]},
    "post_tag": {"name": "Tags", "slug": "post_tag", "rest_base": "tags", "types": ["post"]},
    "nav_menu": {"name": "Navigation Menus", "slug": "nav_menu", "rest_base": "menus", "types": ["nav_menu_item"]},
    "product_cat": {"name": "Product categories", "slug": "product_cat", "rest_base": "product_cat", "types": ["product"]},
}

POSTS = [
    {
        "title": {"rendered": "Hello &amp; Welcome"},
        "link": "https://example.com/blog/hello/",
        "content": {"rendered": '<!-- wp:columns --><div class="wp-block-columns"></div>'},
        "acf": {"subtitle": "x"},
    },
    {"title": {"rendered": ""}, "link": "https://example.com/blog/empty/", "content": {"rendered": "<p>Hi</p>"}},
]


def api_routes(**overrides):
    routes = {
        f"GET {API}/types": (200, TYPES),
        f"GET {API}/taxonomies": (200, TAXONOMIES),
        f"GET {API}/categories?per_page=1": (200, [{"name": "News"}], {"X-WP-Total": "7"}),
        f"GET {API}/tags?per_page=1": (200, [], {"X-WP-Total": "0"}),
        f"GET {API}/product_cat?per_page=1": (200, [{"name": "Shoes"}], {"X-WP-Total": "3"}),
        f"GET {API}/posts?per_page=5": (200, POSTS, {"X-WP-Total": "42"}),
        f"GET {API}/pages?per_page=5": (200, [{"title": {"rendered": "About"}}], {"X-WP-Total": "0"}),
        f"GET {API}/products?per_page=5": (404, {"code": "rest_no_route"}),
    }
    routes.update(overrides)
    return routes


# ─────────────────────────────────────────────
# Parser Tests
# ─────────────────────────────────────────────

class TestParsers:

    def test_types_filter_internal_types(self):
        slugs = [t.slug for t in parse_types_response({k: TYPES[k] for k in ("post", "page", "attachment", "wp_block")})]
        assert slugs == ["post", "page"]

    def test_taxonomies_filter_internal_taxonomies(self):
        slugs = [t.slug for t in parse_taxonomies_response(TAXONOMIES)]
        assert slugs == ["category", "post_tag", "product_cat"]

    def test_rest_base_defaults_to_slug(self):
        wp_type = parse_types_response({"book": {"name": "Books", "slug": "book"}})[0]
        assert wp_type.rest_base == "book"

    def test_total_header(self):
        assert parse_total_header("12") == 12
        assert parse_total_header(None) == 0
        assert parse_total_header("lots") == 0
        assert parse_total_header("12abc") == 12
        assert parse_total_header(" 7 ") == 7
        assert parse_total_header("-3") == 0

    def test_content_items(self):
        parsed = parse_content_items(POSTS, "42")
        assert parsed.count == 42
        assert parsed.samples == [ContentSample(title="Hello & Welcome", url="https://example.com/blog/hello/")]
        assert parsed.complexity_inputs[0].has_custom_fields
        assert not parsed.complexity_inputs[1].has_custom_fields

    def test_samples_capped(self):
        items = [{"title": {"rendered": f"Post {i}"}} for i in range(8)]
        assert len(parse_content_items(items, "8").samples) == 5

    def test_custom_fields_from_meta(self):
        assert has_custom_fields({"meta": {"price": "10"}})
        assert not has_custom_fields({"meta": {"price": ""}})
        assert not has_custom_fields({"meta": [], "acf": []})


# ─────────────────────────────────────────────
# Network Tests
# ─────────────────────────────────────────────

class TestProbeApi:

    @pytest.mark.asyncio
    async def test_available(self, make_client):
        client = make_client({"HEAD https://example.com/wp-json/": (200, "")})
        assert await probe_api(client, BASE) is True

    @pytest.mark.asyncio
    async def test_unavailable_status(self, make_client):
        client = make_client({"HEAD https://example.com/wp-json/": (403, "")})
        assert await probe_api(client, BASE) is False

    @pytest.mark.asyncio
    async def test_timeout_returns_false(self, make_client):
        client = make_client({"HEAD https://example.com/wp-json/": httpx.ReadTimeout("slow")})
        assert await probe_api(client, BASE) is False


class TestScanViaApi:

    @pytest.mark.asyncio
    async def test_builds_content_types(self, make_client):
        result = await scan_via_api(make_client(api_routes()), BASE)

        assert [ct.slug for ct in result.content_types] == ["post"]
        posts = result.content_types[0]
        assert posts.count == 42
        assert posts.is_estimate is False
        assert [t.name for t in posts.taxonomies] == ["Categories"]
        assert posts.taxonomies[0].count == 7
        assert posts.taxonomies[0].terms == ["News"]
        assert posts.complexity.level == ComplexityLevel.MODERATE
        assert "Custom fields" in posts.complexity.signals

    @pytest.mark.asyncio
    async def test_non_2xx_type_recorded_and_excluded(self, make_client):
        result = await scan_via_api(make_client(api_routes()), BASE)
        assert "Could not fetch Products: HTTP 404" in result.errors
        assert "product" not in [ct.slug for ct in result.content_types]

    @pytest.mark.asyncio
    async def test_type_transport_error_is_isolated(self, make_client):
        routes = api_routes(**{f"GET {API}/products?per_page=5": httpx.ConnectError("reset by peer")})
        result = await scan_via_api(make_client(routes), BASE)

        assert "Error fetching Products: reset by peer" in result.errors
        assert [ct.slug for ct in result.content_types] == ["post"]

    @pytest.mark.asyncio
    async def test_failed_term_count_counts_as_zero(self, make_client):
        routes = api_routes(**{f"GET {API}/categories?per_page=1": httpx.ConnectError("nope")})
        result = await scan_via_api(make_client(routes), BASE)
        assert result.content_types[0].taxonomies == []

    @pytest.mark.asyncio
    async def test_foundational_failure_raises(self, make_client):
        routes = api_routes(**{f"GET {API}/taxonomies": (500, "oops")})
        with pytest.raises(WordPressApiError, match="Failed to fetch types or taxonomies"):
            await scan_via_api(make_client(routes), BASE)

    @pytest.mark.asyncio
    async def test_engine_prefixes_foundational_failure(self, make_client):
        routes = api_routes(**{f"GET {API}/types": httpx.ConnectError("down")})
        outcome = await WordPressApiEngine(make_client(routes)).execute(BASE)

        assert outcome.value is None
        assert outcome.error.startswith("REST API probe succeeded but scan failed: ")


# ─────────────────────────────────────────────
# Fallback builder
# ─────────────────────────────────────────────

class TestBuildFallbackContentTypes:

    def test_blog_group_uses_rss_samples_and_categories(self):
        groups = [SitemapGroup(pattern="blog", urls=["https://example.com/blog/a/", "https://example.com/blog/b/"])]
        items = [
            RssItem(title="A", link="https://example.com/blog/a/", categories=["News", "Tech"]),
            RssItem(title="B", link="https://example.com/blog/b/", categories=["News", "Sports"]),
        ]
        [ct] = build_fallback_content_types(groups, items, BASE)

        assert ct.count == 2
        assert ct.is_estimate is True
        assert ct.complexity is None
        assert [s.title for s in ct.samples] == ["A", "B"]
        assert len(ct.taxonomies) == 1
        assert ct.taxonomies[0].name == "Categories"
        assert ct.taxonomies[0].count == 3
        assert ct.taxonomies[0].terms == ["News", "Tech", "Sports"]

    def test_other_groups_title_case_url_slugs(self):
        groups = [SitemapGroup(pattern="case-studies", urls=[
            f"https://example.com/case-studies/acme-corp-{i}/" for i in range(7)
        ])]
        [ct] = build_fallback_content_types(groups, [RssItem(title="Ignored", categories=["News"])], BASE)

        assert ct.name == "Case Studies"
        assert ct.slug == "case-studies"
        assert ct.count == 7
        assert ct.samples[0] == ContentSample(title="Acme Corp 0", url="https://example.com/case-studies/acme-corp-0/")
        assert len(ct.samples) == 5
        assert ct.taxonomies == []

    def test_pages_group_without_feed_falls_back_to_slugs(self):
        groups = [SitemapGroup(pattern="(pages)", urls=["https://example.com/about-us/"])]
        [ct] = build_fallback_content_types(groups, [], BASE)

        assert ct.name == "(Pages)"
        assert [s.title for s in ct.samples] == ["About Us"]
        assert ct.taxonomies == []
