"""Tests for the shared HTTP primitives."""

import httpx
import pytest

from migration_scanner.core.http import (
    create_client,
    fetch_json,
    fetch_text,
    fetch_xml,
    is_url_allowed,
    origin_of,
    path_segments,
    request_timeout,
)


# ─────────────────────────────────────────────
# SSRF filter
# ─────────────────────────────────────────────

class TestIsUrlAllowed:

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "http://blog.example.co.uk/path/",
        "https://172.32.0.1",
    ])
    def test_public_hosts_allowed(self, url):
        assert is_url_allowed(url)

    @pytest.mark.parametrize("url", [
        "http://10.0.0.1",
        "http://172.16.5.4",
        "http://172.31.255.255",
        "http://192.168.1.1",
        "http://127.0.0.1:8000",
        "http://0.0.0.0",
        "http://169.254.169.254/latest/meta-data",
        "http://localhost:3000",
        "http://[::1]/",
        "https://db.internal",
        "https://printer.local",
        "https://intranet",
    ])
    def test_private_and_internal_hosts_rejected(self, url):
        assert not is_url_allowed(url)

    def test_non_http_scheme_rejected(self):
        assert not is_url_allowed("ftp://example.com")
        assert not is_url_allowed("file:///etc/passwd")


class TestUrlHelpers:

    def test_origin_drops_path_and_default_port(self):
        assert origin_of("https://example.com:443/blog/post/?x=1") == "https://example.com"

    def test_origin_keeps_custom_port(self):
        assert origin_of("http://example.com:8080/a") == "http://example.com:8080"

    def test_origin_of_garbage_is_none(self):
        assert origin_of("not a url") is None

    def test_path_segments_ignore_empty_parts(self):
        assert path_segments("https://example.com//blog/my-post/") == ["blog", "my-post"]
        assert path_segments("https://example.com/") == []


# ─────────────────────────────────────────────
# Fetch helpers
# ─────────────────────────────────────────────

class TestFetchHelpers:

    @pytest.mark.asyncio
    async def test_fetch_xml_returns_markup(self, make_client):
        client = make_client({"GET https://example.com/sitemap.xml": (200, "<urlset></urlset>")})
        assert await fetch_xml(client, "https://example.com/sitemap.xml") == "<urlset></urlset>"

    @pytest.mark.asyncio
    async def test_fetch_xml_non_2xx_is_miss(self, make_client):
        client = make_client({"GET https://example.com/sitemap.xml": (500, "<error/>")})
        assert await fetch_xml(client, "https://example.com/sitemap.xml") is None

    @pytest.mark.asyncio
    async def test_fetch_xml_body_without_markup_is_miss(self, make_client):
        client = make_client({"GET https://example.com/sitemap.xml": (200, "just text")})
        assert await fetch_xml(client, "https://example.com/sitemap.xml") is None

    @pytest.mark.asyncio
    async def test_fetch_xml_swallows_transport_errors(self, make_client):
        client = make_client({"GET https://example.com/sitemap.xml": httpx.ConnectTimeout("slow")})
        assert await fetch_xml(client, "https://example.com/sitemap.xml") is None

    @pytest.mark.asyncio
    async def test_fetch_json_returns_response_on_success(self, make_client):
        client = make_client({"GET https://example.com/wp-json/wp/v2/types": (200, {"post": {}})})
        response = await fetch_json(client, "https://example.com/wp-json/wp/v2/types")
        assert response is not None
        assert response.json() == {"post": {}}

    @pytest.mark.asyncio
    async def test_fetch_json_failure_is_none(self, make_client):
        client = make_client({"GET https://example.com/wp-json/wp/v2/types": httpx.ConnectError("refused")})
        assert await fetch_json(client, "https://example.com/wp-json/wp/v2/types") is None

    @pytest.mark.asyncio
    async def test_fetch_text_propagates_transport_errors(self, make_client):
        client = make_client({"GET https://example.com/": httpx.ConnectError("refused")})
        with pytest.raises(httpx.ConnectError):
            await fetch_text(client, "https://example.com/")

    @pytest.mark.asyncio
    async def test_requests_carry_scanner_user_agent(self, make_client):
        seen = {}

        def capture(request):
            seen["ua"] = request.headers.get("user-agent")
            return httpx.Response(200, text="<rss/>")

        client = make_client({"GET https://example.com/feed/": capture})
        await fetch_xml(client, "https://example.com/feed/")
        assert seen["ua"] == "WP-Migration-Scanner/0.1"


# ─────────────────────────────────────────────
# Timeouts
# ─────────────────────────────────────────────

class TestTimeouts:

    def test_request_timeout_leaves_pool_wait_unbounded(self):
        timeout = request_timeout(10)
        assert timeout.connect == timeout.read == timeout.write == 10
        assert timeout.pool is None

    def test_client_default_timeout(self):
        assert create_client().timeout.pool is None

    @pytest.mark.asyncio
    async def test_helpers_send_unbounded_pool_timeout(self, make_client):
        seen = []

        def record(request):
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, text="<urlset></urlset>")

        client = make_client({"GET https://example.com/sitemap.xml": record})
        await fetch_xml(client, "https://example.com/sitemap.xml", timeout=3)
        assert seen == [{"connect": 3, "read": 3, "write": 3, "pool": None}]
