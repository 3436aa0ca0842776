"""
HTTP primitives shared by every engine.

All helpers take an injected httpx.AsyncClient so the whole pipeline can run
against httpx.MockTransport in tests. Timeouts are always explicit; nothing
retries. A miss (non-2xx, timeout, connection error) is reported as None so
callers can move on to the next candidate path.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

import httpx
import structlog

from migration_scanner.core.config import get_settings

logger = structlog.get_logger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}

_PRIVATE_HOST = re.compile(r"^(10\.|172\.(1[6-9]|2\d|3[01])\.|192\.168\.|127\.|0\.|169\.254\.)")

# Raised by httpx for anything that prevents a response from arriving
FETCH_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


def default_headers() -> dict[str, str]:
    return {"User-Agent": get_settings().SCANNER_USER_AGENT}


def request_timeout(seconds: float) -> httpx.Timeout:
    """Bound connect, read and write; waiting for a pooled connection is unbounded."""
    return httpx.Timeout(seconds, pool=None)


def create_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Build the shared client used for one scan."""
    settings = get_settings()
    return httpx.AsyncClient(
        headers=default_headers(),
        timeout=request_timeout(settings.SCANNER_REQUEST_TIMEOUT),
        limits=httpx.Limits(
            max_connections=settings.SCANNER_MAX_CONNECTIONS,
            max_keepalive_connections=settings.SCANNER_MAX_CONNECTIONS,
        ),
        transport=transport,
    )


# ─────────────────────────────────────────────
# URL helpers
# ─────────────────────────────────────────────

def is_url_allowed(url: str) -> bool:
    """Basic SSRF filter: public, dotted hostnames over http(s) only."""
    try:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
    except ValueError:
        return False

    if parsed.scheme not in ("http", "https") or not host:
        return False
    if _PRIVATE_HOST.match(host):
        return False
    if host in ("localhost", "::1") or host.endswith(".internal") or host.endswith(".local"):
        return False
    if "." not in host:
        return False
    return True


def origin_of(url: str) -> str | None:
    """``scheme://host[:port]`` with default ports dropped, or None if unparsable."""
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if not scheme or not host:
        return None
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def path_segments(url: str) -> list[str]:
    return [part for part in urlparse(url).path.split("/") if part]


# ─────────────────────────────────────────────
# Fetch helpers
# ─────────────────────────────────────────────

async def fetch_xml(client: httpx.AsyncClient, url: str, timeout: float | None = None) -> str | None:
    """GET an XML document. Anything that does not look like markup counts as a miss."""
    timeout = timeout or get_settings().SCANNER_REQUEST_TIMEOUT
    try:
        response = await client.get(url, timeout=request_timeout(timeout))
    except FETCH_ERRORS as e:
        logger.debug("XML fetch failed", url=url, error=str(e))
        return None

    if not response.is_success:
        logger.debug("XML fetch miss", url=url, status=response.status_code)
        return None

    text = response.text
    if "<" not in text:
        return None
    return text


async def fetch_json(client: httpx.AsyncClient, url: str, timeout: float | None = None) -> httpx.Response | None:
    """GET a JSON endpoint; returns the response only when it is 2xx."""
    timeout = timeout or get_settings().SCANNER_REQUEST_TIMEOUT
    try:
        response = await client.get(url, timeout=request_timeout(timeout))
    except FETCH_ERRORS as e:
        logger.debug("JSON fetch failed", url=url, error=str(e))
        return None

    if not response.is_success:
        logger.debug("JSON fetch miss", url=url, status=response.status_code)
        return None
    return response


async def head(
    client: httpx.AsyncClient,
    url: str,
    timeout: float,
    follow_redirects: bool = False,
) -> httpx.Response:
    """HEAD request; transport errors propagate to the caller."""
    return await client.head(url, timeout=request_timeout(timeout), follow_redirects=follow_redirects)


async def fetch_text(client: httpx.AsyncClient, url: str, timeout: float | None = None) -> httpx.Response:
    """GET a page; transport errors propagate, status is left to the caller."""
    timeout = timeout or get_settings().SCANNER_REQUEST_TIMEOUT
    return await client.get(url, timeout=request_timeout(timeout), follow_redirects=True)
