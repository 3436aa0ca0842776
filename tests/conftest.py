"""
Shared fixtures.

Network access is replaced by httpx.MockTransport: a route table maps
"METHOD scheme://host/path[?query]" to a (status, body[, headers]) tuple,
a callable taking the request, or an exception to raise.
"""

from typing import Any, Callable

import httpx
import pytest

from migration_scanner.core.http import create_client


def _route_keys(request: httpx.Request) -> tuple[str, str]:
    bare = f"{request.method} {request.url.scheme}://{request.url.host}{request.url.path}"
    query = request.url.query.decode() if request.url.query else ""
    return (f"{bare}?{query}" if query else bare), bare


def build_transport(routes: dict[str, Any], calls: list[str] | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        full, bare = _route_keys(request)
        if calls is not None:
            calls.append(full)

        spec = routes.get(full, routes.get(bare))
        if spec is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(spec, Exception):
            raise spec
        if callable(spec):
            return spec(request)

        status_code, body, *rest = spec
        headers = rest[0] if rest else {}
        if isinstance(body, (dict, list)):
            return httpx.Response(status_code, json=body, headers=headers)
        return httpx.Response(status_code, text=body, headers=headers)

    return httpx.MockTransport(handler)


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Factory: make_client(routes, calls=None) -> AsyncClient backed by the route table."""
    def factory(routes: dict[str, Any], calls: list[str] | None = None) -> httpx.AsyncClient:
        return create_client(transport=build_transport(routes, calls))
    return factory
