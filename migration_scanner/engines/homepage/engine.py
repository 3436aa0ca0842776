"""
Homepage engine: one GET, two detectors.

The homepage HTML is fetched once per scan and fed to both the plugin and the
integration parsers, so a single failure nulls both results.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from migration_scanner.core.config import get_settings
from migration_scanner.core.exceptions import HomepageFetchError
from migration_scanner.core.http import fetch_text
from migration_scanner.engines.base import IntegrationScanResult, PluginScanResult, ScanEngine
from migration_scanner.engines.integrations.engine import parse_integrations
from migration_scanner.engines.plugins.engine import parse_plugin_signatures


@dataclass(frozen=True)
class HomepageScan:
    plugins: PluginScanResult | None = None
    integrations: IntegrationScanResult | None = None


class HomepageEngine(ScanEngine[HomepageScan]):

    ENGINE_NAME = "homepage"
    ERROR_LABEL = "Plugin detection error"

    def __init__(self, client: httpx.AsyncClient, timeout: float | None = None):
        super().__init__(client)
        self.timeout = timeout or get_settings().SCANNER_HOMEPAGE_TIMEOUT

    def fallback(self) -> HomepageScan:
        return HomepageScan()

    async def run(self, base_url: str) -> HomepageScan:
        response = await fetch_text(self.client, base_url, timeout=self.timeout)
        if not response.is_success:
            raise HomepageFetchError(f"HTTP {response.status_code} fetching homepage")

        html = response.text
        plugins = parse_plugin_signatures(html)
        integrations = parse_integrations(html)

        self.logger.debug(
            "Homepage parsed",
            base_url=base_url,
            bytes=len(html),
            plugins=plugins.total_detected,
            integrations=integrations.total_detected,
        )
        return HomepageScan(plugins=plugins, integrations=integrations)
