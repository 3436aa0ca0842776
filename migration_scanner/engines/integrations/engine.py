"""
Third-party integration detection from homepage HTML.

Script hosts, embed iframes and vendor CDNs. Pure and synchronous; the
homepage fetch lives in the homepage engine.
"""

from __future__ import annotations

from typing import Sequence

from migration_scanner.core.signatures import CategoryOrder, Signature, signature
from migration_scanner.engines.base import DetectedIntegration, IntegrationCategory, IntegrationScanResult

Cat = IntegrationCategory

INTEGRATION_SIGNATURES: tuple[Signature, ...] = (
    # Analytics
    signature("Google Analytics", slug="google-analytics", category=Cat.ANALYTICS,
              contains=["google-analytics.com/analytics.js", "googletagmanager.com/gtag/js"]),
    signature("Facebook Pixel", slug="facebook-pixel", category=Cat.ANALYTICS,
              contains=["connect.facebook.net", "fbevents.js"], logic="AND"),
    signature("Segment", slug="segment", category=Cat.ANALYTICS,
              contains=["cdn.segment.com/analytics.js"]),
    signature("Mixpanel", slug="mixpanel", category=Cat.ANALYTICS,
              contains=["cdn.mxpnl.com", "mixpanel.com/track"]),
    # Tag manager
    signature("Google Tag Manager", slug="google-tag-manager", category=Cat.TAG_MANAGER,
              contains=["googletagmanager.com/gtm.js"]),
    # Heatmaps
    signature("Hotjar", slug="hotjar", category=Cat.HEATMAP, contains=["static.hotjar.com"]),
    signature("Microsoft Clarity", slug="microsoft-clarity", category=Cat.HEATMAP, contains=["clarity.ms/tag"]),
    signature("VWO", slug="vwo", category=Cat.HEATMAP, contains=["dev.visualwebsiteoptimizer.com"]),
    # Chat
    signature("Intercom", slug="intercom", category=Cat.CHAT,
              contains=["widget.intercom.io", "js.intercomcdn.com"]),
    signature("Drift", slug="drift", category=Cat.CHAT, contains=["js.driftt.com"]),
    signature("Crisp", slug="crisp", category=Cat.CHAT, contains=["client.crisp.chat"]),
    signature("Zendesk", slug="zendesk", category=Cat.CHAT, contains=["static.zdassets.com", "zopim.com"]),
    signature("LiveChat", slug="livechat", category=Cat.CHAT, contains=["cdn.livechatinc.com"]),
    signature("Tidio", slug="tidio", category=Cat.CHAT, contains=["code.tidio.co"]),
    signature("Freshdesk", slug="freshdesk", category=Cat.CHAT, contains=["wchat.freshchat.com"]),
    # Marketing
    signature("HubSpot", slug="hubspot", category=Cat.MARKETING,
              contains=["js.hs-scripts.com", "js.hsforms.net"]),
    signature("Mailchimp", slug="mailchimp", category=Cat.MARKETING,
              contains=["chimpstatic.com", "list-manage.com"]),
    signature("ConvertKit", slug="convertkit", category=Cat.MARKETING, contains=["convertkit.com"]),
    # Form embeds
    signature("Typeform", slug="typeform", category=Cat.FORM_EMBED, contains=["embed.typeform.com"]),
    # Scheduling
    signature("Calendly", slug="calendly", category=Cat.SCHEDULING,
              contains=["assets.calendly.com", "calendly.com/"]),
    # Cookie consent
    signature("CookieBot", slug="cookiebot", category=Cat.COOKIE_CONSENT, contains=["consent.cookiebot.com"]),
    signature("CookieYes", slug="cookieyes", category=Cat.COOKIE_CONSENT, contains=["cdn-cookieyes.com"]),
    signature("OneTrust", slug="onetrust", category=Cat.COOKIE_CONSENT,
              contains=["cdn.cookielaw.org", "optanon.blob.core.windows.net"]),
    signature("Complianz", slug="complianz", category=Cat.COOKIE_CONSENT,
              contains=["complianz-gdpr"], regex=[r"cmplz-"]),
    signature("Termly", slug="termly", category=Cat.COOKIE_CONSENT, contains=["app.termly.io"]),
)

INTEGRATION_CATEGORY_ORDER = CategoryOrder([
    "analytics", "tag-manager", "heatmap", "chat",
    "marketing", "form-embed", "scheduling", "cookie-consent", "other",
])


def parse_integrations(
    html: str,
    signatures: Sequence[Signature] = INTEGRATION_SIGNATURES,
) -> IntegrationScanResult:
    found: dict[str, DetectedIntegration] = {}
    for sig in signatures:
        if sig.slug not in found and sig.matches(html):
            found[sig.slug] = DetectedIntegration(slug=sig.slug, name=sig.name, category=sig.category)

    integrations = INTEGRATION_CATEGORY_ORDER.sort(found.values())
    return IntegrationScanResult(integrations=integrations, total_detected=len(integrations))
