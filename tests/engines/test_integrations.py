from migration_scanner.engines.integrations.engine import parse_integrations


class TestParseIntegrations:

    def test_detects_and_orders_by_category(self):
        html = """
        <script src="https://js.intercomcdn.com/frame.js"></script>
        <script async src="https://www.googletagmanager.com/gtm.js?id=GTM-XYZ"></script>
        <script src="https://static.hotjar.com/c/hotjar-1.js"></script>
        <script src="https://www.googletagmanager.com/gtag/js?id=G-1"></script>
        <script src="https://consent.cookiebot.com/uc.js"></script>
        """
        result = parse_integrations(html)
        assert [i.slug for i in result.integrations] == [
            "google-analytics", "google-tag-manager", "hotjar", "intercom", "cookiebot",
        ]
        assert result.total_detected == 5

    def test_intercom_reported_once(self):
        html = '<script src="https://widget.intercom.io/widget/abc"></script><script src="https://js.intercomcdn.com/x.js"></script>'
        result = parse_integrations(html)
        assert [i.slug for i in result.integrations] == ["intercom"]

    def test_facebook_pixel_needs_both_markers(self):
        assert parse_integrations('<script src="https://connect.facebook.net/en_US/sdk.js"></script>').integrations == []
        result = parse_integrations('<script src="https://connect.facebook.net/en_US/fbevents.js"></script>')
        assert [i.slug for i in result.integrations] == ["facebook-pixel"]

    def test_alphabetical_within_category(self):
        html = "cdn.mxpnl.com cdn.segment.com/analytics.js"
        assert [i.name for i in parse_integrations(html).integrations] == ["Mixpanel", "Segment"]

    def test_is_pure(self):
        html = "static.hotjar.com app.termly.io"
        assert parse_integrations(html) == parse_integrations(html)
