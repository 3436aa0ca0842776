from migration_scanner.engines.base import ComplexityLevel
from migration_scanner.engines.complexity.engine import ContentSampleInput, analyze_content_complexity
from migration_scanner.core.signatures import signature


def sample(html, custom=False):
    return ContentSampleInput(content_html=html, has_custom_fields=custom)


class TestAnalyzeContentComplexity:

    def test_empty_input_has_no_placeholder_signal(self):
        result = analyze_content_complexity([])
        assert result.level == ComplexityLevel.SIMPLE
        assert result.signals == []
        assert result.builder is None

    def test_plain_content_is_standard(self):
        result = analyze_content_complexity([sample("<p>Just words.</p>")])
        assert result.level == ComplexityLevel.SIMPLE
        assert result.signals == ["Standard content"]

    def test_builder_dominates_moderate_signals(self):
        html = '<!-- wp:acf/hero /--><div class="elementor-section elementor-top-section"></div>'
        result = analyze_content_complexity([sample(html)])
        assert result.level == ComplexityLevel.COMPLEX
        assert result.builder == "Elementor"
        assert "ACF Blocks" in result.signals

    def test_first_builder_in_table_order_wins(self):
        html = '<div class="et_pb_section"></div><div class="vc_row wpb_row"></div>'
        result = analyze_content_complexity([sample(html)])
        assert result.builder == "WPBakery"
        assert "Divi Builder" not in result.signals

    def test_moderate_signals(self):
        result = analyze_content_complexity([
            sample("<!-- wp:group --><div></div><!-- /wp:group -->"),
            sample('[gallery ids="1,2,3"]'),
        ])
        assert result.level == ComplexityLevel.MODERATE
        assert result.signals == ["Advanced Gutenberg layout", "Shortcodes"]

    def test_custom_fields_alone_are_moderate(self):
        result = analyze_content_complexity([sample("<p>x</p>", custom=True)])
        assert result.level == ComplexityLevel.MODERATE
        assert result.signals == ["Custom fields"]

    def test_substitute_tables(self):
        builders = [signature("Custom Builder", contains=["cb-row"])]
        result = analyze_content_complexity([sample('<div class="cb-row">')], builders=builders, moderate=[])
        assert result.builder == "Custom Builder"

    def test_is_pure(self):
        items = [sample('<div class="fl-row"></div>', custom=True)]
        assert analyze_content_complexity(items) == analyze_content_complexity(items)
