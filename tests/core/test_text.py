from migration_scanner.core.text import decode_html_entities, pluralize, title_case, to_error_message


class TestTitleCase:

    def test_hyphens_and_underscores_become_spaces(self):
        assert title_case("case-studies") == "Case Studies"
        assert title_case("my_plugin") == "My Plugin"

    def test_synthetic_group_name(self):
        assert title_case("(pages)") == "(Pages)"


class TestTextHelpers:

    def test_decode_entities(self):
        assert decode_html_entities("Tom &amp; Jerry&#8217;s") == "Tom & Jerry’s"

    def test_error_message_falls_back_to_class_name(self):
        assert to_error_message(ValueError("bad")) == "bad"
        assert to_error_message(TimeoutError()) == "TimeoutError"

    def test_pluralize(self):
        assert pluralize(1, "type") == "type"
        assert pluralize(2, "type") == "types"
        assert pluralize(0, "taxonomy", "taxonomies") == "taxonomies"
