import pytest

from baml_to_code.utils import safe_identifier, to_snake_case


class TestToSnakeCase:
    """Canonical name conversion"""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("firstName", "first_name"),
            ("LastName", "last_name"),
            ("UPPER_CASE", "upper_case"),
            ("HTTPServer", "http_server"),
            ("TestFunction", "test_function"),
            ("ExtractTasks", "extract_tasks"),
            ("HighPriority", "high_priority"),
            ("MediumPriority", "medium_priority"),
            ("mixedCase", "mixed_case"),
            ("already_snake", "already_snake"),
            ("kebab-case", "kebab_case"),
            ("Item2Name", "item2_name"),
            ("", ""),
        ],
    )
    def test_conversion(self, text, expected):
        assert to_snake_case(text) == expected

    def test_depends_only_on_input(self):
        """The same input always gives the same name"""
        assert to_snake_case("GetUserProfile") == to_snake_case("GetUserProfile") == "get_user_profile"


class TestSafeIdentifier:
    """Making canonical names usable as Python identifiers"""

    def test_plain_name_unchanged(self):
        assert safe_identifier("due_date") == "due_date"

    def test_keyword_gets_trailing_underscore(self):
        assert safe_identifier("class") == "class_"
        assert safe_identifier("from") == "from_"

    def test_soft_keywords_are_valid_field_names(self):
        assert safe_identifier("type") == "type"
        assert safe_identifier("match") == "match"

    def test_leading_digit_gets_prefix(self):
        assert safe_identifier("2nd") == "field_2nd"
        assert safe_identifier("1", prefix="value_") == "value_1"

    def test_invalid_characters_replaced(self):
        assert safe_identifier("with space") == "with_space"
        assert safe_identifier("a.b") == "a_b"

    def test_reserved_name_gets_trailing_underscore(self):
        assert safe_identifier("dataclasses", reserved={"dataclasses"}) == "dataclasses_"
        assert safe_identifier("dataclasses") == "dataclasses"
