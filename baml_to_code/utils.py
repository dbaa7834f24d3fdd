"""
Utility functions for the BAML to code generator.
"""

import keyword
import re
from collections.abc import Collection

# Boundary between an acronym and a following capitalized word: "HTTPServer" -> "HTTP_Server"
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")

# Boundary between a lowercase letter or digit and an uppercase letter: "firstName" -> "first_Name"
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")

_INVALID_CHARS = re.compile(r"\W")


def to_snake_case(text: str) -> str:
    """Convert PascalCase, camelCase or UPPER_SNAKE_CASE text to snake_case.

    The result depends only on the input string.

    Examples:
        "firstName" -> "first_name"
        "LastName" -> "last_name"
        "UPPER_CASE" -> "upper_case"
        "HTTPServer" -> "http_server"
        "TestFunction" -> "test_function"

    Args:
        text: The text to convert

    Returns:
        snake_case string
    """
    if not text:
        return ""
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _WORD_BOUNDARY.sub(r"\1_\2", text)
    return text.replace("-", "_").lower()


def safe_identifier(name: str, prefix: str = "field_", reserved: Collection[str] = ()) -> str:
    """Make a canonical name usable as a Python identifier.

    Keywords and ``reserved`` names get a trailing underscore ("class" -> "class_");
    other invalid characters become underscores and a leading digit gets ``prefix``.
    """
    if keyword.iskeyword(name) or name in reserved:
        return f"{name}_"
    if name.isidentifier():
        return name
    name = _INVALID_CHARS.sub("_", name)
    if not name or not name[0].isalpha() and name[0] != "_":
        name = f"{prefix}{name}"
    return name
