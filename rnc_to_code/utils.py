"""
Utility functions for turning OOXML schema names into Python identifiers.
"""

import keyword
import re

# Boundaries inside camelCase words: "colId" -> "col_Id", "RGBColor" -> "RGB_Color"
_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")
_NON_IDENTIFIER = re.compile(r"[^0-9A-Za-z_]")

# Kind tags used by ECMA-376 definition names
KIND_TAGS = ("CT_", "ST_", "EG_", "AG_")


def _split_parts(text: str) -> list[str]:
    """Split on underscores, hyphens and dots, dropping empty parts."""
    return [part for part in re.split(r"[_\-.]", text) if part]


def to_pascal_case(text: str) -> str:
    """Convert a schema name to PascalCase, keeping the casing inside each part.

    Examples:
        "CT_Worksheet" -> "CTWorksheet"
        "worksheet" -> "Worksheet"
        "RGB_color" -> "RGBColor"

    Args:
        text: Name with underscore, hyphen or dot separated parts

    Returns:
        PascalCase string
    """
    return "".join(part[0].upper() + part[1:] for part in _split_parts(text))


def strip_kind_tag(name: str) -> str:
    """Drop a leading CT_/ST_/EG_/AG_ tag from a spec name."""
    for tag in KIND_TAGS:
        if name.startswith(tag) and len(name) > len(tag):
            return name[len(tag) :]
    return name


def default_type_name(spec_name: str) -> str:
    """Default Python class name for a spec name: "CT_Worksheet" -> "Worksheet"."""
    return to_pascal_case(strip_kind_tag(spec_name))


def to_snake_case(text: str) -> str:
    """Convert camelCase or PascalCase to snake_case.

    Examples:
        "colId" -> "col_id"
        "rFonts" -> "r_fonts"
        "RGBColor" -> "rgb_color"
    """
    text = _ACRONYM_WORD.sub(r"\1_\2", text)
    text = _LOWER_UPPER.sub(r"\1_\2", text)
    text = _NON_IDENTIFIER.sub("_", text)
    return re.sub(r"_+", "_", text).strip("_").lower()


def to_upper_snake_case(text: str) -> str:
    """Convert an enumeration value to an UPPER_SNAKE member name."""
    return to_snake_case(text).upper()


def escape_keyword(name: str) -> str:
    """Append an underscore to names that collide with Python keywords."""
    if keyword.iskeyword(name):
        return f"{name}_"
    return name


def field_identifier(xml_name: str) -> str:
    """Default Python attribute name for an XML local name."""
    name = to_snake_case(xml_name) or "field"
    if name[0].isdigit():
        name = f"_{name}"
    return escape_keyword(name)


def enum_member_identifier(value: str) -> str:
    """Default enum member name for a literal value.

    Empty values become ``EMPTY`` and values starting with a digit get a
    leading underscore.
    """
    name = to_upper_snake_case(value)
    if not name:
        return "EMPTY"
    if name[0].isdigit():
        name = f"_{name}".rstrip("_")
    return name


def unique_name(base: str, taken: set[str]) -> str:
    """Return ``base`` or ``base2``, ``base3``... whichever is not taken yet."""
    if base not in taken:
        return base
    index = 2
    while f"{base}{index}" in taken:
        index += 1
    return f"{base}{index}"
