import pytest

from rnc_to_code.pipeline.analyzer.name_resolver import NameResolver, spec_name
from rnc_to_code.pipeline.config import NameMappings
from rnc_to_code.pipeline.schema_ast import parse_rnc
from rnc_to_code.utils import (
    default_type_name,
    enum_member_identifier,
    field_identifier,
    to_pascal_case,
    to_snake_case,
    unique_name,
)


@pytest.mark.parametrize(
    "definition_name,expected",
    [
        ("sml_CT_Worksheet", "CT_Worksheet"),
        ("w_EG_BlockLevelElts", "EG_BlockLevelElts"),
        ("a_ST_Percentage", "ST_Percentage"),
        ("sml_worksheet", "worksheet"),
        ("CT_Plain", "CT_Plain"),
        ("Untagged", "Untagged"),
    ],
)
def test_spec_name(definition_name, expected):
    assert spec_name(definition_name) == expected


def test_spec_name_strip_prefix():
    assert spec_name("x14ac_CT_Thing", "x14ac_") == "CT_Thing"
    # A prefix that would leave nothing is ignored
    assert spec_name("sml_", "sml_") == "sml_"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("CT_Worksheet", "CTWorksheet"),
        ("worksheet", "Worksheet"),
        ("RGB_color", "RGBColor"),
        ("a-b.c", "ABC"),
    ],
)
def test_to_pascal_case(text, expected):
    assert to_pascal_case(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("colId", "col_id"),
        ("rFonts", "r_fonts"),
        ("RGBColor", "rgb_color"),
        ("sheetData", "sheet_data"),
        ("x14ac:dyDescent", "x14ac_dy_descent"),
    ],
)
def test_to_snake_case(text, expected):
    assert to_snake_case(text) == expected


def test_default_type_name():
    assert default_type_name("CT_Worksheet") == "Worksheet"
    assert default_type_name("ST_OnOff") == "OnOff"
    assert default_type_name("worksheet") == "Worksheet"


def test_field_identifier():
    assert field_identifier("sheetData") == "sheet_data"
    assert field_identifier("class") == "class_"
    assert field_identifier("3dView") == "_3d_view"
    assert field_identifier("-") == "field"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("veryHidden", "VERY_HIDDEN"),
        ("none", "NONE"),
        ("", "EMPTY"),
        ("1", "_1"),
        ("12pt", "_12PT"),
    ],
)
def test_enum_member_identifier(value, expected):
    assert enum_member_identifier(value) == expected


def test_unique_name():
    assert unique_name("A", set()) == "A"
    assert unique_name("A", {"A", "A2"}) == "A3"


class TestNameResolver:
    def test_complex_types_claim_names_first(self):
        schema = parse_rnc('w_ST_Border = string "a" | string "b"\nw_CT_Border = attribute w:val { w_ST_Border }')
        resolver = NameResolver("wml")
        complex_def, simple_def = schema.get("w_CT_Border"), schema.get("w_ST_Border")
        table = resolver.resolve_types([complex_def], [simple_def])
        assert table.types == {"w_CT_Border": "Border", "w_ST_Border": "STBorder"}

    def test_numeric_suffix_after_tagged_fallback(self):
        schema = parse_rnc("a_CT_X = empty\nb_CT_X = empty\nc_CT_X = empty")
        table = NameResolver().resolve_types(schema.definitions)
        assert list(table.types.values()) == ["X", "CTX", "CTX2"]

    def test_reserved_names(self):
        schema = parse_rnc("w_CT_Enum = empty\nw_CT_RawXmlElement = empty")
        table = NameResolver().resolve_types(schema.definitions)
        assert table.types == {"w_CT_Enum": "CTEnum", "w_CT_RawXmlElement": "CTRawXmlElement"}

    def test_explicit_mapping(self):
        mappings = NameMappings.from_dict({"sml": {"types": {"CT_Worksheet": "Sheet"}}})
        schema = parse_rnc("sml_CT_Worksheet = empty\nsml_CT_Other = empty")
        table = NameResolver("sml", mappings).resolve_types(schema.definitions)
        assert table.types == {"sml_CT_Worksheet": "Sheet", "sml_CT_Other": "Other"}
        assert table.mapped == {"sml_CT_Worksheet"}
        assert table.spec_names["sml_CT_Worksheet"] == "CT_Worksheet"

    def test_deterministic(self):
        schema = parse_rnc("a_CT_X = empty\nb_CT_X = empty\nc_CT_Y = empty")
        first = NameResolver().resolve_types(schema.definitions)
        second = NameResolver().resolve_types(schema.definitions)
        assert first == second

    def test_field_names(self):
        mappings = NameMappings.from_dict({"shared": {"fields": {"r": "reference", "t": "type"}}})
        resolver = NameResolver("sml", mappings)
        assert resolver.field_name("r") == "reference"
        assert resolver.field_name("t") == "type"
        assert resolver.field_name("sheetData") == "sheet_data"
        assert resolver.field_name("for") == "for_"

    def test_group_field_name(self):
        assert NameResolver().group_field_name("w_EG_BlockLevelElts") == "block_level_elts"

    def test_variant_names(self):
        mappings = NameMappings.from_dict({"sml": {"variants": {"customXml": "CUSTOM_XML_CONTENT"}}})
        resolver = NameResolver("sml", mappings)
        assert resolver.variant_names(["customXml", "a-b", "a_b", ""]) == {
            "customXml": "CUSTOM_XML_CONTENT",
            "a-b": "A_B",
            "a_b": "A_B2",
            "": "EMPTY",
        }
