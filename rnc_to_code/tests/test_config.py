import pytest

from rnc_to_code.errors import ConfigError
from rnc_to_code.pipeline.config import (
    CodegenConfig,
    ExternalModule,
    FeatureMappings,
    FormatterConfig,
    NameMappings,
    OutputMode,
    feature_name,
)

NAMES_YAML = """
shared:
  types:
    ST_OnOff: OnOff
    CT_Color: Color
  fields:
    val: value
sml:
  types:
    CT_Worksheet: Worksheet
    CT_Color: SheetColor
  variants:
    customXml: CUSTOM_XML_CONTENT
  elements:
    Worksheet: worksheet
"""

FEATURES_YAML = """
shared:
  Color:
    rgb: core
sml:
  Font: "*"
  Worksheet:
    sheetData: core
    conditionalFormatting: [styling, sml-extra]
    dataValidations: validation
  Mixed:
    "*": [charts]
    title: core
"""


class TestNameMappings:
    def test_module_tier_wins(self):
        mappings = NameMappings.from_yaml(NAMES_YAML)
        assert mappings.resolve_type("sml", "CT_Color") == "SheetColor"
        assert mappings.resolve_type("wml", "CT_Color") == "Color"

    def test_shared_fallback(self):
        mappings = NameMappings.from_yaml(NAMES_YAML)
        assert mappings.resolve_type("sml", "ST_OnOff") == "OnOff"
        assert mappings.resolve_field("sml", "val") == "value"
        assert mappings.resolve_type("sml", "CT_Missing") is None

    def test_other_tables(self):
        mappings = NameMappings.from_yaml(NAMES_YAML)
        assert mappings.resolve_variant("sml", "customXml") == "CUSTOM_XML_CONTENT"
        assert mappings.resolve_element("sml", "Worksheet") == "worksheet"
        assert mappings.resolve_element("wml", "Worksheet") is None

    def test_has_type(self):
        mappings = NameMappings.from_yaml(NAMES_YAML)
        assert mappings.has_type("sml", "CT_Worksheet")
        assert mappings.has_type("wml", "ST_OnOff")
        assert not mappings.has_type("wml", "CT_Worksheet")

    def test_empty_document(self):
        mappings = NameMappings.from_yaml("")
        assert mappings.resolve_type("sml", "CT_Worksheet") is None

    def test_dict_round_trip(self):
        mappings = NameMappings.from_yaml(NAMES_YAML)
        assert NameMappings.from_dict(mappings.to_dict()) == mappings

    def test_from_file(self, data_dir):
        mappings = NameMappings.from_yaml_file(data_dir / "names.yaml")
        assert mappings.resolve_type("sml", "CT_Ext") == "Extension"

    @pytest.mark.parametrize(
        "text",
        [
            "- a\n- b\n",
            "sml: [1, 2]\n",
            "sml:\n  types: [CT_A]\n",
            "sml:\n  types:\n    CT_A: [A, B]\n",
            "sml:\n  fields: 3\n",
            "sml: {types: {CT_A: A}\n",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(ConfigError):
            NameMappings.from_yaml(text)

    def test_config_error_is_a_value_error(self):
        with pytest.raises(ValueError, match="sml.types"):
            NameMappings.from_yaml("sml:\n  types: [CT_A]\n")


class TestFeatureMappings:
    def test_single_tag_and_list(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert mappings.get_tags("sml", "Worksheet", "dataValidations") == ("validation",)
        assert mappings.get_tags("sml", "Worksheet", "conditionalFormatting") == ("styling", "sml-extra")

    def test_whole_type_wildcard(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert mappings.has_field("sml", "Font", "sz")
        assert mappings.is_core("sml", "Font", "sz")

    def test_field_wildcard(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert mappings.get_tags("sml", "Mixed", "title") == ("core",)
        assert mappings.get_tags("sml", "Mixed", "anything") == ("charts",)

    def test_shared_tier(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert mappings.is_core("sml", "Color", "rgb")
        assert not mappings.has_field("sml", "Color", "theme")

    def test_unmapped(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert mappings.get_tags("sml", "Worksheet", "cols") is None
        assert not mappings.has_field("sml", "Unknown", "x")
        assert not mappings.is_core("sml", "Unknown", "x")

    def test_primary_feature(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert mappings.primary_feature("sml", "Worksheet", "conditionalFormatting") == "styling"
        assert mappings.primary_feature("sml", "Worksheet", "sheetData") is None
        assert mappings.primary_feature("sml", "Worksheet", "cols") is None

    def test_dict_round_trip(self):
        mappings = FeatureMappings.from_yaml(FEATURES_YAML)
        assert FeatureMappings.from_dict(mappings.to_dict()) == mappings

    @pytest.mark.parametrize(
        "text",
        [
            "sml: [a]\n",
            "sml:\n  Font: 3\n",
            "sml:\n  Font:\n    sz: 12\n",
            "sml:\n  Font:\n    sz: [core, 1]\n",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(ConfigError):
            FeatureMappings.from_yaml(text)


class TestCodegenConfig:
    def test_defaults(self):
        config = CodegenConfig()
        assert config.extra_attrs and config.extra_children
        assert config.enabled_features is None
        assert config.formatter == FormatterConfig()

    def test_feature_enabled(self):
        assert CodegenConfig().feature_enabled("sml-styling")
        config = CodegenConfig(enabled_features=["sml-styling"])
        assert config.feature_enabled("sml-styling")
        assert not config.feature_enabled("sml-charts")
        assert config.feature_enabled(None)

    def test_dict_round_trip(self):
        config = CodegenConfig(
            strip_prefix="sml_",
            module_name="sml",
            name_mappings=NameMappings.from_yaml(NAMES_YAML),
            feature_mappings=FeatureMappings.from_yaml(FEATURES_YAML),
            enabled_features=["sml-styling"],
            extra_children=False,
            external_modules={"a_": ExternalModule("ooxml.dml", "dml", parsers_module="ooxml.dml.parsers")},
            formatter=FormatterConfig(enabled=True, line_length=100),
        )
        restored = CodegenConfig.from_dict(config.to_dict())
        assert restored == config
        assert restored.to_dict() == config.to_dict()

    def test_external_modules_from_dict(self):
        config = CodegenConfig.from_dict({"external_modules": {"a_": {"module": "ooxml.dml", "mapping_module": "dml"}}})
        external = config.external_modules["a_"]
        assert external == ExternalModule("ooxml.dml", "dml")
        assert external.parsers == external.serializers == "ooxml.dml"

    def test_malformed_external_module(self):
        with pytest.raises(ConfigError, match="external_modules.a_"):
            CodegenConfig.from_dict({"external_modules": {"a_": {"module": "ooxml.dml"}}})

    def test_external_module_longest_prefix_wins(self):
        dml = ExternalModule("ooxml.dml", "dml")
        chart = ExternalModule("ooxml.chart", "dml-chart")
        config = CodegenConfig(external_modules={"a_": dml, "a_chart_": chart})
        assert config.external_module("a_chart_CT_Chart") == ("a_chart_", chart)
        assert config.external_module("a_CT_Color") == ("a_", dml)
        assert config.external_module("sml_CT_Cell") is None

    def test_from_dict_ignores_unknown_keys(self):
        config = CodegenConfig.from_dict({"module_name": "wml", "unknown": 1})
        assert config.module_name == "wml"
        assert not hasattr(config, "unknown")


def test_feature_name():
    assert feature_name("sml", "styling") == "sml-styling"


def test_output_modes():
    assert [mode.value for mode in OutputMode] == ["error", "force", "skip-unchanged"]
