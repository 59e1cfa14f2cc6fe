"""
Configuration for the code generator pipeline.

Name and feature mappings are loaded once from YAML and then passed around
as plain immutable values; nothing here is module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigError

SHARED = "shared"
WILDCARD = "*"
CORE_TAG = "core"


class OutputMode(str, Enum):
    """Output mode for file generation.

    Controls behavior when the output file already exists.
    """

    ERROR_IF_EXISTS = "error"  # Raise if the file exists
    FORCE = "force"  # Always overwrite
    SKIP_UNCHANGED = "skip-unchanged"  # Overwrite only when content differs


@dataclass
class FormatterConfig:
    """Configuration for post-processing formatters."""

    # Whether formatting is enabled
    enabled: bool = False

    # Line length for the formatter
    line_length: int = 120

    # Python version target (e.g., "py312", "py313")
    target_version: str = "py312"

    # Whether to use string normalization (convert single quotes to double)
    string_normalization: bool = True

    # Whether to honour magic trailing commas
    magic_trailing_comma: bool = True


def _load_yaml_mapping(text: str, what: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"{what}: invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{what}: expected a mapping at the top level, got {type(data).__name__}")
    return data


def _string_table(value: Any, where: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where}: expected a mapping, got {type(value).__name__}")
    for k, v in value.items():
        if isinstance(v, (dict, list)) or v is None:
            raise ConfigError(f"{where}.{k}: expected a name, got {v!r}")
    return {str(k): str(v) for k, v in value.items()}


@dataclass(frozen=True)
class ModuleMappings:
    """Override tables for one module (or the shared tier)."""

    # Type name mappings: CT_AutoFilter -> AutoFilter
    types: dict[str, str] = field(default_factory=dict)
    # Field name mappings: r -> reference
    fields: dict[str, str] = field(default_factory=dict)
    # Enum variant mappings: customXml -> CUSTOM_XML_CONTENT
    variants: dict[str, str] = field(default_factory=dict)
    # Root element names for generated types: Worksheet -> worksheet
    elements: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict | None, where: str = "") -> ModuleMappings:
        d = d or {}
        if not isinstance(d, dict):
            raise ConfigError(f"{where}: expected a mapping, got {type(d).__name__}")
        return ModuleMappings(
            types=_string_table(d.get("types"), f"{where}.types"),
            fields=_string_table(d.get("fields"), f"{where}.fields"),
            variants=_string_table(d.get("variants"), f"{where}.variants"),
            elements=_string_table(d.get("elements"), f"{where}.elements"),
        )

    def to_dict(self) -> dict:
        return {
            "types": dict(self.types),
            "fields": dict(self.fields),
            "variants": dict(self.variants),
            "elements": dict(self.elements),
        }


@dataclass(frozen=True)
class NameMappings:
    """Spec name to Python identifier overrides, per module plus a shared tier."""

    shared: ModuleMappings = field(default_factory=ModuleMappings)
    modules: dict[str, ModuleMappings] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict) -> NameMappings:
        modules = {str(name): ModuleMappings.from_dict(table, str(name)) for name, table in d.items() if name != SHARED}
        return NameMappings(shared=ModuleMappings.from_dict(d.get(SHARED), SHARED), modules=modules)

    @staticmethod
    def from_yaml(text: str) -> NameMappings:
        return NameMappings.from_dict(_load_yaml_mapping(text, "name mappings"))

    @staticmethod
    def from_yaml_file(path: str | Path) -> NameMappings:
        return NameMappings.from_yaml(Path(path).read_text(encoding="utf-8"))

    def to_dict(self) -> dict:
        result = {SHARED: self.shared.to_dict()}
        result.update({name: table.to_dict() for name, table in self.modules.items()})
        return result

    def for_module(self, module: str) -> ModuleMappings:
        return self.modules.get(module, self.shared)

    def _resolve(self, table: str, module: str, key: str) -> str | None:
        value = getattr(self.for_module(module), table).get(key)
        if value is None:
            value = getattr(self.shared, table).get(key)
        return value

    def resolve_type(self, module: str, spec_name: str) -> str | None:
        """Resolve a type name, checking module-specific then shared mappings."""
        return self._resolve("types", module, spec_name)

    def resolve_field(self, module: str, xml_name: str) -> str | None:
        """Resolve a field name, checking module-specific then shared mappings."""
        return self._resolve("fields", module, xml_name)

    def resolve_variant(self, module: str, value: str) -> str | None:
        """Resolve an enum member name, checking module-specific then shared mappings."""
        return self._resolve("variants", module, value)

    def resolve_element(self, module: str, type_name: str) -> str | None:
        """Resolve the root XML element name for a generated type name."""
        return self._resolve("elements", module, type_name)

    def has_type(self, module: str, spec_name: str) -> bool:
        return self.resolve_type(module, spec_name) is not None


def _tag_list(rule: Any, where: str) -> tuple[str, ...]:
    if isinstance(rule, str):
        return (rule,)
    if isinstance(rule, list) and all(isinstance(tag, str) for tag in rule):
        return tuple(rule)
    raise ConfigError(f"{where}: expected a tag or a list of tags, got {rule!r}")


def _feature_table(d: Any, where: str) -> dict[str, dict[str, tuple[str, ...]]]:
    if d is None:
        return {}
    if not isinstance(d, dict):
        raise ConfigError(f"{where}: expected a mapping, got {type(d).__name__}")
    table = {}
    for type_name, fields in d.items():
        if fields is None:
            fields = {}
        elif fields == WILDCARD:
            # A whole type covered without gating
            fields = {WILDCARD: [CORE_TAG]}
        if not isinstance(fields, dict):
            raise ConfigError(f"{where}.{type_name}: expected a mapping of fields, got {type(fields).__name__}")
        table[str(type_name)] = {str(name): _tag_list(rule, f"{where}.{type_name}.{name}") for name, rule in fields.items()}
    return table


@dataclass(frozen=True)
class FeatureMappings:
    """Feature tags per (mapped type name, XML field name).

    A field listed under ``*`` covers every field of its type. Tag ``core``
    means the field is always generated; any other tag names the feature
    that gates it.
    """

    shared: dict[str, dict[str, tuple[str, ...]]] = field(default_factory=dict)
    modules: dict[str, dict[str, dict[str, tuple[str, ...]]]] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict) -> FeatureMappings:
        modules = {str(name): _feature_table(table, str(name)) for name, table in d.items() if name != SHARED}
        return FeatureMappings(shared=_feature_table(d.get(SHARED), SHARED), modules=modules)

    @staticmethod
    def from_yaml(text: str) -> FeatureMappings:
        return FeatureMappings.from_dict(_load_yaml_mapping(text, "feature mappings"))

    @staticmethod
    def from_yaml_file(path: str | Path) -> FeatureMappings:
        return FeatureMappings.from_yaml(Path(path).read_text(encoding="utf-8"))

    def to_dict(self) -> dict:
        def plain(table):
            return {t: {f: list(tags) for f, tags in fields.items()} for t, fields in table.items()}

        result = {SHARED: plain(self.shared)}
        result.update({name: plain(table) for name, table in self.modules.items()})
        return result

    def _type_table(self, module: str, type_name: str) -> dict[str, tuple[str, ...]] | None:
        table = self.modules.get(module, {}).get(type_name)
        if table is None:
            table = self.shared.get(type_name)
        return table

    def get_tags(self, module: str, type_name: str, field_name: str) -> tuple[str, ...] | None:
        """Tags for a field, falling back to the type's ``*`` entry. None when unmapped."""
        table = self._type_table(module, type_name)
        if table is None:
            return None
        tags = table.get(field_name)
        if tags is None:
            tags = table.get(WILDCARD)
        return tags

    def has_field(self, module: str, type_name: str, field_name: str) -> bool:
        return self.get_tags(module, type_name, field_name) is not None

    def is_core(self, module: str, type_name: str, field_name: str) -> bool:
        tags = self.get_tags(module, type_name, field_name)
        return tags is not None and CORE_TAG in tags

    def primary_feature(self, module: str, type_name: str, field_name: str) -> str | None:
        """First non-core tag of a field, or None when the field is core or unmapped."""
        tags = self.get_tags(module, type_name, field_name)
        if not tags or CORE_TAG in tags:
            return None
        for tag in tags:
            if tag != WILDCARD:
                return tag
        return None


@dataclass(frozen=True)
class ExternalModule:
    """A generated module that owns the definitions of another schema.

    References to complex types under a configured definition prefix (``a_``
    for DrawingML, say) that the schema does not define resolve to classes of
    this module, named through the ``mapping_module`` name mappings.
    """

    # Absolute import path of the types (or combined) module, e.g. "ooxml.dml"
    module: str
    # Module name for mapping lookups, e.g. "dml"
    mapping_module: str
    # Where parse_<Type> and write_<Type> live when that module was generated split
    parsers_module: str | None = None
    serializers_module: str | None = None

    @staticmethod
    def from_dict(d: dict, where: str = "") -> ExternalModule:
        if not isinstance(d, dict) or "module" not in d or "mapping_module" not in d:
            raise ConfigError(f"{where}: expected a mapping with module and mapping_module")
        return ExternalModule(
            module=str(d["module"]),
            mapping_module=str(d["mapping_module"]),
            parsers_module=d.get("parsers_module"),
            serializers_module=d.get("serializers_module"),
        )

    def to_dict(self) -> dict:
        return {
            "module": self.module,
            "mapping_module": self.mapping_module,
            "parsers_module": self.parsers_module,
            "serializers_module": self.serializers_module,
        }

    @property
    def parsers(self) -> str:
        return self.parsers_module or self.module

    @property
    def serializers(self) -> str:
        return self.serializers_module or self.module


def feature_name(module: str, tag: str) -> str:
    """Name of the generation feature gating a tag: ``sml`` + ``styling`` -> ``sml-styling``."""
    return f"{module}-{tag}"


@dataclass
class CodegenConfig:
    """Configuration options for code generation."""

    # Prefix stripped from definition names before mapping (e.g. "sml_")
    strip_prefix: str | None = None

    # Module name for mapping lookups and feature names ("sml", "wml", ...)
    module_name: str = ""

    # Explicit name overrides; None means every name uses the default conversion
    name_mappings: NameMappings | None = None

    # Feature tags; None means nothing is feature gated
    feature_mappings: FeatureMappings | None = None

    # Features to generate; None generates every gated field
    enabled_features: list[str] | None = None

    # Round-trip capture of unknown attributes and children
    extra_attrs: bool = True
    extra_children: bool = True

    # Log a warning for each generated type without a name mapping
    warn_unmapped: bool = False

    # Add generation comment at top of file
    add_generation_comment: bool = True
    generation_comment: str = "Generated by rnc_to_code. Do not edit by hand."

    # Module the split parser/serializer outputs import generated types from
    types_module: str | None = None

    # Definition prefix -> module generated from another schema ("a_" -> DrawingML)
    external_modules: dict[str, ExternalModule] = field(default_factory=dict)

    formatter: FormatterConfig = field(default_factory=FormatterConfig)

    @staticmethod
    def from_dict(d: dict) -> CodegenConfig:
        """Create a config from a dictionary."""
        config = CodegenConfig()
        for k, v in d.items():
            if k == "name_mappings" and isinstance(v, dict):
                v = NameMappings.from_dict(v)
            elif k == "feature_mappings" and isinstance(v, dict):
                v = FeatureMappings.from_dict(v)
            elif k == "formatter" and isinstance(v, dict):
                v = FormatterConfig(**v)
            elif k == "external_modules" and isinstance(v, dict):
                v = {
                    str(prefix): entry if isinstance(entry, ExternalModule) else ExternalModule.from_dict(entry, f"external_modules.{prefix}")
                    for prefix, entry in v.items()
                }
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "strip_prefix": self.strip_prefix,
            "module_name": self.module_name,
            "name_mappings": self.name_mappings.to_dict() if self.name_mappings else None,
            "feature_mappings": self.feature_mappings.to_dict() if self.feature_mappings else None,
            "enabled_features": self.enabled_features,
            "extra_attrs": self.extra_attrs,
            "extra_children": self.extra_children,
            "warn_unmapped": self.warn_unmapped,
            "add_generation_comment": self.add_generation_comment,
            "generation_comment": self.generation_comment,
            "types_module": self.types_module,
            "external_modules": {prefix: external.to_dict() for prefix, external in self.external_modules.items()},
            "formatter": {
                "enabled": self.formatter.enabled,
                "line_length": self.formatter.line_length,
                "target_version": self.formatter.target_version,
                "string_normalization": self.formatter.string_normalization,
                "magic_trailing_comma": self.formatter.magic_trailing_comma,
            },
        }

    def external_module(self, definition_name: str) -> tuple[str, ExternalModule] | None:
        """The configured prefix and module owning a definition name, longest prefix first."""
        for prefix in sorted(self.external_modules, key=len, reverse=True):
            if definition_name.startswith(prefix):
                return prefix, self.external_modules[prefix]
        return None

    def feature_enabled(self, feature: str | None) -> bool:
        if feature is None or self.enabled_features is None:
            return True
        return feature in self.enabled_features
