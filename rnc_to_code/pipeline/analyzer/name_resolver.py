"""
Name resolution for generated types, fields and enum members.

Resolves spec names and XML names to unique, valid Python identifiers.
Resolution is deterministic: names are claimed in definition order, complex
and choice types first, so the same schema always gets the same names.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ...utils import (
    KIND_TAGS,
    default_type_name,
    enum_member_identifier,
    escape_keyword,
    field_identifier,
    to_pascal_case,
    unique_name,
)
from ..config import NameMappings
from ..schema_ast import nodes as rnc

logger = logging.getLogger(__name__)

# Names generated modules define or import at module level
RESERVED_NAMES = frozenset(
    {
        "NAMESPACES",
        "ROOT_ELEMENTS",
        "PARSERS",
        "SERIALIZERS",
        "ROOT_PARSERS",
        "ROOT_TAGS",
        "PositionedNode",
        "PositionedText",
        "RawXmlElement",
        "Any",
        "Callable",
        "ClassVar",
        "Enum",
    }
)


def spec_name(definition_name: str, strip_prefix: str | None = None) -> str:
    """
    Strip a definition's module namespace prefix.

    ``strip_prefix`` wins when it matches. Otherwise everything before the
    first CT_/ST_/EG_/AG_ tag is dropped, and for untagged names a leading
    lowercase module prefix such as ``sml_`` is dropped.

    Examples:
        "sml_CT_Worksheet" -> "CT_Worksheet"
        "w_EG_BlockLevelElts" -> "EG_BlockLevelElts"
        "sml_worksheet" -> "worksheet"
    """
    if strip_prefix and definition_name.startswith(strip_prefix) and len(definition_name) > len(strip_prefix):
        return definition_name[len(strip_prefix) :]
    for tag in KIND_TAGS:
        index = definition_name.find(f"_{tag}")
        if index >= 0:
            return definition_name[index + 1 :]
    head, sep, rest = definition_name.partition("_")
    if sep and rest and head.isalnum() and head.islower():
        return rest
    return definition_name


@dataclass
class NameTable:
    """Resolved Python names for one schema."""

    # Definition name -> generated type name
    types: dict[str, str] = field(default_factory=dict)
    # Definition name -> spec name
    spec_names: dict[str, str] = field(default_factory=dict)
    # Definition names whose type name came from an explicit mapping
    mapped: set[str] = field(default_factory=set)


class NameResolver:
    """Resolves Python identifiers for a schema under a module's name mappings."""

    def __init__(self, module: str = "", name_mappings: NameMappings | None = None, strip_prefix: str | None = None):
        """
        Initialize the resolver.

        Args:
            module: Module whose mapping tier is searched before ``shared``
            name_mappings: Explicit overrides, or None for default conversion only
            strip_prefix: Prefix removed from definition names before lookup
        """
        self.module = module
        self.name_mappings = name_mappings
        self.strip_prefix = strip_prefix

    def spec_name(self, definition_name: str) -> str:
        return spec_name(definition_name, self.strip_prefix)

    def mapped_type_name(self, definition_name: str) -> str:
        """Explicit override for a definition, else the default conversion."""
        name = self.spec_name(definition_name)
        if self.name_mappings is not None:
            mapped = self.name_mappings.resolve_type(self.module, name)
            if mapped:
                return mapped
        return default_type_name(name)

    def resolve_types(self, primary: Iterable[rnc.Definition], secondary: Iterable[rnc.Definition] = ()) -> NameTable:
        """
        Assign unique type names.

        Args:
            primary: Definitions that claim names first (complex and choice types)
            secondary: Definitions that claim names afterwards (simple types)

        Returns:
            NameTable with one unique name per definition
        """
        table = NameTable()
        taken: set[str] = set(RESERVED_NAMES)
        for definition in [*primary, *secondary]:
            if definition.name in table.types:
                continue
            spec = self.spec_name(definition.name)
            table.spec_names[definition.name] = spec
            name = self.mapped_type_name(definition.name)
            if self.name_mappings is not None and self.name_mappings.has_type(self.module, spec):
                table.mapped.add(definition.name)
            if name in taken:
                fallback = unique_name(to_pascal_case(spec), taken)
                logger.debug("Type name %s already taken; %s becomes %s", name, definition.name, fallback)
                name = fallback
            taken.add(name)
            table.types[definition.name] = name
        return table

    def field_name(self, xml_name: str) -> str:
        if self.name_mappings is not None:
            mapped = self.name_mappings.resolve_field(self.module, xml_name)
            if mapped:
                return escape_keyword(mapped)
        return field_identifier(xml_name)

    def group_field_name(self, definition_name: str) -> str:
        """Field name for an element choice group: "w_EG_BlockLevelElts" -> "block_level_elts"."""
        spec = self.spec_name(definition_name)
        for tag in KIND_TAGS:
            if spec.startswith(tag):
                spec = spec[len(tag) :]
                break
        return self.field_name(spec)

    def variant_names(self, values: Iterable[str]) -> dict[str, str]:
        """Enum member names keyed by literal value, unique within one enum."""
        members: dict[str, str] = {}
        taken: set[str] = set()
        for value in values:
            name = None
            if self.name_mappings is not None:
                name = self.name_mappings.resolve_variant(self.module, value)
            name = unique_name(name or enum_member_identifier(value), taken)
            taken.add(name)
            members[value] = name
        return members
