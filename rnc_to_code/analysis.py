"""
Consistency linter for name and feature mapping files.

Walks the same definitions code generation turns into classes and reports
which types have no entry in the name mappings and which fields have no
entry in the feature mappings. It never raises on schema content; pass/fail
policy belongs to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import click

from .pipeline.analyzer.classification import DefinitionKind, classify_definition, collect_fields
from .pipeline.analyzer.name_resolver import NameResolver
from .pipeline.config import FeatureMappings, NameMappings
from .pipeline.schema_ast import nodes as rnc

logger = logging.getLogger(__name__)


@dataclass
class ModuleReport:
    """Mapping coverage of one schema module."""

    unmapped_types: list[str] = field(default_factory=list)
    # "MappedType.field" entries
    unmapped_fields: list[str] = field(default_factory=list)
    total_types: int = 0
    total_fields: int = 0

    def has_unmapped(self) -> bool:
        return bool(self.unmapped_types or self.unmapped_fields)

    def format(self, module: str) -> str:
        """Render the report as indented text lines."""
        if not self.has_unmapped():
            return f"  {self.total_types} types, {self.total_fields} fields - all mapped"

        lines = [
            f"  {self.total_types} types ({len(self.unmapped_types)} unmapped), "
            f"{self.total_fields} fields ({len(self.unmapped_fields)} unmapped)"
        ]
        if self.unmapped_types:
            lines.append(f"  Unmapped types in ooxml-names.yaml [{module}]:")
            lines.extend(f"    - {name}" for name in self.unmapped_types)
        if self.unmapped_fields:
            lines.append(f"  Unmapped fields in ooxml-features.yaml [{module}]:")
            lines.extend(f"    - {name}" for name in self.unmapped_fields)
        return "\n".join(lines)

    def print(self, module: str) -> None:
        """Echo the report to stderr."""
        click.echo(self.format(module), err=True)


def analyze_schema(
    schema: rnc.Schema,
    module: str,
    name_mappings: NameMappings | None = None,
    feature_mappings: FeatureMappings | None = None,
    strip_prefix: str | None = None,
) -> ModuleReport:
    """
    Check a schema's complex types against the mapping files.

    A missing mapping table means every entry it would hold counts as
    mapped. Type names go through the same resolver as code generation, so
    field entries use the generated class name authors key feature rules by.

    Args:
        schema: Parsed (and possibly merged) schema
        module: Module whose mapping tiers are consulted ("sml", "wml", ...)
        name_mappings: Name overrides, or None
        feature_mappings: Feature tags, or None
        strip_prefix: Prefix removed from definition names before lookup

    Returns:
        ModuleReport with unmapped types and fields in definition order
    """
    definitions = schema.definition_map()
    kinds = {d.name: classify_definition(d, definitions) for d in schema.definitions}

    named_kinds = (DefinitionKind.COMPLEX, DefinitionKind.ELEMENT_CHOICE)
    primary = [d for d in schema.definitions if kinds[d.name] in named_kinds]
    simple = [d for d in schema.definitions if kinds[d.name] == DefinitionKind.SIMPLE]
    names = NameResolver(module, name_mappings, strip_prefix).resolve_types(primary, simple)

    report = ModuleReport()
    for definition in schema.definitions:
        if kinds[definition.name] != DefinitionKind.COMPLEX:
            continue

        spec = names.spec_names[definition.name]
        type_name = names.types[definition.name]
        report.total_types += 1
        if name_mappings is not None and not name_mappings.has_type(module, spec):
            report.unmapped_types.append(spec)

        for field_name in collect_fields(definition.pattern, definitions):
            report.total_fields += 1
            if feature_mappings is not None and not feature_mappings.has_field(module, type_name, field_name):
                report.unmapped_fields.append(f"{type_name}.{field_name}")

    logger.debug(
        "Analyzed %s: %d types, %d fields, %d unmapped",
        module,
        report.total_types,
        report.total_fields,
        len(report.unmapped_types) + len(report.unmapped_fields),
    )
    return report
