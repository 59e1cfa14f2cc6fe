"""
Phase 3 of the pipeline: build the IR from a parsed schema.

Classifies every definition, assigns Python names, resolves field types and
applies feature gating. The three backends only ever read the IR, which keeps
types, parsers and serializers consistent with each other.
"""

from __future__ import annotations

import logging

from ...utils import default_type_name, unique_name
from ..config import CodegenConfig, feature_name
from ..schema_ast import nodes as rnc
from .classification import (
    DefinitionKind,
    FieldKind,
    ResolvedField,
    classify_definition,
    element_choice_branches,
    is_simple_type,
    resolve_fields,
    unwrap_group,
)
from .ir_nodes import (
    BOOL_MARKER,
    IR,
    RAW,
    STR,
    ChoiceDef,
    ChoiceVariant,
    ClassDef,
    EnumDef,
    FieldDef,
    NamespaceDef,
    RootElement,
    TypeAlias,
    TypeKind,
    TypeRef,
)
from .name_resolver import NameResolver, NameTable, spec_name

logger = logging.getLogger(__name__)

# xsd datatype -> (python type, codec)
XSD_TYPES: dict[str, tuple[str, str]] = {
    "string": ("str", "str"),
    "token": ("str", "str"),
    "NCName": ("str", "str"),
    "ID": ("str", "str"),
    "IDREF": ("str", "str"),
    "anyURI": ("str", "str"),
    "dateTime": ("str", "str"),
    "integer": ("int", "int"),
    "int": ("int", "int"),
    "long": ("int", "int"),
    "short": ("int", "int"),
    "byte": ("int", "int"),
    "unsignedInt": ("int", "int"),
    "unsignedLong": ("int", "int"),
    "unsignedShort": ("int", "int"),
    "unsignedByte": ("int", "int"),
    "positiveInteger": ("int", "int"),
    "nonNegativeInteger": ("int", "int"),
    "negativeInteger": ("int", "int"),
    "nonPositiveInteger": ("int", "int"),
    "boolean": ("bool", "bool"),
    "double": ("float", "float"),
    "float": ("float", "float"),
    "decimal": ("float", "float"),
    "hexBinary": ("bytes", "hex"),
    "base64Binary": ("bytes", "base64"),
}


def datatype_ref(datatype: rnc.Datatype) -> TypeRef:
    """Map an xsd datatype to a Python scalar; unknown datatypes read as str."""
    python_type, codec = XSD_TYPES.get(datatype.name, ("str", "str"))
    return TypeRef(TypeKind.SCALAR, python_type, codec)


def namespace_constant(prefix: str) -> str:
    return f"NS_{prefix.upper().replace('-', '_').replace('.', '_')}" if prefix else "NS_DEFAULT"


class SchemaAnalyzer:
    """Analyzes a schema and produces the IR."""

    def __init__(self, schema: rnc.Schema, config: CodegenConfig):
        """
        Initialize the analyzer.

        Args:
            schema: The parsed (and possibly merged) schema
            config: Code generation configuration
        """
        self.schema = schema
        self.config = config
        self.definitions = schema.definition_map()
        self.resolver = NameResolver(config.module_name, config.name_mappings, config.strip_prefix)
        self.kinds: dict[str, DefinitionKind] = {}
        self.names = NameTable()
        self._scalars: dict[str, TypeRef] = {}

    def analyze(self) -> IR:
        """
        Build the IR.

        Returns:
            The complete intermediate representation
        """
        for definition in self.schema.definitions:
            self.kinds[definition.name] = classify_definition(definition, self.definitions)

        named_kinds = (DefinitionKind.COMPLEX, DefinitionKind.ELEMENT_CHOICE)
        primary = [d for d in self.schema.definitions if self.kinds[d.name] in named_kinds]
        simple = [d for d in self.schema.definitions if self.kinds[d.name] == DefinitionKind.SIMPLE]
        self.names = self.resolver.resolve_types(primary, simple)
        self._warn_unmapped(primary)

        ir = IR(
            namespaces=self._namespaces(),
            generation_comment=self.config.generation_comment if self.config.add_generation_comment else None,
        )

        for definition in simple:
            self._analyze_simple(definition, ir)

        for definition in self.schema.definitions:
            kind = self.kinds[definition.name]
            if kind == DefinitionKind.COMPLEX:
                ir.classes.append(self._analyze_class(definition))
                ir.type_order.append(self.names.types[definition.name])
            elif kind == DefinitionKind.ELEMENT_CHOICE:
                ir.choices.append(self._analyze_choice(definition))
                ir.type_order.append(self.names.types[definition.name])
            elif kind == DefinitionKind.ROOT_ELEMENT:
                self._analyze_root(definition, ir)
            else:
                logger.debug("Skipping %s definition %s", kind.value, definition.name)

        self._mapped_roots(ir)
        if self.config.extra_attrs:
            rooted = {root.type_name for root in ir.roots}
            for class_def in ir.classes:
                class_def.has_extra_namespaces = class_def.name in rooted
        return ir

    def _warn_unmapped(self, definitions: list[rnc.Definition]) -> None:
        if not self.config.warn_unmapped or self.config.name_mappings is None:
            return
        for definition in definitions:
            if definition.name not in self.names.mapped:
                logger.warning(
                    "No name mapping for %s (spec name %s); using %s",
                    definition.name,
                    self.names.spec_names[definition.name],
                    self.names.types[definition.name],
                )

    def _namespaces(self) -> list[NamespaceDef]:
        result = []
        taken: set[str] = set()
        for ns in self.schema.namespaces:
            constant = unique_name(namespace_constant(ns.prefix), taken)
            taken.add(constant)
            result.append(NamespaceDef(prefix=ns.prefix, uri=ns.uri, is_default=ns.is_default, constant=constant))
        return result

    # XML names

    def element_key(self, name: rnc.QName) -> str:
        """Clark-notation key for an element; unprefixed names use the default namespace."""
        uri = self.schema.namespace_uri(name.prefix)
        return f"{{{uri}}}{name.local}" if uri else name.local

    def attribute_key(self, name: rnc.QName) -> str:
        """Clark-notation key for an attribute; unprefixed attributes have no namespace."""
        if name.prefix is None:
            return name.local
        uri = self.schema.namespace_uri(name.prefix)
        return f"{{{uri}}}{name.local}" if uri else name.local

    # Simple types

    def _literal_values(self, pattern: rnc.Pattern, seen: frozenset[str] = frozenset()) -> list[str] | None:
        """Values of a pattern made only of string literals, or None."""
        pattern = unwrap_group(pattern)
        if isinstance(pattern, rnc.StringLiteral):
            return [pattern.value]
        if isinstance(pattern, rnc.Choice):
            values: list[str] = []
            for item in pattern.items:
                item = unwrap_group(item)
                if isinstance(item, rnc.Ref) and item.name not in seen and item.name in self.definitions:
                    item_values = self._literal_values(self.definitions[item.name].pattern, seen | {item.name})
                else:
                    item_values = self._literal_values(item, seen)
                if item_values is None:
                    return None
                values.extend(v for v in item_values if v not in values)
            return values
        return None

    def scalar_ref(self, definition_name: str, seen: frozenset[str] = frozenset()) -> TypeRef:
        """The scalar type a simple definition's values parse into."""
        if definition_name in self._scalars:
            return self._scalars[definition_name]
        definition = self.definitions.get(definition_name)
        if definition is None or definition_name in seen or self.kinds.get(definition_name) != DefinitionKind.SIMPLE:
            return STR

        name = self.names.types[definition_name]
        pattern = unwrap_group(definition.pattern)
        if self._literal_values(pattern) is not None:
            result = TypeRef(TypeKind.SCALAR, name, "enum")
        else:
            target = self._alias_target(pattern, seen | {definition_name})
            result = TypeRef(TypeKind.SCALAR, name, target.codec)
        self._scalars[definition_name] = result
        return result

    def _alias_target(self, pattern: rnc.Pattern, seen: frozenset[str]) -> TypeRef:
        """The underlying type of a non-enum simple type."""
        if isinstance(pattern, rnc.Datatype):
            return datatype_ref(pattern)
        if isinstance(pattern, rnc.Ref):
            target = self.scalar_ref(pattern.name, seen)
            if target.codec == "enum":
                return target
            # Aliases of aliases point straight at the builtin
            return TypeRef(TypeKind.SCALAR, _builtin_for_codec(target.codec), target.codec)
        return STR

    def _analyze_simple(self, definition: rnc.Definition, ir: IR) -> None:
        name = self.names.types[definition.name]
        pattern = unwrap_group(definition.pattern)
        values = self._literal_values(pattern)
        if values is not None:
            ir.enums.append(
                EnumDef(
                    name=name,
                    definition_name=definition.name,
                    members=self.resolver.variant_names(values),
                    comment=definition.doc_comment,
                )
            )
        else:
            target = self._alias_target(pattern, frozenset({definition.name}))
            ir.type_aliases.append(TypeAlias(name=name, definition_name=definition.name, target=target, comment=definition.doc_comment))

    # Field types

    def element_type(self, content: rnc.Pattern) -> TypeRef:
        """Type of an element's content."""
        content = unwrap_group(content)
        if isinstance(content, rnc.Ref):
            kind = self.kinds.get(content.name)
            if kind == DefinitionKind.COMPLEX:
                return TypeRef(TypeKind.CLASS, self.names.types[content.name])
            if kind == DefinitionKind.SIMPLE:
                return self.scalar_ref(content.name)
            if kind is None:
                external = self.external_type(content.name)
                if external is not None:
                    return external
                logger.debug("Reference to undefined %s kept as raw XML", content.name)
            return RAW
        if isinstance(content, rnc.Empty):
            return BOOL_MARKER
        if isinstance(content, rnc.Datatype):
            return datatype_ref(content)
        if is_simple_type(content):
            return STR
        return RAW

    def external_type(self, definition_name: str) -> TypeRef | None:
        """
        Resolve a complex type defined by another schema's generated module.

        Only ``CT_`` definitions resolve: simple types of another schema keep
        their codec there, so values typed by them read as str here.
        """
        owner = self.config.external_module(definition_name)
        if owner is None or "_CT_" not in definition_name:
            return None
        prefix, external = owner
        name = spec_name(definition_name, prefix)
        mappings = self.config.name_mappings
        mapped = mappings.resolve_type(external.mapping_module, name) if mappings is not None else None
        type_name = mapped or default_type_name(name)
        logger.debug("Resolved %s to %s.%s", definition_name, external.module, type_name)
        return TypeRef(TypeKind.CLASS, type_name, external=external)

    def attribute_type(self, content: rnc.Pattern) -> TypeRef:
        """Type of an attribute's value."""
        content = unwrap_group(content)
        if isinstance(content, rnc.Ref):
            if self.kinds.get(content.name) == DefinitionKind.SIMPLE:
                return self.scalar_ref(content.name)
            return STR
        if isinstance(content, rnc.Datatype):
            return datatype_ref(content)
        return STR

    def text_type(self, content: rnc.Pattern) -> TypeRef:
        content = unwrap_group(content)
        if isinstance(content, rnc.Ref):
            return self.scalar_ref(content.name)
        if isinstance(content, rnc.Datatype):
            return datatype_ref(content)
        return STR

    # Complex types

    def _analyze_class(self, definition: rnc.Definition) -> ClassDef:
        class_name = self.names.types[definition.name]
        resolved = resolve_fields(definition.pattern, self.definitions)

        class_def = ClassDef(
            name=class_name,
            definition_name=definition.name,
            spec_name=self.names.spec_names[definition.name],
            comment=definition.doc_comment,
        )
        taken = {"extra_attrs", "extra_children", "extra_text", "extra_namespaces", "dataclasses"}
        for field in resolved:
            field_def = self._field(class_name, field)
            if field_def.feature is not None and not self.config.feature_enabled(field_def.feature):
                logger.debug("Omitting %s.%s: feature %s disabled", class_name, field_def.name, field_def.feature)
                continue
            field_def.name = unique_name(field_def.name, taken)
            taken.add(field_def.name)
            class_def.fields.append(field_def)

        has_attributes = any(f.kind == FieldKind.ATTRIBUTE for f in resolved)
        # Text content and refs into other schemas also admit child elements
        has_children = (
            any(f.kind != FieldKind.ATTRIBUTE for f in resolved)
            or _has_wildcard_element(definition.pattern)
            or self._has_undefined_ref(definition.pattern)
        )
        class_def.has_extra_attrs = self.config.extra_attrs and (has_attributes or _has_wildcard_attribute(definition.pattern))
        class_def.has_extra_children = self.config.extra_children and has_children
        class_def.has_extra_text = class_def.has_extra_children and class_def.text_field is not None
        return class_def

    def _has_undefined_ref(self, pattern: rnc.Pattern) -> bool:
        if isinstance(pattern, rnc.Ref):
            return pattern.name not in self.definitions
        if isinstance(pattern, (rnc.Element, rnc.Attribute)):
            return False
        if isinstance(pattern, rnc.COMPOSITE_PATTERNS):
            return any(self._has_undefined_ref(item) for item in pattern.items)
        if isinstance(pattern, rnc.WRAPPER_PATTERNS):
            return self._has_undefined_ref(pattern.pattern)
        return False

    def _field(self, class_name: str, field: ResolvedField) -> FieldDef:
        if field.kind == FieldKind.ATTRIBUTE:
            field_def = FieldDef(
                name=self.resolver.field_name(field.name.local),
                xml_name=field.name.local,
                xml_key=self.attribute_key(field.name),
                kind=FieldKind.ATTRIBUTE,
                type_ref=self.attribute_type(field.content),
                is_required=not field.optional,
            )
        elif field.kind == FieldKind.ELEMENT:
            type_ref = self.element_type(field.content)
            field_def = FieldDef(
                name=self.resolver.field_name(field.name.local),
                xml_name=field.name.local,
                xml_key=self.element_key(field.name),
                kind=FieldKind.ELEMENT,
                type_ref=type_ref,
                is_list=field.repeated,
                is_required=not field.optional and not field.repeated and type_ref.kind != TypeKind.MARKER,
            )
        elif field.kind == FieldKind.GROUP:
            choice = self.names.types[field.group]
            field_def = FieldDef(
                name=self.resolver.group_field_name(field.group),
                xml_name=field.group,
                kind=FieldKind.GROUP,
                type_ref=TypeRef(TypeKind.CHOICE, choice),
                is_list=field.repeated,
                is_required=not field.optional and not field.repeated,
            )
        else:
            field_def = FieldDef(
                name=self.resolver.field_name("text"),
                xml_name="text",
                kind=FieldKind.TEXT,
                type_ref=self.text_type(field.content),
            )

        mappings = self.config.feature_mappings
        if field.gateable and mappings is not None:
            tag = mappings.primary_feature(self.config.module_name, class_name, field.name.local)
            if tag is not None:
                field_def.feature = feature_name(self.config.module_name, tag)
        return field_def

    # Choice groups and roots

    def _analyze_choice(self, definition: rnc.Definition) -> ChoiceDef:
        choice = ChoiceDef(
            name=self.names.types[definition.name],
            definition_name=definition.name,
            comment=definition.doc_comment,
        )
        for element in element_choice_branches(definition.pattern, self.definitions) or []:
            choice.variants.append(
                ChoiceVariant(tag=element.name.local, xml_key=self.element_key(element.name), type_ref=self.element_type(element.pattern))
            )
        return choice

    def _analyze_root(self, definition: rnc.Definition, ir: IR) -> None:
        element = definition.pattern
        type_ref = self.element_type(element.pattern)
        if type_ref.kind != TypeKind.CLASS:
            logger.debug("Root element %s does not wrap a complex type; skipped", definition.name)
            return
        key = self.element_key(element.name)
        if any(root.xml_key == key for root in ir.roots):
            return
        ir.roots.append(RootElement(xml_key=key, tag=element.name.local, type_name=type_ref.name))

    def _mapped_roots(self, ir: IR) -> None:
        """Add root elements named by the ``elements`` mapping table."""
        mappings = self.config.name_mappings
        if mappings is None:
            return
        rooted = {root.type_name for root in ir.roots}
        for class_def in ir.classes:
            if class_def.name in rooted:
                continue
            tag = mappings.resolve_element(self.config.module_name, class_def.name)
            if tag:
                ir.roots.append(RootElement(xml_key=self.element_key(rnc.QName(None, tag)), tag=tag, type_name=class_def.name))


def _builtin_for_codec(codec: str) -> str:
    return {"int": "int", "float": "float", "bool": "bool", "hex": "bytes", "base64": "bytes"}.get(codec, "str")


def _has_wildcard(pattern: rnc.Pattern, particle: type) -> bool:
    if isinstance(pattern, particle):
        return pattern.name_class is not None
    if isinstance(pattern, rnc.COMPOSITE_PATTERNS):
        return any(_has_wildcard(item, particle) for item in pattern.items)
    if isinstance(pattern, rnc.WRAPPER_PATTERNS):
        return _has_wildcard(pattern.pattern, particle)
    return False


def _has_wildcard_element(pattern: rnc.Pattern) -> bool:
    return _has_wildcard(pattern, rnc.Element)


def _has_wildcard_attribute(pattern: rnc.Pattern) -> bool:
    return _has_wildcard(pattern, rnc.Attribute)
