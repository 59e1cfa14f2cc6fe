"""
Classification of schema definitions, shared by analysis and code generation.

Every decision about what a definition becomes (inline attribute fragment,
attribute/element group, simple type, element choice, root wrapper or
complex type) and which fields a complex type exposes is made here, so the
linter and the generator see the same schema.

All functions are total: shapes that are not recognised fall through to the
complex-type default instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, replace
from enum import Enum

from ..schema_ast import nodes as rnc

Definitions = Mapping[str, rnc.Definition]


class DefinitionKind(str, Enum):
    INLINE_ATTRIBUTE = "inline-attribute"
    ATTRIBUTE_GROUP = "attribute-group"
    SIMPLE = "simple"
    ELEMENT_GROUP = "element-group"
    ELEMENT_CHOICE = "element-choice"
    ROOT_ELEMENT = "root-element"
    COMPLEX = "complex"


class FieldKind(str, Enum):
    ATTRIBUTE = "attribute"
    ELEMENT = "element"
    TEXT = "text"
    GROUP = "group"  # a reference to an element choice group


class FieldSource(str, Enum):
    DIRECT = "direct"
    ATTRIBUTE_GROUP = "attribute-group"
    ELEMENT_GROUP = "element-group"
    BASE_TYPE = "base-type"


def is_attribute_group_name(name: str) -> bool:
    return "_AG_" in name or name.startswith("AG_")


def is_element_group_name(name: str) -> bool:
    return "_EG_" in name or name.startswith("EG_")


def is_inline_attribute_ref(name: str, pattern: rnc.Pattern) -> bool:
    """True for a bare attribute definition that is spliced into its referrers.

    ``w_ST_Foo_attr = attribute w:val { ... }`` style definitions never get a
    type of their own; complex types and attribute groups are excluded by name.
    """
    return isinstance(pattern, rnc.Attribute) and "_CT_" not in name and "_AG_" not in name


def is_simple_type(pattern: rnc.Pattern) -> bool:
    """True for patterns that generate an enum or a scalar alias, never a struct."""
    if isinstance(pattern, rnc.Choice):
        return all(is_simple_type(item) for item in pattern.items)
    if isinstance(pattern, rnc.Group):
        return is_simple_type(pattern.pattern)
    return isinstance(pattern, (rnc.StringLiteral, rnc.Datatype, rnc.Text, rnc.List))


def unwrap_group(pattern: rnc.Pattern) -> rnc.Pattern:
    while isinstance(pattern, rnc.Group):
        pattern = pattern.pattern
    return pattern


def is_root_element(pattern: rnc.Pattern) -> bool:
    """A top-level bare element wraps a complex type as a document root."""
    return isinstance(pattern, rnc.Element)


def is_wildcard(pattern: rnc.Element | rnc.Attribute) -> bool:
    return pattern.name_class is not None


def is_simple_definition(definition: rnc.Definition, definitions: Definitions, _seen: frozenset[str] = frozenset()) -> bool:
    """Whether a definition generates an enum or scalar alias.

    Besides ``is_simple_type`` shapes this covers ``_ST_`` names and bare
    refs that alias another simple definition.
    """
    pattern = unwrap_group(definition.pattern)
    if isinstance(pattern, rnc.Attribute) or is_attribute_group_name(definition.name):
        return False
    if "_ST_" in definition.name or definition.name.startswith("ST_"):
        return True
    if is_simple_type(pattern):
        return True
    if isinstance(pattern, rnc.Ref) and pattern.name not in _seen:
        target = definitions.get(pattern.name)
        if target is not None:
            return is_simple_definition(target, definitions, _seen | {definition.name})
    return False


def element_choice_branches(pattern: rnc.Pattern, definitions: Definitions, _seen: frozenset[str] = frozenset()) -> list[rnc.Element] | None:
    """Flatten an element choice into its element alternatives.

    Nested element-group refs are expanded. Alternatives are de-duplicated by
    XML name, first occurrence wins. Returns None when the pattern is not a
    choice of named elements.
    """
    pattern = unwrap_group(pattern)
    if isinstance(pattern, rnc.Choice):
        items = pattern.items
    elif isinstance(pattern, (rnc.Element, rnc.Ref)):
        # A nested group holding a single element is one alternative
        items = (pattern,)
    else:
        return None

    branches: list[rnc.Element] = []
    seen_names: set[rnc.QName] = set()
    for item in items:
        item = unwrap_group(item)
        if isinstance(item, rnc.Element) and not is_wildcard(item):
            candidates = [item]
        elif isinstance(item, rnc.Ref) and is_element_group_name(item.name) and item.name not in _seen:
            target = definitions.get(item.name)
            if target is None:
                return None
            candidates = element_choice_branches(target.pattern, definitions, _seen | {item.name})
            if candidates is None:
                return None
        else:
            return None
        for element in candidates:
            if element.name not in seen_names:
                seen_names.add(element.name)
                branches.append(element)
    return branches or None


def classify_definition(definition: rnc.Definition, definitions: Definitions) -> DefinitionKind:
    """Decide what artifact a definition becomes."""
    name, pattern = definition.name, definition.pattern
    if is_inline_attribute_ref(name, pattern):
        return DefinitionKind.INLINE_ATTRIBUTE
    if is_attribute_group_name(name):
        return DefinitionKind.ATTRIBUTE_GROUP
    if is_element_group_name(name):
        if isinstance(unwrap_group(pattern), rnc.Choice) and element_choice_branches(pattern, definitions):
            return DefinitionKind.ELEMENT_CHOICE
        return DefinitionKind.ELEMENT_GROUP
    if is_simple_definition(definition, definitions):
        return DefinitionKind.SIMPLE
    if is_root_element(pattern):
        return DefinitionKind.ROOT_ELEMENT
    return DefinitionKind.COMPLEX


@dataclass(frozen=True)
class ResolvedField:
    """One attribute, element, text slot or choice group exposed by a complex type."""

    kind: FieldKind
    name: rnc.QName
    content: rnc.Pattern
    optional: bool = False
    repeated: bool = False
    source: FieldSource = FieldSource.DIRECT
    # Definition name of the element choice group, for GROUP fields
    group: str | None = None
    # Whether the linter sees this field, and so whether feature mappings gate it
    gateable: bool = False

    @property
    def key(self) -> tuple[str, str]:
        if self.kind == FieldKind.ATTRIBUTE:
            return ("attribute", self.name.local)
        if self.kind == FieldKind.GROUP:
            return ("group", self.group or "")
        if self.kind == FieldKind.TEXT:
            return ("text", "")
        return ("element", self.name.local)


TEXT_NAME = rnc.QName(None, "text")


class _FieldWalker:
    def __init__(self, definitions: Definitions, follow_all: bool):
        self.definitions = definitions
        self.follow_all = follow_all
        self.visited: set[str] = set()

    def walk(self, pattern: rnc.Pattern, optional: bool, repeated: bool, source: FieldSource) -> Iterator[ResolvedField]:
        if isinstance(pattern, rnc.Attribute):
            if not is_wildcard(pattern):
                yield ResolvedField(FieldKind.ATTRIBUTE, pattern.name, pattern.pattern, optional, False, source)
        elif isinstance(pattern, rnc.Element):
            if not is_wildcard(pattern):
                yield ResolvedField(FieldKind.ELEMENT, pattern.name, pattern.pattern, optional, repeated, source)
        elif isinstance(pattern, rnc.Optional):
            yield from self.walk(pattern.pattern, True, repeated, source)
        elif isinstance(pattern, rnc.ZeroOrMore):
            yield from self.walk(pattern.pattern, True, True, source)
        elif isinstance(pattern, rnc.OneOrMore):
            yield from self.walk(pattern.pattern, optional, True, source)
        elif isinstance(pattern, rnc.Mixed):
            if self.follow_all:
                yield ResolvedField(FieldKind.TEXT, TEXT_NAME, rnc.Text(), True, False, source)
            yield from self.walk(pattern.pattern, optional, repeated, source)
        elif isinstance(pattern, rnc.Group):
            yield from self.walk(pattern.pattern, optional, repeated, source)
        elif isinstance(pattern, rnc.Choice):
            # No single alternative of a choice is guaranteed to be present
            for item in pattern.items:
                yield from self.walk(item, True, repeated, source)
        elif isinstance(pattern, (rnc.Sequence, rnc.Interleave)):
            for item in pattern.items:
                yield from self.walk(item, optional, repeated, source)
        elif isinstance(pattern, rnc.Ref):
            yield from self._walk_ref(pattern, optional, repeated, source)
        elif isinstance(pattern, (rnc.Datatype, rnc.StringLiteral, rnc.Text, rnc.List)):
            if self.follow_all:
                yield ResolvedField(FieldKind.TEXT, TEXT_NAME, pattern, True, False, source)
        # Empty and Any contribute nothing

    def _walk_ref(self, ref: rnc.Ref, optional: bool, repeated: bool, source: FieldSource) -> Iterator[ResolvedField]:
        target = self.definitions.get(ref.name)
        if target is None:
            return
        kind = classify_definition(target, self.definitions)

        if kind in (DefinitionKind.ATTRIBUTE_GROUP, DefinitionKind.INLINE_ATTRIBUTE):
            yield from self._inline(target, optional, repeated, source, FieldSource.ATTRIBUTE_GROUP)
            return
        if not self.follow_all:
            return

        if kind == DefinitionKind.ELEMENT_CHOICE:
            yield ResolvedField(FieldKind.GROUP, rnc.QName(None, target.name), ref, optional, repeated, source, group=target.name)
        elif kind == DefinitionKind.ELEMENT_GROUP:
            yield from self._inline(target, optional, repeated, source, FieldSource.ELEMENT_GROUP)
        elif kind == DefinitionKind.SIMPLE:
            yield ResolvedField(FieldKind.TEXT, TEXT_NAME, ref, True, False, source)
        elif kind == DefinitionKind.COMPLEX:
            yield from self._inline(target, optional, repeated, source, FieldSource.BASE_TYPE)
        elif kind == DefinitionKind.ROOT_ELEMENT:
            # The wrapped element itself becomes the field
            yield from self._inline(target, optional, repeated, source, FieldSource.DIRECT)

    def _inline(self, target: rnc.Definition, optional: bool, repeated: bool, source: FieldSource, reason: FieldSource) -> Iterator[ResolvedField]:
        if target.name in self.visited:
            return
        self.visited.add(target.name)
        inner_source = reason if source == FieldSource.DIRECT else source
        yield from self.walk(target.pattern, optional, repeated, inner_source)


def resolve_fields(pattern: rnc.Pattern, definitions: Definitions) -> list[ResolvedField]:
    """
    Resolve every field a complex type exposes, with all groups inlined.

    Attribute groups and inline attribute refs are spliced in. Element groups
    are spliced in too, except element choice groups, which become a single
    GROUP field. Refs to simple types become the text content slot, refs to
    other complex types contribute their fields as a base type, and refs to
    top-level element definitions contribute that element.

    Fields are de-duplicated by kind and XML local name, first occurrence
    wins, in declaration order. Attribute and element fields whose names
    ``collect_fields`` reports are marked gateable.

    Args:
        pattern: Pattern of the complex type
        definitions: All definitions of the schema by name

    Returns:
        Resolved fields in declaration order
    """
    gated = set(collect_fields(pattern, definitions))
    walker = _FieldWalker(definitions, follow_all=True)
    fields: list[ResolvedField] = []
    seen: set[tuple[str, str]] = set()
    for resolved in walker.walk(pattern, False, False, FieldSource.DIRECT):
        if resolved.key in seen:
            continue
        seen.add(resolved.key)
        if resolved.kind in (FieldKind.ATTRIBUTE, FieldKind.ELEMENT) and resolved.name.local in gated:
            resolved = replace(resolved, gateable=True)
        fields.append(resolved)
    return fields


def collect_fields(pattern: rnc.Pattern, definitions: Definitions) -> list[str]:
    """
    Collect the XML local names of the attributes and elements a complex type
    declares itself or inlines from attribute groups.

    Element group refs are not walked: their fields are always present and
    never feature gated. Names are de-duplicated, first occurrence wins.

    Args:
        pattern: Pattern of the complex type
        definitions: All definitions of the schema by name

    Returns:
        Field names in original XML casing
    """
    walker = _FieldWalker(definitions, follow_all=False)
    names: list[str] = []
    for resolved in walker.walk(pattern, False, False, FieldSource.DIRECT):
        if resolved.kind in (FieldKind.ATTRIBUTE, FieldKind.ELEMENT) and resolved.name.local not in names:
            names.append(resolved.name.local)
    return names
