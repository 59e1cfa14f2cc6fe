"""
IR (Intermediate Representation) node definitions.

These nodes represent the classified and named schema, ready for code
generation. Every reference is resolved to a generated type or a scalar
codec, and every XML name to the Clark-notation key the runtime matches on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..config import ExternalModule
from .classification import FieldKind


class TypeKind(Enum):
    """Kind of value a field or choice variant holds."""

    SCALAR = "scalar"  # Text parsed through a codec (str, int, enum, ...)
    CLASS = "class"  # A generated complex type
    CHOICE = "choice"  # A generated element choice type
    MARKER = "marker"  # An empty element, present or not
    RAW = "raw"  # Content kept verbatim as a RawXmlElement


@dataclass(frozen=True)
class TypeRef:
    """A resolved type reference."""

    kind: TypeKind = TypeKind.SCALAR
    name: str = "str"  # Python annotation (e.g., "int", "OnOff", "Worksheet")

    # For scalars: how text is converted to and from ``name``
    codec: str = "str"

    # Set for classes generated into another module
    external: ExternalModule | None = None


STR = TypeRef(TypeKind.SCALAR, "str", "str")
BOOL_MARKER = TypeRef(TypeKind.MARKER, "bool", "bool")
RAW = TypeRef(TypeKind.RAW, "RawXmlElement", "str")


@dataclass
class FieldDef:
    """A field definition in a class."""

    name: str = ""
    xml_name: str = ""  # Original XML local name
    xml_key: str = ""  # Clark-notation name matched by parsers
    kind: FieldKind = FieldKind.ELEMENT
    type_ref: TypeRef = STR
    is_required: bool = False
    is_list: bool = False

    # Generation feature gating this field, e.g. "sml-styling"
    feature: str | None = None


@dataclass
class EnumDef:
    """An enumerated simple type."""

    name: str
    definition_name: str
    # Literal value -> member name, in schema order
    members: dict[str, str] = field(default_factory=dict)
    comment: str | None = None


@dataclass
class TypeAlias:
    """A scalar simple type, generated as a module-level alias."""

    name: str
    definition_name: str
    target: TypeRef = STR
    comment: str | None = None


@dataclass
class ChoiceVariant:
    """One alternative of an element choice group."""

    tag: str  # XML local name
    xml_key: str  # Clark-notation name
    type_ref: TypeRef = STR


@dataclass
class ChoiceDef:
    """An element choice group: exactly one of several named elements."""

    name: str
    definition_name: str
    variants: list[ChoiceVariant] = field(default_factory=list)
    comment: str | None = None


@dataclass
class ClassDef:
    """A complex type."""

    name: str
    definition_name: str
    spec_name: str = ""
    fields: list[FieldDef] = field(default_factory=list)

    # Round-trip capture of unknown content
    has_extra_attrs: bool = False
    has_extra_children: bool = False
    # Text segments with their sibling positions, for classes with text content
    has_extra_text: bool = False
    # Namespace declarations of the element, for document roots
    has_extra_namespaces: bool = False

    comment: str | None = None

    @property
    def attribute_fields(self) -> list[FieldDef]:
        return [f for f in self.fields if f.kind == FieldKind.ATTRIBUTE]

    @property
    def child_fields(self) -> list[FieldDef]:
        return [f for f in self.fields if f.kind in (FieldKind.ELEMENT, FieldKind.GROUP)]

    @property
    def text_field(self) -> FieldDef | None:
        for f in self.fields:
            if f.kind == FieldKind.TEXT:
                return f
        return None


@dataclass
class RootElement:
    """A document root element and the type of its content."""

    xml_key: str
    tag: str
    type_name: str


@dataclass
class NamespaceDef:
    prefix: str
    uri: str
    is_default: bool = False
    constant: str = ""  # Python constant name, e.g. NS_W


@dataclass
class IR:
    """The complete intermediate representation."""

    namespaces: list[NamespaceDef] = field(default_factory=list)
    enums: list[EnumDef] = field(default_factory=list)
    type_aliases: list[TypeAlias] = field(default_factory=list)
    choices: list[ChoiceDef] = field(default_factory=list)
    classes: list[ClassDef] = field(default_factory=list)
    roots: list[RootElement] = field(default_factory=list)

    # Complex and choice types in definition order
    type_order: list[str] = field(default_factory=list)

    # Generation metadata
    generation_comment: str | None = None

    # Name indexes, rebuilt whenever the lists grow
    _class_index: dict[str, ClassDef] = field(default_factory=dict, init=False, repr=False, compare=False)
    _choice_index: dict[str, ChoiceDef] = field(default_factory=dict, init=False, repr=False, compare=False)

    def get_class(self, name: str) -> ClassDef | None:
        if len(self._class_index) != len(self.classes):
            self._class_index = {class_def.name: class_def for class_def in self.classes}
        return self._class_index.get(name)

    def get_choice(self, name: str) -> ChoiceDef | None:
        if len(self._choice_index) != len(self.choices):
            self._choice_index = {choice.name: choice for choice in self.choices}
        return self._choice_index.get(name)

    @property
    def type_names(self) -> list[str]:
        return [e.name for e in self.enums] + [a.name for a in self.type_aliases] + self.type_order
