"""
AST (Abstract Syntax Tree) node definitions for RELAX NG Compact schemas.

These nodes represent the parsed structure of an RNC file before any
classification or language-specific processing. Patterns form a closed set
of variants; consumers dispatch on the concrete class.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class QName:
    """A possibly prefixed XML name such as ``w:val``."""

    prefix: str | None
    local: str

    def __str__(self) -> str:
        return f"{self.prefix}:{self.local}" if self.prefix else self.local


# Name classes


@dataclass(frozen=True)
class Name:
    name: QName


@dataclass(frozen=True)
class AnyName:
    except_: NameClass | None = None


@dataclass(frozen=True)
class NsName:
    prefix: str
    except_: NameClass | None = None


@dataclass(frozen=True)
class NameChoice:
    choices: tuple[NameClass, ...]


NameClass = Name | AnyName | NsName | NameChoice


@dataclass(frozen=True)
class DatatypeParam:
    """An xsd facet such as ``length = "4"``."""

    name: str
    value: str


# Patterns


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Text:
    pass


@dataclass(frozen=True)
class Any:
    pass


@dataclass(frozen=True)
class Ref:
    name: str


@dataclass(frozen=True)
class Element:
    name: QName
    pattern: Pattern
    # Set only for wildcard names; ``name.local`` is then "*"
    name_class: NameClass | None = None


@dataclass(frozen=True)
class Attribute:
    name: QName
    pattern: Pattern
    name_class: NameClass | None = None


@dataclass(frozen=True)
class Sequence:
    items: tuple[Pattern, ...]


@dataclass(frozen=True)
class Choice:
    items: tuple[Pattern, ...]


@dataclass(frozen=True)
class Interleave:
    items: tuple[Pattern, ...]


@dataclass(frozen=True)
class Optional:
    pattern: Pattern


@dataclass(frozen=True)
class ZeroOrMore:
    pattern: Pattern


@dataclass(frozen=True)
class OneOrMore:
    pattern: Pattern


@dataclass(frozen=True)
class StringLiteral:
    value: str


@dataclass(frozen=True)
class Datatype:
    library: str
    name: str
    params: tuple[DatatypeParam, ...] = ()


@dataclass(frozen=True)
class Group:
    pattern: Pattern


@dataclass(frozen=True)
class Mixed:
    pattern: Pattern


@dataclass(frozen=True)
class List:
    pattern: Pattern


Pattern = (
    Empty
    | Ref
    | Element
    | Attribute
    | Sequence
    | Choice
    | Interleave
    | Optional
    | ZeroOrMore
    | OneOrMore
    | StringLiteral
    | Datatype
    | Group
    | Mixed
    | List
    | Text
    | Any
)

# Variants whose only child is ``pattern``
WRAPPER_PATTERNS = (Optional, ZeroOrMore, OneOrMore, Group, Mixed, List)
# Variants holding an n-ary ``items`` tuple
COMPOSITE_PATTERNS = (Sequence, Choice, Interleave)


@dataclass(frozen=True)
class Namespace:
    prefix: str
    uri: str
    is_default: bool = False


@dataclass(frozen=True)
class Definition:
    name: str
    pattern: Pattern
    doc_comment: str | None = None


@dataclass(frozen=True)
class Schema:
    """A parsed RNC file: namespaces and definitions in declaration order."""

    namespaces: tuple[Namespace, ...] = ()
    definitions: tuple[Definition, ...] = ()
    _index: dict[str, Definition] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_index", {d.name: d for d in self.definitions})

    def get(self, name: str) -> Definition | None:
        """Look up a definition by name."""
        return self._index.get(name)

    def definition_map(self) -> dict[str, Definition]:
        return dict(self._index)

    def namespace_uri(self, prefix: str | None) -> str | None:
        """URI bound to ``prefix``; ``None`` resolves to the default namespace."""
        if prefix is None:
            for ns in self.namespaces:
                if ns.is_default:
                    return ns.uri
            return None
        if prefix == "xml":
            return XML_NAMESPACE
        for ns in self.namespaces:
            if ns.prefix == prefix:
                return ns.uri
        return None


XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
