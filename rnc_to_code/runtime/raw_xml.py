"""
Verbatim XML captured by generated parsers for content the model does not know.

Captured elements and text runs keep their sibling position so serializers
can put them back where they were.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .reader import StartElement, XmlReader
    from .writer import XmlWriter


@dataclass
class RawXmlElement:
    """An element subtree kept as-is."""

    name: str  # Clark notation
    attributes: list[tuple[str, str]] = field(default_factory=list)
    children: list[RawXmlNode] = field(default_factory=list)
    # Namespace declarations made on this element, prefix "" for the default
    namespaces: dict[str, str] = field(default_factory=dict, compare=False)

    @classmethod
    def from_reader(cls, reader: XmlReader, start: StartElement) -> RawXmlElement:
        """Consume events up to the end of ``start`` and build the subtree."""
        from .reader import EndElement, Text

        element = cls(name=start.name, attributes=list(start.attributes), namespaces=dict(start.namespaces))
        while True:
            event = reader.next()
            if isinstance(event, EndElement):
                return element
            if isinstance(event, Text):
                element.children.append(event.content)
            else:
                element.children.append(cls.from_reader(reader, event))

    def write_to(self, writer: XmlWriter) -> None:
        writer.start(self.name, self.attributes, self.namespaces)
        for child in self.children:
            if isinstance(child, str):
                writer.text(child)
            else:
                child.write_to(writer)
        writer.end(self.name)

    @property
    def local_name(self) -> str:
        return self.name.rpartition("}")[2]

    def text(self) -> str:
        """Concatenated text of this element and its descendants."""
        parts = []
        for child in self.children:
            parts.append(child if isinstance(child, str) else child.text())
        return "".join(parts)


# Text children are plain strings
RawXmlNode = RawXmlElement | str


@dataclass
class PositionedNode:
    """A captured child element and its index among its parent's element children."""

    position: int
    node: RawXmlElement


@dataclass
class PositionedText:
    """A run of text and the number of element children before it."""

    position: int
    text: str
