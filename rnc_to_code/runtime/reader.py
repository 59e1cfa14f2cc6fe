"""
XML event source for generated parsers.

Documents are parsed with lxml and replayed as a flat stream of start, text
and end events. Names use Clark notation (``{uri}local``) and attributes keep
document order.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from lxml import etree

from .errors import UnexpectedEofError
from .raw_xml import RawXmlElement


@dataclass(frozen=True)
class StartElement:
    name: str
    attributes: tuple[tuple[str, str], ...] = ()
    # Prefix -> URI declared on this element; the default namespace has prefix ""
    namespaces: tuple[tuple[str, str], ...] = field(default=(), compare=False)

    @property
    def local_name(self) -> str:
        return self.name.rpartition("}")[2]


@dataclass(frozen=True)
class EndElement:
    name: str


@dataclass(frozen=True)
class Text:
    content: str


Event = StartElement | EndElement | Text


def _walk(element: etree._Element, inherited: dict[str | None, str] | None = None) -> Iterator[Event]:
    scope = element.nsmap
    inherited = inherited or {}
    declared = tuple((prefix or "", uri) for prefix, uri in scope.items() if inherited.get(prefix) != uri)
    yield StartElement(element.tag, tuple(element.attrib.items()), declared)
    if element.text:
        yield Text(element.text)
    for child in element:
        # Comments and processing instructions have a non-string tag
        if isinstance(child.tag, str):
            yield from _walk(child, scope)
        if child.tail:
            yield Text(child.tail)
    yield EndElement(element.tag)


class XmlReader:
    """Pull-style reader over the events of one document."""

    def __init__(self, root: etree._Element):
        self.namespaces: dict[str | None, str] = dict(root.nsmap)
        self._events = _walk(root)

    @classmethod
    def from_bytes(cls, data: bytes | str) -> XmlReader:
        """
        Parse a document.

        Args:
            data: Document bytes, or text without an encoding declaration

        Returns:
            A reader positioned before the root start event

        Raises:
            lxml.etree.XMLSyntaxError: If the document is not well-formed
        """
        if isinstance(data, str):
            data = data.encode("utf-8")
        parser = etree.XMLParser(resolve_entities=False, huge_tree=True)
        return cls(etree.fromstring(data, parser))

    def next(self) -> Event:
        try:
            return next(self._events)
        except StopIteration:
            raise UnexpectedEofError() from None

    def next_start(self) -> StartElement:
        """Return the next start event, skipping text."""
        while True:
            event = self.next()
            if isinstance(event, StartElement):
                return event
            if isinstance(event, EndElement):
                raise UnexpectedEofError()

    def skip(self, start: StartElement) -> None:
        """Consume events up to the end of ``start``."""
        depth = 0
        while True:
            event = self.next()
            if isinstance(event, StartElement):
                depth += 1
            elif isinstance(event, EndElement):
                if depth == 0:
                    return
                depth -= 1

    def read_text(self, start: StartElement) -> str:
        """Consume up to the end of ``start`` and return its direct text content."""
        parts: list[str] = []
        while True:
            event = self.next()
            if isinstance(event, Text):
                parts.append(event.content)
            elif isinstance(event, StartElement):
                self.skip(event)
            else:
                return "".join(parts)

    def read_empty(self, start: StartElement) -> bool:
        """Consume a marker element; its presence reads as True."""
        self.skip(start)
        return True

    def capture(self, start: StartElement) -> RawXmlElement:
        """Consume up to the end of ``start`` and keep the subtree verbatim."""
        return RawXmlElement.from_reader(self, start)
