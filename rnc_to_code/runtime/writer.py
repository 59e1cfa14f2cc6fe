"""
XML event sink for generated serializers.

Start/text/end calls build an lxml tree, which is serialized once the root
element is closed.
"""

from __future__ import annotations

from collections.abc import Iterable

from lxml import etree

from .errors import XmlSerializeError
from .raw_xml import PositionedNode, PositionedText, RawXmlElement


class XmlWriter:
    """Builds one document from serializer calls."""

    def __init__(self, namespaces: dict[str, str] | None = None):
        """
        Args:
            namespaces: Prefix to URI bindings declared on the root element;
                the empty prefix is the default namespace
        """
        self.nsmap = {(prefix or None): uri for prefix, uri in (namespaces or {}).items() if prefix != "xml"}
        self.root: etree._Element | None = None
        self._stack: list[etree._Element] = []

    def start(self, name: str, attributes: Iterable[tuple[str, str]] = (), namespaces: dict[str, str] | None = None) -> None:
        """
        Open an element.

        Args:
            name: Clark name of the element
            attributes: Attributes in document order
            namespaces: Prefix to URI declarations to make on this element, as
                read from the input; on the root they take precedence over the
                schema bindings
        """
        declared = {(prefix or None): uri for prefix, uri in (namespaces or {}).items() if prefix != "xml"}
        if self._stack:
            parent = self._stack[-1]
            if declared:
                scope = parent.nsmap
                declared = {prefix: uri for prefix, uri in declared.items() if scope.get(prefix) != uri}
            element = etree.SubElement(parent, name, nsmap=declared or None)
        elif self.root is not None:
            raise XmlSerializeError(f"document already has a root element; cannot start {name}")
        else:
            element = etree.Element(name, nsmap=self._root_nsmap(declared))
            self.root = element
        for key, value in attributes:
            element.set(key, value)
        self._stack.append(element)

    def _root_nsmap(self, declared: dict[str | None, str]) -> dict[str | None, str]:
        nsmap = dict(declared)
        bound = set(nsmap.values())
        for prefix, uri in self.nsmap.items():
            if prefix not in nsmap and uri not in bound:
                nsmap[prefix] = uri
        return nsmap

    def text(self, content: str) -> None:
        if not self._stack:
            raise XmlSerializeError("text outside of an element")
        element = self._stack[-1]
        if len(element):
            last = element[-1]
            last.tail = (last.tail or "") + content
        else:
            element.text = (element.text or "") + content

    def end(self, name: str) -> None:
        if not self._stack or self._stack[-1].tag != name:
            open_name = self._stack[-1].tag if self._stack else None
            raise XmlSerializeError(f"cannot end {name}; open element is {open_name}")
        self._stack.pop()

    def empty(self, name: str, attributes: Iterable[tuple[str, str]] = (), namespaces: dict[str, str] | None = None) -> None:
        self.start(name, attributes, namespaces)
        self.end(name)

    def text_element(self, name: str, content: str) -> None:
        self.start(name)
        self.text(content)
        self.end(name)

    def write_raw(self, node: RawXmlElement) -> None:
        node.write_to(self)

    def to_bytes(self, xml_declaration: bool = True) -> bytes:
        if self.root is None or self._stack:
            raise XmlSerializeError("document is incomplete")
        if not xml_declaration:
            return etree.tostring(self.root, encoding="UTF-8", xml_declaration=False)
        return etree.tostring(self.root, encoding="UTF-8", xml_declaration=True, standalone=True)


class ChildCursor:
    """Puts captured children back at their original sibling positions.

    Serializers call ``flush`` before writing each known child and
    ``advance`` after it, then ``finish`` once all known children are out.
    The index counts every element child written so far, captured or known.

    Text content is interleaved the same way when the recorded runs still
    spell the element's current text. Otherwise the text was set or changed
    after parsing, and it is written ahead of all children.
    """

    def __init__(
        self,
        writer: XmlWriter,
        extras: Iterable[PositionedNode] = (),
        text: str | None = None,
        runs: Iterable[PositionedText] = (),
    ):
        self.writer = writer
        runs = list(runs)
        if text is None:
            runs = []
        elif "".join(run.text for run in runs) != text:
            writer.text(text)
            runs = []
        # A text run goes before the element child at the same position
        entries: list[tuple[int, int, PositionedNode | PositionedText]] = [(run.position, 0, run) for run in runs]
        entries.extend((node.position, 1, node) for node in extras)
        self.pending = [entry for _, _, entry in sorted(entries, key=lambda entry: entry[:2])]
        self.index = 0
        self._next = 0

    def _write_next(self) -> None:
        entry = self.pending[self._next]
        self._next += 1
        if isinstance(entry, PositionedText):
            self.writer.text(entry.text)
        else:
            entry.node.write_to(self.writer)
            self.index += 1

    def flush(self) -> None:
        while self._next < len(self.pending) and self.pending[self._next].position <= self.index:
            self._write_next()

    def advance(self) -> None:
        self.index += 1

    def finish(self) -> None:
        while self._next < len(self.pending):
            self._write_next()
