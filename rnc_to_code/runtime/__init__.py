"""
Support library imported by generated parser and serializer modules.
"""

from .errors import (
    InvalidValueError,
    MissingAttributeError,
    MissingElementError,
    UnexpectedElementError,
    UnexpectedEofError,
    XmlParseError,
    XmlSerializeError,
)
from .raw_xml import PositionedNode, PositionedText, RawXmlElement, RawXmlNode
from .reader import EndElement, StartElement, Text, XmlReader
from .writer import ChildCursor, XmlWriter

__all__ = [
    "ChildCursor",
    "EndElement",
    "InvalidValueError",
    "MissingAttributeError",
    "MissingElementError",
    "PositionedNode",
    "PositionedText",
    "RawXmlElement",
    "RawXmlNode",
    "StartElement",
    "Text",
    "UnexpectedElementError",
    "UnexpectedEofError",
    "XmlParseError",
    "XmlReader",
    "XmlSerializeError",
    "XmlWriter",
]
