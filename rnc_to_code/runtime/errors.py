"""
Errors raised by generated parsers and serializers.
"""

from __future__ import annotations


class XmlParseError(Exception):
    """Base class for errors while reading a document into generated types."""


class UnexpectedElementError(XmlParseError):
    def __init__(self, name: str, context: str):
        super().__init__(f"unexpected element {name} in {context}")
        self.name = name
        self.context = context


class MissingAttributeError(XmlParseError):
    def __init__(self, name: str, element: str):
        super().__init__(f"missing required attribute {name} on {element}")
        self.name = name
        self.element = element


class MissingElementError(XmlParseError):
    def __init__(self, name: str, element: str):
        super().__init__(f"missing required element {name} in {element}")
        self.name = name
        self.element = element


class InvalidValueError(XmlParseError):
    def __init__(self, name: str, value: str, expected: str):
        super().__init__(f"invalid value {value!r} for {name}: expected {expected}")
        self.name = name
        self.value = value
        self.expected = expected


class UnexpectedEofError(XmlParseError):
    def __init__(self):
        super().__init__("unexpected end of document")


class XmlSerializeError(Exception):
    """Raised when a value cannot be written back to XML."""
