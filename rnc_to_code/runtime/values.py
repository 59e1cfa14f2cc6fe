"""
Conversions between attribute/text values and Python scalars.

Each ``parse_*`` helper raises ``InvalidValueError`` naming the attribute or
element it was reading; each ``format_*`` helper is its inverse.
"""

from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import TypeVar

from .errors import InvalidValueError

E = TypeVar("E", bound=Enum)

_TRUE = ("true", "1")
_FALSE = ("false", "0")


def parse_bool(raw: str, name: str) -> bool:
    value = raw.strip()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise InvalidValueError(name, raw, "xsd:boolean")


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def parse_int(raw: str, name: str) -> int:
    try:
        return int(raw.strip())
    except ValueError as e:
        raise InvalidValueError(name, raw, "integer") from e


def format_int(value: int) -> str:
    return str(value)


def parse_float(raw: str, name: str) -> float:
    try:
        return float(raw.strip())
    except ValueError as e:
        raise InvalidValueError(name, raw, "number") from e


def format_float(value: float) -> str:
    # Whole numbers are written without a trailing ".0"
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def parse_hex(raw: str, name: str) -> bytes:
    try:
        return bytes.fromhex(raw.strip())
    except ValueError as e:
        raise InvalidValueError(name, raw, "xsd:hexBinary") from e


def format_hex(value: bytes) -> str:
    return value.hex().upper()


def parse_base64(raw: str, name: str) -> bytes:
    try:
        return base64.b64decode(raw.strip(), validate=True)
    except binascii.Error as e:
        raise InvalidValueError(name, raw, "xsd:base64Binary") from e


def format_base64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


def parse_enum(enum_type: type[E], raw: str, name: str) -> E:
    try:
        return enum_type(raw)
    except ValueError as e:
        expected = " | ".join(repr(member.value) for member in enum_type)
        raise InvalidValueError(name, raw, expected) from e


def format_enum(value: Enum) -> str:
    return value.value
