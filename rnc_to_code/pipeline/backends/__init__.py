"""
Code generation backends for the three generated modules.
"""

from __future__ import annotations

from .base import CodeBackend
from .parsers_backend import ParsersBackend
from .serializers_backend import SerializersBackend
from .types_backend import TypesBackend

__all__ = [
    "CodeBackend",
    "ParsersBackend",
    "SerializersBackend",
    "TypesBackend",
]
