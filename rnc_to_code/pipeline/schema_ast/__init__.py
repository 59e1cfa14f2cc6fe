"""
Schema AST module.

Contains the RNC lexer, parser and AST node definitions.
"""

from __future__ import annotations

from .lexer import Token, TokenKind, tokenize
from .merge import merge_schemas
from .nodes import Definition, Namespace, QName, Schema
from .parser import Parser, parse, parse_rnc

__all__ = [
    "Token",
    "TokenKind",
    "tokenize",
    "Parser",
    "parse",
    "parse_rnc",
    "merge_schemas",
    "Schema",
    "Namespace",
    "Definition",
    "QName",
]
