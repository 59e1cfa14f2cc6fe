"""
Error types raised while compiling RNC schema text.

Lexing and parsing are fail-fast: the first error aborts the whole call and
no partial schema is returned.
"""

from __future__ import annotations


class RncError(Exception):
    """Base class for every schema compilation error."""


class LexError(RncError):
    """Raised when the lexer cannot turn the input into tokens."""

    def __init__(self, message: str, line: int):
        super().__init__(f"{message} at line {line}")
        self.line = line


class UnexpectedCharError(LexError):
    """A character that cannot start any token."""

    def __init__(self, char: str, line: int):
        super().__init__(f"unexpected character {char!r}", line)
        self.char = char


class UnterminatedStringError(LexError):
    """A quoted string that runs to the end of input."""

    def __init__(self, line: int):
        super().__init__("unterminated string", line)


class ParseError(RncError):
    """Raised when the token stream does not match the RNC grammar.

    Attributes:
        message: What the parser expected
        position: Index of the offending token
        token: Rendering of the offending token
    """

    def __init__(self, message: str, position: int, token: str):
        super().__init__(f"parse error at position {position}: {message} (found {token})")
        self.message = message
        self.position = position
        self.token = token


class ConfigError(ValueError):
    """Raised when a mapping file has the wrong shape."""
