"""
Phase 1 of the pipeline: turn RNC text into a flat token list.

Whitespace and ``#`` comments are skipped. ``##`` comments are kept as
DOC_COMMENT tokens so the parser can attach them to the definition that
follows. The lexer is fail-fast: the first bad character aborts it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ...errors import UnexpectedCharError, UnterminatedStringError


class TokenKind(str, Enum):
    NAMESPACE = "namespace"
    DEFAULT = "default"
    ELEMENT = "element"
    ATTRIBUTE = "attribute"
    EMPTY = "empty"
    STRING = "string"
    MIXED = "mixed"
    LIST = "list"
    TEXT = "text"
    IDENT = "ident"
    QUOTED_STRING = "quoted string"
    EQUALS = "="
    COMMA = ","
    PIPE = "|"
    AMPERSAND = "&"
    QUESTION = "?"
    STAR = "*"
    PLUS = "+"
    MINUS = "-"
    LBRACE = "{"
    RBRACE = "}"
    LPAREN = "("
    RPAREN = ")"
    COLON = ":"
    DOC_COMMENT = "doc comment"
    EOF = "end of input"


KEYWORDS: dict[str, TokenKind] = {
    "namespace": TokenKind.NAMESPACE,
    "default": TokenKind.DEFAULT,
    "element": TokenKind.ELEMENT,
    "attribute": TokenKind.ATTRIBUTE,
    "empty": TokenKind.EMPTY,
    "string": TokenKind.STRING,
    "mixed": TokenKind.MIXED,
    "list": TokenKind.LIST,
    "text": TokenKind.TEXT,
}

SYMBOLS: dict[str, TokenKind] = {
    "=": TokenKind.EQUALS,
    ",": TokenKind.COMMA,
    "|": TokenKind.PIPE,
    "&": TokenKind.AMPERSAND,
    "?": TokenKind.QUESTION,
    "*": TokenKind.STAR,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    ":": TokenKind.COLON,
}

ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str | None = None
    line: int = field(default=0, compare=False)

    @property
    def is_keyword(self) -> bool:
        return self.kind.value in KEYWORDS

    def __str__(self) -> str:
        if self.kind == TokenKind.IDENT:
            return f"identifier {self.value!r}"
        if self.kind == TokenKind.QUOTED_STRING:
            return f"string {self.value!r}"
        if self.kind in SYMBOLS.values():
            return f"'{self.kind.value}'"
        return self.kind.value


class Lexer:
    """Single-pass scanner over RNC source text."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """
        Scan the whole input.

        Returns:
            Tokens in source order, terminated by a single EOF token

        Raises:
            UnexpectedCharError: On a character that cannot start a token
            UnterminatedStringError: On a quoted string missing its closing quote
        """
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "\n":
                self.line += 1
                self.pos += 1
            elif ch.isspace():
                self.pos += 1
            elif ch == "#":
                self._comment()
            elif ch == '"':
                self._quoted_string()
            elif ch in SYMBOLS:
                self.tokens.append(Token(SYMBOLS[ch], line=self.line))
                self.pos += 1
            elif ch.isalpha() or ch == "_":
                self._identifier()
            else:
                raise UnexpectedCharError(ch, self.line)
        self.tokens.append(Token(TokenKind.EOF, line=self.line))
        return self.tokens

    def _comment(self) -> None:
        end = self.text.find("\n", self.pos)
        if end == -1:
            end = len(self.text)
        body = self.text[self.pos : end]
        if body.startswith("##"):
            self.tokens.append(Token(TokenKind.DOC_COMMENT, body[2:].strip(), self.line))
        # The newline itself is consumed by the main loop to keep line counts right
        self.pos = end

    def _quoted_string(self) -> None:
        start_line = self.line
        self.pos += 1
        chars: list[str] = []
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == '"':
                self.pos += 1
                self.tokens.append(Token(TokenKind.QUOTED_STRING, "".join(chars), start_line))
                return
            if ch == "\\" and self.pos + 1 < len(text):
                escaped = text[self.pos + 1]
                chars.append(ESCAPES.get(escaped, escaped))
                if escaped == "\n":
                    self.line += 1
                self.pos += 2
                continue
            if ch == "\n":
                self.line += 1
            chars.append(ch)
            self.pos += 1
        raise UnterminatedStringError(start_line)

    def _identifier(self) -> None:
        start = self.pos
        text = self.text
        self.pos += 1
        while self.pos < len(text) and (text[self.pos].isalnum() or text[self.pos] in "_-."):
            self.pos += 1
        word = text[start : self.pos]
        kind = KEYWORDS.get(word)
        if kind is not None:
            self.tokens.append(Token(kind, line=self.line))
        else:
            self.tokens.append(Token(TokenKind.IDENT, word, self.line))


def tokenize(text: str) -> list[Token]:
    """Tokenize RNC source text. See ``Lexer.tokenize``."""
    return Lexer(text).tokenize()
