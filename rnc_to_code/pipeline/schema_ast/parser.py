"""
Phase 2 of the pipeline: recursive-descent parser from tokens to a Schema AST.

Pattern precedence, lowest to highest: interleave (``&``), choice (``|``),
sequence (``,``), postfix (``? * +``), primary. Each binary level folds
operands of equal precedence into one flat tuple.
"""

from __future__ import annotations

import logging

from ...errors import ParseError
from . import nodes as rnc
from .lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

# Binary operator levels, lowest precedence first
_BINARY_LEVELS: list[tuple[TokenKind, type]] = [
    (TokenKind.AMPERSAND, rnc.Interleave),
    (TokenKind.PIPE, rnc.Choice),
    (TokenKind.COMMA, rnc.Sequence),
]

_POSTFIX: dict[TokenKind, type] = {
    TokenKind.QUESTION: rnc.Optional,
    TokenKind.STAR: rnc.ZeroOrMore,
    TokenKind.PLUS: rnc.OneOrMore,
}


class Parser:
    """Parse a token list produced by ``tokenize`` into a ``Schema``."""

    def __init__(self, tokens: list[Token]):
        # Doc comments are pulled out of the stream and remembered against the
        # index of the token they precede.
        self.tokens: list[Token] = []
        self.doc_comments: dict[int, str] = {}
        pending: list[str] = []
        for token in tokens:
            if token.kind == TokenKind.DOC_COMMENT:
                pending.append(token.value or "")
                continue
            if pending:
                self.doc_comments[len(self.tokens)] = "\n".join(pending)
                pending = []
            self.tokens.append(token)
        if not self.tokens or self.tokens[-1].kind != TokenKind.EOF:
            self.tokens.append(Token(TokenKind.EOF))
        self.pos = 0

    def parse(self) -> rnc.Schema:
        """
        Parse the whole token list.

        Returns:
            The parsed schema

        Raises:
            ParseError: On the first token that does not fit the grammar
        """
        namespaces: list[rnc.Namespace] = []
        definitions: list[rnc.Definition] = []

        while not self._at(TokenKind.EOF):
            if self._at(TokenKind.NAMESPACE) or self._at(TokenKind.DEFAULT):
                namespaces.append(self._parse_namespace())
            elif self._at(TokenKind.IDENT):
                definitions.append(self._parse_definition())
            else:
                raise self._error("expected namespace or definition")

        logger.debug("Parsed %d namespaces and %d definitions", len(namespaces), len(definitions))
        return rnc.Schema(namespaces=tuple(namespaces), definitions=tuple(definitions))

    # Top level

    def _parse_namespace(self) -> rnc.Namespace:
        is_default = self._accept(TokenKind.DEFAULT)
        self._expect(TokenKind.NAMESPACE)
        # `default namespace = "uri"` has no prefix
        prefix = "" if self._at(TokenKind.EQUALS) else self._expect_name()
        self._expect(TokenKind.EQUALS)
        uri = self._expect_quoted()
        return rnc.Namespace(prefix=prefix, uri=uri, is_default=is_default)

    def _parse_definition(self) -> rnc.Definition:
        doc_comment = self.doc_comments.get(self.pos)
        name = self._expect(TokenKind.IDENT).value
        self._expect(TokenKind.EQUALS)
        pattern = self.parse_pattern()
        return rnc.Definition(name=name, pattern=pattern, doc_comment=doc_comment)

    # Patterns

    def parse_pattern(self) -> rnc.Pattern:
        return self._parse_binary(0)

    def _parse_binary(self, level: int) -> rnc.Pattern:
        if level == len(_BINARY_LEVELS):
            return self._parse_postfix()
        operator, node_type = _BINARY_LEVELS[level]
        items = [self._parse_binary(level + 1)]
        while self._accept(operator):
            items.append(self._parse_binary(level + 1))
        if len(items) == 1:
            return items[0]
        return node_type(tuple(items))

    def _parse_postfix(self) -> rnc.Pattern:
        pattern = self._parse_primary()
        while self._peek().kind in _POSTFIX:
            pattern = _POSTFIX[self._advance().kind](pattern)
        return pattern

    def _parse_primary(self) -> rnc.Pattern:
        token = self._peek()
        kind = token.kind

        if kind == TokenKind.EMPTY:
            self._advance()
            return rnc.Empty()

        if kind == TokenKind.STRING:
            self._advance()
            if self._at(TokenKind.QUOTED_STRING):
                return rnc.StringLiteral(self._expect_quoted())
            # A bare `string` is the builtin any-string datatype
            return rnc.Datatype(library="", name="string")

        if kind == TokenKind.ELEMENT:
            self._advance()
            name, name_class = self._parse_named_particle()
            return rnc.Element(name=name, pattern=self._parse_braced(), name_class=name_class)

        if kind == TokenKind.ATTRIBUTE:
            self._advance()
            name, name_class = self._parse_named_particle()
            return rnc.Attribute(name=name, pattern=self._parse_braced(), name_class=name_class)

        if kind == TokenKind.MIXED:
            self._advance()
            return rnc.Mixed(self._parse_braced())

        if kind == TokenKind.LIST:
            self._advance()
            return rnc.List(self._parse_braced())

        if kind == TokenKind.TEXT:
            self._advance()
            return rnc.Text()

        if kind == TokenKind.QUOTED_STRING:
            return rnc.StringLiteral(self._expect_quoted())

        if kind == TokenKind.LPAREN:
            self._advance()
            inner = self.parse_pattern()
            self._expect(TokenKind.RPAREN)
            return rnc.Group(inner)

        if kind == TokenKind.IDENT:
            name = self._advance().value
            if self._accept(TokenKind.COLON):
                return self._parse_datatype(name)
            return rnc.Ref(name)

        raise self._error("expected pattern")

    def _parse_braced(self) -> rnc.Pattern:
        self._expect(TokenKind.LBRACE)
        inner = self.parse_pattern()
        self._expect(TokenKind.RBRACE)
        return inner

    def _parse_datatype(self, library: str) -> rnc.Datatype:
        type_name = self._expect_name()
        if self._at(TokenKind.LBRACE):
            return rnc.Datatype(library=library, name=type_name, params=self._parse_datatype_params())
        if self._at(TokenKind.QUOTED_STRING):
            # Datatype value pattern: xsd:int "255"
            value = self._expect_quoted()
            return rnc.Datatype(library=library, name=type_name, params=(rnc.DatatypeParam("pattern", value),))
        return rnc.Datatype(library=library, name=type_name)

    def _parse_datatype_params(self) -> tuple[rnc.DatatypeParam, ...]:
        self._expect(TokenKind.LBRACE)
        params = []
        while not self._at(TokenKind.RBRACE):
            name = self._expect_name()
            self._expect(TokenKind.EQUALS)
            params.append(rnc.DatatypeParam(name=name, value=self._expect_quoted()))
        self._expect(TokenKind.RBRACE)
        return tuple(params)

    # Names

    def _parse_named_particle(self) -> tuple[rnc.QName, rnc.NameClass | None]:
        """Parse the name of an element or attribute.

        Plain names return ``(qname, None)``. Wildcards return a placeholder
        QName whose local part is ``*`` together with the parsed name class.
        """
        name_class = self._parse_name_class()
        if isinstance(name_class, rnc.Name):
            return name_class.name, None
        prefix = name_class.prefix if isinstance(name_class, rnc.NsName) else None
        return rnc.QName(prefix, "*"), name_class

    def _parse_name_class(self) -> rnc.NameClass:
        left = self._parse_name_class_primary()
        if self._accept(TokenKind.MINUS):
            right = self._parse_name_class_primary()
            if isinstance(left, rnc.AnyName):
                return rnc.AnyName(except_=right)
            if isinstance(left, rnc.NsName):
                return rnc.NsName(prefix=left.prefix, except_=right)
            raise self._error("name class subtraction needs a wildcard on the left")
        return left

    def _parse_name_class_primary(self) -> rnc.NameClass:
        if self._accept(TokenKind.STAR):
            return rnc.AnyName()

        if self._accept(TokenKind.LPAREN):
            choices = [self._parse_name_class()]
            while self._accept(TokenKind.PIPE):
                choices.append(self._parse_name_class())
            self._expect(TokenKind.RPAREN)
            if len(choices) == 1:
                return choices[0]
            return rnc.NameChoice(tuple(choices))

        first = self._expect_name()
        if not self._accept(TokenKind.COLON):
            return rnc.Name(rnc.QName(None, first))
        if self._accept(TokenKind.STAR):
            return rnc.NsName(prefix=first)
        return rnc.Name(rnc.QName(first, self._expect_name()))

    # Token helpers

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _at(self, kind: TokenKind) -> bool:
        return self.tokens[self.pos].kind == kind

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != TokenKind.EOF:
            self.pos += 1
        return token

    def _accept(self, kind: TokenKind) -> bool:
        if self._at(kind):
            self._advance()
            return True
        return False

    def _expect(self, kind: TokenKind) -> Token:
        if not self._at(kind):
            raise self._error(f"expected {kind.value}")
        return self._advance()

    def _expect_quoted(self) -> str:
        return self._expect(TokenKind.QUOTED_STRING).value

    def _expect_name(self) -> str:
        """Accept an identifier or a keyword used as a name (e.g. ``w:default``)."""
        token = self._peek()
        if token.kind == TokenKind.IDENT:
            return self._advance().value
        if token.is_keyword:
            return self._advance().kind.value
        raise self._error("expected name")

    def _error(self, message: str) -> ParseError:
        return ParseError(message, self.pos, str(self._peek()))


def parse(tokens: list[Token]) -> rnc.Schema:
    """Parse tokens into a Schema. See ``Parser.parse``."""
    return Parser(tokens).parse()


def parse_rnc(text: str) -> rnc.Schema:
    """
    Tokenize and parse RNC source text in one step.

    Args:
        text: RNC schema source

    Returns:
        The parsed schema

    Raises:
        LexError: If the text cannot be tokenized
        ParseError: If the tokens do not form a valid schema
    """
    return Parser(tokenize(text)).parse()
