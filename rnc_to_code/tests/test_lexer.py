import pytest

from rnc_to_code.errors import LexError, UnexpectedCharError, UnterminatedStringError
from rnc_to_code.pipeline.schema_ast import Token, TokenKind, tokenize


def kinds(text):
    return [token.kind for token in tokenize(text)]


class TestTokenize:
    def test_simple_definition(self):
        assert tokenize("w_CT_Empty = empty") == [
            Token(TokenKind.IDENT, "w_CT_Empty"),
            Token(TokenKind.EQUALS),
            Token(TokenKind.EMPTY),
            Token(TokenKind.EOF),
        ]

    def test_prefixed_attribute(self):
        assert tokenize("attribute w:val { s_ST_String }") == [
            Token(TokenKind.ATTRIBUTE),
            Token(TokenKind.IDENT, "w"),
            Token(TokenKind.COLON),
            Token(TokenKind.IDENT, "val"),
            Token(TokenKind.LBRACE),
            Token(TokenKind.IDENT, "s_ST_String"),
            Token(TokenKind.RBRACE),
            Token(TokenKind.EOF),
        ]

    def test_empty_input_is_just_eof(self):
        assert tokenize("") == [Token(TokenKind.EOF)]
        assert tokenize("   \n\t  ") == [Token(TokenKind.EOF)]

    def test_all_symbols(self):
        assert kinds("= , | & ? * + - { } ( ) :")[:-1] == [
            TokenKind.EQUALS,
            TokenKind.COMMA,
            TokenKind.PIPE,
            TokenKind.AMPERSAND,
            TokenKind.QUESTION,
            TokenKind.STAR,
            TokenKind.PLUS,
            TokenKind.MINUS,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            TokenKind.COLON,
        ]

    def test_keywords(self):
        assert kinds("namespace default element attribute empty string mixed list text")[:-1] == [
            TokenKind.NAMESPACE,
            TokenKind.DEFAULT,
            TokenKind.ELEMENT,
            TokenKind.ATTRIBUTE,
            TokenKind.EMPTY,
            TokenKind.STRING,
            TokenKind.MIXED,
            TokenKind.LIST,
            TokenKind.TEXT,
        ]

    def test_identifier_characters(self):
        tokens = tokenize("a.b-c_d9 _x")
        assert tokens[0] == Token(TokenKind.IDENT, "a.b-c_d9")
        assert tokens[1] == Token(TokenKind.IDENT, "_x")

    def test_keyword_prefix_is_an_identifier(self):
        assert tokenize("elements")[0] == Token(TokenKind.IDENT, "elements")


class TestComments:
    def test_plain_comments_are_skipped(self):
        assert kinds("# a comment\nx = empty # trailing") == [
            TokenKind.IDENT,
            TokenKind.EQUALS,
            TokenKind.EMPTY,
            TokenKind.EOF,
        ]

    def test_doc_comments_are_kept(self):
        tokens = tokenize("##   Cell content  \nx = empty")
        assert tokens[0] == Token(TokenKind.DOC_COMMENT, "Cell content")
        assert tokens[1] == Token(TokenKind.IDENT, "x")

    def test_comment_at_end_of_input(self):
        assert kinds("x = empty\n# done") == [TokenKind.IDENT, TokenKind.EQUALS, TokenKind.EMPTY, TokenKind.EOF]


class TestQuotedStrings:
    def test_escapes(self):
        tokens = tokenize(r'"a\tb\"c\\d\ne"')
        assert tokens[0] == Token(TokenKind.QUOTED_STRING, 'a\tb"c\\d\ne')

    def test_literal_newline_is_kept_and_counted(self):
        tokens = tokenize('a = "one\ntwo"\nb = c')
        assert tokens[2] == Token(TokenKind.QUOTED_STRING, "one\ntwo")
        assert tokens[2].line == 1
        assert tokens[3] == Token(TokenKind.IDENT, "b")
        assert tokens[3].line == 3

    def test_unterminated_string(self):
        with pytest.raises(UnterminatedStringError) as exc_info:
            tokenize('a = b\nc = "abc')
        assert exc_info.value.line == 2
        assert "unterminated string at line 2" in str(exc_info.value)


class TestErrors:
    def test_unexpected_character(self):
        with pytest.raises(UnexpectedCharError) as exc_info:
            tokenize("a = b\n\nc = $")
        assert exc_info.value.char == "$"
        assert exc_info.value.line == 3

    def test_errors_share_a_base_class(self):
        with pytest.raises(LexError):
            tokenize("@")

    def test_line_numbers(self):
        tokens = tokenize("a = b\nc = d\n\ne = f")
        assert [t.line for t in tokens if t.kind == TokenKind.IDENT] == [1, 1, 2, 2, 4, 4]
