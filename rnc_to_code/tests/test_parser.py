import pytest

from rnc_to_code.errors import ParseError, RncError
from rnc_to_code.pipeline.schema_ast import merge_schemas, parse_rnc
from rnc_to_code.pipeline.schema_ast import nodes as rnc


def pattern_of(text):
    """Parse ``x = <text>`` and return the pattern."""
    return parse_rnc(f"x = {text}").definitions[0].pattern


class TestDefinitions:
    def test_empty_definition(self):
        schema = parse_rnc("w_CT_Empty = empty")
        assert len(schema.definitions) == 1
        assert schema.definitions[0].name == "w_CT_Empty"
        assert schema.definitions[0].pattern == rnc.Empty()

    def test_optional_attribute(self):
        schema = parse_rnc("w_CT_OnOff = attribute w:val { s_ST_OnOff }?")
        assert schema.definitions[0].pattern == rnc.Optional(
            rnc.Attribute(name=rnc.QName("w", "val"), pattern=rnc.Ref("s_ST_OnOff"))
        )

    def test_definitions_keep_order(self):
        schema = parse_rnc("b = empty\na = empty\nc = empty")
        assert [d.name for d in schema.definitions] == ["b", "a", "c"]
        assert schema.get("a").pattern == rnc.Empty()
        assert schema.get("missing") is None

    def test_doc_comment_is_attached(self):
        schema = parse_rnc("## A cell\n## with a value\nx = empty\ny = empty")
        assert schema.get("x").doc_comment == "A cell\nwith a value"
        assert schema.get("y").doc_comment is None


class TestNamespaces:
    def test_default_prefixed_namespace(self):
        schema = parse_rnc('default namespace w = "http://example.com"')
        assert schema.namespaces == (rnc.Namespace(prefix="w", uri="http://example.com", is_default=True),)

    def test_unprefixed_default_namespace(self):
        schema = parse_rnc('default namespace = "http://example.com"')
        assert schema.namespaces == (rnc.Namespace(prefix="", uri="http://example.com", is_default=True),)

    def test_namespace_lookup(self):
        schema = parse_rnc('default namespace = "urn:d"\nnamespace r = "urn:r"')
        assert schema.namespace_uri(None) == "urn:d"
        assert schema.namespace_uri("r") == "urn:r"
        assert schema.namespace_uri("xml") == rnc.XML_NAMESPACE
        assert schema.namespace_uri("nope") is None


class TestPatterns:
    def test_choice_is_flattened(self):
        pattern = pattern_of('string "a" | string "b" | string "c"')
        assert pattern == rnc.Choice((rnc.StringLiteral("a"), rnc.StringLiteral("b"), rnc.StringLiteral("c")))
        assert len(pattern.items) == 3

    def test_sequence_and_interleave_are_flattened(self):
        assert pattern_of("a, b, c") == rnc.Sequence((rnc.Ref("a"), rnc.Ref("b"), rnc.Ref("c")))
        assert pattern_of("a & b & c") == rnc.Interleave((rnc.Ref("a"), rnc.Ref("b"), rnc.Ref("c")))

    def test_precedence(self):
        assert pattern_of("b & c | d, e") == rnc.Interleave(
            (
                rnc.Ref("b"),
                rnc.Choice((rnc.Ref("c"), rnc.Sequence((rnc.Ref("d"), rnc.Ref("e"))))),
            )
        )

    def test_group_keeps_parentheses(self):
        assert pattern_of("(a | b), c") == rnc.Sequence(
            (rnc.Group(rnc.Choice((rnc.Ref("a"), rnc.Ref("b")))), rnc.Ref("c"))
        )

    def test_postfix_operators(self):
        assert pattern_of("a?") == rnc.Optional(rnc.Ref("a"))
        assert pattern_of("a*") == rnc.ZeroOrMore(rnc.Ref("a"))
        assert pattern_of("a+") == rnc.OneOrMore(rnc.Ref("a"))
        assert pattern_of("(a)*?") == rnc.Optional(rnc.ZeroOrMore(rnc.Group(rnc.Ref("a"))))

    def test_element(self):
        assert pattern_of("element w:p { w_CT_P }") == rnc.Element(name=rnc.QName("w", "p"), pattern=rnc.Ref("w_CT_P"))

    def test_unprefixed_name(self):
        assert pattern_of("attribute val { text }") == rnc.Attribute(name=rnc.QName(None, "val"), pattern=rnc.Text())

    def test_keyword_as_name_component(self):
        assert pattern_of("attribute w:default { xsd:boolean }") == rnc.Attribute(
            name=rnc.QName("w", "default"),
            pattern=rnc.Datatype(library="xsd", name="boolean"),
        )
        assert pattern_of("element w:empty { empty }").name == rnc.QName("w", "empty")

    def test_datatype_with_params(self):
        assert pattern_of('xsd:string { minLength = "1" maxLength = "255" }') == rnc.Datatype(
            library="xsd",
            name="string",
            params=(rnc.DatatypeParam("minLength", "1"), rnc.DatatypeParam("maxLength", "255")),
        )

    def test_datatype_value(self):
        assert pattern_of('xsd:int "255"') == rnc.Datatype(
            library="xsd", name="int", params=(rnc.DatatypeParam("pattern", "255"),)
        )

    def test_bare_string_and_literals(self):
        assert pattern_of("string") == rnc.Datatype(library="", name="string")
        assert pattern_of('"auto"') == rnc.StringLiteral("auto")

    def test_mixed_list_text(self):
        assert pattern_of("mixed { element b { empty }? }") == rnc.Mixed(
            rnc.Optional(rnc.Element(name=rnc.QName(None, "b"), pattern=rnc.Empty()))
        )
        assert pattern_of("list { xsd:int+ }") == rnc.List(rnc.OneOrMore(rnc.Datatype("xsd", "int")))
        assert pattern_of("text") == rnc.Text()


class TestNameClasses:
    def test_any_name(self):
        pattern = pattern_of("element * { text }")
        assert pattern.name == rnc.QName(None, "*")
        assert pattern.name_class == rnc.AnyName()

    def test_namespace_wildcard(self):
        pattern = pattern_of("attribute r:* { text }")
        assert pattern.name == rnc.QName("r", "*")
        assert pattern.name_class == rnc.NsName(prefix="r")

    def test_except(self):
        pattern = pattern_of("attribute * - (w:val | w:id) { text }")
        assert pattern.name_class == rnc.AnyName(
            except_=rnc.NameChoice((rnc.Name(rnc.QName("w", "val")), rnc.Name(rnc.QName("w", "id"))))
        )

    def test_plain_name_has_no_name_class(self):
        assert pattern_of("element w:p { empty }").name_class is None


class TestErrors:
    def test_missing_pattern(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rnc("a = ")
        error = exc_info.value
        assert error.message == "expected pattern"
        assert error.position == 2
        assert error.token == "end of input"

    def test_bad_top_level_token(self):
        with pytest.raises(ParseError) as exc_info:
            parse_rnc("= x")
        assert exc_info.value.position == 0
        assert exc_info.value.token == "'='"

    def test_unclosed_brace(self):
        with pytest.raises(ParseError, match="expected }"):
            parse_rnc("a = element b { empty")

    def test_no_partial_result(self):
        with pytest.raises(RncError):
            parse_rnc("a = empty\nb = element { empty }\nc = empty")

    def test_lex_errors_propagate(self):
        with pytest.raises(RncError):
            parse_rnc("a = %")


class TestMerge:
    def test_namespaces_first_seen_wins(self):
        shared = parse_rnc('namespace s = "urn:shared"\nnamespace w = "urn:one"')
        module = parse_rnc('namespace w = "urn:two"\nnamespace r = "urn:r"')
        merged = merge_schemas(shared, module)
        assert [(ns.prefix, ns.uri) for ns in merged.namespaces] == [("s", "urn:shared"), ("w", "urn:one"), ("r", "urn:r")]

    def test_definitions_are_appended(self):
        merged = merge_schemas(parse_rnc("a = empty\nb = empty"), parse_rnc("c = empty"))
        assert [d.name for d in merged.definitions] == ["a", "b", "c"]

    def test_redefinition_replaces_in_place(self):
        merged = merge_schemas(parse_rnc("a = empty\nb = empty"), parse_rnc("b = text\nc = empty"))
        assert [d.name for d in merged.definitions] == ["a", "b", "c"]
        assert merged.get("b").pattern == rnc.Text()

    def test_inputs_are_unchanged(self):
        first = parse_rnc("a = empty")
        merge_schemas(first, parse_rnc("a = text"))
        assert first.get("a").pattern == rnc.Empty()

    def test_fixture_schemas(self, sml_schema):
        assert [ns.prefix for ns in sml_schema.namespaces] == ["s", "", "r"]
        assert sml_schema.definitions[0].name == "s_ST_Xstring"
        assert sml_schema.get("s_ST_Xstring").doc_comment == "Shared string type"
