"""
Style parser tests

Tests rule structure, at-rules, selector parts and their spans, and error
reporting.
"""

import pytest

from classforward.lib.errors import ParseError
from classforward.lib.lexer import StyleLexer
from classforward.lib.style import StyleParser
from classforward.models.style import StyleKind


def parse(source):
    return StyleParser(source).parse()


def parts_of(source, rule=0, selector=0):
    """Selector parts of one selector of one top-level rule"""
    return parse(source).children[rule].prelude.children[selector].children


class TestLexer:
    """Test the structural lexer"""

    def test_offsets_cover_input(self):
        source = 'a { content: "}" } /* { */'
        tokens = list(StyleLexer().get_tokens_unprocessed(source))
        assert "".join(value for _, _, value in tokens) == source


class TestRules:
    """Test rule and at-rule structure"""

    def test_empty(self):
        sheet = parse("")
        assert sheet.kind is StyleKind.STYLESHEET
        assert sheet.children == []

    def test_single_rule(self):
        source = "Foo .bar { color: red }"
        rule = parse(source).children[0]

        assert rule.kind is StyleKind.RULE
        assert (rule.start, rule.end) == (0, len(source))
        assert (rule.prelude.start, rule.prelude.end) == (0, 8)
        assert (rule.block.start, rule.block.end) == (9, len(source))

    def test_braces_in_strings_and_comments(self):
        """Structure inside strings and comments is ignored"""
        sheet = parse('.a { content: "}" } /* } */ .b { content: \'{\' }')
        assert len(sheet.children) == 2
        assert sheet.children[1].prelude.children[0].children[0].name == "b"

    def test_nested_block_skipped(self):
        """Nested braces inside a rule block are balanced"""
        sheet = parse(".a { &:hover { color: red } } .b {}")
        assert len(sheet.children) == 2

    def test_media_is_nested(self):
        sheet = parse("@media (min-width: 10px) { Foo .a {} .b {} }")
        atrule = sheet.children[0]

        assert atrule.kind is StyleKind.ATRULE
        assert atrule.name == "media"
        assert atrule.prelude == "(min-width: 10px)"
        assert [rule.kind for rule in atrule.block.children] == [StyleKind.RULE, StyleKind.RULE]

    def test_keyframes_is_opaque(self):
        atrule = parse("@keyframes Foo { from { top: 0 } to { top: 1px } }").children[0]
        assert atrule.name == "keyframes"
        assert atrule.block.children == []

    def test_statement_atrule(self):
        sheet = parse('@import "x.css"; Foo {}')
        assert sheet.children[0].name == "import"
        assert sheet.children[0].block is None
        assert sheet.children[1].kind is StyleKind.RULE


class TestSelectorParts:
    """Test selector part kinds and spans"""

    def test_combinator_and_pseudo(self):
        parts = parts_of("Foo > .bar:hover { color: red }")
        assert [p.kind.value for p in parts] == [
            "TypeSelector", "Combinator", "ClassSelector", "PseudoClassSelector",
        ]

    def test_combinator_span_includes_spaces(self):
        combinator = parts_of("Foo > .bar {}")[1]
        assert combinator.name == ">"
        assert (combinator.start, combinator.end) == (3, 6)

    def test_descendant_whitespace(self):
        parts = parts_of("Foo .bar {}")
        assert [p.kind for p in parts] == [
            StyleKind.TYPE_SELECTOR, StyleKind.WHITESPACE, StyleKind.CLASS_SELECTOR,
        ]
        assert (parts[1].start, parts[1].end) == (3, 4)

    def test_comment_is_whitespace(self):
        parts = parts_of("Foo/* x */.bar {}")
        assert parts[1].kind is StyleKind.WHITESPACE
        assert (parts[1].start, parts[1].end) == (3, 10)

    def test_trailing_comment_excluded(self):
        selector = parse("Foo /* x */ {}").children[0].prelude.children[0]
        assert selector.end == 3
        assert len(selector.children) == 1

    def test_selector_list(self):
        selectors = parse("a, Foo .b,\n.c {}").children[0].prelude.children
        assert len(selectors) == 3
        assert [s.start for s in selectors] == [0, 3, 11]

    def test_simple_selector_kinds(self):
        parts = parts_of("*#id.cls[data-x]::before:not(.a, .b)&{}")
        assert [p.kind for p in parts] == [
            StyleKind.UNIVERSAL,
            StyleKind.ID_SELECTOR,
            StyleKind.CLASS_SELECTOR,
            StyleKind.ATTRIBUTE_SELECTOR,
            StyleKind.PSEUDO_ELEMENT_SELECTOR,
            StyleKind.PSEUDO_CLASS_SELECTOR,
            StyleKind.NESTING_SELECTOR,
        ]
        assert parts[4].name == "before"
        assert parts[5].name == "not"
        assert parts[5].argument == ".a, .b"

    def test_namespace_prefix(self):
        """ns|name, *|* and |name keep their prefix in one part"""
        parts = parts_of("svg|rect *|* |p [lang|=en] {}")
        assert [(p.kind, p.name) for p in parts if p.kind is not StyleKind.WHITESPACE] == [
            (StyleKind.TYPE_SELECTOR, "svg|rect"),
            (StyleKind.UNIVERSAL, "*|*"),
            (StyleKind.TYPE_SELECTOR, "|p"),
            (StyleKind.ATTRIBUTE_SELECTOR, "lang|=en"),
        ]
        assert (parts[0].start, parts[0].end) == (0, 8)

    def test_attribute_with_quoted_bracket(self):
        part = parts_of('[title="a]b"] {}')[0]
        assert part.name == 'title="a]b"'

    def test_escaped_identifier(self):
        part = parts_of(r".sm\:flex {}")[0]
        assert part.name == r"sm\:flex"


class TestErrors:
    """Test malformed style text"""

    @pytest.mark.parametrize("source", [
        "Foo {",
        "}",
        "/* open",
        "a { content: \"open }",
        "a > {}",
        "> a {}",
        ", a {}",
        "a:not(.b {}",
        "a ; {}",
        "svg| {}",
        "@media screen { a {}",
    ])
    def test_malformed(self, source):
        with pytest.raises(ParseError):
            parse(source)

    def test_error_position(self):
        with pytest.raises(ParseError) as exc_info:
            StyleParser("a {}\n> b {}", "App.svelte").parse()

        error = exc_info.value
        assert error.line == 2
        assert error.column == 0
        assert "combinator" in error.message
