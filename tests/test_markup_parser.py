"""
Markup parser tests

Tests tag kinds, attribute values and spans, blocks, expressions and
error reporting.
"""

import pytest

from classforward.lib.errors import ParseError
from classforward.lib.markup import MarkupParser
from classforward.models.markup import NodeKind


def parse(source):
    return MarkupParser(source).parse()


class TestTags:
    """Test elements, components and special tags"""

    def test_empty_source(self):
        tree = parse("")
        assert tree.kind is NodeKind.FRAGMENT
        assert tree.children == []

    def test_element_with_text(self):
        tree = parse('<div class="a">{x}</div>')
        div = tree.children[0]

        assert div.kind is NodeKind.ELEMENT
        assert div.name == "div"
        assert (div.start, div.end) == (0, 24)
        assert div.children[0].kind is NodeKind.MUSTACHE_TAG
        assert div.children[0].expression == "x"

    @pytest.mark.parametrize("source, kind", [
        ("<Button/>", NodeKind.INLINE_COMPONENT),
        ("<ui.Card/>", NodeKind.INLINE_COMPONENT),
        ("<svelte:self/>", NodeKind.INLINE_COMPONENT),
        ("<svelte:component this={C}/>", NodeKind.INLINE_COMPONENT),
        ("<svelte:element this=\"p\"/>", NodeKind.ELEMENT),
        ("<svelte:head></svelte:head>", NodeKind.SPECIAL),
        ("<slot/>", NodeKind.SLOT),
        ("<span/>", NodeKind.ELEMENT),
    ])
    def test_tag_kinds(self, source, kind):
        assert parse(source).children[0].kind is kind

    def test_title_in_head(self):
        """<title> inside <svelte:head> is a title tag, elsewhere an element"""
        head = parse("<svelte:head><title>Home</title></svelte:head>").children[0]
        assert head.children[0].kind is NodeKind.TITLE
        assert parse("<title>Home</title>").children[0].kind is NodeKind.ELEMENT

    def test_void_elements(self):
        """Void elements need no closing tag"""
        tree = parse('<p>a<br>b<img src="x.png"></p>')
        p = tree.children[0]
        assert [child.kind for child in p.children] == [
            NodeKind.TEXT, NodeKind.ELEMENT, NodeKind.TEXT, NodeKind.ELEMENT,
        ]

    def test_implicit_close(self):
        """An open <p> is closed by its parent's closing tag"""
        source = "<div><p>a</div>"
        div = parse(source).children[0]
        p = div.children[0]
        assert p.end == source.index("</div>")
        assert div.end == len(source)

    def test_script_and_style_are_raw(self):
        """Contents of top-level script and style are not parsed"""
        source = '<script>let a = "<div>";</script><style>p { }</style>'
        script, style = parse(source).children

        assert script.kind is NodeKind.SCRIPT
        assert script.children[0].raw == 'let a = "<div>";'
        assert style.kind is NodeKind.STYLE
        assert style.children[0].raw == "p { }"

    def test_nested_style_is_element(self):
        """Only top-level sections are SCRIPT/STYLE"""
        head = parse("<svelte:head><style>p {}</style></svelte:head>").children[0]
        assert head.children[0].kind is NodeKind.ELEMENT

    def test_comment(self):
        tree = parse("<!-- <Foo/> -->")
        assert tree.children[0].kind is NodeKind.COMMENT
        assert tree.children[0].data == " <Foo/> "


class TestAttributes:
    """Test attribute values and spans"""

    def test_quoted_value_span(self):
        """value_start and value_end include the quotes"""
        attribute = parse('<div class="a">').children[0].attributes[0]

        assert attribute.kind is NodeKind.ATTRIBUTE
        assert attribute.name == "class"
        assert (attribute.start, attribute.end) == (5, 14)
        assert (attribute.value_start, attribute.value_end) == (11, 14)
        assert attribute.value[0].raw == "a"

    def test_bare_attribute(self):
        attribute = parse("<input disabled>").children[0].attributes[0]
        assert attribute.value is True
        assert attribute.end == 15

    def test_unquoted_value(self):
        attribute = parse("<div class=a>").children[0].attributes[0]
        assert attribute.value[0].raw == "a"
        assert (attribute.value_start, attribute.value_end) == (11, 12)

    def test_empty_quoted_value(self):
        attribute = parse('<div class="">').children[0].attributes[0]
        assert len(attribute.value) == 1
        assert attribute.value[0].raw == ""

    def test_expression_value(self):
        attribute = parse("<div class={a ? 'x' : 'y'}>").children[0].attributes[0]
        assert len(attribute.value) == 1
        assert attribute.value[0].kind is NodeKind.MUSTACHE_TAG
        assert attribute.value[0].expression == "a ? 'x' : 'y'"

    def test_mixed_value(self):
        attribute = parse('<div class="a {b} c">').children[0].attributes[0]
        assert [part.kind for part in attribute.value] == [
            NodeKind.TEXT, NodeKind.MUSTACHE_TAG, NodeKind.TEXT,
        ]
        assert attribute.value[0].raw == "a "
        assert attribute.value[2].raw == " c"

    def test_shorthand(self):
        attribute = parse("<div {class}>").children[0].attributes[0]
        assert attribute.kind is NodeKind.ATTRIBUTE
        assert attribute.name == "class"
        assert attribute.value[0].kind is NodeKind.ATTRIBUTE_SHORTHAND

    def test_spread(self):
        attribute = parse("<Foo {...props}/>").children[0].attributes[0]
        assert attribute.kind is NodeKind.SPREAD
        assert attribute.value[0].expression == "props"

    def test_directives(self):
        """name:arg attributes with a known prefix are directives"""
        tag = parse("<div on:click={f} class:active={a} xlink:href=\"#x\">").children[0]
        assert [a.kind for a in tag.attributes] == [
            NodeKind.DIRECTIVE, NodeKind.DIRECTIVE, NodeKind.ATTRIBUTE,
        ]
        assert tag.attribute_find("class") is None

    def test_braces_inside_strings(self):
        """Braces in JS strings, template literals and comments do not count"""
        source = '<p title={"}"} data-a={`${a}}`} data-b={/* } */ b}>'
        tag = parse(source).children[0]
        assert [a.value[0].expression for a in tag.attributes] == [
            '"}"', "`${a}}`", "/* } */ b",
        ]

    def test_regex_literals(self):
        """Quotes, slashes and braces inside regex literals do not count"""
        tree = parse("<p>{name.replace(/'/g, '')}</p><i title={s.split(/[/}]/)}/>")
        assert tree.children[0].children[0].expression == "name.replace(/'/g, '')"
        assert tree.children[1].attributes[0].value[0].expression == "s.split(/[/}]/)"

    def test_division(self):
        """A slash after an operand divides"""
        tree = parse("<p>{a / b}{(total)/2}</p>")
        assert [node.expression for node in tree.children[0].children] == ["a / b", "(total)/2"]


class TestBlocks:
    """Test {#block} structure"""

    def test_if_else(self):
        block = parse("{#if a}<p/>{:else}<b/>{/if}").children[0]

        assert block.kind is NodeKind.BLOCK
        assert block.name == "if"
        assert block.expression == "a"
        assert [child.kind for child in block.children] == [
            NodeKind.ELEMENT, NodeKind.BRANCH, NodeKind.ELEMENT,
        ]

    def test_raw_html(self):
        node = parse("{@html content}").children[0]
        assert node.kind is NodeKind.RAW_MUSTACHE_TAG
        assert node.expression == "content"


class TestErrors:
    """Test malformed markup"""

    @pytest.mark.parametrize("source", [
        "<div>",
        "<div></span>",
        "{#if a}",
        "{#each items as item}{/if}",
        "<div>{/if}</div>",
        "{:else}",
        "<!-- open",
        "<div class=\"a>",
        "<p>{a</p>",
        "< div>",
        "<p>{/}</p>",
        "<p>{s.split(/a)}</p>",
    ])
    def test_malformed(self, source):
        with pytest.raises(ParseError):
            parse(source)

    def test_error_position(self):
        """Errors carry line and column"""
        with pytest.raises(ParseError) as exc_info:
            MarkupParser("<p>\n  </span>", "Bad.svelte").parse()

        error = exc_info.value
        assert error.line == 2
        assert error.column == 2
        assert error.filename == "Bad.svelte"
        assert "Bad.svelte" in str(error)
