"""
Markup instrumentation tests

Tests how class values are merged with the forwarding prop and which
component usages receive a scoped class.
"""

import pytest

from classforward.lib.edits import EditBuffer
from classforward.lib.instrument import MarkupInstrumenter, jsString_quote, markup_instrument
from classforward.lib.markup import MarkupParser
from classforward.lib.naming import scopedClass_default, string_hash


def fixed_namer(hash, css, parent, child, filename=None):
    return f"x-{child.lower()}"


def instrument(source, css=None, prop_name="_forwardedClass", filename=None, namer=fixed_namer):
    tree = MarkupParser(source, filename).parse()
    buffer = markup_instrument(tree, EditBuffer(source, filename), css, prop_name, filename, namer)
    return buffer.render()[0]


class TestElementClass:
    """Test merging the prop into element class attributes"""

    def test_no_class(self):
        assert instrument("<div>x</div>") == "<div class={_forwardedClass}>x</div>"

    def test_self_closing(self):
        assert instrument("<span/>") == "<span class={_forwardedClass}/>"

    def test_static_class(self):
        assert instrument('<div class="a">x</div>') == "<div class={'a ' + _forwardedClass}>x</div>"

    def test_static_class_single_quotes(self):
        assert instrument("<p class='a b'/>") == "<p class={'a b ' + _forwardedClass}/>"

    def test_unquoted_class(self):
        assert instrument("<div class=a></div>") == "<div class={'a ' + _forwardedClass}></div>"

    def test_quote_escaped(self):
        """Quotes and backslashes in static classes are escaped"""
        assert instrument('<div class="it\'s"/>') == "<div class={'it\\'s ' + _forwardedClass}/>"

    def test_expression_class(self):
        assert instrument("<div class={cls}/>") == '<div class={cls + " " + _forwardedClass}/>'

    def test_quoted_expression_class(self):
        assert instrument('<div class="{cls}"/>') == '<div class="{cls + " " + _forwardedClass}"/>'

    def test_shorthand_class(self):
        assert instrument("<div {class}/>") == '<div class={class + " " + _forwardedClass}/>'

    def test_bare_class(self):
        assert instrument("<div class/>") == "<div class={_forwardedClass}/>"

    def test_mixed_class(self):
        assert instrument('<div class="a {b} c"/>') == \
            "<div class={'a ' + (b) + ' c' + \" \" + _forwardedClass}/>"

    def test_class_directive_is_not_class(self):
        assert instrument("<div class:on={x}/>") == "<div class={_forwardedClass} class:on={x}/>"

    def test_other_attributes_kept(self):
        assert instrument('<a href="/" class="l" on:click={go}></a>') == \
            "<a href=\"/\" class={'l ' + _forwardedClass} on:click={go}></a>"

    def test_nested_and_blocks(self):
        source = "<ul>{#each items as item}<li>{item}</li>{/each}</ul>"
        assert instrument(source) == (
            "<ul class={_forwardedClass}>{#each items as item}"
            "<li class={_forwardedClass}>{item}</li>{/each}</ul>"
        )

    def test_custom_prop_name(self):
        assert instrument("<b/>", prop_name="_cls") == "<b class={_cls}/>"

    @pytest.mark.parametrize("source", [
        "<slot/>",
        "<svelte:window on:resize={f}/>",
        "<!-- <div> -->",
        "text {expr}",
    ])
    def test_untouched_nodes(self, source):
        """Slots, special tags, comments and text are left alone"""
        assert instrument(source) == source

    def test_title_in_head(self):
        """<title> inside <svelte:head> takes no attributes and is left alone"""
        source = "<svelte:head><title>Home</title></svelte:head>\n<p/>"
        assert instrument(source) == \
            "<svelte:head><title>Home</title></svelte:head>\n<p class={_forwardedClass}/>"

    def test_inside_special_tag(self):
        """Other elements inside a special tag are still instrumented"""
        assert instrument('<svelte:head><meta name="x"></svelte:head>') == \
            '<svelte:head><meta class={_forwardedClass} name="x"></svelte:head>'

    def test_script_and_style_sections_untouched(self):
        source = "<script>let a</script><style>p {}</style>"
        assert instrument(source) == source

    def test_svelte_element(self):
        assert instrument('<svelte:element this="p"/>') == \
            '<svelte:element class={_forwardedClass} this="p"/>'


class TestComponentUsage:
    """Test the scoped class passed to component usages"""

    def test_referenced_component(self):
        assert instrument("<Foo/>", css="Foo .a {}") == "<Foo _forwardedClass='x-foo'/>"

    def test_component_with_attributes(self):
        assert instrument('<Foo a="1">x</Foo>', css="Foo {}") == \
            "<Foo _forwardedClass='x-foo' a=\"1\">x</Foo>"

    def test_unreferenced_component(self):
        assert instrument("<Foo/>", css="Bar {}") == "<Foo/>"

    def test_no_style(self):
        assert instrument("<Foo/>") == "<Foo/>"

    def test_substring_match(self):
        """Any occurrence of the name in the style text counts"""
        assert instrument("<Foo/>", css=".Foobar {}") == "<Foo _forwardedClass='x-foo'/>"

    def test_component_children_instrumented(self):
        assert instrument("<Foo><i/></Foo>", css="Foo {}") == \
            "<Foo _forwardedClass='x-foo'><i class={_forwardedClass}/></Foo>"

    def test_dotted_component(self):
        assert instrument("<ui.Card/>", css="ui.Card") == "<ui.Card _forwardedClass='x-ui.card'/>"

    def test_custom_prop_name(self):
        assert instrument("<Foo/>", css="Foo {}", prop_name="_cls") == "<Foo _cls='x-foo'/>"

    def test_default_namer_matches_style(self):
        css = "Button .icon {}"
        result = instrument("<Button/>", css=css, filename="App.svelte", namer=scopedClass_default)
        expected = scopedClass_default(string_hash, css, "App", "Button")
        assert result == f"<Button _forwardedClass='{expected}'/>"

    def test_counters(self):
        source = "<div><Foo/><Bar/><p/></div>"
        instrumenter = MarkupInstrumenter("Foo {}", "_forwardedClass", None, fixed_namer)
        instrumenter.instrument(MarkupParser(source).parse(), EditBuffer(source))
        assert instrumenter.components_marked == 1
        assert instrumenter.elements_marked == 2


class TestJsStringQuote:

    def test_plain(self):
        assert jsString_quote("a b ") == "'a b '"

    def test_escapes(self):
        assert jsString_quote("it's \\") == "'it\\'s \\\\'"
