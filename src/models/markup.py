"""
Markup tree models

Positioned nodes produced by MarkupParser. Every node carries a kind
discriminant and a [start, end) span of string offsets into the markup
section it was parsed from.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Union


class NodeKind(Enum):
    """
    Closed set of markup node kinds

    Tag kinds (Tag nodes):
        ELEMENT           <div>, <svelte:element>
        INLINE_COMPONENT  <Button>, <ui.Card>, <svelte:self>, <svelte:component>
        SLOT              <slot>
        SPECIAL           any other <svelte:*> tag (head, window, body, ...)
        SCRIPT, STYLE     top-level <script> and <style> sections
        TITLE             <title> inside <svelte:head> (takes no attributes)
    """
    FRAGMENT = "Fragment"
    ELEMENT = "Element"
    INLINE_COMPONENT = "InlineComponent"
    SLOT = "Slot"
    SPECIAL = "Special"
    TITLE = "Title"
    SCRIPT = "Script"              # top-level <script>
    STYLE = "Style"                # top-level <style>
    TEXT = "Text"
    COMMENT = "Comment"
    MUSTACHE_TAG = "MustacheTag"
    RAW_MUSTACHE_TAG = "RawMustacheTag"
    BLOCK = "Block"
    BRANCH = "Branch"              # {:else}, {:then x}, {:catch e}
    ATTRIBUTE = "Attribute"
    DIRECTIVE = "Directive"        # on:click, bind:value, class:active, ...
    SPREAD = "Spread"
    ATTRIBUTE_SHORTHAND = "AttributeShorthand"


@dataclass
class MarkupNode:
    """Common span and kind of every markup node"""
    kind: NodeKind
    start: int
    end: int

    def children_iter(self) -> Iterator["MarkupNode"]:
        return iter(())


@dataclass
class Text(MarkupNode):
    """Literal text, in content or as a static attribute value part"""
    raw: str


@dataclass
class Comment(MarkupNode):
    data: str


@dataclass
class Expression(MarkupNode):
    """
    A {...} tag

    Used for MUSTACHE_TAG, RAW_MUSTACHE_TAG ({@html ...}), BRANCH and
    ATTRIBUTE_SHORTHAND ({name} inside a start tag). The span includes
    the braces; expression is the trimmed text between them.
    """
    expression: str


@dataclass
class Attribute(MarkupNode):
    """
    One attribute of a start tag (kinds ATTRIBUTE, DIRECTIVE, SPREAD)

    Attributes:
        name: Attribute name ("class", "on:click"); empty for spreads
        value: True for a bare attribute, else ordered value parts
               (Text, Expression)
        value_start: Start of the raw value, including any quotes
        value_end: End of the raw value, including any quotes
    """
    name: str
    value: Union[bool, List[MarkupNode]]
    value_start: int
    value_end: int

    def children_iter(self) -> Iterator[MarkupNode]:
        if isinstance(self.value, list):
            return iter(self.value)
        return iter(())


@dataclass
class Tag(MarkupNode):
    """An element, component, slot or special tag with its attributes and children"""
    name: str
    attributes: List[Attribute] = field(default_factory=list)
    children: List[MarkupNode] = field(default_factory=list)

    def children_iter(self) -> Iterator[MarkupNode]:
        yield from self.attributes
        yield from self.children

    def attribute_find(self, name: str) -> Union[Attribute, None]:
        """First plain attribute called name (directives such as class:x are not matched)"""
        for attribute in self.attributes:
            if attribute.kind is NodeKind.ATTRIBUTE and attribute.name == name:
                return attribute
        return None


@dataclass
class Block(MarkupNode):
    """{#if ...} ... {/if} and friends; branches appear as BRANCH children"""
    name: str
    expression: str
    children: List[MarkupNode] = field(default_factory=list)

    def children_iter(self) -> Iterator[MarkupNode]:
        return iter(self.children)


@dataclass
class Fragment(MarkupNode):
    """Root of a markup tree"""
    children: List[MarkupNode] = field(default_factory=list)

    def children_iter(self) -> Iterator[MarkupNode]:
        return iter(self.children)
