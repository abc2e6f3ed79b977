"""
Style tree models

Positioned nodes produced by StyleParser. Spans are [start, end) string
offsets into the style section.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Union


class StyleKind(Enum):
    """Closed set of style node kinds, selector parts included"""
    STYLESHEET = "StyleSheet"
    RULE = "Rule"
    ATRULE = "Atrule"
    BLOCK = "Block"
    SELECTOR_LIST = "SelectorList"
    SELECTOR = "Selector"

    # Selector parts
    TYPE_SELECTOR = "TypeSelector"
    UNIVERSAL = "Universal"
    CLASS_SELECTOR = "ClassSelector"
    ID_SELECTOR = "IdSelector"
    ATTRIBUTE_SELECTOR = "AttributeSelector"
    PSEUDO_CLASS_SELECTOR = "PseudoClassSelector"
    PSEUDO_ELEMENT_SELECTOR = "PseudoElementSelector"
    NESTING_SELECTOR = "NestingSelector"
    COMBINATOR = "Combinator"
    WHITESPACE = "WhiteSpace"


PSEUDO_KINDS = frozenset({
    StyleKind.PSEUDO_CLASS_SELECTOR,
    StyleKind.PSEUDO_ELEMENT_SELECTOR,
})

CONNECTOR_KINDS = frozenset({
    StyleKind.COMBINATOR,
    StyleKind.WHITESPACE,
})


@dataclass
class StyleNode:
    kind: StyleKind
    start: int
    end: int

    def children_iter(self) -> Iterator["StyleNode"]:
        return iter(())


@dataclass
class SelectorPart(StyleNode):
    """
    One simple selector, combinator or whitespace run

    Attributes:
        name: Type/class/id/pseudo name, combinator symbol (">", "+", "~"),
              "*" for Universal, " " for WhiteSpace, raw text inside [] for
              attribute selectors
        argument: Raw text inside the parentheses of a functional pseudo
                  (":not(.a)" -> ".a"), else None
    """
    name: str
    argument: Optional[str] = None


@dataclass
class Selector(StyleNode):
    """A complex selector: compound selectors joined by combinators"""
    children: List[SelectorPart] = field(default_factory=list)

    def children_iter(self) -> Iterator[StyleNode]:
        return iter(self.children)


@dataclass
class SelectorList(StyleNode):
    children: List[Selector] = field(default_factory=list)

    def children_iter(self) -> Iterator[StyleNode]:
        return iter(self.children)


@dataclass
class StyleBlock(StyleNode):
    """
    A {...} block

    For rules and opaque at-rules (@font-face, @keyframes) the contents are
    not modelled and children is empty; conditional at-rules (@media,
    @supports, ...) hold nested rules.
    """
    children: List[Union["Rule", "Atrule"]] = field(default_factory=list)

    def children_iter(self) -> Iterator[StyleNode]:
        return iter(self.children)


@dataclass
class Rule(StyleNode):
    prelude: SelectorList
    block: StyleBlock

    def children_iter(self) -> Iterator[StyleNode]:
        yield self.prelude
        yield self.block


@dataclass
class Atrule(StyleNode):
    name: str
    prelude: str
    block: Optional[StyleBlock] = None

    def children_iter(self) -> Iterator[StyleNode]:
        if self.block is not None:
            yield self.block


@dataclass
class StyleSheet(StyleNode):
    children: List[Union[Rule, Atrule]] = field(default_factory=list)

    def children_iter(self) -> Iterator[StyleNode]:
        return iter(self.children)
