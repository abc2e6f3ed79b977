"""
Parser for component style sections

Two phases:
1. Structure: StyleLexer tokens are grouped into rules and at-rules,
   tracking brace depth (comments and strings are single tokens, so their
   contents never count)
2. Selectors: each rule prelude is split into complex selectors made of
   positioned parts (TypeSelector, ClassSelector, Combinator, WhiteSpace, ...)

Conditional at-rules (@media, @supports, @container, @layer, @document)
contain nested rules and are parsed recursively. Other at-rule blocks
(@keyframes, @font-face, @page, ...) are kept opaque.

Example:
    >>> sheet = StyleParser("Foo > .bar:hover { color: red }").parse()
    >>> [p.kind.value for p in sheet.children[0].prelude.children[0].children]
    ['TypeSelector', 'Combinator', 'ClassSelector', 'PseudoClassSelector']
"""

import re
from typing import List, Optional, Tuple, Union

from pygments.token import Comment, Error, Keyword, Punctuation, Whitespace, _TokenType

from ..models.style import (
    Atrule,
    Rule,
    Selector,
    SelectorList,
    SelectorPart,
    StyleBlock,
    StyleKind,
    StyleSheet,
)
from .errors import ParseError
from .lexer import StyleLexer
from .log import LOG

CONDITIONAL_ATRULES = frozenset({
    'media', 'supports', 'container', 'layer', 'document', '-moz-document',
})

_IDENT = re.compile(
    r'(?:--|-?(?:[A-Za-z_]|[^\x00-\x7f]|\\[^\n]))(?:[A-Za-z0-9_-]|[^\x00-\x7f]|\\[^\n])*'
)

Token = Tuple[int, _TokenType, str]


class StyleParser:
    """
    Parser for style text

    Attributes:
        source: Style text being parsed
        filename: Display filename for error messages
        tokens: Structural tokens (whitespace and comments removed)
        index: Current position in tokens
    """

    def __init__(self, source: str, filename: Optional[str] = None):
        self.source = source
        self.filename = filename
        self.tokens: List[Token] = []
        self.index = 0

    def parse(self) -> StyleSheet:
        """
        Parse the whole style section

        Returns:
            StyleSheet spanning the entire source

        Raises:
            ParseError: On unterminated comments or strings, unbalanced
                        braces and malformed selectors
        """
        self.tokens = []
        for position, token_type, value in StyleLexer().get_tokens_unprocessed(self.source):
            if token_type is Error:
                self.error("Unterminated comment or string", position)
            if token_type in Whitespace or token_type in Comment:
                continue
            self.tokens.append((position, token_type, value))
        self.index = 0

        sheet = StyleSheet(StyleKind.STYLESHEET, 0, len(self.source))
        sheet.children = self.rules_parse(nested=False)

        LOG(f"Parsed style with {len(sheet.children)} top-level rules", level=3)
        return sheet

    def peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def rules_parse(self, nested: bool) -> List[Union[Rule, Atrule]]:
        """
        Parse rules until end of input, or until the closing brace when nested

        The closing brace itself is left for the caller.
        """
        rules: List[Union[Rule, Atrule]] = []

        while True:
            token = self.peek()
            if token is None:
                return rules
            position, token_type, value = token

            if value == '}' and token_type in Punctuation:
                if nested:
                    return rules
                self.error("Unexpected '}'", position)
            if value == ';' and token_type in Punctuation:
                self.index += 1
                continue

            if token_type in Keyword:
                rules.append(self.atrule_parse())
            else:
                rules.append(self.rule_parse())

    def rule_parse(self) -> Rule:
        start = self.tokens[self.index][0]
        brace = self.prelude_skip(allow_semicolon=False)

        prelude = self.selectorList_parse(start, self.prelude_end(start, brace))
        block_end = self.block_skip(brace)

        return Rule(
            StyleKind.RULE, start, block_end, prelude,
            StyleBlock(StyleKind.BLOCK, brace, block_end),
        )

    def atrule_parse(self) -> Atrule:
        start, _, keyword = self.tokens[self.index]
        name = keyword[1:].lower()
        self.index += 1

        if self.peek() is None:
            self.error(f"Unexpected end of input after @{name}", start)
        prelude_start = start + len(keyword)
        stop = self.prelude_skip(allow_semicolon=True)
        prelude = self.source[prelude_start:stop].strip()

        if self.source[stop] == ';':
            return Atrule(StyleKind.ATRULE, start, stop + 1, name, prelude)

        if name not in CONDITIONAL_ATRULES:
            block_end = self.block_skip(stop)
            return Atrule(
                StyleKind.ATRULE, start, block_end, name, prelude,
                StyleBlock(StyleKind.BLOCK, stop, block_end),
            )

        children = self.rules_parse(nested=True)
        closing = self.peek()
        if closing is None:
            self.error(f"@{name} block was left open", stop)
        self.index += 1
        block_end = closing[0] + 1
        return Atrule(
            StyleKind.ATRULE, start, block_end, name, prelude,
            StyleBlock(StyleKind.BLOCK, stop, block_end, children),
        )

    def prelude_skip(self, allow_semicolon: bool) -> int:
        """
        Advance past a prelude to its '{' (or ';' for at-rules)

        Returns:
            Position of the '{' or ';' token, which is consumed
        """
        start = self.tokens[self.index][0]
        while True:
            token = self.peek()
            if token is None:
                self.error("Expected '{' but reached end of input", start)
            position, token_type, value = token
            self.index += 1
            if token_type in Punctuation:
                if value == '{' or (value == ';' and allow_semicolon):
                    return position
                if value in ';}':
                    self.error(f"Expected '{{' before '{value}'", position)

    def prelude_end(self, start: int, brace: int) -> int:
        """End of the prelude text before brace, trailing whitespace and comments dropped"""
        end = brace
        while True:
            stripped = self.source[start:end].rstrip()
            end = start + len(stripped)
            if stripped.endswith('*/'):
                comment = self.source.rfind('/*', start, end - 2)
                if comment != -1:
                    end = comment
                    continue
            return end

    def block_skip(self, brace: int) -> int:
        """
        Skip a block whose contents are not modelled

        Args:
            brace: Position of the opening '{' (already consumed)

        Returns:
            Position just past the matching '}'
        """
        depth = 1
        while True:
            token = self.peek()
            if token is None:
                self.error("Block was left open", brace)
            position, token_type, value = token
            self.index += 1
            if token_type in Punctuation:
                if value == '{':
                    depth += 1
                elif value == '}':
                    depth -= 1
                    if depth == 0:
                        return position + 1

    def selectorList_parse(self, start: int, end: int) -> SelectorList:
        """
        Split a rule prelude into positioned complex selectors

        Whitespace between compound selectors becomes a WhiteSpace part.
        Whitespace around an explicit combinator (>, +, ~) is folded into
        the Combinator span. Comments count as whitespace.

        Args:
            start: Start of the prelude text
            end: End of the prelude text (trailing whitespace excluded)

        Returns:
            SelectorList covering [start, end)
        """
        selectors: List[Selector] = []
        pos = self.space_skip(start, end)
        selector_start = pos
        parts: List[SelectorPart] = []
        pending_space: Optional[Tuple[int, int]] = None

        while pos < end:
            char = self.source[pos]

            if char.isspace() or self.source.startswith('/*', pos):
                space_end = self.space_skip(pos, end)
                pending_space = (pos, space_end)
                pos = space_end
                continue

            if char == ',':
                if not parts:
                    self.error("Expected selector before ','", pos)
                selectors.append(Selector(StyleKind.SELECTOR, selector_start, parts[-1].end, parts))
                pos = self.space_skip(pos + 1, end)
                selector_start = pos
                parts = []
                pending_space = None
                continue

            if char in '>+~':
                if not parts:
                    self.error(f"Selector cannot start with combinator '{char}'", pos)
                combinator_start = pending_space[0] if pending_space else pos
                pos = self.space_skip(pos + 1, end)
                parts.append(SelectorPart(StyleKind.COMBINATOR, combinator_start, pos, char))
                pending_space = None
                continue

            if pending_space and parts and parts[-1].kind is not StyleKind.COMBINATOR:
                parts.append(SelectorPart(StyleKind.WHITESPACE, pending_space[0], pending_space[1], ' '))
            pending_space = None

            part = self.simpleSelector_parse(pos, end)
            parts.append(part)
            pos = part.end

        if not parts:
            self.error("Expected selector", selector_start)
        if parts[-1].kind is StyleKind.COMBINATOR:
            self.error(f"Selector cannot end with combinator '{parts[-1].name}'", parts[-1].start)
        selectors.append(Selector(StyleKind.SELECTOR, selector_start, parts[-1].end, parts))

        return SelectorList(StyleKind.SELECTOR_LIST, start, end, selectors)

    def simpleSelector_parse(self, pos: int, end: int) -> SelectorPart:
        """Parse the single simple selector starting at pos"""
        name_start = self.namespace_skip(pos, end)
        if name_start > pos:
            if self.source.startswith('*', name_start, end):
                return SelectorPart(StyleKind.UNIVERSAL, pos, name_start + 1, self.source[pos:name_start + 1])
            name_end = self.ident_match(name_start, end, "Expected element name after namespace")
            return SelectorPart(StyleKind.TYPE_SELECTOR, pos, name_end, self.source[pos:name_end])

        char = self.source[pos]

        if char == '*':
            return SelectorPart(StyleKind.UNIVERSAL, pos, pos + 1, '*')

        if char == '&':
            return SelectorPart(StyleKind.NESTING_SELECTOR, pos, pos + 1, '&')

        if char in '.#':
            kind = StyleKind.CLASS_SELECTOR if char == '.' else StyleKind.ID_SELECTOR
            name_end = self.ident_match(pos + 1, end, f"Expected name after '{char}'")
            return SelectorPart(kind, pos, name_end, self.source[pos + 1:name_end])

        if char == '[':
            close = self.bracket_findMatching(pos, end, '[', ']')
            return SelectorPart(
                StyleKind.ATTRIBUTE_SELECTOR, pos, close + 1, self.source[pos + 1:close].strip()
            )

        if char == ':':
            element = self.source.startswith('::', pos)
            name_start = pos + (2 if element else 1)
            name_end = self.ident_match(name_start, end, "Expected pseudo-class or pseudo-element name")
            kind = StyleKind.PSEUDO_ELEMENT_SELECTOR if element else StyleKind.PSEUDO_CLASS_SELECTOR
            name = self.source[name_start:name_end]
            if name_end < end and self.source[name_end] == '(':
                close = self.bracket_findMatching(name_end, end, '(', ')')
                return SelectorPart(kind, pos, close + 1, name, self.source[name_end + 1:close].strip())
            return SelectorPart(kind, pos, name_end, name)

        name_end = self.ident_match(pos, end, f"Unexpected character '{char}' in selector")
        return SelectorPart(StyleKind.TYPE_SELECTOR, pos, name_end, self.source[pos:name_end])

    def namespace_skip(self, pos: int, end: int) -> int:
        """Position after a 'ns|', '*|' or '|' prefix at pos, or pos if there is none"""
        if self.source.startswith('*|', pos, end):
            prefix_end = pos + 1
        elif self.source.startswith('|', pos, end):
            prefix_end = pos
        else:
            match = _IDENT.match(self.source, pos, end)
            prefix_end = match.end() if match else pos
        if self.source.startswith('|', prefix_end, end) and not self.source.startswith('|=', prefix_end, end):
            return prefix_end + 1
        return pos

    def ident_match(self, pos: int, end: int, message: str) -> int:
        match = _IDENT.match(self.source, pos, end)
        if not match:
            self.error(message, pos)
        return match.end()

    def bracket_findMatching(self, start: int, end: int, opening: str, closing: str) -> int:
        """
        Find the bracket closing the one at start, skipping quoted strings

        Returns:
            Position of the matching closing bracket
        """
        depth = 0
        pos = start
        while pos < end:
            char = self.source[pos]
            if char in '"\'':
                close = self.source.find(char, pos + 1, end)
                while close != -1 and self.source[close - 1] == '\\':
                    close = self.source.find(char, close + 1, end)
                if close == -1:
                    break
                pos = close + 1
                continue
            if char == opening:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1

        self.error(f"Expected '{closing}' to match '{opening}'", start)

    def space_skip(self, pos: int, end: int) -> int:
        """Skip whitespace and comments in [pos, end)"""
        while pos < end:
            if self.source[pos].isspace():
                pos += 1
            elif self.source.startswith('/*', pos):
                close = self.source.find('*/', pos + 2, end)
                pos = end if close == -1 else close + 2
            else:
                break
        return pos

    def error(self, message: str, position: int) -> None:
        """
        Report a style error at position

        Raises:
            ParseError: Always
        """
        raise ParseError(message, self.source, position, self.filename)
