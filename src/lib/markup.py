"""
Parser for component markup

Turns the markup section of a single-file component into a positioned tree
(see models/markup.py). It understands what the instrumentation passes need:

- elements, components, slots and <svelte:*> tags, with void elements and
  self-closing tags
- attributes with quoted, unquoted and {expression} values, {shorthand},
  {...spread} and name:arg directives
- {expression}, {@html ...}, {#block} / {:branch} / {/block} tags
- comments, and raw text inside <script> and <style>

Expressions are not parsed, only delimited: braces are balanced while
skipping over JS strings, template literals, regex literals and comments.

Example:
    >>> tree = MarkupParser('<div class="a">{x}</div>').parse()
    >>> tree.children[0].name
    'div'
    >>> tree.children[0].attribute_find('class').value[0].raw
    'a'
"""

import re
from typing import List, Optional, Tuple, Union

from ..models.markup import (
    Attribute,
    Block,
    Comment,
    Expression,
    Fragment,
    MarkupNode,
    NodeKind,
    Tag,
    Text,
)
from .errors import ParseError
from .log import LOG

_TAG_NAME = re.compile(r'[A-Za-z][A-Za-z0-9:._\-]*')
_ATTRIBUTE_NAME = re.compile(r'[^\s=/>"\'{}]+')
_CLOSING_TAG = re.compile(r'</\s*([^\s>]+)\s*>')
_BLOCK_NAME = re.compile(r'\s*#(\w+)')
_BLOCK_CLOSE = re.compile(r'\{\s*/(\w+)\s*\}')
_BLOCK_SLASH = re.compile(r'\{\s*/')

VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'command', 'embed', 'hr', 'img', 'input',
    'keygen', 'link', 'meta', 'param', 'source', 'track', 'wbr',
})

RAW_TEXT_ELEMENTS = frozenset({'script', 'style'})

DIRECTIVE_PREFIXES = frozenset({
    'on', 'bind', 'class', 'style', 'use', 'transition', 'in', 'out', 'animate', 'let',
})

# Characters after which a '/' starts a regex literal
REGEX_PRECEDERS = frozenset('(,=:[!&|?{};+-*%<>~^')

Container = Union[Fragment, Tag, Block]


class MarkupParser:
    """
    Parser for component markup

    Attributes:
        source: Markup text being parsed
        filename: Display filename for error messages
        position: Current character position in source
        stack: Open containers, root Fragment first
    """

    def __init__(self, source: str, filename: Optional[str] = None):
        self.source = source
        self.filename = filename
        self.position = 0
        self.stack: List[Container] = []

    def parse(self) -> Fragment:
        """
        Parse the whole markup section

        Returns:
            Root Fragment spanning the entire source

        Raises:
            ParseError: On unclosed or mismatched tags and blocks, or
                        unterminated attributes, expressions and comments
        """
        root = Fragment(NodeKind.FRAGMENT, 0, len(self.source))
        self.stack = [root]
        self.position = 0

        while self.position < len(self.source):
            if self.source.startswith('<!--', self.position):
                self.comment_parse()
            elif self.source.startswith('</', self.position):
                self.closingTag_parse()
            elif self.source[self.position] == '<':
                self.tag_parse()
            elif self.source[self.position] == '{':
                self.mustache_parse()
            else:
                self.text_parse()

        if len(self.stack) > 1:
            unclosed = self.stack[-1]
            if isinstance(unclosed, Tag):
                self.error(f"<{unclosed.name}> was left open", unclosed.start)
            self.error(f"{{#{unclosed.name}}} block was left open", unclosed.start)

        LOG(f"Parsed markup with {len(root.children)} top-level nodes", level=3)
        return root

    def current(self) -> Container:
        return self.stack[-1]

    def text_parse(self) -> None:
        start = self.position
        end = start
        while end < len(self.source) and self.source[end] not in '<{':
            end += 1
        self.current().children.append(
            Text(NodeKind.TEXT, start, end, self.source[start:end])
        )
        self.position = end

    def comment_parse(self) -> None:
        start = self.position
        end = self.source.find('-->', start + 4)
        if end == -1:
            self.error("Comment was left open", start)
        self.current().children.append(
            Comment(NodeKind.COMMENT, start, end + 3, self.source[start + 4:end])
        )
        self.position = end + 3

    def tag_parse(self) -> None:
        """
        Parse a start tag and, for raw text elements, its content

        Tags that may have children are pushed onto the stack and closed by
        closingTag_parse().
        """
        start = self.position
        match = _TAG_NAME.match(self.source, start + 1)
        if not match:
            self.error("Expected a valid tag name", start + 1)

        name = match.group(0)
        self.position = match.end()
        attributes, self_closing = self.attributes_parse(name)

        tag = Tag(self.tagKind_resolve(name), start, self.position, name, attributes)
        self.current().children.append(tag)

        if self_closing or name.lower() in VOID_ELEMENTS:
            return

        if name.lower() in RAW_TEXT_ELEMENTS:
            closing = re.compile(rf'</\s*{re.escape(name)}\s*>', re.IGNORECASE).search(self.source, self.position)
            if not closing:
                self.error(f"<{name}> was left open", start)
            if closing.start() > self.position:
                tag.children.append(Text(
                    NodeKind.TEXT, self.position, closing.start(),
                    self.source[self.position:closing.start()],
                ))
            tag.end = closing.end()
            self.position = closing.end()
            return

        self.stack.append(tag)

    def closingTag_parse(self) -> None:
        """
        Close the innermost matching open tag

        Elements left open inside it are closed implicitly at this point
        (e.g. an unclosed <p> inside a </div>); components and blocks are not.
        """
        start = self.position
        match = _CLOSING_TAG.match(self.source, start)
        if not match:
            self.error("Expected closing tag", start)
        name = match.group(1)

        current = self.current()
        while not (isinstance(current, Tag) and current.name == name):
            if not (isinstance(current, Tag) and current.kind is NodeKind.ELEMENT):
                self.error(f"</{name}> attempted to close an element that was not open", start)
            current.end = start
            self.stack.pop()
            current = self.current()

        current.end = match.end()
        self.stack.pop()
        self.position = match.end()

    def tagKind_resolve(self, name: str) -> NodeKind:
        """Decide what kind of tag a name denotes at the current nesting level"""
        if len(self.stack) == 1 and name.lower() in RAW_TEXT_ELEMENTS:
            return NodeKind.SCRIPT if name.lower() == 'script' else NodeKind.STYLE
        if name in ('svelte:self', 'svelte:component'):
            return NodeKind.INLINE_COMPONENT
        if name == 'svelte:element':
            return NodeKind.ELEMENT
        if name.startswith('svelte:'):
            return NodeKind.SPECIAL
        if name == 'slot':
            return NodeKind.SLOT
        if name == 'title' and any(
            isinstance(open_tag, Tag) and open_tag.name == 'svelte:head' for open_tag in self.stack
        ):
            return NodeKind.TITLE
        if 'A' <= name[0] <= 'Z' or '.' in name:
            return NodeKind.INLINE_COMPONENT
        return NodeKind.ELEMENT

    def attributes_parse(self, tag_name: str) -> Tuple[List[Attribute], bool]:
        """
        Parse attributes up to and including the end of the start tag

        Args:
            tag_name: Name of the tag being parsed (for error messages)

        Returns:
            Tuple of (attributes in source order, whether the tag was self-closing)
        """
        attributes: List[Attribute] = []

        while True:
            self.whitespace_skip()
            if self.position >= len(self.source):
                self.error(f"Unexpected end of input in <{tag_name}> tag", self.position)

            start = self.position
            if self.source.startswith('/>', start):
                self.position += 2
                return attributes, True
            if self.source[start] == '>':
                self.position += 1
                return attributes, False

            if self.source[start] == '{':
                end = self.expression_findEnd(start + 1)
                inner = self.source[start + 1:end].strip()
                self.position = end + 1
                if inner.startswith('...'):
                    attributes.append(Attribute(
                        NodeKind.SPREAD, start, end + 1, '', [
                            Expression(NodeKind.MUSTACHE_TAG, start, end + 1, inner[3:].strip())
                        ], start, end + 1,
                    ))
                else:
                    if not inner:
                        self.error("Expected an attribute name inside {}", start)
                    attributes.append(Attribute(
                        NodeKind.ATTRIBUTE, start, end + 1, inner, [
                            Expression(NodeKind.ATTRIBUTE_SHORTHAND, start, end + 1, inner)
                        ], start, end + 1,
                    ))
                continue

            match = _ATTRIBUTE_NAME.match(self.source, start)
            if not match:
                self.error(f"Expected attribute name in <{tag_name}> tag", start)
            name = match.group(0)
            self.position = match.end()

            value: Union[bool, List[MarkupNode]] = True
            value_start = value_end = self.position

            self.whitespace_skip()
            if self.position < len(self.source) and self.source[self.position] == '=':
                self.position += 1
                self.whitespace_skip()
                value_start = self.position
                value = self.attributeValue_parse()
                value_end = self.position
            else:
                self.position = value_end

            prefix = name.split(':', 1)[0]
            kind = NodeKind.DIRECTIVE if ':' in name and prefix in DIRECTIVE_PREFIXES else NodeKind.ATTRIBUTE
            attributes.append(Attribute(kind, start, self.position, name, value, value_start, value_end))

    def attributeValue_parse(self) -> List[MarkupNode]:
        """
        Parse an attribute value into Text and MustacheTag parts

        Handles "quoted", 'quoted', {expression} and unquoted values. An
        empty quoted value yields one empty Text part.
        """
        if self.position >= len(self.source):
            self.error("Expected attribute value", self.position)

        quote = self.source[self.position] if self.source[self.position] in '"\'' else None
        if quote:
            self.position += 1

        parts: List[MarkupNode] = []
        text_start = self.position

        while True:
            if self.position >= len(self.source):
                self.error("Unexpected end of input in attribute value", text_start)

            char = self.source[self.position]
            if quote and char == quote:
                break
            if not quote and (char.isspace() or char == '>' or self.source.startswith('/>', self.position)):
                break

            if char == '{':
                if self.position > text_start:
                    parts.append(Text(
                        NodeKind.TEXT, text_start, self.position, self.source[text_start:self.position]
                    ))
                end = self.expression_findEnd(self.position + 1)
                parts.append(Expression(
                    NodeKind.MUSTACHE_TAG, self.position, end + 1, self.source[self.position + 1:end].strip()
                ))
                self.position = end + 1
                text_start = self.position
                continue

            self.position += 1

        if self.position > text_start or (quote and not parts):
            parts.append(Text(
                NodeKind.TEXT, text_start, self.position, self.source[text_start:self.position]
            ))

        if quote:
            self.position += 1
        elif not parts:
            self.error("Expected attribute value", self.position)

        return parts

    def mustache_parse(self) -> None:
        """Parse {expression}, {@html ...} and block/branch tags"""
        start = self.position
        closing = _BLOCK_CLOSE.match(self.source, start)
        if closing:
            self.position = closing.end()
            self.block_close(closing.group(1), start, closing.end())
            return
        if _BLOCK_SLASH.match(self.source, start):
            self.error("Expected block name after {/", start)

        end = self.expression_findEnd(start + 1)
        inner = self.source[start + 1:end]
        stripped = inner.strip()
        self.position = end + 1

        if stripped.startswith('#'):
            match = _BLOCK_NAME.match(inner)
            if not match:
                self.error("Expected block name after {#", start)
            block = Block(
                NodeKind.BLOCK, start, end + 1, match.group(1), inner[match.end():].strip()
            )
            self.current().children.append(block)
            self.stack.append(block)
        elif stripped.startswith(':'):
            if not isinstance(self.current(), Block):
                self.error(f"{{{stripped}}} can only appear inside a block", start)
            self.current().children.append(Expression(NodeKind.BRANCH, start, end + 1, stripped))
        elif stripped.startswith('@html'):
            self.current().children.append(
                Expression(NodeKind.RAW_MUSTACHE_TAG, start, end + 1, stripped[5:].strip())
            )
        else:
            self.current().children.append(
                Expression(NodeKind.MUSTACHE_TAG, start, end + 1, stripped)
            )

    def block_close(self, name: str, start: int, end: int) -> None:
        current = self.current()
        if isinstance(current, Tag):
            self.error(f"Expected </{current.name}> before {{/{name}}}", start)
        if not isinstance(current, Block):
            self.error(f"Unexpected block closing tag {{/{name}}}", start)
        if current.name != name:
            self.error(f"Expected {{/{current.name}}}, found {{/{name}}}", start)
        current.end = end
        self.stack.pop()

    def expression_findEnd(self, start: int) -> int:
        """
        Find the closing brace of an expression using depth tracking

        Args:
            start: Position just after the opening '{'

        Returns:
            Position of the matching '}'

        Raises:
            ParseError: If input ends before the braces balance
        """
        depth = 1
        pos = start

        while pos < len(self.source):
            char = self.source[pos]
            if char in '"\'`':
                pos = self.string_skip(pos)
                continue
            if self.source.startswith('//', pos):
                newline = self.source.find('\n', pos)
                pos = len(self.source) if newline == -1 else newline
                continue
            if self.source.startswith('/*', pos):
                close = self.source.find('*/', pos + 2)
                if close == -1:
                    self.error("Comment in expression was left open", pos)
                pos = close + 2
                continue
            if char == '/' and self.regex_allowed(start, pos):
                pos = self.regex_skip(pos)
                continue
            if char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return pos
            pos += 1

        self.error("Expected '}' to close expression", start - 1)

    def string_skip(self, start: int) -> int:
        """Return the position just past the JS string or template literal at start"""
        quote = self.source[start]
        pos = start + 1

        while pos < len(self.source):
            char = self.source[pos]
            if char == '\\':
                pos += 2
                continue
            if char == quote:
                return pos + 1
            if quote == '`' and self.source.startswith('${', pos):
                pos = self.expression_findEnd(pos + 2) + 1
                continue
            pos += 1

        self.error("Unterminated string in expression", start)

    def regex_allowed(self, start: int, pos: int) -> bool:
        """
        Whether a '/' at pos opens a regex literal rather than dividing

        True at the start of the expression or after an operator or opening
        punctuation; after an identifier, number or closing bracket it is
        a division.
        """
        before = self.source[start:pos].rstrip()
        return not before or before[-1] in REGEX_PRECEDERS

    def regex_skip(self, start: int) -> int:
        """Return the position just past the regex literal (and flags) at start"""
        pos = start + 1
        in_class = False

        while pos < len(self.source) and self.source[pos] != '\n':
            char = self.source[pos]
            if char == '\\':
                pos += 2
                continue
            if char == '[':
                in_class = True
            elif char == ']':
                in_class = False
            elif char == '/' and not in_class:
                pos += 1
                while pos < len(self.source) and self.source[pos].isalpha():
                    pos += 1
                return pos
            pos += 1

        self.error("Unterminated regular expression in expression", start)

    def whitespace_skip(self) -> None:
        while self.position < len(self.source) and self.source[self.position].isspace():
            self.position += 1

    def error(self, message: str, position: int) -> None:
        """
        Report a markup error at position

        Raises:
            ParseError: Always
        """
        raise ParseError(message, self.source, position, self.filename)
