"""
Pygments lexer for component style sections

Used by StyleParser to find rule boundaries: it splits style text into
tokens with exact offsets so that braces, semicolons and commas inside
comments and strings are never mistaken for structure.

Token types:
- Comment.Multiline: /* ... */
- Comment: <!-- and --> (CDO/CDC)
- String.Double / String.Single: quoted strings
- Keyword: at-rule names (e.g., @media)
- Punctuation: { } ; ,
- Whitespace
- Text: everything else (selectors, property names, values)
- Error: unterminated comments and strings
"""

import re

from pygments.lexer import RegexLexer
from pygments.token import (
    Comment,
    Error,
    Keyword,
    Punctuation,
    String,
    Text,
    Whitespace,
)


class StyleLexer(RegexLexer):
    """
    Structural lexer for CSS

    Example:
        Foo .bar { color: red; }

    Tokens:
        Foo, .bar      → Text (separated by Whitespace)
        {              → Punctuation
        color:, red    → Text
        ;  }           → Punctuation
    """

    name = 'ComponentStyle'
    aliases = ['component-style']
    filenames = []

    flags = re.MULTILINE | re.DOTALL

    tokens = {
        'root': [
            (r'\s+', Whitespace),

            # Comments
            (r'/\*.*?\*/', Comment.Multiline),
            (r'/\*', Error),
            (r'<!--|-->', Comment),

            # Strings (a backslash escapes the next character, newlines included)
            (r'"(?:\\.|[^"\\])*"', String.Double),
            (r"'(?:\\.|[^'\\])*'", String.Single),
            (r'["\']', Error),

            # At-rule names
            (r'@[\w-]+', Keyword),

            # Structure
            (r'[{};,]', Punctuation),

            # Everything else
            (r'[^\s{};,"\'/@<-]+', Text),
            (r'.', Text),
        ],
    }
