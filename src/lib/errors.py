"""
Exception hierarchy for classforward

Every failure aborts processing of the current document; nothing here is
downgraded to a warning.
"""

from typing import Optional


class ClassForwardError(Exception):
    """Base class for all classforward failures"""
    pass


class NameDerivationError(ClassForwardError, ValueError):
    """Raised when a filename sanitizes to an empty component identifier"""

    def __init__(self, filename: str):
        self.filename = filename
        super().__init__(f"Could not derive component name from file {filename}")


class ParseError(ClassForwardError, SyntaxError):
    """
    Raised when markup or style text is malformed

    Carries the source position so callers can point at the offending text.

    Attributes:
        message: Human-readable error description
        filename: Display filename of the section (may be None)
        position: Character offset within the section
        line: 1-based line number of the offset
        column: 0-based column of the offset
    """

    def __init__(
        self,
        message: str,
        source: str,
        position: int,
        filename: Optional[str] = None,
    ):
        line = source.count('\n', 0, position) + 1
        column = position - (source.rfind('\n', 0, position) + 1)

        context_start = max(0, position - 40)
        context_end = min(len(source), position + 40)
        context = source[context_start:context_end].replace('\n', ' ')

        super().__init__(
            f"\n{message}\n"
            f"{filename or '<input>'}: line {line}, column {column}\n"
            f"Context: ...{context}...\n"
            f"         {' ' * (position - context_start)}^"
        )
        self.message = message
        self.filename = filename
        self.position = position
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else self.message


class EditConflictError(ClassForwardError, ValueError):
    """Raised when two positional edits target incompatible ranges"""
    pass


class NamerLoadError(ClassForwardError, ImportError):
    """Raised when a configured 'module:function' class namer cannot be loaded"""
    pass
