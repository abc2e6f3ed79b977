"""
classforward - Class forwarding preprocessor for single-file components

Lets a parent style a child component by its type name (Button .icon { })
and forwards the generated scoped class into the child's rendered elements.
"""

__version__ = "1.0.0"

from .lib import (
    Preprocessor,
    string_hash,
    scopedClass_default,
    componentName_derive,
    ClassForwardError,
    NameDerivationError,
    ParseError,
    EditConflictError,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Preprocessor",
    "string_hash",
    "scopedClass_default",
    "componentName_derive",
    "ClassForwardError",
    "NameDerivationError",
    "ParseError",
    "EditConflictError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
