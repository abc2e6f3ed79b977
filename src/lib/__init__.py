"""
classforward - Class forwarding preprocessor for single-file components

Forwards usage-site classes into child components and rewrites component
type selectors into scoped global class selectors.
"""

__version__ = "1.0.0"

from .preprocessor import Preprocessor
from .markup import MarkupParser
from .style import StyleParser
from .edits import EditBuffer, PositionMap
from .naming import string_hash, scopedClass_default, componentName_derive
from .errors import ClassForwardError, NameDerivationError, ParseError, EditConflictError, NamerLoadError
from .log import LOG, state_connectToLogger

__all__ = [
    "Preprocessor",
    "MarkupParser",
    "StyleParser",
    "EditBuffer",
    "PositionMap",
    "string_hash",
    "scopedClass_default",
    "componentName_derive",
    "ClassForwardError",
    "NameDerivationError",
    "ParseError",
    "EditConflictError",
    "NamerLoadError",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
