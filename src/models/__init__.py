"""
Models package for classforward

Contains data structures and type definitions for the transformation pipeline.
"""

from .state import ProgramState, pipeline
from .document import SourceText, Section, Processed, DocumentResult
from .markup import NodeKind, MarkupNode, Tag, Attribute, Text, Expression, Comment, Block, Fragment
from .style import StyleKind, StyleNode, SelectorPart, Selector, SelectorList, StyleBlock, Rule, Atrule, StyleSheet

__all__ = [
    "ProgramState",
    "pipeline",
    "SourceText",
    "Section",
    "Processed",
    "DocumentResult",
    "NodeKind",
    "MarkupNode",
    "Tag",
    "Attribute",
    "Text",
    "Expression",
    "Comment",
    "Block",
    "Fragment",
    "StyleKind",
    "StyleNode",
    "SelectorPart",
    "Selector",
    "SelectorList",
    "StyleBlock",
    "Rule",
    "Atrule",
    "StyleSheet",
]
