"""
Component selector rewriting

A selector that names a child component by its capitalized type, e.g.

    Button .icon:hover { ... }

cannot match anything by itself: the component renders its own elements.
The child instead receives a scoped class (forwarded from the usage site,
see instrument.py), so the selector is rewritten to target that class
globally:

    :global( .icon.scoped-1a2b3c-button:hover) { ... }

The class is computed from the whole style text plus parent and child names,
exactly as the markup pass computes it, so the two agree without sharing
state.
"""

from typing import List, Optional

from ..models.style import (
    CONNECTOR_KINDS,
    PSEUDO_KINDS,
    Selector,
    SelectorPart,
    StyleKind,
    StyleNode,
)
from .edits import EditBuffer
from .log import LOG
from .naming import ClassNamer, parentName_resolve, scopedClass_default, scopedClass_make
from .walker import WalkContext, walk

# Pseudo-classes that never take the scoped class
UNSCOPED_PSEUDOS = frozenset({'root', 'host'})


def componentSelector_find(selector: Selector) -> int:
    """
    Index of the first type selector naming a component, or -1

    A component selector is a TypeSelector whose name starts with an
    ASCII uppercase letter.
    """
    for index, part in enumerate(selector.children):
        if part.kind is StyleKind.TYPE_SELECTOR and 'A' <= part.name[0] <= 'Z':
            return index
    return -1


def selectorGroups_split(parts: List[SelectorPart]) -> List[List[SelectorPart]]:
    """
    Split the parts following a component selector into groups

    A new group starts at every Combinator or WhiteSpace part, so each
    group after the first is one connector followed by one compound
    selector. The first group holds whatever is attached directly to the
    component selector (e.g. ':hover') and may be empty.

    Example:
        parts of ":hover > .a.b .c"
        -> [[:hover], [>, .a, .b], [' ', .c]]
    """
    group: List[SelectorPart] = []
    groups = [group]
    for part in parts:
        if part.kind in CONNECTOR_KINDS:
            group = [part]
            groups.append(group)
        else:
            group.append(part)
    return groups


class SelectorRewriter:
    """
    Rewrites component selectors in one style section

    Attributes:
        content: Raw style text (hashed into the class name)
        filename: Display filename, used to derive the parent name
        namer: Scoped class namer
        buffer: Edits against content
    """

    def __init__(
        self,
        content: str,
        filename: Optional[str] = None,
        namer: ClassNamer = scopedClass_default,
    ) -> None:
        self.content = content
        self.filename = filename
        self.namer = namer
        self.parent = parentName_resolve(filename)
        self.buffer = EditBuffer(content, filename)
        self.rewritten = 0

    def rewrite(self, tree: StyleNode) -> EditBuffer:
        """
        Walk tree and record the edits for every component selector

        Args:
            tree: StyleSheet parsed from self.content

        Returns:
            The EditBuffer holding the edits (not yet rendered)
        """
        walk(tree, enter=self.node_enter)
        LOG(f"Rewrote {self.rewritten} component selector(s) in {self.filename or '<style>'}", level=2)
        return self.buffer

    def node_enter(self, node: StyleNode, ctx: WalkContext) -> None:
        if node.kind is not StyleKind.SELECTOR:
            return
        ctx.skip()
        self.selector_rewrite(node)

    def selector_rewrite(self, selector: Selector) -> None:
        """
        Record the edits for one complex selector

        1. Wrap the component selector and everything after it in :global( )
        2. Give the scoped class to the last simple selector of each
           trailing compound (pseudo-classes stay after it)
        """
        index = componentSelector_find(selector)
        if index == -1:
            return

        component = selector.children[index]
        following = selector.children[index + 1:]
        class_name = '.' + scopedClass_make(
            self.namer, self.content, self.parent, component.name, self.filename
        )
        LOG(f"Component selector {component.name} -> {class_name}", level=3)
        self.rewritten += 1

        if not following:
            self.buffer.replace_range(component.start, component.end, ':global(' + class_name)
            self.buffer.insert_after(component.end, ')')
            return

        self.buffer.replace_range(component.start, component.end, ':global(')

        for group in selectorGroups_split(following):
            self.group_mark(group, class_name)

        # Inserted after the class edits so a class appended at the same offset comes first
        self.buffer.insert_after(following[-1].end, ')')

    def group_mark(self, group: List[SelectorPart], class_name: str) -> None:
        """
        Attach class_name to one compound selector group

        Scanning back-to-front, pseudo-classes and pseudo-elements are
        passed over. The first other member gets the class (a Universal
        '*' is replaced by it). When only pseudos remain and the first
        member of the group is one, the class goes in front of it, except
        for :root and :host.
        """
        for position in range(len(group) - 1, -1, -1):
            part = group[position]

            if part.kind in PSEUDO_KINDS:
                if position == 0 and part.name not in UNSCOPED_PSEUDOS:
                    self.buffer.insert_before(part.start, class_name)
                continue

            if part.kind is StyleKind.UNIVERSAL and part.name == '*':
                self.buffer.replace_range(part.start, part.end, class_name)
            else:
                self.buffer.insert_after(part.end, class_name)
            return


def style_rewrite(
    tree: StyleNode,
    content: str,
    filename: Optional[str] = None,
    namer: Optional[ClassNamer] = None,
) -> EditBuffer:
    """
    Record component selector rewrites for a parsed style section

    Args:
        tree: StyleSheet parsed from content
        content: Raw style text
        filename: Display filename
        namer: Scoped class namer (default: scopedClass_default)

    Returns:
        EditBuffer with the rewrites, ready to render
    """
    rewriter = SelectorRewriter(content, filename, namer or scopedClass_default)
    return rewriter.rewrite(tree)
