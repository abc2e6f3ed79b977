"""
Depth-first walk over positioned trees

Works for markup and style trees alike: any node exposing
``children_iter()`` can be walked.

Usage:
    def enter(node, ctx):
        if node.kind is StyleKind.SELECTOR:
            ctx.skip()        # don't descend into this selector's parts
            ...

    walk(tree, enter=enter)
"""

from typing import Any, Callable


class WalkContext:
    """Control handle passed to the visitor callback"""

    def __init__(self) -> None:
        self._skipped = False

    def skip(self) -> None:
        """Do not visit the children of the node currently being entered"""
        self._skipped = True


Visitor = Callable[[Any, WalkContext], None]


def walk(node: Any, enter: Visitor) -> None:
    """
    Visit node and its descendants in document order

    Args:
        node: Root of the tree
        enter: Called on the way down; may call ctx.skip()
    """
    _visit(node, enter, WalkContext())


def _visit(node: Any, enter: Visitor, ctx: WalkContext) -> None:
    ctx._skipped = False
    enter(node, ctx)
    if ctx._skipped:
        ctx._skipped = False
        return

    for child in node.children_iter():
        _visit(child, enter, ctx)
