"""
Markup instrumentation for class forwarding

Two edits make a class flow from a usage site into a child component:

- every plain element merges the forwarding prop into its class list, so
  whatever class the component receives lands on its rendered elements

      <div class="card">   ->   <div class={'card ' + _forwardedClass}>

- every component usage mentioned in the style text receives the scoped
  class through that prop

      <Button/>            ->   <Button _forwardedClass='scoped-1a2b3c-button'/>

The "mentioned in the style text" test is a plain substring check on the
raw style content: a class named .Buttonish counts as a reference to
Button, and aliased references are missed.
"""

from typing import List, Optional

from ..models.markup import Attribute, MarkupNode, NodeKind, Tag
from .edits import EditBuffer
from .log import LOG
from .naming import ClassNamer, parentName_resolve, scopedClass_default, scopedClass_make
from .walker import WalkContext, walk


def jsString_quote(text: str) -> str:
    """Single-quoted JS string literal for text"""
    return "'" + text.replace('\\', '\\\\').replace("'", "\\'") + "'"


class MarkupInstrumenter:
    """
    Records class forwarding edits for one markup section

    Attributes:
        css: Raw style text of the same component, or None if it has none
        filename: Display filename, used to derive the parent name
        prop_name: Name of the forwarding prop
        namer: Scoped class namer
    """

    def __init__(
        self,
        css: Optional[str],
        prop_name: str,
        filename: Optional[str] = None,
        namer: ClassNamer = scopedClass_default,
    ) -> None:
        self.css = css
        self.prop_name = prop_name
        self.filename = filename
        self.namer = namer
        self.parent = parentName_resolve(filename)
        self.buffer: Optional[EditBuffer] = None
        self.components_marked = 0
        self.elements_marked = 0

    def instrument(self, tree: MarkupNode, buffer: EditBuffer) -> EditBuffer:
        """
        Walk tree and record edits into buffer

        Args:
            tree: Fragment parsed from buffer.original
            buffer: EditBuffer over the markup text (other passes may share it)

        Returns:
            buffer, for chaining
        """
        self.buffer = buffer
        walk(tree, enter=self.node_enter)
        LOG(
            f"Instrumented {self.elements_marked} element(s) and "
            f"{self.components_marked} component(s) in {self.filename or '<markup>'}",
            level=2,
        )
        return buffer

    def node_enter(self, node: MarkupNode, ctx: WalkContext) -> None:
        if node.kind is NodeKind.INLINE_COMPONENT:
            self.component_mark(node)
        elif node.kind is NodeKind.ELEMENT:
            self.element_mark(node)

    def component_mark(self, tag: Tag) -> None:
        """Pass the scoped class to a component the style text refers to"""
        if self.css is None or tag.name not in self.css:
            return

        class_name = scopedClass_make(self.namer, self.css, self.parent, tag.name, self.filename)
        self.buffer.insert_after(
            tag.start + 1 + len(tag.name),
            f" {self.prop_name}='{class_name}'",
        )
        self.components_marked += 1
        LOG(f"<{tag.name}> receives {class_name}", level=3)

    def element_mark(self, tag: Tag) -> None:
        """
        Merge the forwarding prop into an element's class attribute

        - no class:              class={P}
        - class (bare):          class={P}
        - class="v":             class={'v ' + P}
        - class={e}:             class={e + " " + P}
        - {class}:               class={class + " " + P}
        - class="a {b} c":       class={'a ' + (b) + ' c' + " " + P}
        """
        attribute = tag.attribute_find('class')
        prop = self.prop_name
        self.elements_marked += 1

        if attribute is None:
            self.buffer.insert_after(tag.start + 1 + len(tag.name), f" class={{{prop}}}")
            return

        if attribute.value is True:
            self.buffer.replace_range(attribute.start, attribute.end, f"class={{{prop}}}")
            return

        parts: List[MarkupNode] = attribute.value
        if len(parts) == 1:
            part = parts[0]
            if part.kind is NodeKind.TEXT:
                literal = jsString_quote(part.raw + ' ')
                self.buffer.replace_range(
                    attribute.value_start, attribute.value_end, f"{{{literal} + {prop}}}"
                )
                return
            if part.kind is NodeKind.MUSTACHE_TAG:
                self.buffer.insert_before(part.end - 1, f' + " " + {prop}')
                return
            if part.kind is NodeKind.ATTRIBUTE_SHORTHAND:
                self.buffer.replace_range(
                    attribute.start, attribute.end, f'class={{{part.expression} + " " + {prop}}}'
                )
                return

        self.mixedValue_merge(attribute, parts)

    def mixedValue_merge(self, attribute: Attribute, parts: List[MarkupNode]) -> None:
        """Replace a multi-part class value with one concatenation expression"""
        pieces = []
        for part in parts:
            if part.kind is NodeKind.TEXT:
                pieces.append(jsString_quote(part.raw))
            else:
                pieces.append(f"({part.expression})")
        expression = ' + '.join(pieces)
        self.buffer.replace_range(
            attribute.value_start,
            attribute.value_end,
            f'{{{expression} + " " + {self.prop_name}}}',
        )


def markup_instrument(
    tree: MarkupNode,
    buffer: EditBuffer,
    css: Optional[str],
    prop_name: str,
    filename: Optional[str] = None,
    namer: Optional[ClassNamer] = None,
) -> EditBuffer:
    """
    Record class forwarding edits for a parsed markup section

    Args:
        tree: Fragment parsed from buffer.original
        buffer: EditBuffer over the markup text
        css: Raw (not rewritten) style text of the component, or None
        prop_name: Forwarding prop name
        filename: Display filename
        namer: Scoped class namer (default: scopedClass_default)

    Returns:
        buffer with the edits added
    """
    instrumenter = MarkupInstrumenter(css, prop_name, filename, namer or scopedClass_default)
    return instrumenter.instrument(tree, buffer)
