"""
Host pipeline for whole component documents

Processing one document:
1. Extract: <script> and <style> contents are replaced by markers, so the
   markup parser only sees markup
2. Transform sections: the instance script gets the forwarding prop
   declaration, the style gets component selectors rewritten (the two are
   independent)
3. Instrument markup: the marked markup is instrumented using the raw,
   not-yet-rewritten style text as its lookup source
4. Re-splice: the transformed sections replace their markers in the same
   edit pass, and the position maps are chained back to the original

Any failure aborts the document; nothing partial is returned.

Example:
    >>> result = Preprocessor().process('<Foo/>\\n<style>Foo { color: red }</style>', 'App.svelte')
    >>> print(result.code)    # doctest: +SKIP
    <Foo _forwardedClass='scoped-...-foo'/>
    <style>:global(.scoped-...-foo) { color: red }</style>
    <script>
    export let _forwardedClass = ""
    </script>
"""

import re
from typing import List, Optional, Tuple

from ..config import appsettings
from ..models.document import DocumentResult, Processed, Section, SourceText
from .edits import EditBuffer, PositionMap
from .errors import EditConflictError
from .instrument import markup_instrument
from .log import LOG
from .markup import MarkupParser
from .naming import ClassNamer, namer_load
from .script import script_instrument
from .selectors import style_rewrite
from .style import StyleParser

_SECTION = re.compile(
    r'<(script|style)(\s[^>]*?)?(?:>(.*?)</\1\s*>|/>)',
    re.DOTALL | re.IGNORECASE,
)
_COMMENT = re.compile(r'<!--.*?-->', re.DOTALL)


def sections_find(source: SourceText) -> List[Section]:
    """
    Locate <script> and <style> sections outside HTML comments

    Args:
        source: Whole component document

    Returns:
        Sections in document order
    """
    comments = [match.span() for match in _COMMENT.finditer(source.text)]

    sections: List[Section] = []
    for match in _SECTION.finditer(source.text):
        if any(start <= match.start() < end for start, end in comments):
            continue
        self_closing = match.group(3) is None
        content_start = match.end() if self_closing else match.start(3)
        sections.append(Section(
            tag=match.group(1).lower(),
            attributes=match.group(2) or '',
            source=SourceText(match.group(3) or '', source.filename),
            content_start=content_start,
            content_end=match.end() if self_closing else match.end(3),
            tag_start=match.start(),
            tag_end=match.end(),
            self_closing=self_closing,
        ))
    return sections


class Preprocessor:
    """
    Class forwarding preprocessor

    Exposes one transform per section kind (markup, script, style) plus
    process() for whole documents.

    Attributes:
        namer: Scoped class namer shared by the markup and style transforms
        prop_name: Forwarding prop name
    """

    def __init__(
        self,
        namer: Optional[ClassNamer] = None,
        prop_name: Optional[str] = None,
    ) -> None:
        """
        Args:
            namer: Custom class namer; defaults to settings.class_namer or
                   the built-in "<prefix>-<hash>-<child>" namer
            prop_name: Forwarding prop name; defaults to settings.prop_name
        """
        self.namer = namer or namer_load(appsettings.class_namer)
        self.prop_name = prop_name or appsettings.prop_name

    def script(self, content: str, filename: Optional[str] = None) -> Processed:
        """Append the forwarding prop declaration to instance script content"""
        code = script_instrument(content, self.prop_name)
        buffer = EditBuffer(content, filename)
        buffer.insert_after(len(content), code[len(content):])
        _, position_map = buffer.render()
        return Processed(code, position_map)

    def style(self, content: str, filename: Optional[str] = None) -> Processed:
        """
        Rewrite component selectors in style content

        Raises:
            ParseError: If the style text is malformed
            NameDerivationError: If filename yields no component name
        """
        tree = StyleParser(content, filename).parse()
        code, position_map = style_rewrite(tree, content, filename, self.namer).render()
        return Processed(code, position_map)

    def markup(
        self,
        content: str,
        filename: Optional[str] = None,
        css: Optional[str] = None,
    ) -> Processed:
        """
        Instrument markup for class forwarding

        Args:
            content: Markup text (script/style contents already extracted)
            filename: Display filename
            css: Raw style text of the same component, or None

        Raises:
            ParseError: If the markup is malformed
        """
        tree = MarkupParser(content, filename).parse()
        buffer = markup_instrument(
            tree, EditBuffer(content, filename), css, self.prop_name, filename, self.namer
        )
        code, position_map = buffer.render()
        return Processed(code, position_map)

    def process(self, text: str, filename: Optional[str] = None) -> DocumentResult:
        """
        Transform a whole component document

        Args:
            text: Document text
            filename: Display filename (drives the parent component name)

        Returns:
            DocumentResult with the reassembled document and a map back to text

        Raises:
            ParseError, NameDerivationError, EditConflictError
        """
        source = SourceText(text, filename)
        sections = sections_find(source)
        LOG(f"Found {len(sections)} section(s) in {filename or '<document>'}", level=2)

        marked, extraction_map = self.sections_extract(source, sections)

        style_section = next((s for s in sections if s.tag == 'style'), None)
        script_section = next((s for s in sections if s.tag == 'script' and not s.module), None)

        codes: List[str] = []
        style_result: Optional[Processed] = None
        script_result: Optional[Processed] = None
        for section in sections:
            if section.tag == 'style':
                processed = self.style(section.source.text, filename)
                if section is style_section:
                    style_result = processed
                codes.append(processed.code)
            elif section is script_section:
                script_result = self.script(section.source.text, filename)
                codes.append(script_result.code)
            else:
                codes.append(section.source.text)

        css = style_section.source.text if style_section else None
        tree = MarkupParser(marked, filename).parse()
        buffer = markup_instrument(
            tree, EditBuffer(marked, filename), css, self.prop_name, filename, self.namer
        )

        for section, code in zip(sections, codes):
            self.marker_resplice(buffer, section, code)

        if script_section is None:
            LOG("No instance script; appending one for the forwarding prop", level=2)
            buffer.insert_after(
                len(marked), f"\n<script>{script_instrument('', self.prop_name)}</script>\n"
            )

        code, markup_map = buffer.render()
        return DocumentResult(
            code=code,
            map=markup_map.compose(extraction_map),
            script=script_result,
            style=style_result,
        )

    def sections_extract(self, source: SourceText, sections: List[Section]) -> Tuple[str, PositionMap]:
        """
        Replace section contents with markers

        Records each marker's span in the marked text on its Section.

        Returns:
            Tuple of (marked text, PositionMap from marked text to source)
        """
        buffer = EditBuffer(source.text, source.filename)
        delta = 0
        for section in sections:
            marker = appsettings.style_marker if section.tag == 'style' else appsettings.script_marker
            if section.self_closing:
                opening = f"<{section.tag}{section.attributes.rstrip()}>"
                expanded = f"{opening}{marker}</{section.tag}>"
                section.marker_start = section.tag_start + delta + len(opening)
                section.marker_end = section.marker_start + len(marker)
                delta += len(expanded) - (section.tag_end - section.tag_start)
                buffer.replace_range(section.tag_start, section.tag_end, expanded)
                continue

            section.marker_start = section.content_start + delta
            section.marker_end = section.marker_start + len(marker)
            delta += len(marker) - (section.content_end - section.content_start)

            if section.content_end > section.content_start:
                buffer.replace_range(section.content_start, section.content_end, marker)
            else:
                buffer.insert_before(section.content_start, marker)
        return buffer.render()

    def marker_resplice(self, buffer: EditBuffer, section: Section, code: str) -> None:
        """Swap a section's marker for its transformed content"""
        marker = buffer.original[section.marker_start:section.marker_end]
        expected = appsettings.style_marker if section.tag == 'style' else appsettings.script_marker
        if marker != expected:
            raise EditConflictError(
                f"Marker for <{section.tag}> not found at offset {section.marker_start}"
            )
        buffer.replace_range(section.marker_start, section.marker_end, code)
