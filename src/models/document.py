"""
Document-level data models

Types passed between the host pipeline (lib/preprocessor.py) and its
section transforms.
"""

from dataclasses import dataclass
import re
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.edits import PositionMap


@dataclass(frozen=True)
class SourceText:
    """
    Immutable text of one document or section plus its display filename

    Attributes:
        text: The text itself
        filename: Display filename used for naming and diagnostics (may be None)
    """
    text: str
    filename: Optional[str] = None


@dataclass
class Section:
    """
    A <script> or <style> section found in a component document

    Attributes:
        tag: "script" or "style"
        attributes: Raw attribute text of the opening tag (e.g. ' lang="ts"')
        source: Section content with the document's filename
        content_start: Offset of the content in the original document
        content_end: End offset of the content in the original document
        marker_start: Offset of the stand-in marker in the marked markup
        marker_end: End offset of the marker in the marked markup
        tag_start: Offset of the opening "<" in the original document
        tag_end: End offset of the whole section in the original document
        self_closing: True for <style /> and <script />, which are expanded to
                      an open and close pair around the marker
    """
    tag: str
    attributes: str
    source: SourceText
    content_start: int
    content_end: int
    marker_start: int = 0
    marker_end: int = 0
    tag_start: int = 0
    tag_end: int = 0
    self_closing: bool = False

    @property
    def module(self) -> bool:
        """True for <script context="module">, which is left alone"""
        return bool(re.search(r'context\s*=\s*["\']?module\b', self.attributes))


@dataclass
class Processed:
    """
    Output of one transform

    Attributes:
        code: Transformed text
        map: Offsets in code mapped back to offsets in the input text
    """
    code: str
    map: "PositionMap"


@dataclass
class DocumentResult:
    """
    Output of a whole-document run

    Attributes:
        code: Reassembled document
        map: Offsets in code mapped back to offsets in the original document
             (text inside transformed sections maps to the section start)
        script: Result of the instance script transform, if there was one
        style: Result of the style transform, if there was one
    """
    code: str
    map: "PositionMap"
    script: Optional[Processed] = None
    style: Optional[Processed] = None
