"""
Positional text editing with an output-to-input position map

A section is never mutated in place. Passes record edits against the
original offsets in an EditBuffer, and the buffer is rendered once into the
final text plus a PositionMap. Offsets are Python string indices.

Ordering at a single offset:
    1. insert_after texts, in call order (they belong to the text on the left)
    2. insert_before texts, in call order (they belong to the text on the right)
    3. a replacement starting at that offset, or the original character

Example:
    >>> buf = EditBuffer("Foo .bar {}")
    >>> buf.replace_range(0, 3, ":global(")
    >>> buf.insert_after(8, ".x")
    >>> buf.insert_after(8, ")")
    >>> buf.render()[0]
    ':global( .bar.x) {}'
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import EditConflictError


@dataclass(frozen=True)
class Segment:
    """
    One run of generated text and the original range it came from

    When both ranges have the same length the mapping is linear (copied
    text). Otherwise every generated offset in the run maps to
    original_start (inserted or replacement text).
    """
    generated_start: int
    generated_end: int
    original_start: int
    original_end: int

    @property
    def linear(self) -> bool:
        return (self.generated_end - self.generated_start) == (self.original_end - self.original_start)


class PositionMap:
    """
    Maps offsets in generated text back to offsets in the original text

    Attributes:
        segments: Contiguous segments covering the generated text in order
        generated_length: Length of the generated text
        original_length: Length of the original text
        source: Display filename of the original text
    """

    def __init__(
        self,
        segments: List[Segment],
        generated_length: int,
        original_length: int,
        source: Optional[str] = None,
    ) -> None:
        self.segments = segments
        self.generated_length = generated_length
        self.original_length = original_length
        self.source = source
        self._starts = [segment.generated_start for segment in segments]

    def original_offset(self, generated: int) -> int:
        """
        Original offset for a generated offset

        Args:
            generated: Offset in generated text, 0 <= generated <= generated_length

        Returns:
            Corresponding offset in the original text
        """
        if generated < 0 or generated > self.generated_length:
            raise IndexError(f"Offset {generated} outside generated text of length {self.generated_length}")
        if generated == self.generated_length:
            return self.original_length

        segment = self.segments[bisect_right(self._starts, generated) - 1]
        if segment.linear:
            return segment.original_start + (generated - segment.generated_start)
        return segment.original_start

    def compose(self, inner: "PositionMap") -> "PositionMap":
        """
        Chain this map (generated -> middle) with inner (middle -> original)

        Args:
            inner: Map whose generated text is this map's original text

        Returns:
            Map from this map's generated text to inner's original text
        """
        composed: List[Segment] = []

        for segment in self.segments:
            if not segment.linear:
                composed.append(Segment(
                    segment.generated_start,
                    segment.generated_end,
                    inner.original_offset(segment.original_start),
                    inner.original_offset(segment.original_end),
                ))
                continue

            # Split copied text along the inner map's segment boundaries
            middle = segment.original_start
            while middle < segment.original_end:
                piece = inner.segments[bisect_right(inner._starts, middle) - 1]
                piece_end = min(piece.generated_end, segment.original_end)
                generated = segment.generated_start + (middle - segment.original_start)
                length = piece_end - middle
                if piece.linear:
                    original = piece.original_start + (middle - piece.generated_start)
                    composed.append(Segment(generated, generated + length, original, original + length))
                else:
                    composed.append(Segment(
                        generated, generated + length, piece.original_start, piece.original_end
                    ))
                middle = piece_end

        return PositionMap(composed, self.generated_length, inner.original_length, inner.source)

    def to_dict(self) -> Dict[str, object]:
        """Serializable form (used for the CLI's .map.json files)"""
        return {
            'version': 1,
            'source': self.source,
            'generatedLength': self.generated_length,
            'originalLength': self.original_length,
            'segments': [
                [s.generated_start, s.generated_end, s.original_start, s.original_end]
                for s in self.segments
            ],
        }


class EditBuffer:
    """
    Append-only list of positional edits over one section of text

    Owned by a single pass over a single section and rendered exactly once.

    Attributes:
        original: Text the edits refer to
        source: Display filename, carried into the PositionMap
    """

    def __init__(self, original: str, source: Optional[str] = None) -> None:
        self.original = original
        self.source = source
        self.inserts_after: Dict[int, List[str]] = {}
        self.inserts_before: Dict[int, List[str]] = {}
        self.replacements: List[Tuple[int, int, str]] = []
        self.rendered = False

    def offset_check(self, offset: int) -> None:
        """Reject offsets outside [0, len(original)] and edits after rendering"""
        if self.rendered:
            raise EditConflictError("EditBuffer has already been rendered")
        if offset < 0 or offset > len(self.original):
            raise EditConflictError(
                f"Offset {offset} outside text of length {len(self.original)}"
            )

    def insert_after(self, offset: int, text: str) -> None:
        """Insert text at offset, attached to the text before it"""
        self.offset_check(offset)
        self.inserts_after.setdefault(offset, []).append(text)

    def insert_before(self, offset: int, text: str) -> None:
        """Insert text at offset, attached to the text after it"""
        self.offset_check(offset)
        self.inserts_before.setdefault(offset, []).append(text)

    def replace_range(self, start: int, end: int, text: str) -> None:
        """
        Replace original[start:end] with text

        Raises:
            EditConflictError: If the range is empty or overlaps an earlier replacement
        """
        self.offset_check(start)
        self.offset_check(end)
        if start >= end:
            raise EditConflictError(f"Cannot replace empty range [{start}, {end})")
        for other_start, other_end, _ in self.replacements:
            if start < other_end and other_start < end:
                raise EditConflictError(
                    f"Replacement [{start}, {end}) overlaps [{other_start}, {other_end})"
                )
        self.replacements.append((start, end, text))

    def render(self) -> Tuple[str, PositionMap]:
        """
        Apply all edits

        Returns:
            Tuple of (final text, PositionMap from final to original offsets)

        Raises:
            EditConflictError: If an insert falls strictly inside a replaced
                               range, or the buffer was already rendered
        """
        if self.rendered:
            raise EditConflictError("EditBuffer has already been rendered")
        self.rendered = True

        replacements = {start: (end, text) for start, end, text in self.replacements}
        for offset in list(self.inserts_after) + list(self.inserts_before):
            for start, end, _ in self.replacements:
                if start < offset < end:
                    raise EditConflictError(
                        f"Insert at {offset} falls inside replaced range [{start}, {end})"
                    )

        points = sorted(
            set(self.inserts_after) | set(self.inserts_before) | set(replacements) | {len(self.original)}
        )

        parts: List[str] = []
        segments: List[Segment] = []
        generated = 0
        position = 0

        def emit(text: str, original_start: int, original_end: int) -> None:
            nonlocal generated
            if not text:
                return
            parts.append(text)
            segments.append(Segment(generated, generated + len(text), original_start, original_end))
            generated += len(text)

        for point in points:
            if point < position:
                # Swallowed by a replacement; boundary inserts were rejected above
                continue
            emit(self.original[position:point], position, point)
            position = point
            emit(''.join(self.inserts_after.get(point, [])), point, point)
            emit(''.join(self.inserts_before.get(point, [])), point, point)
            if point in replacements:
                end, text = replacements[point]
                emit(text, point, end)
                position = end

        emit(self.original[position:], position, len(self.original))

        return ''.join(parts), PositionMap(segments, generated, len(self.original), self.source)
