"""Selection value object."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from highlightwords.markup.structure import DecodedDocument

# Color value meaning "no highlight"; such selections never persist.
CLEARED = ""


@dataclass(frozen=True, slots=True)
class Selection:
    """A colored half-open range ``[start, end)`` over ``DecodedDocument.text``.

    Attributes:
        start: First document index (inclusive).
        end: Last document index (exclusive).
        text: Visible characters covered by the range.
        color: CSS color token, or ``""`` for a cleared range.
    """

    start: int
    end: int
    text: str = ""
    color: str = CLEARED

    @property
    def is_cleared(self) -> bool:
        return self.color == CLEARED

    def overlaps(self, other: Selection) -> bool:
        """Half-open overlap test; adjacency (``a.end == b.start``) is not overlap."""
        return self.start < other.end and other.start < self.end

    def contains(self, position: int) -> bool:
        return self.start <= position < self.end

    def covers(self, other: Selection) -> bool:
        """True if *other* lies entirely inside this range."""
        return self.start <= other.start and other.end <= self.end

    def strictly_contains(self, other: Selection) -> bool:
        """True if this range extends past *other* on both sides."""
        return self.start < other.start and self.end > other.end

    def with_range(
        self, start: int, end: int, document: DecodedDocument
    ) -> Selection:
        """Copy with a new range and ``text`` re-derived from *document*."""
        return replace(
            self, start=start, end=end, text=document.visible_text(start, end)
        )
