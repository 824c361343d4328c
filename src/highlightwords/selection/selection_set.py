"""Interval algebra over colored selections.

A ``SelectionSet`` holds a sorted, non-overlapping tuple of ``Selection``
values over one ``DecodedDocument``.  Together with the uncolored gaps
between them, the selections partition ``[0, len(document))``.

Every mutation derives a new tuple through the pure functions below,
checks the partition invariant on it, and only then replaces the stored
tuple.  Selections are never patched in place.

Insertion order of operations:

1. trim existing selections that overlap the new one (drop the ones it
   covers entirely),
2. split existing selections that strictly contain the new one,
3. add the new selection,
4. drop cleared (``color == ""``) entries,
5. sort by ``start``.

The newest selection always wins; colors are never blended.
"""

# Pattern: Functional Core (pure transforms) + thin stateful shell

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from highlightwords.errors import DegenerateSelection, SelectionInvariantError
from highlightwords.selection.model import CLEARED, Selection

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from highlightwords.markup.structure import DecodedDocument

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pure transforms
# ---------------------------------------------------------------------------


def _append_remainder(result: list[Selection], remainder: Selection) -> None:
    # A remainder over markup alone (a boundary, a tag) highlights nothing
    if remainder.text:
        result.append(remainder)


def trim_overlaps(
    selections: Iterable[Selection], new: Selection, document: DecodedDocument
) -> list[Selection]:
    """Shrink selections that partially overlap *new*; drop ones it covers.

    Selections that strictly contain *new* are left for ``split_containing``.
    Remainders with no visible characters are dropped.
    """
    result: list[Selection] = []
    for existing in selections:
        if not existing.overlaps(new) or existing.strictly_contains(new):
            result.append(existing)
        elif new.covers(existing):
            continue
        elif new.start <= existing.start < new.end:
            _append_remainder(
                result, existing.with_range(new.end, existing.end, document)
            )
        else:
            # existing.end falls inside new
            _append_remainder(
                result, existing.with_range(existing.start, new.start, document)
            )
    return result


def split_containing(
    selections: Iterable[Selection], new: Selection, document: DecodedDocument
) -> list[Selection]:
    """Split each selection that strictly contains *new* into two remainders."""
    result: list[Selection] = []
    for existing in selections:
        if existing.strictly_contains(new):
            for start, end in ((existing.start, new.start), (new.end, existing.end)):
                _append_remainder(result, existing.with_range(start, end, document))
        else:
            result.append(existing)
    return result


def insert_selection(
    selections: Iterable[Selection], new: Selection, document: DecodedDocument
) -> tuple[Selection, ...]:
    """Return the selections after inserting *new*.

    *new* is assumed valid (see ``validate_selection``).
    """
    trimmed = trim_overlaps(selections, new, document)
    split = split_containing(trimmed, new, document)
    split.append(new)
    kept = [selection for selection in split if not selection.is_cleared]
    return tuple(sorted(kept, key=lambda selection: selection.start))


def partition(selections: Sequence[Selection], length: int) -> list[Selection]:
    """Fill the gaps between sorted *selections* with uncolored segments.

    Returns segments covering ``[0, length)`` in order; gap segments have
    ``color == ""`` and no ``text``.
    """
    segments: list[Selection] = []
    done = 0
    for selection in selections:
        if selection.start > done:
            segments.append(Selection(start=done, end=selection.start))
        segments.append(selection)
        done = selection.end
    if done < length:
        segments.append(Selection(start=done, end=length))
    return segments


def check_partition(selections: Sequence[Selection], length: int) -> None:
    """Raise ``SelectionInvariantError`` unless *selections* are a valid set."""
    previous_end = 0
    for selection in selections:
        if not 0 <= selection.start < selection.end <= length:
            msg = f"selection {selection!r} outside [0, {length}] or empty"
            raise SelectionInvariantError(msg)
        if selection.start < previous_end:
            msg = f"selection {selection!r} overlaps or is out of order"
            raise SelectionInvariantError(msg)
        if selection.is_cleared:
            msg = f"cleared selection {selection!r} persisted"
            raise SelectionInvariantError(msg)
        previous_end = selection.end


def validate_selection(selection: object, length: int) -> Selection:
    """Check that *selection* can be inserted into a document of *length*.

    Raises:
        DegenerateSelection: If the range is empty, reversed, out of range,
            or the fields have the wrong types.
    """
    if not isinstance(selection, Selection):
        msg = f"not a Selection: {selection!r}"
        raise DegenerateSelection(msg)
    for bound in (selection.start, selection.end):
        if not isinstance(bound, int) or isinstance(bound, bool):
            msg = f"non-integer bound in {selection!r}"
            raise DegenerateSelection(msg)
    if not isinstance(selection.text, str) or not isinstance(selection.color, str):
        msg = f"text and color must be strings: {selection!r}"
        raise DegenerateSelection(msg)
    if selection.start == selection.end:
        msg = f"empty selection at {selection.start}"
        raise DegenerateSelection(msg)
    if not 0 <= selection.start < selection.end <= length:
        msg = f"range [{selection.start}, {selection.end}) outside [0, {length}]"
        raise DegenerateSelection(msg)
    return selection


# ---------------------------------------------------------------------------
# Stateful shell
# ---------------------------------------------------------------------------


class SelectionSet:
    """Ordered, non-overlapping colored selections over one document."""

    def __init__(
        self, document: DecodedDocument, selections: Iterable[Selection] = ()
    ) -> None:
        self._document = document
        self._selections: tuple[Selection, ...] = ()
        for selection in selections:
            self.insert(selection)

    @property
    def document(self) -> DecodedDocument:
        return self._document

    @property
    def selections(self) -> tuple[Selection, ...]:
        return self._selections

    def __iter__(self) -> Iterator[Selection]:
        return iter(self._selections)

    def __len__(self) -> int:
        return len(self._selections)

    def __repr__(self) -> str:
        return f"SelectionSet({list(self._selections)!r})"

    def insert(self, selection: Selection) -> None:
        """Insert *selection*, trimming/splitting whatever it overlaps.

        Degenerate selections are ignored and the previous state is kept.
        The stored ``text`` is re-derived from the document.
        """
        length = len(self._document)
        try:
            valid = validate_selection(selection, length)
        except DegenerateSelection as exc:
            logger.debug("Ignoring selection: %s", exc)
            return

        valid = replace(
            valid, text=self._document.visible_text(valid.start, valid.end)
        )
        updated = insert_selection(self._selections, valid, self._document)
        check_partition(updated, length)
        self._selections = updated

    def find_selection(self, position: int) -> Selection | None:
        """The selection whose range contains *position*, if any."""
        for selection in self._selections:
            if selection.contains(position):
                return selection
        return None

    def remove_selection(self, position: int) -> None:
        """Clear the selection covering *position* (no-op over a gap)."""
        selection = self.find_selection(position)
        if selection is None:
            return
        self.insert(replace(selection, color=CLEARED))

    def segments(self) -> list[Selection]:
        """Full partition of the document: selections plus uncolored gaps."""
        return partition(self._selections, len(self._document))

    def gaps(self) -> list[Selection]:
        """Uncolored segments only."""
        return [segment for segment in self.segments() if segment.is_cleared]

    def clear(self) -> None:
        self._selections = ()
