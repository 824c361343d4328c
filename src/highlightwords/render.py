"""Render a decoded document plus its selections back into markup.

Walks the partition of ``[0, len(document))`` formed by the selections and
the uncolored gaps between them.  Uncolored segments are decoded as-is.
Colored segments are split into visible runs and markup runs: each visible
run gets its own color span, while tags and structural boundaries sit
between independently closed and reopened spans.  A highlight therefore
continues visually across paragraphs and inline formatting, yet a span never
contains an unbalanced tag or a raw boundary placeholder.

Example: ``<p>ab</p><p>cd</p>`` with ``"bc"`` highlighted renders as::

    <p>a<span ...>b</span></p><p><span ...>c</span>d</p>
"""

# Pattern: Functional Core (pure read of document + selections)

from __future__ import annotations

import html as html_module
from dataclasses import dataclass
from typing import TYPE_CHECKING

from highlightwords.markup.mask import iter_runs, wrapper_mask
from highlightwords.markup.structure import decode_masked
from highlightwords.selection.selection_set import partition

if TYPE_CHECKING:
    from collections.abc import Iterable

    from highlightwords.markup.structure import DecodedDocument
    from highlightwords.selection.model import Selection

SPAN_OPEN_TEMPLATE = '<span style="background-color: {color};">'
SPAN_CLOSE = "</span>"


@dataclass(frozen=True)
class RenderedSegment:
    """Markup for one partition segment, with its aligned mask."""

    start: int
    end: int
    color: str
    markup: str
    mask: str


def span_open(color: str) -> str:
    """Opening color span; the color is attribute-escaped."""
    return SPAN_OPEN_TEMPLATE.format(color=html_module.escape(color, quote=True))


def render_segment(document: DecodedDocument, segment: Selection) -> RenderedSegment:
    """Render a single partition segment."""
    text = document.text
    mask = document.mask

    if segment.is_cleared:
        markup, markup_mask = decode_masked(
            text[segment.start : segment.end],
            mask[segment.start : segment.end],
            document.boundaries,
        )
        return RenderedSegment(
            segment.start, segment.end, segment.color, markup, markup_mask
        )

    opener = span_open(segment.color)
    opener_mask = wrapper_mask(opener)
    closer_mask = wrapper_mask(SPAN_CLOSE)

    markup_parts: list[str] = []
    mask_parts: list[str] = []
    for run_start, run_end, visible in iter_runs(mask, segment.start, segment.end):
        piece, piece_mask = decode_masked(
            text[run_start:run_end], mask[run_start:run_end], document.boundaries
        )
        if visible:
            markup_parts.extend((opener, piece, SPAN_CLOSE))
            mask_parts.extend((opener_mask, piece_mask, closer_mask))
        else:
            markup_parts.append(piece)
            mask_parts.append(piece_mask)

    return RenderedSegment(
        segment.start,
        segment.end,
        segment.color,
        "".join(markup_parts),
        "".join(mask_parts),
    )


def render_segments(
    document: DecodedDocument, selections: Iterable[Selection]
) -> list[RenderedSegment]:
    """Render every segment of the partition, in document order."""
    ordered = sorted(selections, key=lambda selection: selection.start)
    return [
        render_segment(document, segment)
        for segment in partition(ordered, len(document))
    ]


def render(document: DecodedDocument, selections: Iterable[Selection]) -> str:
    """Full markup for *document* with *selections* applied."""
    return "".join(segment.markup for segment in render_segments(document, selections))


def render_mask(document: DecodedDocument, selections: Iterable[Selection]) -> str:
    """Mask aligned with ``render(document, selections)``."""
    return "".join(segment.mask for segment in render_segments(document, selections))
