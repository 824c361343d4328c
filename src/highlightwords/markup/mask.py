"""Visible-text masks over HTML markup.

A mask is a string over ``"0"``/``"1"`` with exactly one entry per character
of the markup it describes: ``"1"`` where the character is text the reader
sees, ``"0"`` where it is part of a tag.

Tag state is inferred purely from ``<``/``>`` balance.  Malformed markup is
not rejected; it simply yields a best-effort mask.
"""

# Pattern: Functional Core (pure functions over markup strings)

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

VISIBLE = "1"
HIDDEN = "0"


def build_mask(markup: str) -> str:
    """Build the visibility mask for *markup*.

    Every character from an unescaped ``<`` through the next ``>``
    (inclusive) is ``"0"``; everything else is ``"1"``.

    Examples:
        "a<b>c</b>" -> "100010000"
        "x > y"     -> "11111"
    """
    bits: list[str] = []
    in_tag = False
    for char in markup:
        if char == "<":
            in_tag = True
        bits.append(HIDDEN if in_tag else VISIBLE)
        if char == ">":
            in_tag = False
    return "".join(bits)


def wrapper_mask(fragment: str) -> str:
    """Mask for synthetic markup injected around text (e.g. a color span).

    Uses the same tag-counting rule as ``build_mask`` so that masks of
    rendered output stay aligned with a fresh scan of that output.
    """
    return build_mask(fragment)


def masked_text(text: str, mask: str, start: int = 0, end: int | None = None) -> str:
    """Return only the visible characters of ``text[start:end]``."""
    return "".join(
        char
        for char, bit in zip(text[start:end], mask[start:end], strict=True)
        if bit == VISIBLE
    )


def visible_count(mask: str) -> int:
    """Number of visible characters described by *mask*."""
    return mask.count(VISIBLE)


def nth_visible_index(mask: str, n: int) -> int | None:
    """Index of the *n*-th (0-based) visible character, or None if absent."""
    if n < 0:
        return None
    index = -1
    for _ in range(n + 1):
        index = mask.find(VISIBLE, index + 1)
        if index == -1:
            return None
    return index


def iter_runs(
    mask: str, start: int = 0, end: int | None = None
) -> Iterator[tuple[int, int, bool]]:
    """Yield maximal ``(run_start, run_end, visible)`` runs of ``mask[start:end]``.

    Run positions are absolute indices into *mask*.
    """
    stop = len(mask) if end is None else min(end, len(mask))
    pos = max(start, 0)
    while pos < stop:
        bit = mask[pos]
        run_end = pos + 1
        while run_end < stop and mask[run_end] == bit:
            run_end += 1
        yield pos, run_end, bit == VISIBLE
        pos = run_end
