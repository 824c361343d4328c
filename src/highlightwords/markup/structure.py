"""Structural normalisation of HTML markup into a selectable document.

``encode`` turns raw markup into a ``DecodedDocument``: the markup with

- each *structural boundary* (a closing block tag immediately followed by an
  opening block tag, e.g. ``</p><p>``) replaced by one private-use
  placeholder character whose mask bit is ``0``, and
- each character reference in visible text (``&amp;``, ``&nbsp;``,
  ``&#39;`` ...) folded into the character it renders as, mask bit ``1``.

After encoding, every visible character in the rendered text container is
exactly one ``"1"`` in the mask, so a visible-character offset reported by
the browser maps onto a document index with plain integer arithmetic.

``decode`` / ``decode_fragment`` are the inverse: placeholders become their
canonical boundary markup and visible characters are re-escaped.  The pair
satisfies ``decode(encode(m)) == normalize(m)``.
"""

# Pattern: Functional Core (pure functions for markup transformation)

from __future__ import annotations

import html as html_module
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from highlightwords.markup.mask import (
    HIDDEN,
    VISIBLE,
    build_mask,
    iter_runs,
    masked_text,
    nth_visible_index,
    visible_count,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

logger = logging.getLogger(__name__)

# Block-level elements whose close/open pairs count as structural boundaries.
BOUNDARY_TAGS: frozenset[str] = frozenset(
    (
        "p",
        "div",
        "li",
        "ul",
        "ol",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "pre",
        "table",
        "tr",
        "td",
        "th",
        "dl",
        "dt",
        "dd",
        "section",
        "article",
        "figure",
        "figcaption",
    )
)

# Unicode private-use area, one character per distinct canonical boundary.
_PLACEHOLDER_FIRST = 0xE000
_PLACEHOLDER_LAST = 0xF8FF

_LINE_BREAKS = re.compile(r"\r\n|\n|\r")

# ``</p>`` + optional inter-tag whitespace + ``<p ...>``
_BOUNDARY = re.compile(
    r"</\s*(?P<close>[A-Za-z][A-Za-z0-9]*)\s*>"
    r"\s*"
    r"(?P<open><(?P<open_name>[A-Za-z][A-Za-z0-9]*)(?:\s[^<>]*)?>)"
)

# Named, decimal and hex character references, with or without the closing
# ``;``.  ``html.unescape`` applies the HTML5 legacy rules (``&amp b``,
# ``&copy c``, ``&ampx``); ``&`` on its own stays a literal ampersand.
_CHAR_REF = re.compile(r"&(?:[A-Za-z][A-Za-z0-9]*|#[0-9]+|#[xX][0-9A-Fa-f]+);?")


@dataclass(frozen=True)
class DecodedDocument:
    """Canonical selectable document: markup text plus its aligned mask.

    Attributes:
        text: Markup with structural boundaries as placeholder characters
            and character references folded.
        mask: Visibility mask, same length as ``text``.
        boundaries: Placeholder character -> canonical boundary markup.
    """

    text: str
    mask: str
    boundaries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.text) != len(self.mask):
            msg = (
                f"mask length {len(self.mask)} does not match "
                f"text length {len(self.text)}"
            )
            raise ValueError(msg)

    def __len__(self) -> int:
        return len(self.text)

    @property
    def visible_length(self) -> int:
        """Number of characters the reader can select."""
        return visible_count(self.mask)

    def visible_text(self, start: int = 0, end: int | None = None) -> str:
        """Visible characters of ``text[start:end]``."""
        return masked_text(self.text, self.mask, start, end)

    def index_of_visible(self, offset: int) -> int | None:
        """Document index of the visible character at *offset*."""
        return nth_visible_index(self.mask, offset)

    def is_boundary(self, index: int) -> bool:
        """True if ``text[index]`` is a structural boundary placeholder."""
        return self.mask[index] == HIDDEN and self.text[index] in self.boundaries


def strip_line_breaks(markup: str) -> str:
    """Remove CR/LF line breaks; the rendered container never shows them."""
    return _LINE_BREAKS.sub("", markup)


def _is_boundary_match(match: re.Match[str], tags: frozenset[str]) -> bool:
    return (
        match.group("close").lower() in tags
        and match.group("open_name").lower() in tags
    )


def _canonical_boundary(match: re.Match[str]) -> str:
    """Canonical markup for a boundary: lowercase close tag + verbatim open tag."""
    return f"</{match.group('close').lower()}>{match.group('open')}"


def _placeholder_chars(markup: str) -> Iterator[str]:
    """Private-use characters that do not already occur in *markup*."""
    used = set(markup)
    for code in range(_PLACEHOLDER_FIRST, _PLACEHOLDER_LAST + 1):
        char = chr(code)
        if char not in used:
            yield char


def _fold_references(
    chunk: str, chunk_mask: str, text_parts: list[str], mask_parts: list[str]
) -> None:
    """Append *chunk* with visible character references folded to one char each."""
    pos = 0
    for match in _CHAR_REF.finditer(chunk):
        if chunk_mask[match.start()] != VISIBLE:
            continue  # Inside a tag (attribute value) -- leave untouched
        decoded = html_module.unescape(match.group())
        if decoded == match.group():
            continue  # Unknown reference, keep it literal
        text_parts.append(chunk[pos : match.start()])
        mask_parts.append(chunk_mask[pos : match.start()])
        text_parts.append(decoded)
        mask_parts.append(VISIBLE * len(decoded))
        pos = match.end()
    text_parts.append(chunk[pos:])
    mask_parts.append(chunk_mask[pos:])


def encode(
    markup: str, *, boundary_tags: Iterable[str] = BOUNDARY_TAGS
) -> DecodedDocument:
    """Encode raw markup into a ``DecodedDocument``.

    Args:
        markup: Raw HTML fragment as supplied by the content author.
        boundary_tags: Block tag names whose close/open pairs are collapsed
            into placeholders.

    Returns:
        The decoded document.  ``len(doc.text) == len(doc.mask)`` always holds.

    Raises:
        ValueError: If the document needs more distinct boundary placeholders
            than the private-use area provides.
    """
    markup = strip_line_breaks(markup)
    mask = build_mask(markup)
    tags = frozenset(tag.lower() for tag in boundary_tags)

    free_chars = _placeholder_chars(markup)
    by_canonical: dict[str, str] = {}
    boundaries: dict[str, str] = {}
    text_parts: list[str] = []
    mask_parts: list[str] = []
    pos = 0

    for match in _BOUNDARY.finditer(markup):
        if not _is_boundary_match(match, tags):
            continue
        _fold_references(
            markup[pos : match.start()],
            mask[pos : match.start()],
            text_parts,
            mask_parts,
        )
        canonical = _canonical_boundary(match)
        placeholder = by_canonical.get(canonical)
        if placeholder is None:
            placeholder = next(free_chars, None)
            if placeholder is None:
                msg = "Too many distinct structural boundaries to encode"
                raise ValueError(msg)
            by_canonical[canonical] = placeholder
            boundaries[placeholder] = canonical
        text_parts.append(placeholder)
        mask_parts.append(HIDDEN)
        pos = match.end()

    _fold_references(markup[pos:], mask[pos:], text_parts, mask_parts)

    document = DecodedDocument(
        text="".join(text_parts),
        mask="".join(mask_parts),
        boundaries=boundaries,
    )
    logger.debug(
        "Encoded markup: %d chars -> %d chars, %d visible, %d boundary kinds",
        len(markup),
        len(document),
        document.visible_length,
        len(boundaries),
    )
    return document


def decode_masked(
    text: str, mask: str, boundaries: Mapping[str, str]
) -> tuple[str, str]:
    """Decode a document slice back to markup, returning ``(markup, mask)``.

    The returned mask is derived piece by piece: re-escaped visible characters
    are all ``"1"``, copied markup and boundary markup are all ``"0"``.
    """
    markup_parts: list[str] = []
    mask_parts: list[str] = []
    for char, bit in zip(text, mask, strict=True):
        if bit == VISIBLE:
            piece = html_module.escape(char, quote=False)
            markup_parts.append(piece)
            mask_parts.append(VISIBLE * len(piece))
        else:
            piece = boundaries.get(char, char)
            markup_parts.append(piece)
            mask_parts.append(HIDDEN * len(piece))
    return "".join(markup_parts), "".join(mask_parts)


def decode_fragment(text: str, mask: str, boundaries: Mapping[str, str]) -> str:
    """Decode a document slice back to renderable markup."""
    return decode_masked(text, mask, boundaries)[0]


def decode(document: DecodedDocument) -> str:
    """Decode a whole document back to markup."""
    return decode_fragment(document.text, document.mask, document.boundaries)


def normalize(markup: str, *, boundary_tags: Iterable[str] = BOUNDARY_TAGS) -> str:
    """Canonical form of *markup* as produced by ``decode(encode(markup))``.

    Line breaks are removed, whitespace between boundary tags is dropped,
    boundary close tags are lowercased, and visible text is re-escaped with
    canonical escaping (references resolved, then ``&``/``<``/``>`` escaped).
    """
    markup = strip_line_breaks(markup)
    tags = frozenset(tag.lower() for tag in boundary_tags)

    def _canonical(match: re.Match[str]) -> str:
        if _is_boundary_match(match, tags):
            return _canonical_boundary(match)
        return match.group()

    markup = _BOUNDARY.sub(_canonical, markup)
    mask = build_mask(markup)

    parts: list[str] = []
    for run_start, run_end, visible in iter_runs(mask):
        chunk = markup[run_start:run_end]
        if visible:
            resolved = _CHAR_REF.sub(lambda m: html_module.unescape(m.group()), chunk)
            chunk = html_module.escape(resolved, quote=False)
        parts.append(chunk)
    return "".join(parts)
