"""Markup codecs: visibility masks and structural normalisation."""

from highlightwords.markup.mask import (
    build_mask,
    masked_text,
    nth_visible_index,
    visible_count,
    wrapper_mask,
)
from highlightwords.markup.structure import (
    BOUNDARY_TAGS,
    DecodedDocument,
    decode,
    decode_fragment,
    encode,
    normalize,
)

__all__ = [
    "BOUNDARY_TAGS",
    "DecodedDocument",
    "build_mask",
    "decode",
    "decode_fragment",
    "encode",
    "masked_text",
    "normalize",
    "nth_visible_index",
    "visible_count",
    "wrapper_mask",
]
