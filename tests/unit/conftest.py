"""Shared fixtures for unit tests."""

from __future__ import annotations

import pytest

from highlightwords.markup.structure import DecodedDocument, encode
from highlightwords.session import HighlightSession

# Two paragraphs, one inline element, one character reference.
SAMPLE_MARKUP = "<p>Hello <b>bold</b> world</p><p>Tom &amp; Jerry</p>"


@pytest.fixture
def sample_document() -> DecodedDocument:
    return encode(SAMPLE_MARKUP)


@pytest.fixture
def plain_document() -> DecodedDocument:
    """Twelve visible characters and no markup, so indices equal offsets."""
    return encode("abcdefghijkl")


@pytest.fixture
def session() -> HighlightSession:
    return HighlightSession(SAMPLE_MARKUP, color="red", select_guard_ms=1000)


@pytest.fixture
def sample_markup() -> str:
    return SAMPLE_MARKUP
