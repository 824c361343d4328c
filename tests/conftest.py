"""Shared pytest fixtures for highlightwords tests."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from highlightwords.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Iterator

# Prefixes of environment variables read by Settings
_SETTINGS_PREFIXES = ("HIGHLIGHT__", "APP__")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop configuration env vars and reset the cached Settings per test."""
    for name in list(os.environ):
        if name.startswith(_SETTINGS_PREFIXES):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
