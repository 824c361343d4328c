"""Tests for session save/restore records."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from highlightwords.persistence import (
    SavedSelection,
    SessionState,
    dump_state,
    load_state,
)


class TestSavedSelection:
    def test_valid(self) -> None:
        record = SavedSelection(start=2, end=5, color="red")
        assert (record.start, record.end, record.color) == (2, 5, "red")

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(ValidationError, match="before start"):
            SavedSelection(start=5, end=2, color="red")

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SavedSelection(start=-1, end=2, color="red")

    def test_frozen(self) -> None:
        record = SavedSelection(start=2, end=5, color="red")
        with pytest.raises(ValidationError):
            record.start = 3  # type: ignore[misc]


class TestSerialisation:
    def test_dump_is_json(self) -> None:
        state = SessionState(
            color="blue", selections=[SavedSelection(start=0, end=4, color="red")]
        )
        payload = json.loads(dump_state(state))
        assert payload == {
            "color": "blue",
            "selections": [{"start": 0, "end": 4, "color": "red"}],
        }

    def test_load_dumped_state(self) -> None:
        state = SessionState(
            color="blue",
            selections=[
                SavedSelection(start=0, end=4, color="red"),
                SavedSelection(start=6, end=9, color="blue"),
            ],
        )
        assert load_state(dump_state(state)) == state

    def test_empty_selections_default(self) -> None:
        assert load_state('{"color": "red"}').selections == []

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            '{"selections": []}',
            '{"color": "red", "selections": [{"start": 3, "end": 1, "color": "x"}]}',
        ],
    )
    def test_malformed_payload(self, payload: str) -> None:
        with pytest.raises(ValidationError):
            load_state(payload)
