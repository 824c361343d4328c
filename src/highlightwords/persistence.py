"""Save/restore records for highlight sessions.

A session is persisted as its current color plus the colored selections in
order.  Restoring replays each record through ``SelectionSet.insert``, so a
saved state is re-derived rather than trusted.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SavedSelection(BaseModel):
    """A persisted ``[start, end)`` range with its color."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)
    color: str

    @model_validator(mode="after")
    def _end_not_before_start(self) -> SavedSelection:
        if self.end < self.start:
            msg = f"end ({self.end}) before start ({self.start})"
            raise ValueError(msg)
        return self


class SessionState(BaseModel):
    """Serialisable state of a ``HighlightSession``."""

    color: str
    selections: list[SavedSelection] = Field(default_factory=list)


def dump_state(state: SessionState) -> str:
    """Serialise *state* to JSON."""
    return state.model_dump_json(indent=2)


def load_state(payload: str | bytes) -> SessionState:
    """Parse JSON produced by ``dump_state``.

    Raises:
        pydantic.ValidationError: If the payload is malformed.
    """
    return SessionState.model_validate_json(payload)
