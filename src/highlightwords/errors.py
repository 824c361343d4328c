"""Exception types for the highlighting core.

``OutOfBoundsSelection`` and ``DegenerateSelection`` are raised internally
and handled at the session / selection-set boundary, where they turn into
no-ops.  ``SelectionInvariantError`` is never expected at runtime and is
left to propagate.
"""

from __future__ import annotations


class HighlightError(Exception):
    """Base class for highlighting errors."""


class OutOfBoundsSelection(HighlightError):
    """A selection endpoint lies outside the addressable text container."""


class DegenerateSelection(HighlightError):
    """A selection that cannot be applied (empty, mistyped or out of range)."""


class SelectionInvariantError(HighlightError):
    """The selection set is no longer sorted and non-overlapping."""
