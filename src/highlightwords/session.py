"""Event-driven highlighting session for one document.

A ``HighlightSession`` owns the decoded document, the selection set, the
current color, the pending-selection cache and the menu state.  It holds no
listeners: the host forwards each event as an explicit payload.

Event sequence for one highlight::

    handle_select_start(ts)       # guarded against rapid repeats
    handle_selection_change(...)  # zero or more; the last one wins
    handle_selection_end(root)    # resolve, insert, re-render

Every event runs to completion before the host delivers the next one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from highlightwords.config import get_settings
from highlightwords.errors import OutOfBoundsSelection
from highlightwords.markup.structure import encode
from highlightwords.persistence import SavedSelection, SessionState
from highlightwords.render import render
from highlightwords.selection.model import CLEARED, Selection
from highlightwords.selection.resolver import resolve
from highlightwords.selection.selection_set import SelectionSet

if TYPE_CHECKING:
    from collections.abc import Iterable

    from highlightwords.selection.resolver import TextTreeNode, TreePosition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingSelection:
    """Latest in-progress selection reported by the host.

    Attributes:
        anchor: Where the selection started, or None if outside the container.
        focus: Where the selection currently ends, or None if outside.
        text: The host's own rendering of the selected text (cross-check only).
    """

    anchor: TreePosition | None
    focus: TreePosition | None
    text: str = ""

    @property
    def is_collapsed(self) -> bool:
        if self.anchor is None or self.focus is None:
            return False
        return (
            self.anchor.node == self.focus.node
            and self.anchor.offset == self.focus.offset
        )


@dataclass
class MenuState:
    """Open/closed state of the side menu."""

    is_open: bool = False

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def toggle(self) -> None:
        self.is_open = not self.is_open


class HighlightSession:
    """Highlighting state and event handlers for one loaded document.

    Args:
        markup: Rich markup to highlight.  Read once; structural edits are
            not supported afterwards.
        task_description: Optional instructions shown above the text.
        color: Initial highlight color (defaults to settings).
        select_guard_ms: Minimum gap between accepted selection starts.
        boundary_tags: Block tags treated as structural boundaries.
    """

    def __init__(
        self,
        markup: str,
        *,
        task_description: str | None = None,
        color: str | None = None,
        select_guard_ms: int | None = None,
        boundary_tags: Iterable[str] | None = None,
    ) -> None:
        config = get_settings().highlight
        self.task_description = task_description
        self.current_color = config.default_color if color is None else color
        self.select_guard_ms = (
            config.select_guard_ms if select_guard_ms is None else select_guard_ms
        )
        if boundary_tags is None:
            boundary_tags = config.boundary_tags
        self.document = encode(markup, boundary_tags=boundary_tags)
        self.selections = SelectionSet(self.document)
        self.menu = MenuState()
        self.pending_selection: PendingSelection | None = None

        self._selecting = False
        self._last_select_start: float | None = None
        self._output = render(self.document, self.selections)

        logger.info(
            "Loaded document: %d visible chars, %d boundary kinds",
            self.document.visible_length,
            len(self.document.boundaries),
        )

    # -- outputs -------------------------------------------------------------

    @property
    def output_markup(self) -> str:
        """Markup to install as the new content tree."""
        return self._output

    def is_menu_open(self) -> bool:
        return self.menu.is_open

    # -- selection events ----------------------------------------------------

    def handle_select_start(self, timestamp_ms: float) -> bool:
        """Start caching selection changes unless this start came too soon.

        Returns:
            True if the start was accepted.
        """
        if (
            self._last_select_start is not None
            and timestamp_ms - self._last_select_start < self.select_guard_ms
        ):
            logger.debug("Select start at %.0fms rejected by guard", timestamp_ms)
            return False
        self._last_select_start = timestamp_ms
        self._selecting = True
        return True

    def handle_selection_change(self, pending: PendingSelection) -> None:
        """Cache the latest selection while one is in progress."""
        if self._selecting:
            self.pending_selection = pending

    def handle_selection_end(self, root: TextTreeNode) -> bool:
        """Apply the pending selection, if any, with the current color.

        Args:
            root: The text container node of the current content tree.

        Returns:
            True if the selection set (and output markup) changed.
        """
        self._selecting = False
        pending, self.pending_selection = self.pending_selection, None

        if pending is None or pending.is_collapsed:
            return False

        try:
            if pending.anchor is None or pending.focus is None:
                msg = "selection endpoint outside the text container"
                raise OutOfBoundsSelection(msg)
            anchor = resolve(pending.anchor, root)
            focus = resolve(pending.focus, root)
        except OutOfBoundsSelection as exc:
            logger.debug("Discarding selection: %s", exc)
            return False

        return self.select_visible_range(anchor, focus, expected_text=pending.text)

    def select_visible_range(
        self, anchor: int, focus: int, *, expected_text: str | None = None
    ) -> bool:
        """Color the visible characters between two visible offsets.

        The offsets may come in either order.  The resulting document range
        starts at the first selected visible character and ends right after
        the last one.

        Returns:
            True if the selection set changed.
        """
        low, high = sorted((anchor, focus))
        if low == high:
            return False

        start = self.document.index_of_visible(low)
        last = self.document.index_of_visible(high - 1)
        if start is None or last is None:
            logger.debug("Discarding selection [%d, %d): past end of text", low, high)
            return False

        end = last + 1
        text = self.document.visible_text(start, end)
        if expected_text and expected_text != text:
            logger.debug(
                "Selected text mismatch: host %r, document %r", expected_text, text
            )
        return self._apply(
            Selection(start=start, end=end, text=text, color=self.current_color)
        )

    def _apply(self, selection: Selection) -> bool:
        before = self.selections.selections
        self.selections.insert(selection)
        if self.selections.selections == before:
            return False
        self._output = render(self.document, self.selections)
        return True

    # -- lookups -------------------------------------------------------------

    def find_selection_at(self, visible_offset: int) -> Selection | None:
        """Selection covering the visible character at *visible_offset*."""
        index = self.document.index_of_visible(visible_offset)
        if index is None:
            return None
        return self.selections.find_selection(index)

    def remove_selection_at(self, visible_offset: int) -> bool:
        """Clear the selection covering *visible_offset*.

        Returns:
            True if a selection was removed.
        """
        selection = self.find_selection_at(visible_offset)
        if selection is None:
            return False
        return self._apply(
            Selection(
                start=selection.start,
                end=selection.end,
                text=selection.text,
                color=CLEARED,
            )
        )

    # -- color and menu ------------------------------------------------------

    def handle_color_changed(self, color: str) -> None:
        self.current_color = color

    def handle_menu_button_clicked(self) -> None:
        self.menu.toggle()

    def open_menu(self) -> None:
        self.menu.open()

    def close_menu(self) -> None:
        self.menu.close()

    # -- save / restore ------------------------------------------------------

    def snapshot(self) -> SessionState:
        """Current color and selections as persistable records."""
        return SessionState(
            color=self.current_color,
            selections=[
                SavedSelection(start=s.start, end=s.end, color=s.color)
                for s in self.selections
            ],
        )

    def restore(self, state: SessionState) -> int:
        """Replace the selections by replaying *state* in order.

        Records that do not fit the current document are skipped.

        Returns:
            Number of selections present after the replay.
        """
        self.selections.clear()
        for record in state.selections:
            if record.end > len(self.document):
                logger.warning(
                    "Skipping saved selection [%d, %d): document has %d chars",
                    record.start,
                    record.end,
                    len(self.document),
                )
                continue
            self.selections.insert(
                Selection(start=record.start, end=record.end, color=record.color)
            )
        self.current_color = state.color
        self._output = render(self.document, self.selections)
        logger.info("Restored %d selections", len(self.selections))
        return len(self.selections)
