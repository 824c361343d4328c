"""Content-tree position to visible-text offset.

The resolver only measures text length.  It works with any tree whose nodes
expose ``parent``, ``preceding_siblings()`` and ``text_length``, so the same
walk serves the selectolax-backed tree used by the host page and the plain
in-memory tree used in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from highlightwords.errors import OutOfBoundsSelection

if TYPE_CHECKING:
    from collections.abc import Iterable


class TextTreeNode(Protocol):
    """Capability required of content-tree nodes."""

    @property
    def parent(self) -> TextTreeNode | None: ...

    @property
    def text_length(self) -> int: ...

    def preceding_siblings(self) -> Iterable[TextTreeNode]: ...


@dataclass(frozen=True)
class TreePosition:
    """A caret position: a node plus a character offset within its own text."""

    node: TextTreeNode
    offset: int


def resolve(position: TreePosition, root: TextTreeNode) -> int:
    """Absolute visible-text offset of *position* relative to *root*.

    Walks from the position's node up to *root*, adding the text length of
    every strictly-preceding sibling at each level, then adds the intra-node
    offset.

    Raises:
        OutOfBoundsSelection: If the node is not *root* or one of its
            descendants, or the intra-node offset lies outside the node's text.
    """
    node = position.node
    if not 0 <= position.offset <= node.text_length:
        msg = (
            f"offset {position.offset} outside node text of length "
            f"{node.text_length}"
        )
        raise OutOfBoundsSelection(msg)

    offset = position.offset
    while node != root:
        parent = node.parent
        if parent is None:
            msg = "position is not inside the text container"
            raise OutOfBoundsSelection(msg)
        offset += sum(sibling.text_length for sibling in node.preceding_siblings())
        node = parent
    return offset
