"""Content trees the offset resolver can walk.

Two implementations of the resolver's node capability:

- ``ContentNode``: a plain in-memory tree, for hosts that already hold their
  own tree and for tests.
- ``LexborContentNode``: a view over a selectolax (lexbor) parse of rendered
  markup.  ``ContentTree`` parses the markup currently shown to the reader
  and turns browser node paths (child indices from the text container) into
  ``TreePosition`` values.

Text lengths follow the browser's ``textContent`` rules: text nodes count
their decoded characters, elements count all descendant text, comments count
nothing (they are markup, mask ``0``).  Lengths are in code points; the
browser reports offsets in UTF-16 code units, which ``ContentTree.position``
converts with ``code_point_offset``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from selectolax.lexbor import LexborHTMLParser

from highlightwords.errors import OutOfBoundsSelection
from highlightwords.selection.resolver import TreePosition

if TYPE_CHECKING:
    from collections.abc import Sequence

    from selectolax.lexbor import LexborNode


def code_point_offset(text: str, units: int) -> int:
    """Convert a UTF-16 code-unit offset into *text* to a code-point index.

    Characters outside the Basic Multilingual Plane take two code units.  An
    offset inside such a pair lands after the character.  Offsets past the
    end keep their excess so bounds checks still reject them.
    """
    if units <= 0:
        return units
    consumed = 0
    for index, char in enumerate(text):
        if consumed >= units:
            return index
        consumed += 2 if ord(char) > 0xFFFF else 1
    return len(text) + units - consumed


# ---------------------------------------------------------------------------
# In-memory tree
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class ContentNode:
    """Node of a plain content tree: a text leaf or an element with children."""

    text: str = ""
    children: list[ContentNode] = field(default_factory=list)
    parent: ContentNode | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    @classmethod
    def leaf(cls, text: str) -> ContentNode:
        return cls(text=text)

    @classmethod
    def element(cls, *children: ContentNode) -> ContentNode:
        return cls(children=list(children))

    def append(self, child: ContentNode) -> ContentNode:
        child.parent = self
        self.children.append(child)
        return child

    @property
    def text_length(self) -> int:
        return len(self.text) + sum(child.text_length for child in self.children)

    def preceding_siblings(self) -> list[ContentNode]:
        if self.parent is None:
            return []
        siblings = self.parent.children
        for index, sibling in enumerate(siblings):
            if sibling is self:
                return siblings[:index]
        return []


# ---------------------------------------------------------------------------
# selectolax-backed tree
# ---------------------------------------------------------------------------


class LexborContentNode:
    """Resolver view over a selectolax ``LexborNode``.

    selectolax hands out a new Python wrapper on every traversal, so node
    identity is compared through ``mem_id``.
    """

    __slots__ = ("_node",)

    def __init__(self, node: LexborNode) -> None:
        self._node = node

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LexborContentNode):
            return NotImplemented
        return self._node.mem_id == other._node.mem_id

    def __hash__(self) -> int:
        return hash(self._node.mem_id)

    def __repr__(self) -> str:
        return f"LexborContentNode({self._node.tag!r})"

    @property
    def node(self) -> LexborNode:
        return self._node

    @property
    def parent(self) -> LexborContentNode | None:
        parent = self._node.parent
        return None if parent is None else LexborContentNode(parent)

    @property
    def text(self) -> str:
        """The node's ``textContent`` as the resolver counts it."""
        if self._node.is_text_node:
            return self._node.text_content or ""
        if self._node.is_comment_node:
            return ""
        return self._node.text(deep=True)

    @property
    def text_length(self) -> int:
        return len(self.text)

    def preceding_siblings(self) -> list[LexborContentNode]:
        siblings: list[LexborContentNode] = []
        sibling = self._node.prev
        while sibling is not None:
            siblings.append(LexborContentNode(sibling))
            sibling = sibling.prev
        siblings.reverse()
        return siblings

    def children(self) -> list[LexborContentNode]:
        result: list[LexborContentNode] = []
        child = self._node.child
        while child is not None:
            result.append(LexborContentNode(child))
            child = child.next
        return result


class ContentTree:
    """Parsed rendered markup, rooted at the text container.

    Args:
        markup: The markup currently installed in the text container.
    """

    def __init__(self, markup: str) -> None:
        self.markup = markup
        self._parser = LexborHTMLParser(markup)
        body = self._parser.body
        if body is None:
            msg = "parser produced no body element"
            raise ValueError(msg)
        self.root = LexborContentNode(body)

    def node_at(self, path: Sequence[int]) -> LexborContentNode:
        """Follow child indices (DOM ``childNodes`` order) from the root.

        Raises:
            OutOfBoundsSelection: If the path leaves the tree.
        """
        node = self.root
        for index in path:
            children = node.children()
            if not 0 <= index < len(children):
                msg = f"path {list(path)!r} leaves the text container"
                raise OutOfBoundsSelection(msg)
            node = children[index]
        return node

    def position(self, path: Sequence[int] | None, offset: int) -> TreePosition:
        """``TreePosition`` for a browser node path and intra-node offset.

        *offset* is in UTF-16 code units, as the DOM reports it.  A ``None``
        path means the browser found the node outside the text container.

        Raises:
            OutOfBoundsSelection: If the path is missing or leaves the tree.
        """
        if path is None:
            msg = "selection endpoint outside the text container"
            raise OutOfBoundsSelection(msg)
        node = self.node_at(path)
        return TreePosition(node=node, offset=code_point_offset(node.text, offset))
