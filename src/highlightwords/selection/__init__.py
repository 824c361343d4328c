"""Selections: interval algebra and content-tree offset resolution."""

from highlightwords.selection.content_tree import (
    ContentNode,
    ContentTree,
    LexborContentNode,
)
from highlightwords.selection.model import CLEARED, Selection
from highlightwords.selection.resolver import TextTreeNode, TreePosition, resolve
from highlightwords.selection.selection_set import (
    SelectionSet,
    insert_selection,
    partition,
)

__all__ = [
    "CLEARED",
    "ContentNode",
    "ContentTree",
    "LexborContentNode",
    "Selection",
    "SelectionSet",
    "TextTreeNode",
    "TreePosition",
    "insert_selection",
    "partition",
    "resolve",
]
