"""Tests for resolving content-tree positions to visible-text offsets."""

from __future__ import annotations

import pytest

from highlightwords.errors import OutOfBoundsSelection
from highlightwords.selection.content_tree import ContentNode
from highlightwords.selection.resolver import TreePosition, resolve


@pytest.fixture
def tree() -> tuple[ContentNode, ContentNode, ContentNode]:
    """root -> [leaf("ab"), element(leaf("cd"))]; returns (root, ab, cd)."""
    ab = ContentNode.leaf("ab")
    cd = ContentNode.leaf("cd")
    root = ContentNode.element(ab, ContentNode.element(cd))
    return root, ab, cd


class TestResolve:
    def test_offset_in_nested_leaf(self, tree) -> None:
        root, _, cd = tree
        assert resolve(TreePosition(cd, 1), root) == 3

    def test_offset_in_first_leaf(self, tree) -> None:
        root, ab, _ = tree
        assert resolve(TreePosition(ab, 0), root) == 0
        assert resolve(TreePosition(ab, 2), root) == 2

    def test_end_of_last_leaf(self, tree) -> None:
        root, _, cd = tree
        assert resolve(TreePosition(cd, 2), root) == root.text_length

    def test_position_on_root(self, tree) -> None:
        root, _, _ = tree
        assert resolve(TreePosition(root, 3), root) == 3

    def test_deeper_nesting(self) -> None:
        target = ContentNode.leaf("xyz")
        root = ContentNode.element(
            ContentNode.element(ContentNode.leaf("a"), ContentNode.leaf("bc")),
            ContentNode.element(
                ContentNode.leaf("d"),
                ContentNode.element(ContentNode.leaf("ef"), target),
            ),
        )
        # a bc | d ef | xyz  -> 3 + 1 + 2 + offset
        assert resolve(TreePosition(target, 2), root) == 8

    def test_appended_children(self) -> None:
        root = ContentNode()
        root.append(ContentNode.leaf("hello "))
        world = root.append(ContentNode.leaf("world"))
        assert resolve(TreePosition(world, 0), root) == 6


class TestOutOfBounds:
    """Positions outside the text container are rejected."""

    def test_node_from_another_tree(self, tree) -> None:
        root, _, _ = tree
        with pytest.raises(OutOfBoundsSelection):
            resolve(TreePosition(ContentNode.leaf("zz"), 0), root)

    def test_root_inside_position_subtree(self, tree) -> None:
        """The walk must reach the given root, not just any ancestor."""
        root, ab, cd = tree
        inner = cd.parent
        assert inner is not None
        with pytest.raises(OutOfBoundsSelection):
            resolve(TreePosition(ab, 1), inner)

    @pytest.mark.parametrize("offset", [-1, 3])
    def test_offset_outside_node(self, tree, offset: int) -> None:
        root, _, cd = tree
        with pytest.raises(OutOfBoundsSelection, match="outside node text"):
            resolve(TreePosition(cd, offset), root)
