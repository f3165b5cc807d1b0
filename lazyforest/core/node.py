"""Tree node data model.

Nodes are immutable. Every structural change produces new node objects
along the changed path while unchanged subtrees are shared between the
old and new forest.
"""

import uuid
from dataclasses import dataclass, replace
from typing import Optional, Tuple


# Parent id meaning "top level of the forest"
ROOT = None


def new_node_id() -> str:
    """Generate a fresh node identifier.

    Returns:
        Random UUID4 string, collision-free for all practical purposes
    """
    return str(uuid.uuid4())


@dataclass(frozen=True)
class TreeNode:
    """A named node in an ordered forest.

    The ``children`` field distinguishes two states that matter for lazy
    loading:

    - ``None``: children were never loaded
    - ``()``: children were loaded and there are none

    ``has_children`` is a hint that a subtree exists even when it has not
    been loaded yet. It drives the decision to fetch on expansion.

    Example:
        >>> leaf = TreeNode('a1', 'Notes')
        >>> folder = TreeNode('a', 'Docs', children=[leaf], has_children=True)
        >>> folder.children[0] is leaf
        True
    """

    id: str
    name: str
    children: Optional[Tuple['TreeNode', ...]] = None
    has_children: bool = False

    def __post_init__(self):
        # Accept any sequence but store a tuple so nodes stay hashable
        if self.children is not None and not isinstance(self.children, tuple):
            object.__setattr__(self, 'children', tuple(self.children))

    @property
    def is_loaded(self) -> bool:
        """True once children have been populated (possibly empty)."""
        return self.children is not None

    @property
    def shows_children(self) -> bool:
        """True if the node should be presented as having a subtree."""
        return self.has_children or bool(self.children)

    def with_name(self, name: str) -> 'TreeNode':
        """Return a copy of this node with a different name."""
        return replace(self, name=name)

    def with_children(self, children, has_children: Optional[bool] = None) -> 'TreeNode':
        """Return a copy of this node with a new children sequence.

        Args:
            children: New children sequence, or None to mark as unloaded
            has_children: Override for the hint; unchanged when None

        Returns:
            New TreeNode sharing id and name with this one
        """
        if has_children is None:
            has_children = self.has_children
        return replace(self, children=children, has_children=has_children)

    def __repr__(self) -> str:
        if self.children is None:
            state = 'unloaded'
        else:
            state = f"{len(self.children)} children"
        return f"TreeNode({self.id!r}, {self.name!r}, {state}, has_children={self.has_children})"


# An ordered sequence of root nodes
Forest = Tuple[TreeNode, ...]
