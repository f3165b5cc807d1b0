"""Pure structural operations over an immutable forest.

Every function here takes a forest (an ordered sequence of root nodes)
and returns a forest. Input nodes are never modified. When an operation
changes something, only the nodes on the path from a root down to the
change are rebuilt; every other subtree is carried over by reference.
When nothing changes, the input forest itself is returned, so callers
can detect no-ops with ``is``.

Walks use an explicit stack of (siblings, next_index) frames instead of
recursion, so arbitrarily deep trees cannot exhaust the interpreter stack.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .node import ROOT, Forest, TreeNode
from ..config import MoveFallback

logger = logging.getLogger(__name__)


# Chain of (siblings, index) pairs from the top level down to a node
_Path = List[Tuple[Sequence[TreeNode], int]]


def _locate(forest: Sequence[TreeNode], node_id: str) -> Optional[_Path]:
    """Find the first pre-order occurrence of node_id.

    Returns:
        Path whose last entry is (siblings containing the node, its index),
        or None if the id is not in the forest
    """
    stack = [[forest, 0]]
    while stack:
        frame = stack[-1]
        siblings, index = frame
        if index >= len(siblings):
            stack.pop()
            continue
        frame[1] = index + 1
        node = siblings[index]
        if node.id == node_id:
            return [(f[0], f[1] - 1) for f in stack]
        if node.children:
            stack.append([node.children, 0])
    return None


def _rebuild(path: _Path, new_siblings: Tuple[TreeNode, ...]) -> Forest:
    """Replace the deepest sibling sequence on path and copy its ancestors.

    Args:
        path: Result of _locate
        new_siblings: Replacement for the sibling sequence at path[-1]

    Returns:
        New forest in which only the ancestors on path are new objects
    """
    for depth in range(len(path) - 2, -1, -1):
        siblings, index = path[depth]
        parent = siblings[index].with_children(new_siblings)
        new_siblings = tuple(siblings[:index]) + (parent,) + tuple(siblings[index + 1:])
    return new_siblings


def find(forest: Sequence[TreeNode], node_id: str) -> Optional[TreeNode]:
    """Depth-first, pre-order search for a node.

    Args:
        forest: Sequence of root nodes
        node_id: Id to look for

    Returns:
        The first matching node, or None
    """
    path = _locate(forest, node_id)
    if path is None:
        return None
    siblings, index = path[-1]
    return siblings[index]


def contains(forest: Sequence[TreeNode], node_id: str) -> bool:
    """Check whether node_id occurs anywhere in the forest."""
    return _locate(forest, node_id) is not None


def is_descendant(node: TreeNode, node_id: str) -> bool:
    """Check whether node_id is strictly below node.

    Only loaded children are searched; an unloaded subtree has no
    descendants as far as the forest is concerned.
    """
    if not node.children:
        return False
    return _locate(node.children, node_id) is not None


def path_to(forest: Sequence[TreeNode], node_id: str) -> Optional[List[TreeNode]]:
    """Return the chain of nodes from a root down to node_id (inclusive)."""
    path = _locate(forest, node_id)
    if path is None:
        return None
    return [siblings[index] for siblings, index in path]


def parent_of(forest: Sequence[TreeNode], node_id: str) -> Optional[TreeNode]:
    """Return the parent of node_id, or None for roots and unknown ids."""
    chain = path_to(forest, node_id)
    if chain is None or len(chain) < 2:
        return None
    return chain[-2]


def update(
    forest: Sequence[TreeNode],
    node_id: str,
    transform: Callable[[TreeNode], TreeNode]
) -> Forest:
    """Replace a node with transform(node).

    Ancestors of the target are shallow-copied; all other subtrees are
    returned by the same reference.

    Args:
        forest: Sequence of root nodes
        node_id: Id of the node to replace
        transform: Function producing the replacement node

    Returns:
        New forest, or the input forest if node_id is absent or transform
        returned the node unchanged
    """
    path = _locate(forest, node_id)
    if path is None:
        logger.debug("update: node %r not found, nothing to do", node_id)
        return forest

    siblings, index = path[-1]
    node = siblings[index]
    replacement = transform(node)
    if replacement is node:
        return forest

    new_siblings = tuple(siblings[:index]) + (replacement,) + tuple(siblings[index + 1:])
    return _rebuild(path, new_siblings)


def insert(
    forest: Sequence[TreeNode],
    parent_id: Optional[str],
    new_node: TreeNode
) -> Forest:
    """Append new_node as the last child of parent_id.

    Passing ROOT as parent_id appends to the top level. The parent's
    children sequence is created if it was never loaded, and its
    has_children hint is set.

    Args:
        forest: Sequence of root nodes
        parent_id: Id of the parent, or ROOT
        new_node: Node to add; its id must not already be in the forest

    Returns:
        New forest, or the input forest if parent_id does not resolve
    """
    if parent_id is ROOT:
        return tuple(forest) + (new_node,)

    def attach(parent: TreeNode) -> TreeNode:
        return parent.with_children((parent.children or ()) + (new_node,), has_children=True)

    result = update(forest, parent_id, attach)
    if result is forest:
        logger.debug("insert: parent %r not found, %r not inserted", parent_id, new_node.id)
    return result


def remove(forest: Sequence[TreeNode], node_id: str) -> Forest:
    """Remove a node together with its entire subtree.

    Returns:
        New forest, or the input forest if node_id is absent
    """
    path = _locate(forest, node_id)
    if path is None:
        logger.debug("remove: node %r not found, nothing to do", node_id)
        return forest

    siblings, index = path[-1]
    return _rebuild(path, tuple(siblings[:index]) + tuple(siblings[index + 1:]))


def move(
    forest: Sequence[TreeNode],
    active_id: str,
    over_id: str,
    fallback: MoveFallback = MoveFallback.RESTORE
) -> Forest:
    """Move active_id so it sits immediately before over_id.

    The node is placed in whichever sibling sequence currently holds
    over_id, at any depth. Moves that would put a node inside its own
    subtree are rejected.

    Args:
        forest: Sequence of root nodes
        active_id: Id of the node being moved (with its subtree)
        over_id: Id of the node to insert in front of
        fallback: What to do if over_id cannot be located after the
            source has been detached

    Returns:
        New forest, or the input forest when the move is a no-op or rejected
    """
    source = find(forest, active_id)
    if source is None:
        logger.debug("move: source %r not found", active_id)
        return forest

    if over_id == active_id or is_descendant(source, over_id):
        logger.debug("move: rejected %r -> %r, target is inside source", active_id, over_id)
        return forest

    pruned = remove(forest, active_id)
    path = _locate(pruned, over_id)

    if path is None:
        if fallback is MoveFallback.APPEND_ROOT:
            logger.warning(
                "move: target %r not found, appending %r to the top level",
                over_id, active_id
            )
            return tuple(pruned) + (source,)
        logger.warning(
            "move: target %r not found, leaving %r in place", over_id, active_id
        )
        return forest

    siblings, index = path[-1]
    new_siblings = tuple(siblings[:index]) + (source,) + tuple(siblings[index:])
    return _rebuild(path, new_siblings)
