"""Read-only walks over a forest.

Provides pre-order iteration with depth, the flattened list of rows a
tree view would display, and a few aggregate helpers. Like the mutator,
these use an explicit stack and never recurse.
"""

from typing import AbstractSet, Iterator, List, Optional, Sequence, Set, Tuple

from .node import TreeNode


def walk(
    forest: Sequence[TreeNode],
    max_depth: Optional[int] = None
) -> Iterator[Tuple[TreeNode, int]]:
    """Traverse the forest depth-first in pre-order.

    Only loaded children are visited. Roots have depth 0.

    Args:
        forest: Sequence of root nodes
        max_depth: Deepest level to yield (inclusive), or None for no limit

    Yields:
        (node, depth) tuples in document order

    Example:
        >>> for node, depth in walk(forest):
        ...     print(f"{'  ' * depth}{node.name}")
    """
    stack = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        if node.children and (max_depth is None or depth < max_depth):
            stack.extend((child, depth + 1) for child in reversed(node.children))


def visible_rows(
    forest: Sequence[TreeNode],
    expanded_ids: AbstractSet[str]
) -> List[Tuple[TreeNode, int]]:
    """Flatten the forest into the rows a tree view renders.

    A node's children are shown only when the node is expanded and its
    children are loaded. Nodes that are expanded but still loading show
    no children yet.

    Args:
        forest: Sequence of root nodes
        expanded_ids: Ids of expanded nodes

    Returns:
        List of (node, depth) rows, top to bottom
    """
    rows = []
    stack = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        rows.append((node, depth))
        if node.id in expanded_ids and node.children:
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return rows


def iter_ids(forest: Sequence[TreeNode]) -> Iterator[str]:
    """Yield every node id in pre-order."""
    for node, _ in walk(forest):
        yield node.id


def collect_ids(forest: Sequence[TreeNode]) -> Set[str]:
    """Return the set of all node ids in the forest."""
    return set(iter_ids(forest))


def count_nodes(forest: Sequence[TreeNode]) -> int:
    """Count loaded nodes in the forest."""
    return sum(1 for _ in walk(forest))


def find_duplicate_ids(forest: Sequence[TreeNode]) -> Set[str]:
    """Return ids that occur more than once.

    Useful for checking forests built from external data before handing
    them to a store.
    """
    seen = set()
    duplicates = set()
    for node_id in iter_ids(forest):
        if node_id in seen:
            duplicates.add(node_id)
        seen.add(node_id)
    return duplicates
