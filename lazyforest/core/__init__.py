"""Core data model and pure tree algorithms.

Nothing in this package performs I/O or holds mutable state. The async
layer in ``lazyforest.aio`` builds the store and lazy loading on top.
"""

from .node import ROOT, Forest, TreeNode, new_node_id
from .mutator import (
    find,
    contains,
    is_descendant,
    path_to,
    parent_of,
    update,
    insert,
    remove,
    move,
)
from .traversal import (
    walk,
    visible_rows,
    iter_ids,
    collect_ids,
    count_nodes,
    find_duplicate_ids,
)
from .convert import forest_from_dicts, forest_to_dicts

__all__ = [
    # Data model
    'ROOT',
    'Forest',
    'TreeNode',
    'new_node_id',
    # Mutations
    'find',
    'contains',
    'is_descendant',
    'path_to',
    'parent_of',
    'update',
    'insert',
    'remove',
    'move',
    # Traversal
    'walk',
    'visible_rows',
    'iter_ids',
    'collect_ids',
    'count_nodes',
    'find_duplicate_ids',
    # Conversion
    'forest_from_dicts',
    'forest_to_dicts',
]
