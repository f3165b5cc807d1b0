"""LazyForest - Immutable ordered forests with lazy-loaded subtrees.

LazyForest keeps an in-memory forest of uniquely identified, named nodes
and offers a small set of structural mutations (add, rename, remove,
move) that never modify nodes in place. Children can be fetched on
demand from an asynchronous data source when a node is first expanded.

Layers:
━━━━━━━━━━━━━━━━━━━━━━━━━━
Pure algorithms (no I/O, no state):
    from lazyforest.core import find, update, insert, remove, move

Store with lazy loading (asyncio):
    from lazyforest.aio import TreeStore
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

import logging

__version__ = "0.1.0"

from . import core
from . import aio
from .core import ROOT, TreeNode
from .aio import TreeStore, TreeSnapshot, ChildSource
from .config import StoreConfig, MoveFallback
from .exceptions import LazyForestError, DuplicateNodeIdError, ConfigurationError
from .api import create_store, render_outline, snapshot_to_dict

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "core",
    "aio",
    # Common entry points
    "ROOT",
    "TreeNode",
    "TreeStore",
    "TreeSnapshot",
    "ChildSource",
    "StoreConfig",
    "MoveFallback",
    "create_store",
    "render_outline",
    "snapshot_to_dict",
    # Exceptions
    "LazyForestError",
    "DuplicateNodeIdError",
    "ConfigurationError",
]
