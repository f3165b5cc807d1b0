"""High-level API for LazyForest.

This module provides simple functions for assembling a store from plain
inputs and for reading snapshots without touching the lower layers.
"""

from typing import Any, Iterable, List, Optional, Tuple

from .aio.caching import CachingChildSource
from .aio.error_handling import ErrorHandlingSource
from .aio.error_policies import ErrorPolicy
from .aio.source import as_child_source
from .aio.store import TreeSnapshot, TreeStore
from .config import StoreConfig
from .core.convert import forest_to_dicts


def create_store(
    initial: Iterable[Any] = (),
    fetch: Any = None,
    config: Optional[StoreConfig] = None,
    policy: Optional[ErrorPolicy] = None,
    cache: bool = False,
    cache_size: int = 10000,
    cache_ttl: float = 300.0
) -> TreeStore:
    """Build a TreeStore with an optionally wrapped data source.

    The source is wrapped from the inside out: caching first, then error
    handling, so the policy also sees failures of shared fetches.

    Args:
        initial: Initial roots, as TreeNodes or dictionaries
        fetch: ChildSource or fetch callable; None disables lazy loading
        config: Store configuration
        policy: Error policy for failed fetches (fail fast when None)
        cache: Wrap the source in a CachingChildSource
        cache_size: Maximum cached entries when cache is True
        cache_ttl: Cache entry lifetime in seconds when cache is True

    Returns:
        Configured TreeStore

    Example:
        >>> store = create_store(
        ...     [{'id': 'docs', 'name': 'Documents', 'hasChildren': True}],
        ...     fetch=api_fetch_children,
        ...     policy=ContinueOnErrorsPolicy(),
        ... )
    """
    source = None
    if fetch is not None:
        source = as_child_source(fetch)
        if cache:
            source = CachingChildSource(source, max_size=cache_size, ttl=cache_ttl)
        if policy is not None:
            source = ErrorHandlingSource(source, policy)

    return TreeStore(initial, source, config)


def render_outline(snapshot: TreeSnapshot, indent: str = '  ') -> str:
    """Render the visible rows of a snapshot as an indented outline.

    Markers: '+' collapsed node with a subtree, '-' expanded node,
    '~' loading, ' ' leaf.

    Args:
        snapshot: Snapshot to render
        indent: String repeated once per depth level

    Returns:
        Multi-line string, one row per visible node
    """
    lines = []
    for node, depth in snapshot.visible_rows():
        if snapshot.is_loading(node.id):
            marker = '~'
        elif snapshot.is_expanded(node.id) and node.shows_children:
            marker = '-'
        elif node.shows_children:
            marker = '+'
        else:
            marker = ' '
        lines.append(f"{indent * depth}{marker} {node.name}")
    return '\n'.join(lines)


def snapshot_to_dict(snapshot: TreeSnapshot, camel_case: bool = False) -> dict:
    """Convert a snapshot into JSON-friendly primitives.

    Returns:
        Dictionary with 'forest', 'expanded' and 'loading' keys; id sets
        are emitted as sorted lists
    """
    return {
        'forest': forest_to_dicts(snapshot.forest, camel_case=camel_case),
        'expanded': sorted(snapshot.expanded_ids),
        'loading': sorted(snapshot.loading_ids),
    }


def visible_ids(snapshot: TreeSnapshot) -> List[str]:
    """Ids of visible rows, top to bottom."""
    return [node.id for node, _ in snapshot.visible_rows()]


def visible_depths(snapshot: TreeSnapshot) -> List[Tuple[str, int]]:
    """(id, depth) of visible rows, top to bottom."""
    return [(node.id, depth) for node, depth in snapshot.visible_rows()]
