"""The tree store: single owner of forest and expansion state.

TreeStore is the only place where state changes. It exposes five
mutation entry points; each one rewrites the forest through the pure
functions in ``lazyforest.core`` or delegates to the ExpansionController,
then publishes a new immutable TreeSnapshot.

Consumers receive the store handle explicitly (there is no global or
ambient store) and observe it either by reading ``store.snapshot`` or by
subscribing to snapshot changes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from ..config import StoreConfig
from ..core.convert import forest_from_dicts
from ..core.mutator import find, insert, move, remove, update
from ..core.node import ROOT, Forest, TreeNode
from ..core.traversal import find_duplicate_ids, visible_rows
from ..exceptions import ConfigurationError, DuplicateNodeIdError
from .expansion import ExpansionController, ExpansionView
from .source import ChildSource, NullChildSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeSnapshot:
    """Immutable view of the store at one point in time.

    Snapshots are replaced, never modified. Unchanged subtrees are the
    same objects across consecutive snapshots, so consumers can skip
    work for any node whose identity did not change.
    """

    forest: Forest = ()
    expanded_ids: FrozenSet[str] = frozenset()
    loading_ids: FrozenSet[str] = frozenset()

    def find(self, node_id: str) -> Optional[TreeNode]:
        return find(self.forest, node_id)

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self.expanded_ids

    def is_loading(self, node_id: str) -> bool:
        return node_id in self.loading_ids

    def visible_rows(self) -> List[Tuple[TreeNode, int]]:
        """Rows a tree view would render, as (node, depth) pairs."""
        return visible_rows(self.forest, self.expanded_ids)


SnapshotCallback = Callable[[TreeSnapshot], None]


class TreeStore:
    """Holds the canonical forest plus expanded and loading id sets.

    Write surface:
        add_node(parent_id, name)
        remove_node(node_id)
        rename_node(node_id, name)
        move_node(active_id, over_id)
        await toggle_node(node_id)

    Example:
        store = TreeStore(sample_forest(), MockChildSource())
        await store.toggle_node('root-2')
        children = store.snapshot.find('root-2').children
        # children now holds root-2-new-1 and root-2-new-2
    """

    def __init__(
        self,
        initial: Iterable[Any] = (),
        source: Any = None,
        config: Optional[StoreConfig] = None
    ):
        """Create a store.

        Args:
            initial: Initial roots, as TreeNodes or dictionaries
            source: ChildSource or fetch callable for lazy loading; when
                None, unloaded nodes stay unloaded
            config: Store configuration

        Raises:
            ConfigurationError: If config fails validation
            DuplicateNodeIdError: If initial contains repeated ids
        """
        self._config = config or StoreConfig()
        config_errors = self._config.validate()
        if config_errors:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(config_errors)}")

        forest = tuple(initial)
        if forest and all(isinstance(item, Mapping) for item in forest):
            forest = forest_from_dicts(forest)
        duplicates = find_duplicate_ids(forest)
        if duplicates:
            raise DuplicateNodeIdError(duplicates)

        self._forest: Forest = forest
        self._subscribers: Dict[int, SnapshotCallback] = {}
        self._next_token = 0
        self._expansion = ExpansionController(
            self, source if source is not None else NullChildSource(), self._config
        )
        self._snapshot = TreeSnapshot(
            forest, self._expansion.expanded_ids, self._expansion.loading_ids
        )

    # ==================== Read surface ====================

    @property
    def snapshot(self) -> TreeSnapshot:
        """The latest published snapshot."""
        return self._snapshot

    @property
    def forest(self) -> Forest:
        return self._forest

    @property
    def expanded_ids(self) -> FrozenSet[str]:
        return self._expansion.expanded_ids

    @property
    def loading_ids(self) -> FrozenSet[str]:
        return self._expansion.loading_ids

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def source(self) -> ChildSource:
        return self._expansion.source

    @property
    def expansion(self) -> ExpansionView:
        """Read-only view of expansion state and fetch statistics."""
        return ExpansionView(self._expansion)

    async def get_stats(self) -> dict:
        """Get fetch statistics for the store and its source.

        Returns:
            Dictionary with the controller counters merged with the
            source statistics. Failures swallowed by an error policy are
            only visible in the source part (e.g. 'errors').
        """
        stats = dict(await self.source.get_stats())
        stats.update({
            'fetches_started': self._expansion.fetches_started,
            'fetches_failed': self._expansion.fetches_failed,
            'expanded': len(self._expansion.expanded_ids),
            'loading': len(self._expansion.loading_ids),
        })
        return stats

    def subscribe(self, callback: SnapshotCallback) -> Callable[[], None]:
        """Register a listener for new snapshots.

        Args:
            callback: Called with each newly published snapshot

        Returns:
            Function that removes the listener when called
        """
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    # ==================== Write surface ====================

    def add_node(self, parent_id: Optional[str], name: str) -> str:
        """Create a leaf node under parent_id (or at the top level for ROOT).

        Args:
            parent_id: Parent id, or ROOT
            name: Label of the new node

        Returns:
            Id generated for the new node. Nothing is inserted if
            parent_id does not resolve.
        """
        node_id = self._config.id_factory()
        logger.debug("add_node: %r under %r as %r", name, parent_id, node_id)

        forest = insert(self._forest, parent_id, TreeNode(node_id, name, has_children=False))
        inserted = forest is not self._forest
        self._forest = forest

        if inserted and parent_id is not ROOT and self._config.expand_parent_on_add:
            self._expansion.expand(parent_id)
        self._refresh()
        return node_id

    def remove_node(self, node_id: str) -> None:
        """Delete a node and its whole subtree."""
        logger.debug("remove_node: %r", node_id)
        self._commit_forest(remove(self._forest, node_id))

    def rename_node(self, node_id: str, name: str) -> None:
        """Change the label of a node."""
        logger.debug("rename_node: %r -> %r", node_id, name)
        self._commit_forest(
            update(self._forest, node_id, lambda node: node if node.name == name else node.with_name(name))
        )

    def move_node(self, active_id: str, over_id: str) -> None:
        """Move active_id (with its subtree) to sit just before over_id."""
        if active_id == over_id:
            return
        logger.debug("move_node: %r before %r", active_id, over_id)
        self._commit_forest(
            move(self._forest, active_id, over_id, fallback=self._config.move_fallback)
        )

    async def toggle_node(self, node_id: str) -> None:
        """Expand or collapse a node, lazily loading its children."""
        logger.debug("toggle_node: %r", node_id)
        await self._expansion.toggle(node_id)

    # ==================== Internal ====================

    def _commit_forest(self, forest: Forest) -> None:
        """Install a rewritten forest and publish if it changed."""
        if forest is self._forest:
            return
        self._forest = forest
        self._refresh()

    def _refresh(self) -> None:
        """Publish a new snapshot if any part of the state changed."""
        current = self._snapshot
        expanded = self._expansion.expanded_ids
        loading = self._expansion.loading_ids
        if (
            current.forest is self._forest
            and current.expanded_ids is expanded
            and current.loading_ids is loading
        ):
            return

        snapshot = TreeSnapshot(self._forest, expanded, loading)
        self._snapshot = snapshot
        for callback in list(self._subscribers.values()):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Snapshot subscriber %r failed", callback)

    def __repr__(self) -> str:
        return (
            f"TreeStore(roots={len(self._forest)}, expanded={len(self.expanded_ids)}, "
            f"loading={len(self.loading_ids)})"
        )
