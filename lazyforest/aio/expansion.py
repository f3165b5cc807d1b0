"""Expansion state and lazy loading.

The ExpansionController owns two id sets:

- expanded: which nodes are open in the view
- loading: which nodes have a fetch in flight

Toggling a collapsed node opens it and, if its subtree was never
loaded, fetches the children from the configured ChildSource. Loading
membership is checked and set before the first await, so overlapping
toggles on the same node never issue a second fetch. The fetch is the
only suspension point; everything around it runs to completion.
"""

import logging
from typing import TYPE_CHECKING, Any, FrozenSet, Optional, Tuple

from ..config import StoreConfig
from ..core.mutator import find, update
from ..core.node import TreeNode
from ..core.traversal import collect_ids, find_duplicate_ids
from ..exceptions import DuplicateNodeIdError
from .source import ChildSource, as_child_source

if TYPE_CHECKING:
    from .store import TreeStore

logger = logging.getLogger(__name__)


class ExpansionController:
    """Coordinates expansion state with an asynchronous child source.

    The controller is bound to the store that holds the forest. It reads
    the current forest from the store when deciding whether to fetch, and
    hands rewritten forests back to the store when a fetch completes. The
    id sets are immutable frozensets replaced on every change.

    A fetch is never cancelled. Collapsing a node while it loads only
    changes the expanded set; the result is still attached when it
    arrives.
    """

    def __init__(
        self,
        store: 'TreeStore',
        source: Any,
        config: Optional[StoreConfig] = None
    ):
        """Initialize controller.

        Args:
            store: Store holding the forest this controller expands
            source: ChildSource (or fetch callable) used for lazy loading
            config: Store configuration (defaults to StoreConfig())
        """
        self._store = store
        self._source = as_child_source(source)
        self._config = config or StoreConfig()
        self._expanded: FrozenSet[str] = frozenset()
        self._loading: FrozenSet[str] = frozenset()

        # Statistics. fetches_failed only counts failures that reach this
        # controller; errors absorbed by an ErrorHandlingSource policy show
        # up in the source statistics instead (see TreeStore.get_stats)
        self.fetches_started = 0
        self.fetches_failed = 0

    @property
    def source(self) -> ChildSource:
        return self._source

    @property
    def expanded_ids(self) -> FrozenSet[str]:
        return self._expanded

    @property
    def loading_ids(self) -> FrozenSet[str]:
        return self._loading

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    def is_loading(self, node_id: str) -> bool:
        return node_id in self._loading

    def expand(self, node_id: str) -> bool:
        """Mark a node expanded without loading anything.

        Returns:
            True if the expanded set changed
        """
        if node_id in self._expanded:
            return False
        self._expanded = self._expanded | {node_id}
        self._store._refresh()
        return True

    def collapse(self, node_id: str) -> bool:
        """Mark a node collapsed.

        Returns:
            True if the expanded set changed
        """
        if node_id not in self._expanded:
            return False
        self._expanded = self._expanded - {node_id}
        self._store._refresh()
        return True

    def needs_fetch(self, node: Optional[TreeNode]) -> bool:
        """Check whether expanding node should trigger a fetch.

        A fetch is needed when the node hints at a subtree, has never
        been loaded, and no fetch for it is already in flight.
        """
        return (
            node is not None
            and node.has_children
            and node.children is None
            and node.id not in self._loading
        )

    async def toggle(self, node_id: str) -> None:
        """Flip the expansion state of a node, loading children if needed.

        Args:
            node_id: Node to expand or collapse

        Raises:
            Exception: Whatever the source raised if the fetch failed; the
                node keeps its lazy-load hint so a later toggle retries
            DuplicateNodeIdError: If fetched children reuse existing ids
                and validation is enabled
        """
        if node_id in self._expanded:
            self.collapse(node_id)
            return

        self.expand(node_id)

        node = find(self._store.forest, node_id)
        if not self.needs_fetch(node):
            return

        # Claimed synchronously; no await between the check and this line
        self._loading = self._loading | {node_id}
        self._store._refresh()
        self.fetches_started += 1
        logger.debug("Fetching children of %r", node_id)

        try:
            try:
                children = await self._source.fetch_children(node_id)
            except Exception:
                self.fetches_failed += 1
                logger.debug("Fetching children of %r failed", node_id, exc_info=True)
                raise

            if children is None:
                logger.debug("No children returned for %r, leaving it unloaded", node_id)
            else:
                self._attach(node_id, tuple(children))
        finally:
            self._loading = self._loading - {node_id}
            self._store._refresh()

    def _attach(self, node_id: str, children: Tuple[TreeNode, ...]) -> None:
        """Install fetched children on the node in the current forest."""
        forest = self._store.forest
        target = find(forest, node_id)
        if target is None:
            logger.debug("Node %r was removed while loading, discarding result", node_id)
            return

        if self._config.validate_fetched_ids:
            clashes = find_duplicate_ids(children) | (collect_ids(children) & collect_ids(forest))
            if clashes:
                raise DuplicateNodeIdError(clashes, parent_id=node_id)

        def transform(node: TreeNode) -> TreeNode:
            merged = children
            if node.children:
                # Children inserted while the fetch was in flight go last
                fetched = {child.id for child in children}
                merged = children + tuple(c for c in node.children if c.id not in fetched)
            return node.with_children(merged, has_children=node.has_children or bool(merged))

        self._store._commit_forest(update(forest, node_id, transform))
        logger.debug("Attached %d children to %r", len(children), node_id)


class ExpansionView:
    """Read-only window onto an ExpansionController.

    Handed out by ``TreeStore.expansion`` so callers can query expansion
    state and fetch statistics without gaining a way to change it.
    """

    __slots__ = ('_controller',)

    def __init__(self, controller: ExpansionController):
        self._controller = controller

    @property
    def expanded_ids(self) -> FrozenSet[str]:
        return self._controller.expanded_ids

    @property
    def loading_ids(self) -> FrozenSet[str]:
        return self._controller.loading_ids

    @property
    def fetches_started(self) -> int:
        return self._controller.fetches_started

    @property
    def fetches_failed(self) -> int:
        return self._controller.fetches_failed

    def is_expanded(self, node_id: str) -> bool:
        return self._controller.is_expanded(node_id)

    def is_loading(self, node_id: str) -> bool:
        return self._controller.is_loading(node_id)

    def needs_fetch(self, node: Optional[TreeNode]) -> bool:
        return self._controller.needs_fetch(node)

    def __repr__(self) -> str:
        return (
            f"ExpansionView(expanded={len(self.expanded_ids)}, "
            f"loading={len(self.loading_ids)}, failed={self.fetches_failed})"
        )
