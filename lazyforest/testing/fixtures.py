"""Test fixtures for LazyForest consumers.

These fixtures provide a small demo forest and controllable child
sources, so applications built on LazyForest can exercise lazy loading
without a real backend.
"""

import asyncio
from typing import Dict, List, Optional, Set

from ..aio.source import ChildSource, FetchResult
from ..core.node import Forest, TreeNode


def sample_forest() -> Forest:
    """Return the demo forest used throughout the examples.

    Structure:
        Documents (root-1)
        ├── Project Plans (child-1-1)
        └── Design Assets (child-1-2)   [unloaded, has children]
        Images (root-2)                 [unloaded, has children]
        System (root-3)
    """
    return (
        TreeNode(
            'root-1', 'Documents',
            children=(
                TreeNode('child-1-1', 'Project Plans'),
                TreeNode('child-1-2', 'Design Assets', has_children=True),
            ),
            has_children=True,
        ),
        TreeNode('root-2', 'Images', has_children=True),
        TreeNode('root-3', 'System'),
    )


def mock_children(parent_id: str) -> List[TreeNode]:
    """Children the mock backend reports for any parent.

    The first child is a leaf; the second hints at a further lazy level.
    """
    return [
        TreeNode(f"{parent_id}-new-1", f"New Item 1 ({parent_id})", has_children=False),
        TreeNode(f"{parent_id}-new-2", f"New Item 2 ({parent_id})", has_children=True),
    ]


class MockChildSource(ChildSource):
    """Simulated backend returning two generated children per node.

    Example:
        source = MockChildSource(delay=0.05)
        source.fail_next('root-2')     # next fetch of root-2 raises
        store = TreeStore(sample_forest(), source)
    """

    def __init__(self, delay: float = 0.0, error: Optional[Exception] = None):
        """Initialize mock source.

        Args:
            delay: Simulated latency per fetch in seconds
            error: If set, every fetch raises this exception
        """
        super().__init__()
        self.delay = delay
        self.error = error
        self.calls: List[str] = []
        self._fail_once: Set[str] = set()

    def fail_next(self, node_id: str) -> None:
        """Make the next fetch for node_id raise ConnectionError."""
        self._fail_once.add(node_id)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def fetch_children(self, node_id: str) -> FetchResult:
        self.calls.append(node_id)
        await asyncio.sleep(self.delay)
        if node_id in self._fail_once:
            self._fail_once.discard(node_id)
            raise ConnectionError(f"Simulated failure loading '{node_id}'")
        if self.error is not None:
            raise self.error
        return mock_children(node_id)

    async def get_stats(self) -> dict:
        return {'fetch_count': self.call_count}


class GatedChildSource(ChildSource):
    """Source whose fetches block until the test releases them.

    Lets tests observe the store while a fetch is in flight.

    Example:
        source = GatedChildSource()
        task = asyncio.create_task(store.toggle_node('root-2'))
        await source.wait_started('root-2')
        assert store.loading_ids == {'root-2'}
        source.release('root-2', [TreeNode('a', 'A')])
        await task
    """

    def __init__(self):
        super().__init__()
        self.calls: List[str] = []
        self._results: Dict[str, asyncio.Future] = {}
        self._started: Dict[str, asyncio.Event] = {}

    def _future(self, node_id: str) -> asyncio.Future:
        if node_id not in self._results:
            self._results[node_id] = asyncio.get_running_loop().create_future()
        return self._results[node_id]

    def _event(self, node_id: str) -> asyncio.Event:
        if node_id not in self._started:
            self._started[node_id] = asyncio.Event()
        return self._started[node_id]

    async def fetch_children(self, node_id: str) -> FetchResult:
        self.calls.append(node_id)
        future = self._future(node_id)
        self._event(node_id).set()
        try:
            return await future
        finally:
            self._results.pop(node_id, None)
            self._started.pop(node_id, None)

    async def wait_started(self, node_id: str) -> None:
        """Wait until a fetch for node_id has been issued."""
        await self._event(node_id).wait()

    def release(self, node_id: str, children: Optional[List[TreeNode]] = None) -> None:
        """Complete the pending fetch for node_id.

        Args:
            node_id: Node whose fetch should finish
            children: Result to deliver (defaults to mock_children(node_id))
        """
        if children is None:
            children = mock_children(node_id)
        self._future(node_id).set_result(children)

    def fail(self, node_id: str, error: Exception) -> None:
        """Make the pending fetch for node_id raise error."""
        self._future(node_id).set_exception(error)
