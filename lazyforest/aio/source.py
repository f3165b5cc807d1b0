"""Child data source abstraction.

Defines the contract for lazily loading a node's children from an
external system (API, database, filesystem). The store only depends on
this signature; how children are produced is entirely up to the source.
"""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Set, Union

from ..core.convert import forest_from_dicts
from ..core.node import TreeNode


FetchResult = Optional[Sequence[TreeNode]]


class ChildSource(ABC):
    """Abstract base class for child data sources.

    A source turns a node id into the ordered list of that node's
    children. Returned nodes must carry ids that are not yet in the
    forest; each may set ``has_children`` to request further lazy
    loading of its own subtree.
    """

    def __init__(self):
        self._capabilities = self._define_capabilities()

    @abstractmethod
    async def fetch_children(self, node_id: str) -> FetchResult:
        """Fetch the children of a node.

        Args:
            node_id: Id of the node being expanded

        Returns:
            Ordered sequence of child nodes, or None if no result is
            available and the node should stay unloaded
        """
        pass

    def supports_capability(self, capability: str) -> bool:
        """Check if source supports a specific capability.

        Args:
            capability: Capability name

        Returns:
            True if capability is supported
        """
        return capability in self._capabilities

    def _define_capabilities(self) -> Set[str]:
        """Define source capabilities.

        Override in subclasses to declare supported features.
        """
        return {'fetch_children'}

    async def get_stats(self) -> dict:
        """Get source statistics.

        Returns:
            Dictionary of statistics (fetch count, cache hits, etc.)
        """
        return {}

    async def close(self):
        """Clean up source resources.

        Override if the source holds connections or sessions.
        """
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


def _coerce_children(raw: Any) -> FetchResult:
    """Normalize whatever a fetch function returned into TreeNodes."""
    if raw is None:
        return None
    items = list(raw)
    if items and all(isinstance(item, Mapping) for item in items):
        return forest_from_dicts(items)
    return tuple(items)


class CallableChildSource(ChildSource):
    """Source backed by a plain function.

    The function receives a node id and returns children either directly
    or as an awaitable. Children may be TreeNode objects or dictionaries
    in the format accepted by ``forest_from_dicts``.

    Example:
        async def fetch(node_id):
            rows = await api.get(f"/nodes/{node_id}/children")
            return rows  # list of {'id', 'name', 'hasChildren'} dicts

        source = CallableChildSource(fetch)
    """

    def __init__(self, fetch: Callable[[str], Union[Awaitable[Any], Any]]):
        """Initialize with a fetch function.

        Args:
            fetch: Callable taking a node id
        """
        super().__init__()
        self._fetch = fetch
        self.fetch_count = 0

    async def fetch_children(self, node_id: str) -> FetchResult:
        self.fetch_count += 1
        result = self._fetch(node_id)
        if inspect.isawaitable(result):
            result = await result
        return _coerce_children(result)

    async def get_stats(self) -> dict:
        return {'fetch_count': self.fetch_count}

    def __repr__(self) -> str:
        name = getattr(self._fetch, '__qualname__', repr(self._fetch))
        return f"CallableChildSource({name})"


def as_child_source(source: Union[ChildSource, Callable[[str], Any]]) -> ChildSource:
    """Return source as a ChildSource, wrapping plain callables.

    Args:
        source: ChildSource instance or fetch function

    Returns:
        ChildSource instance

    Raises:
        TypeError: If source is neither
    """
    if isinstance(source, ChildSource):
        return source
    # Duck-typed sources (e.g. wrappers) only need fetch_children
    if hasattr(source, 'fetch_children'):
        return source
    if callable(source):
        return CallableChildSource(source)
    raise TypeError(
        f"source must be a ChildSource or callable, not {type(source).__name__}"
    )


class NullChildSource(ChildSource):
    """Source for forests that are fully loaded up front.

    Every fetch reports "no result", so nodes hinting at unloaded
    children simply stay unloaded.
    """

    async def fetch_children(self, node_id: str) -> FetchResult:
        return None
