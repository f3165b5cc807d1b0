"""
Error handling source for LazyForest.

This module provides the ErrorHandlingSource that wraps another child
source and delegates failures to pluggable policies.
"""

from typing import Any, Optional

from .error_policies import ErrorPolicy, FailFastPolicy
from .source import ChildSource, FetchResult, as_child_source


class ErrorHandlingSource(ChildSource):
    """
    Source that wraps another source and handles errors through policies.

    Fetches are forwarded to the wrapped source; any exception is handed to
    the configured policy, whose return value becomes the fetch result.
    Other attribute access is proxied to the wrapped source, so statistics
    and helpers of the underlying source stay reachable.

    This design allows for flexible error handling strategies without
    modifying the data source implementations.
    """

    def __init__(self, base_source: Any, policy: Optional[ErrorPolicy] = None):
        """
        Initialize the error handling source.

        Args:
            base_source: The source to wrap (ChildSource or fetch callable)
            policy: Error handling policy (defaults to FailFastPolicy)
        """
        super().__init__()
        self._base_source = as_child_source(base_source)
        self._policy = policy or FailFastPolicy()

    async def fetch_children(self, node_id: str) -> FetchResult:
        try:
            return await self._base_source.fetch_children(node_id)
        except Exception as e:
            return await self._policy.handle(e, 'fetch_children', node_id)

    def __getattr__(self, name: str) -> Any:
        """
        Proxy unknown attributes to the wrapped source.

        Args:
            name: The attribute name being accessed

        Returns:
            The attribute from the base source
        """
        if name.startswith('__') or name in ('_base_source', '_policy'):
            raise AttributeError(name)
        return getattr(self._base_source, name)

    async def get_stats(self) -> dict:
        stats = dict(await self._base_source.get_stats())
        errors = getattr(self._policy, 'errors', None)
        if errors is not None:
            stats['errors'] = len(errors)
        return stats

    async def close(self):
        await self._base_source.close()

    def get_policy(self) -> ErrorPolicy:
        """
        Get the current error policy.

        Returns:
            The configured ErrorPolicy instance
        """
        return self._policy

    def set_policy(self, policy: ErrorPolicy) -> None:
        """
        Change the error policy.

        Args:
            policy: The new ErrorPolicy to use
        """
        self._policy = policy

    def get_base_source(self) -> ChildSource:
        """
        Get the wrapped base source.

        Returns:
            The underlying source being wrapped
        """
        return self._base_source

    def get_source_chain(self):
        """
        Return a list of source class names in the chain.

        Returns:
            List of class names from this source down through the chain
        """
        chain = []
        source = self
        while source is not None:
            chain.append(source.__class__.__name__)
            source = source.__dict__.get('_base_source')
        return chain

    def __repr__(self) -> str:
        """String representation."""
        return f"ErrorHandlingSource({self._base_source!r}, policy={self._policy.__class__.__name__})"


def create_resilient_source(base_source: Any, strict: bool = False, verbose: bool = True) -> ErrorHandlingSource:
    """
    Convenience function to create an error-handling source.

    Args:
        base_source: The source to wrap
        strict: If True, use FailFastPolicy; if False, use ContinueOnErrorsPolicy
        verbose: If True, log warnings for errors (only applies when strict=False)

    Returns:
        An ErrorHandlingSource configured appropriately
    """
    from .error_policies import ContinueOnErrorsPolicy

    if strict:
        policy = FailFastPolicy()
    else:
        policy = ContinueOnErrorsPolicy(verbose=verbose)

    return ErrorHandlingSource(base_source, policy)
