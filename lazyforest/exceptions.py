"""Exceptions raised by LazyForest.

Most tree operations are total and treat unknown ids as no-ops, so the
hierarchy is small: it covers contract violations by data sources and
invalid configuration.
"""

from typing import Iterable


class LazyForestError(Exception):
    """Base exception for LazyForest errors."""
    pass


class DuplicateNodeIdError(LazyForestError):
    """Raised when nodes entering the forest reuse ids already present."""

    def __init__(self, node_ids: Iterable[str], parent_id=None):
        self.node_ids = sorted(set(node_ids))
        self.parent_id = parent_id
        where = f" under '{parent_id}'" if parent_id is not None else ""
        super().__init__(
            f"Duplicate node ids{where}: {', '.join(self.node_ids)}"
        )


class ConfigurationError(LazyForestError):
    """Raised when a StoreConfig fails validation."""
    pass
