"""Configuration system for LazyForest.

This module defines how users tune a TreeStore: what happens when a
move target disappears, whether adding a child expands its parent,
how ids are generated and how strictly lazily loaded data is checked.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

from .core.node import new_node_id


class MoveFallback(Enum):
    """What a move does when its target cannot be found.

    The source node is never dropped; the fallback only decides where
    it ends up.
    """
    RESTORE = "restore"            # Abandon the move, forest unchanged
    APPEND_ROOT = "append_root"    # Place the node at the end of the top level


@dataclass
class StoreConfig:
    """Complete configuration for a TreeStore.

    The defaults reproduce the behaviour of an interactive tree view:
    a new child makes its parent expand, moves onto stale targets are
    ignored, and fetched children are checked for id collisions.
    """

    # Structural behaviour
    move_fallback: MoveFallback = MoveFallback.RESTORE
    expand_parent_on_add: bool = True

    # Lazy loading
    validate_fetched_ids: bool = True

    # Id generation for add_node
    id_factory: Callable[[], str] = field(default=new_node_id)

    @classmethod
    def strict(cls) -> 'StoreConfig':
        """Create config that keeps the forest exactly as the user built it.

        Returns:
            StoreConfig with fetched-id validation and no auto-expansion
        """
        return cls(
            move_fallback=MoveFallback.RESTORE,
            expand_parent_on_add=False,
            validate_fetched_ids=True,
        )

    @classmethod
    def lenient(cls) -> 'StoreConfig':
        """Create config that trusts the data source and never loses a move.

        Returns:
            StoreConfig that appends orphaned moves to the top level and
            skips fetched-id validation
        """
        return cls(
            move_fallback=MoveFallback.APPEND_ROOT,
            expand_parent_on_add=True,
            validate_fetched_ids=False,
        )

    def validate(self) -> List[str]:
        """Validate configuration for consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        if not isinstance(self.move_fallback, MoveFallback):
            errors.append(
                f"move_fallback must be a MoveFallback, not {type(self.move_fallback).__name__}"
            )

        if not callable(self.id_factory):
            errors.append("id_factory must be callable")

        return errors
