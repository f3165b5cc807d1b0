"""Asynchronous layer of LazyForest.

This package contains the store, the expansion/lazy-loading controller,
and the child data source contract with its caching and error handling
wrappers. Fetching children is the only operation that awaits.
"""

# Data source contract
from .source import (
    ChildSource,
    CallableChildSource,
    NullChildSource,
    as_child_source,
)

# Source wrappers
from .caching import CachingChildSource
from .error_policies import (
    ErrorPolicy,
    FailFastPolicy,
    ContinueOnErrorsPolicy,
    CollectErrorsPolicy,
    ThresholdPolicy,
)
from .error_handling import ErrorHandlingSource, create_resilient_source

# State
from .expansion import ExpansionController, ExpansionView
from .store import TreeStore, TreeSnapshot

__all__ = [
    # Sources
    'ChildSource',
    'CallableChildSource',
    'NullChildSource',
    'as_child_source',
    'CachingChildSource',
    # Error handling
    'ErrorPolicy',
    'FailFastPolicy',
    'ContinueOnErrorsPolicy',
    'CollectErrorsPolicy',
    'ThresholdPolicy',
    'ErrorHandlingSource',
    'create_resilient_source',
    # State
    'ExpansionController',
    'ExpansionView',
    'TreeStore',
    'TreeSnapshot',
]
