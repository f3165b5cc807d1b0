"""Testing utilities for LazyForest consumers."""

from .fixtures import GatedChildSource, MockChildSource, mock_children, sample_forest

__all__ = ['GatedChildSource', 'MockChildSource', 'mock_children', 'sample_forest']
