"""
Error handling policies for LazyForest.

This module provides a flexible error handling system through the Policy pattern,
allowing users to define what happens when a child data source fails during
lazy loading.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class ErrorPolicy(ABC):
    """
    Base class for error handling policies.

    Subclasses implement different strategies for handling errors
    raised by a child data source.
    """

    @abstractmethod
    async def handle(self, error: Exception, method_name: str, node_id: Optional[str]) -> Any:
        """
        Handle an error that occurred while fetching children.

        Args:
            error: The exception that was raised
            method_name: Name of the source method that failed (e.g., 'fetch_children')
            node_id: Id of the node being loaded when the error occurred

        Returns:
            None to leave the node unloaded (a later expand retries),
            or re-raises the exception to propagate it to the caller.
        """
        pass


def _error_record(error: Exception, method_name: str, node_id: Optional[str]) -> dict:
    return {
        'node_id': node_id,
        'method': method_name,
        'error': error,
        'error_type': type(error).__name__,
        'error_message': str(error)
    }


class FailFastPolicy(ErrorPolicy):
    """
    Policy that immediately re-raises any error.

    This is the default behavior - the failure reaches whoever asked for
    the node to be expanded. The node keeps its lazy-load hint so the
    expansion can be retried.
    """

    async def handle(self, error: Exception, method_name: str, node_id: Optional[str]) -> Any:
        """Re-raise the error immediately."""
        raise error


class ContinueOnErrorsPolicy(ErrorPolicy):
    """
    Policy that logs errors and continues.

    Errors are collected for later inspection and the failed node is left
    unloaded. This is useful for interactive views where one broken branch
    should not interrupt the user.
    """

    def __init__(self, verbose: bool = True):
        """
        Initialize the policy.

        Args:
            verbose: If True, log a warning when errors occur
        """
        self.errors: List[dict] = []
        self.failed_ids: List[str] = []
        self.verbose = verbose

    async def handle(self, error: Exception, method_name: str, node_id: Optional[str]) -> Any:
        """
        Log the error and report "no result".

        Returns:
            None, so the node stays unloaded and retryable
        """
        self.errors.append(_error_record(error, method_name, node_id))
        if node_id is not None:
            self.failed_ids.append(node_id)

        if self.verbose:
            logger.warning("Error in %s for node '%s': %s", method_name, node_id, error)

        return None

    def get_statistics(self) -> dict:
        """
        Get statistics about errors encountered.

        Returns:
            Dictionary with error counts and details
        """
        by_type = {}
        for record in self.errors:
            by_type[record['error_type']] = by_type.get(record['error_type'], 0) + 1
        return {
            'total_errors': len(self.errors),
            'failed_nodes': len(set(self.failed_ids)),
            'by_type': by_type,
            'errors': self.errors  # Full error details
        }


class CollectErrorsPolicy(ErrorPolicy):
    """
    Policy that collects all errors without logging, for batch processing.

    Similar to ContinueOnErrorsPolicy but silent.
    Useful for collecting all errors and presenting them at the end.
    """

    def __init__(self):
        """Initialize the policy."""
        self.errors: List[dict] = []

    async def handle(self, error: Exception, method_name: str, node_id: Optional[str]) -> Any:
        """Silently collect the error and report "no result"."""
        self.errors.append(_error_record(error, method_name, node_id))
        return None


class ThresholdPolicy(ErrorPolicy):
    """
    Policy that tolerates errors up to a threshold, then fails fast.

    Useful when some errors are expected but too many indicate
    a systemic problem, such as the backing service being down.
    """

    def __init__(self, max_errors: int = 10, verbose: bool = True):
        """
        Initialize threshold policy.

        Args:
            max_errors: Maximum errors to tolerate before failing
            verbose: If True, log warnings for tolerated errors
        """
        self.max_errors = max_errors
        self.error_count = 0
        self.verbose = verbose
        self.errors: List[Exception] = []

    async def handle(self, error: Exception, method_name: str, node_id: Optional[str]) -> Any:
        """Swallow the error if under threshold, otherwise raise."""
        self.error_count += 1
        self.errors.append(error)

        if self.error_count > self.max_errors:
            raise RuntimeError(f"Error threshold exceeded ({self.max_errors} errors)") from error

        if self.verbose:
            logger.warning(
                "[%d/%d] Error in %s for node '%s': %s",
                self.error_count, self.max_errors, method_name, node_id, error
            )

        return None
