"""Custom exception types for stackops.

This module defines the exception hierarchy for stackops errors, enabling
precise error handling and contextual error messages throughout the application.

Exception Hierarchy:
    StackOpsError (base)
    ├── SnapshotError - Checkpoint file cannot be read or has no resources
    ├── LogsNotSupportedError - Logs requested for a component type without logs
    ├── MetricQueryError - CloudWatch rejected or failed a metric query
    └── ContractViolationError - Programmer error such as an unknown component type

Requests for features that are not built yet (filtered log queries, metrics
for non-function components) raise the builtin NotImplementedError.
"""

from typing import Any, Dict, Optional


class StackOpsError(Exception):
    """Base exception for all stackops-specific errors.

    Attributes:
        message: Human-readable error description
        context: Additional contextual information (e.g., URNs, file paths)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class SnapshotError(StackOpsError):
    """Raised when a deployment snapshot cannot be loaded.

    Examples:
        - File is not valid JSON
        - Document holds no resource list
    """

    pass


class LogsNotSupportedError(StackOpsError):
    """Raised when logs are requested for a component type that has none.

    Examples:
        - get_logs() on a Table or Topic component
    """

    pass


class MetricQueryError(StackOpsError):
    """Raised when CloudWatch fails to answer a metric statistics query."""

    pass


class ContractViolationError(StackOpsError):
    """Raised on programmer errors, e.g. dispatching on an unknown component type."""

    pass
