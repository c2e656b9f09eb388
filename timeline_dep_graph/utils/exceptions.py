"""
Exception Hierarchy for timeline-dep-graph

Geometry and lookup misses are NOT errors in this package: an item that is
not laid out yet, or a task id that cannot be found, short-circuits the
calling operation. The exceptions below cover the remaining cases:

- Configuration Errors: invalid TimelineConfig values
- Validation Errors: malformed task forests (only when validation is requested)
- View Errors: engines used before a visualization collaborator is attached

Usage:
    from timeline_dep_graph.utils.exceptions import (
        TimelineError,
        CyclicDependencyError,
    )

    try:
        validate_forest(tasks, strict=True)
    except CyclicDependencyError as e:
        logger.error(f"Rejected snapshot: {e}")
"""

from typing import Optional, Any, Dict, List


# ============================================================================
# Base Exception
# ============================================================================

class TimelineError(Exception):
    """
    Base exception for all timeline-dep-graph errors.

    All custom exceptions inherit from this class so that an embedding
    application can catch a single type.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Optional error code for categorization
            details: Optional dictionary with additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ============================================================================
# Configuration Errors
# ============================================================================

class ConfigurationError(TimelineError):
    """Raised when a configuration value cannot be used."""

    def __init__(
        self,
        setting_name: str,
        message: str,
        expected_value: Optional[Any] = None,
        actual_value: Optional[Any] = None
    ):
        details = {"setting_name": setting_name}
        if expected_value is not None:
            details["expected_value"] = str(expected_value)
        if actual_value is not None:
            details["actual_value"] = str(actual_value)

        super().__init__(
            message=f"Configuration error for '{setting_name}': {message}",
            error_code="CONFIG_ERROR",
            details=details
        )
        self.setting_name = setting_name


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(TimelineError):
    """Base class for task forest validation errors."""
    pass


class InvalidTaskError(ValidationError):
    """Raised when a single task is malformed."""

    def __init__(self, task_id: str, message: str):
        super().__init__(
            message=f"Invalid task '{task_id}': {message}",
            error_code="INVALID_TASK",
            details={"task_id": task_id}
        )
        self.task_id = task_id


class DuplicateTaskIdError(ValidationError):
    """Raised when two tasks in one forest share an id."""

    def __init__(self, task_id: str):
        super().__init__(
            message=f"Task id '{task_id}' appears more than once in the forest",
            error_code="DUPLICATE_TASK_ID",
            details={"task_id": task_id}
        )
        self.task_id = task_id


class CyclicDependencyError(ValidationError):
    """Raised when the dependents graph contains a cycle."""

    def __init__(self, cycle: List[str]):
        path = " -> ".join(cycle)
        super().__init__(
            message=f"Dependency cycle detected: {path}",
            error_code="CYCLIC_DEPENDENCY",
            details={"cycle": list(cycle)}
        )
        self.cycle = list(cycle)


# ============================================================================
# View Errors
# ============================================================================

class ViewError(TimelineError):
    """Base class for visualization collaborator errors."""
    pass


class ViewNotAttachedError(ViewError):
    """Raised when an engine is used before set_view() was called."""

    def __init__(self, component: str):
        super().__init__(
            message=f"{component} has no view attached; call set_view() first",
            error_code="VIEW_NOT_ATTACHED",
            details={"component": component}
        )
        self.component = component
