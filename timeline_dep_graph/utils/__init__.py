"""
Utilities module - Logging, exceptions and validation helpers
"""

from .logger import get_logger
from .comprehensive_logger import ComprehensiveLogger, TimelineLogger
from .validation import ValidationResult, validate_forest, find_dependency_cycles

# Exception hierarchy
from .exceptions import (
    # Base
    TimelineError,
    # Configuration
    ConfigurationError,
    # Validation
    ValidationError,
    InvalidTaskError,
    DuplicateTaskIdError,
    CyclicDependencyError,
    # View
    ViewError,
    ViewNotAttachedError,
)

__all__ = [
    'get_logger',
    'ComprehensiveLogger',
    'TimelineLogger',
    'ValidationResult',
    'validate_forest',
    'find_dependency_cycles',

    # Exception hierarchy
    'TimelineError',
    'ConfigurationError',
    'ValidationError',
    'InvalidTaskError',
    'DuplicateTaskIdError',
    'CyclicDependencyError',
    'ViewError',
    'ViewNotAttachedError',
]
