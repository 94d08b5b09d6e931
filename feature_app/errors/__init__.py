"""
Error classification system for feature card processing.

This module provides the structured exception hierarchy for payload quality
issues, recoverable per-card failures, and state machine misuse.
"""

from .data_quality import (
    DataQualityError,
    MalformedDataError,
    MissingDataError,
)
from .recovery import (
    GracefulDegradationError,
    FeedLoadError,
    RenderingUnavailableError,
    MountPointMissingError,
)
from .system_failures import (
    SystemFailureError,
    StateTransitionError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MalformedDataError",
    "MissingDataError",
    # Recoverable per-card failures
    "GracefulDegradationError",
    "FeedLoadError",
    "RenderingUnavailableError",
    "MountPointMissingError",
    # System Failures
    "SystemFailureError",
    "StateTransitionError",
    "ConfigurationError",
]
