"""
Recoverable per-card failure classifications.

Each of these aborts the initialization of a single card or feature while
the rest of the page keeps working.
"""

from typing import Optional


class GracefulDegradationError(Exception):
    """Errors that allow continued operation with reduced functionality."""

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        self.degraded_functionality = degraded_functionality
        self.fallback_strategy = fallback_strategy
        self.allows_degradation = True
        self.recoverable = True


class FeedLoadError(GracefulDegradationError):
    """A feed could not be fetched or decoded (status, network, invalid JSON)."""

    def __init__(self, message: str, source: Optional[str] = None,
                 status: Optional[int] = None, reason: str = "transport", **kwargs):
        kwargs.setdefault("fallback_strategy", "render_error_placeholder")
        super().__init__(message, **kwargs)
        self.source = source
        self.status = status
        self.reason = reason


class RenderingUnavailableError(GracefulDegradationError):
    """The chart rendering capability is not available on this page."""

    def __init__(self, message: str, card_id: Optional[str] = None, **kwargs):
        kwargs.setdefault("fallback_strategy", "inert_handle")
        super().__init__(message, **kwargs)
        self.card_id = card_id


class MountPointMissingError(GracefulDegradationError):
    """A required mount point could not be located."""

    def __init__(self, message: str, selector: Optional[str] = None, **kwargs):
        kwargs.setdefault("fallback_strategy", "skip_feature")
        super().__init__(message, **kwargs)
        self.selector = selector
