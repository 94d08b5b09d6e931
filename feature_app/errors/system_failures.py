"""
Programming and configuration mistakes.

Unlike payload or transport problems these are raised to the caller and never
turned into a degraded card.
"""

from typing import Optional


class SystemFailureError(Exception):
    """Base class for failures that are not recovered."""

    recoverable = False


class StateTransitionError(SystemFailureError):
    """A carousel or pane switcher was driven with an event its state rejects."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None):
        super().__init__(message)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class ConfigurationError(SystemFailureError):
    """The merged site configuration failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = list(errors or [])

    @property
    def fields(self) -> list[str]:
        """Dotted field names of the validation errors, when they carry one."""
        return [getattr(error, "field", str(error)) for error in self.errors]
