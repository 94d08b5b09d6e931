"""
Data quality error classifications for feed payload processing.

These exceptions describe problems inside a payload that was fetched and
decoded successfully. SeriesNormalizer raises and recovers them itself, so a
caller only ever sees an empty canonical value.
"""

from typing import Any, Dict, Optional


class DataQualityError(Exception):
    """Base class for payload issues that degrade to an empty value."""

    recoverable = True

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = dict(context or {})


class MissingDataError(DataQualityError):
    """The payload, or a part every shape needs, is absent."""

    def __init__(self, message: str, missing: str = "payload", **kwargs):
        super().__init__(message, **kwargs)
        self.missing = missing


class MalformedDataError(DataQualityError):
    """The payload matched none of the known shapes."""

    def __init__(self, message: str, shape_hint: Optional[str] = None,
                 payload_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.shape_hint = shape_hint
        self.payload_type = payload_type
        self.context.setdefault("payload_type", payload_type)
