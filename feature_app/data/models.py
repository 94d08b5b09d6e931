"""
Canonical data models for normalized feed payloads.

This module defines immutable data structures that represent clean, aligned
series after normalization from the heterogeneous raw JSON shapes.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class SeriesKind(str, Enum):
    """Canonical structure a payload is normalized into."""
    LINE = "line"
    BAND = "band"
    BARS = "bars"
    ARTICLES = "articles"


@dataclass(frozen=True)
class SeriesPoint:
    """Single labelled value; None marks an explicit gap."""
    label: str
    value: Optional[float]


@dataclass(frozen=True)
class Series:
    """Ordered label/value sequence sharing one index axis."""
    labels: tuple[str, ...] = ()
    values: tuple[Optional[float], ...] = ()
    series_key: str = "value"

    def __post_init__(self):
        if len(self.labels) != len(self.values):
            raise ValueError(
                f"labels/values length mismatch: {len(self.labels)} != {len(self.values)}"
            )

    def __len__(self) -> int:
        return len(self.labels)

    @property
    def points(self) -> tuple[SeriesPoint, ...]:
        """Series as label/value points."""
        return tuple(SeriesPoint(label, value) for label, value in zip(self.labels, self.values))

    @property
    def is_empty(self) -> bool:
        return not self.labels

    @classmethod
    def empty(cls, series_key: str = "value") -> "Series":
        """Explicit empty series for unrecognized or failed payloads."""
        return cls(series_key=series_key)

    @classmethod
    def from_points(cls, points, series_key: str = "value") -> "Series":
        """Create a series from SeriesPoint objects."""
        points = tuple(points)
        return cls(
            labels=tuple(p.label for p in points),
            values=tuple(p.value for p in points),
            series_key=series_key,
        )


@dataclass(frozen=True)
class BandSeries:
    """Center line with upper/lower bounds on one label axis.

    lower <= upper is expected but not enforced; violations render as-is.
    """
    center: Series
    upper: Series
    lower: Series

    def __post_init__(self):
        if not (self.center.labels == self.upper.labels == self.lower.labels):
            raise ValueError("band series must share one label axis")

    def __len__(self) -> int:
        return len(self.center)

    @property
    def labels(self) -> tuple[str, ...]:
        return self.center.labels

    @property
    def is_empty(self) -> bool:
        return self.center.is_empty

    @classmethod
    def empty(cls) -> "BandSeries":
        """Explicit empty band for unrecognized or failed payloads."""
        return cls(
            center=Series.empty(),
            upper=Series.empty("upper"),
            lower=Series.empty("lower"),
        )


@dataclass(frozen=True)
class MetricBar:
    """Single bar metric; value keeps its raw magnitude."""
    label: str
    value: float
    unit: str = "%"

    @property
    def display_value(self) -> float:
        """Value clamped to the 0..100 track, applied at render time only."""
        return max(0.0, min(100.0, self.value))


@dataclass(frozen=True)
class Article:
    """Carousel item, read-only attributes of the article feed."""
    title: str
    url: str
    date: str
    score: Optional[float]
    lede: str
    body: str


CanonicalValue = Union[Series, BandSeries, tuple]


def empty_for(kind: Optional[SeriesKind]) -> CanonicalValue:
    """Explicit empty canonical value for a shape hint."""
    if kind == SeriesKind.BAND:
        return BandSeries.empty()
    if kind in (SeriesKind.BARS, SeriesKind.ARTICLES):
        return ()
    return Series.empty()


@dataclass(frozen=True)
class NormalizationResult:
    """Result of payload normalization."""

    value: CanonicalValue
    kind: Optional[SeriesKind] = None
    matched_shape: Optional[str] = None
    error_msg: Optional[str] = None

    @property
    def recognized(self) -> bool:
        return self.matched_shape is not None

    @classmethod
    def matched(cls, value: CanonicalValue, kind: SeriesKind, shape: str) -> "NormalizationResult":
        """Create result for a payload accepted by a shape matcher."""
        return cls(value=value, kind=kind, matched_shape=shape)

    @classmethod
    def unrecognized(cls, kind: Optional[SeriesKind], reason: str) -> "NormalizationResult":
        """Create empty result for a payload no matcher accepted."""
        return cls(value=empty_for(kind), kind=kind, error_msg=reason)
