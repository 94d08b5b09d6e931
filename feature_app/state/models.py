"""
State machine data models for the page's interactive widgets.

This module defines immutable data structures for carousel paging, pane
selection and one-shot animation runs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..data.models import Article


class CarouselPhase(str, Enum):
    """Carousel lifecycle states."""
    EMPTY = "empty"
    READY = "ready"


class CarouselEvent(str, Enum):
    """Inputs that drive the carousel."""
    LOAD_SUCCEEDED = "load_succeeded"
    LOAD_FAILED = "load_failed"
    LOAD_EMPTY = "load_empty"
    NEXT = "next"
    PREV = "prev"
    GOTO = "goto"


@dataclass(frozen=True)
class CarouselState:
    """Loaded items and the active index (always valid when READY)."""

    phase: CarouselPhase = CarouselPhase.EMPTY
    items: tuple[Article, ...] = ()
    index: int = 0

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def current(self) -> Optional[Article]:
        """Active article, None while EMPTY."""
        if self.phase != CarouselPhase.READY:
            return None
        return self.items[self.index]

    def with_items(self, items: tuple[Article, ...]) -> "CarouselState":
        """Ready state at the first item."""
        return CarouselState(phase=CarouselPhase.READY, items=tuple(items), index=0)

    def with_index(self, index: int) -> "CarouselState":
        """Same items, new active index."""
        return CarouselState(phase=self.phase, items=self.items, index=index)


@dataclass(frozen=True)
class PaneState:
    """Exclusive selection over a fixed set of named panes."""

    panes: tuple[str, ...]
    selected: str

    @property
    def selected_index(self) -> int:
        return self.panes.index(self.selected)

    def with_selected(self, name: str) -> "PaneState":
        return PaneState(panes=self.panes, selected=name)


class AnimationKind(str, Enum):
    """What a one-shot animation writes."""
    COUNT = "count"    # integer text with thousands separators
    BAR = "bar"        # track width in percent plus value text


class AnimationPhase(str, Enum):
    """Lifecycle of one observed element."""
    OBSERVING = "observing"
    RUNNING = "running"
    COMPLETED = "completed"
    DETACHED = "detached"


@dataclass(frozen=True)
class AnimationRun:
    """One progression from start_value to target over duration_ms."""

    started_at_ms: float
    duration_ms: float
    start_value: float
    target: float

    def progress(self, now_ms: float) -> float:
        """Linear eased progress in [0, 1]."""
        if self.duration_ms <= 0:
            return 1.0
        return max(0.0, min(1.0, (now_ms - self.started_at_ms) / self.duration_ms))

    def value_at(self, now_ms: float) -> float:
        """Current value; exactly target once progress reaches 1."""
        p = self.progress(now_ms)
        if p >= 1.0:
            return self.target
        return self.start_value + (self.target - self.start_value) * p
