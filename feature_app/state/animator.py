"""
One-shot threshold animations.

Each observed element starts exactly one progression the first time its
visible fraction crosses the threshold, after which it is explicitly
unsubscribed. Count-up text and bar width share one progress clock and both
land exactly on the target.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

import structlog

from ..config.defaults import AnimationParams
from ..logging.config import get_state_logger, log_state_transition
from ..ui.elements import Element
from .models import AnimationKind, AnimationPhase, AnimationRun

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def format_count(value: float) -> str:
    """Whole number with thousands separators."""
    return f"{math.floor(value):,}"


def format_bar_value(value: float, target: float) -> str:
    """One decimal for fractional or small targets, whole numbers otherwise."""
    if target % 1 != 0 or target < 10:
        return f"{value:.1f}"
    return str(math.floor(value + 0.5))


@dataclass
class AnimationTarget:
    """Per-element registration with explicit completion state."""
    trigger: Element
    target: float
    kind: AnimationKind
    threshold: float
    start_fraction: float
    text_element: Optional[Element] = None
    width_element: Optional[Element] = None
    phase: AnimationPhase = AnimationPhase.OBSERVING
    run: Optional[AnimationRun] = None
    runs_started: int = 0
    last_value: Optional[float] = None

    @property
    def completed(self) -> bool:
        return self.phase == AnimationPhase.COMPLETED

    @property
    def component_id(self) -> str:
        return self.trigger.id or repr(self.trigger)


class ThresholdAnimator:
    """
    Runs at most one animation per element, driven by visibility and frames.

    Registrations are keyed by element and kept after completion so the
    completion flag stays queryable; the map never holds more than one entry
    per observed page element. forget() drops an element's entry entirely.
    """

    def __init__(self, params: Optional[AnimationParams] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.params = params or AnimationParams()
        self.clock = clock or monotonic_ms
        self.targets: dict[Element, AnimationTarget] = {}

    def _clamp(self, kind: AnimationKind, target: float) -> float:
        if kind == AnimationKind.BAR:
            return max(0.0, min(100.0, float(target)))
        return float(target)

    def observe(self, trigger: Element, target: float,
                kind: AnimationKind = AnimationKind.COUNT,
                text_element: Optional[Element] = None,
                width_element: Optional[Element] = None,
                threshold: Optional[float] = None) -> AnimationTarget:
        """
        Register an element. Registering the same element again returns the
        existing registration unchanged.
        """
        existing = self.targets.get(trigger)
        if existing is not None:
            return existing

        p = self.params
        if kind == AnimationKind.BAR:
            default_threshold, start_fraction = p.bar_threshold, p.bar_start_fraction
        else:
            default_threshold, start_fraction = p.counter_threshold, p.counter_start_fraction

        registration = AnimationTarget(
            trigger=trigger,
            target=self._clamp(kind, target),
            kind=kind,
            threshold=default_threshold if threshold is None else threshold,
            start_fraction=start_fraction,
            text_element=text_element,
            width_element=width_element,
        )
        self.targets[trigger] = registration
        return registration

    def retarget(self, trigger: Element, target: float,
                 kind: AnimationKind = AnimationKind.COUNT,
                 text_element: Optional[Element] = None,
                 width_element: Optional[Element] = None) -> AnimationTarget:
        """
        Point an element at a new target after its data was reloaded.

        An element that has not started is registered afresh. A running
        animation keeps its clock and lands on the new target. A completed
        element shows the new value at once without animating again.
        """
        registration = self.targets.get(trigger)
        if registration is None or registration.phase in (AnimationPhase.OBSERVING,
                                                           AnimationPhase.DETACHED):
            self.targets.pop(trigger, None)
            return self.observe(trigger, target, kind, text_element, width_element)

        previous = registration.target
        registration.target = self._clamp(registration.kind, target)
        registration.text_element = text_element or registration.text_element
        registration.width_element = width_element or registration.width_element

        if registration.phase == AnimationPhase.RUNNING:
            run = registration.run
            registration.run = AnimationRun(
                started_at_ms=run.started_at_ms,
                duration_ms=run.duration_ms,
                start_value=run.start_value,
                target=registration.target,
            )
        else:
            registration.last_value = registration.target
            self._write(registration, registration.target)

        logger.debug("Animation retargeted", component_id=registration.component_id,
                     phase=registration.phase.value, previous=previous,
                     target=registration.target)
        return registration

    def forget(self, trigger: Element) -> None:
        """Drop an element's registration in any phase."""
        self.targets.pop(trigger, None)

    def unobserve(self, trigger: Element) -> None:
        """Detach an element that has not started animating."""
        registration = self.targets.get(trigger)
        if registration is not None and registration.phase == AnimationPhase.OBSERVING:
            registration.phase = AnimationPhase.DETACHED

    def is_observing(self, trigger: Element) -> bool:
        registration = self.targets.get(trigger)
        return registration is not None and registration.phase == AnimationPhase.OBSERVING

    def is_completed(self, trigger: Element) -> bool:
        registration = self.targets.get(trigger)
        return registration is not None and registration.completed

    @property
    def active(self) -> list[AnimationTarget]:
        return [t for t in self.targets.values() if t.phase == AnimationPhase.RUNNING]

    def on_visibility(self, trigger: Element, ratio: float,
                      now_ms: Optional[float] = None) -> bool:
        """
        Report an element's visible fraction.

        Returns:
            True when this crossing started the element's one-shot run
        """
        registration = self.targets.get(trigger)
        if registration is None or registration.phase != AnimationPhase.OBSERVING:
            return False
        if ratio < registration.threshold:
            return False

        now = self.clock() if now_ms is None else now_ms
        registration.run = AnimationRun(
            started_at_ms=now,
            duration_ms=self.params.duration_ms,
            start_value=registration.target * registration.start_fraction,
            target=registration.target,
        )
        registration.runs_started += 1
        registration.phase = AnimationPhase.RUNNING

        log_state_transition(
            state_logger,
            component_id=registration.component_id,
            from_state=AnimationPhase.OBSERVING.value,
            to_state=AnimationPhase.RUNNING.value,
            trigger="visibility",
            context={"ratio": ratio, "target": registration.target, "kind": registration.kind.value},
        )

        self._advance(registration, now)
        return True

    def tick(self, now_ms: Optional[float] = None) -> int:
        """
        Advance every running animation to now.

        Returns:
            Number of animations still running
        """
        now = self.clock() if now_ms is None else now_ms
        for registration in self.active:
            self._advance(registration, now)
        return len(self.active)

    def _advance(self, registration: AnimationTarget, now: float) -> None:
        run = registration.run
        value = run.value_at(now)
        registration.last_value = value
        self._write(registration, value)

        if run.progress(now) >= 1.0:
            registration.phase = AnimationPhase.COMPLETED
            logger.debug("Animation completed", component_id=registration.component_id,
                         target=registration.target)

    def _write(self, registration: AnimationTarget, value: float) -> None:
        if registration.kind == AnimationKind.BAR:
            if registration.width_element is not None:
                registration.width_element.style["width"] = f"{value:g}%"
            if registration.text_element is not None:
                registration.text_element.text = format_bar_value(value, registration.target)
        elif registration.text_element is not None:
            registration.text_element.text = format_count(value)
