"""
Carousel paging state machine.

transition_carousel is the pure transition function; CarouselController
applies it to discrete input events in arrival order and fully re-renders
the active article and its indicators after every transition.
"""

from typing import Any, Optional

import structlog

from ..config.defaults import CarouselParams
from ..data.articles import render_article_html, render_placeholder_html
from ..errors import StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from ..ui.elements import Document, Element
from .models import CarouselEvent, CarouselPhase, CarouselState

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)

NAVIGATION_EVENTS = (CarouselEvent.NEXT, CarouselEvent.PREV, CarouselEvent.GOTO)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def transition_carousel(state: CarouselState, event: CarouselEvent,
                        argument: Any = None) -> CarouselState:
    """
    Next carousel state for one input event.

    EMPTY only leaves through a successful non-empty load and is never
    re-entered: failures and empty loads while READY keep the current state.
    Relative navigation wraps modulo the item count, absolute navigation
    clamps to the valid range.

    Raises:
        StateTransitionError: For unknown events or a non-integer goto target
    """
    if event == CarouselEvent.LOAD_SUCCEEDED:
        items = tuple(argument or ())
        if not items:
            return state
        return state.with_items(items)

    if event in (CarouselEvent.LOAD_FAILED, CarouselEvent.LOAD_EMPTY):
        return state

    if event not in NAVIGATION_EVENTS:
        raise StateTransitionError(
            f"Unknown carousel event: {event}",
            current_state=state.phase.value,
            attempted_transition=str(event),
        )

    if state.phase != CarouselPhase.READY:
        return state

    n = state.size
    if event == CarouselEvent.NEXT:
        return state.with_index((state.index + 1) % n)
    if event == CarouselEvent.PREV:
        return state.with_index((state.index - 1 + n) % n)

    if isinstance(argument, bool) or not isinstance(argument, int):
        raise StateTransitionError(
            f"goto requires an integer index, got {argument!r}",
            current_state=state.phase.value,
            attempted_transition=CarouselEvent.GOTO.value,
        )
    return state.with_index(clamp(argument, 0, n - 1))


class CarouselController:
    """Pointer/keyboard/programmatic paging over a loaded article list."""

    def __init__(self, document: Document, selector: str = "#feature3",
                 params: Optional[CarouselParams] = None):
        self.document = document
        self.selector = selector
        self.params = params or CarouselParams()
        self.state = CarouselState()
        self.transition_count = 0

        self.root: Optional[Element] = document.query(selector)
        self.window: Optional[Element] = None
        self.dots: Optional[Element] = None
        self.prev_button: Optional[Element] = None
        self.next_button: Optional[Element] = None

        if self.root is None:
            logger.warning("Carousel mount point not found", selector=selector)
        else:
            self.window = self.root.query(".article-window")
            self.dots = self.root.query(".dots")
            self.prev_button = self.root.query(".nav-btn.prev")
            self.next_button = self.root.query(".nav-btn.next")

    @property
    def mounted(self) -> bool:
        return self.root is not None

    @property
    def index(self) -> int:
        return self.state.index

    # Events ---------------------------------------------------------------

    def load_succeeded(self, items) -> CarouselState:
        items = tuple(items or ())
        if not items:
            return self.load_empty()
        return self._dispatch(CarouselEvent.LOAD_SUCCEEDED, items)

    def load_failed(self, reason: str = "") -> CarouselState:
        return self._dispatch(CarouselEvent.LOAD_FAILED, reason)

    def load_empty(self) -> CarouselState:
        return self._dispatch(CarouselEvent.LOAD_EMPTY)

    def next(self) -> CarouselState:
        return self._dispatch(CarouselEvent.NEXT)

    def prev(self) -> CarouselState:
        return self._dispatch(CarouselEvent.PREV)

    def goto(self, index: int) -> CarouselState:
        return self._dispatch(CarouselEvent.GOTO, index)

    def handle_click(self, target: Element) -> bool:
        """Route a click on a nav button or indicator; True when handled."""
        if self.root is None or not self.root.contains(target):
            return False
        if self.prev_button is not None and self.prev_button.contains(target):
            self.prev()
            return True
        if self.next_button is not None and self.next_button.contains(target):
            self.next()
            return True
        if self.dots is not None and target.parent is self.dots:
            self.goto(self.dots.children.index(target))
            return True
        return False

    def handle_key(self, key: str, target: Optional[Element] = None) -> bool:
        """ArrowLeft/ArrowRight page when focus is within the carousel."""
        focus = target if target is not None else self.document.active_element
        if self.root is None or not self.root.contains(focus):
            return False
        if key == "ArrowLeft":
            self.prev()
            return True
        if key == "ArrowRight":
            self.next()
            return True
        return False

    # Internals --------------------------------------------------------------

    def _dispatch(self, event: CarouselEvent, argument: Any = None) -> CarouselState:
        previous = self.state
        self.state = transition_carousel(previous, event, argument)
        self.transition_count += 1

        log_state_transition(
            state_logger,
            component_id=self.selector,
            from_state=f"{previous.phase.value}:{previous.index}",
            to_state=f"{self.state.phase.value}:{self.state.index}",
            trigger=event.value,
        )

        if previous.phase == CarouselPhase.READY and event in (
                CarouselEvent.LOAD_FAILED, CarouselEvent.LOAD_EMPTY):
            logger.info("Ignoring load failure for ready carousel", selector=self.selector)
            return self.state

        self._render(event, previous)
        return self.state

    def _render(self, event: CarouselEvent, previous: CarouselState) -> None:
        if self.window is None:
            return

        if self.state.phase == CarouselPhase.EMPTY:
            if event == CarouselEvent.LOAD_FAILED:
                self._render_placeholder(self.params.error_message)
            elif event == CarouselEvent.LOAD_EMPTY:
                self._render_placeholder(self.params.empty_message)
            return

        if event == CarouselEvent.LOAD_SUCCEEDED:
            self._build_indicators()

        p = self.params
        self.window.replace_children([])
        self.window.html = render_article_html(
            self.state.current,
            lede_max=p.lede_max_chars,
            body_max=p.body_max_chars,
            min_cut=p.min_sentence_cut,
        )
        self._activate_indicator(self.state.index)

    def _render_placeholder(self, message: str) -> None:
        self.window.replace_children([])
        self.window.html = render_placeholder_html(message)
        if self.dots is not None:
            self.dots.clear()

    def _build_indicators(self) -> None:
        if self.dots is None:
            return
        self.dots.replace_children(
            Element(tag="span", classes=["dot"]) for _ in self.state.items
        )

    def _activate_indicator(self, index: int) -> None:
        if self.dots is None:
            return
        for i, dot in enumerate(self.dots.children):
            dot.toggle_class("active", i == index)
