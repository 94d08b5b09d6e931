"""Exclusive pane selection with roving keyboard selection."""

from typing import Optional

import structlog

from ..errors import StateTransitionError
from ..logging.config import get_state_logger, log_state_transition
from ..ui.elements import Document, Element
from .models import PaneState

logger = structlog.get_logger(__name__)
state_logger = get_state_logger(__name__)


class PaneSwitcher:
    """
    Tabs over a fixed set of named panes.

    Exactly one pane is visible at a time and each control's aria-selected
    mirrors the selection. There is no "nothing selected" state: the default
    (or first) pane is selected explicitly on construction.
    """

    def __init__(self, document: Document, selector: str = "#feature6-tools",
                 control_selector: str = ".tool-logos .tool",
                 pane_id_prefix: str = "tool-pane-",
                 default: Optional[str] = None):
        self.document = document
        self.selector = selector
        self.control_selector = control_selector
        self.state: Optional[PaneState] = None

        self.root: Optional[Element] = document.query(selector)
        self.controls: dict[str, Element] = {}
        self.panes: dict[str, Optional[Element]] = {}

        if self.root is None:
            logger.warning("Pane switcher mount point not found", selector=selector)
            return

        for control in self.root.query_all(control_selector):
            name = control.dataset.get("tool")
            if name and name not in self.controls:
                self.controls[name] = control
                self.panes[name] = self.root.query(f"#{pane_id_prefix}{name}")

        if not self.controls:
            logger.warning("Pane switcher has no controls", selector=selector)
            return

        names = tuple(self.controls)
        initial = default if default in self.controls else names[0]
        self.state = PaneState(panes=names, selected=initial)
        self._apply()

    @property
    def mounted(self) -> bool:
        return self.state is not None

    @property
    def selected(self) -> Optional[str]:
        return self.state.selected if self.state else None

    def select(self, name: str) -> PaneState:
        """
        Show one pane and hide the others.

        Raises:
            StateTransitionError: If the switcher is unmounted or the pane is unknown
        """
        if self.state is None:
            raise StateTransitionError(
                "Pane switcher is not mounted",
                attempted_transition=name,
            )
        if name not in self.controls:
            raise StateTransitionError(
                f"Unknown pane: {name}",
                current_state=self.state.selected,
                attempted_transition=name,
            )

        previous = self.state.selected
        self.state = self.state.with_selected(name)
        self._apply()

        log_state_transition(
            state_logger,
            component_id=self.selector,
            from_state=previous,
            to_state=name,
            trigger="select",
        )
        return self.state

    def select_offset(self, step: int) -> PaneState:
        """Move selection cyclically and activate the new pane."""
        if self.state is None:
            raise StateTransitionError("Pane switcher is not mounted")
        names = self.state.panes
        name = names[(self.state.selected_index + step) % len(names)]
        self.select(name)
        self.document.focus(self.controls[name])
        return self.state

    def select_next(self) -> PaneState:
        return self.select_offset(1)

    def select_prev(self) -> PaneState:
        return self.select_offset(-1)

    def handle_click(self, target: Element) -> bool:
        """Select the control containing target; clicks elsewhere are ignored."""
        if self.state is None or self.root is None or not self.root.contains(target):
            return False
        for name, control in self.controls.items():
            if control.contains(target):
                self.select(name)
                return True
        return False

    def handle_key(self, key: str, target: Optional[Element] = None) -> bool:
        """ArrowRight/ArrowLeft on the control group move and activate selection."""
        focus = target if target is not None else self.document.active_element
        if self.state is None or self.root is None or not self.root.contains(focus):
            return False
        if key == "ArrowRight":
            self.select_next()
            return True
        if key == "ArrowLeft":
            self.select_prev()
            return True
        return False

    def _apply(self) -> None:
        selected = self.state.selected
        for name, control in self.controls.items():
            control.set_attribute("aria-selected", name == selected)
        for name, pane in self.panes.items():
            if pane is not None:
                pane.hidden = name != selected
