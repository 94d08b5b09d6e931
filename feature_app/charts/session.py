"""
Live chart sessions.

A ChartSession owns exactly one renderer handle for one card, re-applies
style tokens on theme change and releases everything on dispose. Failing to
create a chart is recoverable: the session logs and keeps an inert handle.
"""

from collections.abc import Callable
from typing import Any, Optional, Protocol

import structlog

from ..errors import MountPointMissingError, RenderingUnavailableError
from ..ui.elements import Document
from .builder import ChartConfigBuilder
from .models import ChartConfig
from .tokens import StyleTokens, StyleTokenSource

logger = structlog.get_logger(__name__)


class RendererHandle(Protocol):
    """A drawn chart kept in sync with its (mutable) config."""

    def update(self) -> None:
        """Repaint after in-place config mutation."""

    def destroy(self) -> None:
        """Release the drawn chart."""


class RenderingCapability(Protocol):
    """External chart drawing engine."""

    def create(self, mount: Any, config: ChartConfig) -> RendererHandle:
        """Draw a chart for config into mount."""


class InertHandle:
    """Handle used when no chart could be drawn."""

    live = False

    def update(self) -> None:
        pass

    def destroy(self) -> None:
        pass


class ChartSession:
    """Owns one renderer handle and its theme subscription."""

    def __init__(self, card_id: str, canvas_selector: str,
                 capability: Optional[RenderingCapability],
                 token_source: StyleTokenSource,
                 document: Document,
                 builder: Optional[ChartConfigBuilder] = None):
        self.card_id = card_id
        self.canvas_selector = canvas_selector
        self.capability = capability
        self.token_source = token_source
        self.document = document
        self.builder = builder or ChartConfigBuilder()

        self.config: Optional[ChartConfig] = None
        self.handle: RendererHandle = InertHandle()
        self._live = False
        self._disposed = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.logger = logger.bind(card_id=card_id)

    @property
    def is_live(self) -> bool:
        return self._live

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def create(self, config: ChartConfig) -> RendererHandle:
        """
        Draw the chart. Never raises: an unavailable renderer, a missing mount
        point or a renderer failure leaves the session inert.
        """
        if self._disposed:
            self.logger.warning("Create called on disposed chart session")
            return self.handle
        if self._live:
            return self.handle

        try:
            mount = self._locate_mount()
            if self.capability is None:
                raise RenderingUnavailableError(
                    "Chart rendering capability is not loaded",
                    card_id=self.card_id,
                    degraded_functionality=self.card_id,
                )
            handle = self.capability.create(mount, config)
        except (RenderingUnavailableError, MountPointMissingError) as e:
            self.logger.warning("Chart not created", reason=str(e), fallback=e.fallback_strategy)
            return self.handle
        except Exception as e:
            self.logger.error("Renderer failed to create chart", error=str(e))
            return self.handle

        self.config = config
        self.handle = handle
        self._live = True
        self._unsubscribe = self.token_source.subscribe(self.apply_theme)
        self.logger.info("Chart session created", datasets=len(config.datasets),
                         points=len(config.labels))
        return handle

    def apply_theme(self, tokens: Optional[StyleTokens] = None) -> None:
        """Patch colors in place and repaint; no-op until a live chart exists."""
        if not self._live or self.config is None:
            return
        tokens = tokens or self.token_source.current()
        self.builder.apply_tokens(self.config, tokens)
        self.handle.update()
        self.logger.debug("Chart re-themed", theme=self.token_source.theme)

    def replace_config(self, config: ChartConfig) -> RendererHandle:
        """Rebuild wholesale on data reload."""
        if self._live:
            self._release()
        return self.create(config)

    def dispose(self) -> None:
        """Detach from theme changes and release the handle; idempotent."""
        if self._disposed:
            return
        self._release()
        self._disposed = True
        self.logger.debug("Chart session disposed")

    def _release(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._live:
            try:
                self.handle.destroy()
            except Exception as e:
                self.logger.error("Renderer failed to destroy chart", error=str(e))
        self.handle = InertHandle()
        self.config = None
        self._live = False

    def _locate_mount(self):
        mount = self.document.query(self.canvas_selector)
        if mount is None:
            raise MountPointMissingError(
                f"Chart mount point not found: {self.canvas_selector}",
                selector=self.canvas_selector,
                degraded_functionality=self.card_id,
            )
        return mount
