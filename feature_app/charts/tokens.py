"""
Live style token source.

Holds the page's active theme attribute and resolves the chart style tokens
from it at read time. Every theme mutation is fanned out to subscribers,
which re-derive their own state from a fresh snapshot.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

import structlog

from ..config.defaults import ThemeParams, ThemeTokenDefaults

logger = structlog.get_logger(__name__)

GRID_VARIABLE = "--chart-grid"
ACCENT_A_VARIABLE = "--chart-accent-a"
ACCENT_B_VARIABLE = "--chart-accent-b"


@dataclass(frozen=True)
class StyleTokens:
    """Theme-dependent chart colors, resolved at time of read."""
    grid_color: str
    accent_a: str
    accent_b: str

    def color(self, token_name: str) -> str:
        """Accent lookup by token field name."""
        return getattr(self, token_name)


TokenListener = Callable[[StyleTokens], None]


class StyleTokenSource:
    """Read-current-tokens plus subscribe-to-change over the active theme."""

    def __init__(self, palettes: Optional[dict[str, dict[str, str]]] = None,
                 theme: Optional[str] = None,
                 defaults: Optional[ThemeTokenDefaults] = None):
        theme_params = ThemeParams()
        self.palettes = palettes if palettes is not None else theme_params.palettes
        self.defaults = defaults or ThemeTokenDefaults()
        self._theme = theme or theme_params.default_theme
        self._listeners: list[TokenListener] = []

    @property
    def theme(self) -> str:
        return self._theme

    def current(self) -> StyleTokens:
        """Resolve tokens for the active theme, falling back per token."""
        palette = self.palettes.get(self._theme, {})

        def read(variable: str, fallback: str) -> str:
            value = palette.get(variable)
            if isinstance(value, str) and value.strip():
                return value.strip()
            return fallback

        return StyleTokens(
            grid_color=read(GRID_VARIABLE, self.defaults.grid_color),
            accent_a=read(ACCENT_A_VARIABLE, self.defaults.accent_a),
            accent_b=read(ACCENT_B_VARIABLE, self.defaults.accent_b),
        )

    def set_theme(self, theme: str) -> None:
        """Mutate the theme attribute and notify subscribers."""
        previous = self._theme
        self._theme = theme
        logger.debug("Theme attribute changed", previous=previous, theme=theme)
        self._notify()

    def toggle(self) -> str:
        """Flip between dark and light, returning the new theme."""
        self.set_theme("light" if self._theme == "dark" else "dark")
        return self._theme

    def subscribe(self, listener: TokenListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Callable that removes the listener; calling it twice is a no-op
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        tokens = self.current()
        for listener in list(self._listeners):
            try:
                listener(tokens)
            except Exception as e:
                logger.error("Theme listener failed", theme=self._theme, error=str(e))
