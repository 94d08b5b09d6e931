"""
Renderer-agnostic chart configuration models.

A ChartConfig is owned by exactly one ChartSession. Dataset arrays and axis
policies are fixed once built; only the color-bearing fields are patched in
place on theme change.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .colors import rgba


@dataclass(frozen=True)
class PlotArea:
    """Pixel bounds of the plot area, known only after first layout."""
    left: float
    top: float
    right: float
    bottom: float


@dataclass(frozen=True)
class LinearGradient:
    """Linear gradient between two points with color stops."""
    x0: float
    y0: float
    x1: float
    y1: float
    stops: tuple[tuple[float, str], ...]


@dataclass(frozen=True)
class GradientFill:
    """
    Deferred vertical gradient resolver.

    Invoked by the renderer at paint time with the current plot area and the
    dataset's current fill color, so it stays correct across resizes and
    theme changes.
    """
    top_alpha: float
    bottom_alpha: float
    fallback_alpha: Optional[float] = None

    def __call__(self, area: Optional[PlotArea], color: str) -> Union[LinearGradient, str, None]:
        if area is None:
            if self.fallback_alpha is None:
                return None
            return rgba(color, self.fallback_alpha)
        return LinearGradient(
            x0=0, y0=area.top, x1=0, y1=area.bottom,
            stops=((0.0, rgba(color, self.top_alpha)), (1.0, rgba(color, self.bottom_alpha))),
        )


class DatasetRole(str, Enum):
    """What a dataset draws."""
    LINE = "line"
    BAND_LOWER = "band_lower"
    BAND_UPPER = "band_upper"
    BAND_CENTER = "band_center"


Background = Union[str, GradientFill]


@dataclass
class DatasetSpec:
    """One drawn dataset: data, stroke/fill intent, paint order and point style."""
    label: str
    data: tuple[Optional[float], ...]
    role: DatasetRole
    color_token: str                      # StyleTokens field feeding the colors below

    # Color-bearing fields (patched on theme change)
    border_color: str = ""
    point_background_color: str = ""
    point_border_color: str = ""
    fill_color: str = ""

    fill: Union[bool, str] = False        # "-1" fills down to the previous dataset
    background: Background = "transparent"
    border_width: int = 2
    border_dash: tuple = ()
    tension: float = 0.0
    point_style: str = "circle"
    point_radius: float = 3.0
    point_hover_radius: float = 4.0
    point_border_width: int = 0
    span_gaps: bool = False
    paint_order: int = 1                  # Higher paints later (on top)

    def resolve_background(self, area: Optional[PlotArea]) -> Union[LinearGradient, str, None]:
        """Background at paint time for the given plot area."""
        if isinstance(self.background, GradientFill):
            return self.background(area, self.fill_color)
        return self.background

    def set_color(self, color: str) -> None:
        """Overwrite every color-bearing field."""
        self.border_color = color
        self.point_background_color = color
        self.point_border_color = color
        self.fill_color = color


@dataclass
class AxisSpec:
    """Axis grid and tick label policy."""
    grid_color: str
    tick_label: Callable[[Any], str]           # x: index -> text, y: value -> text
    grid_display: bool = True
    auto_skip: bool = True


@dataclass
class ChartConfig:
    """Complete renderer-agnostic chart configuration."""
    labels: tuple[str, ...]
    datasets: list[DatasetSpec]
    x_axis: AxisSpec
    y_axis: AxisSpec
    tooltip_label: Callable[[str, Optional[float]], str]
    chart_type: str = "line"
    animation_ms: int = 500
    interaction_mode: str = "index"
    legend: bool = False
    meta: dict[str, Any] = field(default_factory=dict)

    def painted_datasets(self) -> list[DatasetSpec]:
        """Datasets in paint order; ties keep declaration order."""
        return sorted(self.datasets, key=lambda ds: ds.paint_order)

    def x_tick_labels(self) -> list[str]:
        """Tick text for every x index."""
        return [self.x_axis.tick_label(i) for i in range(len(self.labels))]

    def to_payload(self) -> dict[str, Any]:
        """
        Chart.js-shaped payload.

        Position-dependent values stay callables (`backgroundColor` takes the
        plot area, tick and tooltip callbacks take an index or value).
        """
        # Chart.js draws lower `order` values on top, the reverse of paint_order.
        top = max((ds.paint_order for ds in self.datasets), default=0)
        datasets = []
        for ds in self.datasets:
            background: Any = ds.background
            if isinstance(ds.background, GradientFill):
                background = ds.resolve_background
            datasets.append({
                "label": ds.label,
                "data": list(ds.data),
                "borderColor": ds.border_color,
                "borderWidth": ds.border_width,
                "borderDash": list(ds.border_dash),
                "fill": ds.fill,
                "backgroundColor": background,
                "tension": ds.tension,
                "pointStyle": ds.point_style,
                "pointRadius": ds.point_radius,
                "pointHoverRadius": ds.point_hover_radius,
                "pointBorderWidth": ds.point_border_width,
                "pointBackgroundColor": ds.point_background_color,
                "pointBorderColor": ds.point_border_color,
                "spanGaps": ds.span_gaps,
                "order": top - ds.paint_order,
            })

        return {
            "type": self.chart_type,
            "data": {"labels": list(self.labels), "datasets": datasets},
            "options": {
                "responsive": True,
                "maintainAspectRatio": False,
                "animation": {"duration": self.animation_ms},
                "interaction": {"mode": self.interaction_mode, "intersect": False},
                "plugins": {
                    "legend": {"display": self.legend},
                    "tooltip": {"callbacks": {"label": self.tooltip_label}},
                },
                "scales": {
                    "x": {
                        "grid": {"display": self.x_axis.grid_display, "color": self.x_axis.grid_color,
                                 "drawBorder": False, "tickLength": 0},
                        "ticks": {"autoSkip": self.x_axis.auto_skip,
                                  "maxTicksLimit": len(self.labels),
                                  "callback": self.x_axis.tick_label},
                    },
                    "y": {
                        "grid": {"color": self.y_axis.grid_color, "drawBorder": False},
                        "ticks": {"callback": self.y_axis.tick_label},
                    },
                },
            },
        }
