"""
Chart configuration builder.

Combines a canonical series with the current style tokens into a
renderer-agnostic ChartConfig: datasets with stroke/fill intent, the adaptive
period tick-label policy, and percentage tooltips.
"""

import re
from collections.abc import Callable
from typing import Optional, Union

import structlog

from ..config.defaults import ChartParams
from ..data.models import BandSeries, Series
from .models import AxisSpec, ChartConfig, DatasetRole, DatasetSpec, GradientFill
from .tokens import StyleTokens

logger = structlog.get_logger(__name__)

FIRST_SUBPERIOD = re.compile(r"(?:Q1|H1|M0?1)$|^\d{4}-01$", re.IGNORECASE)
GAP_TEXT = "n/a"


def period_year(label: str) -> str:
    """Year text of a period label such as 2023Q1."""
    return str(label or "")[:4]


def is_first_subperiod(label: str) -> bool:
    """Whether a period label marks the first sub-period of its year."""
    return bool(FIRST_SUBPERIOD.search(str(label or "")))


def period_tick_label(labels, index: int) -> str:
    """
    Year text for the first label and for first sub-periods, empty otherwise.

    Derived from the label text itself, so irregular spacing and gaps in the
    period sequence do not shift which ticks show a year.
    """
    if index < 0 or index >= len(labels):
        return ""
    label = str(labels[index] or "")
    if index == 0 or is_first_subperiod(label):
        return period_year(label)
    return ""


def thin_period_labels(labels) -> list[str]:
    """Tick text for every label of a period axis."""
    return [period_tick_label(labels, i) for i in range(len(labels))]


def make_tick_label_policy(labels) -> Callable[[int], str]:
    """Tick callback bound to an immutable label sequence."""
    frozen = tuple(labels)

    def tick_label(index: int) -> str:
        return period_tick_label(frozen, index)

    return tick_label


def format_percent_tick(value: float) -> str:
    """Y-axis tick text; values are already percentages."""
    return f"{value:g}%"


def format_percent_tooltip(dataset_label: str, value: Optional[float]) -> str:
    """Tooltip line with two decimals and no /100 scaling."""
    if value is None:
        return f" {dataset_label}: {GAP_TEXT}"
    return f" {dataset_label}: {float(value):.2f}%"


class ChartConfigBuilder:
    """Builds ChartConfigs for single-line and confidence band series."""

    def __init__(self, params: Optional[ChartParams] = None):
        self.params = params or ChartParams()

    def build(self, data: Union[Series, BandSeries], tokens: StyleTokens,
              **labels) -> ChartConfig:
        """Build the config matching the canonical value's type."""
        if isinstance(data, BandSeries):
            return self.build_band(data, tokens, **labels)
        return self.build_line(data, tokens, **labels)

    def build_line(self, series: Series, tokens: StyleTokens, label: str = "") -> ChartConfig:
        """Single line with a vertical accent gradient fading to transparent."""
        p = self.params
        dataset = DatasetSpec(
            label=label,
            data=series.values,
            role=DatasetRole.LINE,
            color_token="accent_a",
            fill=True,
            background=GradientFill(top_alpha=p.gradient_top_alpha,
                                    bottom_alpha=p.gradient_bottom_alpha),
            border_width=p.border_width,
            tension=p.line_tension,
            point_radius=p.point_radius,
            point_hover_radius=p.point_hover_radius,
            paint_order=1,
        )
        dataset.set_color(tokens.accent_a)

        config = self._config(series.labels, [dataset], tokens)
        config.meta["series_key"] = series.series_key
        logger.debug("Built line config", points=len(series), series_key=series.series_key)
        return config

    def build_band(self, band: BandSeries, tokens: StyleTokens,
                   lower_label: str = "CI 95% Lower",
                   upper_label: str = "CI 95% Upper",
                   center_label: Optional[str] = None) -> ChartConfig:
        """
        Confidence band: lower bound unfilled, upper bound filled down to the
        lower bound, center line painted last without fill.
        """
        p = self.params
        bound_style = dict(
            color_token="accent_a",
            border_width=p.border_width,
            border_dash=tuple(p.band_border_dash),
            tension=p.band_tension,
            point_style="rect",
            point_radius=p.band_point_radius,
            point_hover_radius=p.band_point_hover_radius,
            span_gaps=True,
            paint_order=1,
        )
        lower = DatasetSpec(
            label=lower_label,
            data=band.lower.values,
            role=DatasetRole.BAND_LOWER,
            fill=False,
            background="transparent",
            **bound_style,
        )
        upper = DatasetSpec(
            label=upper_label,
            data=band.upper.values,
            role=DatasetRole.BAND_UPPER,
            fill="-1",
            background=GradientFill(top_alpha=p.band_top_alpha,
                                    bottom_alpha=p.band_bottom_alpha,
                                    fallback_alpha=p.band_fallback_alpha),
            **bound_style,
        )
        center = DatasetSpec(
            label=center_label or band.center.series_key,
            data=band.center.values,
            role=DatasetRole.BAND_CENTER,
            color_token="accent_b",
            fill=False,
            background="transparent",
            border_width=p.border_width,
            tension=p.line_tension,
            point_radius=p.point_radius,
            point_hover_radius=p.point_hover_radius,
            paint_order=3,
        )
        for dataset in (lower, upper, center):
            dataset.set_color(tokens.color(dataset.color_token))

        config = self._config(band.labels, [lower, upper, center], tokens)
        config.meta["series_key"] = band.center.series_key
        logger.debug("Built band config", points=len(band))
        return config

    def apply_tokens(self, config: ChartConfig, tokens: StyleTokens) -> ChartConfig:
        """
        Patch color-bearing fields in place.

        Dataset arrays and axis policies are left untouched so the renderer
        keeps its animation state.
        """
        for dataset in config.datasets:
            dataset.set_color(tokens.color(dataset.color_token))
        config.x_axis.grid_color = tokens.grid_color
        config.y_axis.grid_color = tokens.grid_color
        return config

    def _config(self, labels, datasets: list[DatasetSpec], tokens: StyleTokens) -> ChartConfig:
        return ChartConfig(
            labels=tuple(labels),
            datasets=datasets,
            x_axis=AxisSpec(
                grid_color=tokens.grid_color,
                tick_label=make_tick_label_policy(labels),
                auto_skip=False,
            ),
            y_axis=AxisSpec(
                grid_color=tokens.grid_color,
                tick_label=format_percent_tick,
            ),
            tooltip_label=format_percent_tooltip,
            animation_ms=self.params.animation_ms,
        )
