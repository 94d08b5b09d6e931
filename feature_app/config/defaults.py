"""Default configuration parameters for the feature card engine."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ThemeTokenDefaults:
    """Fallback style tokens used when the active theme does not define one."""
    grid_color: str = "rgba(127,127,127,0.15)"
    accent_a: str = "#8b5cf6"
    accent_b: str = "#1a9fff"


@dataclass(frozen=True)
class ThemeParams:
    """Theme palettes keyed by CSS custom-property name."""
    default_theme: str = "light"
    palettes: dict = field(default_factory=lambda: {
        "light": {
            "--chart-grid": "rgba(15,23,42,0.08)",
            "--chart-accent-a": "#8b5cf6",
            "--chart-accent-b": "#1a9fff",
        },
        "dark": {
            "--chart-grid": "rgba(255,255,255,0.08)",
            "--chart-accent-a": "#a78bfa",
            "--chart-accent-b": "#38bdf8",
        },
    })


@dataclass(frozen=True)
class ChartParams:
    """Line and band chart drawing parameters."""
    animation_ms: int = 500
    border_width: int = 2

    # Single-line series
    line_tension: float = 0.35
    point_radius: float = 4.5
    point_hover_radius: float = 6.0
    gradient_top_alpha: float = 0.35
    gradient_bottom_alpha: float = 0.0

    # Confidence band bounds
    band_tension: float = 0.0
    band_point_radius: float = 3.0
    band_point_hover_radius: float = 4.0
    band_border_dash: tuple = (2, 6)
    band_top_alpha: float = 0.18
    band_bottom_alpha: float = 0.06
    band_fallback_alpha: float = 0.12

    # Card placeholders
    empty_message: str = "No data available."
    error_message: str = "Failed to load data."


@dataclass(frozen=True)
class AnimationParams:
    """One-shot reveal animation parameters."""
    duration_ms: int = 1000
    bar_threshold: float = 0.25          # Visible fraction that starts a bar
    counter_threshold: float = 0.3       # Visible fraction that starts a counter
    bar_start_fraction: float = 0.2      # Bars start at 20% of target
    counter_start_fraction: float = 0.0


@dataclass(frozen=True)
class BarParams:
    """Bar metric card parameters."""
    max_bars: int = 3
    default_unit: str = "%"


@dataclass(frozen=True)
class CarouselParams:
    """Article carousel parameters."""
    lede_max_chars: int = 400
    body_max_chars: int = 1500
    min_sentence_cut: int = 80
    empty_message: str = "No articles."
    error_message: str = "Failed to load articles."


@dataclass(frozen=True)
class FeedParams:
    """Feed transport parameters."""
    timeout_seconds: float = 10.0
    user_agent: str = "feature-app/0.1"
    max_workers: int = 4


@dataclass(frozen=True)
class LoggingParams:
    """structlog output settings."""
    level: str = "INFO"
    format_json: bool = False
    include_timestamp: bool = True
    include_caller: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    tokens: ThemeTokenDefaults
    theme: ThemeParams
    chart: ChartParams
    animation: AnimationParams
    bars: BarParams
    carousel: CarouselParams
    feed: FeedParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        tokens=ThemeTokenDefaults(),
        theme=ThemeParams(),
        chart=ChartParams(),
        animation=AnimationParams(),
        bars=BarParams(),
        carousel=CarouselParams(),
        feed=FeedParams(),
        logging=LoggingParams(),
    )


def params_from_dict(cls, values: dict):
    """Build a parameter dataclass from a (possibly partial) merged config section."""
    known = {name for name in cls.__dataclass_fields__}
    kwargs = {k: v for k, v in (values or {}).items() if k in known}
    if "band_border_dash" in kwargs and isinstance(kwargs["band_border_dash"], list):
        kwargs["band_border_dash"] = tuple(kwargs["band_border_dash"])
    return cls(**kwargs)
