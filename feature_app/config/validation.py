"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

from ..logging.config import LEVEL_NAMES
from ..ui.elements import is_valid_selector

CARD_KINDS = ("line", "band", "bars", "articles", "panes", "counters")
FEED_CARD_KINDS = ("line", "band", "bars", "articles")
CHART_CARD_KINDS = ("line", "band")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_fraction(value: Any) -> bool:
    return _is_number(value) and 0 <= value <= 1


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_chart_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate chart drawing parameters."""
        errors = []

        for name in ("animation_ms", "border_width"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative integer",
                        value=value
                    ))

        for name in ("line_tension", "band_tension"):
            if name in params and not _is_fraction(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a number between 0 and 1",
                    value=params[name]
                ))

        for name in ("point_radius", "point_hover_radius",
                     "band_point_radius", "band_point_hover_radius"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number",
                        value=value
                    ))

        for name in ("gradient_top_alpha", "gradient_bottom_alpha", "band_top_alpha",
                     "band_bottom_alpha", "band_fallback_alpha"):
            if name in params and not _is_fraction(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Alpha must be a number between 0 and 1",
                    value=params[name]
                ))

        if "band_border_dash" in params:
            value = params["band_border_dash"]
            if not isinstance(value, (list, tuple)) or not all(_is_number(v) and v >= 0 for v in value):
                errors.append(ValidationError(
                    field="band_border_dash",
                    message="Must be a list of non-negative numbers",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_animation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate reveal animation parameters."""
        errors = []

        if "duration_ms" in params:
            value = params["duration_ms"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="duration_ms",
                    message="Must be a positive integer",
                    value=value
                ))

        for name in ("bar_threshold", "counter_threshold"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0 or value > 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive number up to 1",
                        value=value
                    ))

        for name in ("bar_start_fraction", "counter_start_fraction"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value >= 1:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a number in [0, 1)",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_bar_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate bar metric parameters."""
        errors = []

        if "max_bars" in params:
            value = params["max_bars"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="max_bars",
                    message="Must be a positive integer",
                    value=value
                ))

        if "default_unit" in params and not isinstance(params["default_unit"], str):
            errors.append(ValidationError(
                field="default_unit",
                message="Must be a string",
                value=params["default_unit"]
            ))

        return errors

    @staticmethod
    def validate_carousel_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate carousel parameters."""
        errors = []

        for name in ("lede_max_chars", "body_max_chars", "min_sentence_cut"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a positive integer",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_feed_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate feed transport parameters."""
        errors = []

        if "timeout_seconds" in params:
            value = params["timeout_seconds"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(
                    field="timeout_seconds",
                    message="Must be a positive number",
                    value=value
                ))

        if "max_workers" in params:
            value = params["max_workers"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="max_workers",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate structlog output settings."""
        errors = []

        level = params.get("level", "INFO")
        if not isinstance(level, str) or level.upper() not in LEVEL_NAMES:
            errors.append(ValidationError(
                field="level",
                message=f"Must be one of {', '.join(LEVEL_NAMES)}",
                value=level
            ))

        return errors

    @staticmethod
    def validate_card_spec(card: dict[str, Any]) -> list[ValidationError]:
        """Validate a single card declaration."""
        errors = []

        card_id = card.get("id")
        if not isinstance(card_id, str) or not card_id:
            errors.append(ValidationError(
                field="id",
                message="Card id is required",
                value=card_id
            ))

        kind = card.get("kind")
        if kind not in CARD_KINDS:
            errors.append(ValidationError(
                field="kind",
                message=f"Must be one of {', '.join(CARD_KINDS)}",
                value=kind
            ))

        selector = card.get("selector")
        if not isinstance(selector, str) or not selector:
            errors.append(ValidationError(
                field="selector",
                message="Mount selector is required",
                value=selector
            ))
        elif not is_valid_selector(selector):
            errors.append(ValidationError(
                field="selector",
                message="Not a valid CSS selector",
                value=selector
            ))

        if kind in CHART_CARD_KINDS:
            canvas = card.get("canvas")
            if not isinstance(canvas, str) or not canvas:
                errors.append(ValidationError(
                    field="canvas",
                    message="Chart cards require a canvas selector",
                    value=canvas
                ))
            elif not is_valid_selector(canvas):
                errors.append(ValidationError(
                    field="canvas",
                    message="Not a valid CSS selector",
                    value=canvas
                ))

        if kind in FEED_CARD_KINDS:
            sources = card.get("sources")
            if (not isinstance(sources, list) or not sources
                    or not all(isinstance(s, str) and s for s in sources)):
                errors.append(ValidationError(
                    field="sources",
                    message="Feed cards require a non-empty list of sources",
                    value=sources
                ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration."""
        errors = []

        section_validators = {
            "chart": ConfigValidator.validate_chart_params,
            "animation": ConfigValidator.validate_animation_params,
            "bars": ConfigValidator.validate_bar_params,
            "carousel": ConfigValidator.validate_carousel_params,
            "feed": ConfigValidator.validate_feed_params,
            "logging": ConfigValidator.validate_logging_params,
        }

        for section, validator in section_validators.items():
            if section in config:
                section_errors = validator(config[section])
                for error in section_errors:
                    errors.append(ValidationError(
                        field=f"{section}.{error.field}",
                        message=error.message,
                        value=error.value
                    ))

        theme = config.get("theme", {})
        palettes = theme.get("palettes", {})
        if not isinstance(palettes, dict) or not palettes:
            errors.append(ValidationError(
                field="theme.palettes",
                message="At least one theme palette is required",
                value=palettes
            ))
        elif theme.get("default_theme") not in palettes:
            errors.append(ValidationError(
                field="theme.default_theme",
                message="Default theme must name a defined palette",
                value=theme.get("default_theme")
            ))

        return errors
