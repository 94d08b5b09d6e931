"""Unit tests for configuration management."""

import pytest
from pathlib import Path

from feature_app.config.defaults import ChartParams, get_default_config, params_from_dict
from feature_app.config.loader import ConfigLoader, deep_merge
from feature_app.config.validation import ConfigValidator

SITE_YAML = """
theme:
  default_theme: dark
chart:
  line_tension: 0.2
cards:
  - id: feature1
    kind: line
    selector: "#feature1"
    canvas: "#chart-feature1"
    sources: [a.json]
    overrides:
      chart:
        border_width: 3
"""


@pytest.fixture
def config_dir(tmp_path) -> Path:
    (tmp_path / "site.yaml").write_text(SITE_YAML, encoding="utf-8")
    return tmp_path


class TestDefaultConfig:
    """Test suite for default configuration."""

    def test_default_config_creation(self) -> None:
        """Test that default configuration can be created."""
        config = get_default_config()
        assert config.chart.line_tension == 0.35
        assert config.chart.band_border_dash == (2, 6)
        assert config.animation.duration_ms == 1000
        assert config.animation.bar_start_fraction == 0.2
        assert config.bars.max_bars == 3
        assert config.tokens.grid_color == "rgba(127,127,127,0.15)"
        assert config.logging.level == "INFO"

    def test_params_from_dict_ignores_unknown_keys(self) -> None:
        """Partial sections fill in defaults; YAML lists become tuples."""
        params = params_from_dict(ChartParams, {"border_width": 4, "band_border_dash": [1, 2],
                                                "unknown": True})
        assert params.border_width == 4
        assert params.band_border_dash == (1, 2)
        assert params.line_tension == 0.35


class TestConfigLoader:
    """Test suite for configuration loader."""

    def test_repository_site_config_is_valid(self) -> None:
        """The shipped site.yaml loads and validates."""
        loader = ConfigLoader.create()
        config = loader.merge_config()

        assert isinstance(loader.config_dir, Path)
        assert ConfigValidator.validate_config(config) == []
        for card in loader.load_card_specs():
            assert ConfigValidator.validate_card_spec(card) == []

    def test_missing_site_file_uses_defaults(self, tmp_path) -> None:
        """An empty config directory yields pure defaults."""
        loader = ConfigLoader.create(tmp_path)

        assert loader.load_site_config() == {}
        assert loader.load_card_specs() == []
        assert loader.merge_config()["chart"]["line_tension"] == 0.35

    def test_three_tier_precedence(self, config_dir) -> None:
        """Explicit overrides beat card overrides, which beat site settings and defaults."""
        loader = ConfigLoader.create(config_dir)

        site = loader.merge_config()
        assert site["theme"]["default_theme"] == "dark"
        assert site["chart"]["line_tension"] == 0.2
        assert site["chart"]["border_width"] == 2
        assert "cards" not in site

        card = loader.merge_config("feature1")
        assert card["chart"]["border_width"] == 3
        assert card["chart"]["line_tension"] == 0.2

        explicit = loader.merge_config("feature1", {"chart": {"border_width": 5}})
        assert explicit["chart"]["border_width"] == 5
        assert explicit["chart"]["point_radius"] == 4.5

    def test_deep_merge_replaces_non_mappings(self) -> None:
        """Nested mappings merge; lists and scalars are replaced."""
        merged = deep_merge({"a": {"x": 1, "y": [1, 2]}, "b": 1},
                            {"a": {"y": [3]}, "b": {"z": 2}})
        assert merged == {"a": {"x": 1, "y": [3]}, "b": {"z": 2}}

    def test_palettes_deep_merged(self, config_dir) -> None:
        """Site settings merge into nested default palettes."""
        config = ConfigLoader.create(config_dir).merge_config()
        assert "--chart-accent-a" in config["theme"]["palettes"]["light"]

    def test_unknown_card_has_no_overrides(self, config_dir) -> None:
        """Cards not declared in the site file have no overrides."""
        assert ConfigLoader.create(config_dir).load_card_config("nope") == {}


class TestConfigValidator:
    """Test suite for configuration validation."""

    def test_valid_defaults(self) -> None:
        """Default configuration passes validation."""
        config = ConfigLoader.create(Path("/nonexistent")).merge_config()
        assert ConfigValidator.validate_config(config) == []

    def test_invalid_chart_params(self) -> None:
        """Out-of-range chart parameters are reported."""
        errors = ConfigValidator.validate_chart_params({
            "line_tension": 2.0,
            "gradient_top_alpha": -0.1,
            "border_width": "wide",
            "band_border_dash": [2, "x"],
        })
        fields = {error.field for error in errors}

        assert fields == {"line_tension", "gradient_top_alpha", "border_width", "band_border_dash"}

    def test_invalid_animation_params(self) -> None:
        """Thresholds must be fractions."""
        errors = ConfigValidator.validate_animation_params({"bar_threshold": 1.5})
        assert [error.field for error in errors] == ["bar_threshold"]

    def test_invalid_logging_level(self) -> None:
        """Log levels are checked against the stdlib names."""
        assert ConfigValidator.validate_logging_params({"level": "warning"}) == []
        errors = ConfigValidator.validate_logging_params({"level": "CHATTY"})
        assert [error.field for error in errors] == ["level"]

    def test_section_prefix(self) -> None:
        """validate_config prefixes fields with their section."""
        config = ConfigLoader.create(Path("/nonexistent")).merge_config(
            card_overrides={"chart": {"line_tension": 3}})
        errors = ConfigValidator.validate_config(config)

        assert [error.field for error in errors] == ["chart.line_tension"]

    def test_default_theme_must_exist(self) -> None:
        """The default theme names a defined palette."""
        config = ConfigLoader.create(Path("/nonexistent")).merge_config(
            card_overrides={"theme": {"default_theme": "sepia"}})
        errors = ConfigValidator.validate_config(config)

        assert [error.field for error in errors] == ["theme.default_theme"]

    @pytest.mark.parametrize("card,expected", [
        ({"id": "c", "kind": "line", "selector": "#c", "canvas": "#x", "sources": ["a.json"]}, set()),
        ({"id": "c", "kind": "panes", "selector": "#c"}, set()),
        ({"id": "", "kind": "line", "selector": "#c", "sources": ["a"]}, {"id", "canvas"}),
        ({"id": "c", "kind": "pie", "selector": "#c"}, {"kind"}),
        ({"id": "c", "kind": "bars", "selector": "#c", "sources": []}, {"sources"}),
        ({"id": "c", "kind": "articles", "sources": ["a"]}, {"selector"}),
        ({"id": "c", "kind": "panes", "selector": "#c ["}, {"selector"}),
        ({"id": "c", "kind": "band", "selector": "#c", "canvas": "canvas[", "sources": ["a"]}, {"canvas"}),
    ])
    def test_card_spec_validation(self, card, expected) -> None:
        """Card declarations require id, kind, selector and kind-specific fields."""
        fields = {error.field for error in ConfigValidator.validate_card_spec(card)}
        assert fields == expected
