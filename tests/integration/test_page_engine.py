"""
Integration tests for the feature page engine.

Feeds are real files below a temporary site root; the rendering capability
is a mock. Covers per-card isolation, placeholders, bar/counter animations,
theme fan-out and disposal.
"""

import json
import pytest
from pathlib import Path
from unittest.mock import Mock

from feature_app.engine import CardStatus, FeaturePageEngine
from feature_app.errors import ConfigurationError
from feature_app.state.models import AnimationPhase


LINE_CARD = {"id": "feature1", "kind": "line", "selector": "#feature1",
             "canvas": "#chart-feature1", "sources": ["data/feature1.json"]}
BAND_CARD = {"id": "feature5", "kind": "band", "selector": "#feature5",
             "canvas": "#chart-feature5", "sources": ["data/feature5.json"]}
BARS_CARD = {"id": "feature4-bars", "kind": "bars", "selector": "#feature4-bars",
             "sources": ["data/feature4.json"]}
ARTICLES_CARD = {"id": "feature3", "kind": "articles", "selector": "#feature3",
                 "sources": ["missing/feature3.json", "data/feature3.json"]}
PANES_CARD = {"id": "feature6-tools", "kind": "panes", "selector": "#feature6-tools"}
COUNTERS_CARD = {"id": "stats", "kind": "counters", "selector": "html"}


@pytest.fixture
def site_root(tmp_path, growth_payload, band_payload, bars_payload, articles_payload) -> Path:
    data = tmp_path / "site" / "data"
    data.mkdir(parents=True)
    (data / "feature1.json").write_text(json.dumps(growth_payload), encoding="utf-8")
    (data / "feature5.json").write_text(json.dumps(band_payload), encoding="utf-8")
    (data / "feature4.json").write_text(json.dumps(bars_payload), encoding="utf-8")
    (data / "feature3.json").write_text(json.dumps(articles_payload), encoding="utf-8")
    return tmp_path / "site"


@pytest.fixture
def config_dir(tmp_path) -> Path:
    directory = tmp_path / "config"
    directory.mkdir()
    return directory


@pytest.fixture
def engine(page_document, config_dir, site_root, mock_capability):
    engine = FeaturePageEngine(page_document, config_dir=config_dir, site_root=site_root,
                               capability=mock_capability, clock=lambda: 0.0)
    for card in (LINE_CARD, BAND_CARD, BARS_CARD, ARTICLES_CARD, PANES_CARD, COUNTERS_CARD):
        assert engine.add_card(card)
    return engine


def statuses(outcomes):
    return {outcome.card_id: outcome.status for outcome in outcomes}


class TestFullPage:
    """Every card kind on one page."""

    def test_all_cards_ready(self, engine, mock_capability):
        """Each pipeline completes and outcomes keep registration order."""
        outcomes = engine.load_all()

        assert [o.card_id for o in outcomes] == [
            "feature1", "feature5", "feature4-bars", "feature3", "feature6-tools", "stats"]
        assert set(statuses(outcomes).values()) == {CardStatus.READY}
        assert mock_capability.create.call_count == 2
        assert statuses(outcomes)["feature3"] == CardStatus.READY
        assert engine.outcomes["feature3"].source == "data/feature3.json"
        assert engine.outcomes["feature1"].matched_shape == "keyed_by_date"

    def test_card_meta_applied(self, engine, page_document):
        """Title, subtitle and source come from the payload."""
        engine.load_all()
        card = page_document.query("#feature1")

        assert card.query(".chart-title").text == "GDP growth"
        assert card.query(".chart-sub").text == "Year over year"
        assert card.query(".chart-src").text == "Source: Statistics Office"

    def test_i18n_bound_title_kept(self, engine, page_document):
        """Translation-bound elements are never overwritten."""
        title = page_document.query("#feature1 .chart-title")
        title.set_attribute("data-i18n", "features.section.1.chartTitle")
        title.text = "Translated"

        engine.load_all()

        assert title.text == "Translated"

    def test_band_chart_config(self, engine, mock_capability):
        """The band card draws three datasets into its canvas."""
        engine.load_all()
        session = engine.sessions["feature5"]

        assert session.is_live
        assert len(session.config.datasets) == 3
        mounts = [c.args[0].id for c in mock_capability.create.call_args_list]
        assert sorted(mounts) == ["chart-feature1", "chart-feature5"]

    def test_bars_animate_clamped(self, engine, page_document):
        """Bar metrics bind labels and units and animate once when visible."""
        engine.load_all()
        bar_cards = page_document.query_all(".bar-card")

        assert [c.query(".bar-label span").text for c in bar_cards] == ["Precision", "Recall", "Uptime"]
        assert bar_cards[0].query(".bar-num .unit").text == "%"

        for card in bar_cards:
            assert engine.on_visibility(card, 0.5, now_ms=0)
        engine.tick(1000)

        assert bar_cards[1].query(".bar-fill").style["width"] == "100%"
        assert bar_cards[1].query(".bar-num .value").text == "100"
        assert bar_cards[0].query(".bar-num .value").text == "92.5"
        assert bar_cards[2].query(".bar-num .value").text == "7.0"
        assert not engine.on_visibility(bar_cards[0], 1.0, now_ms=2000)

    def test_counters_animate(self, engine, page_document):
        """Stat counters count up from zero to data-count."""
        engine.load_all()
        numbers = page_document.query_all(".stat .num")
        stat = numbers[0].closest(".stat")

        engine.on_visibility(stat, 0.3, now_ms=0)
        engine.tick(1000)

        assert numbers[0].text == "1,200"
        assert engine.animator.targets[stat].phase == AnimationPhase.COMPLETED
        assert numbers[1].text == ""

    def test_carousel_and_panes_ready(self, engine):
        """The article carousel and pane switcher are wired up."""
        engine.load_all()

        carousel = engine.carousels["feature3"]
        assert carousel.state.size == 3
        assert len(carousel.dots.children) == 3
        assert engine.pane_switchers["feature6-tools"].selected == "alpha"


class TestIsolation:
    """A failing card never affects its neighbours."""

    def test_unparseable_feed_isolated(self, engine, site_root, page_document):
        """A broken feed marks its card while the adjacent card renders."""
        (site_root / "data" / "feature1.json").write_text("{broken", encoding="utf-8")

        outcomes = statuses(engine.load_all())

        assert outcomes["feature1"] == CardStatus.FAILED
        assert outcomes["feature5"] == CardStatus.READY
        card = page_document.query("#feature1")
        assert card.get_attribute("data-state") == "error"
        assert card.query(".chart-empty").text == "Failed to load data."
        assert page_document.query("#feature5").get_attribute("data-state") is None
        assert engine.sessions["feature5"].is_live

    def test_empty_feed_placeholder(self, engine, site_root, page_document):
        """A feed with no recognizable series marks the card empty."""
        (site_root / "data" / "feature1.json").write_text('{"unexpected": true}', encoding="utf-8")

        outcomes = statuses(engine.load_all())

        assert outcomes["feature1"] == CardStatus.EMPTY
        card = page_document.query("#feature1")
        assert card.get_attribute("data-state") == "empty"
        assert card.query(".chart-empty").text == "No data available."

    def test_missing_article_feed_shows_placeholder(self, engine, site_root):
        """Every candidate failing renders the carousel error placeholder."""
        (site_root / "data" / "feature3.json").unlink()

        outcomes = statuses(engine.load_all())

        assert outcomes["feature3"] == CardStatus.FAILED
        assert "Failed to load articles." in engine.carousels["feature3"].window.html
        assert outcomes["feature4-bars"] == CardStatus.READY

    def test_renderer_failure_isolated(self, page_document, config_dir, site_root):
        """A renderer that raises for one chart leaves the other chart live."""
        capability = Mock()

        def create(mount, config):
            if mount.id == "chart-feature1":
                raise RuntimeError("canvas context lost")
            return Mock()

        capability.create.side_effect = create
        engine = FeaturePageEngine(page_document, config_dir=config_dir,
                                   site_root=site_root, capability=capability)
        engine.add_card(LINE_CARD)
        engine.add_card(BAND_CARD)

        outcomes = statuses(engine.load_all())

        assert outcomes["feature1"] == CardStatus.SKIPPED
        assert outcomes["feature5"] == CardStatus.READY

    def test_missing_mount_skipped(self, page_document, config_dir, site_root, mock_capability):
        """Cards whose mount point is absent are skipped silently."""
        engine = FeaturePageEngine(page_document, config_dir=config_dir,
                                   site_root=site_root, capability=mock_capability)
        engine.add_card({**LINE_CARD, "id": "ghost", "selector": "#ghost"})
        engine.add_card(BAND_CARD)

        outcomes = statuses(engine.load_all())

        assert outcomes["ghost"] == CardStatus.SKIPPED
        assert outcomes["feature5"] == CardStatus.READY

    def test_no_capability(self, page_document, config_dir, site_root):
        """Without a renderer chart cards are skipped and other cards still load."""
        engine = FeaturePageEngine(page_document, config_dir=config_dir, site_root=site_root)
        engine.add_card(LINE_CARD)
        engine.add_card(PANES_CARD)

        outcomes = statuses(engine.load_all())

        assert outcomes["feature1"] == CardStatus.SKIPPED
        assert outcomes["feature6-tools"] == CardStatus.READY


class TestRegistration:
    """Card declarations and site configuration."""

    def test_invalid_card_rejected(self, engine):
        """Invalid or duplicate declarations are not registered."""
        assert not engine.add_card({"id": "x", "kind": "pie", "selector": "#x"})
        assert not engine.add_card(LINE_CARD)
        assert not engine.add_card({**PANES_CARD, "id": "bad",
                                    "overrides": {"chart": {"line_tension": 9}}})

    def test_invalid_site_config_raises(self, page_document, tmp_path):
        """A broken site.yaml is a configuration error."""
        (tmp_path / "site.yaml").write_text("animation:\n  bar_threshold: 4\n", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            FeaturePageEngine(page_document, config_dir=tmp_path)

        assert exc_info.value.errors[0].field == "animation.bar_threshold"

    def test_site_cards_loaded(self, page_document):
        """The shipped site.yaml declares every card kind."""
        engine = FeaturePageEngine(page_document)

        assert engine.add_site_cards() == 6
        assert {card.kind for card in engine.cards} == {
            "line", "band", "bars", "articles", "panes", "counters"}

    def test_card_overrides_applied(self, page_document, config_dir, site_root, mock_capability):
        """Per-card chart overrides reach the built config."""
        engine = FeaturePageEngine(page_document, config_dir=config_dir,
                                   site_root=site_root, capability=mock_capability)
        engine.add_card({**LINE_CARD, "overrides": {"chart": {"animation_ms": 0}}})
        engine.load_all()

        assert engine.sessions["feature1"].config.animation_ms == 0


class TestThemeAndLifecycle:
    """Theme fan-out, reload and disposal."""

    def test_theme_toggle_reaches_every_chart(self, engine):
        """Every live session repaints once per toggle."""
        engine.load_all()
        handles = [engine.sessions[c].handle for c in ("feature1", "feature5")]

        assert engine.toggle_theme() == "dark"

        for handle in handles:
            handle.update.assert_called_once()
        dark_accent = engine.token_source.current().accent_a
        assert engine.sessions["feature1"].config.datasets[0].border_color == dark_accent

    def test_theme_before_load_is_safe(self, engine):
        """Theme changes before any chart exists are harmless."""
        engine.set_theme("dark")
        engine.set_theme("light")

        outcomes = statuses(engine.load_all())
        assert outcomes["feature1"] == CardStatus.READY

    def test_reload_rebuilds_chart(self, engine):
        """Reloading a chart card replaces its handle."""
        engine.load_all()
        old_handle = engine.sessions["feature1"].handle

        outcome = engine.reload_card("feature1")

        assert outcome.status == CardStatus.READY
        old_handle.destroy.assert_called_once()
        assert engine.sessions["feature1"].handle is not old_handle

    def test_reload_unknown_card(self, engine):
        """Reloading an unregistered card is a KeyError."""
        with pytest.raises(KeyError):
            engine.reload_card("nope")

    def test_dispose(self, engine):
        """Disposal releases every chart and stops theme fan-out."""
        engine.load_all()
        handles = [engine.sessions[c].handle for c in ("feature1", "feature5")]

        engine.dispose()
        engine.dispose()
        engine.toggle_theme()

        for handle in handles:
            handle.destroy.assert_called_once()
            handle.update.assert_not_called()
        assert engine.token_source.listener_count == 0

    def test_translations(self, engine, page_document):
        """Translations apply through the engine."""
        page_document.query("#feature5 .chart-title").set_attribute("data-i18n", "band.title")

        assert engine.apply_translations({"band.title": "Confidence band"}) == 1
        assert page_document.query("#feature5 .chart-title").text == "Confidence band"


class TestReload:
    """Reloaded feeds replace what the page shows."""

    def test_reload_retargets_bars_before_visible(self, engine, site_root, page_document):
        """New bar values animate when the reload happens before the first crossing."""
        engine.load_all()
        (site_root / "data" / "feature4.json").write_text(
            '{"accuracy":[{"label":"P","value":40}]}', encoding="utf-8")

        outcome = engine.reload_card("feature4-bars")

        assert outcome.status == CardStatus.READY
        bar_cards = page_document.query_all(".bar-card")
        assert engine.on_visibility(bar_cards[0], 1.0, now_ms=0)
        engine.tick(5000)

        assert bar_cards[0].query(".bar-label span").text == "P"
        assert bar_cards[0].query(".bar-num .value").text == "40"
        assert bar_cards[0].query(".bar-fill").style["width"] == "40%"
        for unused in bar_cards[1:]:
            assert unused.query(".bar-num .value").text == ""
            assert "width" not in unused.query(".bar-fill").style
            assert unused not in engine.animator.targets

    def test_reload_after_animation_shows_new_value(self, engine, site_root, page_document):
        """A completed bar jumps to the reloaded value without replaying."""
        engine.load_all()
        bar_cards = page_document.query_all(".bar-card")
        engine.on_visibility(bar_cards[0], 1.0, now_ms=0)
        engine.tick(5000)
        assert bar_cards[0].query(".bar-num .value").text == "92.5"

        (site_root / "data" / "feature4.json").write_text(
            '{"accuracy":[{"label":"P","value":40}]}', encoding="utf-8")
        engine.reload_card("feature4-bars")

        registration = engine.animator.targets[bar_cards[0]]
        assert registration.phase == AnimationPhase.COMPLETED
        assert registration.runs_started == 1
        assert bar_cards[0].query(".bar-num .value").text == "40"
        assert bar_cards[0].query(".bar-fill").style["width"] == "40%"

    def test_failed_reload_releases_chart(self, engine, site_root, page_document):
        """A chart whose feed disappears is taken down and marked as failed."""
        engine.load_all()
        session = engine.sessions["feature1"]
        handle = session.handle
        (site_root / "data" / "feature1.json").unlink()

        outcome = engine.reload_card("feature1")

        assert outcome.status == CardStatus.FAILED
        assert not session.is_live
        assert session.is_disposed
        handle.destroy.assert_called_once()
        assert page_document.query("#feature1").get_attribute("data-state") == "error"

        engine.toggle_theme()
        handle.update.assert_not_called()

    def test_empty_reload_releases_chart(self, engine, site_root, page_document):
        """A chart whose feed turns empty no longer shows the old series."""
        engine.load_all()
        session = engine.sessions["feature1"]
        handle = session.handle
        (site_root / "data" / "feature1.json").write_text('{"unexpected": true}', encoding="utf-8")

        outcome = engine.reload_card("feature1")

        assert outcome.status == CardStatus.EMPTY
        assert session.is_disposed
        handle.destroy.assert_called_once()
        assert page_document.query("#feature1").get_attribute("data-state") == "empty"

    def test_recovered_feed_creates_new_chart(self, engine, site_root, growth_payload):
        """After a failed reload the next good feed draws a fresh chart."""
        engine.load_all()
        old_session = engine.sessions["feature1"]
        (site_root / "data" / "feature1.json").unlink()
        engine.reload_card("feature1")

        (site_root / "data" / "feature1.json").write_text(json.dumps(growth_payload),
                                                         encoding="utf-8")
        outcome = engine.reload_card("feature1")

        assert outcome.status == CardStatus.READY
        assert engine.sessions["feature1"] is not old_session
        assert engine.sessions["feature1"].is_live
