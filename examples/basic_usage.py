#!/usr/bin/env python3
"""
Basic Usage Example - Feature Page Engine

This script demonstrates the basic usage of the feature page engine with
local JSON feeds. It shows how to:
- Build a page element tree with every card mount point
- Initialize the engine from config/site.yaml
- Load every card and inspect the outcomes
- Drive the carousel, the pane switcher and the reveal animations
- Toggle the theme and watch chart colors follow

Run: python examples/basic_usage.py
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict

from feature_app.engine import FeaturePageEngine
from feature_app.logging import configure_logging
from feature_app.ui.elements import Document, Element


SAMPLE_FEEDS: Dict[str, Any] = {
    "feature1.json": {
        "date": {"0": "2023Q1", "1": "2023Q2", "2": "2023Q3", "3": "2023Q4"},
        "gdp_yoy": {"0": 1.2, "1": 1.5, "2": 1.9, "3": 2.1},
        "meta": {"title": "GDP growth", "subtitle": "Year over year, %"},
        "source": "Statistics Office",
    },
    "feature5.json": {
        "date": {"0": "2023Q1", "1": "2023Q2", "2": "2023Q3"},
        "gdp_yoy": {"0": 1.0, "1": 1.4, "2": 1.8},
        "ci95%_upper": {"0": 1.6, "1": 2.0, "2": 2.4},
        "ci95%_lower": {"0": 0.4, "1": 0.8, "2": 1.2},
    },
    "feature4.json": {
        "unit": "%",
        "accuracy": [
            {"label": "Precision", "value": 92.5},
            {"label": "Recall", "value": 88},
            {"label": "Uptime", "value": 99.9},
        ],
    },
    "feature3.json": {
        "articles": [
            {"title": "Rates hold steady", "url": "https://www.example.com/rates",
             "date": "2024-03-01", "score": 0.81, "text": "The central bank kept rates unchanged."},
            {"title": "Exports rebound", "url": "https://news.example.org/exports",
             "date": "2024-03-04", "score": 0.64, "text": "Exports grew for the second month."},
        ]
    },
}


class PrintingCapability:
    """Stand-in drawing engine that reports what it would draw."""

    class Handle:
        def __init__(self, mount_id: str):
            self.mount_id = mount_id

        def update(self) -> None:
            print(f"   🎨 {self.mount_id}: redraw")

        def destroy(self) -> None:
            print(f"   🗑️  {self.mount_id}: destroyed")

    def create(self, mount, config):
        labels = config.x_tick_labels()
        print(f"   🎨 {mount.id}: {config.chart_type} chart, "
              f"{len(config.datasets)} datasets, x = {labels[0]} .. {labels[-1]}")
        return self.Handle(mount.id)


def chart_card(card_id: str) -> Element:
    return Element(element_id=card_id, classes=["chart-card"], children=[
        Element(tag="h4", classes=["chart-title"]),
        Element(tag="p", classes=["chart-sub"]),
        Element(classes=["chart-canvas"], children=[
            Element(tag="canvas", element_id=f"chart-{card_id}")
        ]),
        Element(tag="small", classes=["chart-src"]),
    ])


def build_page() -> Document:
    """Build the element tree of the feature page."""
    bars = Element(element_id="feature4-bars", children=[
        Element(classes=["bar-card"], children=[
            Element(classes=["bar-label"], children=[Element(tag="span")]),
            Element(classes=["bar-track"], children=[Element(classes=["bar-fill"])]),
            Element(classes=["bar-num"], children=[
                Element(tag="span", classes=["value"]),
                Element(tag="span", classes=["unit"]),
            ]),
        ])
        for _ in range(3)
    ])
    carousel = Element(element_id="feature3", children=[
        Element(tag="button", classes=["nav-btn", "prev"]),
        Element(classes=["article-window"]),
        Element(tag="button", classes=["nav-btn", "next"]),
        Element(classes=["dots"]),
    ])
    tools = Element(element_id="feature6-tools", children=[
        Element(classes=["tool-logos"], children=[
            Element(tag="button", classes=["tool"], attributes={"data-tool": name})
            for name in ("pandas", "duckdb", "polars")
        ]),
        *[Element(element_id=f"tool-pane-{name}", classes=["tool-pane"])
          for name in ("pandas", "duckdb", "polars")],
    ])
    stats = Element(classes=["stats"], children=[
        Element(classes=["stat"], children=[
            Element(tag="span", classes=["num"], attributes={"data-count": count})
        ])
        for count in ("1200", "35")
    ])
    body = Element(tag="body", children=[
        chart_card("feature1"), chart_card("feature5"), bars, carousel, tools, stats,
    ])
    return Document(Element(tag="html", children=[body]))


def write_feeds(site_root: Path) -> None:
    data_dir = site_root / "assets" / "data"
    data_dir.mkdir(parents=True)
    for name, payload in SAMPLE_FEEDS.items():
        (data_dir / name).write_text(json.dumps(payload), encoding="utf-8")


def main():
    """Main demonstration function."""
    print("🚀 Feature Page Engine - Basic Usage Demo")
    print("=" * 60)

    configure_logging(level="WARNING")

    with tempfile.TemporaryDirectory() as tmp:
        site_root = Path(tmp)
        write_feeds(site_root)

        print("1. Initializing the page engine...")
        document = build_page()
        engine = FeaturePageEngine(document, site_root=site_root,
                                   capability=PrintingCapability())
        accepted = engine.add_site_cards()
        print(f"   Registered {accepted} cards from site.yaml")
        print()

        print("2. Loading every card...")
        for outcome in engine.load_all():
            detail = f" ({outcome.reason})" if outcome.reason else ""
            print(f"   {outcome.card_id:<16} {outcome.status.value}{detail}")
        print()

        print("3. Carousel navigation...")
        carousel = engine.carousels["feature3"]
        print(f"   Showing article {carousel.index}")
        carousel.next()
        print(f"   After next: article {carousel.index}")
        carousel.next()
        print(f"   After next at the end: article {carousel.index}")
        print()

        print("4. Pane switching...")
        switcher = engine.pane_switchers["feature6-tools"]
        print(f"   Selected: {switcher.selected}")
        switcher.select_next()
        print(f"   After next: {switcher.selected}")
        print()

        print("5. Reveal animations...")
        for bar_card in document.query_all("#feature4-bars .bar-card"):
            engine.on_visibility(bar_card, 0.5, now_ms=0)
        for stat in document.query_all(".stat"):
            engine.on_visibility(stat, 0.5, now_ms=0)
        running = engine.tick(now_ms=500)
        print(f"   Halfway: {running} animations running")
        engine.tick(now_ms=2000)
        for bar_card in document.query_all("#feature4-bars .bar-card"):
            label = bar_card.query(".bar-label span").text
            value = bar_card.query(".bar-num .value").text
            print(f"   {label:<10} {value}%")
        for number in document.query_all(".stat .num"):
            print(f"   Counter: {number.text}")
        print()

        print("6. Theme toggle...")
        theme = engine.toggle_theme()
        print(f"   Theme is now {theme}")
        print()

        engine.dispose()

    print("✅ Demo complete")


if __name__ == "__main__":
    main()
