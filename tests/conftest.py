"""Pytest configuration and shared fixtures."""

import pytest
from typing import Dict, Any
from unittest.mock import Mock

from feature_app.ui.elements import Document, Element


@pytest.fixture
def growth_payload() -> Dict[str, Any]:
    """Keyed-by-date line payload with keys out of order."""
    return {
        "date": {"2": "2023Q3", "0": "2023Q1", "1": "2023Q2", "3": "2023Q4", "4": "2024Q1"},
        "gdp_yoy": {"0": 1.2, "1": 1.5, "2": "", "3": 2.1, "4": 2.4},
        "meta": {"title": "GDP growth", "subtitle": "Year over year"},
        "source": "Statistics Office",
    }


@pytest.fixture
def band_payload() -> Dict[str, Any]:
    """Confidence band payload with one blank and one non-numeric bound."""
    return {
        "date": {"0": "2023Q1", "1": "2023Q2", "2": "2023Q3"},
        "gdp_yoy": {"0": 1.0, "1": 1.4, "2": 1.8},
        "ci95%_upper": {"0": 1.6, "1": "", "2": 2.4},
        "ci95%_lower": {"0": 0.4, "1": 0.8, "2": "n/a"},
    }


@pytest.fixture
def bars_payload() -> Dict[str, Any]:
    """Bar metric payload in the accuracy layout."""
    return {
        "unit": "%",
        "accuracy": [
            {"label": "Precision", "value": 92.5},
            {"label": "Recall", "value": 150},
            {"label": "Uptime", "value": 7},
            {"label": "Ignored", "value": 50},
        ],
    }


@pytest.fixture
def articles_payload() -> Dict[str, Any]:
    """Article feed wrapped in an articles array."""
    return {
        "articles": [
            {"title": "First", "url": "https://www.example.com/a", "date": "2024-03-01T10:00:00Z",
             "score": 0.876, "headline": "First lede.", "text": "First body."},
            {"headline": "Second headline", "url": "https://news.example.org/b",
             "date": "2024-03-02", "text": "Second body."},
            {"title": "Third", "score": "n/a", "summary": "Third summary.", "text": "Third body."},
        ]
    }


def build_chart_card(card_id: str, canvas_id: str, i18n_title: bool = False) -> Element:
    """Chart card markup: title, subtitle, canvas and source line."""
    title_attrs = {"data-i18n": f"features.{card_id}.title"} if i18n_title else {}
    return Element(element_id=card_id, classes=["chart-card"], children=[
        Element(tag="h4", classes=["chart-title"], attributes=title_attrs),
        Element(tag="p", classes=["chart-sub"]),
        Element(classes=["chart-canvas"], children=[Element(tag="canvas", element_id=canvas_id)]),
        Element(tag="small", classes=["chart-src"]),
    ])


def build_bar_cards(container_id: str = "feature4-bars", count: int = 3) -> Element:
    """Bar metric container with count bar cards."""
    cards = []
    for _ in range(count):
        cards.append(Element(classes=["bar-card"], children=[
            Element(classes=["bar-label"], children=[Element(tag="span")]),
            Element(classes=["bar-track"], children=[Element(classes=["bar-fill"])]),
            Element(classes=["bar-num"], children=[
                Element(tag="span", classes=["value"]),
                Element(tag="span", classes=["unit"]),
            ]),
        ]))
    return Element(element_id=container_id, children=cards)


def build_carousel(container_id: str = "feature3") -> Element:
    """Carousel markup: article window, nav buttons and indicator strip."""
    return Element(element_id=container_id, children=[
        Element(tag="button", classes=["nav-btn", "prev"]),
        Element(classes=["article-window"]),
        Element(tag="button", classes=["nav-btn", "next"]),
        Element(classes=["dots"]),
    ])


def build_panes(container_id: str = "feature6-tools", names=("alpha", "beta", "gamma")) -> Element:
    """Tool logos with one pane per tool."""
    controls = Element(classes=["tool-logos"], children=[
        Element(tag="button", classes=["tool"], attributes={"data-tool": name},
                children=[Element(tag="img")])
        for name in names
    ])
    panes = [Element(element_id=f"tool-pane-{name}", classes=["tool-pane"]) for name in names]
    return Element(element_id=container_id, children=[controls, *panes])


def build_stats(counts=("1200", "35")) -> Element:
    """Stat block with count-up numbers."""
    return Element(classes=["stats"], children=[
        Element(classes=["stat"], children=[
            Element(tag="span", classes=["num"], attributes={"data-count": count})
        ])
        for count in counts
    ])


@pytest.fixture
def page_document() -> Document:
    """Full feature page with every mount point."""
    body = Element(tag="body", children=[
        build_chart_card("feature1", "chart-feature1"),
        build_chart_card("feature5", "chart-feature5"),
        build_bar_cards(),
        build_carousel(),
        build_panes(),
        build_stats(),
    ])
    return Document(Element(tag="html", children=[body]))


@pytest.fixture
def mock_capability() -> Mock:
    """Rendering capability returning a fresh mock handle per chart."""
    capability = Mock()
    capability.create.side_effect = lambda mount, config: Mock(name=f"handle-{mount.id}")
    return capability
