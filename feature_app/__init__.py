"""
Feature App - Feature Card Data and Presentation-State Engine

Normalizes heterogeneous JSON feeds into canonical chart series, derives
theme-aware chart configurations, and drives the small UI state machines
(carousel, tabbed panes, one-shot reveal animations) of a static feature page.
"""

__version__ = "0.1.0"
__author__ = "Feature App Team"
