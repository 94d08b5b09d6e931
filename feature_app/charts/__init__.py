"""
Chart configuration module.

Style token resolution, renderer-agnostic chart configuration building, and
live chart sessions kept in sync with the active theme.
"""
