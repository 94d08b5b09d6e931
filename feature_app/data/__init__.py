"""
Feed ingestion and normalization module.

Fetches JSON feeds, sniffs their shape, and converts them into the canonical
series, band, bar metric and article structures consumed by the cards.
"""
