"""
Configuration module.

Frozen dataclass defaults, YAML site configuration loading with per-card
overrides, and validation of the merged parameters.
"""
