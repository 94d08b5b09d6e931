"""
Logging configuration and utilities for the feature card engine.
"""
from .config import configure_from_config, configure_logging, get_logger

__all__ = ["configure_from_config", "configure_logging", "get_logger"]
