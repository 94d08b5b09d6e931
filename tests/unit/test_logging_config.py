"""Tests for logging configuration and structured logging helpers."""

import logging

import pytest
from unittest.mock import Mock, patch

from feature_app.logging.config import (
    configure_from_config,
    configure_logging,
    get_card_logger,
    get_state_logger,
    log_card_outcome,
    log_state_transition,
    resolve_level,
)


def bound_mock():
    """Logger mock whose bind() returns itself so calls can be inspected."""
    logger = Mock()
    logger.bind.return_value = logger
    return logger


class TestCardOutcomeLogging:
    """Card outcomes map to log levels."""

    @pytest.mark.parametrize("outcome,method", [
        ("ready", "info"),
        ("failed", "error"),
        ("empty", "warning"),
        ("skipped", "warning"),
    ])
    def test_outcome_levels(self, outcome, method):
        """Ready is info, failed is error, degraded outcomes warn."""
        logger = bound_mock()

        log_card_outcome(logger, "feature1", outcome, "reason", {"kind": "line"})

        getattr(logger, method).assert_called_once()
        first_bind = logger.bind.call_args_list[0].kwargs
        assert first_bind == {"card_id": "feature1", "outcome": outcome, "reason": "reason"}
        assert logger.bind.call_args_list[1].kwargs == {"context": {"kind": "line"}}


class TestStateTransitionLogging:
    """State transitions are logged at debug level."""

    def test_transition_fields(self):
        """Component, states and trigger are bound."""
        logger = bound_mock()

        log_state_transition(logger, "#feature3", "ready:0", "ready:1", "next")

        logger.debug.assert_called_once()
        assert logger.bind.call_args_list[0].kwargs == {
            "component_id": "#feature3",
            "from_state": "ready:0",
            "to_state": "ready:1",
            "trigger": "next",
        }


class TestConfigureLogging:
    """structlog configuration."""

    @pytest.mark.parametrize("format_json", [True, False])
    def test_configure_and_log(self, format_json):
        """Both renderers accept bound subsystem loggers."""
        configure_logging(level="DEBUG", format_json=format_json, include_caller=True)

        get_card_logger(__name__).info("card event", card_id="feature1")
        get_state_logger(__name__).debug("state event", component_id="#feature3")

    def test_invalid_level(self):
        """Unknown level names are rejected."""
        with pytest.raises(ValueError, match="CHATTY"):
            configure_logging(level="CHATTY")

    def test_configure_from_site_section(self):
        """The logging section of a merged config drives the setup."""
        with patch("feature_app.logging.config.configure_logging") as configure:
            configure_from_config({"logging": {"level": "debug", "format_json": True}})

        configure.assert_called_once_with(
            level="debug", format_json=True, include_timestamp=True, include_caller=False
        )

    def test_missing_section_uses_defaults(self):
        with patch("feature_app.logging.config.configure_logging") as configure:
            configure_from_config({})

        assert configure.call_args.kwargs["level"] == "INFO"


class TestLevelResolution:
    """Level names map to stdlib values."""

    def test_case_insensitive(self):
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level("DEBUG") == logging.DEBUG
