"""
Centralized logging configuration for the feature card engine.

structlog is configured once per process, from the ``logging`` section of the
merged site configuration or from explicit arguments. Card pipelines and UI
state machines log through the subsystem-bound loggers defined here so every
record says which part of the page produced it.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

CARD_SUBSYSTEM = "cards"
STATE_SUBSYSTEM = "state_machine"


def resolve_level(level: str) -> int:
    """Map a level name to its stdlib value, rejecting unknown names."""
    name = str(level).upper()
    if name not in LEVEL_NAMES:
        raise ValueError(f"Unknown log level {level!r}; expected one of {', '.join(LEVEL_NAMES)}")
    return logging.getLevelName(name)


def build_processors(format_json: bool, include_timestamp: bool = True,
                     include_caller: bool = False,
                     extra_processors: Optional[list[Processor]] = None) -> list[Processor]:
    """Processor chain ending in the console or JSON renderer."""
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    processors.extend(extra_processors or [])

    # Renderer must be last
    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> None:
    """
    Configure structlog on top of the stdlib logging backend.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: Render JSON lines instead of the console format
        include_timestamp: Add an ISO timestamp to every record
        include_caller: Add filename and line number to every record
        extra_processors: Processors inserted before the renderer

    Raises:
        ValueError: When the level name is unknown
    """
    log_level = resolve_level(level)

    logging.basicConfig(level=log_level, stream=sys.stdout, format="%(message)s")
    logging.getLogger().setLevel(log_level)

    structlog.configure(
        processors=build_processors(format_json, include_timestamp,
                                    include_caller, extra_processors),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from_config(config: dict[str, Any]) -> None:
    """Configure logging from the ``logging`` section of a merged site config."""
    section = config.get("logging") or {}
    configure_logging(
        level=section.get("level", "INFO"),
        format_json=bool(section.get("format_json", False)),
        include_timestamp=bool(section.get("include_timestamp", True)),
        include_caller=bool(section.get("include_caller", False)),
    )


def get_logger(name: str) -> FilteringBoundLogger:
    return structlog.get_logger(name)


def get_card_logger(name: str) -> FilteringBoundLogger:
    """Logger for per-card pipeline outcomes (fetch, normalize, render)."""
    return get_logger(name).bind(subsystem=CARD_SUBSYSTEM)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """Logger for carousel, pane and animation state changes."""
    return get_logger(name).bind(subsystem=STATE_SUBSYSTEM)


def log_card_outcome(
    logger: FilteringBoundLogger,
    card_id: str,
    outcome: str,
    reason: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the terminal outcome of one card pipeline.

    Ready cards log at info, failed cards at error, and empty or skipped
    cards at warning.
    """
    card_log = logger.bind(card_id=card_id, outcome=outcome, reason=reason)
    if context:
        card_log = card_log.bind(context=context)

    if outcome == "ready":
        card_log.info("Card initialized")
    elif outcome == "failed":
        card_log.error("Card failed")
    else:
        card_log.warning("Card degraded")


def log_state_transition(
    logger: FilteringBoundLogger,
    component_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a state transition with standardized format.

    Args:
        logger: Structlog logger instance
        component_id: Selector of the carousel or pane group, or the animation target
        from_state: State before the event
        to_state: State after the event
        trigger: Event name
        context: Additional context data
    """
    transition_log = logger.bind(
        component_id=component_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )
    if context:
        transition_log = transition_log.bind(context=context)

    transition_log.debug("State transition")
