"""
Structured Logging
==================
structlog integration for run-level events (schedule generated, export
written). Module loggers inside the solver stay on standard logging.

Usage:
    from shiftrota.utils.structured_logging import get_structured_logger

    log = get_structured_logger("shiftrota.engine")
    log.info("schedule_generated", week_start="2025-12-08", assignments=14)
"""
import logging
import sys
from typing import Any

import structlog


def configure_structlog(json_output: bool = False, level: int = logging.INFO) -> None:
    """
    Configure structlog for the application.

    Args:
        json_output: If True, output JSON lines (for log shipping).
                    If False, use colored console output.
        level: Minimum level passed through the filtering logger.
    """
    if json_output:
        renderer = structlog.processors.JSONRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)
        timestamper = structlog.processors.TimeStamper(fmt="%H:%M:%S")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_structured_logger(name: str) -> Any:
    """
    Get a structured logger bound to a component name.

    Args:
        name: Logger name (e.g., "shiftrota.engine")

    Returns:
        structlog bound logger
    """
    return structlog.get_logger(name).bind(component=name)


def bind_context(**kwargs) -> None:
    """
    Bind context variables for all subsequent structured log calls.

    Args:
        **kwargs: Context values (e.g., week_start="2025-12-08")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
