"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides structured logging capabilities with JSON formatting for production
and human-readable console output for development.
"""

import logging

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configures the application's logging system.

    This function sets up structlog with:
    1. ISO format timestamps
    2. Log level inclusion
    3. JSON formatting for production (when json_logs=True)
    4. Console formatting for development
    5. Standard library logger factory and bound loggers

    Args:
        log_level: Minimum level passed to the standard library root logger.
        json_logs: Render events as JSON instead of the console renderer.
    """
    logging.getLogger().setLevel(log_level.upper())

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.add_log_level,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def mask_identifier(value: str | None) -> str:
    """Masks a username, email or subject id for log output.

    Keeps the first two characters so events can still be correlated by eye.
    """
    if not value:
        return "***"
    return f"{value[:2]}***"


logger = structlog.get_logger()
