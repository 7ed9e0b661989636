"""Logging configuration."""

import logging
import sys

import structlog

from todoapp.settings import settings

REDACTED = "***"
SENSITIVE_KEYS = frozenset({"token", "id_token", "password", "admin_secret", "api_key"})

# httpx logs full request URLs at INFO, and identity URLs carry the API key
QUIET_LOGGERS = ("httpx", "httpcore")


def redact_secrets(logger, method_name: str, event_dict: dict) -> dict:
    """Mask credentials passed as event fields."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structured logging.

    Logs go to stderr so command output on stdout stays readable.

    Args:
        level: Log level name (settings.log_level by default)
        log_format: "json" or "console" (settings.log_format by default)
    """
    level = level or settings.log_level
    log_format = log_format or settings.log_format

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        redact_secrets,
    ]
    if log_format == "json":
        processors = shared + [
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared + [
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr, level=level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)
