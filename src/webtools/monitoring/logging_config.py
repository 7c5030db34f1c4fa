"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from webtools.config import MonitoringSettings

# Event keys whose values must never reach the log output.
SENSITIVE_KEYS = frozenset({"api_key", "authorization", "token"})


def add_app_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application context to log entries.

    Args:
        logger: The wrapped logger object.
        method_name: The name of the wrapped method (e.g. 'info', 'debug').
        event_dict: The event dictionary.

    Returns:
        Modified event dictionary.
    """
    event_dict["service"] = "webtools"
    return event_dict


def redact_credentials(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values bound to a log entry."""
    for key in SENSITIVE_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def get_processors(json_output: bool = True) -> list[Processor]:
    """Get the list of processors for structlog.

    Args:
        json_output: Whether to use JSON output format.

    Returns:
        List of processors.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        redact_credentials,
    ]

    if json_output:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    return processors


def configure_logging(
    settings: MonitoringSettings | None = None,
    log_level: str | None = None,
    json_output: bool | None = None,
) -> None:
    """Configure structured logging for the tools.

    Explicit arguments override the values from ``settings``.

    Args:
        settings: Monitoring settings to read defaults from.
        log_level: The logging level to use.
        json_output: Whether to use JSON output format.
    """
    settings = settings or MonitoringSettings()
    level_name = (log_level or settings.log_level).upper()
    use_json = settings.json_logs if json_output is None else json_output

    # Tool output goes to stdout, so logs go to stderr.
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=logging.INFO)
    logging.getLogger().setLevel(getattr(logging, level_name, logging.INFO))

    structlog.configure(
        processors=get_processors(json_output=use_json),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name.

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


class LogContext:
    """Context manager binding tool-call context (tool, query, url) to logs."""

    def __init__(self, **kwargs: Any) -> None:
        self._kwargs = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self._kwargs)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self._kwargs.keys())


def bind_context(**kwargs: Any) -> None:
    """Bind values to the logging context permanently.

    Args:
        **kwargs: Key-value pairs to add to log context.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove values from the logging context.

    Args:
        *keys: Keys to remove from log context.
    """
    structlog.contextvars.unbind_contextvars(*keys)
