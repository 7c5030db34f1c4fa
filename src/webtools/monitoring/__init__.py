"""Logging and metrics for the web tools."""

from webtools.monitoring.logging_config import (
    LogContext,
    bind_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from webtools.monitoring.metrics import (
    track_fallback,
    track_provider_search,
    track_sequence_failure,
    track_truncation,
    track_web_fetch,
)

__all__ = [
    # Logging
    "LogContext",
    "bind_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # Metrics
    "track_fallback",
    "track_provider_search",
    "track_sequence_failure",
    "track_truncation",
    "track_web_fetch",
]
