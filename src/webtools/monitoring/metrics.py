"""Prometheus metrics for the web tools."""

import time
from contextlib import asynccontextmanager

from prometheus_client import Counter, Histogram

from webtools.exceptions import (
    FetchTimeoutError,
    OperationCancelledError,
    SearchCancelledError,
    SearchTimeoutError,
)

# =============================================================================
# Web Search Metrics
# =============================================================================

web_search_attempts_total = Counter(
    "webtools_search_attempts_total",
    "Total number of search attempts per provider",
    ["provider", "status"],  # status: success, error, timeout, cancelled
)

web_search_attempt_duration_seconds = Histogram(
    "webtools_search_attempt_duration_seconds",
    "Time spent on a single provider search attempt",
    ["provider"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0],
)

web_search_fallbacks_total = Counter(
    "webtools_search_fallbacks_total",
    "Number of times a provider failure moved the search to the next provider",
    ["from_provider"],
)

web_search_sequence_failures_total = Counter(
    "webtools_search_sequence_failures_total",
    "Number of searches where every provider failed",
)

# =============================================================================
# Web Fetch Metrics
# =============================================================================

web_fetch_requests_total = Counter(
    "webtools_fetch_requests_total",
    "Total number of URL fetch requests",
    ["status"],
)

web_fetch_duration_seconds = Histogram(
    "webtools_fetch_duration_seconds",
    "Time spent fetching URLs",
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)

# =============================================================================
# Output Metrics
# =============================================================================

tool_output_truncations_total = Counter(
    "webtools_output_truncations_total",
    "Number of tool results truncated and persisted to an overflow file",
    ["tool"],
)


def _status_for(error: BaseException) -> str:
    if isinstance(error, SearchCancelledError):
        return "cancelled"
    if isinstance(error, (SearchTimeoutError, FetchTimeoutError, OperationCancelledError)):
        return "timeout"
    return "error"


# =============================================================================
# Context Managers
# =============================================================================


@asynccontextmanager
async def track_provider_search(provider: str):
    """Context manager to track a single provider search attempt.

    Args:
        provider: The search provider name.

    Yields:
        None.
    """
    start_time = time.time()
    status = "success"
    try:
        yield
    except Exception as e:
        status = _status_for(e)
        raise
    finally:
        duration = time.time() - start_time
        web_search_attempts_total.labels(provider=provider, status=status).inc()
        web_search_attempt_duration_seconds.labels(provider=provider).observe(duration)


@asynccontextmanager
async def track_web_fetch():
    """Context manager to track URL fetch metrics.

    Yields:
        None.
    """
    start_time = time.time()
    status = "success"
    try:
        yield
    except Exception as e:
        status = _status_for(e)
        raise
    finally:
        duration = time.time() - start_time
        web_fetch_requests_total.labels(status=status).inc()
        web_fetch_duration_seconds.observe(duration)


def track_fallback(from_provider: str) -> None:
    """Record that the search moved past a failed provider."""
    web_search_fallbacks_total.labels(from_provider=from_provider).inc()


def track_sequence_failure() -> None:
    """Record that every provider in a search failed."""
    web_search_sequence_failures_total.inc()


def track_truncation(tool: str) -> None:
    """Record a truncated tool result."""
    tool_output_truncations_total.labels(tool=tool).inc()
