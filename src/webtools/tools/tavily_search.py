"""Tavily-only web search tool.

Use when the primary search tool is unavailable. Exposes Tavily's extra
filters (search depth, time range, date bounds).
"""

import re
from datetime import date, datetime
from typing import Any

from webtools.cancellation import CancellationToken, combine_signals
from webtools.config import Settings, get_settings
from webtools.exceptions import (
    InvalidParamsError,
    OperationCancelledError,
    SearchCancelledError,
    SearchParseError,
    SearchTimeoutError,
)
from webtools.monitoring import LogContext, get_logger, track_provider_search
from webtools.output import DEFAULT_MAX_BYTES, DEFAULT_MAX_LINES, bound_output
from webtools.tools.base import ToolResult, truncation_details
from webtools.web_search import SearchRequest, TavilySearchOptions, TavilySearchProvider, format_records

TOOL_NAME = "websearch_fallback"

MAX_QUERY_LENGTH = 400
DEFAULT_MAX_RESULTS = 10
MIN_MAX_RESULTS = 1
MAX_MAX_RESULTS = 20

SEARCH_DEPTHS = ("ultra-fast", "fast", "basic", "advanced")
TIME_RANGES = ("day", "week", "month", "year")

NO_RESULTS_TEXT = "No search results found. Please try a different query."

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _parse_date(value: Any, field_name: str) -> date | None:
    if value is None:
        return None
    if not isinstance(value, str) or not _DATE_PATTERN.match(value):
        raise InvalidParamsError(f"{field_name} must be in YYYY-MM-DD format")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidParamsError(f"{field_name} is not a valid date: {value}") from e


def _check_choice(value: Any, choices: tuple[str, ...], field_name: str) -> str | None:
    if value is None:
        return None
    if value not in choices:
        raise InvalidParamsError(f"{field_name} must be one of: {', '.join(choices)}")
    return value


class TavilySearchTool:
    """Search the web with Tavily only."""

    name = TOOL_NAME

    def __init__(
        self,
        settings: Settings | None = None,
        provider: TavilySearchProvider | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.provider = provider or TavilySearchProvider(
            api_key=self.settings.tavily.api_key,
            mcp_url=self.settings.web_search.tavily_url,
            timeout=self.settings.web_search.request_timeout,
        )
        self.timeout_ms = int(self.settings.web_search.request_timeout * 1000)
        self._logger = get_logger(__name__)

    @property
    def description(self) -> str:
        year = datetime.now().year
        return (
            "Use this tool if the websearch tool is not working. Searches the web using Tavily. "
            f"The current year is {year}. You MUST use this year when searching for recent information. "
            f"Results are truncated at {DEFAULT_MAX_BYTES // 1024}KB or {DEFAULT_MAX_LINES} lines."
        )

    def normalize_params(self, params: dict[str, Any]) -> tuple[SearchRequest, TavilySearchOptions]:
        """Validate raw input into a request and Tavily options.

        Raises:
            InvalidParamsError: For an empty or overlong query, an out-of-range
                result count, an unknown depth/range, or an inverted date range.
        """
        query = params.get("query")
        if isinstance(query, str) and len(query) > MAX_QUERY_LENGTH:
            raise InvalidParamsError(f"Search query must be at most {MAX_QUERY_LENGTH} characters")

        request = SearchRequest.from_params(
            query,
            params.get("maxResults"),
            default=DEFAULT_MAX_RESULTS,
            minimum=MIN_MAX_RESULTS,
            maximum=MAX_MAX_RESULTS,
        )

        start = _parse_date(params.get("startDate"), "startDate")
        end = _parse_date(params.get("endDate"), "endDate")
        if start and end and start > end:
            raise InvalidParamsError(
                f"Invalid date range: start date ({params['startDate']}) "
                f"cannot be after end date ({params['endDate']})"
            )

        options = TavilySearchOptions(
            search_depth=_check_choice(params.get("searchDepth"), SEARCH_DEPTHS, "searchDepth"),
            time_range=_check_choice(params.get("timeRange"), TIME_RANGES, "timeRange"),
            start_date=params.get("startDate"),
            end_date=params.get("endDate"),
        )
        return request, options

    async def execute(
        self,
        params: dict[str, Any],
        token: CancellationToken | None = None,
    ) -> ToolResult:
        """Run a Tavily search.

        The credential is checked before the parameters, so a missing key is
        reported even for otherwise invalid calls.

        Raises:
            ConfigurationError: If TAVILY_API_KEY is not set.
            InvalidParamsError: For malformed parameters.
            SearchTimeoutError: If the attempt exceeded its time budget.
            SearchCancelledError: If the caller cancelled.
            SearchParseError: If the response held no decodable results.
            SearchError: For transport and HTTP failures.
        """
        self.provider.validate_config()
        request, options = self.normalize_params(params)
        details: dict[str, Any] = {
            "query": request.query,
            "maxResults": request.max_results,
            "searchDepth": options.search_depth,
            "timeRange": options.time_range,
            "startDate": options.start_date,
            "endDate": options.end_date,
        }

        with LogContext(tool=self.name, query=request.query):
            with combine_signals(token, self.timeout_ms) as scope:
                async with track_provider_search(self.provider.provider_name):
                    try:
                        records = await self.provider.search_records(request, scope.token, options)
                    except OperationCancelledError as e:
                        if token is not None and token.cancelled:
                            raise SearchCancelledError() from e
                        raise SearchTimeoutError(
                            provider=self.provider.provider_name,
                            timeout_seconds=self.timeout_ms / 1000,
                        ) from e

            if records is None:
                raise SearchParseError(
                    "No valid search results found in response",
                    provider=self.provider.provider_name,
                )
            if not records:
                self._logger.info("websearch_fallback_no_results")
                return ToolResult.from_text(NO_RESULTS_TEXT, details)

            bounded = await bound_output(
                self.name, format_records(records), self.settings.output.directory
            )
            details.update(truncation_details(bounded))
            self._logger.info(
                "websearch_fallback_completed",
                results=len(records),
                truncated=bounded.truncation.truncated,
            )

        return ToolResult.from_text(bounded.text, details)
