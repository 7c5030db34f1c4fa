"""Web search tool with automatic provider fallback."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from webtools.cancellation import CancellationToken
from webtools.config import Settings, get_settings
from webtools.monitoring import LogContext, get_logger
from webtools.output import DEFAULT_MAX_BYTES, DEFAULT_MAX_LINES, bound_output
from webtools.protocols import SearchProviderProtocol
from webtools.tools.base import ToolResult, truncation_details
from webtools.web_search import FallbackSearch, SearchRequest, create_search_providers

TOOL_NAME = "websearch"


class WebSearchTool:
    """Search the web with Exa, falling back to Tavily on failure."""

    name = TOOL_NAME

    def __init__(
        self,
        settings: Settings | None = None,
        providers: Sequence[SearchProviderProtocol] | None = None,
    ) -> None:
        """Initialize the tool.

        Args:
            settings: Settings; defaults to the cached application settings.
            providers: Providers in fallback order; built from settings if omitted.
        """
        self.settings = settings or get_settings()
        search = self.settings.web_search
        self.search_engine = FallbackSearch(
            providers if providers is not None else create_search_providers(self.settings),
            timeout_ms=int(search.request_timeout * 1000),
        )
        self._logger = get_logger(__name__)

    @property
    def description(self) -> str:
        year = datetime.now().year
        names = self.search_engine.provider_names
        primary, fallbacks = names[0], names[1:]
        fallback_text = f" with automatic {', '.join(fallbacks)} fallback on failure" if fallbacks else ""
        return (
            f"Search the web using {primary}{fallback_text}. "
            f"The current year is {year}. You MUST use this year when searching for recent information. "
            f"Results are truncated at {DEFAULT_MAX_BYTES // 1024}KB or {DEFAULT_MAX_LINES} lines."
        )

    def normalize_params(self, params: dict[str, Any]) -> SearchRequest:
        """Turn raw ``{query, maxResults?}`` input into a SearchRequest.

        Raises:
            InvalidParamsError: If the query is empty or maxResults is out of range.
        """
        search = self.settings.web_search
        return SearchRequest.from_params(
            params.get("query"),
            params.get("maxResults"),
            default=search.default_max_results,
            minimum=search.min_max_results,
            maximum=search.max_max_results,
        )

    async def execute(
        self,
        params: dict[str, Any],
        token: CancellationToken | None = None,
    ) -> ToolResult:
        """Run the search and return bounded text.

        Args:
            params: Raw tool parameters.
            token: Optional caller cancellation token.

        Returns:
            ToolResult whose details echo the normalized request.

        Raises:
            InvalidParamsError: For malformed parameters.
            SearchCancelledError: If the caller cancelled.
            AllProvidersFailedError: If every provider failed.
            OutputPersistError: If truncated output could not be saved.
        """
        request = self.normalize_params(params)
        details: dict[str, Any] = {"query": request.query, "maxResults": request.max_results}

        with LogContext(tool=self.name, query=request.query):
            result = await self.search_engine.search(request, token)
            details["provider"] = result.provider

            bounded = await bound_output(self.name, result.content, self.settings.output.directory)
            details.update(truncation_details(bounded))
            self._logger.info(
                "websearch_completed",
                provider=result.provider,
                truncated=bounded.truncation.truncated,
            )

        return ToolResult.from_text(bounded.text, details)
