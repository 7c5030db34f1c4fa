"""Tavily web search provider using MCP over HTTP with SSE."""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from webtools.cancellation import CancellationToken
from webtools.exceptions import ConfigurationError, SearchEmptyResultError
from webtools.web_search.base import (
    REQUEST_TIMEOUT_MS,
    ProviderResult,
    SearchRecord,
    SearchRequest,
    format_records,
)
from webtools.web_search.mcp import build_tool_call, post_tool_call
from webtools.web_search.sse import decode_event_stream

logger = logging.getLogger(__name__)

TAVILY_MCP_URL = "https://mcp.tavily.com/mcp"
TAVILY_MCP_TOOL_NAME = "tavily_search"
TAVILY_API_KEY_ENV = "TAVILY_API_KEY"


@dataclass(frozen=True)
class TavilySearchOptions:
    """Optional Tavily-only search filters.

    Attributes:
        search_depth: ultra-fast, fast, basic or advanced.
        time_range: day, week, month or year.
        start_date: Lower date bound, YYYY-MM-DD.
        end_date: Upper date bound, YYYY-MM-DD.
    """

    search_depth: str | None = None
    time_range: str | None = None
    start_date: str | None = None
    end_date: str | None = None


def parse_results_payload(text: str) -> list[SearchRecord] | None:
    """Parse Tavily's JSON text into records.

    Returns None when the text is JSON without a ``results`` list.

    Raises:
        ValueError: If the text is not JSON.
    """
    data = json.loads(text)
    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        return None
    return [SearchRecord.from_dict(item) for item in data["results"] if isinstance(item, dict)]


class TavilySearchProvider:
    """Tavily search via the MCP endpoint.

    Requires a bearer API key, injected by the caller. Results arrive as a
    JSON document nested in the MCP text field and are flattened into
    ``Title:``/``Url:``/``Content:`` paragraphs.
    """

    DEFAULT_MCP_URL = TAVILY_MCP_URL

    def __init__(
        self,
        api_key: str,
        mcp_url: str | None = None,
        timeout: float = REQUEST_TIMEOUT_MS / 1000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Tavily provider.

        Args:
            api_key: Tavily API key; may be empty, checked on each search.
            mcp_url: Optional custom MCP endpoint URL.
            timeout: HTTP timeout in seconds.
            transport: Optional HTTPX transport, used in tests.
        """
        self.api_key = api_key
        self.mcp_url = mcp_url or self.DEFAULT_MCP_URL
        self.timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "Tavily"

    def validate_config(self) -> None:
        """Validate the provider configuration.

        Raises:
            ConfigurationError: If the API key is missing.
        """
        if not self.api_key:
            raise ConfigurationError(
                f"{TAVILY_API_KEY_ENV} environment variable is not set",
                config_key=TAVILY_API_KEY_ENV,
            )

    def build_arguments(
        self,
        request: SearchRequest,
        options: TavilySearchOptions | None = None,
    ) -> dict[str, Any]:
        """Map a request onto Tavily's tool arguments."""
        options = options or TavilySearchOptions()
        return {
            "query": request.query,
            "max_results": request.max_results,
            "search_depth": options.search_depth,
            "time_range": options.time_range,
            "start_date": options.start_date,
            "end_date": options.end_date,
        }

    async def search_records(
        self,
        request: SearchRequest,
        token: CancellationToken,
        options: TavilySearchOptions | None = None,
    ) -> list[SearchRecord] | None:
        """Fetch ranked records.

        Returns None when no data line carried a results payload; an empty
        list when Tavily answered with zero results.

        Raises:
            ConfigurationError: If the API key is missing (before any request).
            SearchParseError: If the only content line is not valid JSON.
            SearchError: For transport and HTTP failures.
        """
        self.validate_config()
        logger.info(f"Searching Tavily for: {request.query}")
        payload = build_tool_call(TAVILY_MCP_TOOL_NAME, self.build_arguments(request, options))

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            body = await post_tool_call(
                client,
                self.mcp_url,
                payload,
                token,
                self.provider_name,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )

        records = decode_event_stream(body, parse_results_payload)
        return records if isinstance(records, list) else None

    async def search(self, request: SearchRequest, token: CancellationToken) -> ProviderResult:
        """Perform a web search using Tavily.

        Raises:
            SearchEmptyResultError: If no records came back.
        """
        records = await self.search_records(request, token)
        if not records:
            raise SearchEmptyResultError(self.provider_name)
        return ProviderResult(content=format_records(records), provider=self.provider_name)
