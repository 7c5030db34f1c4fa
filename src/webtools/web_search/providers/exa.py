"""Exa web search provider using MCP over HTTP with SSE."""

import logging
from typing import Any

import httpx

from webtools.cancellation import CancellationToken
from webtools.exceptions import SearchEmptyResultError
from webtools.web_search.base import REQUEST_TIMEOUT_MS, ProviderResult, SearchRequest
from webtools.web_search.mcp import build_tool_call, post_tool_call
from webtools.web_search.sse import decode_event_stream

logger = logging.getLogger(__name__)

EXA_MCP_URL = "https://mcp.exa.ai/mcp"
EXA_MCP_TOOL_NAME = "web_search_exa"


class ExaSearchProvider:
    """Exa search via the public MCP endpoint.

    Needs no credential. Exa answers with a single pre-formatted text blob,
    which is returned as-is.
    """

    DEFAULT_MCP_URL = EXA_MCP_URL

    def __init__(
        self,
        mcp_url: str | None = None,
        timeout: float = REQUEST_TIMEOUT_MS / 1000,
        search_type: str = "auto",
        livecrawl: str = "fallback",
        context_max_characters: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Exa provider.

        Args:
            mcp_url: Optional custom MCP endpoint URL.
            timeout: HTTP timeout in seconds.
            search_type: Exa search type (auto, fast, deep).
            livecrawl: Live crawl mode (fallback, preferred).
            context_max_characters: Optional cap on returned context text.
            transport: Optional HTTPX transport, used in tests.
        """
        self.mcp_url = mcp_url or self.DEFAULT_MCP_URL
        self.timeout = timeout
        self.search_type = search_type
        self.livecrawl = livecrawl
        self.context_max_characters = context_max_characters
        self._transport = transport

    @property
    def provider_name(self) -> str:
        """Return provider name."""
        return "Exa"

    def build_arguments(self, request: SearchRequest) -> dict[str, Any]:
        """Map a request onto Exa's tool arguments."""
        return {
            "query": request.query,
            "numResults": request.max_results,
            "type": self.search_type,
            "livecrawl": self.livecrawl,
            "contextMaxCharacters": self.context_max_characters,
        }

    async def search(self, request: SearchRequest, token: CancellationToken) -> ProviderResult:
        """Perform a web search using Exa.

        Raises:
            SearchEmptyResultError: If the response carries no text.
            SearchError: For transport and HTTP failures.
        """
        logger.info(f"Searching Exa for: {request.query}")
        payload = build_tool_call(EXA_MCP_TOOL_NAME, self.build_arguments(request))

        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            body = await post_tool_call(client, self.mcp_url, payload, token, self.provider_name)

        content = decode_event_stream(body)
        if not isinstance(content, str) or not content.strip():
            raise SearchEmptyResultError(self.provider_name)

        return ProviderResult(content=content, provider=self.provider_name)
