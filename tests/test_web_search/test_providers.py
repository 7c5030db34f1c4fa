"""Tests for the Exa and Tavily search providers."""

import json

import httpx
import pytest

from webtools.cancellation import CancellationToken
from webtools.exceptions import (
    ConfigurationError,
    SearchConnectionError,
    SearchEmptyResultError,
    SearchHTTPError,
    SearchParseError,
)
from webtools.web_search import (
    ExaSearchProvider,
    SearchRequest,
    TavilySearchOptions,
    TavilySearchProvider,
)
from webtools.web_search.mcp import build_tool_call


def _sse_transport(body: str, status_code: int = 200, captured: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        return httpx.Response(
            status_code,
            text=body,
            headers={"content-type": "text/event-stream"},
        )
    return httpx.MockTransport(handler)


class TestBuildToolCall:
    """Tests for the JSON-RPC envelope."""

    def test_drops_none_arguments(self):
        payload = build_tool_call("web_search_exa", {"query": "q", "contextMaxCharacters": None})

        assert payload == {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": "web_search_exa", "arguments": {"query": "q"}},
        }


class TestExaSearchProvider:
    """Tests for ExaSearchProvider."""

    @pytest.mark.asyncio
    async def test_search_success(self, sse_body):
        captured: list[httpx.Request] = []
        provider = ExaSearchProvider(transport=_sse_transport(sse_body("Title: Tokio"), captured=captured))

        result = await provider.search(SearchRequest("rust async", 8), CancellationToken())

        assert result.content == "Title: Tokio"
        assert result.provider == "Exa"

        request = captured[0]
        assert str(request.url) == "https://mcp.exa.ai/mcp"
        assert request.headers["accept"] == "application/json, text/event-stream"
        assert "authorization" not in request.headers
        body = json.loads(request.content)
        assert body["params"]["name"] == "web_search_exa"
        assert body["params"]["arguments"] == {
            "query": "rust async",
            "numResults": 8,
            "type": "auto",
            "livecrawl": "fallback",
        }

    @pytest.mark.asyncio
    async def test_http_error_includes_status_and_body(self):
        provider = ExaSearchProvider(transport=_sse_transport("rate limited", status_code=429))

        with pytest.raises(SearchHTTPError) as exc_info:
            await provider.search(SearchRequest("q"), CancellationToken())

        assert exc_info.value.status_code == 429
        assert "429" in str(exc_info.value)
        assert "rate limited" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_empty_stream_is_error(self):
        provider = ExaSearchProvider(transport=_sse_transport("event: ping\n\n"))

        with pytest.raises(SearchEmptyResultError, match="Exa search returned empty content"):
            await provider.search(SearchRequest("q"), CancellationToken())

    @pytest.mark.asyncio
    async def test_connection_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = ExaSearchProvider(transport=httpx.MockTransport(handler))

        with pytest.raises(SearchConnectionError, match="Request error"):
            await provider.search(SearchRequest("q"), CancellationToken())

    def test_optional_arguments(self):
        provider = ExaSearchProvider(search_type="deep", livecrawl="preferred", context_max_characters=5000)

        arguments = provider.build_arguments(SearchRequest("q", 5))

        assert arguments["type"] == "deep"
        assert arguments["livecrawl"] == "preferred"
        assert arguments["contextMaxCharacters"] == 5000


class TestTavilySearchProvider:
    """Tests for TavilySearchProvider."""

    @pytest.mark.asyncio
    async def test_missing_key_fails_before_request(self):
        captured: list[httpx.Request] = []
        provider = TavilySearchProvider(api_key="", transport=_sse_transport("", captured=captured))

        with pytest.raises(ConfigurationError, match="TAVILY_API_KEY environment variable is not set"):
            await provider.search(SearchRequest("q"), CancellationToken())

        assert captured == []

    @pytest.mark.asyncio
    async def test_search_formats_records(self, tavily_body):
        captured: list[httpx.Request] = []
        body = tavily_body([
            {"title": "Tokio", "url": "https://tokio.rs", "content": "An async runtime"},
            {"title": "smol", "url": "https://github.com/smol-rs/smol"},
        ])
        provider = TavilySearchProvider(api_key="tvly-abc", transport=_sse_transport(body, captured=captured))

        result = await provider.search(SearchRequest("rust async", 10), CancellationToken())

        assert result.provider == "Tavily"
        assert result.content == (
            "Title: Tokio\nUrl: https://tokio.rs\nContent: An async runtime"
            "\n\n"
            "Title: smol\nUrl: https://github.com/smol-rs/smol"
        )
        request = captured[0]
        assert str(request.url) == "https://mcp.tavily.com/mcp"
        assert request.headers["authorization"] == "Bearer tvly-abc"
        arguments = json.loads(request.content)["params"]["arguments"]
        assert arguments == {"query": "rust async", "max_results": 10}

    @pytest.mark.asyncio
    async def test_options_are_sent(self, tavily_body):
        captured: list[httpx.Request] = []
        provider = TavilySearchProvider(
            api_key="tvly-abc",
            transport=_sse_transport(tavily_body([]), captured=captured),
        )
        options = TavilySearchOptions(search_depth="advanced", time_range="week")

        records = await provider.search_records(SearchRequest("q", 3), CancellationToken(), options)

        assert records == []
        arguments = json.loads(captured[0].content)["params"]["arguments"]
        assert arguments["search_depth"] == "advanced"
        assert arguments["time_range"] == "week"
        assert "start_date" not in arguments

    @pytest.mark.asyncio
    async def test_zero_results_is_empty_error(self, tavily_body):
        provider = TavilySearchProvider(api_key="tvly-abc", transport=_sse_transport(tavily_body([])))

        with pytest.raises(SearchEmptyResultError, match="Tavily search returned empty content"):
            await provider.search(SearchRequest("q"), CancellationToken())

    @pytest.mark.asyncio
    async def test_unparseable_payload(self, sse_body):
        provider = TavilySearchProvider(api_key="tvly-abc", transport=_sse_transport(sse_body("<html>oops")))

        with pytest.raises(SearchParseError):
            await provider.search(SearchRequest("q"), CancellationToken())

    @pytest.mark.asyncio
    async def test_http_error(self):
        provider = TavilySearchProvider(api_key="bad", transport=_sse_transport("unauthorized", status_code=401))

        with pytest.raises(SearchHTTPError, match=r"Tavily search error \(401\): unauthorized"):
            await provider.search(SearchRequest("q"), CancellationToken())
